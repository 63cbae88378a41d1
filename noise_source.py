"""Coherent noise sampling for the flow field."""

from __future__ import annotations

from typing import Protocol

from noise import pnoise3


class NoiseSource(Protocol):
    def sample(self, x: float, y: float, z: float) -> float:
        """Return a smooth, deterministic value in ``[0, 1)``."""
        ...


class PerlinNoiseSource:
    """Fractal Perlin noise backed by :func:`noise.pnoise3`.

    ``pnoise3`` returns signed values centred on zero; they are shifted into
    ``[0, 1)`` so the flow field can map them straight onto an angle.

    Parameters
    ----------
    seed: int
        Selects the permutation ``base`` of the noise, so different seeds
        give different (but individually reproducible) fields.
    octaves, persistence: int, float
        Fractal layering passed through to ``pnoise3``.
    """

    # Largest value strictly below 1.0 so the mapped angle never reaches 8π.
    _UPPER = 1.0 - 1e-9

    def __init__(self, seed: int = 0, octaves: int = 4, persistence: float = 0.5):
        if octaves < 1:
            raise ValueError("octaves must be at least 1")
        self.seed = int(seed)
        self.octaves = int(octaves)
        self.persistence = float(persistence)

    def sample(self, x: float, y: float, z: float) -> float:
        raw = pnoise3(
            x, y, z,
            octaves=self.octaves,
            persistence=self.persistence,
            base=self.seed % 256,
        )
        value = (raw + 1.0) * 0.5
        return min(max(value, 0.0), self._UPPER)
