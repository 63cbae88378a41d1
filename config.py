"""
Tunable parameters and their optional JSON overrides.

Every constant of the animation lives in :class:`SimulationSettings`.  A
``config.json`` next to this module (or in the working directory) may
override any subset of them; a missing or broken file just leaves the
defaults in place.
"""

from __future__ import annotations

import dataclasses
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

logger = logging.getLogger(__name__)

CONFIG_FILENAME = 'config.json'


@dataclass
class SimulationSettings:
    """All parameters of the flow-field animation.

    Attributes
    ----------
    particle_count: int
        Number of particles, fixed for the whole run.
    resolution: int
        Flow-field cell size in pixels.
    noise_scale: float
        Noise-space step between neighbouring cells.
    noise_turns: float
        Full turns spanned by the noise range (4 gives angles in ``[0, 8π)``).
    time_step: float
        Noise time advanced per frame.
    interaction_radius, repulsion, boosted_magnitude: float
        Pointer perturbation of the field.
    max_speed: float
        Speed cap of every particle.
    max_history: int
        Trail length in frames.
    base_hue: float
        Starting hue of the palette.
    hue_per_particle: float
        Hue offset added per particle index.
    hue_jitter: float
        Half-width of the random hue step taken when the pointer moves.
    saturation, brightness: float
        Stroke colour, ``[0, 100]``.
    particle_blend, trail_blend: float
        Weight of colour injections on the particle and trail hues.
    max_injections: int
        Number of colour injections kept.
    injection_radius: float
        Radius of a colour injection in pixels.
    background: tuple
        HSB background colour.
    fade_alpha: float
        Opacity of the per-frame background overlay.
    """

    particle_count: int = 1000
    resolution: int = 20
    noise_scale: float = 0.1
    noise_turns: float = 4.0
    time_step: float = 0.0003
    interaction_radius: float = 150.0
    repulsion: float = 0.8
    boosted_magnitude: float = 1.5
    max_speed: float = 2.0
    max_history: int = 20
    base_hue: float = 200.0
    hue_per_particle: float = 0.1
    hue_jitter: float = 5.0
    saturation: float = 80.0
    brightness: float = 90.0
    particle_blend: float = 0.7
    trail_blend: float = 0.5
    max_injections: int = 5
    injection_radius: float = 100.0
    background: Tuple[float, float, float] = (0.0, 0.0, 10.0)
    fade_alpha: float = 0.05

    def __post_init__(self) -> None:
        self.background = tuple(float(c) for c in self.background)
        self.validate()

    def validate(self) -> None:
        """Raise ``ValueError`` naming the first out-of-range field."""
        positive = (
            'resolution', 'interaction_radius', 'boosted_magnitude', 'max_speed',
            'max_history', 'max_injections', 'injection_radius',
        )
        for name in positive:
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive, got {getattr(self, name)!r}")
        if self.particle_count < 0:
            raise ValueError(f"particle_count must not be negative, got {self.particle_count!r}")
        if self.hue_jitter < 0:
            raise ValueError(f"hue_jitter must not be negative, got {self.hue_jitter!r}")
        for name in ('fade_alpha', 'particle_blend', 'trail_blend'):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{name} must lie in [0, 1], got {value!r}")
        if len(self.background) != 3:
            raise ValueError("background must be an (h, s, b) triple")


_FIELD_NAMES = frozenset(f.name for f in dataclasses.fields(SimulationSettings))


class ConfigLoader:
    """Read setting overrides from a JSON object.

    ``loader['key']`` returns the effective value (file override or
    default).  Lookup order for the file: explicit ``path``, then
    ``config.json`` beside this module, then in the working directory.
    """

    def __init__(self, path: Optional[Union[str, Path]] = None):
        self.path: Optional[Path] = self._resolve_path(path)
        self._data: Dict[str, Any] = self._load(self.path) if self.path else {}

    @staticmethod
    def _resolve_path(path: Optional[Union[str, Path]]) -> Optional[Path]:
        if path is not None:
            return Path(path)
        for candidate in (Path(__file__).resolve().parent / CONFIG_FILENAME, Path.cwd() / CONFIG_FILENAME):
            if candidate.exists():
                return candidate
        return None

    @staticmethod
    def _load(path: Path) -> Dict[str, Any]:
        try:
            with path.open('r', encoding='utf-8') as fh:
                data = json.load(fh)
        except (OSError, ValueError) as exc:
            logger.warning("ignoring config %s: %s", path, exc)
            return {}
        if not isinstance(data, dict):
            logger.warning("ignoring config %s: top level is not an object", path)
            return {}
        unknown = sorted(set(data) - _FIELD_NAMES)
        if unknown:
            logger.warning("unknown config keys in %s: %s", path, ", ".join(unknown))
        logger.info("loaded config from %s", path)
        return {key: value for key, value in data.items() if key in _FIELD_NAMES}

    def __getitem__(self, key: str) -> Any:
        if key in self._data:
            return self._data[key]
        if key not in _FIELD_NAMES:
            raise KeyError(key)
        return getattr(SimulationSettings, key)

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def settings(self, **overrides: Any) -> SimulationSettings:
        """Build settings from defaults, file values and ``overrides`` (in that order).

        ``None`` overrides are skipped so unset command line options fall
        through to the file.
        """
        values = dict(self._data)
        values.update({key: value for key, value in overrides.items() if value is not None})
        return SimulationSettings(**values)
