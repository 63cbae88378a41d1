"""
User-placed colour sources.

A click drops a :class:`ColorInjection` on the canvas: a random hue with a
circular area of influence.  Particles and trail points inside that circle
have their hue pulled toward the injected one, strongest at the centre.
Only the most recent few injections are kept; the oldest is dropped first
regardless of how visible it still is.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from typing import Deque, Iterable, Iterator, Optional, Tuple

import numpy as np
from numpy import ndarray

logger = logging.getLogger(__name__)


def wrap_hue(hue):
    """Normalize hue(s) into ``[0, 360)``.

    ``%`` alone can round a tiny negative value up to exactly 360.0.
    """
    wrapped = np.mod(hue, 360.0)
    return np.where(wrapped >= 360.0, 0.0, wrapped)


@dataclass(frozen=True)
class ColorInjection:
    position: Tuple[float, float]
    hue: float
    radius: float

    def influence_at(self, points: ndarray) -> ndarray:
        """Linear falloff for each ``(x, y)`` row: 1 at the centre, 0 at (and beyond) the radius."""
        points = np.asarray(points, dtype=float)
        d = np.hypot(points[..., 0] - self.position[0], points[..., 1] - self.position[1])
        return np.where(d < self.radius, 1.0 - d / self.radius, 0.0)


def blend_hue(
    hues: ndarray,
    points: ndarray,
    injections: Iterable[ColorInjection],
    strength: float,
) -> ndarray:
    """Pull each hue toward every injection covering its point.

    ``hues`` has the shape of ``points`` minus the trailing ``(x, y)`` axis
    (or broadcasts to it).  Injections are applied one after another in
    registry order, each on top of the already blended value, so later
    injections dominate where they overlap.  Interpolation is linear on the
    raw hue value (no shortest-arc wrap).
    """
    points = np.asarray(points, dtype=float)
    hues = np.broadcast_to(np.asarray(hues, dtype=float), points.shape[:-1]).copy()
    for inj in injections:
        amount = inj.influence_at(points) * strength
        hues += (inj.hue - hues) * amount
    return wrap_hue(hues)


class ColorInjectionRegistry:
    """Bounded FIFO of colour injections.

    Parameters
    ----------
    max_injections: int
        Capacity; injecting beyond it evicts the oldest entry.
    radius: float
        Radius given to every new injection.
    rng: numpy.random.Generator, optional
        Source of the random hues.
    """

    def __init__(
        self,
        max_injections: int = 5,
        radius: float = 100.0,
        rng: Optional[np.random.Generator] = None,
    ):
        if max_injections < 1:
            raise ValueError("max_injections must be at least 1")
        self.max_injections = int(max_injections)
        self.radius = float(radius)
        self._rng = rng if rng is not None else np.random.default_rng()
        self._entries: Deque[ColorInjection] = deque(maxlen=self.max_injections)

    def inject(self, position: Tuple[float, float], hue: Optional[float] = None) -> ColorInjection:
        if hue is None:
            hue = self._rng.uniform(0.0, 360.0)
        x, y = float(position[0]), float(position[1])
        entry = ColorInjection(position=(x, y), hue=float(wrap_hue(hue)), radius=self.radius)
        self._entries.append(entry)
        logger.debug("injected hue %.1f at (%.0f, %.0f)", entry.hue, x, y)
        return entry

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[ColorInjection]:
        return iter(self._entries)
