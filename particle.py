"""
The particle swarm steered by the flow field.

Particle state is held in numpy arrays: row ``i`` of ``pos``,
``vel`` and ``acc`` is particle ``i``.  Every operation acts on the whole
swarm at once but keeps per-particle semantics; particles never interact,
so updating them together is the same as updating them one by one.

Trails live in a ring buffer of shape ``(N, max_history, 2)``.  All
particles are updated in lockstep, so one write head and one fill count
serve the whole swarm.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Sequence

import numpy as np
from numpy import ndarray

from color_injection import ColorInjection, blend_hue
from flow_field import FlowField
from vectors import limit_magnitude

if TYPE_CHECKING:
    from renderer import Renderer

# Alpha of the newest trail point; older points fade linearly to zero.
TRAIL_MAX_ALPHA: float = 0.5


class ParticleSwarm:
    """Point masses with bounded trails of their recent positions.

    Forces only last one frame: :meth:`update` integrates the accumulated
    acceleration and then clears it.

    Parameters
    ----------
    positions: array_like
        Starting ``(x, y)`` of every particle, shape ``(N, 2)``.
    max_speed: float
        Speed cap applied after every velocity update.
    max_history: int
        Trail capacity; the oldest point is dropped first.
    """

    def __init__(self, positions: ndarray, max_speed: float = 2.0, max_history: int = 20):
        if max_history < 1:
            raise ValueError("max_history must be at least 1")
        self.pos: ndarray = np.array(positions, dtype=float).reshape(-1, 2)
        count = self.pos.shape[0]
        self.vel: ndarray = np.zeros((count, 2), dtype=float)
        self.acc: ndarray = np.zeros((count, 2), dtype=float)
        self.max_speed = float(max_speed)
        self.max_history = int(max_history)
        self._history: ndarray = np.zeros((count, self.max_history, 2), dtype=float)
        self._head = 0
        self._filled = 0

    def __len__(self) -> int:
        return self.pos.shape[0]

    @property
    def history_length(self) -> int:
        return self._filled

    def trails(self) -> ndarray:
        """Trail points oldest first, shape ``(N, history_length, 2)``."""
        order = (self._head - self._filled + np.arange(self._filled)) % self.max_history
        return self._history[:, order]

    # ------------------------------------------------------------------ Motion
    def follow(self, field: FlowField) -> None:
        self.acc += field.forces_at(self.pos)

    def apply_force(self, force: ndarray) -> None:
        """Add ``force`` (one ``(2,)`` vector or one row per particle)."""
        self.acc += force

    def update(self) -> None:
        self.vel = limit_magnitude(self.vel + self.acc, self.max_speed)
        self.pos += self.vel
        self.acc[:] = 0.0
        self._history[:, self._head] = self.pos
        self._head = (self._head + 1) % self.max_history
        self._filled = min(self._filled + 1, self.max_history)

    def edges(self, width: float, height: float) -> None:
        """Wrap around the canvas: leaving one side re-enters on the opposite one."""
        for axis, limit in ((0, float(width)), (1, float(height))):
            coord = self.pos[:, axis]
            below = coord < 0.0
            above = coord > limit
            coord[below] = limit
            coord[above] = 0.0

    # ------------------------------------------------------------------ Colour
    def compute_display_hues(
        self,
        base_hues: ndarray,
        injections: Sequence[ColorInjection],
        strength: float = 0.7,
    ) -> ndarray:
        return blend_hue(base_hues, self.pos, injections, strength)

    def display(
        self,
        renderer: 'Renderer',
        hues: ndarray,
        injections: Sequence[ColorInjection],
        saturation: float = 80.0,
        brightness: float = 90.0,
        trail_strength: float = 0.5,
    ) -> None:
        """Draw every trail, particle by particle, oldest point first."""
        trails = self.trails()
        length = trails.shape[1]
        if length == 0 or len(self) == 0:
            return
        if length > 1:
            alphas = TRAIL_MAX_ALPHA * np.arange(length) / (length - 1)
        else:
            alphas = np.full(1, TRAIL_MAX_ALPHA)
        point_hues = blend_hue(np.asarray(hues, dtype=float)[:, None], trails, injections, trail_strength)

        alpha_list = alphas.tolist()
        for xs, ys, hs in zip(trails[..., 0].tolist(), trails[..., 1].tolist(), point_hues.tolist()):
            for x, y, hue, alpha in zip(xs, ys, hs, alpha_list):
                renderer.draw_point(x, y, hue, saturation, brightness, alpha)
