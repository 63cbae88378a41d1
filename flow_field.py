"""
Grid of direction vectors steering the particles.

The canvas is split into ``resolution``-pixel cells.  Every frame each cell
gets a unit vector whose angle comes from 3D coherent noise (the third axis
being time), so the field drifts smoothly.  Cells near the pointer are bent
away from it and sped up, which reads on screen as the pointer pushing the
flow aside.

Vectors live in one ``(cols * rows, 2)`` array indexed by ``col + row * cols``
and are overwritten in place on every :meth:`FlowField.rebuild`.
"""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING, Optional, Tuple

import numpy as np
from numpy import ndarray

from vectors import EPS, from_angles, set_magnitude

if TYPE_CHECKING:
    from noise_source import NoiseSource

logger = logging.getLogger(__name__)

TWO_PI: float = 2.0 * math.pi


class FlowField:
    """Noise-driven vector grid with pointer repulsion.

    Parameters
    ----------
    width, height: int
        Canvas size in pixels.
    resolution: int
        Cell size in pixels.  Partial cells on the right and bottom edges
        are not part of the grid.
    noise_scale: float
        Noise-space distance between neighbouring cells.
    turns: float
        Number of full turns the noise range ``[0, 1)`` is stretched over.
    interaction_radius: float
        Pointer distance (pixels) below which cells are perturbed.
    repulsion: float
        Weight of the away-from-pointer component at zero distance.
    boosted_magnitude: float
        Magnitude of perturbed vectors (unperturbed ones are unit length).
    """

    def __init__(
        self,
        width: int,
        height: int,
        resolution: int = 20,
        noise_scale: float = 0.1,
        turns: float = 4.0,
        interaction_radius: float = 150.0,
        repulsion: float = 0.8,
        boosted_magnitude: float = 1.5,
    ):
        if resolution <= 0:
            raise ValueError("resolution must be positive")
        self.resolution = int(resolution)
        self.noise_scale = float(noise_scale)
        self.turns = float(turns)
        self.interaction_radius = float(interaction_radius)
        self.repulsion = float(repulsion)
        self.boosted_magnitude = float(boosted_magnitude)
        self.cols = 0
        self.rows = 0
        self.vectors: ndarray = np.zeros((0, 2), dtype=float)
        self._col_idx: ndarray = np.zeros((0,), dtype=int)
        self._row_idx: ndarray = np.zeros((0,), dtype=int)
        self.resize(width, height)

    def __len__(self) -> int:
        return self.vectors.shape[0]

    @property
    def shape(self) -> Tuple[int, int]:
        return self.cols, self.rows

    def resize(self, width: int, height: int) -> None:
        """Reallocate the grid for a new canvas size, discarding old vectors."""
        self.cols = max(0, int(width) // self.resolution)
        self.rows = max(0, int(height) // self.resolution)
        count = self.cols * self.rows
        self.vectors = np.zeros((count, 2), dtype=float)
        # Row-major flattening gives index = col + row * cols.
        rows_grid, cols_grid = np.indices((self.rows, self.cols))
        self._col_idx = cols_grid.ravel()
        self._row_idx = rows_grid.ravel()
        logger.debug("flow field resized to %dx%d cells", self.cols, self.rows)

    def index_of(self, x: float, y: float) -> Optional[int]:
        """Flat index of the cell containing ``(x, y)`` or ``None`` outside the grid."""
        col = math.floor(x / self.resolution)
        row = math.floor(y / self.resolution)
        if col < 0 or row < 0 or col >= self.cols or row >= self.rows:
            return None
        index = col + row * self.cols
        if index >= len(self):
            return None
        return index

    def lookup(self, x: float, y: float) -> Optional[ndarray]:
        index = self.index_of(x, y)
        if index is None:
            return None
        return self.vectors[index].copy()

    def forces_at(self, positions: ndarray) -> ndarray:
        """Cell vector under each row of ``positions``; zero outside the grid.

        Stale positions (e.g. right after a resize shrank the canvas) simply
        get no force.
        """
        positions = np.asarray(positions, dtype=float)
        forces = np.zeros_like(positions)
        if len(self) == 0 or positions.shape[0] == 0:
            return forces
        cells = np.floor(positions / self.resolution).astype(int)
        col, row = cells[:, 0], cells[:, 1]
        inside = (col >= 0) & (row >= 0) & (col < self.cols) & (row < self.rows)
        forces[inside] = self.vectors[col[inside] + row[inside] * self.cols]
        return forces

    def rebuild(
        self,
        noise: 'NoiseSource',
        time: float,
        pointer: Optional[Tuple[float, float]],
    ) -> None:
        """Recompute every cell for noise time ``time`` and the pointer position.

        ``pointer`` may be ``None`` when no pointer is available, in which
        case the plain noise field is produced.
        """
        count = len(self)
        if count == 0:
            return

        scale = self.noise_scale
        samples = np.fromiter(
            (noise.sample(c * scale, r * scale, time) for c, r in zip(self._col_idx, self._row_idx)),
            dtype=float,
            count=count,
        )
        angles = samples * TWO_PI * self.turns
        field = from_angles(angles)

        if pointer is not None:
            px, py = float(pointer[0]), float(pointer[1])
            dx = px - self._col_idx * float(self.resolution)
            dy = py - self._row_idx * float(self.resolution)
            dist = np.hypot(dx, dy)
            near = dist < self.interaction_radius
            if np.any(near):
                d = dist[near]
                # A pointer exactly on a cell has no direction; leave that
                # component at zero.
                safe_d = np.where(d > EPS, d, 1.0)
                toward = np.column_stack((dx[near], dy[near])) / safe_d[:, None]
                toward[d <= EPS] = 0.0
                influence = 1.0 - d / self.interaction_radius
                bent = field[near] - toward * (influence * self.repulsion)[:, None]
                field[near] = set_magnitude(bent, self.boosted_magnitude)

        self.vectors[:] = field
