"""
Row-wise 2D vector helpers.

Vectors are numpy arrays whose last axis holds ``(x, y)``: a single vector
has shape ``(2,)``, a batch ``(N, 2)``.  Plain numpy covers add, subtract
and scale; the helpers below add the length operations, all of which leave
zero-length rows at zero instead of producing NaN.
"""

from __future__ import annotations

import numpy as np
from numpy import ndarray

# Norms below this are treated as zero.
EPS: float = 1e-12


def magnitude(vectors: ndarray) -> ndarray:
    return np.linalg.norm(vectors, axis=-1)


def set_magnitude(vectors: ndarray, length: float) -> ndarray:
    """Rescale each row of ``vectors`` to ``length``; zero rows stay zero."""
    vectors = np.asarray(vectors, dtype=float)
    norms = magnitude(vectors)
    scale = np.zeros_like(norms)
    nonzero = norms > EPS
    scale[nonzero] = length / norms[nonzero]
    return vectors * scale[..., None]


def normalize(vectors: ndarray) -> ndarray:
    return set_magnitude(vectors, 1.0)


def limit_magnitude(vectors: ndarray, max_length: float) -> ndarray:
    """Clamp each row to at most ``max_length``, keeping its direction."""
    vectors = np.asarray(vectors, dtype=float)
    norms = magnitude(vectors)
    scale = np.ones_like(norms)
    over = norms > max_length
    scale[over] = max_length / norms[over]
    return vectors * scale[..., None]


def from_angles(angles: ndarray, length: float = 1.0) -> ndarray:
    angles = np.asarray(angles, dtype=float)
    return np.stack((np.cos(angles), np.sin(angles)), axis=-1) * length
