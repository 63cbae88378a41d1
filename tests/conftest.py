from __future__ import annotations

from typing import Callable, List, Optional, Tuple

import numpy as np
import pytest


class ConstantNoise:
    """Noise source returning the same value everywhere."""

    def __init__(self, value: float = 0.0):
        self.value = value
        self.calls: List[Tuple[float, float, float]] = []

    def sample(self, x: float, y: float, z: float) -> float:
        self.calls.append((x, y, z))
        return self.value


class RampNoise:
    """Smooth deterministic field: fractional part of a weighted coordinate sum."""

    def sample(self, x: float, y: float, z: float) -> float:
        return (0.37 * x + 0.11 * y + 5.0 * z) % 1.0


class RecordingRenderer:
    """In-memory renderer that records draw calls and lets tests drive events."""

    def __init__(self, size: Tuple[int, int] = (100, 100), pointer: Optional[Tuple[int, int]] = (-1000, -1000)):
        self.size = size
        self.pointer = pointer
        self.fades: List[Tuple[Tuple[float, float, float], float]] = []
        self.points: List[Tuple[float, float, float, float, float, float]] = []
        self._click_callbacks: List[Callable] = []
        self._resize_callbacks: List[Callable] = []

    def clear_or_fade(self, color, alpha):
        self.fades.append((tuple(color), alpha))

    def draw_point(self, x, y, hue, saturation, brightness, alpha):
        self.points.append((x, y, hue, saturation, brightness, alpha))

    def canvas_size(self):
        return self.size

    def pointer_position(self):
        return self.pointer

    def on_resize(self, callback):
        self._resize_callbacks.append(callback)

    def on_click(self, callback):
        self._click_callbacks.append(callback)

    def click(self, position):
        for callback in self._click_callbacks:
            callback(position)

    def resize(self, size):
        self.size = size
        for callback in self._resize_callbacks:
            callback(size)


@pytest.fixture
def renderer() -> RecordingRenderer:
    return RecordingRenderer()


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(1234)
