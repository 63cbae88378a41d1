import math

import numpy as np
import pytest

from flow_field import FlowField
from tests.conftest import ConstantNoise, RampNoise


def test_grid_dimensions_for_100x100_canvas():
    field = FlowField(100, 100, resolution=20)
    assert field.shape == (5, 5)
    assert len(field) == 25


def test_partial_cells_are_dropped():
    field = FlowField(130, 45, resolution=20)
    assert field.shape == (6, 2)
    assert len(field) == 12


def test_rebuild_samples_every_cell_at_noise_coordinates():
    noise = ConstantNoise(0.0)
    field = FlowField(60, 40, resolution=20)
    field.rebuild(noise, 0.5, None)
    assert len(noise.calls) == 6
    # Cells are sampled in flat-index order: col + row * cols.
    assert noise.calls[0] == (0.0, 0.0, 0.5)
    assert noise.calls[1] == (pytest.approx(0.1), 0.0, 0.5)
    assert noise.calls[3] == (0.0, pytest.approx(0.1), 0.5)


def test_noise_value_maps_to_four_turns():
    # 0.25 of the noise range is one full turn when stretched over 8π.
    field = FlowField(40, 40, resolution=20)
    field.rebuild(ConstantNoise(0.25), 0.0, None)
    np.testing.assert_allclose(field.vectors, [[1.0, 0.0]] * 4, atol=1e-9)

    field.rebuild(ConstantNoise(1.0 / 32.0), 0.0, None)
    angle = 2 * math.pi * 4 / 32.0
    np.testing.assert_allclose(field.vectors[0], [math.cos(angle), math.sin(angle)], atol=1e-9)


def test_far_pointer_gives_unit_vectors():
    field = FlowField(200, 200, resolution=20)
    field.rebuild(RampNoise(), 0.1, (2000.0, 2000.0))
    np.testing.assert_allclose(np.linalg.norm(field.vectors, axis=1), 1.0)


def test_cells_near_pointer_are_boosted_to_1_5():
    field = FlowField(400, 400, resolution=20)
    pointer = (200.0, 200.0)
    field.rebuild(RampNoise(), 0.3, pointer)

    norms = np.linalg.norm(field.vectors, axis=1)
    for index in range(len(field)):
        col, row = index % field.cols, index // field.cols
        d = math.hypot(col * 20 - pointer[0], row * 20 - pointer[1])
        expected = 1.5 if d < 150 else 1.0
        assert norms[index] == pytest.approx(expected)


def test_pointer_on_cell_keeps_direction():
    field = FlowField(100, 100, resolution=20)
    field.rebuild(ConstantNoise(0.0), 0.0, (40.0, 40.0))
    index = field.index_of(40.0, 40.0)
    np.testing.assert_allclose(field.vectors[index], [1.5, 0.0], atol=1e-9)


def test_pointer_pushes_flow_away():
    # Base flow points +x; a pointer to the right of the cell bends it back.
    field = FlowField(200, 100, resolution=20)
    field.rebuild(ConstantNoise(0.0), 0.0, (140.0, 0.0))
    vx, vy = field.vectors[field.index_of(100.0, 0.0)]
    assert vx == pytest.approx(1.5)
    assert vy == pytest.approx(0.0, abs=1e-9)
    # A pointer below the cell tilts its vector upward.
    field.rebuild(ConstantNoise(0.0), 0.0, (100.0, 60.0))
    vx, vy = field.vectors[field.index_of(100.0, 0.0)]
    assert vy < 0


def test_lookup_outside_grid_returns_none():
    field = FlowField(100, 100, resolution=20)
    assert field.lookup(-1.0, 10.0) is None
    assert field.lookup(10.0, 100.0) is None
    assert field.lookup(100.0, 10.0) is None
    assert field.lookup(99.9, 99.9) is not None


def test_forces_at_matches_lookup_and_zeroes_outside():
    field = FlowField(100, 100, resolution=20)
    field.rebuild(RampNoise(), 0.2, (50.0, 50.0))
    positions = np.array([[10.0, 10.0], [99.9, 45.0], [-1.0, 10.0], [10.0, 100.0]])
    forces = field.forces_at(positions)
    np.testing.assert_allclose(forces[0], field.lookup(10.0, 10.0))
    np.testing.assert_allclose(forces[1], field.lookup(99.9, 45.0))
    assert not forces[2:].any()

    field.resize(40, 40)
    field.rebuild(RampNoise(), 0.2, None)
    assert not field.forces_at(np.array([[60.0, 10.0]])).any()


def test_resize_reallocates():
    field = FlowField(100, 100, resolution=20)
    field.rebuild(ConstantNoise(0.1), 0.0, None)
    field.resize(60, 40)
    assert field.shape == (3, 2)
    assert len(field) == 6
    assert not field.vectors.any()
    field.rebuild(ConstantNoise(0.1), 0.0, None)
    np.testing.assert_allclose(np.linalg.norm(field.vectors, axis=1), 1.0)


def test_tiny_canvas_has_empty_grid():
    field = FlowField(10, 10, resolution=20)
    assert len(field) == 0
    field.rebuild(ConstantNoise(0.3), 0.0, (5.0, 5.0))
    assert field.lookup(5.0, 5.0) is None


def test_invalid_resolution():
    with pytest.raises(ValueError):
        FlowField(100, 100, resolution=0)
