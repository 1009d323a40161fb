import numpy as np
import pytest

from stratflow.params import ModelParams
from stratflow.particles import ParticleState, initialize_particles


@pytest.mark.parametrize("layer", ["upper", "lower"])
def test_array_layout(layer, geometry, rng):
    state = initialize_particles(layer, 500, geometry, rng)
    assert state.count == 500
    assert state.positions.shape == (1500,)
    assert state.velocities.shape == (1500,)
    assert state.sizes.shape == (500,)


@pytest.mark.parametrize("layer", ["upper", "lower"])
def test_initial_values(layer, geometry, rng):
    state = initialize_particles(layer, 2000, geometry, rng)
    pos = state.position_vectors
    vel = state.velocity_vectors

    assert np.all(np.abs(pos[:, 0]) <= geometry.half_length)
    assert np.all(vel[:, 0] == 0.1)
    assert np.all(vel[:, 1:] == 0.0)
    assert np.all((state.sizes >= 0.05) & (state.sizes <= 0.10))
    assert np.all(np.abs(pos[:, 2]) <= geometry.radius)


def test_layers_occupy_their_half_with_overlap(geometry, rng):
    R = geometry.radius
    upper = initialize_particles("upper", 2000, geometry, rng).position_vectors
    lower = initialize_particles("lower", 2000, geometry, rng).position_vectors

    assert upper[:, 1].min() >= -0.3 * R
    assert upper[:, 1].max() <= R
    assert lower[:, 1].max() <= 0.3 * R
    assert lower[:, 1].min() >= -R
    assert upper[:, 1].mean() > 0 > lower[:, 1].mean()
    # Some particles cross the interface
    assert (upper[:, 1] < 0).any()
    assert (lower[:, 1] > 0).any()


def test_y_offset(geometry):
    a = initialize_particles("upper", 100, geometry, np.random.default_rng(5))
    b = initialize_particles("upper", 100, geometry, np.random.default_rng(5), y_offset=0.25)
    np.testing.assert_allclose(b.position_vectors[:, 1], a.position_vectors[:, 1] + 0.25)


def test_custom_params(geometry, rng):
    params = ModelParams(initial_axial_velocity=0.0, min_size=0.2, max_size=0.2)
    state = initialize_particles("lower", 50, geometry, rng, params=params)
    assert np.all(state.velocities == 0.0)
    np.testing.assert_allclose(state.sizes, 0.2)


def test_seeded_initialisation_is_reproducible(geometry):
    a = initialize_particles("upper", 300, geometry, np.random.default_rng(99))
    b = initialize_particles("upper", 300, geometry, np.random.default_rng(99))
    assert np.array_equal(a.positions, b.positions)
    assert np.array_equal(a.sizes, b.sizes)


def test_unknown_layer(geometry, rng):
    with pytest.raises(KeyError):
        initialize_particles("middle", 10, geometry, rng)


def test_vector_views_share_memory(geometry, rng):
    state = initialize_particles("upper", 10, geometry, rng)
    assert np.shares_memory(state.position_vectors, state.positions)
    state.position_vectors[3, 0] = 1.25
    assert state.positions[9] == 1.25


def test_positions_view_is_read_only(geometry, rng):
    state = initialize_particles("upper", 10, geometry, rng)
    view = state.positions_view()
    with pytest.raises(ValueError):
        view[0] = 3.0
    # The owner can still write
    state.positions[0] = 3.0
    assert view[0] == 3.0


def test_mismatched_arrays_rejected():
    with pytest.raises(ValueError):
        ParticleState(
            layer="upper",
            positions=np.zeros(9),
            velocities=np.zeros(6),
            sizes=np.zeros(3),
        )
