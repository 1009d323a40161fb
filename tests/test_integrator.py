import numpy as np
import pytest

from stratflow.integrator import ParticleIntegrator
from stratflow.params import FluidParameters
from stratflow.particles import initialize_particles


@pytest.fixture
def integrator(geometry):
    return ParticleIntegrator(geometry, rng=np.random.default_rng(0))


def test_relaxes_toward_parabolic_target(integrator, fluid, make_state):
    state = make_state("upper", [(0.0, 0.0, 0.0)])
    dt = 0.01
    integrator.step(state, fluid, dt, 0.0)

    # target = 1 on the axis; relaxation then the small forcing term
    expected_vx = (1.0 - 0.0) * 5.0 * dt
    expected_vx += 1.0 * dt * 0.1
    assert state.velocities[0] == pytest.approx(expected_vx)
    assert state.positions[0] == pytest.approx(expected_vx * dt)


def test_uses_stratified_target_with_interface_velocity(integrator, fluid, make_state):
    state = make_state("upper", [(0.0, 0.0, 0.0)])
    dt = 0.01
    integrator.step(state, fluid, dt, 0.0, interface_velocity=0.5)
    assert state.velocities[0] == pytest.approx(0.5 * 5.0 * dt + 0.5 * dt * 0.1)


def test_wall_layer_damps_target_and_velocity(integrator, fluid, make_state):
    r = 0.97
    state = make_state("lower", [(0.0, -r, 0.0)], [(1.0, 0.0, 0.0)])
    dt = 0.01
    integrator.step(state, fluid, dt, 0.0)

    factor = (1.0 - r) / 0.05
    target = (1.0 - r * r) * factor
    vx = 1.0 * factor
    vx += (target - vx) * 5.0 * dt          # no forcing inside the wall layer
    assert state.velocities[0] == pytest.approx(vx)


def test_wall_contact_stops_particle(integrator, fluid, make_state):
    state = make_state("upper", [(0.0, 0.9, 0.0)], [(0.3, 5.0, 1.0)])
    integrator.step(state, fluid, 0.1, 0.0)

    pos = state.position_vectors[0]
    assert np.hypot(pos[1], pos[2]) == pytest.approx(0.98)
    assert state.velocities.tolist() == [0.0, 0.0, 0.0]


def test_particle_inside_pipe_keeps_lateral_velocity(integrator, fluid, make_state):
    state = make_state("upper", [(0.0, 0.1, 0.0)], [(0.0, 1.0, 0.0)])
    dt = 0.1
    integrator.step(state, fluid, dt, 0.0)
    assert state.velocities[1] == pytest.approx(1.0 * (1 - 0.5 * dt))
    assert state.positions[1] == pytest.approx(0.1 + 1.0 * dt)


@pytest.mark.parametrize("x, vx, wrapped", [(4.99, 10.0, -5.0), (-4.99, -10.0, 5.0)])
def test_periodic_wrap_both_directions(integrator, make_state, x, vx, wrapped):
    still = FluidParameters(flow_rate=0.0, viscosity=1.0)
    state = make_state("upper", [(x, 0.0, 0.0)], [(vx, 0.0, 0.0)])
    integrator.step(state, still, 0.01, 0.0)
    assert state.positions[0] == wrapped


def test_no_jitter_at_or_below_unit_flow(integrator, make_state):
    fluid = FluidParameters(flow_rate=1.0, viscosity=1.0)
    state = make_state("upper", [(0.0, 0.4, 0.2), (1.0, 0.1, -0.3)])
    integrator.step(state, fluid, 0.02, 0.0)
    np.testing.assert_array_equal(state.position_vectors[:, 1:], [[0.4, 0.2], [0.1, -0.3]])


def test_turbulent_jitter_is_soft_contained(integrator, make_state):
    fast = FluidParameters(flow_rate=3.0, viscosity=1.0)
    angles = np.linspace(0, 2 * np.pi, 50, endpoint=False)
    points = [(0.0, 0.95 * np.sin(a), 0.95 * np.cos(a)) for a in angles]
    state = make_state("upper", points)
    integrator.step(state, fast, 0.01, 0.0)
    assert state.radial_distance().max() <= 0.9 + 1e-12


def test_turbulent_jitter_moves_particles(integrator, make_state):
    fast = FluidParameters(flow_rate=2.0, viscosity=1.0)
    state = make_state("upper", [(0.0, 0.1, 0.1)] * 20)
    integrator.step(state, fast, 0.01, 0.0)
    ys = state.position_vectors[:, 1]
    assert np.ptp(ys) > 0
    assert np.all(np.abs(ys - 0.1) <= 0.005 + 1e-12)


@pytest.mark.parametrize("flow", [0.5, 1.0, 2.5, -1.5])
def test_containment_over_many_steps(geometry, flow):
    rng = np.random.default_rng(42)
    integrator = ParticleIntegrator(geometry, rng=rng)
    fluid = FluidParameters(flow_rate=flow, viscosity=0.5)
    state = initialize_particles("lower", 400, geometry, rng)
    for i in range(200):
        integrator.step(state, fluid, 1 / 60, i / 60, interface_velocity=0.3)
        assert state.radial_distance().max() <= geometry.radius
        assert np.abs(state.position_vectors[:, 0]).max() <= geometry.half_length


def test_sizes_untouched(geometry, rng):
    integrator = ParticleIntegrator(geometry, rng=rng)
    state = initialize_particles("upper", 100, geometry, rng)
    sizes = state.sizes.copy()
    for _ in range(20):
        integrator.step(state, FluidParameters(flow_rate=2.0), 0.02, 0.0, 0.5)
    assert np.array_equal(state.sizes, sizes)
