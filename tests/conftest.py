import numpy as np
import pytest

from stratflow.params import FluidParameters, PipeGeometry
from stratflow.particles import ParticleState


@pytest.fixture
def geometry():
    return PipeGeometry(length=10.0, radius=1.0)


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


def _make_state(layer, points, velocities=None):
    """Build a ParticleState from lists of (x, y, z) tuples."""
    pos = np.asarray(points, dtype=np.float64).reshape(-1)
    if velocities is None:
        vel = np.zeros_like(pos)
    else:
        vel = np.asarray(velocities, dtype=np.float64).reshape(-1)
    sizes = np.full(pos.shape[0] // 3, 0.075)
    return ParticleState(layer=layer, positions=pos, velocities=vel, sizes=sizes)


@pytest.fixture
def fluid():
    return FluidParameters(flow_rate=1.0, viscosity=1.0)


@pytest.fixture
def make_state():
    return _make_state
