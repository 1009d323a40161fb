"""
Particle state for one fluid layer.

Positions, velocities and sizes are kept as flat float arrays so the
renderer can take the position buffer as-is (x, y, z per particle):

    x: axial, along the pipe
    y: vertical; the fluid interface is the plane y = 0
    z: lateral
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Optional

import numpy as np

from .params import ModelParams, PipeGeometry, check_layer

logger = logging.getLogger(__name__)


@dataclass
class ParticleState:
    """Flat per-particle arrays for one layer.

    ``positions`` and ``velocities`` hold 3 values per particle, ``sizes``
    one.  Sizes are a rendering hint and are never changed after creation.
    """
    layer: str
    positions: np.ndarray
    velocities: np.ndarray
    sizes: np.ndarray

    def __post_init__(self):
        n = self.sizes.shape[0]
        if self.positions.shape != (3 * n,) or self.velocities.shape != (3 * n,):
            raise ValueError(
                f"inconsistent particle arrays: positions {self.positions.shape}, "
                f"velocities {self.velocities.shape}, sizes {self.sizes.shape}"
            )

    @property
    def count(self) -> int:
        return self.sizes.shape[0]

    @property
    def position_vectors(self) -> np.ndarray:
        """(n, 3) view sharing memory with ``positions``."""
        return self.positions.reshape(-1, 3)

    @property
    def velocity_vectors(self) -> np.ndarray:
        """(n, 3) view sharing memory with ``velocities``."""
        return self.velocities.reshape(-1, 3)

    def radial_distance(self) -> np.ndarray:
        p = self.position_vectors
        return np.sqrt(p[:, 1] * p[:, 1] + p[:, 2] * p[:, 2])

    def positions_view(self) -> np.ndarray:
        """Read-only view of the flat position buffer."""
        view = self.positions.view()
        view.flags.writeable = False
        return view


def initialize_particles(
    layer: str,
    particle_count: int,
    geometry: PipeGeometry,
    rng: np.random.Generator,
    y_offset: float = 0.0,
    params: Optional[ModelParams] = None,
) -> ParticleState:
    """Scatter ``particle_count`` particles over one half of the pipe.

    The radius is drawn as √U·R so the cross-section is filled with
    uniform areal density.  The upper layer takes θ ∈ [0, π] (y ≥ 0),
    the lower θ ∈ [π, 2π]; each is then nudged across the interface by
    up to ``overlap_fraction``·R so the two clouds meet without a gap.
    """
    check_layer(layer)
    p = params or ModelParams()
    n = particle_count
    R = geometry.radius

    positions = np.zeros(n * 3, dtype=np.float64)
    velocities = np.zeros(n * 3, dtype=np.float64)
    pos = positions.reshape(-1, 3)
    vel = velocities.reshape(-1, 3)

    pos[:, 0] = (rng.random(n) - 0.5) * geometry.length

    radius = np.sqrt(rng.random(n)) * R
    overlap = R * p.overlap_fraction
    if layer == "upper":
        theta = rng.random(n) * math.pi
        y = radius * np.sin(theta) - overlap * rng.random(n)
    else:
        theta = rng.random(n) * math.pi + math.pi
        y = radius * np.sin(theta) + overlap * rng.random(n)

    pos[:, 1] = y + y_offset
    pos[:, 2] = radius * np.cos(theta)

    vel[:, 0] = p.initial_axial_velocity

    sizes = p.min_size + rng.random(n) * (p.max_size - p.min_size)

    logger.debug("Initialised %d %s-layer particles", n, layer)
    return ParticleState(layer=layer, positions=positions, velocities=velocities, sizes=sizes)
