"""
Per-layer time stepping.

Each particle relaxes its axial velocity toward the local target profile,
moves, and is then held inside the pipe: a thin no-slip layer at the wall,
a hard reset on wall contact, lateral damping, optional turbulent jitter
and a periodic wrap along the axis.  Lanes are independent, so the whole
layer is advanced with numpy array operations.
"""

from __future__ import annotations

import logging
from typing import Optional

import numpy as np

from .params import FluidParameters, ModelParams, PipeGeometry
from .particles import ParticleState
from .physics import parabolic_velocity, stratified_velocity

logger = logging.getLogger(__name__)


class ParticleIntegrator:
    """Advances one layer's :class:`ParticleState` in place.

    Parameters:
        geometry: Pipe dimensions.
        params:   Model constants (or defaults).
        rng:      Generator used for turbulent jitter.
    """

    def __init__(
        self,
        geometry: PipeGeometry,
        params: Optional[ModelParams] = None,
        rng: Optional[np.random.Generator] = None,
    ) -> None:
        self.geometry = geometry
        self.params = params or ModelParams()
        self.rng = rng if rng is not None else np.random.default_rng()

    def target_velocity(
        self,
        state: ParticleState,
        fluid: FluidParameters,
        interface_velocity: Optional[float] = None,
    ) -> np.ndarray:
        """Axial target for every particle, before wall damping."""
        pos = state.position_vectors
        y = pos[:, 1]
        z = pos[:, 2]
        R = self.geometry.radius
        if interface_velocity is None:
            return parabolic_velocity(fluid.flow_rate, np.sqrt(y * y + z * z), R)
        return stratified_velocity(
            fluid.flow_rate, interface_velocity, y, z, R, fluid.viscosity,
        )

    def step(
        self,
        state: ParticleState,
        fluid: FluidParameters,
        dt: float,
        time: float,
        interface_velocity: Optional[float] = None,
    ) -> None:
        """Advance *state* by *dt* seconds.

        Without ``interface_velocity`` each particle follows the plain
        Poiseuille parabola of its own layer.
        """
        p = self.params
        R = self.geometry.radius
        pos = state.position_vectors
        vel = state.velocity_vectors

        # ── Target profile ──
        r = np.sqrt(pos[:, 1] * pos[:, 1] + pos[:, 2] * pos[:, 2])
        target = np.asarray(self.target_velocity(state, fluid, interface_velocity), dtype=np.float64)

        # ── No-slip wall layer ──
        wall_distance = R - r
        wall_thickness = R * p.wall_layer_fraction
        in_wall = wall_distance < wall_thickness
        wall_factor = np.maximum(0.0, wall_distance / wall_thickness)
        target = np.where(in_wall, target * wall_factor, target)
        vel[:, 0] = np.where(in_wall, vel[:, 0] * wall_factor, vel[:, 0])

        # ── Relax toward target ──
        vel[:, 0] += (target - vel[:, 0]) * (p.relaxation_rate * dt)

        forcing = (np.abs(target) > p.forcing_threshold) & (wall_distance > wall_thickness)
        vel[forcing, 0] += target[forcing] * dt * p.forcing_gain

        # ── Move ──
        pos += vel * dt

        # ── Wall contact: pull inside, stop dead ──
        new_r = np.sqrt(pos[:, 1] * pos[:, 1] + pos[:, 2] * pos[:, 2])
        hit = new_r >= R
        if hit.any():
            scale = (R * p.wall_contact_scale) / new_r[hit]
            pos[hit, 1] *= scale
            pos[hit, 2] *= scale
            vel[hit] = 0.0

        # ── Lateral damping ──
        lateral = max(0.0, 1.0 - p.lateral_damping * dt)
        vel[:, 1] *= lateral
        vel[:, 2] *= lateral

        # ── Turbulence ──
        if fluid.flow_rate > p.turbulence_threshold:
            self._jitter(state, fluid.flow_rate)

        # ── Periodic axis ──
        half = self.geometry.half_length
        x = pos[:, 0]
        x[x > half] = -half
        x[x < -half] = half

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "%s step t=%.3f dt=%.4f: %d wall hits", state.layer, time, dt, int(hit.sum()),
            )

    def _jitter(self, state: ParticleState, flow_rate: float) -> None:
        p = self.params
        R = self.geometry.radius
        pos = state.position_vectors
        n = state.count

        intensity = (flow_rate - p.turbulence_threshold) * p.turbulence_gain
        pos[:, 1] += (self.rng.random(n) - 0.5) * intensity
        pos[:, 2] += (self.rng.random(n) - 0.5) * intensity

        limit = R * p.turbulence_containment
        new_r = np.sqrt(pos[:, 1] * pos[:, 1] + pos[:, 2] * pos[:, 2])
        out = new_r > limit
        if out.any():
            scale = limit / new_r[out]
            pos[out, 1] *= scale
            pos[out, 2] *= scale
