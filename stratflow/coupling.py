"""
Cross-layer coupling at the fluid-fluid interface.

Two effects act on particles close to y = 0:

  - viscous drag toward the interface velocity, fading linearly to zero
    at the edge of the interface band
  - a travelling ripple, a crude Kelvin-Helmholtz stand-in, injected as
    vertical velocity so it cannot accumulate into positional drift

The layers are paired by index only.  Particle ``i`` of the upper layer
and particle ``i`` of the lower layer share a ripple phase taken from the
upper particle's x; they are not neighbours in space.
"""

from __future__ import annotations

from typing import Optional

import numpy as np

from .params import FluidParameters, ModelParams, PipeGeometry
from .particles import ParticleState
from .physics import interface_velocity, viscous_drag


class InterfaceCoupler:
    """Applies interface drag and ripple to a pair of layers."""

    def __init__(self, geometry: PipeGeometry, params: Optional[ModelParams] = None) -> None:
        self.geometry = geometry
        self.params = params or ModelParams()

    def wave_amplitude(self, upper: FluidParameters, lower: FluidParameters) -> float:
        return abs(upper.flow_rate - lower.flow_rate) * self.params.wave_amplitude_gain

    def apply(
        self,
        upper: ParticleState,
        lower: ParticleState,
        upper_fluid: FluidParameters,
        lower_fluid: FluidParameters,
        time: float,
    ) -> None:
        p = self.params
        v_interface = interface_velocity(
            upper_fluid.flow_rate, lower_fluid.flow_rate,
            upper_fluid.viscosity, lower_fluid.viscosity,
        )
        amplitude = self.wave_amplitude(upper_fluid, lower_fluid)
        region = self.geometry.radius * p.interface_region_fraction

        n = min(upper.count, lower.count)
        upper_pos = upper.position_vectors[:n]
        wave_vel = amplitude * 2.0 * np.cos(upper_pos[:, 0] * p.wave_frequency + time * p.wave_speed)

        for state, fluid in ((upper, upper_fluid), (lower, lower_fluid)):
            pos = state.position_vectors[:n]
            vel = state.velocity_vectors[:n]
            dist = np.abs(pos[:, 1])

            # ── Drag toward interface velocity ──
            near = dist < region
            if near.any():
                coupling = 1.0 - dist[near] / region
                drag = viscous_drag(v_interface, vel[near, 0], fluid.viscosity, dist[near] + p.drag_offset)
                vel[near, 0] += drag * coupling

            # ── Ripple ──
            band = dist < p.wave_band
            if band.any():
                vel[band, 1] += wave_vel[band] * (1.0 - dist[band] / p.wave_band) * p.wave_gain
