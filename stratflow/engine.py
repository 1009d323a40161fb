"""
Stratified pipe flow engine.

Owns both particle layers, the random source and the current fluid
parameters, and runs one frame of the simulation per :meth:`step`:

    interface velocity → integrate upper → integrate lower → couple → sinks

Sinks are plain callables that receive read-only position buffers after
every step; they must not hold on to them across :meth:`reset`.
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

import numpy as np

from .coupling import InterfaceCoupler
from .integrator import ParticleIntegrator
from .params import (
    LAYERS,
    FluidParameters,
    ModelParams,
    SimulationConfig,
    check_layer,
    check_particle_count,
)
from .particles import ParticleState, initialize_particles
from .physics import (
    MIN_VISCOSITY,
    in_pipe_bounds,
    interface_velocity,
    interface_wave_amplitude,
    reynolds_number,
)

logger = logging.getLogger(__name__)

PositionSink = Callable[[Dict[str, np.ndarray]], None]


@dataclass(frozen=True)
class FlowDiagnostics:
    """Summary numbers for status displays and headless runs."""
    time: float
    interface_velocity: float
    wave_amplitude: float
    instability_amplitude: float
    reynolds_upper: float
    reynolds_lower: float
    max_radius: float
    out_of_bounds: int


class StratifiedFlowEngine:
    """Manages particle creation, stepping and fluid parameter updates.

    Parameters:
        config: Pipe, fluids and particle count (or defaults).
        params: Model constants (or defaults).
        seed:   RNG seed for reproducibility (None = random).
    """

    def __init__(
        self,
        config: Optional[SimulationConfig] = None,
        params: Optional[ModelParams] = None,
        seed: Optional[int] = None,
    ) -> None:
        self.config = config or SimulationConfig()
        self.params = params or ModelParams()
        self.rng = np.random.default_rng(seed)
        self.geometry = self.config.geometry
        self.integrator = ParticleIntegrator(self.geometry, self.params, self.rng)
        self.coupler = InterfaceCoupler(self.geometry, self.params)
        self._fluids: Dict[str, FluidParameters] = {
            layer: self.config.fluid(layer) for layer in LAYERS
        }
        self._sinks: List[PositionSink] = []
        self._states: Dict[str, ParticleState] = {}
        self.time: float = 0.0
        self.steps: int = 0
        self.reset(self.config.particle_count)

    # ── particle management ───────────────────────────────────────────────

    def reset(self, particle_count: Optional[int] = None) -> None:
        """Re-scatter both layers and rewind the clock."""
        if particle_count is not None:
            self._particle_count = check_particle_count(particle_count)
        self.time = 0.0
        self.steps = 0
        self._states = {
            layer: initialize_particles(
                layer, self._particle_count, self.geometry, self.rng, 0.0, self.params,
            )
            for layer in LAYERS
        }
        logger.info("Engine reset: %d particles per layer", self._particle_count)

    @property
    def particle_count(self) -> int:
        return self._particle_count

    def state(self, layer: str) -> ParticleState:
        return self._states[check_layer(layer)]

    def positions(self, layer: str) -> np.ndarray:
        """Read-only flat (x, y, z) buffer for *layer*."""
        return self.state(layer).positions_view()

    # ── fluid parameters ──────────────────────────────────────────────────

    def fluid(self, layer: str) -> FluidParameters:
        return self._fluids[check_layer(layer)]

    def update_fluid_parameters(self, layer: str, **changes) -> FluidParameters:
        """Replace *layer*'s parameters, keeping every field not given.

        Values are not validated; the model clamps what it needs to.
        """
        current = self.fluid(layer)
        updated = dataclasses.replace(current, **changes)
        self._fluids[layer] = updated
        logger.debug("%s fluid updated: %s", layer, changes)
        return updated

    @property
    def interface_velocity(self) -> float:
        upper, lower = self._fluids["upper"], self._fluids["lower"]
        return interface_velocity(
            upper.flow_rate, lower.flow_rate, upper.viscosity, lower.viscosity,
        )

    # ── sinks ─────────────────────────────────────────────────────────────

    def add_sink(self, sink: PositionSink) -> None:
        self._sinks.append(sink)

    def remove_sink(self, sink: PositionSink) -> None:
        self._sinks.remove(sink)

    # ── stepping ──────────────────────────────────────────────────────────

    def step(self, dt: float, time: Optional[float] = None) -> None:
        """Advance the simulation by *dt* seconds.

        ``time`` overrides the accumulated clock used for the interface
        ripple phase.
        """
        if not dt > 0:
            raise ValueError(f"time step must be positive, got {dt!r}")
        self.time = self.time + dt if time is None else time

        upper, lower = self._fluids["upper"], self._fluids["lower"]
        v_interface = self.interface_velocity

        self.integrator.step(self._states["upper"], upper, dt, self.time, v_interface)
        self.integrator.step(self._states["lower"], lower, dt, self.time, v_interface)
        self.coupler.apply(self._states["upper"], self._states["lower"], upper, lower, self.time)
        self.steps += 1

        if self._sinks:
            views = {layer: self.positions(layer) for layer in LAYERS}
            for sink in list(self._sinks):
                sink(views)

    def run(self, steps: int, dt: float) -> None:
        for _ in range(steps):
            self.step(dt)

    # ── diagnostics ───────────────────────────────────────────────────────

    def diagnostics(self) -> FlowDiagnostics:
        upper, lower = self._fluids["upper"], self._fluids["lower"]
        geom = self.geometry

        max_radius = 0.0
        out_of_bounds = 0
        for layer in LAYERS:
            pos = self._states[layer].position_vectors
            inside = in_pipe_bounds(pos[:, 0], pos[:, 1], pos[:, 2], geom.length, geom.radius)
            out_of_bounds += int(np.count_nonzero(~inside))
            max_radius = max(max_radius, float(self._states[layer].radial_distance().max()))

        return FlowDiagnostics(
            time=self.time,
            interface_velocity=self.interface_velocity,
            wave_amplitude=self.coupler.wave_amplitude(upper, lower),
            instability_amplitude=interface_wave_amplitude(
                abs(upper.flow_rate - lower.flow_rate),
                max(MIN_VISCOSITY, upper.viscosity) / max(MIN_VISCOSITY, lower.viscosity),
            ),
            reynolds_upper=reynolds_number(
                abs(upper.flow_rate), geom.diameter, upper.viscosity, upper.density),
            reynolds_lower=reynolds_number(
                abs(lower.flow_rate), geom.diameter, lower.viscosity, lower.density),
            max_radius=max_radius,
            out_of_bounds=out_of_bounds,
        )
