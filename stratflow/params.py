"""
Simulation configuration and tuneable model constants.

Everything the per-frame step needs that is not particle state lives here:
the pipe geometry, the two fluids' parameters, and the constants of the
velocity heuristic.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Tuple

RGB = Tuple[int, int, int]

LAYERS: Tuple[str, str] = ("upper", "lower")


def check_layer(layer: str) -> str:
    if layer not in LAYERS:
        raise KeyError(f"Unknown layer '{layer}'. Expected one of: {', '.join(LAYERS)}")
    return layer


def check_particle_count(count) -> int:
    if isinstance(count, bool) or not isinstance(count, int):
        raise ValueError(f"particle_count must be an integer, got {count!r}")
    if count <= 0:
        raise ValueError(f"particle_count must be positive, got {count}")
    return count


# ---------------------------------------------------------------------------
# Fluid / geometry
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class FluidParameters:
    """One fluid layer's parameters.

    Snapshots are immutable; the engine swaps in a new instance when a
    field changes.  ``density`` and ``color`` are never read by the
    kinematics.
    """
    flow_rate: float = 1.0      # signed driving flow, arbitrary units
    viscosity: float = 1.0      # clamped to 0.1 inside the model
    density: float = 1.0
    color: RGB = (70, 140, 230)


@dataclass(frozen=True)
class PipeGeometry:
    """Pipe dimensions.  The axis is y=0, z=0; x runs along the pipe."""
    length: float = 10.0
    radius: float = 1.0

    def __post_init__(self):
        for name in ("length", "radius"):
            value = getattr(self, name)
            if not math.isfinite(value) or value <= 0:
                raise ValueError(f"pipe {name} must be a positive number, got {value!r}")

    @property
    def half_length(self) -> float:
        return self.length / 2

    @property
    def diameter(self) -> float:
        return self.radius * 2


@dataclass
class SimulationConfig:
    """Everything needed to build an engine.

    Defaults describe the reference scenario: an oil-like upper layer
    flowing over a slower, more viscous lower layer.
    """
    particle_count: int = 1000
    geometry: PipeGeometry = field(default_factory=PipeGeometry)
    upper: FluidParameters = field(
        default_factory=lambda: FluidParameters(
            flow_rate=1.0, viscosity=1.0, density=0.9, color=(240, 170, 40))
    )
    lower: FluidParameters = field(
        default_factory=lambda: FluidParameters(
            flow_rate=0.5, viscosity=2.0, density=1.0, color=(40, 120, 230))
    )

    def __post_init__(self):
        check_particle_count(self.particle_count)

    def fluid(self, layer: str) -> FluidParameters:
        return getattr(self, check_layer(layer))


# ---------------------------------------------------------------------------
# Model constants (user-tunable)
# ---------------------------------------------------------------------------

@dataclass
class ModelParams:
    """All tuneable constants of the velocity heuristic.

    Fractions marked ``* R`` are multiplied by the pipe radius.
    """
    # Relaxation toward the target profile
    relaxation_rate: float = 5.0
    forcing_gain: float = 0.1
    forcing_threshold: float = 0.001

    # Wall
    wall_layer_fraction: float = 0.05       # * R, linear no-slip ramp
    wall_contact_scale: float = 0.98        # * R, where a wall hit is put back

    # Lateral motion
    lateral_damping: float = 0.5            # per second

    # Turbulence (only for flow_rate above the threshold)
    turbulence_threshold: float = 1.0
    turbulence_gain: float = 0.01
    turbulence_containment: float = 0.9     # * R

    # Interface coupling
    interface_region_fraction: float = 0.3  # * R
    drag_offset: float = 0.01

    # Interfacial wave
    wave_amplitude_gain: float = 0.05
    wave_frequency: float = 2.0
    wave_speed: float = 2.0
    wave_band: float = 0.2                  # absolute |y| band
    wave_gain: float = 0.02

    # Initial state
    initial_axial_velocity: float = 0.1
    overlap_fraction: float = 0.3           # * R
    min_size: float = 0.05
    max_size: float = 0.10
