"""
Closed-form velocity model for two stratified layers in a round pipe.

Stateless functions only.  Geometric arguments may be scalars or numpy
arrays; scalar inputs give a plain ``float`` back.  Nothing here raises on
bad numbers: small denominators are floored instead.

Profiles:
  - Poiseuille parabola  v = f (1 - (r/R)²)
  - Interface velocity from shear-stress continuity
        Ui = (μ₁U₁ + μ₂U₂) / (μ₁ + μ₂)
  - Stratified blend between the interface velocity and each layer's own
    parabola, steered by distance from the interface
"""

from __future__ import annotations

import math

import numpy as np

# Lower bound applied to every viscosity used as a divisor.
MIN_VISCOSITY = 0.1

# Below this chord half-height the stratified profile is zero.
MIN_CHORD = 0.001


def _out(value):
    arr = np.asarray(value)
    if arr.ndim == 0:
        return float(arr)
    return arr


def parabolic_velocity(flow_rate, r, pipe_radius):
    """Poiseuille profile: ``flow_rate`` on the axis, zero at the wall."""
    ratio = np.asarray(r, dtype=np.float64) / pipe_radius
    return _out(flow_rate * (1.0 - ratio * ratio))


def interface_velocity(
    upper_flow: float,
    lower_flow: float,
    upper_viscosity: float,
    lower_viscosity: float,
) -> float:
    """Viscosity-weighted mean of the two layer flows.

    Falls back to the plain mean when the viscosities sum to zero.
    """
    total = upper_viscosity + lower_viscosity
    if total == 0:
        return (upper_flow + lower_flow) / 2

    upper_weight = upper_viscosity / total
    lower_weight = lower_viscosity / total
    return upper_flow * upper_weight + lower_flow * lower_weight


def stratified_velocity(native_flow, interface_center_velocity, y, z, pipe_radius, viscosity):
    """Axial target velocity at (y, z) for one layer.

    At the interface (y=0) this matches the interface velocity, attenuated
    parabolically across z; towards the wall it hands over to the layer's
    own parabola, scaled by inverse viscosity.  Zero at and beyond the wall.
    """
    y = np.asarray(y, dtype=np.float64)
    z = np.asarray(z, dtype=np.float64)
    r2 = y * y + z * z
    r = np.sqrt(r2)
    big_r2 = pipe_radius * pipe_radius

    z_ratio = z / pipe_radius
    local_interface = interface_center_velocity * np.maximum(0.0, 1.0 - z_ratio * z_ratio)

    viscosity_factor = 1.0 / max(MIN_VISCOSITY, viscosity)
    native = native_flow * viscosity_factor * np.maximum(0.0, 1.0 - r2 / big_r2)

    max_h = np.sqrt(np.maximum(0.0, big_r2 - z * z))
    ratio = np.abs(y) / np.maximum(max_h, MIN_CHORD)   # 0 at interface, 1 at wall

    blend_power = 1.5 + 0.5 / max(MIN_VISCOSITY, viscosity)
    blend = ratio ** blend_power

    v = local_interface * (1.0 - blend) + native * blend
    v = np.where((r >= pipe_radius) | (max_h < MIN_CHORD), 0.0, v)
    return _out(v)


def viscous_drag(target_velocity, current_velocity, viscosity, distance=0.1):
    """Velocity increment pulling ``current_velocity`` toward the target.

    ``distance`` is accepted for call-site symmetry with a gradient-based
    shear model and does not change the result.
    """
    drag_factor = 1.0 / max(MIN_VISCOSITY, viscosity)
    return (target_velocity - current_velocity) * drag_factor * 0.1


# ── diagnostics ──────────────────────────────────────────────────────────

def reynolds_number(velocity, diameter, viscosity, density):
    """Re = ρ v D / μ."""
    return _out(density * np.asarray(velocity, dtype=np.float64) * diameter
                / max(MIN_VISCOSITY, viscosity))


def interface_wave_amplitude(velocity_diff: float, viscosity_ratio: float) -> float:
    """Simplified Kelvin-Helmholtz ripple amplitude."""
    return velocity_diff * 0.05 * (1.0 / math.sqrt(max(MIN_VISCOSITY, viscosity_ratio)))


def in_pipe_bounds(x, y, z, pipe_length, pipe_radius):
    y = np.asarray(y, dtype=np.float64)
    z = np.asarray(z, dtype=np.float64)
    inside = (np.abs(x) <= pipe_length / 2) & (np.sqrt(y * y + z * z) <= pipe_radius)
    if np.ndim(inside) == 0:
        return bool(inside)
    return inside
