"""
Stratified Pipe Flow
====================

Two immiscible fluid layers moving through a round pipe, each drawn as a
cloud of point particles.

The upper fluid fills y ≥ 0 and the lower y ≤ 0; the interface is the
plane y = 0.  Every particle relaxes toward a closed-form target velocity:

  - Interface velocity Ui = (μ₁U₁ + μ₂U₂) / (μ₁ + μ₂) (shear continuity)
  - Poiseuille parabola f (1 - r²/R²) for each layer's own flow
  - A blend of the two, steered by distance from the interface
  - No-slip wall layer, hard wall contact and periodic pipe ends
  - Viscous drag and a travelling ripple across the interface
  - Turbulent jitter once the flow rate exceeds one

It is a visual heuristic, not a Navier–Stokes solver.
"""

__version__ = "1.0.0"
__author__ = "Stratified Pipe Flow"
