"""
Control panel: user-adjustable parameters for the two fluid layers.

Organised into groups:
  - Display (colour scheme, view, render quality)
  - Upper / lower fluid (flow rate, viscosity, density)
  - Particles (count per layer)
  - Readout (interface velocity, Reynolds numbers, ripple)
  - Actions (pause, reset, save)

Fluid sliders go through ``engine.update_fluid_parameters`` so every change
replaces the layer's parameter snapshot in one piece.
"""

from __future__ import annotations

import logging
from typing import Optional

from PyQt5.QtCore import Qt, pyqtSignal
from PyQt5.QtGui import QColor
from PyQt5.QtWidgets import (
    QColorDialog,
    QComboBox,
    QFrame,
    QGroupBox,
    QHBoxLayout,
    QLabel,
    QPushButton,
    QScrollArea,
    QSlider,
    QVBoxLayout,
    QWidget,
)

from .canvas import FlowCanvas
from .engine import FlowDiagnostics, StratifiedFlowEngine
from .palettes import SCHEMES, create_custom_scheme, list_schemes
from .renderer import VIEWS

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Labelled slider helper
# ---------------------------------------------------------------------------

class LSlider(QWidget):
    """Horizontal slider with label and readout.

    The slider works in integers; ``scale`` divides the readout so that
    e.g. 150 with scale 100 shows as 1.50.
    """

    valueChanged = pyqtSignal(int)

    def __init__(self, label, lo, hi, val, scale=1, suffix="", parent=None):
        super().__init__(parent)
        lay = QHBoxLayout(self)
        lay.setContentsMargins(0, 1, 0, 1)

        self._lbl = QLabel(label)
        self._lbl.setFixedWidth(90)
        lay.addWidget(self._lbl)

        self._slider = QSlider(Qt.Horizontal)
        self._slider.setRange(lo, hi)
        self._slider.setValue(val)
        lay.addWidget(self._slider, stretch=1)

        self._scale = scale
        self._suffix = suffix
        self._ro = QLabel(self._fmt(val))
        self._ro.setFixedWidth(52)
        self._ro.setAlignment(Qt.AlignRight | Qt.AlignVCenter)
        lay.addWidget(self._ro)

        self._slider.valueChanged.connect(self._changed)

    def _fmt(self, v):
        if self._scale == 1:
            return f"{v}{self._suffix}"
        return f"{v / self._scale:.2f}{self._suffix}"

    def _changed(self, v):
        self._ro.setText(self._fmt(v))
        self.valueChanged.emit(v)

    def value(self):
        return self._slider.value()

    def setValue(self, v):
        self._slider.setValue(v)


# ---------------------------------------------------------------------------
# Control panel
# ---------------------------------------------------------------------------

class ControlPanel(QWidget):
    """Side panel with all flow controls."""

    save_requested = pyqtSignal()

    def __init__(
        self,
        canvas: FlowCanvas,
        engine: StratifiedFlowEngine,
        parent: Optional[QWidget] = None,
    ) -> None:
        super().__init__(parent)
        self.canvas = canvas
        self.engine = engine
        self.setFixedWidth(320)

        outer = QVBoxLayout(self)
        outer.setContentsMargins(0, 0, 0, 0)
        scroll = QScrollArea()
        scroll.setWidgetResizable(True)
        scroll.setFrameShape(QFrame.NoFrame)
        outer.addWidget(scroll)

        inner = QWidget()
        scroll.setWidget(inner)
        layout = QVBoxLayout(inner)
        layout.setSpacing(8)

        # ══════════════════════════════════════════════════════════════════
        # DISPLAY
        # ══════════════════════════════════════════════════════════════════
        disp_group = QGroupBox("Display")
        dg = QVBoxLayout(disp_group)

        self._scheme_combo = QComboBox()
        for key in list_schemes():
            self._scheme_combo.addItem(SCHEMES[key].name, key)
        idx = self._scheme_combo.findText(canvas.scheme.name)
        if idx >= 0:
            self._scheme_combo.setCurrentIndex(idx)
        self._scheme_combo.currentIndexChanged.connect(self._on_scheme_changed)
        dg.addWidget(self._scheme_combo)

        pick_row = QHBoxLayout()
        pick_row.addWidget(QLabel("Custom upper colour:"))
        self._pick_btn = QPushButton("Pick…")
        self._pick_btn.setFixedWidth(60)
        self._pick_btn.clicked.connect(self._pick_color)
        pick_row.addWidget(self._pick_btn)
        pick_row.addStretch()
        dg.addLayout(pick_row)

        self._view_combo = QComboBox()
        self._view_combo.addItem("Side view", "side")
        self._view_combo.addItem("Cross-section", "section")
        self._view_combo.setCurrentIndex(VIEWS.index(canvas.view))
        self._view_combo.currentIndexChanged.connect(
            lambda i: self.canvas.set_view(self._view_combo.itemData(i))
        )
        dg.addWidget(self._view_combo)

        self._quality_slider = LSlider("Quality", 20, 100, int(canvas.render_scale * 100), suffix="%")
        self._quality_slider.valueChanged.connect(
            lambda v: self.canvas.set_render_scale(v / 100)
        )
        dg.addWidget(self._quality_slider)

        layout.addWidget(disp_group)

        # ══════════════════════════════════════════════════════════════════
        # FLUIDS
        # ══════════════════════════════════════════════════════════════════
        for layer, title in (("upper", "Upper Fluid"), ("lower", "Lower Fluid")):
            layout.addWidget(self._build_fluid_group(layer, title))

        # ══════════════════════════════════════════════════════════════════
        # PARTICLES
        # ══════════════════════════════════════════════════════════════════
        part_group = QGroupBox("Particles")
        ptg = QVBoxLayout(part_group)
        self._count_slider = LSlider("Per layer", 100, 5000, engine.particle_count)
        self._count_slider._slider.setSingleStep(100)
        self._count_slider._slider.sliderReleased.connect(self._on_count_released)
        ptg.addWidget(self._count_slider)
        layout.addWidget(part_group)

        # ══════════════════════════════════════════════════════════════════
        # READOUT
        # ══════════════════════════════════════════════════════════════════
        read_group = QGroupBox("Readout")
        rg = QVBoxLayout(read_group)
        self._interface_lbl = QLabel()
        self._reynolds_lbl = QLabel()
        self._wave_lbl = QLabel()
        self._bounds_lbl = QLabel()
        for lbl in (self._interface_lbl, self._reynolds_lbl, self._wave_lbl, self._bounds_lbl):
            rg.addWidget(lbl)
        layout.addWidget(read_group)
        canvas.diagnostics_changed.connect(self.show_diagnostics)
        self.show_diagnostics(engine.diagnostics())

        # ══════════════════════════════════════════════════════════════════
        # ACTIONS
        # ══════════════════════════════════════════════════════════════════
        act_group = QGroupBox("Actions")
        ag = QHBoxLayout(act_group)

        self._pause_btn = QPushButton("Pause")
        self._pause_btn.setCheckable(True)
        self._pause_btn.toggled.connect(self._on_pause)
        ag.addWidget(self._pause_btn)

        reset_btn = QPushButton("Reset")
        reset_btn.clicked.connect(self._on_reset)
        ag.addWidget(reset_btn)

        save_btn = QPushButton("Save")
        save_btn.clicked.connect(self.save_requested.emit)
        ag.addWidget(save_btn)

        layout.addWidget(act_group)
        layout.addStretch()

    # ── builders ──────────────────────────────────────────────────────────

    def _build_fluid_group(self, layer: str, title: str) -> QGroupBox:
        fluid = self.engine.fluid(layer)
        group = QGroupBox(title)
        g = QVBoxLayout(group)

        flow = LSlider("Flow Rate", -200, 300, int(round(fluid.flow_rate * 100)), scale=100)
        flow.valueChanged.connect(
            lambda v, layer=layer: self.engine.update_fluid_parameters(layer, flow_rate=v / 100)
        )
        g.addWidget(flow)

        visc = LSlider("Viscosity", 0, 500, int(round(fluid.viscosity * 100)), scale=100)
        visc.valueChanged.connect(
            lambda v, layer=layer: self.engine.update_fluid_parameters(layer, viscosity=v / 100)
        )
        g.addWidget(visc)

        dens = LSlider("Density", 10, 300, int(round(fluid.density * 100)), scale=100)
        dens.valueChanged.connect(
            lambda v, layer=layer: self.engine.update_fluid_parameters(layer, density=v / 100)
        )
        g.addWidget(dens)

        return group

    # ── slots ─────────────────────────────────────────────────────────────

    def _on_scheme_changed(self, index: int) -> None:
        key = self._scheme_combo.itemData(index)
        if key in SCHEMES:
            self.canvas.set_scheme(SCHEMES[key])

    def _pick_color(self) -> None:
        upper = self.engine.fluid("upper").color
        color = QColorDialog.getColor(QColor(*upper), self, "Upper Fluid Colour")
        if color.isValid():
            scheme = create_custom_scheme("Custom", (color.red(), color.green(), color.blue()))
            self.canvas.set_scheme(scheme)

    def _on_count_released(self) -> None:
        count = self._count_slider.value()
        if count != self.engine.particle_count:
            self.engine.reset(count)
            self.canvas.reset_view()

    def _on_pause(self, checked: bool) -> None:
        self.canvas.paused = checked
        self._pause_btn.setText("Resume" if checked else "Pause")

    def _on_reset(self) -> None:
        self.engine.reset()
        self.canvas.reset_view()
        logger.info("Flow reset")

    def show_diagnostics(self, diag: FlowDiagnostics) -> None:
        self._interface_lbl.setText(f"Interface velocity: {diag.interface_velocity:.3f}")
        self._reynolds_lbl.setText(
            f"Re upper / lower: {diag.reynolds_upper:.2f} / {diag.reynolds_lower:.2f}"
        )
        self._wave_lbl.setText(
            f"Ripple amplitude: {diag.wave_amplitude:.3f}  (KH {diag.instability_amplitude:.3f})"
        )
        self._bounds_lbl.setText(
            f"Max radius: {diag.max_radius:.3f}   outside: {diag.out_of_bounds}"
        )
