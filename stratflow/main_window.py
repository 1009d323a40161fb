"""
Main window: assembles the flow canvas, control panel, and menu bar.
"""

from __future__ import annotations

import logging

from PyQt5.QtGui import QKeySequence
from PyQt5.QtWidgets import (
    QAction,
    QActionGroup,
    QFileDialog,
    QHBoxLayout,
    QMainWindow,
    QMessageBox,
    QSizePolicy,
    QWidget,
)

from . import __version__
from .canvas import FlowCanvas
from .controls import ControlPanel
from .engine import StratifiedFlowEngine
from .palettes import ColorScheme

logger = logging.getLogger(__name__)


class MainWindow(QMainWindow):
    """Top-level window for the stratified flow viewer."""

    def __init__(
        self,
        engine: StratifiedFlowEngine,
        scheme: ColorScheme,
        view: str = "side",
        render_scale: float = 0.5,
    ) -> None:
        super().__init__()
        self.setWindowTitle(f"Stratified Pipe Flow  v{__version__}")
        self.setMinimumSize(900, 420)

        self.engine = engine
        self.canvas = FlowCanvas(engine, scheme, view, render_scale)
        self.canvas.set_scheme(scheme)
        self.controls = ControlPanel(self.canvas, engine)

        central = QWidget()
        self.setCentralWidget(central)
        h_layout = QHBoxLayout(central)
        h_layout.setContentsMargins(8, 8, 8, 8)
        h_layout.setSpacing(12)

        self.canvas.setSizePolicy(QSizePolicy.Expanding, QSizePolicy.Expanding)
        h_layout.addWidget(self.canvas, stretch=1)
        h_layout.addWidget(self.controls)

        self._build_menu()

        self.statusBar().showMessage(
            f"{engine.particle_count} particles per layer, "
            f"interface velocity {engine.interface_velocity:.3f}"
        )

        self.controls.save_requested.connect(self._save)
        self.canvas.fps_changed.connect(
            lambda fps: self.statusBar().showMessage(
                f"{fps:.0f} fps   t = {self.engine.time:.1f} s"
            )
        )

    def _build_menu(self) -> None:
        menu = self.menuBar()

        file_menu = menu.addMenu("&File")
        save_act = QAction("&Save Image…", self)
        save_act.setShortcut(QKeySequence.Save)
        save_act.triggered.connect(self._save)
        file_menu.addAction(save_act)
        file_menu.addSeparator()
        quit_act = QAction("&Quit", self)
        quit_act.setShortcut(QKeySequence.Quit)
        quit_act.triggered.connect(self.close)
        file_menu.addAction(quit_act)

        edit_menu = menu.addMenu("&Edit")
        pause_act = QAction("&Pause / Resume", self)
        pause_act.setShortcut(QKeySequence("Space"))
        pause_act.triggered.connect(self._toggle_pause)
        edit_menu.addAction(pause_act)
        reset_act = QAction("&Reset Flow", self)
        reset_act.setShortcut(QKeySequence("Ctrl+R"))
        reset_act.triggered.connect(self.controls._on_reset)
        edit_menu.addAction(reset_act)

        view_menu = menu.addMenu("&View")
        group = QActionGroup(self)
        for key, label, shortcut in (("side", "&Side", "1"), ("section", "&Cross-section", "2")):
            act = QAction(label, self, checkable=True)
            act.setShortcut(QKeySequence(shortcut))
            act.setChecked(self.canvas.view == key)
            act.triggered.connect(lambda _checked, key=key: self._set_view(key))
            group.addAction(act)
            view_menu.addAction(act)

        help_menu = menu.addMenu("&Help")
        about_act = QAction("&About", self)
        about_act.triggered.connect(self._about)
        help_menu.addAction(about_act)

    def _set_view(self, view: str) -> None:
        self.controls._view_combo.setCurrentIndex(self.controls._view_combo.findData(view))

    def _save(self) -> None:
        img = self.canvas.get_image()
        if img is None:
            QMessageBox.warning(self, "Save Error", "No image to save yet.")
            return
        path, _ = QFileDialog.getSaveFileName(
            self, "Save Flow Image", "stratflow.png",
            "PNG (*.png);;JPEG (*.jpg);;All (*)",
        )
        if path:
            if img.save(path):
                self.statusBar().showMessage(f"Saved to {path}")
            else:
                QMessageBox.critical(self, "Save Error", f"Failed to save:\n{path}")

    def _toggle_pause(self) -> None:
        self.controls._pause_btn.setChecked(not self.canvas.paused)

    def _about(self) -> None:
        QMessageBox.about(
            self,
            "About Stratified Pipe Flow",
            f"<h3>Stratified Pipe Flow v{__version__}</h3>"
            "<p>Two immiscible fluids flowing through a round pipe, each "
            "drawn as a cloud of particles.</p>"
            "<p><b>Model:</b></p>"
            "<ul>"
            "<li>Interface velocity from shear-stress continuity</li>"
            "<li>Poiseuille parabola blended with the interface velocity</li>"
            "<li>No-slip wall layer and hard wall contact</li>"
            "<li>Viscous drag and travelling ripple at the interface</li>"
            "<li>Turbulent jitter above unit flow rate</li>"
            "</ul>"
            "<p>This is a visual heuristic, not a Navier–Stokes solver.</p>",
        )
