"""
Flow canvas widget: animated display with QTimer-driven stepping.

The canvas registers itself as a position sink on the engine: every step
hands it fresh read-only buffers, which are rendered in the main thread
(numpy splatting is fast enough at a few thousand points).
"""

from __future__ import annotations

import logging
import time
from typing import Dict, Optional

import numpy as np
from PyQt5.QtCore import QTimer, Qt, pyqtSignal
from PyQt5.QtGui import QColor, QImage, QPainter, QPixmap
from PyQt5.QtWidgets import QWidget

from .engine import StratifiedFlowEngine
from .palettes import ColorScheme
from .params import LAYERS
from .renderer import render_frame

logger = logging.getLogger(__name__)

# Longest wall-clock frame handed to the engine (seconds)
MAX_FRAME_DT = 0.05


class FlowCanvas(QWidget):
    """Animated pipe display.

    Signals:
        fps_changed(float):        current rendering FPS
        diagnostics_changed(object): FlowDiagnostics, about 4× per second
    """

    fps_changed = pyqtSignal(float)
    diagnostics_changed = pyqtSignal(object)

    def __init__(
        self,
        engine: StratifiedFlowEngine,
        scheme: ColorScheme,
        view: str = "side",
        render_scale: float = 0.5,
        parent: Optional[QWidget] = None,
    ) -> None:
        super().__init__(parent)
        self.engine = engine
        self.scheme = scheme
        self.view = view
        self.render_scale = render_scale
        self._pixmap: Optional[QPixmap] = None
        self._paused = False
        self._latest: Optional[Dict[str, np.ndarray]] = None

        # Timing
        self._last_time = time.perf_counter()
        self._frame_count = 0
        self._fps_accum = 0.0
        self._diag_accum = 0.0

        self.setMinimumSize(480, 200)
        self.engine.add_sink(self._on_positions)

        # Animation timer (~60 fps)
        self._timer = QTimer(self)
        self._timer.setInterval(16)
        self._timer.timeout.connect(self._tick)
        self._timer.start()

    # ── properties ────────────────────────────────────────────────────────

    @property
    def paused(self) -> bool:
        return self._paused

    @paused.setter
    def paused(self, val: bool) -> None:
        self._paused = val
        if not val:
            self._last_time = time.perf_counter()

    def set_scheme(self, scheme: ColorScheme) -> None:
        self.scheme = scheme
        self.engine.update_fluid_parameters("upper", color=scheme.upper)
        self.engine.update_fluid_parameters("lower", color=scheme.lower)

    def set_view(self, view: str) -> None:
        self.view = view

    def set_render_scale(self, scale: float) -> None:
        self.render_scale = max(0.2, min(1.0, scale))

    def reset_view(self) -> None:
        """Drop buffers from before an engine reset."""
        self._latest = None

    # ── animation loop ────────────────────────────────────────────────────

    def _on_positions(self, positions: Dict[str, np.ndarray]) -> None:
        self._latest = positions

    def _tick(self) -> None:
        now = time.perf_counter()
        dt = now - self._last_time
        self._last_time = now

        if not self._paused and dt > 0:
            self.engine.step(min(dt, MAX_FRAME_DT))

        positions = self._latest
        if positions is None:
            positions = {layer: self.engine.positions(layer) for layer in LAYERS}

        w = max(16, int(self.width() * self.render_scale))
        h = max(16, int(self.height() * self.render_scale))
        img = render_frame(
            positions,
            {layer: self.engine.fluid(layer).color for layer in LAYERS},
            self.engine.geometry,
            w, h,
            view=self.view,
            background=self.scheme.bg,
            wall=self.scheme.wall,
        )

        qimg = QImage(img.data, w, h, 4 * w, QImage.Format_RGBA8888).copy()
        self._pixmap = QPixmap.fromImage(qimg).scaled(
            self.width(), self.height(),
            Qt.IgnoreAspectRatio,
            Qt.SmoothTransformation,
        )
        self.update()

        # FPS tracking
        self._frame_count += 1
        self._fps_accum += dt
        if self._fps_accum >= 1.0:
            self.fps_changed.emit(self._frame_count / self._fps_accum)
            self._frame_count = 0
            self._fps_accum = 0.0

        self._diag_accum += dt
        if self._diag_accum >= 0.25:
            self._diag_accum = 0.0
            self.diagnostics_changed.emit(self.engine.diagnostics())

    # ── painting ──────────────────────────────────────────────────────────

    def paintEvent(self, event):
        painter = QPainter(self)
        painter.setRenderHint(QPainter.SmoothPixmapTransform)
        bg = self.scheme.bg
        painter.fillRect(self.rect(), QColor(bg[0], bg[1], bg[2]))

        if self._pixmap:
            painter.drawPixmap(0, 0, self._pixmap)

        if self._paused:
            painter.setPen(QColor(220, 220, 220, 180))
            painter.drawText(self.rect(), Qt.AlignCenter, "⏸ PAUSED")

        painter.end()

    def get_image(self) -> Optional[QImage]:
        if self._pixmap:
            return self._pixmap.toImage()
        return None
