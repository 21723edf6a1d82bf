"""Histogram strip with draggable black, mid and white input handles."""

from __future__ import annotations

import numpy as np
from PySide6.QtCore import QPointF, QRectF, Qt, Signal
from PySide6.QtGui import QColor, QMouseEvent, QPainter, QPainterPath, QPen, QPolygonF
from PySide6.QtWidgets import QWidget

from ...core.histogram import normalise_histogram
from ...core.interaction import DragState, LevelsControlModel
from ...core.levels import EditTarget, LevelsSettings


class LevelsHistogramWidget(QWidget):
    """Paint the selected channel's histogram and forward pointer drags."""

    levelsChanged = Signal(object)
    """Emitted with the updated :class:`LevelsSettings` during a drag."""

    dragFinished = Signal()
    """Emitted after the user releases a handle."""

    def __init__(self, model: LevelsControlModel, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self._model = model
        self._hist = np.zeros(256, dtype=np.float32)
        self.setMouseTracking(True)
        self.setMinimumHeight(140)
        self.setMinimumWidth(int(model.track_width))

        # Geometry parameters ------------------------------------------------
        self.handle_band = 16
        self.handle_size = 7

        # Colour palette for the dark edit theme -----------------------------
        self.c_bg = QColor(30, 30, 30)
        self.c_clip = QColor(0, 0, 0, 110)
        self.c_handle_outline = QColor(160, 160, 160)
        self.c_channel = {
            EditTarget.COMPOSITE: QColor(200, 200, 200),
            EditTarget.RED: QColor(230, 80, 80),
            EditTarget.GREEN: QColor(80, 200, 100),
            EditTarget.BLUE: QColor(90, 140, 240),
        }

    # ------------------------------------------------------------------
    # Public API
    def model(self) -> LevelsControlModel:
        return self._model

    def setHistogram(self, hist: np.ndarray) -> None:
        """Replace the displayed counts; they are normalised to the tallest bucket."""

        self._hist = normalise_histogram(hist)
        self.update()

    def setTarget(self, target: EditTarget) -> bool:
        changed = self._model.select_target(target)
        if changed:
            self.update()
        return changed

    # ------------------------------------------------------------------
    # Qt events
    def resizeEvent(self, event) -> None:  # type: ignore[override]
        self._model.set_track_width(self.width())
        super().resizeEvent(event)

    def mousePressEvent(self, event: QMouseEvent) -> None:  # type: ignore[override]
        if event.button() != Qt.MouseButton.LeftButton:
            super().mousePressEvent(event)
            return
        if self._model.press(event.position().x()) is not DragState.IDLE:
            self.setCursor(Qt.CursorShape.SizeHorCursor)
        event.accept()

    def mouseMoveEvent(self, event: QMouseEvent) -> None:  # type: ignore[override]
        updated = self._model.move(event.position().x())
        if updated is not None:
            self.update()
            self.levelsChanged.emit(updated)
        event.accept()

    def mouseReleaseEvent(self, event: QMouseEvent) -> None:  # type: ignore[override]
        was_dragging = self._model.state is not DragState.IDLE
        self._model.release()
        self.unsetCursor()
        if was_dragging:
            self.dragFinished.emit()
        event.accept()

    def leaveEvent(self, event) -> None:  # type: ignore[override]
        self._model.leave()
        self.unsetCursor()
        super().leaveEvent(event)

    def paintEvent(self, event) -> None:  # type: ignore[override]
        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.Antialiasing, True)

        width = float(self.width())
        plot_height = max(1.0, float(self.height() - self.handle_band))
        painter.fillRect(QRectF(0.0, 0.0, width, plot_height), self.c_bg)

        colour = self.c_channel[self._model.target]
        bar_width = width / 256.0
        painter.setPen(Qt.PenStyle.NoPen)
        painter.setBrush(colour)
        for index, level in enumerate(self._hist):
            bar_height = float(level) * plot_height
            if bar_height <= 0.0:
                continue
            painter.drawRect(
                QRectF(index * bar_width, plot_height - bar_height, bar_width, bar_height)
            )

        settings = self._model.settings()
        self._paint_clipped(painter, settings, plot_height)
        self._paint_handles(painter, plot_height)
        painter.end()

    # ------------------------------------------------------------------
    # Painting helpers
    def _paint_clipped(self, painter: QPainter, settings: LevelsSettings, plot_height: float) -> None:
        black_x = self._model.value_to_x(settings.input_black)
        white_x = self._model.value_to_x(settings.input_white)
        if black_x > 0.0:
            painter.fillRect(QRectF(0.0, 0.0, black_x, plot_height), self.c_clip)
        if white_x < self.width():
            painter.fillRect(QRectF(white_x, 0.0, self.width() - white_x, plot_height), self.c_clip)

    def _paint_handles(self, painter: QPainter, plot_height: float) -> None:
        black_x, mid_x, white_x = self._model.handle_positions()
        fills = [(black_x, QColor(0, 0, 0)), (white_x, QColor(255, 255, 255))]
        if self._model.show_midpoint_handle():
            fills.append((mid_x, QColor(128, 128, 128)))

        painter.setPen(QPen(self.c_handle_outline, 1.0))
        top = plot_height + 2.0
        for x, fill in fills:
            painter.setBrush(fill)
            painter.drawPolygon(self._handle_polygon(x, top))

        painter.setPen(QPen(QColor(255, 255, 255, 60), 1.0, Qt.PenStyle.DashLine))
        path = QPainterPath()
        for x, _fill in fills:
            path.moveTo(x, 0.0)
            path.lineTo(x, plot_height)
        painter.setBrush(Qt.BrushStyle.NoBrush)
        painter.drawPath(path)

    def _handle_polygon(self, x: float, top: float) -> QPolygonF:
        size = float(self.handle_size)
        return QPolygonF(
            [
                QPointF(x, top),
                QPointF(x - size, top + size * 1.6),
                QPointF(x + size, top + size * 1.6),
            ]
        )


__all__ = ["LevelsHistogramWidget"]
