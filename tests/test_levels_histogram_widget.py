"""Tests for the levels histogram widget."""

import numpy as np
import pytest

pytest.importorskip("PySide6", reason="PySide6 is required for widget tests", exc_type=ImportError)
pytest.importorskip("PySide6.QtWidgets", reason="Qt widgets not available", exc_type=ImportError)

from PySide6.QtCore import QEvent, QPointF, Qt
from PySide6.QtGui import QMouseEvent
from PySide6.QtWidgets import QApplication

from src.symmetryAlign.core.interaction import DragState, LevelsControlModel
from src.symmetryAlign.core.levels import EditTarget, LevelsSession
from src.symmetryAlign.gui.widgets import LevelsHistogramWidget


@pytest.fixture(scope="module")
def qapp() -> QApplication:
    app = QApplication.instance()
    if app is None:
        app = QApplication([])
    yield app


def _mouse(kind: QEvent.Type, x: float, buttons=Qt.MouseButton.LeftButton) -> QMouseEvent:
    point = QPointF(x, 20.0)
    return QMouseEvent(
        kind,
        point,
        point,
        Qt.MouseButton.LeftButton,
        buttons,
        Qt.KeyboardModifier.NoModifier,
    )


@pytest.fixture
def widget(qapp) -> LevelsHistogramWidget:
    model = LevelsControlModel(LevelsSession())
    widget = LevelsHistogramWidget(model)
    widget.resize(280, 140)
    hist = np.zeros(256, dtype=np.int64)
    hist[40:200] = np.arange(160)
    widget.setHistogram(hist)
    yield widget
    widget.deleteLater()


def test_drag_updates_model_and_emits(widget) -> None:
    emitted = []
    finished = []
    widget.levelsChanged.connect(emitted.append)
    widget.dragFinished.connect(lambda: finished.append(True))

    widget.mousePressEvent(_mouse(QEvent.Type.MouseButtonPress, 2.0))
    assert widget.model().state is DragState.DRAGGING_BLACK
    widget.mouseMoveEvent(_mouse(QEvent.Type.MouseMove, 56.0))
    widget.mouseReleaseEvent(_mouse(QEvent.Type.MouseButtonRelease, 56.0, Qt.MouseButton.NoButton))

    assert widget.model().state is DragState.IDLE
    assert [settings.input_black for settings in emitted] == [51]
    assert finished == [True]


def test_hover_without_press_emits_nothing(widget) -> None:
    emitted = []
    widget.levelsChanged.connect(emitted.append)
    widget.mouseMoveEvent(_mouse(QEvent.Type.MouseMove, 100.0, Qt.MouseButton.NoButton))
    assert emitted == []


def test_leaving_cancels_drag(widget) -> None:
    widget.mousePressEvent(_mouse(QEvent.Type.MouseButtonPress, 278.0))
    assert widget.model().state is DragState.DRAGGING_WHITE
    widget.leaveEvent(QEvent(QEvent.Type.Leave))
    assert widget.model().state is DragState.IDLE


def test_target_switch_and_paint(widget) -> None:
    assert widget.setTarget(EditTarget.GREEN)
    widget.model().session.update(EditTarget.GREEN, input_black=30, input_white=220)
    pixmap = widget.grab()
    assert not pixmap.isNull()
    assert widget.model().track_width == pytest.approx(280.0)
