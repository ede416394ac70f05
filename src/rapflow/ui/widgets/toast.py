from __future__ import annotations

from dataclasses import dataclass

from PySide6.QtCore import QPoint, Qt, QTimer
from PySide6.QtWidgets import QFrame, QHBoxLayout, QLabel, QToolButton, QWidget


@dataclass(frozen=True)
class ToastData:
    message: str
    notify_type: str = "info"  # "info" | "success" | "warning" | "error"
    timeout_ms: int = 3000


def _colors(kind: str) -> tuple[str, str, str]:
    """
    Returns (bg, border, text).
    """
    kind = (kind or "info").lower()
    if kind == "success":
        return "#052e1a", "#16a34a", "#e5e7eb"
    if kind == "warning":
        return "#2a1a05", "#f59e0b", "#e5e7eb"
    if kind == "error":
        return "#2a0a0a", "#ef4444", "#e5e7eb"
    return "#0b1222", "#38bdf8", "#e5e7eb"


class ToastWidget(QFrame):
    def __init__(self, data: ToastData, manager: "ToastManager"):
        super().__init__(manager)
        self.data = data
        self.manager = manager

        bg, border, text = _colors(data.notify_type)
        self.setObjectName("Toast")
        self.setAttribute(Qt.WidgetAttribute.WA_StyledBackground, True)
        self.setStyleSheet(f"""
        QFrame#Toast {{ background: {bg}; border: 1px solid {border}; border-radius: 14px; }}
        QLabel {{ color: {text}; font-size: 12px; }}
        QToolButton {{ border: none; background: transparent; color: {text}; padding: 2px 6px; }}
        """)

        root = QHBoxLayout(self)
        root.setContentsMargins(12, 10, 10, 10)
        root.setSpacing(10)

        self.lbl = QLabel(data.message)
        self.lbl.setWordWrap(True)

        self.btn_close = QToolButton()
        self.btn_close.setText("x")
        self.btn_close.setCursor(Qt.CursorShape.PointingHandCursor)
        self.btn_close.clicked.connect(lambda: self.manager.dismiss(self))

        root.addWidget(self.lbl, 1)
        root.addWidget(self.btn_close, 0, Qt.AlignmentFlag.AlignTop)


class ToastManager(QWidget):
    """
    Overlay that stacks toasts in the top-right corner of its host window.
    """
    def __init__(self, host: QWidget):
        super().__init__(host)
        self.host = host
        self.setAttribute(Qt.WidgetAttribute.WA_NoSystemBackground, True)

        self._toasts: list[ToastWidget] = []
        self._margin = 14
        self._spacing = 10
        self._max_visible = 5

        self.raise_()
        self.show()

    def show_toast(self, message: str, notify_type: str = "info", timeout_ms: int = 3000):
        data = ToastData(message=message, notify_type=notify_type, timeout_ms=timeout_ms)
        toast = ToastWidget(data, self)
        toast.setFixedWidth(min(420, max(260, self.host.width() // 2)))

        # newest on top
        self._toasts.insert(0, toast)
        while len(self._toasts) > self._max_visible:
            self._remove(self._toasts[-1])

        self._layout_toasts()
        QTimer.singleShot(max(500, int(timeout_ms)), lambda: self.dismiss(toast))

    def dismiss(self, toast: ToastWidget):
        if toast in self._toasts:
            self._remove(toast)
            self._layout_toasts()

    def _remove(self, toast: ToastWidget):
        self._toasts.remove(toast)
        toast.hide()
        toast.deleteLater()

    def _layout_toasts(self):
        self.setGeometry(self.host.rect())
        x_right = self.width() - self._margin
        y = self._margin

        for t in self._toasts:
            t.adjustSize()
            t.move(QPoint(x_right - t.width(), y))
            t.show()
            y += t.height() + self._spacing

        # only as tall as the stack so clicks below it reach the window
        self.setFixedHeight(max(1, y))
        self.raise_()
