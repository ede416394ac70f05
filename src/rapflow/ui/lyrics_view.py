# ui/lyrics_view.py
from __future__ import annotations

from typing import Optional

from PySide6.QtCore import Qt
from PySide6.QtGui import QColor, QFont
from PySide6.QtWidgets import (
    QFrame, QLabel, QListWidget, QListWidgetItem, QStackedWidget, QVBoxLayout, QWidget
)

from rapflow.core.models import LyricDocument

ACTIVE_COLOR = QColor("#6ee7b7")
IDLE_COLOR = QColor(255, 255, 255, 110)

CARD_STYLE = """
QFrame#LyricCard {
    background: qlineargradient(x1:0, y1:0, x2:1, y2:1, stop:0 #0b1222, stop:1 #03070e);
    border: 1px solid #1f2937;
    border-radius: 18px;
}
QLabel#LyricHeader { color: #34d399; font-weight: 800; font-size: 15px; letter-spacing: 2px; }
QLabel#LyricText { color: #e5e7eb; font-family: monospace; font-size: 13px; }
QLabel#LyricFooter { color: #6b7280; font-size: 10px; }
"""


class LyricCard(QFrame):
    """
    The card that gets exported. On screen its height is capped; clones used
    for export are not.
    """
    PLACEHOLDER = "Your lyrics will appear here..."

    def __init__(self, brand: str = "RapGen", max_height: Optional[int] = 260, parent=None):
        super().__init__(parent)
        self.brand = brand
        self.setObjectName("LyricCard")
        self.setAttribute(Qt.WidgetAttribute.WA_StyledBackground, True)
        self.setStyleSheet(CARD_STYLE)

        root = QVBoxLayout(self)
        root.setContentsMargins(20, 18, 20, 16)
        root.setSpacing(10)

        self.header = QLabel(brand)
        self.header.setTextFormat(Qt.TextFormat.PlainText)
        self.header.setObjectName("LyricHeader")

        self.text = QLabel(self.PLACEHOLDER)
        self.text.setObjectName("LyricText")
        self.text.setTextFormat(Qt.TextFormat.PlainText)
        self.text.setWordWrap(True)
        self.text.setAlignment(Qt.AlignmentFlag.AlignLeft | Qt.AlignmentFlag.AlignTop)

        self.footer = QLabel(f"exported from {brand}")
        self.footer.setTextFormat(Qt.TextFormat.PlainText)
        self.footer.setObjectName("LyricFooter")

        root.addWidget(self.header)
        root.addWidget(self.text, 1)
        root.addWidget(self.footer)

        if max_height:
            self.setMaximumHeight(max_height)

    def set_lyrics(self, text: str) -> None:
        self.text.setText(text or self.PLACEHOLDER)

    def lyrics(self) -> str:
        t = self.text.text()
        return "" if t == self.PLACEHOLDER else t

    def clone(self) -> "LyricCard":
        copy = LyricCard(brand=self.brand, max_height=None)
        copy.set_lyrics(self.lyrics())
        return copy


class LyricsView(QWidget):
    """
    Generated lyrics, one row per line, with the active line highlighted:
      - empty message before anything is generated
      - "crafting" message while generating
      - line list once a document is ready
    """

    def __init__(self, parent=None):
        super().__init__(parent)
        self._current_index: int = -1

        root = QVBoxLayout(self)
        root.setContentsMargins(0, 0, 0, 0)

        self.stack = QStackedWidget()
        root.addWidget(self.stack, 1)

        self.msg = QLabel()
        self.msg.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.msg.setWordWrap(True)
        self.msg.setStyleSheet("color: #6b7280; padding: 32px;")
        self.stack.addWidget(self.msg)

        self.list = QListWidget()
        self.list.setSelectionMode(QListWidget.SelectionMode.NoSelection)
        self.list.setFocusPolicy(Qt.FocusPolicy.NoFocus)
        self.list.setStyleSheet("""
            QListWidget { background: #03070e; border: 1px solid #111827; border-radius: 14px; padding: 10px; }
            QListWidget::item { padding: 3px 2px; }
        """)
        self.stack.addWidget(self.list)

        self.show_none("No lyrics yet. Feed in a vibe and hit generate.")

    # --- public API ---
    def show_none(self, message: str):
        self._current_index = -1
        self.list.clear()
        self.msg.setText(message)
        self.stack.setCurrentWidget(self.msg)

    def show_generating(self):
        self.show_none("Crafting your flow...")

    def set_document(self, document: Optional[LyricDocument]):
        if document is None or document.is_empty():
            self.show_none("No lyrics yet. Feed in a vibe and hit generate.")
            return

        self._current_index = -1
        self.list.clear()
        font = QFont("monospace")
        for line in document.lines:
            it = QListWidgetItem(line)
            it.setFont(font)
            it.setForeground(IDLE_COLOR)
            self.list.addItem(it)
        self.stack.setCurrentWidget(self.list)

    def on_active_line(self, index: int):
        if index == self._current_index:
            return

        old = self.list.item(self._current_index) if self._current_index >= 0 else None
        if old is not None:
            self._style_item(old, active=False)

        self._current_index = index
        it = self.list.item(index) if index >= 0 else None
        if it is None:
            return

        self._style_item(it, active=True)
        self.list.scrollToItem(it, QListWidget.ScrollHint.PositionAtCenter)

    # --- internal helpers ---
    def _style_item(self, it: QListWidgetItem, active: bool):
        f = it.font()
        f.setBold(active)
        it.setFont(f)
        it.setForeground(ACTIVE_COLOR if active else IDLE_COLOR)
