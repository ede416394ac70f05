# ui/render_surface.py
from __future__ import annotations

import logging
from typing import Optional

from PySide6.QtCore import QBuffer, QByteArray, QCoreApplication, QIODevice, QPoint, QPointF, Qt
from PySide6.QtGui import QColor, QFont, QFontMetricsF, QImage, QPainter
from PySide6.QtWidgets import QWidget

logger = logging.getLogger(__name__)

OFFSCREEN_POS = QPoint(-9999, 0)
WATERMARK_FAMILIES = ["Inter", "Arial", "sans-serif"]


class QtRaster:
    """A rasterized card in plain pixel coordinates."""

    def __init__(self, image: QImage):
        self.image = image
        self.width = image.width()
        self.height = image.height()

    def _font(self, font_px: int) -> QFont:
        f = QFont()
        f.setFamilies(WATERMARK_FAMILIES)
        f.setPixelSize(max(1, int(font_px)))
        return f

    def text_width(self, text: str, font_px: int) -> float:
        return QFontMetricsF(self._font(font_px)).horizontalAdvance(text)

    def draw_text(self, text: str, x: float, y: float, font_px: int, color: tuple, opacity: float) -> None:
        r, g, b, a = color
        p = QPainter(self.image)
        try:
            p.setRenderHint(QPainter.RenderHint.TextAntialiasing, True)
            p.setOpacity(opacity)
            p.setFont(self._font(font_px))
            p.setPen(QColor(r, g, b, int(round(a * 255))))
            p.drawText(QPointF(x, y), text)
        finally:
            p.end()

    def encode_png(self) -> bytes:
        data = QByteArray()
        buf = QBuffer(data)
        buf.open(QIODevice.OpenModeFlag.WriteOnly)
        try:
            ok = self.image.save(buf, "PNG")
        finally:
            buf.close()
        return bytes(data.data()) if ok else b""


class WidgetRenderSurface:
    """
    Render surface for Qt widgets. The node must offer ``clone()`` returning an
    unparented copy of itself without any height limit.
    """

    def wait_ready(self) -> None:
        # let pending font loads, polish and layout requests run first
        QCoreApplication.processEvents()

    def detach(self, node: QWidget) -> QWidget:
        width = max(1, node.width())

        clone = node.clone()
        clone.setAttribute(Qt.WidgetAttribute.WA_DontShowOnScreen, True)
        clone.move(OFFSCREEN_POS)
        clone.setFixedWidth(width)

        # full content height, not whatever the window lets the card show
        if clone.layout() is not None:
            clone.layout().activate()
        height = clone.heightForWidth(width) if clone.hasHeightForWidth() else -1
        height = max(height, clone.sizeHint().height(), 1)
        clone.resize(width, height)
        clone.show()
        return clone

    def rasterize(self, detached: QWidget, scale: float) -> Optional[QtRaster]:
        size = detached.size()
        if size.isEmpty():
            logger.warning("Nothing to rasterize (size %dx%d)", size.width(), size.height())
            return None

        image = QImage(
            int(size.width() * scale),
            int(size.height() * scale),
            QImage.Format.Format_ARGB32_Premultiplied,
        )
        if image.isNull():
            return None
        image.setDevicePixelRatio(scale)
        image.fill(Qt.GlobalColor.transparent)

        p = QPainter(image)
        try:
            detached.render(p, QPoint(0, 0))
        finally:
            p.end()

        # back to raw pixels so overlays are placed in image coordinates
        image.setDevicePixelRatio(1.0)
        return QtRaster(image)

    def release(self, detached: QWidget) -> None:
        detached.hide()
        detached.close()
        detached.deleteLater()
