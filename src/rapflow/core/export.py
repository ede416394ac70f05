"""Turns the lyric card into a downloadable PNG, and the lyrics into a .txt.

The compositor only talks to a ``RenderSurface`` (anything that can copy a
visual node off-screen and rasterize it) and a ``DownloadSink`` (anything that
can store an artifact). ``rapflow.ui.render_surface`` provides the Qt surface;
tests use in-memory ones.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Protocol

from PySide6.QtCore import QObject, Signal

from rapflow.core.errors import ExportError
from rapflow.core.models import ExportArtifact, LyricDocument

logger = logging.getLogger(__name__)

SUPERSAMPLE = 2
WATERMARK_INSET_PX = 12
WATERMARK_FONT_PX = 14
WATERMARK_COLOR = (255, 255, 255, 0.65)   # r, g, b, alpha
WATERMARK_OPACITY = 0.6

DEFAULT_IMAGE_FILENAME = "lyrics.png"
DEFAULT_TEXT_FILENAME = "rap-lyrics.txt"
EXPORT_FAILED = "Export failed"


class Raster(Protocol):
    width: int
    height: int

    def text_width(self, text: str, font_px: int) -> float: ...

    def draw_text(self, text: str, x: float, y: float, font_px: int,
                  color: tuple, opacity: float) -> None: ...

    def encode_png(self) -> bytes: ...


class RenderSurface(Protocol):
    def wait_ready(self) -> None: ...

    def detach(self, node): ...

    def rasterize(self, detached, scale: float) -> Optional[Raster]: ...

    def release(self, detached) -> None: ...


class DownloadSink(Protocol):
    def deliver(self, artifact: ExportArtifact) -> Path: ...


class FolderDownloadSink:
    """Writes artifacts into a folder, never overwriting an existing file."""

    def __init__(self, directory: Path):
        self.directory = Path(directory)

    def deliver(self, artifact: ExportArtifact) -> Path:
        self.directory.mkdir(parents=True, exist_ok=True)
        target = self._free_path(Path(artifact.filename).name or DEFAULT_IMAGE_FILENAME)
        target.write_bytes(artifact.data)
        logger.info("Saved %s (%d bytes)", target, len(artifact.data))
        return target

    def _free_path(self, filename: str) -> Path:
        target = self.directory / filename
        stem, suffix = target.stem, target.suffix
        n = 1
        while target.exists():
            target = self.directory / f"{stem} ({n}){suffix}"
            n += 1
        return target


def text_artifact(document: Optional[LyricDocument],
                  filename: str = DEFAULT_TEXT_FILENAME) -> Optional[ExportArtifact]:
    if document is None or not document.raw_text:
        return None
    return ExportArtifact(
        data=document.raw_text.encode("utf-8"),
        filename=filename or DEFAULT_TEXT_FILENAME,
        mime_type="text/plain",
    )


def draw_watermark(raster: Raster, text: str, scale: float) -> None:
    inset = round(WATERMARK_INSET_PX * scale)
    font_px = round(WATERMARK_FONT_PX * scale)
    width = raster.text_width(text, font_px)
    raster.draw_text(
        text,
        raster.width - width - inset,
        raster.height - inset,
        font_px,
        WATERMARK_COLOR,
        WATERMARK_OPACITY,
    )


class ExportCompositor(QObject):
    exported = Signal(object)   # Path
    failed = Signal(str)

    def __init__(self, surface: RenderSurface, sink: DownloadSink, *,
                 scale: float = SUPERSAMPLE, default_watermark: str = "RapGen", parent=None):
        super().__init__(parent)
        self.surface = surface
        self.sink = sink
        self.scale = scale
        self.default_watermark = default_watermark
        self._busy = False

    @property
    def is_exporting(self) -> bool:
        return self._busy

    def export(self, node, text: str, watermark: str | None = None,
               filename: str | None = None) -> Optional[Path]:
        """Rasterize ``node`` into a PNG download. Returns the saved path, or
        None when skipped or failed (failures are emitted on ``failed``)."""
        if not text or self._busy:
            return None
        self._busy = True

        detached = None
        try:
            self.surface.wait_ready()
            detached = self.surface.detach(node)

            raster = self.surface.rasterize(detached, self.scale)
            if raster is None:
                raise ExportError(EXPORT_FAILED, detail="Rasterization produced no image")

            try:
                draw_watermark(raster, watermark or self.default_watermark, self.scale)
            except Exception as e:
                logger.warning("Watermark draw failed: %s", e)

            data = raster.encode_png()
            if not data:
                raise ExportError(EXPORT_FAILED, detail="PNG encoding produced no data")

            path = self.sink.deliver(ExportArtifact(data=data, filename=filename or DEFAULT_IMAGE_FILENAME))
        except Exception as e:
            logger.error("Export failed: %s", getattr(e, "detail", None) or e)
            self.failed.emit(EXPORT_FAILED)
            return None
        finally:
            if detached is not None:
                try:
                    self.surface.release(detached)
                except Exception as e:
                    logger.warning("Could not release export copy: %s", e)
            self._busy = False

        self.exported.emit(path)
        return path
