"""Keeps one lyric line highlighted in step with a playing beat.

The beat's length is split evenly across the document's lines; the active line
is the slot the playback position falls into. Positions on a boundary belong
to the later line, positions past the end stay on the last line.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Optional

from PySide6.QtCore import QObject, Signal, Slot

from rapflow.core.models import LyricDocument

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlaybackSyncState:
    line_duration: Optional[float] = None   # seconds per line, None while unknown
    active_line_index: int = -1


def line_duration_for(duration: float, line_count: int) -> Optional[float]:
    try:
        duration = float(duration)
    except (TypeError, ValueError):
        return None
    if line_count <= 0 or not math.isfinite(duration) or duration <= 0:
        return None
    return duration / line_count


def active_line_for(position: float, line_duration: Optional[float], line_count: int) -> int:
    if not line_duration or line_duration <= 0 or line_count <= 0:
        return -1
    try:
        position = float(position)
    except (TypeError, ValueError):
        return -1
    if math.isnan(position):
        return -1
    if math.isinf(position):
        return line_count - 1 if position > 0 else 0
    index = math.floor(position / line_duration)
    return max(0, min(index, line_count - 1))


class PlaybackSynchronizer(QObject):
    """
    Observes a playback source (durationChanged / positionChanged in seconds,
    plus a duration() getter) and never writes to it.
    """
    activeLineChanged = Signal(int)
    stateChanged = Signal(object)   # PlaybackSyncState

    def __init__(self, source=None, parent=None):
        super().__init__(parent)
        self._source = source
        self._connected_source = None
        self._document: Optional[LyricDocument] = None
        self._state = PlaybackSyncState()

    # --- public API ---
    @property
    def state(self) -> PlaybackSyncState:
        return self._state

    @property
    def document(self) -> Optional[LyricDocument]:
        return self._document

    @property
    def active_line_index(self) -> int:
        return self._state.active_line_index

    @property
    def line_count(self) -> int:
        return self._document.line_count if self._document else 0

    def set_source(self, source) -> None:
        """Source to observe from the next document on."""
        self._source = source

    @Slot(object)
    def set_document(self, document: Optional[LyricDocument]) -> None:
        self._disconnect()
        self._document = document
        self._set_state(PlaybackSyncState())
        logger.debug("Synchronizer reset for %d line(s)", self.line_count)

        source = self._source
        if source is None:
            return

        source.durationChanged.connect(self.on_duration)
        source.positionChanged.connect(self.on_position)
        self._connected_source = source

        # metadata may already be loaded
        current = source.duration()
        if line_duration_for(current, self.line_count) is not None:
            self.on_duration(current)

    def detach(self) -> None:
        self._disconnect()
        self._document = None
        self._set_state(PlaybackSyncState())

    @Slot(float)
    def on_duration(self, duration: float) -> None:
        line_duration = line_duration_for(duration, self.line_count)
        if line_duration is None:
            self._set_state(PlaybackSyncState())
            return
        self._set_state(PlaybackSyncState(line_duration, self._state.active_line_index))

    @Slot(float)
    def on_position(self, position: float) -> None:
        line_duration = self._state.line_duration
        if line_duration is None:
            return
        index = active_line_for(position, line_duration, self.line_count)
        self._set_state(PlaybackSyncState(line_duration, index))

    # --- internal helpers ---
    def _disconnect(self) -> None:
        source = self._connected_source
        if source is None:
            return
        self._connected_source = None
        for signal, slot in ((source.durationChanged, self.on_duration),
                             (source.positionChanged, self.on_position)):
            try:
                signal.disconnect(slot)
            except (RuntimeError, TypeError) as e:
                logger.debug("Signal already disconnected: %s", e)

    def _set_state(self, state: PlaybackSyncState) -> None:
        if state == self._state:
            return
        previous = self._state.active_line_index
        self._state = state
        self.stateChanged.emit(state)
        if state.active_line_index != previous:
            self.activeLineChanged.emit(state.active_line_index)
