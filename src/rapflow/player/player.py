# src/rapflow/player/player.py
from __future__ import annotations

import logging
import math
from enum import Enum, auto
from pathlib import Path

from PySide6.QtCore import QObject, QUrl, Signal
from PySide6.QtMultimedia import QAudioOutput, QMediaPlayer

logger = logging.getLogger(__name__)


class PlayerStatus(Enum):
    STOPPED = auto()
    PLAYING = auto()
    PAUSED = auto()


def _ms_to_s(ms: int) -> float:
    return max(0, int(ms)) / 1000.0


class BeatPlayer(QObject):
    """
    Plays the selected beat. Times are reported in seconds; the duration is
    NaN until the media metadata is known.
    """
    statusChanged = Signal(object)      # PlayerStatus
    positionChanged = Signal(float)     # seconds
    durationChanged = Signal(float)     # seconds, NaN while unknown
    errorOccurred = Signal(str)

    def __init__(self, parent=None):
        super().__init__(parent)

        self.status = PlayerStatus.STOPPED
        self.track: str | None = None

        self.audio = QAudioOutput()
        self.media = QMediaPlayer()
        self.media.setAudioOutput(self.audio)

        self.audio.setVolume(0.7)

        self.media.positionChanged.connect(self._on_qt_position)
        self.media.durationChanged.connect(self._on_qt_duration)
        self.media.playbackStateChanged.connect(self._on_qt_state_changed)
        self.media.mediaStatusChanged.connect(self._on_qt_media_status)
        self.media.errorOccurred.connect(self._on_qt_error)

    # ----------------------------
    # Qt backend handlers
    # ----------------------------

    def _on_qt_position(self, ms: int) -> None:
        self.positionChanged.emit(_ms_to_s(ms))

    def _on_qt_duration(self, ms: int) -> None:
        self.durationChanged.emit(self.duration())

    def _on_qt_state_changed(self, state: QMediaPlayer.PlaybackState) -> None:
        if state == QMediaPlayer.PlaybackState.PlayingState:
            self._set_status(PlayerStatus.PLAYING)
        elif state == QMediaPlayer.PlaybackState.PausedState:
            self._set_status(PlayerStatus.PAUSED)
        else:
            self._set_status(PlayerStatus.STOPPED)

    def _on_qt_media_status(self, status: QMediaPlayer.MediaStatus) -> None:
        if status == QMediaPlayer.MediaStatus.EndOfMedia:
            self._set_status(PlayerStatus.STOPPED)

    def _on_qt_error(self, error, message: str = "") -> None:
        # autoplay refusals and decode errors are reported, never raised
        logger.warning("Beat playback error (%s): %s", error, message)
        self.errorOccurred.emit(message or str(error))

    def _set_status(self, new_status: PlayerStatus) -> None:
        if self.status != new_status:
            self.status = new_status
            self.statusChanged.emit(self.status)

    # ----------------------------
    # Public API
    # ----------------------------

    def load(self, path: str | Path, autoplay: bool = True) -> None:
        path = Path(path)
        self.track = path.name

        self.media.setSource(QUrl.fromLocalFile(str(path)))
        if autoplay:
            self.media.play()

    def play(self) -> None:
        self.media.play()

    def pause(self) -> None:
        self.media.pause()

    def toggle_play_pause(self) -> None:
        if self.media.playbackState() == QMediaPlayer.PlaybackState.PlayingState:
            self.pause()
        else:
            self.play()

    def seek(self, seconds: float) -> None:
        self.media.setPosition(max(0, int(float(seconds) * 1000)))

    # convenient getters for UI and the synchronizer
    def position(self) -> float:
        return _ms_to_s(self.media.position())

    def duration(self) -> float:
        ms = int(self.media.duration())
        return ms / 1000.0 if ms > 0 else math.nan
