from __future__ import annotations

from dataclasses import dataclass

from PySide6.QtCore import QObject, Signal, Slot

from rapflow.core.config import AppConfig


@dataclass(frozen=True)
class Notify:
    message: str
    notify_type: str = "info"   # info/success/warn/error


class AppState(QObject):
    notification = Signal(object)   # emits Notify

    def __init__(self, config: AppConfig | None = None):
        super().__init__()
        self.config = config or AppConfig()
        self.client = None
        self.controller = None
        self.synchronizer = None
        self.player = None
        self.compositor = None
        self.sink = None
        self.beats_dir = None
        self.queued_notifications: list[Notify] = []

    def wire(self) -> None:
        """Connect the pieces that must move together."""
        if self.controller is not None and self.synchronizer is not None:
            if self.player is not None:
                self.synchronizer.set_source(self.player)
            self.controller.documentChanged.connect(self.synchronizer.set_document)
        if self.player is not None:
            self.player.errorOccurred.connect(self._on_player_error)

    @Slot(str)
    def _on_player_error(self, message: str):
        track = getattr(self.player, "track", None)
        prefix = f"Could not play {track}" if track else "Could not play beat"
        self.notify(f"{prefix}: {message}" if message else prefix, "error")

    @Slot(str, str)
    def notify(self, message: str, notify_type: str = "info"):
        self.notification.emit(Notify(message=message, notify_type=notify_type))
