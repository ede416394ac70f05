# ui/workers/generation_worker.py
from __future__ import annotations

from PySide6.QtCore import QThread, Signal

from rapflow.core.models import GenerationRequest, LengthProfile


class GenerationWorker(QThread):
    # seq, text (str | None), error (Exception | None)
    completed = Signal(int, object, object)

    def __init__(self, seq: int, client, request: GenerationRequest, profile: LengthProfile, parent=None):
        super().__init__(parent)
        self.seq = seq
        self.client = client
        self.request = request
        self.profile = profile

    def run(self):
        try:
            text = self.client.generate(self.request, self.profile)
        except Exception as e:
            self.completed.emit(self.seq, None, e)
            return
        self.completed.emit(self.seq, text, None)
