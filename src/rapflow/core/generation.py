"""Lyric request lifecycle.

``GenerationController`` owns the only ``GenerationState`` in the app:

    IDLE --submit--> GENERATING --text--> READY
                                --fail--> ERROR
    READY | ERROR --submit--> GENERATING
    any --reset--> IDLE

Every submit gets a sequence number; a worker result is applied only when it
carries the latest number, so a reply that arrives after ``reset()`` or after a
newer submit is dropped.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional

from PySide6.QtCore import QObject, QThread, Signal, Slot

from rapflow.core.errors import ConcurrentRequestError, EmptyResponseError, ValidationError
from rapflow.core.generation_client import GENERIC_FAILURE
from rapflow.core.models import (
    LENGTH_PROFILES,
    GenerationRequest,
    LengthProfile,
    LyricDocument,
    parse_length,
)

logger = logging.getLogger(__name__)

EMPTY_RESPONSE = "empty response"


class Phase(Enum):
    IDLE = auto()
    GENERATING = auto()
    READY = auto()
    ERROR = auto()


@dataclass(frozen=True)
class GenerationState:
    phase: Phase = Phase.IDLE
    document: Optional[LyricDocument] = None
    message: Optional[str] = None
    detail: Optional[str] = None   # technical detail, never set in production

    @classmethod
    def idle(cls) -> "GenerationState":
        return cls(Phase.IDLE)

    @classmethod
    def generating(cls) -> "GenerationState":
        return cls(Phase.GENERATING)

    @classmethod
    def ready(cls, document: LyricDocument) -> "GenerationState":
        return cls(Phase.READY, document=document)

    @classmethod
    def error(cls, message: str, detail: str | None = None) -> "GenerationState":
        return cls(Phase.ERROR, message=message, detail=detail)


def validate_request(request: GenerationRequest,
                     profiles: dict = LENGTH_PROFILES) -> tuple[GenerationRequest, LengthProfile]:
    """Return the normalized request and its profile or raise ValidationError."""
    theme = (request.theme or "").strip()
    mood = (request.mood or "").strip()
    if not theme or not mood:
        raise ValidationError("Theme and mood are required.")

    length = parse_length(request.length)
    if length is None or length not in profiles:
        raise ValidationError("Invalid length option")

    return GenerationRequest(theme=theme, mood=mood, length=length), profiles[length]


class GenerationController(QObject):
    stateChanged = Signal(object)      # GenerationState
    documentChanged = Signal(object)   # LyricDocument | None

    def __init__(self, client, *, expose_details: bool = False, worker_factory=None,
                 profiles: dict = LENGTH_PROFILES, parent=None):
        super().__init__(parent)
        if worker_factory is None:
            from rapflow.ui.workers.generation_worker import GenerationWorker
            worker_factory = GenerationWorker

        self.client = client
        self.expose_details = expose_details
        self.profiles = profiles
        self._worker_factory = worker_factory

        self._state = GenerationState.idle()
        self._seq = 0
        self._workers: dict[int, QObject] = {}

    # --- public API ---
    @property
    def state(self) -> GenerationState:
        return self._state

    @property
    def document(self) -> Optional[LyricDocument]:
        return self._state.document

    @property
    def sequence(self) -> int:
        return self._seq

    def submit(self, request: GenerationRequest) -> int:
        if self._state.phase is Phase.GENERATING:
            raise ConcurrentRequestError("A generation is already in progress.")

        request, profile = validate_request(request, self.profiles)

        self._seq += 1
        seq = self._seq
        logger.info("Generating lyrics #%d (theme=%r, mood=%r, length=%s)",
                    seq, request.theme, request.mood, request.length.value)
        self._set_state(GenerationState.generating())

        worker = self._worker_factory(seq, self.client, request, profile, parent=self)
        worker.completed.connect(self._on_worker_completed)
        if isinstance(worker, QThread):
            # tracked until the thread has actually stopped, not just reported
            worker.finished.connect(self._on_worker_finished)
            worker.finished.connect(worker.deleteLater)
        self._workers[seq] = worker
        worker.start()
        return seq

    def reset(self) -> None:
        # invalidate whatever is still in flight
        self._seq += 1
        self._set_state(GenerationState.idle())

    def shutdown(self, timeout_ms: Optional[int] = None) -> None:
        """Drop pending results and block until every worker thread has stopped.

        Call before the controller goes away; Qt aborts the process if a
        running QThread is destroyed. Without ``timeout_ms`` this waits as long
        as the client's own request timeout allows.
        """
        self._seq += 1
        for seq, worker in list(self._workers.items()):
            if not isinstance(worker, QThread) or not worker.isRunning():
                continue
            logger.info("Waiting for generation #%d to stop", seq)
            worker.requestInterruption()
            stopped = worker.wait() if timeout_ms is None else worker.wait(timeout_ms)
            if not stopped:
                logger.warning("Generation #%d still running after %d ms", seq, timeout_ms)
        self._workers.clear()

    # --- internal helpers ---
    @Slot(int, object, object)
    def _on_worker_completed(self, seq: int, text, error) -> None:
        if not isinstance(self._workers.get(seq), QThread):
            self._workers.pop(seq, None)

        if seq != self._seq or self._state.phase is not Phase.GENERATING:
            logger.debug("Discarding stale generation result #%d (latest is #%d)", seq, self._seq)
            return

        if error is not None:
            if isinstance(error, EmptyResponseError):
                logger.warning("Generation #%d returned an empty response", seq)
                self._set_state(GenerationState.error(EMPTY_RESPONSE, self._detail_for(error)))
                return
            logger.error("Generation #%d failed: %s", seq, getattr(error, "detail", None) or error)
            self._set_state(GenerationState.error(GENERIC_FAILURE, self._detail_for(error)))
            return

        if not text or not str(text).strip():
            logger.warning("Generation #%d returned an empty response", seq)
            self._set_state(GenerationState.error(EMPTY_RESPONSE))
            return

        document = LyricDocument.from_text(str(text).strip())
        logger.info("Generation #%d ready (%d lines)", seq, document.line_count)
        self._set_state(GenerationState.ready(document))

    @Slot()
    def _on_worker_finished(self) -> None:
        worker = self.sender()
        for seq, w in list(self._workers.items()):
            if w is worker:
                del self._workers[seq]

    def _detail_for(self, error: BaseException) -> Optional[str]:
        if not self.expose_details:
            return None
        return getattr(error, "detail", None) or str(error) or None

    def _set_state(self, state: GenerationState) -> None:
        previous = self._state.document
        self._state = state
        # document listeners (the synchronizer) settle before the UI sees the new state
        if state.document is not previous:
            self.documentChanged.emit(state.document)
        self.stateChanged.emit(state)
