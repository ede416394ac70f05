from __future__ import annotations

import logging

from PySide6.QtCore import Qt, QTimer
from PySide6.QtGui import QGuiApplication, QKeySequence, QShortcut
from PySide6.QtWidgets import (
    QComboBox, QGridLayout, QHBoxLayout, QLabel, QLineEdit, QMainWindow,
    QPushButton, QVBoxLayout, QWidget,
)

from rapflow.core.clipboard import copy_to_clipboard
from rapflow.core.errors import ClipboardError, ConcurrentRequestError, ValidationError
from rapflow.core.export import DEFAULT_IMAGE_FILENAME, text_artifact
from rapflow.core.generation import GenerationState, Phase
from rapflow.core.models import LENGTH_PROFILES, PRESETS, GenerationRequest, Length, Preset
from rapflow.ui.lyrics_view import LyricCard, LyricsView
from rapflow.ui.player_bar import BeatSelector
from rapflow.ui.widgets.toast import ToastManager

logger = logging.getLogger(__name__)

STATUS_IDLE = "Waiting for your cue..."
STATUS_GENERATING = "Crafting your flow..."
STATUS_READY = "Fresh bars ready."


class MainWindow(QMainWindow):
    def __init__(self, app_state):
        super().__init__()
        self.setWindowTitle("Rap Lyrics Generator")
        self.resize(1100, 720)
        self.app_state = app_state
        self.controller = app_state.controller
        self.synchronizer = app_state.synchronizer
        self.compositor = app_state.compositor

        self.central_widget = QWidget()
        self.setCentralWidget(self.central_widget)
        self.layout = QVBoxLayout(self.central_widget)
        self.layout.setContentsMargins(18, 18, 18, 18)
        self.layout.setSpacing(14)

        self.toasts = ToastManager(self)
        self.app_state.notification.connect(self._on_notify)

        # --- header ---
        header = QHBoxLayout()
        titles = QVBoxLayout()
        brand = QLabel("RAPFLOW AI")
        brand.setObjectName("Brand")
        title = QLabel("Rap Lyrics Generator")
        title.setObjectName("Title")
        titles.addWidget(brand)
        titles.addWidget(title)
        header.addLayout(titles, 1)

        self.lbl_status = QLabel(STATUS_IDLE)
        self.lbl_status.setObjectName("Status")
        self.lbl_status.setWordWrap(True)
        self.lbl_status.setMinimumWidth(280)
        header.addWidget(self.lbl_status)
        self.layout.addLayout(header)

        body = QHBoxLayout()
        body.setSpacing(16)
        self.layout.addLayout(body, 1)

        # --- left: form + lyrics ---
        left = QVBoxLayout()
        body.addLayout(left, 2)

        form = QGridLayout()
        self.txt_theme = QLineEdit()
        self.txt_theme.setPlaceholderText("City nights, hustle, dreams...")
        self.txt_mood = QLineEdit()
        self.txt_mood.setPlaceholderText("Confident, mellow, gritty...")
        self.cmb_length = QComboBox()
        for length, profile in LENGTH_PROFILES.items():
            self.cmb_length.addItem(f"{length.value.title()} ({profile.display_lines} bars)", length)
        self._select_length(Length.MEDIUM)

        form.addWidget(QLabel("Theme"), 0, 0)
        form.addWidget(QLabel("Mood"), 0, 1)
        form.addWidget(QLabel("Length"), 0, 2)
        form.addWidget(self.txt_theme, 1, 0)
        form.addWidget(self.txt_mood, 1, 1)
        form.addWidget(self.cmb_length, 1, 2)
        left.addLayout(form)

        actions = QHBoxLayout()
        self.btn_generate = QPushButton("Generate Lyrics")
        self.btn_generate.setObjectName("Generate")
        self.btn_generate.clicked.connect(self.generate)
        self.btn_reset = QPushButton("Reset")
        self.btn_reset.clicked.connect(self.reset)
        actions.addWidget(self.btn_generate, 1)
        actions.addWidget(self.btn_reset)
        left.addLayout(actions)

        lyrics_header = QHBoxLayout()
        lyrics_header.addWidget(QLabel("Your Lyrics"), 1)
        self.btn_copy = QPushButton("Copy")
        self.btn_save = QPushButton("Save")
        self.btn_export = QPushButton("Export as PNG")
        self.btn_copy.clicked.connect(self.copy_lyrics)
        self.btn_save.clicked.connect(self.save_lyrics)
        self.btn_export.clicked.connect(self.export_image)
        for b in (self.btn_copy, self.btn_save, self.btn_export):
            lyrics_header.addWidget(b)
        left.addLayout(lyrics_header)

        self.lyrics_view = LyricsView()
        left.addWidget(self.lyrics_view, 1)

        # --- right: beat, card, presets ---
        right = QVBoxLayout()
        body.addLayout(right, 1)

        self.beat_selector = BeatSelector(self.app_state.player, self.app_state.beats_dir)
        right.addWidget(self.beat_selector)

        self.card = LyricCard(brand=self.app_state.config.watermark)
        right.addWidget(self.card)

        right.addWidget(QLabel("Quick Presets"))
        for preset in PRESETS:
            b = QPushButton(f"{preset.label}\n{preset.theme} • {preset.mood}")
            b.setObjectName("Preset")
            b.clicked.connect(lambda _=False, p=preset: self.apply_preset(p))
            right.addWidget(b)
        right.addStretch(1)

        # --- signals ---
        self.controller.stateChanged.connect(self._on_state_changed)
        self.synchronizer.activeLineChanged.connect(self.lyrics_view.on_active_line)
        self.compositor.exported.connect(lambda path: self.app_state.notify(f"Exported {path.name}", "success"))
        self.compositor.failed.connect(lambda msg: self.app_state.notify(msg, "error"))

        QShortcut(QKeySequence("Ctrl+Return"), self, activated=self.generate)

        self._on_state_changed(self.controller.state)
        self.show_queued_notifications()
        self._apply_styles()

    # ------------------ generation ------------------
    def generate(self):
        request = GenerationRequest(
            theme=self.txt_theme.text(),
            mood=self.txt_mood.text(),
            length=self.cmb_length.currentData(),
        )
        try:
            self.controller.submit(request)
        except ValidationError as e:
            self.lbl_status.setText(str(e))
        except ConcurrentRequestError as e:
            self.app_state.notify(str(e), "warn")

    def reset(self):
        self.controller.reset()
        self.txt_theme.clear()
        self.txt_mood.clear()
        self._select_length(Length.MEDIUM)

    def apply_preset(self, preset: Preset):
        self.txt_theme.setText(preset.theme)
        self.txt_mood.setText(preset.mood)
        self._select_length(preset.length)

    def _on_state_changed(self, state: GenerationState):
        generating = state.phase is Phase.GENERATING
        for w in (self.txt_theme, self.txt_mood, self.cmb_length, self.btn_generate, self.btn_reset):
            w.setEnabled(not generating)
        self.btn_generate.setText(STATUS_GENERATING if generating else "Generate Lyrics")

        has_document = state.document is not None and not state.document.is_empty()
        for b in (self.btn_copy, self.btn_save, self.btn_export):
            b.setEnabled(has_document)

        if state.phase is Phase.IDLE:
            self.lbl_status.setText(STATUS_IDLE)
            self.lyrics_view.set_document(None)
        elif generating:
            self.lbl_status.setText(STATUS_GENERATING)
            self.lyrics_view.show_generating()
        elif state.phase is Phase.READY:
            self.lbl_status.setText(STATUS_READY)
            self.lyrics_view.set_document(state.document)
            # the synchronizer may already know the beat's position
            self.lyrics_view.on_active_line(self.synchronizer.active_line_index)
        else:
            msg = state.message or "Failed to generate lyrics"
            if state.detail:
                msg = f"{msg} ({state.detail})"
            self.lbl_status.setText(msg)
            self.lyrics_view.set_document(None)

        self.card.set_lyrics(state.document.raw_text if has_document else "")

    # ------------------ copy / save / export ------------------
    def copy_lyrics(self):
        document = self.controller.document
        if document is None:
            return
        try:
            copy_to_clipboard(document.raw_text, QGuiApplication.clipboard())
        except ClipboardError as e:
            self.app_state.notify(str(e), "error")
            return
        self.btn_copy.setText("Copied")
        QTimer.singleShot(2000, lambda: self.btn_copy.setText("Copy"))

    def save_lyrics(self):
        artifact = text_artifact(self.controller.document)
        if artifact is None:
            return
        try:
            path = self.app_state.sink.deliver(artifact)
        except OSError as e:
            logger.error("Saving lyrics failed: %s", e)
            self.app_state.notify(f"Could not save lyrics: {e}", "error")
            return
        self.app_state.notify(f"Saved {path.name}", "success")

    def export_image(self):
        document = self.controller.document
        if document is None:
            return
        self.compositor.export(
            self.card,
            document.raw_text,
            self.app_state.config.watermark,
            DEFAULT_IMAGE_FILENAME,
        )

    # ------------------ notifications ------------------
    def show_queued_notifications(self):
        for n in self.app_state.queued_notifications:
            self._on_notify(n)
        self.app_state.queued_notifications.clear()

    def _on_notify(self, n):
        kind = (getattr(n, "notify_type", "info") or "info").lower()
        # Notify uses "warn"; toast supports "warning"
        if kind == "warn":
            kind = "warning"

        msg = getattr(n, "message", "") or ""
        if not msg:
            return

        self.toasts.show_toast(msg, notify_type=kind, timeout_ms=3000)

    # ------------------ helpers ------------------
    def _select_length(self, length: Length):
        idx = self.cmb_length.findData(length)
        if idx >= 0:
            self.cmb_length.setCurrentIndex(idx)

    def closeEvent(self, event):
        self.synchronizer.detach()
        self.controller.shutdown()
        super().closeEvent(event)

    def _apply_styles(self):
        self.setStyleSheet("""
            QMainWindow, QWidget { background: #04080f; color: #e5e7eb; }
            QLabel#Brand { color: #34d399; font-size: 11px; letter-spacing: 3px; }
            QLabel#Title { font-size: 28px; font-weight: 900; }
            QLabel#Status {
                background: #052e1a;
                border: 1px solid #065f46;
                border-radius: 14px;
                padding: 10px 14px;
                color: #d1fae5;
            }
            QLineEdit, QComboBox {
                background: #0b1222;
                border: 1px solid #1f2937;
                border-radius: 12px;
                padding: 8px 12px;
            }
            QLineEdit:focus, QComboBox:focus { border-color: #34d399; }
            QPushButton {
                background: #0b1222;
                border: 1px solid #1f2937;
                border-radius: 12px;
                padding: 8px 14px;
            }
            QPushButton:hover { border-color: #4b5563; }
            QPushButton:disabled { color: #4b5563; }
            QPushButton#Generate { background: #10b981; color: #020611; font-weight: 700; padding: 12px; }
            QPushButton#Generate:disabled { background: #065f46; color: #9ca3af; }
            QPushButton#Preset { text-align: left; padding: 10px 14px; }
        """)
