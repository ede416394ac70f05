# ui/player_bar.py
from __future__ import annotations

import math

from PySide6.QtCore import QByteArray, QSize, Qt
from PySide6.QtGui import QIcon, QPainter, QPixmap
from PySide6.QtSvg import QSvgRenderer
from PySide6.QtWidgets import QComboBox, QHBoxLayout, QLabel, QSlider, QToolButton, QVBoxLayout, QWidget

from rapflow.library.beats import list_beats


def _fmt(seconds: float) -> str:
    if seconds is None or not math.isfinite(seconds):
        return "0:00"
    s = max(0, int(seconds))
    return f"{s // 60}:{s % 60:02d}"


def _svg_icon(path_d: str, size: int = 20, color: str = "#e5e7eb") -> QIcon:
    svg = f"""
    <svg xmlns="http://www.w3.org/2000/svg" width="{size}" height="{size}" viewBox="0 0 24 24">
      <path d="{path_d}" fill="{color}"/>
    </svg>
    """.strip()

    renderer = QSvgRenderer(QByteArray(svg.encode("utf-8")))
    pm = QPixmap(size, size)
    pm.fill(Qt.transparent)

    p = QPainter(pm)
    renderer.render(p)
    p.end()

    return QIcon(pm)


SVG_PLAY = "M8 5v14l11-7L8 5z"
SVG_PAUSE = "M6 5h4v14H6V5zm8 0h4v14h-4V5z"


class BeatSelector(QWidget):
    """
    Picks a beat from the beats folder and drives the player. This is the only
    widget that changes what the player has loaded.
    """

    def __init__(self, player, beats_dir=None, parent=None):
        super().__init__(parent)
        self.player = player
        self.beats_dir = beats_dir

        self._dragging = False

        root = QVBoxLayout(self)
        root.setContentsMargins(12, 12, 12, 12)
        root.setSpacing(8)

        title = QLabel("BEAT SELECTOR")
        title.setObjectName("BeatTitle")
        hint = QLabel("Choose a beat to play instantly")
        hint.setObjectName("BeatHint")
        root.addWidget(title)
        root.addWidget(hint)

        self.cmb_beat = QComboBox()
        self.cmb_beat.setObjectName("BeatCombo")
        root.addWidget(self.cmb_beat)

        # --- transport ---
        transport = QHBoxLayout()
        transport.setSpacing(8)

        self.btn_play = QToolButton()
        self.btn_play.setObjectName("BtnPlay")
        self.btn_play.setIcon(_svg_icon(SVG_PLAY, 22))
        self.btn_play.setIconSize(QSize(22, 22))
        self.btn_play.setToolTip("Play")

        self.lbl_time = QLabel("0:00")
        self.lbl_dur = QLabel("0:00")

        self.slider = QSlider(Qt.Orientation.Horizontal)
        self.slider.setRange(0, 0)
        self.slider.setSingleStep(1000)
        self.slider.setPageStep(5000)

        transport.addWidget(self.btn_play)
        transport.addWidget(self.lbl_time)
        transport.addWidget(self.slider, 1)
        transport.addWidget(self.lbl_dur)
        root.addLayout(transport)

        self.cmb_beat.activated.connect(self._on_beat_chosen)
        self.slider.sliderPressed.connect(self._on_slider_pressed)
        self.slider.sliderReleased.connect(self._on_slider_released)
        self.slider.sliderMoved.connect(lambda ms: self.lbl_time.setText(_fmt(ms / 1000.0)))

        if self.player:
            self.player.statusChanged.connect(self._on_status_changed)
            self.player.positionChanged.connect(self._on_position)
            self.player.durationChanged.connect(self._on_duration)
            self.btn_play.clicked.connect(self.player.toggle_play_pause)
        else:
            self.setEnabled(False)

        self.refresh()
        self.setObjectName("BeatSelector")
        self._apply_styles()

    def refresh(self):
        self.cmb_beat.clear()
        self.cmb_beat.addItem("Select a beat", None)
        self.cmb_beat.model().item(0).setEnabled(False)
        for beat in list_beats(self.beats_dir):
            label = beat.name if beat.duration_s is None else f"{beat.name}  ({_fmt(beat.duration_s)})"
            self.cmb_beat.addItem(label, str(beat.path))
        self.cmb_beat.setCurrentIndex(0)

    # --- beat selection ---
    def _on_beat_chosen(self, index: int):
        path = self.cmb_beat.itemData(index)
        if not path or not self.player:
            return
        self.player.load(path, autoplay=True)

    # --- slider handling ---
    def _on_slider_pressed(self):
        self._dragging = True

    def _on_slider_released(self):
        self._dragging = False
        if self.player:
            self.player.seek(self.slider.value() / 1000.0)

    # --- player updates ---
    def _on_status_changed(self, status):
        playing = getattr(status, "name", "") == "PLAYING"
        self.btn_play.setIcon(_svg_icon(SVG_PAUSE if playing else SVG_PLAY, 22))
        self.btn_play.setToolTip("Pause" if playing else "Play")

    def _on_duration(self, seconds: float):
        ms = int(seconds * 1000) if math.isfinite(seconds) else 0
        self.slider.setRange(0, max(0, ms))
        self.lbl_dur.setText(_fmt(seconds))

    def _on_position(self, seconds: float):
        if self._dragging:
            return
        self.lbl_time.setText(_fmt(seconds))
        self.slider.setValue(int(seconds * 1000))

    def _apply_styles(self):
        self.setStyleSheet("""
        QWidget#BeatSelector {
            background-color: #0b1222;
            border: 1px solid #1f2937;
            border-radius: 16px;
        }
        QLabel#BeatTitle { color: #d1d5db; font-size: 11px; font-weight: 700; letter-spacing: 1px; }
        QLabel#BeatHint { color: #6b7280; font-size: 10px; }

        QToolButton#BtnPlay {
            background: #111827;
            border: 1px solid #1f2937;
            border-radius: 999px;
            padding: 8px;
        }
        QToolButton#BtnPlay:hover { border-color: #34d399; }

        QSlider::groove:horizontal { height: 4px; background: #0f172a; border-radius: 2px; }
        QSlider::handle:horizontal { width: 12px; height: 12px; margin: -4px 0; border-radius: 6px; background: #34d399; }
        QSlider::sub-page:horizontal { background: #34d399; border-radius: 2px; }

        QLabel { color: #9ca3af; font-size: 11px; }

        QComboBox#BeatCombo {
            background: #020617;
            border: 1px solid #1f2937;
            border-radius: 10px;
            padding: 6px 10px;
            color: #e5e7eb;
        }
        QComboBox#BeatCombo:hover { border-color: #34d399; }
        """)
