# src/rapflow/library/beats.py
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from mutagen import File as MutagenFile
from mutagen._util import MutagenError

logger = logging.getLogger(__name__)

AUDIO_EXTS = {".mp3", ".m4a", ".flac", ".ogg", ".opus", ".wav"}


@dataclass(frozen=True)
class Beat:
    path: Path
    name: str
    duration_s: Optional[float]


def read_duration(path: str | Path) -> Optional[float]:
    try:
        audio = MutagenFile(str(path))
    except (MutagenError, OSError) as e:
        logger.debug("Cannot read %s: %s", path, e)
        return None
    if audio is None or not getattr(audio, "info", None):
        return None
    length = getattr(audio.info, "length", None)
    if not length or length <= 0:
        return None
    return float(length)


def list_beats(directory: str | Path | None) -> list[Beat]:
    if not directory or not os.path.isdir(directory):
        return []

    beats: list[Beat] = []
    for entry in sorted(Path(directory).iterdir(), key=lambda p: p.name.lower()):
        if not entry.is_file() or entry.suffix.lower() not in AUDIO_EXTS:
            continue
        beats.append(Beat(path=entry, name=entry.name, duration_s=read_duration(entry)))
    return beats
