# core/models.py
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class Length(str, Enum):
    SHORT = "short"
    MEDIUM = "medium"
    LONG = "long"


@dataclass(frozen=True)
class LengthProfile:
    label: str               # used in the prompt, e.g. "16 lines"
    display_lines: int
    generation_budget: int   # max_tokens sent to the backend


LENGTH_PROFILES: dict[Length, LengthProfile] = {
    Length.SHORT: LengthProfile(label="8 lines", display_lines=8, generation_budget=200),
    Length.MEDIUM: LengthProfile(label="16 lines", display_lines=16, generation_budget=400),
    Length.LONG: LengthProfile(label="24 lines", display_lines=24, generation_budget=600),
}


def parse_length(value) -> Length | None:
    """Return the Length for an enum member or its string value, None if unknown."""
    if isinstance(value, Length):
        return value
    try:
        return Length(str(value).strip().lower())
    except ValueError:
        return None


@dataclass(frozen=True)
class GenerationRequest:
    theme: str
    mood: str
    length: Length | str = Length.MEDIUM


def split_lines(raw_text: str) -> tuple[str, ...]:
    return tuple(line for line in (raw_text or "").splitlines() if line.strip() != "")


@dataclass(frozen=True)
class LyricDocument:
    raw_text: str
    lines: tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def from_text(cls, raw_text: str) -> "LyricDocument":
        return cls(raw_text=raw_text or "", lines=split_lines(raw_text))

    @classmethod
    def empty(cls) -> "LyricDocument":
        return cls(raw_text="", lines=())

    @property
    def line_count(self) -> int:
        return len(self.lines)

    def is_empty(self) -> bool:
        return not self.lines


@dataclass(frozen=True)
class ExportArtifact:
    data: bytes
    filename: str
    mime_type: str = "image/png"


@dataclass(frozen=True)
class Preset:
    label: str
    theme: str
    mood: str
    length: Length = Length.MEDIUM


PRESETS: tuple[Preset, ...] = (
    Preset(label="Street Life", theme="Street Life", mood="Raw energy"),
    Preset(label="Ocean Vibes", theme="Ocean Waves", mood="Chill"),
    Preset(label="Success Story", theme="Success", mood="Motivational"),
)
