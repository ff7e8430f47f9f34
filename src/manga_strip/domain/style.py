"""Domain models for style templates."""

from dataclasses import dataclass
from enum import Enum


class StyleSource(str, Enum):
    """Where the active style template came from."""

    NONE = "none"
    FIRST_FRAME = "first_frame"
    REFERENCE_IMAGE = "reference_image"
    MANUAL = "manual"

    @property
    def is_locked(self) -> bool:
        return self in {StyleSource.FIRST_FRAME, StyleSource.REFERENCE_IMAGE}


@dataclass(frozen=True)
class StyleTemplate:
    """Text injected ahead of every later scene description."""

    source: StyleSource
    text: str
    character_hint: str | None = None
    reference_image: str | None = None
