"""Style template derivation and prompt composition."""

import logging
import re
from dataclasses import dataclass

from manga_strip.domain.style import StyleSource, StyleTemplate

logger = logging.getLogger(__name__)

SCENE_DELIMITER = " NEW SCENE: "

REFERENCE_IMAGE_TEXT = (
    "Match the uploaded reference image exactly: keep the same art style, "
    "the same character design and proportions, the same colour palette "
    "and the same line-work in every frame."
)

FIRST_FRAME_TEMPLATE = (
    "MASTER TEMPLATE - keep this character and art style identical in every "
    "frame: {description}."
)

_HINT_MAX_WORDS = 8
_CLAUSE_SPLIT = re.compile(r"[,.;:!?]")


@dataclass
class StyleTemplateEngine:
    """Holds the single style template of the active session."""

    _template: StyleTemplate | None = None

    def current_template(self) -> StyleTemplate | None:
        """Return the active template, if any."""
        return self._template

    def set_from_reference_image(self, image_handle: str) -> bool:
        """Lock the template to a reference image unless already locked."""
        if self._is_locked():
            logger.info("Style template already locked; reference image ignored")
            return False
        self._template = StyleTemplate(
            source=StyleSource.REFERENCE_IMAGE,
            text=REFERENCE_IMAGE_TEXT,
            reference_image=image_handle,
        )
        return True

    def derive_from_first_frame(self, description: str) -> bool:
        """Build the master template from the first committed frame."""
        if self._template is not None:
            return False
        cleaned = description.strip()
        self._template = StyleTemplate(
            source=StyleSource.FIRST_FRAME,
            text=FIRST_FRAME_TEMPLATE.format(description=cleaned),
            character_hint=extract_character_hint(cleaned),
        )
        return True

    def set_manual(self, style_text: str, character_text: str | None = None) -> bool:
        """Replace the template with user-entered text, overriding any lock."""
        style = style_text.strip()
        character = (character_text or "").strip()
        if not style and not character:
            return False
        text = " ".join(
            part
            for part in (style, f"Main character: {character}." if character else "")
            if part
        )
        self._template = StyleTemplate(
            source=StyleSource.MANUAL,
            text=text,
            character_hint=character or None,
        )
        return True

    def reset(self) -> None:
        """Clear the template, the reference image and the hint."""
        self._template = None

    def compose(self, description: str) -> str:
        """Return the prompt with the template ahead of the new scene."""
        if self._template is None:
            return description
        return f"{self._template.text}{SCENE_DELIMITER}{description}"

    def _is_locked(self) -> bool:
        return self._template is not None and self._template.source.is_locked


def extract_character_hint(description: str) -> str | None:
    """Return the first clause, trimmed to a few words, for display."""
    clause = _CLAUSE_SPLIT.split(description, maxsplit=1)[0]
    words = clause.split()
    if not words:
        return None
    return " ".join(words[:_HINT_MAX_WORDS])
