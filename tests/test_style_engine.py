"""Tests for style template derivation."""

from manga_strip.domain.style import StyleSource
from manga_strip.services.style import (
    REFERENCE_IMAGE_TEXT,
    SCENE_DELIMITER,
    StyleTemplateEngine,
    extract_character_hint,
)


def test_first_frame_template_embeds_description() -> None:
    engine = StyleTemplateEngine()

    assert engine.derive_from_first_frame("a ninja cat, standing in a meadow")

    template = engine.current_template()
    assert template is not None
    assert template.source is StyleSource.FIRST_FRAME
    assert "a ninja cat, standing in a meadow" in template.text
    assert template.character_hint == "a ninja cat"


def test_first_frame_does_not_replace_existing_template() -> None:
    engine = StyleTemplateEngine()
    engine.set_from_reference_image("data:image/png;base64,AAAA")

    assert not engine.derive_from_first_frame("a samurai")
    assert engine.current_template().source is StyleSource.REFERENCE_IMAGE


def test_reference_image_locks_template() -> None:
    engine = StyleTemplateEngine()

    assert engine.set_from_reference_image("data:image/png;base64,AAAA")
    assert not engine.set_from_reference_image("data:image/png;base64,BBBB")

    template = engine.current_template()
    assert template.text == REFERENCE_IMAGE_TEXT
    assert template.reference_image == "data:image/png;base64,AAAA"


def test_locked_first_frame_rejects_reference_image() -> None:
    engine = StyleTemplateEngine()
    engine.derive_from_first_frame("a ninja")

    assert not engine.set_from_reference_image("data:image/png;base64,AAAA")
    assert engine.current_template().source is StyleSource.FIRST_FRAME


def test_manual_overrides_lock() -> None:
    engine = StyleTemplateEngine()
    engine.set_from_reference_image("data:image/png;base64,AAAA")

    assert engine.set_manual("ink wash style", "a tall ronin")

    template = engine.current_template()
    assert template.source is StyleSource.MANUAL
    assert template.text.startswith("ink wash style")
    assert "a tall ronin" in template.text
    assert template.reference_image is None


def test_manual_with_blank_text_is_ignored() -> None:
    engine = StyleTemplateEngine()

    assert not engine.set_manual("  ", None)
    assert engine.current_template() is None


def test_reset_clears_template_and_reference() -> None:
    engine = StyleTemplateEngine()
    engine.set_from_reference_image("data:image/png;base64,AAAA")

    engine.reset()

    assert engine.current_template() is None
    assert engine.set_from_reference_image("data:image/png;base64,BBBB")


def test_compose_places_template_before_description() -> None:
    engine = StyleTemplateEngine()
    assert engine.compose("a duel") == "a duel"

    engine.derive_from_first_frame("a ninja")
    prompt = engine.compose("a duel")

    assert prompt.startswith(engine.current_template().text)
    assert prompt.endswith(f"{SCENE_DELIMITER}a duel")


def test_character_hint_handles_blank_text() -> None:
    assert extract_character_hint("   ") is None
    assert len(extract_character_hint(" ".join(["word"] * 30)).split()) <= 8
