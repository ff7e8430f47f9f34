"""Style-consistent image generation with a fallback policy."""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Protocol

from manga_strip.domain.errors import ConfigurationError, GenerationError
from manga_strip.domain.generation import GenerationOutcome, ImageModel, ImageSize
from manga_strip.services.fallback import FallbackSelector
from manga_strip.services.style import StyleTemplateEngine

logger = logging.getLogger(__name__)

STYLE_DIRECTION_SUFFIX = (
    ". Anime manga style digital artwork, clean vector art, bold black "
    "outlines, flat cel-shaded colors, no gradients, solid color fills, "
    "crisp digital illustration, bright saturated colors, not realistic "
    "or photographic."
)


class ImageGenerator(Protocol):
    """Interface for the external text-to-image provider."""

    async def generate(self, prompt: str, size: ImageSize, model: ImageModel) -> str:
        """Return the URL of an image rendered from the prompt."""


@dataclass
class GenerationPipeline:
    """Compose prompts, call the generator once and fall back on failure."""

    generator: ImageGenerator | None
    style_engine: StyleTemplateEngine
    fallback: FallbackSelector = field(default_factory=FallbackSelector)
    demo_delay_seconds: float = 2.0

    def build_prompt(self, description: str, *, has_frames: bool) -> str:
        """Return the prompt sent to the generator for a description."""
        if self.style_engine.current_template() is not None and has_frames:
            return self.style_engine.compose(description)
        return f"{description}{STYLE_DIRECTION_SUFFIX}"

    async def produce(
        self, description: str, *, model: ImageModel, has_frames: bool
    ) -> GenerationOutcome:
        """Return an image for the description; never raises."""
        prompt = self.build_prompt(description, has_frames=has_frames)
        try:
            image_url = await self._call_generator(prompt, model)
        except ConfigurationError:
            await asyncio.sleep(self.demo_delay_seconds)
            return GenerationOutcome(
                image_url=self.fallback.select(description),
                prompt=prompt,
                used_fallback=True,
            )
        except GenerationError as exc:
            return GenerationOutcome(
                image_url=self.fallback.select(description),
                prompt=prompt,
                used_fallback=True,
                error=str(exc),
            )
        return GenerationOutcome(image_url=image_url, prompt=prompt)

    async def _call_generator(self, prompt: str, model: ImageModel) -> str:
        if self.generator is None:
            raise ConfigurationError("Image generator is not configured")
        try:
            return await self.generator.generate(prompt, model.size, model)
        except Exception as exc:
            logger.exception("Image generation failed")
            raise GenerationError(str(exc) or "Failed to generate image") from exc
