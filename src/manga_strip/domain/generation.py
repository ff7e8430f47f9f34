"""Models for image generation requests and outcomes."""

from dataclasses import dataclass
from enum import Enum


class ImageSize(str, Enum):
    """Requested output resolution."""

    SMALL = "512x512"
    LARGE = "1024x1024"


class ImageModel(str, Enum):
    """Supported image models, trading resolution for cost."""

    DALL_E_2 = "dall-e-2"
    DALL_E_3 = "dall-e-3"

    @property
    def size(self) -> ImageSize:
        if self is ImageModel.DALL_E_3:
            return ImageSize.LARGE
        return ImageSize.SMALL


@dataclass(frozen=True)
class GenerationOutcome:
    """Result of a generation attempt; always carries a usable image URL."""

    image_url: str
    prompt: str
    used_fallback: bool = False
    error: str | None = None
