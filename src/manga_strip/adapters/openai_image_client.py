"""OpenAI Images API client for frame generation."""

from dataclasses import dataclass

from openai import AsyncOpenAI

from manga_strip.domain.errors import ConfigurationError
from manga_strip.domain.generation import ImageModel, ImageSize
from manga_strip.services.generation import ImageGenerator


@dataclass
class OpenAIImageClient(ImageGenerator):
    """Image generator backed by the OpenAI Images API."""

    client: AsyncOpenAI
    quality: str = "standard"
    style: str = "vivid"

    @classmethod
    def create(cls, api_key: str | None) -> "OpenAIImageClient":
        """Create an OpenAI image client."""
        if not api_key or not api_key.strip():
            raise ConfigurationError("OpenAI API key is not configured")
        return cls(client=AsyncOpenAI(api_key=api_key))

    async def generate(self, prompt: str, size: ImageSize, model: ImageModel) -> str:
        """Generate one image and return its URL."""
        request_payload: dict[str, object] = {
            "model": model.value,
            "prompt": prompt,
            "size": size.value,
            "n": 1,
        }
        if model is ImageModel.DALL_E_3:
            request_payload["quality"] = self.quality
            request_payload["style"] = self.style

        response = await self.client.images.generate(**request_payload)
        image_url = response.data[0].url if response.data else None
        if not image_url:
            raise RuntimeError("No image URL returned from OpenAI")
        return image_url

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.client.close()
