"""Shared test fixtures."""

import asyncio
import random
from dataclasses import dataclass, field

import pytest

from manga_strip.config import Settings
from manga_strip.containers import AppContainer
from manga_strip.domain.generation import ImageModel, ImageSize
from manga_strip.services.export import ExportService, ExportSink
from manga_strip.services.fallback import FallbackSelector
from manga_strip.services.generation import GenerationPipeline, ImageGenerator
from manga_strip.services.projects import KeyValueStore, ProjectStore
from manga_strip.services.session import ProjectSession
from manga_strip.services.style import StyleTemplateEngine


@dataclass
class RecordingKeyValueStore(KeyValueStore):
    """In-memory key-value store that counts writes."""

    values: dict[str, str] = field(default_factory=dict)
    writes: int = 0

    def get(self, key: str) -> str | None:
        return self.values.get(key)

    def set(self, key: str, value: str) -> None:
        self.values[key] = value
        self.writes += 1


@dataclass
class FakeImageGenerator(ImageGenerator):
    """Fake generator returning a fixed URL and recording prompts."""

    image_url: str = "https://images.test/generated.png"
    calls: list[tuple[str, ImageSize, ImageModel]] = field(default_factory=list)

    async def generate(self, prompt: str, size: ImageSize, model: ImageModel) -> str:
        self.calls.append((prompt, size, model))
        return self.image_url


@dataclass
class FailingImageGenerator(ImageGenerator):
    """Fake generator that always fails."""

    message: str = "rate limit exceeded"
    calls: int = 0

    async def generate(self, prompt: str, size: ImageSize, model: ImageModel) -> str:
        self.calls += 1
        raise RuntimeError(self.message)


@dataclass
class GatedImageGenerator(ImageGenerator):
    """Fake generator that blocks until released."""

    image_url: str = "https://images.test/gated.png"
    started: asyncio.Event = field(default_factory=asyncio.Event)
    release: asyncio.Event = field(default_factory=asyncio.Event)

    async def generate(self, prompt: str, size: ImageSize, model: ImageModel) -> str:
        self.started.set()
        await self.release.wait()
        return self.image_url


@dataclass
class FakeExportSink(ExportSink):
    """Export sink that records uploads."""

    result: bool = True
    uploads: list[dict[str, str]] = field(default_factory=list)

    async def upload(
        self, image_url: str, file_name: str, project_name: str, description: str
    ) -> bool:
        self.uploads.append(
            {
                "image_url": image_url,
                "file_name": file_name,
                "project_name": project_name,
                "description": description,
            }
        )
        return self.result


def build_session(
    generator: ImageGenerator | None = None,
    store: RecordingKeyValueStore | None = None,
    export_sink: ExportSink | None = None,
) -> ProjectSession:
    """Build a session with demo delays disabled."""
    style_engine = StyleTemplateEngine()
    pipeline = GenerationPipeline(
        generator=generator,
        style_engine=style_engine,
        fallback=FallbackSelector(rng=random.Random(7)),
        demo_delay_seconds=0,
    )
    return ProjectSession(
        project_store=ProjectStore(store or RecordingKeyValueStore()),
        pipeline=pipeline,
        style_engine=style_engine,
        export_service=ExportService(export_sink) if export_sink else None,
    )


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        openai_api_key=None,
        demo_delay_seconds=0,
        supabase_url=None,
        supabase_service_key=None,
        google_drive_access_token=None,
        state_path=tmp_path / "state.json",
    )


@pytest.fixture
def key_value_store() -> RecordingKeyValueStore:
    return RecordingKeyValueStore()


@pytest.fixture
def export_sink() -> FakeExportSink:
    return FakeExportSink()


@pytest.fixture
def container(
    settings: Settings,
    key_value_store: RecordingKeyValueStore,
    export_sink: FakeExportSink,
) -> AppContainer:
    session = build_session(store=key_value_store, export_sink=export_sink)

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        project_store=session.project_store,
        style_engine=session.style_engine,
        pipeline=session.pipeline,
        session=session,
        close_resources=close_resources,
    )
