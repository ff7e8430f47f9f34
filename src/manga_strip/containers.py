"""Dependency container wiring for the application."""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from manga_strip.adapters.google_drive_client import GoogleDriveExportClient
from manga_strip.adapters.json_file_key_value_store import JsonFileKeyValueStore
from manga_strip.adapters.openai_image_client import OpenAIImageClient
from manga_strip.adapters.supabase_key_value_store import SupabaseKeyValueStore
from manga_strip.config import Settings
from manga_strip.services.export import ExportService
from manga_strip.services.fallback import FallbackSelector
from manga_strip.services.generation import GenerationPipeline
from manga_strip.services.projects import KeyValueStore, ProjectStore
from manga_strip.services.session import ProjectSession
from manga_strip.services.style import StyleTemplateEngine

logger = logging.getLogger(__name__)


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    project_store: ProjectStore
    style_engine: StyleTemplateEngine
    pipeline: GenerationPipeline
    session: ProjectSession
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    project_store = ProjectStore(_build_key_value_store(resolved_settings))
    style_engine = StyleTemplateEngine()

    image_client: OpenAIImageClient | None = None
    if resolved_settings.ai_enabled:
        image_client = OpenAIImageClient.create(resolved_settings.openai_api_key)
    else:
        logger.info("OpenAI key not set; running in demo mode with placeholders")
    pipeline = GenerationPipeline(
        generator=image_client,
        style_engine=style_engine,
        fallback=FallbackSelector(),
        demo_delay_seconds=resolved_settings.demo_delay_seconds,
    )

    drive_client: GoogleDriveExportClient | None = None
    if resolved_settings.google_drive_access_token:
        drive_client = GoogleDriveExportClient.create(
            resolved_settings.google_drive_access_token
        )
    session = ProjectSession(
        project_store=project_store,
        pipeline=pipeline,
        style_engine=style_engine,
        export_service=ExportService(drive_client) if drive_client else None,
        model=resolved_settings.openai_image_model,
    )

    async def close_resources() -> None:
        if image_client is not None:
            await image_client.close()
        if drive_client is not None:
            await drive_client.close()

    return AppContainer(
        settings=resolved_settings,
        project_store=project_store,
        style_engine=style_engine,
        pipeline=pipeline,
        session=session,
        close_resources=close_resources,
    )


def _build_key_value_store(settings: Settings) -> KeyValueStore:
    if settings.uses_supabase:
        client = create_client(settings.supabase_url, settings.supabase_service_key)
        return SupabaseKeyValueStore(client)
    return JsonFileKeyValueStore(settings.state_path)
