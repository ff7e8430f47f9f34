"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import TypeVar
from uuid import UUID

from fastapi import FastAPI, HTTPException, Request, status

from manga_strip.api.schemas import (
    DescriptionRequest,
    ManualStyleRequest,
    ModelRequest,
    ProjectNameRequest,
    SessionView,
    StyleView,
)
from manga_strip.app_logging import configure_logging
from manga_strip.containers import AppContainer
from manga_strip.domain.projects import Frame, Project
from manga_strip.domain.style import StyleTemplate
from manga_strip.services.session import ProjectSession

T = TypeVar("T")


def create_app(container: AppContainer) -> FastAPI:  # noqa: PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info(
            "Loaded %d projects (AI %s)",
            len(app.state.container.session.projects),
            "enabled" if app.state.container.settings.ai_enabled else "disabled",
        )
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/session")
    async def get_session(request: Request) -> SessionView:
        """Return the current session snapshot."""
        return _session_view(request.app.state.container)

    @app.post("/session/close")
    async def close_project(request: Request) -> SessionView:
        """Leave the active project."""
        state_container: AppContainer = request.app.state.container
        state_container.session.close_project()
        return _session_view(state_container)

    @app.get("/projects")
    async def list_projects(request: Request) -> dict[str, list[Project]]:
        """Return every stored project."""
        return {"projects": _session(request).projects}

    @app.post("/projects", status_code=status.HTTP_201_CREATED)
    async def create_project(body: ProjectNameRequest, request: Request) -> Project:
        """Create and select a new empty project."""
        return _or_conflict(_session(request).create_project(body.name))

    @app.patch("/projects/{project_id}")
    async def rename_project(
        project_id: UUID, body: ProjectNameRequest, request: Request
    ) -> Project:
        """Rename a project."""
        return _or_conflict(_session(request).rename_project(project_id, body.name))

    @app.delete("/projects/{project_id}")
    async def delete_project(project_id: UUID, request: Request) -> dict[str, str]:
        """Delete a project."""
        if not _session(request).delete_project(project_id):
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
        return {"status": "ok"}

    @app.post("/projects/{project_id}/select")
    async def select_project(project_id: UUID, request: Request) -> SessionView:
        """Make a project active."""
        state_container: AppContainer = request.app.state.container
        if state_container.session.select_project(project_id) is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
        return _session_view(state_container)

    @app.post("/session/generate")
    async def generate(body: DescriptionRequest, request: Request) -> SessionView:
        """Render a new draft frame."""
        state_container: AppContainer = request.app.state.container
        _or_conflict(await state_container.session.generate(body.description))
        return _session_view(state_container)

    @app.post("/session/regenerate")
    async def regenerate(body: DescriptionRequest, request: Request) -> SessionView:
        """Re-render the draft frame."""
        state_container: AppContainer = request.app.state.container
        _or_conflict(await state_container.session.regenerate(body.description))
        return _session_view(state_container)

    @app.post("/session/finalize")
    async def finalize(request: Request) -> Frame:
        """Commit the draft frame."""
        return _or_conflict(_session(request).finalize_frame())

    @app.delete("/session/frames/{frame_id}")
    async def delete_frame(frame_id: UUID, request: Request) -> SessionView:
        """Delete a committed frame from the active project."""
        state_container: AppContainer = request.app.state.container
        if not state_container.session.delete_frame(frame_id):
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
        return _session_view(state_container)

    @app.post("/session/frames/{frame_id}/export")
    async def export_frame(frame_id: UUID, request: Request) -> dict[str, bool]:
        """Upload a frame to the configured export sink."""
        return {"uploaded": await _session(request).export_frame(frame_id)}

    @app.put("/session/model")
    async def set_model(body: ModelRequest, request: Request) -> SessionView:
        """Switch the image model."""
        state_container: AppContainer = request.app.state.container
        state_container.session.set_model(body.model)
        return _session_view(state_container)

    @app.post("/session/reference")
    async def upload_reference(request: Request) -> StyleView:
        """Lock the style to a raw uploaded reference image."""
        template = _session(request).upload_reference(await request.body())
        return _or_conflict(_style_view(template))

    @app.put("/session/style")
    async def set_style(body: ManualStyleRequest, request: Request) -> StyleView:
        """Override the style template with manual text."""
        template = _session(request).set_manual_style(
            body.style_text, body.character_text
        )
        return _or_conflict(_style_view(template))

    @app.delete("/session/style")
    async def reset_style(request: Request) -> SessionView:
        """Clear the style template."""
        state_container: AppContainer = request.app.state.container
        state_container.session.reset_style()
        return _session_view(state_container)

    return app


def _session(request: Request) -> ProjectSession:
    container: AppContainer = request.app.state.container
    return container.session


def _or_conflict(value: T | None) -> T:
    """Map a session no-op to 409 Conflict."""
    if value is None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT)
    return value


def _style_view(template: StyleTemplate | None) -> StyleView | None:
    if template is None:
        return None
    return StyleView(
        source=template.source,
        text=template.text,
        character_hint=template.character_hint,
        has_reference_image=template.reference_image is not None,
    )


def _session_view(container: AppContainer) -> SessionView:
    session = container.session
    return SessionView(
        state=session.state,
        ai_enabled=container.settings.ai_enabled,
        model=session.model,
        project=session.current_project,
        draft=session.draft,
        style=_style_view(session.style_template),
        error=session.last_error,
    )
