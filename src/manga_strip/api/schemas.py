"""Request and response models for the HTTP API."""

from pydantic import BaseModel

from manga_strip.domain.generation import ImageModel
from manga_strip.domain.projects import Frame, Project
from manga_strip.domain.session import SessionState
from manga_strip.domain.style import StyleSource


class ProjectNameRequest(BaseModel):
    name: str


class DescriptionRequest(BaseModel):
    description: str


class ModelRequest(BaseModel):
    model: ImageModel


class ManualStyleRequest(BaseModel):
    style_text: str
    character_text: str | None = None


class StyleView(BaseModel):
    """Style template as exposed to clients."""

    source: StyleSource
    text: str
    character_hint: str | None = None
    has_reference_image: bool = False


class SessionView(BaseModel):
    """Snapshot of the editing session."""

    state: SessionState
    ai_enabled: bool
    model: ImageModel
    project: Project | None
    draft: Frame | None
    style: StyleView | None
    error: str | None
