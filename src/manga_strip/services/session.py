"""Session state machine for building a strip frame by frame."""

import logging
from dataclasses import dataclass, field
from uuid import UUID

from manga_strip.domain.errors import ValidationError
from manga_strip.domain.generation import GenerationOutcome, ImageModel
from manga_strip.domain.projects import Frame, Project
from manga_strip.domain.session import SessionState
from manga_strip.domain.style import StyleSource, StyleTemplate
from manga_strip.services.export import ExportService
from manga_strip.services.generation import GenerationPipeline
from manga_strip.services.projects import ProjectStore
from manga_strip.services.references import to_data_url
from manga_strip.services.style import StyleTemplateEngine

logger = logging.getLogger(__name__)

_SESSION_SCOPED_SOURCES = {StyleSource.REFERENCE_IMAGE, StyleSource.MANUAL}


@dataclass
class ProjectSession:
    """Owns the active project and its single draft frame.

    Blank input and missing preconditions are silent no-ops: the operation
    returns None or False and nothing is mutated or persisted.
    """

    project_store: ProjectStore
    pipeline: GenerationPipeline
    style_engine: StyleTemplateEngine
    export_service: ExportService | None = None
    model: ImageModel = ImageModel.DALL_E_2
    projects: list[Project] = field(init=False)
    current_project_id: UUID | None = field(init=False, default=None)
    draft: Frame | None = field(init=False, default=None)
    state: SessionState = field(init=False, default=SessionState.NO_PROJECT)
    last_error: str | None = field(init=False, default=None)
    _pending: bool = field(init=False, default=False)
    _epoch: int = field(init=False, default=0)

    def __post_init__(self) -> None:
        self.projects = self.project_store.load()

    @property
    def current_project(self) -> Project | None:
        """Return the project being edited, if any."""
        if self.current_project_id is None:
            return None
        return self._find_project(self.current_project_id)

    @property
    def is_generating(self) -> bool:
        return self._pending

    @property
    def style_template(self) -> StyleTemplate | None:
        return self.style_engine.current_template()

    def select_project(self, project_id: UUID) -> Project | None:
        """Make a project active, discarding a draft from another project."""
        project = self._find_project(project_id)
        if project is None:
            return None
        if project_id != self.current_project_id:
            self._activate(project)
        elif self.draft is None and not self._pending:
            self.state = SessionState.BROWSING
        self.last_error = None
        return project

    def create_project(self, name: str) -> Project | None:
        """Append a new empty project, select it and persist."""
        try:
            cleaned = _require_text(name, "project name")
        except ValidationError as exc:
            logger.debug("Create project ignored: %s", exc)
            return None
        project = Project(name=cleaned)
        self.projects.append(project)
        self._activate(project)
        self.last_error = None
        self._save()
        return project

    def rename_project(self, project_id: UUID, name: str) -> Project | None:
        """Rename a project and persist."""
        project = self._find_project(project_id)
        try:
            cleaned = _require_text(name, "project name")
        except ValidationError as exc:
            logger.debug("Rename project ignored: %s", exc)
            return None
        if project is None:
            return None
        project.name = cleaned
        project.touch()
        self._save()
        return project

    def delete_project(self, project_id: UUID) -> bool:
        """Remove a project, clearing the session if it was active."""
        project = self._find_project(project_id)
        if project is None:
            return False
        self.projects = [item for item in self.projects if item.id != project_id]
        if project_id == self.current_project_id:
            self._deactivate()
        self.last_error = None
        self._save()
        return True

    def close_project(self) -> None:
        """Return to the project list, discarding any draft."""
        if self.current_project_id is not None:
            self._deactivate()
        self.last_error = None

    def set_model(self, model: ImageModel) -> None:
        """Select the image model used for later generations."""
        self.model = model
        self.last_error = None

    async def generate(self, description: str) -> Frame | None:
        """Render a new draft frame for the active project."""
        try:
            text = _require_text(description, "description")
            project = self._require_project()
            self._require_idle()
        except ValidationError as exc:
            logger.debug("Generate ignored: %s", exc)
            return None
        outcome = await self._run_generation(text, project)
        if outcome is None:
            return None
        self.draft = Frame(
            image_url=outcome.image_url,
            description=text,
            order=len(project.frames) + 1,
        )
        self.last_error = outcome.error
        self.state = SessionState.DRAFT_READY
        return self.draft

    async def regenerate(self, description: str) -> Frame | None:
        """Re-render the draft in place, keeping its id and order."""
        try:
            text = _require_text(description, "description")
            project = self._require_project()
            draft = self._require_draft()
            self._require_idle()
        except ValidationError as exc:
            logger.debug("Regenerate ignored: %s", exc)
            return None
        outcome = await self._run_generation(text, project)
        if outcome is None or self.draft is None or self.draft.id != draft.id:
            return None
        self.draft = self.draft.model_copy(
            update={"image_url": outcome.image_url, "description": text}
        )
        self.last_error = outcome.error
        self.state = SessionState.DRAFT_READY
        return self.draft

    def finalize_frame(self) -> Frame | None:
        """Commit the draft into the active project and persist."""
        try:
            project = self._require_project()
            draft = self._require_draft()
            self._require_idle()
        except ValidationError as exc:
            logger.debug("Finalize ignored: %s", exc)
            return None
        self.state = SessionState.FINALIZING
        if not project.frames and self.style_engine.current_template() is None:
            self.style_engine.derive_from_first_frame(draft.description)
        committed = draft.model_copy(
            update={"is_finalized": True, "order": len(project.frames) + 1}
        )
        project.frames.append(committed)
        project.touch()
        self.draft = None
        self.last_error = None
        self._save()
        self.state = SessionState.BROWSING
        return committed

    def delete_frame(self, frame_id: UUID) -> bool:
        """Remove a committed frame and renumber the rest from 1."""
        project = self.current_project
        if project is None:
            return False
        remaining = [frame for frame in project.frames if frame.id != frame_id]
        if len(remaining) == len(project.frames):
            return False
        project.frames = remaining
        project.renumber_frames()
        project.touch()
        if self.draft is not None:
            self.draft = self.draft.model_copy(
                update={"order": len(project.frames) + 1}
            )
        if not project.frames:
            self.style_engine.reset()
        self.last_error = None
        self._save()
        return True

    def upload_reference(self, image_bytes: bytes) -> StyleTemplate | None:
        """Lock the style template to an uploaded reference image."""
        try:
            handle = to_data_url(image_bytes)
        except ValidationError as exc:
            logger.debug("Reference upload ignored: %s", exc)
            return None
        if not self.style_engine.set_from_reference_image(handle):
            return None
        self.last_error = None
        return self.style_engine.current_template()

    def set_manual_style(
        self, style_text: str, character_text: str | None = None
    ) -> StyleTemplate | None:
        """Override the style template with user-entered text."""
        if not self.style_engine.set_manual(style_text, character_text):
            return None
        self.last_error = None
        return self.style_engine.current_template()

    def reset_style(self) -> None:
        """Clear the style template and any held reference image."""
        self.style_engine.reset()
        self.last_error = None

    async def export_frame(self, frame_id: UUID) -> bool:
        """Send a committed or draft frame to the export sink."""
        project = self.current_project
        if self.export_service is None or project is None:
            return False
        frame = next((item for item in project.frames if item.id == frame_id), None)
        if frame is None and self.draft is not None and self.draft.id == frame_id:
            frame = self.draft
        if frame is None:
            return False
        return await self.export_service.export_frame(project, frame)

    async def _run_generation(
        self, text: str, project: Project
    ) -> GenerationOutcome | None:
        epoch = self._epoch
        previous_state = self.state
        self._pending = True
        self.state = SessionState.DRAFT_PENDING
        try:
            outcome = await self.pipeline.produce(
                text, model=self.model, has_frames=bool(project.frames)
            )
        except BaseException:
            if epoch == self._epoch:
                self.state = previous_state
            raise
        finally:
            self._pending = False
        if epoch != self._epoch:
            logger.info("Discarding generation for project %s", project.id)
            return None
        return outcome

    def _activate(self, project: Project) -> None:
        self._epoch += 1
        self.current_project_id = project.id
        self.draft = None
        self.state = SessionState.BROWSING
        self._restore_style(project)

    def _deactivate(self) -> None:
        self._epoch += 1
        self.current_project_id = None
        self.draft = None
        self.state = SessionState.NO_PROJECT
        self._restore_style(None)

    def _restore_style(self, project: Project | None) -> None:
        template = self.style_engine.current_template()
        if template is not None and template.source in _SESSION_SCOPED_SOURCES:
            return
        self.style_engine.reset()
        if project is not None and project.frames:
            self.style_engine.derive_from_first_frame(project.frames[0].description)

    def _require_project(self) -> Project:
        project = self.current_project
        if project is None:
            raise ValidationError("no active project")
        return project

    def _require_draft(self) -> Frame:
        if self.draft is None:
            raise ValidationError("no draft frame")
        return self.draft

    def _require_idle(self) -> None:
        if self._pending:
            raise ValidationError("a generation is already pending")

    def _find_project(self, project_id: UUID) -> Project | None:
        return next((item for item in self.projects if item.id == project_id), None)

    def _save(self) -> None:
        self.project_store.save(self.projects)


def _require_text(value: str, label: str) -> str:
    cleaned = value.strip()
    if not cleaned:
        raise ValidationError(f"{label} is blank")
    return cleaned
