"""Optional export of finished frames to an external sink."""

import logging
from dataclasses import dataclass
from typing import Protocol

from manga_strip.domain.projects import Frame, Project

logger = logging.getLogger(__name__)


class ExportSink(Protocol):
    """Interface for uploading a frame image somewhere outside the app."""

    async def upload(
        self, image_url: str, file_name: str, project_name: str, description: str
    ) -> bool:
        """Upload an image and return True on success."""


@dataclass
class ExportService:
    """Service that exports frames without touching session state."""

    sink: ExportSink

    async def export_frame(self, project: Project, frame: Frame) -> bool:
        """Upload one frame; failures are logged and reported as False."""
        try:
            uploaded = await self.sink.upload(
                image_url=frame.image_url,
                file_name=frame_file_name(frame),
                project_name=project.name,
                description=frame.description,
            )
        except Exception:
            logger.exception("Frame export failed")
            return False
        if not uploaded:
            logger.warning("Export sink rejected frame %s", frame.id)
        return uploaded


def frame_file_name(frame: Frame) -> str:
    """Return the download file name for a frame."""
    return f"frame-{frame.order}.jpg"
