"""Domain models for strip projects and their frames."""

from datetime import UTC, datetime
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


class Frame(BaseModel):
    """Single generated image and its description within a project."""

    id: UUID = Field(default_factory=uuid4)
    image_url: str
    description: str
    is_finalized: bool = False
    order: int = Field(ge=1)


class Project(BaseModel):
    """Named, ordered sequence of committed frames."""

    id: UUID = Field(default_factory=uuid4)
    name: str
    frames: list[Frame] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=_utcnow)
    last_modified: datetime = Field(default_factory=_utcnow)

    def touch(self) -> None:
        """Mark the project as modified now."""
        self.last_modified = _utcnow()

    def renumber_frames(self) -> None:
        """Rewrite frame orders to 1..N following list position."""
        self.frames = [
            frame.model_copy(update={"order": index})
            for index, frame in enumerate(self.frames, start=1)
        ]
