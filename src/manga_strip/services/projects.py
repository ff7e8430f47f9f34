"""Durable persistence of the full project list."""

import logging
from dataclasses import dataclass
from typing import Protocol

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from manga_strip.domain.errors import PersistenceError
from manga_strip.domain.projects import Project

logger = logging.getLogger(__name__)

PROJECTS_KEY = "comic-projects"

_PROJECT_LIST = TypeAdapter(list[Project])


class KeyValueStore(Protocol):
    """Persistence interface for string values under string keys."""

    def get(self, key: str) -> str | None:
        """Return the stored value, if present."""

    def set(self, key: str, value: str) -> None:
        """Store a value, replacing any previous one."""


@dataclass
class ProjectStore:
    """Loads and saves every project as a single serialized value."""

    store: KeyValueStore
    key: str = PROJECTS_KEY

    def load(self) -> list[Project]:
        """Return stored projects, or an empty list if absent or unreadable."""
        try:
            raw = self.store.get(self.key)
            if raw is None:
                return []
            return decode_projects(raw)
        except PersistenceError:
            logger.warning("Stored projects are unreadable; starting empty")
            return []

    def save(self, projects: list[Project]) -> None:
        """Persist the full project list, overwriting prior state."""
        self.store.set(self.key, encode_projects(projects))


def encode_projects(projects: list[Project]) -> str:
    """Serialize projects to JSON with ISO 8601 timestamps."""
    return _PROJECT_LIST.dump_json(projects).decode("utf-8")


def decode_projects(raw: str) -> list[Project]:
    """Parse serialized projects, raising PersistenceError on bad data.

    Frame orders are rewritten to 1..N, keeping their stored relative order.
    """
    try:
        projects = _PROJECT_LIST.validate_json(raw)
    except (PydanticValidationError, ValueError) as exc:
        raise PersistenceError(str(exc)) from exc
    for project in projects:
        project.frames.sort(key=lambda frame: frame.order)
        project.renumber_frames()
    return projects
