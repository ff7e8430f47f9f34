"""Domain models for the editing session."""

from enum import Enum


class SessionState(str, Enum):
    """Workflow states of the single active editing session."""

    NO_PROJECT = "no_project"
    BROWSING = "browsing"
    DRAFT_PENDING = "draft_pending"
    DRAFT_READY = "draft_ready"
    FINALIZING = "finalizing"
