"""Error taxonomy for the strip generator."""


class MangaStripError(Exception):
    """Base class for application errors."""


class ConfigurationError(MangaStripError):
    """Image generator is not configured."""


class GenerationError(MangaStripError):
    """Image generator call failed at runtime."""


class ValidationError(MangaStripError):
    """Blank input or a missing precondition for a session action."""


class PersistenceError(MangaStripError):
    """Stored project data could not be read."""
