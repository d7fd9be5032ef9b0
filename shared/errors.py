"""Error taxonomy for the news pipeline."""
from typing import Optional


class PipelineError(Exception):
    """Base class for pipeline errors."""


class FetchError(PipelineError):
    """A feed could not be retrieved (network failure or non-2xx status)."""

    def __init__(self, message: str, status_code: Optional[int] = None, url: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.url = url


class ParseError(PipelineError):
    """Feed content could not be turned into items."""


class PersistenceError(PipelineError):
    """A datastore read or write failed."""


class ConfigurationError(PipelineError):
    """Required connection info or credentials are missing."""
