"""Error taxonomy shared by the adapter, orchestrator, history store and API."""


class StudioError(Exception):
    """Base class for every error raised by the studio package."""


class ValidationError(StudioError, ValueError):
    """Bad or missing required input. Raised before any network activity."""


class ProviderError(StudioError, RuntimeError):
    """The upstream provider failed or produced no image.

    ``status_code`` is None when the request never got an HTTP response
    (connection failure, timeout) or when the response was a success that
    carried no image URL.
    """

    def __init__(self, message: str, status_code: int | None = None, details=None):
        super().__init__(message)
        self.status_code = status_code
        self.details = details


class NotFoundError(StudioError, KeyError):
    """A history operation referenced an id that is not stored."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else "not found"


class StorageError(StudioError):
    """Persisted history could not be read back."""


class BatchCancelled(StudioError):
    """A batch slot was skipped because the batch was cancelled."""
