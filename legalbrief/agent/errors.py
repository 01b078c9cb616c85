"""Error types raised by the model backend and the orchestration layer.

The transport layer translates provider exceptions into one of two kinds:

    - TransientBackendError: rate limits, service unavailable, exhausted quota.
      Retried by the RetryingInvoker.
    - PermanentBackendError: anything else (bad request, auth, content policy).
      Never retried.
"""

RETRYABLE_STATUS_CODES = frozenset({429, 503})

# Lowercased markers that providers put in capacity-error messages.
TRANSIENT_MESSAGE_MARKERS = ("quota", "resource_exhausted", "rate limit")


class BackendError(Exception):
    """Base error for failed model backend calls.

    Attributes:
        status_code: HTTP-like status reported by the provider, if any.
    """

    transient = False

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class TransientBackendError(BackendError):
    """Capacity error that may succeed on retry."""

    transient = True


class PermanentBackendError(BackendError):
    """Error that will not go away by retrying."""


class ResearchUnavailableError(Exception):
    """Raised when a deep-research run could not be completed."""


def _status_of(exc: BaseException) -> int | None:
    for attr in ("status_code", "status", "code"):
        value = getattr(exc, attr, None)
        if isinstance(value, int):
            return value
    return None


def backend_error_from(exc: Exception) -> BackendError:
    """Translate a provider exception into a BackendError.

    Args:
        exc: Exception raised by the provider SDK.

    Returns:
        TransientBackendError for capacity errors, PermanentBackendError otherwise.
        BackendError instances are returned unchanged.
    """
    if isinstance(exc, BackendError):
        return exc

    status = _status_of(exc)
    message = str(exc) or type(exc).__name__
    lowered = message.lower()

    if status in RETRYABLE_STATUS_CODES or any(m in lowered for m in TRANSIENT_MESSAGE_MARKERS):
        return TransientBackendError(message, status_code=status)
    return PermanentBackendError(message, status_code=status)


def is_retryable(exc: BaseException) -> bool:
    """Return True if the error is a transient backend failure."""
    return isinstance(exc, BackendError) and exc.transient
