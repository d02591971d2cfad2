"""
Error taxonomy for talking to the hiring backend.

- TransientNetworkError: server errors, timeouts, dropped connections. Reads retry.
- NotReadyError: the backend is still warming up or returned a malformed body.
  Retried exactly like a transient failure.
- InvalidRequestError / NotFoundError / ConflictError: the request itself is
  wrong for the current backend state. Never retried.
- DurableLocalError: the local overlay store could not persist a write.
"""

from typing import Any, Optional


class BackendError(Exception):
    """Base class for failures reported by (or on the way to) the backend."""

    retryable: bool = False

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        code: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code

    def __repr__(self) -> str:
        return f"{type(self).__name__}(status_code={self.status_code!r}, message={self.message!r})"


class TransientNetworkError(BackendError):
    """Server error, timeout or transport failure."""

    retryable = True


class NotReadyError(TransientNetworkError):
    """Backend storage not initialized yet, or the response could not be parsed."""


class InvalidRequestError(BackendError):
    """Malformed request (missing fields, invalid stage, out-of-range order)."""


class NotFoundError(BackendError):
    """Referenced entity does not exist."""


class ConflictError(BackendError):
    """Request is stale relative to the backend's current state."""


class DurableLocalError(Exception):
    """Local overlay storage failure (quota, locked file, corrupt database)."""


def extract_error_message(body: Any, default: str) -> tuple[str, Optional[str]]:
    """
    Pull ``(message, code)`` out of an error response body.

    Accepts both ``{"error": {"code": ..., "message": ...}}`` and the flat
    ``{"error": "..."}`` form.
    """
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict):
            return str(error.get("message") or default), error.get("code")
        if isinstance(error, str) and error:
            return error, None
        detail = body.get("detail")
        if isinstance(detail, str) and detail:
            return detail, None
    return default, None


def error_from_response(status_code: int, body: Any = None) -> BackendError:
    """
    Map an HTTP error response to the taxonomy.

    Args:
        status_code: HTTP status of the response
        body: Decoded JSON body, if any

    Returns:
        The matching BackendError subclass instance
    """
    message, code = extract_error_message(body, f"Backend returned HTTP {status_code}")

    if status_code == 503 and code == "NOT_READY":
        return NotReadyError(message, status_code=status_code, code=code)
    if status_code in (400, 422):
        return InvalidRequestError(message, status_code=status_code, code=code)
    if status_code == 404:
        return NotFoundError(message, status_code=status_code, code=code)
    if status_code == 409:
        return ConflictError(message, status_code=status_code, code=code)
    return TransientNetworkError(message, status_code=status_code, code=code)
