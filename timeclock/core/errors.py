from __future__ import annotations

from typing import Any

SESSION_ALREADY_OPEN = "SESSION_ALREADY_OPEN"


class TimeclockError(Exception):
    """Base class for every error raised by the client."""


class TransportError(TimeclockError):
    """Raised when the remote service could not be reached or timed out."""


class StorageError(TimeclockError):
    """Raised when durable key-value storage fails."""


class ApiError(TimeclockError):
    def __init__(
        self,
        *,
        status_code: int,
        message: str,
        code: str | None = None,
        details: Any | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.code = code
        self.message = message
        self.details = details

    def __repr__(self) -> str:
        return f"{type(self).__name__}(status_code={self.status_code}, code={self.code!r}, message={self.message!r})"


class UnauthorizedError(ApiError):
    """The credential is missing, invalid or expired."""


class NotFoundError(ApiError):
    pass


class SessionAlreadyOpenError(ApiError):
    """The server already holds an open work session for this user."""


def _extract_message(status_code: int, body: Any) -> tuple[str, str | None]:
    if isinstance(body, dict):
        code = body.get("code")
        message = body.get("error") or body.get("message") or body.get("detail")
        if isinstance(message, str) and message:
            return message, code if isinstance(code, str) else None
        return f"HTTP {status_code}", code if isinstance(code, str) else None
    if isinstance(body, str) and body.strip():
        return body.strip(), None
    return f"HTTP {status_code}", None


def error_for_response(status_code: int, body: Any) -> ApiError:
    """Map an error response onto the most specific ``ApiError`` subtype."""

    message, code = _extract_message(status_code, body)
    kwargs = {"status_code": status_code, "message": message, "code": code, "details": body}
    if status_code == 401:
        return UnauthorizedError(**kwargs)
    if code == SESSION_ALREADY_OPEN and status_code in {400, 409}:
        return SessionAlreadyOpenError(**kwargs)
    if status_code == 404:
        return NotFoundError(**kwargs)
    return ApiError(**kwargs)
