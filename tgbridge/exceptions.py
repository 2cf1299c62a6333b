"""Exception hierarchy for the tgbridge Telegram Bot API client.

Every failure a call can produce maps to exactly one of these classes so
callers can catch them separately:

* :class:`InvalidCredentials` -- empty bot token, raised at construction.
* :class:`InvalidPayloadValue` -- a payload field holds an unsupported value.
* :class:`TransportError` -- no usable HTTP response (connection failure,
  timeout, non-2xx status without an API envelope).
* :class:`MalformedResponse` -- the body is not a Telegram envelope.
* :class:`ApiError` -- Telegram answered ``{"ok": false, ...}``.
"""

from typing import Any, Dict, Optional


class TelegramSDKException(Exception):
    """Base class for every error raised by tgbridge."""


class InvalidCredentials(TelegramSDKException, ValueError):
    """Raised when a client is constructed without a usable bot token."""

    def __init__(self, message: str = "Telegram bot token cannot be empty.") -> None:
        super().__init__(message)


class InvalidPayloadValue(TelegramSDKException, TypeError):
    """A payload field cannot be encoded for the request.

    Attributes:
        field: Name of the offending payload field.
        value_type: Type name of the rejected value.
    """

    def __init__(self, field: str, reason: str, value: Any = None) -> None:
        self.field = field
        self.value_type = type(value).__name__
        super().__init__(f"Invalid value for payload field '{field}': {reason}")


class TransportError(TelegramSDKException):
    """The HTTP exchange failed before a usable envelope was obtained.

    Attributes:
        status: HTTP status code, or ``None`` when no response arrived.
    """

    def __init__(self, status: Optional[int] = None, detail: Optional[str] = None) -> None:
        self.status = status
        if status is None:
            message = "Failed to connect to Telegram API"
        else:
            message = f"Failed to connect to Telegram API: {status}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class MalformedResponse(TelegramSDKException):
    """The response body is not a Telegram response envelope.

    Attributes:
        status: HTTP status code of the response.
        body_preview: First 200 characters of the decoded body.
    """

    _PREVIEW_CHARS: int = 200

    def __init__(self, reason: str, status: Optional[int] = None, body: bytes = b"") -> None:
        self.status = status
        self.body_preview = body[: self._PREVIEW_CHARS].decode("utf-8", errors="replace")
        super().__init__(f"Invalid Telegram API response: {reason}")


class ApiError(TelegramSDKException):
    """Telegram rejected the request with ``ok: false``.

    ``description`` is copied verbatim from the response so callers can log
    it or match on it; ``error_code`` mirrors Telegram's numeric code.

    Attributes:
        error_code: Telegram error code (``0`` when the response omitted it).
        description: Telegram's description (``"Unknown error"`` when omitted).
        parameters: Raw ``parameters`` object, e.g. ``{"retry_after": 5}``.
    """

    def __init__(
        self,
        description: str = "Unknown error",
        error_code: int = 0,
        parameters: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.description = description
        self.error_code = error_code
        self.parameters = parameters or {}
        super().__init__(f"Telegram API error: {description} (Code: {error_code})")

    @property
    def retry_after(self) -> Optional[int]:
        """Seconds Telegram asked us to wait, for flood-control (429) errors."""
        value = self.parameters.get("retry_after")
        return value if isinstance(value, int) else None
