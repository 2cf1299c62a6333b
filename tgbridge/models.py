"""Pydantic data models for tgbridge.

Two groups live here:

* Plumbing models used by the request/response core: :class:`Credentials`,
  :class:`RetryPolicy`, :class:`InputFile`, :class:`TransportRequest` and
  :class:`ResponseEnvelope`.
* A small set of Telegram Bot API result types (:class:`User`, :class:`Chat`,
  :class:`Message`, :class:`WebhookInfo`, :class:`Update`) that callers can
  opt into with :meth:`ResponseEnvelope.result_as`.
"""

from __future__ import annotations

import mimetypes
import os
from typing import Any, Dict, List, Literal, Optional, Tuple, Type, TypeVar

from pydantic import BaseModel, Field

DEFAULT_API_BASE_URL = "https://api.telegram.org"

ModelT = TypeVar("ModelT", bound=BaseModel)


# ── Client configuration ─────────────────────────────────────────────────────


class Credentials(BaseModel):
    """Bot token plus the API host it is used against."""

    bot_token: str = Field(repr=False)
    api_base_url: str = DEFAULT_API_BASE_URL

    model_config = {"frozen": True}


class RetryPolicy(BaseModel):
    """Transport-level retry settings, fixed for the lifetime of a client.

    Attributes:
        timeout: Seconds to wait for a single attempt.
        max_attempts: Total attempts per call, including the first one.
        delay_ms: Pause between attempts in milliseconds.
    """

    timeout: float = Field(10.0, gt=0)
    max_attempts: int = Field(3, ge=1)
    delay_ms: int = Field(500, ge=0)

    model_config = {"frozen": True}

    @property
    def delay_seconds(self) -> float:
        return self.delay_ms / 1000


# ── Request side ─────────────────────────────────────────────────────────────


class InputFile(BaseModel):
    """A file to upload in a multipart request (filename + raw bytes)."""

    filename: str = Field(min_length=1)
    content: bytes = Field(repr=False)
    mime_type: str = "application/octet-stream"

    model_config = {"frozen": True}

    @classmethod
    def from_bytes(cls, content: bytes, filename: str, mime_type: Optional[str] = None) -> "InputFile":
        """Wrap in-memory *content*; the MIME type is guessed from *filename*."""
        guessed = mime_type or mimetypes.guess_type(filename)[0] or "application/octet-stream"
        return cls(filename=filename, content=content, mime_type=guessed)

    @classmethod
    def from_path(cls, path: str | os.PathLike[str], mime_type: Optional[str] = None) -> "InputFile":
        """Read the file at *path* into memory.

        Raises:
            FileNotFoundError: If *path* does not exist.
            IsADirectoryError: If *path* is a directory.
        """
        with open(path, "rb") as fh:
            content = fh.read()
        return cls.from_bytes(content, os.path.basename(os.fspath(path)), mime_type)

    def as_multipart(self) -> Tuple[str, bytes, str]:
        """Return the ``(filename, content, mime_type)`` tuple ``requests`` expects."""
        return (self.filename, self.content, self.mime_type)


class TransportRequest(BaseModel):
    """A fully built HTTP request, ready to hand to the transport.

    ``url`` embeds the bot token, so it is excluded from ``repr``.
    """

    method: Literal["GET", "POST"]
    endpoint: str
    url: str = Field(repr=False)
    encoding: Literal["query", "form", "multipart"]
    params: Dict[str, str] = Field(default_factory=dict)
    data: Dict[str, str] = Field(default_factory=dict)
    files: Dict[str, Tuple[str, bytes, str]] = Field(default_factory=dict, repr=False)

    model_config = {"frozen": True}

    @property
    def is_multipart(self) -> bool:
        return self.encoding == "multipart"


# ── Response side ────────────────────────────────────────────────────────────


class ResponseParameters(BaseModel):
    """Contains information about why a request was unsuccessful."""

    migrate_to_chat_id: Optional[int] = None
    retry_after: Optional[int] = None

    model_config = {"populate_by_name": True}


class ResponseEnvelope(BaseModel):
    """The uniform ``{ok, result | error_code, description}`` wrapper.

    Only ``ok`` is typed. Every other key, known or not, is kept exactly as
    Telegram sent it so the envelope round-trips the response unchanged.
    """

    ok: bool
    result: Any = None
    error_code: Any = None
    description: Any = None
    parameters: Any = None

    model_config = {"extra": "allow"}

    def to_dict(self) -> Dict[str, Any]:
        """Return the envelope as the plain dict Telegram sent."""
        return self.model_dump(exclude_unset=True)

    def response_parameters(self) -> Optional[ResponseParameters]:
        """Validate ``parameters`` into :class:`ResponseParameters`.

        Returns ``None`` when the envelope carries no ``parameters`` mapping.

        Raises:
            pydantic.ValidationError: If the mapping holds mistyped fields.
        """
        if not isinstance(self.parameters, dict):
            return None
        return ResponseParameters.model_validate(self.parameters)

    def result_as(self, model: Type[ModelT]) -> ModelT | List[ModelT]:
        """Validate ``result`` into *model* (element-wise for list results).

        Raises:
            pydantic.ValidationError: If ``result`` does not fit *model*.
        """
        if isinstance(self.result, list):
            return [model.model_validate(item) for item in self.result]
        return model.model_validate(self.result)


# ── Telegram result types ────────────────────────────────────────────────────


class User(BaseModel):
    """This object represents a Telegram user or bot."""

    id: int
    is_bot: bool
    first_name: str
    last_name: Optional[str] = None
    username: Optional[str] = None
    language_code: Optional[str] = None
    can_join_groups: Optional[bool] = None
    can_read_all_group_messages: Optional[bool] = None
    supports_inline_queries: Optional[bool] = None

    model_config = {"populate_by_name": True}


class Chat(BaseModel):
    """This object represents a chat."""

    id: int
    type: str
    title: Optional[str] = None
    username: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None

    model_config = {"populate_by_name": True}


class Message(BaseModel):
    """This object represents a message."""

    message_id: int
    date: int
    chat: Chat
    from_field: Optional[User] = Field(None, alias="from")
    sender_chat: Optional[Chat] = None
    reply_to_message: Optional["Message"] = None
    edit_date: Optional[int] = None
    media_group_id: Optional[str] = None
    text: Optional[str] = None
    caption: Optional[str] = None

    model_config = {"populate_by_name": True}


class WebhookInfo(BaseModel):
    """Contains information about the current status of a webhook."""

    url: str
    has_custom_certificate: bool
    pending_update_count: int
    ip_address: Optional[str] = None
    last_error_date: Optional[int] = None
    last_error_message: Optional[str] = None
    max_connections: Optional[int] = None
    allowed_updates: Optional[List[str]] = None

    model_config = {"populate_by_name": True}


class Update(BaseModel):
    """An incoming update. At most one of the optional fields is present.

    Update kinds not modelled here are kept as raw dicts via ``extra``.
    """

    update_id: int
    message: Optional[Message] = None
    edited_message: Optional[Message] = None
    channel_post: Optional[Message] = None
    edited_channel_post: Optional[Message] = None

    model_config = {"populate_by_name": True, "extra": "allow"}
