"""TelegramClient -- facade over RequestBuilder, the transport and ResponseNormalizer.

Every public endpoint method has the same shape: required parameters plus an
optional ``options`` mapping of extra Telegram fields.  Options are merged
last-write-wins over the required fields.  HTTP calls use the ``requests``
library; blocking I/O can be moved off the event loop with :meth:`acall`.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Dict, Mapping, Optional, Union

import requests

from tgbridge.config import TelegramSettings, load_settings
from tgbridge.exceptions import InvalidCredentials, InvalidPayloadValue, TransportError
from tgbridge.models import (
    DEFAULT_API_BASE_URL,
    Credentials,
    InputFile,
    ResponseEnvelope,
    RetryPolicy,
    TransportRequest,
)
from tgbridge.request_builder import RequestBuilder
from tgbridge.response import ResponseNormalizer

_logger = logging.getLogger("tgbridge.client")

ChatId = Union[int, str]
Media = Union[str, InputFile]
Options = Optional[Mapping[str, Any]]


class TelegramClient:
    """Client for the Telegram Bot API.

    The client keeps no per-call state of its own.  Calls may run concurrently
    provided the transport is safe for concurrent use; a shared
    ``requests.Session`` is not documented as thread-safe, so give each thread
    its own client (or session) when in doubt.

    Raises:
        InvalidCredentials: From the constructor, when *bot_token* is empty.
    """

    def __init__(
        self,
        bot_token: str,
        api_base_url: Optional[str] = None,
        retry_policy: Optional[RetryPolicy] = None,
        session: Optional[requests.Session] = None,
        default_chat_id: Optional[ChatId] = None,
    ) -> None:
        """Create a client.

        Args:
            bot_token: Token obtained from BotFather.
            api_base_url: Bot API host, defaults to ``https://api.telegram.org``.
            retry_policy: Timeout/attempt/delay settings for every call.
            session: ``requests.Session`` to send requests with; a new one is
                created (and closed by :meth:`__exit__`) when omitted.
            default_chat_id: Chat used by :meth:`notify`.
        """
        if not isinstance(bot_token, str) or bot_token == "":
            raise InvalidCredentials()

        self._credentials = Credentials(
            bot_token=bot_token,
            api_base_url=api_base_url if api_base_url is not None else DEFAULT_API_BASE_URL,
        )
        self._retry_policy = retry_policy or RetryPolicy()
        self._owns_session = session is None
        self._session = session or requests.Session()
        self._default_chat_id = default_chat_id
        self._builder = RequestBuilder(self._credentials)
        self._normalizer = ResponseNormalizer()

    @classmethod
    def from_settings(cls, settings: TelegramSettings, session: Optional[requests.Session] = None) -> "TelegramClient":
        """Build a client from resolved :class:`~tgbridge.config.TelegramSettings`."""
        return cls(
            settings.bot_token,
            api_base_url=settings.api_base_url,
            retry_policy=settings.retry_policy(),
            session=session,
            default_chat_id=settings.default_chat_id,
        )

    @classmethod
    def from_env(cls, env_file: Optional[str] = None) -> "TelegramClient":
        """Build a client from ``TELEGRAM_*`` environment variables."""
        return cls.from_settings(load_settings(env_file))

    def __enter__(self) -> "TelegramClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._owns_session:
            self._session.close()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(api_base_url={self._credentials.api_base_url!r})"

    # ------------------------------------------------------------------
    #  Accessors
    # ------------------------------------------------------------------

    def get_bot_token(self) -> str:
        return self._credentials.bot_token

    def get_api_base_url(self) -> str:
        return self._credentials.api_base_url

    @property
    def retry_policy(self) -> RetryPolicy:
        return self._retry_policy

    # ------------------------------------------------------------------
    #  Core call path
    # ------------------------------------------------------------------

    def call(
        self,
        endpoint: str,
        payload: Options = None,
        attachments: Optional[Mapping[str, InputFile]] = None,
        method: str = "POST",
    ) -> ResponseEnvelope:
        """Call any Bot API *endpoint* and return its envelope.

        Raises:
            InvalidPayloadValue: A payload value cannot be encoded.
            TransportError: No usable response after all retry attempts.
            MalformedResponse: The response is not a Telegram envelope.
            ApiError: Telegram returned ``ok: false``.
        """
        request = self._builder.build(method, endpoint, payload, attachments)
        return self._execute(request)

    async def acall(
        self,
        endpoint: str,
        payload: Options = None,
        attachments: Optional[Mapping[str, InputFile]] = None,
        method: str = "POST",
    ) -> ResponseEnvelope:
        """Run :meth:`call` in a worker thread to keep the event loop free."""
        return await asyncio.to_thread(self.call, endpoint, payload, attachments, method)

    def _execute(self, request: TransportRequest) -> ResponseEnvelope:
        """Send *request*, retrying transport failures per the retry policy.

        ``ApiError`` and ``MalformedResponse`` propagate on the first attempt.
        """
        policy = self._retry_policy
        last_error: Optional[TransportError] = None

        for attempt in range(1, policy.max_attempts + 1):
            _logger.debug(
                "Sending request",
                extra={"api_endpoint": request.endpoint, "attempt": attempt, "encoding": request.encoding},
            )
            try:
                response = self._session.request(
                    request.method,
                    request.url,
                    params=request.params or None,
                    data=request.data or None,
                    files=request.files or None,
                    timeout=policy.timeout,
                )
            except (requests.ConnectionError, requests.Timeout) as exc:
                last_error = TransportError(None, type(exc).__name__)
                last_error.__cause__ = exc
            except requests.RequestException as exc:
                raise TransportError(None, type(exc).__name__) from exc
            else:
                try:
                    envelope = self._normalizer.parse(response.status_code, response.content)
                except TransportError as exc:
                    last_error = exc
                else:
                    _logger.info("Request succeeded", extra={"api_endpoint": request.endpoint, "attempt": attempt})
                    return envelope

            if attempt < policy.max_attempts:
                _logger.warning(
                    "Transport failure, retrying",
                    extra={"api_endpoint": request.endpoint, "attempt": attempt, "status_code": last_error.status, "error": str(last_error)},
                )
                time.sleep(policy.delay_seconds)

        _logger.error(
            "Transport failure, giving up",
            extra={"api_endpoint": request.endpoint, "attempts": policy.max_attempts, "status_code": last_error.status},
        )
        raise last_error

    @staticmethod
    def _merge(endpoint: str, required: Dict[str, Any], options: Options) -> Dict[str, Any]:
        """Merge *options* over *required*; later keys win."""
        payload = dict(required)
        for key, value in (options or {}).items():
            if key in required:
                _logger.warning("Option overrides required field", extra={"api_endpoint": endpoint, "field": key})
            payload[key] = value
        return payload

    # ------------------------------------------------------------------
    #  Endpoints
    # ------------------------------------------------------------------

    def get_me(self) -> ResponseEnvelope:
        """Return basic information about the bot. Useful to check the token."""
        return self.call("getMe", method="GET")

    def send_message(self, chat_id: ChatId, text: str, options: Options = None) -> ResponseEnvelope:
        """Send a text message. Options: ``parse_mode``, ``reply_markup``, ``reply_to_message_id``..."""
        payload = self._merge("sendMessage", {"chat_id": chat_id, "text": text}, options)
        return self.call("sendMessage", payload)

    def send_photo(self, chat_id: ChatId, photo: Media, options: Options = None) -> ResponseEnvelope:
        """Send a photo by URL/file_id, or upload an :class:`InputFile`."""
        payload = self._merge("sendPhoto", {"chat_id": chat_id, "photo": photo}, options)
        return self.call("sendPhoto", payload)

    def send_video(self, chat_id: ChatId, video: Media, options: Options = None) -> ResponseEnvelope:
        """Send a video by URL/file_id, or upload an :class:`InputFile`."""
        payload = self._merge("sendVideo", {"chat_id": chat_id, "video": video}, options)
        return self.call("sendVideo", payload)

    def send_document(self, chat_id: ChatId, document: Media, options: Options = None) -> ResponseEnvelope:
        """Send a general file by URL/file_id, or upload an :class:`InputFile`."""
        payload = self._merge("sendDocument", {"chat_id": chat_id, "document": document}, options)
        return self.call("sendDocument", payload)

    def send_location(self, chat_id: ChatId, latitude: float, longitude: float, options: Options = None) -> ResponseEnvelope:
        """Send a point on the map. Options: ``live_period``, ``heading``..."""
        payload = self._merge(
            "sendLocation",
            {"chat_id": chat_id, "latitude": latitude, "longitude": longitude},
            options,
        )
        return self.call("sendLocation", payload)

    def send_contact(self, chat_id: ChatId, phone_number: str, first_name: str, options: Options = None) -> ResponseEnvelope:
        """Send a phone contact. Options: ``last_name``, ``vcard``..."""
        payload = self._merge(
            "sendContact",
            {"chat_id": chat_id, "phone_number": phone_number, "first_name": first_name},
            options,
        )
        return self.call("sendContact", payload)

    def set_webhook(self, url: str, options: Options = None) -> ResponseEnvelope:
        """Register a webhook URL.

        A self-signed ``certificate`` passed in *options* as an
        :class:`InputFile` is uploaded with a multipart request.
        """
        payload = self._merge("setWebhook", {"url": url}, options)
        return self.call("setWebhook", payload)

    def get_webhook_info(self) -> ResponseEnvelope:
        """Return the current webhook status."""
        return self.call("getWebhookInfo", method="GET")

    def delete_webhook(self, options: Options = None) -> ResponseEnvelope:
        """Remove the webhook. Options: ``drop_pending_updates``."""
        return self.call("deleteWebhook", self._merge("deleteWebhook", {}, options))

    def get_updates(self, options: Options = None) -> ResponseEnvelope:
        """Long-poll for updates. Options: ``offset``, ``limit``, ``timeout``.

        The request is a GET, so list-valued options such as
        ``allowed_updates`` are rejected with :class:`InvalidPayloadValue`.
        Long-poll ``timeout`` values must stay below the retry policy's
        per-attempt timeout.
        """
        return self.call("getUpdates", self._merge("getUpdates", {}, options), method="GET")

    def notify(self, text: str, options: Options = None) -> ResponseEnvelope:
        """Send *text* to the client's ``default_chat_id``.

        Raises:
            InvalidPayloadValue: If the client has no default chat.
        """
        if self._default_chat_id is None or self._default_chat_id == "":
            raise InvalidPayloadValue("chat_id", "no default chat configured for notify()")
        return self.send_message(self._default_chat_id, text, options)
