"""Telegram Bot API client -- request building, retries and response normalization.

Usage::

    from tgbridge import TelegramClient, InputFile, ApiError

    client = TelegramClient("123456:ABC-DEF")
    client.send_message("682299441", "Build finished")
    client.send_photo("682299441", InputFile.from_path("chart.png"), {"caption": "Loss"})
"""

from tgbridge.client import TelegramClient
from tgbridge.config import TelegramSettings, load_settings
from tgbridge.exceptions import (
    ApiError,
    InvalidCredentials,
    InvalidPayloadValue,
    MalformedResponse,
    TelegramSDKException,
    TransportError,
)
from tgbridge.models import InputFile, ResponseEnvelope, RetryPolicy, TransportRequest
from tgbridge.request_builder import RequestBuilder
from tgbridge.response import ResponseNormalizer

__version__ = "0.1.0"

__all__ = [
    "TelegramClient",
    "RequestBuilder",
    "ResponseNormalizer",
    # Models
    "InputFile",
    "ResponseEnvelope",
    "RetryPolicy",
    "TransportRequest",
    # Configuration
    "TelegramSettings",
    "load_settings",
    # Exceptions
    "TelegramSDKException",
    "InvalidCredentials",
    "InvalidPayloadValue",
    "TransportError",
    "MalformedResponse",
    "ApiError",
    "__version__",
]
