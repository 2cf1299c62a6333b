"""ResponseNormalizer -- turns a raw HTTP response into a ResponseEnvelope.

Either a complete :class:`~tgbridge.models.ResponseEnvelope` comes back or a
classified exception is raised; partial envelopes are never returned.
"""

import json
import logging
from typing import Any, Dict

from tgbridge.exceptions import ApiError, MalformedResponse, TransportError
from tgbridge.models import ResponseEnvelope

_logger = logging.getLogger("tgbridge.response")


def _is_success(status: int) -> bool:
    return 200 <= status < 300


class ResponseNormalizer:
    """Parses and validates Telegram Bot API responses."""

    def parse(self, status: int, body: bytes | None) -> ResponseEnvelope:
        """Classify a response and return its envelope.

        Raises:
            TransportError: Empty body, any 5xx status, or another non-2xx
                status without an ``ok: false`` envelope.
            MalformedResponse: The body is not a mapping with a boolean ``ok``.
            ApiError: Telegram returned ``ok: false`` with a 2xx or 4xx status.
        """
        if not body:
            raise TransportError(status, "empty response body")

        try:
            data = json.loads(body)
        except ValueError:
            if not _is_success(status):
                raise TransportError(status, "non-JSON response body") from None
            raise MalformedResponse("body is not valid JSON", status, body) from None

        if not isinstance(data, dict):
            if not _is_success(status):
                raise TransportError(status, "non-JSON response body")
            raise MalformedResponse("body is not a JSON object", status, body)

        if "ok" not in data:
            raise MalformedResponse("missing 'ok' field", status, body)
        if not isinstance(data["ok"], bool):
            raise MalformedResponse("'ok' field is not a boolean", status, body)

        # 5xx envelopes (e.g. "Bad Gateway" during outages) stay transient
        if status >= 500:
            description = data.get("description")
            raise TransportError(status, description if isinstance(description, str) else None)

        if not data["ok"]:
            raise self._api_error(data)

        if not _is_success(status):
            raise TransportError(status)

        return ResponseEnvelope.model_validate(data)

    @staticmethod
    def _api_error(data: Dict[str, Any]) -> ApiError:
        description = data.get("description")
        if not isinstance(description, str):
            description = "Unknown error"
        error_code = data.get("error_code")
        if not isinstance(error_code, int) or isinstance(error_code, bool):
            error_code = 0
        parameters = data.get("parameters")
        if not isinstance(parameters, dict):
            parameters = {}
        _logger.warning(
            "Telegram API rejected request",
            extra={"error_code": error_code, "description": description},
        )
        return ApiError(description, error_code, parameters)
