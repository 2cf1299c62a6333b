"""RequestBuilder -- turns an endpoint call into a transport-ready request.

Encoding rules:

* ``GET``: every field becomes a query parameter; only scalars are allowed.
* ``POST`` without files: a form body; nested values are JSON strings.
* ``POST`` with files: ``multipart/form-data``; fields become text parts and
  each :class:`~tgbridge.models.InputFile` a binary part.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional

from tgbridge import payload as payload_mod
from tgbridge.exceptions import InvalidPayloadValue
from tgbridge.models import Credentials, InputFile, TransportRequest
from tgbridge.payload import PayloadKind

_logger = logging.getLogger("tgbridge.request_builder")

_METHODS = ("GET", "POST")


class RequestBuilder:
    """Builds :class:`TransportRequest` objects for one set of credentials."""

    def __init__(self, credentials: Credentials) -> None:
        self._credentials = credentials

    def url_for(self, endpoint: str) -> str:
        """Return ``{base}/bot{token}/{endpoint}``."""
        return f"{self._credentials.api_base_url.rstrip('/')}/bot{self._credentials.bot_token}/{endpoint.lstrip('/')}"

    def build(
        self,
        method: str,
        endpoint: str,
        payload: Optional[Mapping[str, Any]] = None,
        attachments: Optional[Mapping[str, InputFile]] = None,
    ) -> TransportRequest:
        """Build the request for *endpoint*.

        Args:
            method: ``"GET"`` or ``"POST"`` (case-insensitive).
            endpoint: Telegram method name, e.g. ``"sendMessage"``.
            payload: Field name to value mapping. ``InputFile`` values are
                moved to the attachment set.
            attachments: Field name to file mapping for multipart uploads.

        Raises:
            ValueError: If *method* is not GET or POST.
            InvalidPayloadValue: If a field cannot be encoded for *method*.
        """
        verb = method.upper()
        if verb not in _METHODS:
            raise ValueError(f"Unsupported HTTP method '{method}'; expected GET or POST.")

        fields = payload_mod.normalize(payload)
        files = self._collect_files(fields, attachments)
        url = self.url_for(endpoint)

        if verb == "GET":
            if files:
                field = next(iter(files))
                raise InvalidPayloadValue(field, "file uploads require a POST request")
            params = {name: self._scalar_for_query(name, item) for name, item in fields.items()}
            request = TransportRequest(method="GET", endpoint=endpoint, url=url, encoding="query", params=params)
        else:
            data = {name: self._text_part(name, item) for name, item in fields.items()}
            encoding = "multipart" if files else "form"
            request = TransportRequest(
                method="POST",
                endpoint=endpoint,
                url=url,
                encoding=encoding,
                data=data,
                files={name: f.as_multipart() for name, f in files.items()},
            )

        _logger.debug(
            "Request built",
            extra={"api_endpoint": endpoint, "http_method": verb, "encoding": request.encoding, "fields": sorted(fields), "files": sorted(files)},
        )
        return request

    # ------------------------------------------------------------------
    #  Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _collect_files(
        fields: Dict[str, payload_mod.PayloadValue],
        attachments: Optional[Mapping[str, InputFile]],
    ) -> Dict[str, InputFile]:
        """Pop binary payload values and merge them with *attachments*."""
        files: Dict[str, InputFile] = {}
        for name in [n for n, item in fields.items() if item.kind is PayloadKind.BINARY]:
            files[name] = fields.pop(name).value
        for name, attachment in (attachments or {}).items():
            if not isinstance(attachment, InputFile):
                raise InvalidPayloadValue(name, "attachments must be InputFile instances", attachment)
            if name in fields or name in files:
                raise InvalidPayloadValue(name, "field is present both as a value and as an attachment", attachment)
            files[name] = attachment
        return files

    @staticmethod
    def _scalar_for_query(name: str, item: payload_mod.PayloadValue) -> str:
        if item.kind is PayloadKind.NESTED:
            raise InvalidPayloadValue(name, "GET requests accept only scalar parameters", item.value)
        return item.value

    @staticmethod
    def _text_part(name: str, item: payload_mod.PayloadValue) -> str:
        if item.kind is PayloadKind.NESTED:
            return payload_mod.encode_nested(name, item.value)
        return item.value
