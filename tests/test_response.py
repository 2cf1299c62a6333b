"""Tests for ResponseNormalizer."""

import json
import sys
import os

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from tgbridge.exceptions import ApiError, MalformedResponse, TransportError
from tgbridge.response import ResponseNormalizer


def _body(data) -> bytes:
    return json.dumps(data).encode("utf-8")


@pytest.fixture()
def normalizer() -> ResponseNormalizer:
    return ResponseNormalizer()


# ── Success ──────────────────────────────────────────────────────────────────


class TestSuccess:
    """ok=true envelopes come back unchanged."""

    def test_round_trip(self, normalizer: ResponseNormalizer) -> None:
        envelope = normalizer.parse(200, _body({"ok": True, "result": {"message_id": 123}}))
        assert envelope.ok is True
        assert envelope.result["message_id"] == 123
        assert envelope.to_dict() == {"ok": True, "result": {"message_id": 123}}

    def test_arbitrary_nested_result(self, normalizer: ResponseNormalizer) -> None:
        result = [{"update_id": 1, "message": {"text": "hi", "entities": [{"type": "bold"}]}}, {"update_id": 2}]
        envelope = normalizer.parse(200, _body({"ok": True, "result": result}))
        assert envelope.result == result

    def test_scalar_result(self, normalizer: ResponseNormalizer) -> None:
        envelope = normalizer.parse(200, _body({"ok": True, "result": True, "description": "Webhook was deleted"}))
        assert envelope.result is True
        assert envelope.description == "Webhook was deleted"

    def test_unknown_keys_preserved(self, normalizer: ResponseNormalizer) -> None:
        envelope = normalizer.parse(200, _body({"ok": True, "result": 1, "extra_field": "kept"}))
        assert envelope.to_dict()["extra_field"] == "kept"

    def test_known_keys_not_coerced(self, normalizer: ResponseNormalizer) -> None:
        data = {"ok": True, "result": 1, "error_code": "5", "description": 7, "parameters": {"retry_after": "soon"}}
        envelope = normalizer.parse(200, _body(data))
        assert envelope.error_code == "5"
        assert envelope.description == 7
        assert envelope.parameters == {"retry_after": "soon"}
        assert envelope.to_dict() == data

    def test_non_mapping_parameters_kept(self, normalizer: ResponseNormalizer) -> None:
        envelope = normalizer.parse(200, _body({"ok": True, "result": 1, "parameters": "nope"}))
        assert envelope.parameters == "nope"
        assert envelope.response_parameters() is None


# ── ApiError ─────────────────────────────────────────────────────────────────


class TestApiError:
    """ok=false envelopes become ApiError."""

    @pytest.mark.parametrize("status", [200, 400])
    def test_chat_not_found(self, normalizer: ResponseNormalizer, status: int) -> None:
        body = _body({"ok": False, "error_code": 400, "description": "Bad Request: chat not found"})
        with pytest.raises(ApiError) as exc_info:
            normalizer.parse(status, body)
        assert exc_info.value.description == "Bad Request: chat not found"
        assert exc_info.value.error_code == 400

    def test_defaults_when_fields_missing(self, normalizer: ResponseNormalizer) -> None:
        with pytest.raises(ApiError) as exc_info:
            normalizer.parse(200, _body({"ok": False}))
        assert exc_info.value.description == "Unknown error"
        assert exc_info.value.error_code == 0

    @pytest.mark.parametrize("error_code", ["400", 4.5, True, None])
    def test_non_integer_error_code(self, normalizer: ResponseNormalizer, error_code) -> None:
        with pytest.raises(ApiError) as exc_info:
            normalizer.parse(200, _body({"ok": False, "error_code": error_code, "description": "x"}))
        assert exc_info.value.error_code == 0

    def test_non_string_description(self, normalizer: ResponseNormalizer) -> None:
        with pytest.raises(ApiError) as exc_info:
            normalizer.parse(200, _body({"ok": False, "error_code": 403, "description": {"msg": "no"}}))
        assert exc_info.value.description == "Unknown error"
        assert exc_info.value.error_code == 403

    def test_retry_after(self, normalizer: ResponseNormalizer) -> None:
        body = _body({
            "ok": False,
            "error_code": 429,
            "description": "Too Many Requests: retry after 5",
            "parameters": {"retry_after": 5},
        })
        with pytest.raises(ApiError) as exc_info:
            normalizer.parse(429, body)
        assert exc_info.value.retry_after == 5
        assert exc_info.value.parameters == {"retry_after": 5}


# ── MalformedResponse ────────────────────────────────────────────────────────


class TestMalformed:
    """Bodies that are not Telegram envelopes."""

    @pytest.mark.parametrize("status", [200, 400, 500])
    def test_missing_ok(self, normalizer: ResponseNormalizer, status: int) -> None:
        with pytest.raises(MalformedResponse):
            normalizer.parse(status, _body({"result": {"message_id": 1}}))

    @pytest.mark.parametrize("ok", ["true", 1, None])
    def test_ok_not_boolean(self, normalizer: ResponseNormalizer, ok) -> None:
        with pytest.raises(MalformedResponse):
            normalizer.parse(200, _body({"ok": ok, "result": 1}))

    def test_invalid_json(self, normalizer: ResponseNormalizer) -> None:
        with pytest.raises(MalformedResponse) as exc_info:
            normalizer.parse(200, b"<html>oops</html>")
        assert exc_info.value.body_preview == "<html>oops</html>"

    def test_json_array(self, normalizer: ResponseNormalizer) -> None:
        with pytest.raises(MalformedResponse):
            normalizer.parse(200, b"[1, 2, 3]")


# ── TransportError ───────────────────────────────────────────────────────────


class TestTransportError:
    """Failures with no usable envelope."""

    def test_500_empty_body(self, normalizer: ResponseNormalizer) -> None:
        with pytest.raises(TransportError) as exc_info:
            normalizer.parse(500, b"")
        assert exc_info.value.status == 500
        assert "500" in str(exc_info.value)

    def test_none_body(self, normalizer: ResponseNormalizer) -> None:
        with pytest.raises(TransportError):
            normalizer.parse(200, None)

    def test_gateway_html(self, normalizer: ResponseNormalizer) -> None:
        with pytest.raises(TransportError) as exc_info:
            normalizer.parse(502, b"<html>Bad Gateway</html>")
        assert "502" in str(exc_info.value)

    @pytest.mark.parametrize("status", [500, 502, 503])
    def test_server_error_envelope(self, normalizer: ResponseNormalizer, status: int) -> None:
        body = _body({"ok": False, "error_code": status, "description": "Bad Gateway"})
        with pytest.raises(TransportError) as exc_info:
            normalizer.parse(status, body)
        assert exc_info.value.status == status
        assert str(status) in str(exc_info.value)
        assert "Bad Gateway" in str(exc_info.value)

    def test_ok_true_with_error_status(self, normalizer: ResponseNormalizer) -> None:
        with pytest.raises(TransportError):
            normalizer.parse(503, _body({"ok": True, "result": 1}))
