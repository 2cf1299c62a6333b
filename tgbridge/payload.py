"""Payload value classification and normalization.

Every value a caller puts in a request payload is classified into one
:class:`PayloadKind` before the request builder decides how to encode it.
Scalars are narrowed to their wire string here; nested values stay as Python
structures until the builder JSON-encodes them.
"""

import enum
import json
from collections.abc import Mapping
from typing import Any, Dict, NamedTuple

from pydantic import BaseModel

from tgbridge.exceptions import InvalidPayloadValue
from tgbridge.models import InputFile


class PayloadKind(enum.Enum):
    """Tag for a classified payload value."""

    TEXT = "text"
    NUMBER = "number"
    BOOLEAN = "boolean"
    NULL = "null"
    NESTED = "nested"
    BINARY = "binary"


class PayloadValue(NamedTuple):
    """A classified payload value.

    ``value`` is the wire string for scalar kinds, the nested structure for
    ``NESTED`` and the :class:`~tgbridge.models.InputFile` for ``BINARY``.
    """

    kind: PayloadKind
    value: Any


def classify(field: str, value: Any) -> PayloadValue:
    """Classify *value* and narrow scalars to strings.

    Raises:
        InvalidPayloadValue: If *value* has an unsupported type.
    """
    # bool before int: bool is an int subclass
    if isinstance(value, bool):
        return PayloadValue(PayloadKind.BOOLEAN, "true" if value else "false")
    if value is None:
        return PayloadValue(PayloadKind.NULL, "")
    if isinstance(value, str):
        return PayloadValue(PayloadKind.TEXT, value)
    if isinstance(value, (int, float)):
        return PayloadValue(PayloadKind.NUMBER, str(value))
    if isinstance(value, InputFile):
        return PayloadValue(PayloadKind.BINARY, value)
    if isinstance(value, BaseModel):
        return PayloadValue(PayloadKind.NESTED, value.model_dump(mode="json", by_alias=True, exclude_none=True))
    if isinstance(value, (Mapping, list, tuple)):
        return PayloadValue(PayloadKind.NESTED, value)
    raise InvalidPayloadValue(field, f"unsupported value type '{type(value).__name__}'", value)


def normalize(payload: Mapping[str, Any] | None) -> Dict[str, PayloadValue]:
    """Classify every field of *payload*.

    Raises:
        InvalidPayloadValue: On the first field with an unsupported value.
    """
    if not payload:
        return {}
    normalized: Dict[str, PayloadValue] = {}
    for field, value in payload.items():
        if not isinstance(field, str) or not field:
            raise InvalidPayloadValue(str(field), "field names must be non-empty strings", field)
        normalized[field] = classify(field, value)
    return normalized


def encode_nested(field: str, value: Any) -> str:
    """JSON-encode a nested payload value.

    Pydantic models anywhere inside the structure are dumped first.

    Raises:
        InvalidPayloadValue: If the structure holds something JSON cannot encode.
    """
    try:
        return json.dumps(value, ensure_ascii=False, separators=(",", ":"), default=_dump_model)
    except (TypeError, ValueError) as exc:
        raise InvalidPayloadValue(field, f"nested value is not JSON-encodable ({exc})", value) from exc


def _dump_model(obj: Any) -> Any:
    if isinstance(obj, BaseModel):
        return obj.model_dump(mode="json", by_alias=True, exclude_none=True)
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")
