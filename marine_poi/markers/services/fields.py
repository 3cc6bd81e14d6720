"""
Primitive field accessors for service JSON documents.

Every accessor takes a decoded JSON object node and a field name and returns
the extracted value, or None when the field is absent or has the wrong JSON
type. Accessors never raise; a node that is not a JSON object is treated the
same as a missing field.
"""

import json
import logging
import math
import re
from calendar import timegm
from datetime import datetime
from enum import Enum
from typing import Any, Callable, List, Optional, Tuple, Union

logger = logging.getLogger(__name__)

SINT32_MIN = -(2**31)
SINT32_MAX = 2**31 - 1
UINT64_MAX = 2**64 - 1

# 180 degrees == 2^31 semicircles
DEG_TO_SEMI = 2.0**31 / 180.0

DATETIME_FORMAT = "%Y-%m-%dT%H:%M:%SZ"

_DECIMAL_DIGITS = re.compile(r"[0-9]+")


def _field(node: Any, name: str) -> Tuple[bool, Any]:
    if not isinstance(node, dict) or name not in node:
        return False, None
    return True, node[name]


def get_string(node: Any, name: str) -> Optional[str]:
    """
    Get a JSON string field.
    """
    found, value = _field(node, name)
    if not found or not isinstance(value, str):
        return None
    return value


def get_json_string(node: Any, name: str) -> Optional[str]:
    """
    Get any present field re-serialized as compact JSON text.

    The value may be of any JSON type; only an absent field fails.
    """
    found, value = _field(node, name)
    if not found:
        return None
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


def get_double(node: Any, name: str) -> Optional[float]:
    """
    Get a JSON floating point number field.

    Integers are not accepted; the service always sends doubles with a
    fractional part or exponent.
    """
    found, value = _field(node, name)
    if not found or not isinstance(value, float) or not math.isfinite(value):
        return None
    return value


def get_sint32(node: Any, name: str) -> Optional[int]:
    """
    Get a signed 32-bit integer field.
    """
    found, value = _field(node, name)
    if not found or isinstance(value, bool) or not isinstance(value, int):
        return None
    if not (SINT32_MIN <= value <= SINT32_MAX):
        return None
    return value


def as_flexible_uint64(value: Any) -> Optional[int]:
    """
    Interpret a JSON value as an unsigned 64-bit integer.

    Accepts a native JSON integer or a non-empty string of decimal digits.
    Both encodings decode to the same value.
    """
    if isinstance(value, bool):
        return None

    if isinstance(value, int):
        return value if 0 <= value <= UINT64_MAX else None

    if isinstance(value, str) and value:
        if not _DECIMAL_DIGITS.fullmatch(value):
            logger.debug(f"Rejecting non-decimal uint64 string '{value}'")
            return None
        number = int(value)
        return number if number <= UINT64_MAX else None

    return None


def get_flexible_uint64(node: Any, name: str) -> Optional[int]:
    """
    Get an unsigned 64-bit integer field encoded as a number or a string.
    """
    found, value = _field(node, name)
    if not found:
        return None
    return as_flexible_uint64(value)


def get_datetime_epoch(node: Any, name: str) -> Optional[int]:
    """
    Get a ``YYYY-MM-DDTHH:MM:SSZ`` timestamp field as Unix epoch seconds.
    """
    text = get_string(node, name)
    if text is None:
        return None

    try:
        parsed = datetime.strptime(text, DATETIME_FORMAT)
    except ValueError:
        logger.debug(f"Invalid timestamp '{text}' in field '{name}'")
        return None

    return timegm(parsed.timetuple())


def degrees_to_semicircles(degrees: float) -> int:
    """
    Convert degrees to semicircles, truncating toward zero.

    The result saturates to the signed 32-bit range, so +180 degrees maps to
    SINT32_MAX.
    """
    if math.isnan(degrees):
        raise ValueError("Cannot convert NaN degrees")
    semicircles = degrees * DEG_TO_SEMI
    if semicircles >= SINT32_MAX:
        return SINT32_MAX
    if semicircles <= SINT32_MIN:
        return SINT32_MIN
    return int(semicircles)


def _reject_constant(token: str) -> Any:
    raise ValueError(f"Invalid JSON constant {token}")


def _parse_finite_float(token: str) -> float:
    value = float(token)
    if not math.isfinite(value):
        raise ValueError(f"Number out of range {token}")
    return value


def load_document(raw: Union[bytes, bytearray, str]) -> Any:
    """
    Parse a UTF-8 JSON buffer.

    Returns:
        The decoded document, or None if the buffer is not valid JSON
    """
    try:
        if isinstance(raw, (bytes, bytearray)):
            raw = bytes(raw).decode("utf-8")
        return json.loads(
            raw, parse_constant=_reject_constant, parse_float=_parse_finite_float
        )
    except (UnicodeDecodeError, ValueError, RecursionError) as e:
        logger.warning(f"Could not parse JSON document: {e}")
        return None


class ListPolicy(Enum):
    """
    Failure policy for decoding a JSON array of records.
    """

    ALL_OR_NOTHING = "all_or_nothing"
    SKIP_INVALID = "skip_invalid"


def decode_array(
    items: Any,
    decode_item: Callable[[Any], Optional[Any]],
    policy: ListPolicy,
    label: str = "item",
) -> Optional[List[Any]]:
    """
    Decode every element of a JSON array with ``decode_item``.

    ``decode_item`` returns the decoded element or None on failure.

    Args:
        items: JSON value expected to be an array
        decode_item: Per-element decoder
        policy: ALL_OR_NOTHING fails the whole list on the first bad element,
            SKIP_INVALID drops bad elements
        label: Element description for logging

    Returns:
        List of decoded elements, or None if the list failed
    """
    if not isinstance(items, list):
        if policy is ListPolicy.SKIP_INVALID:
            logger.debug(f"Expected an array of {label}, got {type(items).__name__}")
            return []
        logger.warning(f"Expected an array of {label}, got {type(items).__name__}")
        return None

    decoded = []
    for index, item in enumerate(items):
        result = decode_item(item)
        if result is None:
            if policy is ListPolicy.ALL_OR_NOTHING:
                logger.warning(f"Invalid {label} at index {index}, rejecting list")
                return None
            logger.debug(f"Skipping invalid {label} at index {index}")
            continue
        decoded.append(result)

    return decoded
