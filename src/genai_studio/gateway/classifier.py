"""Error classification for remote generation failures.

The remote service reports errors inconsistently: an exception whose message
is a JSON-encoded error envelope, a plain dict, or a bare string. Each raw
failure is first normalized into one of three shapes, then classified by a
pure function over those shapes.

Shapes:
    TextFailure       - free text that did not parse as structured data
    StructuredFailure - code/status/message pulled out of an error object
    OpaqueFailure     - anything else

Rules (order matters):
    1. Structured: 401/UNAUTHENTICATED -> AUTH, 429/RESOURCE_EXHAUSTED -> QUOTA,
       503/UNAVAILABLE -> UNAVAILABLE, 500/INTERNAL -> INTERNAL.
    2. Text: case-insensitive substrings "unauthenticated" -> AUTH,
       "resource_exhausted"/"quota" -> QUOTA, "unavailable" -> UNAVAILABLE,
       "internal error" -> INTERNAL; otherwise UNKNOWN with the text itself.
    3. Structured with no rule match: UNKNOWN with the extracted message if it
       already looks user-facing, else UNKNOWN with the caller's default.

An HTTP failure whose body names no code, status or matching phrase is shaped
with its HTTP status as the code.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Tuple, Union

from ..messages import ENGLISH, MessageCatalog
from .errors import ErrorCategory, GatewayError, GeminiAPIError, error_for_category

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TextFailure:
    """Free-text failure that is not structured data."""

    text: str


@dataclass(frozen=True)
class StructuredFailure:
    """Failure carrying an error object's code, status and message."""

    code: Optional[int] = None
    status: Optional[str] = None
    message: Optional[str] = None


@dataclass(frozen=True)
class OpaqueFailure:
    """Failure with no recognizable shape."""

    value: Any = None


RawFailure = Union[TextFailure, StructuredFailure, OpaqueFailure]


# (code, status, category), checked in this order
_STRUCTURED_RULES: Tuple[Tuple[int, str, ErrorCategory], ...] = (
    (401, "UNAUTHENTICATED", ErrorCategory.AUTH),
    (429, "RESOURCE_EXHAUSTED", ErrorCategory.QUOTA),
    (503, "UNAVAILABLE", ErrorCategory.UNAVAILABLE),
    (500, "INTERNAL", ErrorCategory.INTERNAL),
)

_TEXT_RULES: Tuple[Tuple[Tuple[str, ...], ErrorCategory], ...] = (
    (("unauthenticated",), ErrorCategory.AUTH),
    (("resource_exhausted", "quota"), ErrorCategory.QUOTA),
    (("unavailable",), ErrorCategory.UNAVAILABLE),
    (("internal error",), ErrorCategory.INTERNAL),
)


def _coerce_code(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return None


def _structured_from_mapping(data: Mapping[str, Any]) -> StructuredFailure:
    """Read code/status/message from ``data["error"]`` or ``data`` itself."""
    nested = data.get("error")
    source = nested if isinstance(nested, Mapping) else data
    status = source.get("status")
    message = source.get("message")
    return StructuredFailure(
        code=_coerce_code(source.get("code")),
        status=status if isinstance(status, str) else None,
        message=message if isinstance(message, str) else None,
    )


def _unwrap_envelope(parsed: Any) -> Any:
    # Some endpoints return the error envelope inside a one-element list
    if isinstance(parsed, list) and len(parsed) == 1 and isinstance(parsed[0], Mapping):
        return parsed[0]
    return parsed


def _shape_from_text(text: str) -> RawFailure:
    if not text:
        return StructuredFailure()
    try:
        parsed = _unwrap_envelope(json.loads(text))
    except ValueError:
        return TextFailure(text)
    if isinstance(parsed, Mapping):
        return _structured_from_mapping(parsed)
    return StructuredFailure()


def _text_category(text: str) -> Optional[ErrorCategory]:
    lowered = text.lower()
    for needles, category in _TEXT_RULES:
        if any(needle in lowered for needle in needles):
            return category
    return None


def _shape_from_api_error(error: GeminiAPIError) -> RawFailure:
    """Shape an HTTP failure, falling back to its status code.

    The body decides when it carries a code, a status or a matching phrase;
    otherwise the HTTP status stands in as the code.
    """
    payload = _unwrap_envelope(error.payload)
    if isinstance(payload, Mapping):
        shape: RawFailure = _structured_from_mapping(payload)
    elif error.text:
        shape = _shape_from_text(error.text)
    else:
        shape = StructuredFailure()

    if isinstance(shape, TextFailure):
        if _text_category(shape.text) is not None:
            return shape
        return StructuredFailure(code=error.status_code, message=shape.text)
    if isinstance(shape, StructuredFailure) and shape.code is None and shape.status is None:
        return StructuredFailure(code=error.status_code, message=shape.message)
    return shape


def to_raw_failure(value: Any) -> RawFailure:
    """Normalize any failure value into a RawFailure shape."""
    if isinstance(value, GeminiAPIError):
        return _shape_from_api_error(value)
    if isinstance(value, BaseException):
        return _shape_from_text(str(value))
    if isinstance(value, str):
        return _shape_from_text(value)
    if isinstance(value, Mapping):
        return _structured_from_mapping(value)
    return OpaqueFailure(value)


def _category_message(category: ErrorCategory, catalog: MessageCatalog) -> str:
    return {
        ErrorCategory.AUTH: catalog.auth,
        ErrorCategory.QUOTA: catalog.quota,
        ErrorCategory.UNAVAILABLE: catalog.unavailable,
        ErrorCategory.INTERNAL: catalog.internal,
    }[category]


def classify_raw(
    failure: RawFailure,
    default_message: str,
    catalog: MessageCatalog = ENGLISH,
) -> Tuple[ErrorCategory, str]:
    """Classify a normalized failure into (category, message)."""
    if isinstance(failure, TextFailure):
        category = _text_category(failure.text)
        if category is not None:
            return category, _category_message(category, catalog)
        return ErrorCategory.UNKNOWN, failure.text

    if isinstance(failure, StructuredFailure):
        for code, status, category in _STRUCTURED_RULES:
            if failure.code == code or failure.status == status:
                return category, _category_message(category, catalog)
        if failure.message and catalog.is_user_facing(failure.message):
            return ErrorCategory.UNKNOWN, failure.message
        return ErrorCategory.UNKNOWN, default_message

    return ErrorCategory.UNKNOWN, default_message


def classify_error(
    error: Any,
    default_message: Optional[str] = None,
    catalog: MessageCatalog = ENGLISH,
) -> GatewayError:
    """Classify any failure value into a GatewayError.

    A value that is already a GatewayError is returned unchanged.

    Args:
        error: Exception, dict, string, or any other failure value.
        default_message: Message for UNKNOWN failures without a usable message.
        catalog: Message catalog for the user-facing text.

    Returns:
        GatewayError subclass matching the category.
    """
    if isinstance(error, GatewayError):
        return error

    failure = to_raw_failure(error)
    category, message = classify_raw(
        failure, default_message or catalog.unknown, catalog
    )
    logger.debug("Classified %s as %s", type(failure).__name__, category.value)
    return error_for_category(category, message)
