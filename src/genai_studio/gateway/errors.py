"""Error taxonomy for the generation gateway.

Every failure that leaves the gateway is a GatewayError carrying a category
and a message that is ready to show to the end user. The UI layer renders
``error.message`` and never re-interprets the category.

Categories:
    CONFIG              - no credentials configured
    AUTH                - invalid or revoked credential
    QUOTA               - usage limit hit on one credential (rotation trigger)
    QUOTA_EXHAUSTED_ALL - every credential in the pool hit QUOTA in one call
    UNAVAILABLE         - remote service overloaded or down
    INTERNAL            - remote service internal error
    CONTENT_REJECTED    - call completed without a usable payload
    UNKNOWN             - anything else
"""

from enum import Enum
from typing import Any, Dict, Optional, Type


class ErrorCategory(Enum):
    """Closed set of user-facing error categories."""

    CONFIG = "config"
    AUTH = "auth"
    QUOTA = "quota"
    QUOTA_EXHAUSTED_ALL = "quota_exhausted_all"
    UNAVAILABLE = "unavailable"
    INTERNAL = "internal"
    CONTENT_REJECTED = "content_rejected"
    UNKNOWN = "unknown"


class GatewayError(Exception):
    """Base class for classified gateway errors.

    Attributes:
        category: The ErrorCategory of this failure.
        message: Display-ready, localized message.
    """

    category: ErrorCategory = ErrorCategory.UNKNOWN

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> Dict[str, Any]:
        """Serialize for transport to a UI layer."""
        return {"category": self.category.value, "message": self.message}


class ConfigurationError(GatewayError):
    """No credentials are configured."""

    category = ErrorCategory.CONFIG


class AuthenticationError(GatewayError):
    """The credential was rejected by the remote service."""

    category = ErrorCategory.AUTH


class RateLimitError(GatewayError):
    """The credential exceeded its usage quota."""

    category = ErrorCategory.QUOTA


class CredentialsExhaustedError(RateLimitError):
    """Every credential in the pool failed with a quota error."""

    category = ErrorCategory.QUOTA_EXHAUSTED_ALL

    def __init__(self, message: str, pool_size: int):
        super().__init__(message)
        self.pool_size = pool_size


class ServiceUnavailableError(GatewayError):
    """The remote service is overloaded or down."""

    category = ErrorCategory.UNAVAILABLE


class InternalServerError(GatewayError):
    """The remote service reported an internal error."""

    category = ErrorCategory.INTERNAL


class ContentFilterError(GatewayError):
    """The call succeeded but produced nothing usable (e.g. safety refusal)."""

    category = ErrorCategory.CONTENT_REJECTED

    def __init__(self, message: str, refusal_text: Optional[str] = None):
        super().__init__(message)
        self.refusal_text = refusal_text


class GeminiAPIError(Exception):
    """Raw HTTP failure returned by the Generative Language API.

    This is not a classified error. The string form is the raw response body
    so the classifier can parse the embedded JSON error envelope.

    Attributes:
        status_code: HTTP status of the response.
        payload: Parsed JSON body, or None if the body was not JSON.
        text: Raw response body.
    """

    def __init__(
        self,
        status_code: int,
        payload: Optional[Any] = None,
        text: str = "",
    ):
        super().__init__(text)
        self.status_code = status_code
        self.payload = payload
        self.text = text


_CATEGORY_ERRORS: Dict[ErrorCategory, Type[GatewayError]] = {
    ErrorCategory.CONFIG: ConfigurationError,
    ErrorCategory.AUTH: AuthenticationError,
    ErrorCategory.QUOTA: RateLimitError,
    ErrorCategory.UNAVAILABLE: ServiceUnavailableError,
    ErrorCategory.INTERNAL: InternalServerError,
    ErrorCategory.CONTENT_REJECTED: ContentFilterError,
    ErrorCategory.UNKNOWN: GatewayError,
}


def error_for_category(category: ErrorCategory, message: str) -> GatewayError:
    """Build the GatewayError subclass matching a category.

    QUOTA_EXHAUSTED_ALL needs a pool size and is built directly by the
    executor, so it is not accepted here.
    """
    if category == ErrorCategory.QUOTA_EXHAUSTED_ALL:
        raise ValueError("QUOTA_EXHAUSTED_ALL errors must be built with a pool size")
    return _CATEGORY_ERRORS[category](message)
