"""Credential-rotating gateway to the generative AI backend.

This package holds the pieces every remote call goes through:

- CredentialStore: ordered credential pool with a rotation cursor
- classify_error: maps any failure shape onto a closed set of categories
- RotatingExecutor: runs a call, rotating credentials on quota failures
- OperationPoller: waits for long-running operations (video generation)
- GeminiClient: REST client for the Generative Language API

Example usage:
    from genai_studio.gateway import CredentialStore, GeminiClient, RotatingExecutor

    store = CredentialStore("key-a,key-b")
    executor = RotatingExecutor(store)
    client = GeminiClient()

    data = await executor.execute(
        lambda key: client.generate_content(key, "gemini-2.5-flash", payload)
    )
"""

from .types import (
    ContentParts,
    MediaInput,
    OperationHandle,
)
from .errors import (
    AuthenticationError,
    ConfigurationError,
    ContentFilterError,
    CredentialsExhaustedError,
    ErrorCategory,
    GatewayError,
    GeminiAPIError,
    InternalServerError,
    RateLimitError,
    ServiceUnavailableError,
)
from .credentials import CredentialStore, mask_credential, parse_credentials
from .classifier import (
    OpaqueFailure,
    RawFailure,
    StructuredFailure,
    TextFailure,
    classify_error,
    to_raw_failure,
)
from .executor import AttemptState, RotatingExecutor, RotationAttempts
from .poller import OperationPoller
from .gemini import GeminiClient

__all__ = [
    # Types
    "ContentParts",
    "MediaInput",
    "OperationHandle",
    # Errors
    "AuthenticationError",
    "ConfigurationError",
    "ContentFilterError",
    "CredentialsExhaustedError",
    "ErrorCategory",
    "GatewayError",
    "GeminiAPIError",
    "InternalServerError",
    "RateLimitError",
    "ServiceUnavailableError",
    # Credentials
    "CredentialStore",
    "mask_credential",
    "parse_credentials",
    # Classification
    "OpaqueFailure",
    "RawFailure",
    "StructuredFailure",
    "TextFailure",
    "classify_error",
    "to_raw_failure",
    # Executor
    "AttemptState",
    "RotatingExecutor",
    "RotationAttempts",
    # Polling
    "OperationPoller",
    # Client
    "GeminiClient",
]
