"""Shared test configuration and fixtures."""

import pytest

# =============================================================================
# Environment Reset
# =============================================================================

_STUDIO_ENV_VARS = (
    "GEMINI_API_KEYS",
    "GEMINI_API_KEY",
    "GOOGLE_API_KEY",
    "GENAI_STUDIO_CONFIG",
    "GENAI_STUDIO_LOCALE",
    "GENAI_STUDIO_POLL_INTERVAL",
    "GENAI_STUDIO_BASE_URL",
    "GENAI_STUDIO_TIMEOUT",
    "GENAI_STUDIO_TEXT_MODEL",
    "GENAI_STUDIO_IMAGE_MODEL",
    "GENAI_STUDIO_IMAGE_EDIT_MODEL",
    "GENAI_STUDIO_VIDEO_MODEL",
    "GENAI_STUDIO_API_TOKEN",
    "GENAI_STUDIO_LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def reset_env(monkeypatch):
    """Clear environment variables and cached config before each test."""
    for name in _STUDIO_ENV_VARS:
        monkeypatch.delenv(name, raising=False)

    from genai_studio import unified_config

    monkeypatch.setattr(unified_config, "_global_config", None)


# =============================================================================
# Remote failure helpers
# =============================================================================


def quota_error():
    """A raw 429 failure as returned by the REST client."""
    from genai_studio.gateway.errors import GeminiAPIError

    payload = {
        "error": {
            "code": 429,
            "message": "Resource has been exhausted (e.g. check quota).",
            "status": "RESOURCE_EXHAUSTED",
        }
    }
    return GeminiAPIError(status_code=429, payload=payload, text=str(payload))


def auth_error():
    """A raw 401 failure as returned by the REST client."""
    from genai_studio.gateway.errors import GeminiAPIError

    payload = {
        "error": {
            "code": 401,
            "message": "API key not valid.",
            "status": "UNAUTHENTICATED",
        }
    }
    return GeminiAPIError(status_code=401, payload=payload, text=str(payload))


@pytest.fixture
def quota_failure():
    """Factory for raw quota failures."""
    return quota_error


@pytest.fixture
def auth_failure():
    """Factory for raw authentication failures."""
    return auth_error
