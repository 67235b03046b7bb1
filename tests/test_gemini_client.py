"""Tests for the Generative Language REST client.

Uses httpx.MockTransport so no network access is needed.
"""

import json

import httpx
import pytest


def _transport(handler, requests):
    def record(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return handler(request)

    return httpx.MockTransport(record)


class TestGeminiClientRequests:
    """Test URL, headers and body of outgoing requests."""

    @pytest.mark.asyncio
    async def test_generate_content(self):
        """Should POST to generateContent with the key in the header."""
        from genai_studio.gateway.gemini import GeminiClient

        requests = []
        client = GeminiClient(
            base_url="https://example.test/v1beta/",
            transport=_transport(lambda r: httpx.Response(200, json={"candidates": []}), requests),
        )

        data = await client.generate_content("secret-key", "gemini-2.5-flash", {"contents": []})

        assert data == {"candidates": []}
        request = requests[0]
        assert request.method == "POST"
        assert str(request.url) == (
            "https://example.test/v1beta/models/gemini-2.5-flash:generateContent"
        )
        assert request.headers["x-goog-api-key"] == "secret-key"
        assert json.loads(request.content) == {"contents": []}

    @pytest.mark.asyncio
    async def test_model_prefix_not_duplicated(self):
        """A model name that already has the models/ prefix is used as is."""
        from genai_studio.gateway.gemini import GeminiClient

        requests = []
        client = GeminiClient(
            base_url="https://example.test/v1beta",
            transport=_transport(lambda r: httpx.Response(200, json={}), requests),
        )

        await client.predict("k", "models/imagen-4.0-generate-001", {})
        assert requests[0].url.path == "/v1beta/models/imagen-4.0-generate-001:predict"

    @pytest.mark.asyncio
    async def test_predict_long_running_returns_handle(self):
        """Starting a long-running prediction returns an operation handle."""
        from genai_studio.gateway.gemini import GeminiClient

        requests = []
        client = GeminiClient(
            base_url="https://example.test/v1beta",
            transport=_transport(
                lambda r: httpx.Response(200, json={"name": "models/veo/operations/abc"}),
                requests,
            ),
        )

        handle = await client.predict_long_running("k", "veo-2.0-generate-001", {})

        assert handle.name == "models/veo/operations/abc"
        assert handle.done is False
        assert requests[0].url.path.endswith("veo-2.0-generate-001:predictLongRunning")

    @pytest.mark.asyncio
    async def test_predict_long_running_without_name(self):
        """A start response without an operation name is an error."""
        from genai_studio.gateway.errors import GeminiAPIError
        from genai_studio.gateway.gemini import GeminiClient

        client = GeminiClient(
            transport=_transport(lambda r: httpx.Response(200, json={}), []),
        )

        with pytest.raises(GeminiAPIError) as exc_info:
            await client.predict_long_running("k", "veo", {})
        assert exc_info.value.status_code == 502

    @pytest.mark.asyncio
    async def test_get_operation_uses_same_key(self):
        """Operation status is fetched with the key that started it."""
        from genai_studio.gateway.gemini import GeminiClient
        from genai_studio.gateway.types import OperationHandle

        requests = []
        client = GeminiClient(
            base_url="https://example.test/v1beta",
            transport=_transport(
                lambda r: httpx.Response(
                    200, json={"name": "models/veo/operations/abc", "done": True}
                ),
                requests,
            ),
        )

        refreshed = await client.get_operation("key-1", OperationHandle("models/veo/operations/abc"))

        assert refreshed.done is True
        request = requests[0]
        assert request.method == "GET"
        assert request.url.path == "/v1beta/models/veo/operations/abc"
        assert request.headers["x-goog-api-key"] == "key-1"


class TestGeminiClientErrors:
    """Non-2xx responses raise GeminiAPIError with the body attached."""

    @pytest.mark.asyncio
    async def test_error_status_raises_with_payload(self):
        """An error status raises with the parsed body attached."""
        from genai_studio.gateway.classifier import classify_error
        from genai_studio.gateway.errors import ErrorCategory, GeminiAPIError
        from genai_studio.gateway.gemini import GeminiClient

        body = {"error": {"code": 429, "message": "Quota exceeded", "status": "RESOURCE_EXHAUSTED"}}
        client = GeminiClient(transport=_transport(lambda r: httpx.Response(429, json=body), []))

        with pytest.raises(GeminiAPIError) as exc_info:
            await client.generate_content("k", "m", {})

        assert exc_info.value.status_code == 429
        assert exc_info.value.payload == body
        assert json.loads(str(exc_info.value)) == body
        assert classify_error(exc_info.value).category == ErrorCategory.QUOTA

    @pytest.mark.asyncio
    async def test_non_json_error_body(self):
        """A non-JSON error body is kept as text."""
        from genai_studio.gateway.errors import GeminiAPIError
        from genai_studio.gateway.gemini import GeminiClient

        client = GeminiClient(
            transport=_transport(lambda r: httpx.Response(503, text="Service Unavailable"), [])
        )

        with pytest.raises(GeminiAPIError) as exc_info:
            await client.predict("k", "m", {})

        assert exc_info.value.payload is None
        assert exc_info.value.text == "Service Unavailable"

    @pytest.mark.asyncio
    async def test_credential_not_logged(self, caplog):
        """Failure logs show only the masked key."""
        import logging

        from genai_studio.gateway.errors import GeminiAPIError
        from genai_studio.gateway.gemini import GeminiClient

        client = GeminiClient(
            transport=_transport(lambda r: httpx.Response(401, json={"error": {"code": 401}}), [])
        )

        with caplog.at_level(logging.WARNING, logger="genai_studio.gateway.gemini"):
            with pytest.raises(GeminiAPIError):
                await client.generate_content("very-secret-credential-9876", "m", {})

        assert "very-secret-credential-9876" not in caplog.text
        assert "...9876" in caplog.text


class TestRotationOverHttp:
    """Rotation driven by real HTTP error responses."""

    @staticmethod
    def _keyed_transport(responses, requests):
        def handler(request: httpx.Request) -> httpx.Response:
            return responses[request.headers["x-goog-api-key"]]()

        return _transport(handler, requests)

    @pytest.mark.asyncio
    async def test_plain_text_429_rotates_to_next_key(self):
        """A 429 with a plain-text body moves on to the next key."""
        from genai_studio.gateway.credentials import CredentialStore
        from genai_studio.gateway.executor import RotatingExecutor
        from genai_studio.gateway.gemini import GeminiClient

        requests = []
        client = GeminiClient(
            transport=self._keyed_transport(
                {
                    "k1": lambda: httpx.Response(429, text="Too Many Requests"),
                    "k2": lambda: httpx.Response(200, json={"candidates": ["ok"]}),
                },
                requests,
            )
        )
        store = CredentialStore("k1,k2")

        data = await RotatingExecutor(store).execute(
            lambda key: client.generate_content(key, "m", {})
        )

        assert data == {"candidates": ["ok"]}
        assert [r.headers["x-goog-api-key"] for r in requests] == ["k1", "k2"]
        assert store.cursor == 1

    @pytest.mark.asyncio
    async def test_list_body_429_rotates_to_next_key(self):
        """A 429 whose JSON body is a one-element list moves on to the next key."""
        from genai_studio.gateway.credentials import CredentialStore
        from genai_studio.gateway.executor import RotatingExecutor
        from genai_studio.gateway.gemini import GeminiClient

        body = [{"error": {"code": 429, "message": "Quota", "status": "RESOURCE_EXHAUSTED"}}]
        requests = []
        client = GeminiClient(
            transport=self._keyed_transport(
                {
                    "k1": lambda: httpx.Response(429, json=body),
                    "k2": lambda: httpx.Response(200, json={}),
                },
                requests,
            )
        )

        await RotatingExecutor(CredentialStore("k1,k2")).execute(
            lambda key: client.predict(key, "m", {})
        )

        assert len(requests) == 2

    @pytest.mark.asyncio
    async def test_plain_text_429_on_every_key_exhausts(self):
        """Plain-text 429s on every key exhaust the pool."""
        from genai_studio.gateway.credentials import CredentialStore
        from genai_studio.gateway.errors import CredentialsExhaustedError
        from genai_studio.gateway.executor import RotatingExecutor
        from genai_studio.gateway.gemini import GeminiClient

        requests = []
        client = GeminiClient(
            transport=_transport(lambda r: httpx.Response(429, text="Too Many Requests"), requests)
        )

        with pytest.raises(CredentialsExhaustedError):
            await RotatingExecutor(CredentialStore("k1,k2")).execute(
                lambda key: client.generate_content(key, "m", {})
            )
        assert len(requests) == 2
