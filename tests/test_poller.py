"""Tests for long-running operation polling."""

import pytest
from unittest.mock import AsyncMock


def _video_response(*uris):
    return {
        "generateVideoResponse": {
            "generatedSamples": [{"video": {"uri": uri}} for uri in uris]
        }
    }


class TestOperationPoller:
    """Test polling until done."""

    @pytest.mark.asyncio
    async def test_polls_until_done(self):
        """Should refresh at the fixed interval until the operation is done."""
        from genai_studio.gateway.poller import OperationPoller
        from genai_studio.gateway.types import OperationHandle
        from genai_studio.messages import ENGLISH

        sleep = AsyncMock()
        poller = OperationPoller(interval_seconds=10, sleep=sleep)
        responses = [
            OperationHandle("operations/1"),
            OperationHandle("operations/1", done=True, response=_video_response("https://v/1")),
        ]
        refresh = AsyncMock(side_effect=responses)
        progress = []

        links = await poller.poll(OperationHandle("operations/1"), refresh, progress.append)

        assert links == ["https://v/1"]
        assert progress == [ENGLISH.video_checking, ENGLISH.video_checking]
        assert refresh.await_count == 2
        assert sleep.await_count == 2
        sleep.assert_awaited_with(10)

    @pytest.mark.asyncio
    async def test_already_done_handle_is_not_refreshed(self):
        """A handle that is already done returns without sleeping."""
        from genai_studio.gateway.poller import OperationPoller
        from genai_studio.gateway.types import OperationHandle

        sleep = AsyncMock()
        refresh = AsyncMock()
        handle = OperationHandle("op", done=True, response=_video_response("a", "b"))

        links = await OperationPoller(sleep=sleep).poll(handle, refresh)

        assert links == ["a", "b"]
        refresh.assert_not_awaited()
        sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_empty_result_raises_content_rejected(self):
        """A finished operation with no links is a content rejection."""
        from genai_studio.gateway.errors import ContentFilterError, ErrorCategory
        from genai_studio.gateway.poller import OperationPoller
        from genai_studio.gateway.types import OperationHandle
        from genai_studio.messages import VIETNAMESE

        handle = OperationHandle("op", done=True, response=_video_response())
        poller = OperationPoller(catalog=VIETNAMESE, sleep=AsyncMock())

        with pytest.raises(ContentFilterError) as exc_info:
            await poller.poll(handle, AsyncMock())

        assert exc_info.value.category == ErrorCategory.CONTENT_REJECTED
        assert exc_info.value.message == VIETNAMESE.no_video_links

    @pytest.mark.asyncio
    async def test_operation_error_becomes_classifiable_failure(self):
        """An error inside the operation classifies like an HTTP failure."""
        from genai_studio.gateway.classifier import classify_error
        from genai_studio.gateway.errors import ErrorCategory, GeminiAPIError
        from genai_studio.gateway.poller import OperationPoller
        from genai_studio.gateway.types import OperationHandle

        handle = OperationHandle(
            "op", done=True, error={"code": 8, "message": "Quota exceeded for video"}
        )

        with pytest.raises(GeminiAPIError) as exc_info:
            await OperationPoller(sleep=AsyncMock()).poll(handle, AsyncMock())

        assert exc_info.value.payload["error"]["status"] == "RESOURCE_EXHAUSTED"
        assert classify_error(exc_info.value).category == ErrorCategory.QUOTA

    @pytest.mark.asyncio
    async def test_refresh_failure_propagates(self):
        """Refresh failures propagate to the caller."""
        from genai_studio.gateway.errors import GeminiAPIError
        from genai_studio.gateway.poller import OperationPoller
        from genai_studio.gateway.types import OperationHandle

        refresh = AsyncMock(side_effect=GeminiAPIError(status_code=503, text="busy"))

        with pytest.raises(GeminiAPIError):
            await OperationPoller(sleep=AsyncMock()).poll(OperationHandle("op"), refresh)

    @pytest.mark.asyncio
    async def test_custom_extractor(self):
        """A custom extractor decides what the result is."""
        from genai_studio.gateway.poller import OperationPoller
        from genai_studio.gateway.types import OperationHandle

        handle = OperationHandle("op", done=True, response={"items": [1, 2]})

        result = await OperationPoller(sleep=AsyncMock()).poll(
            handle, AsyncMock(), extract=lambda h: h.response["items"]
        )
        assert result == [1, 2]


class TestOperationHandle:
    """Test operation handle parsing."""

    def test_from_payload(self):
        """Should build a handle from the REST payload."""
        from genai_studio.gateway.types import OperationHandle

        handle = OperationHandle.from_payload(
            {"name": "models/veo/operations/x", "done": True, "response": _video_response("u")}
        )
        assert handle.name == "models/veo/operations/x"
        assert handle.done is True
        assert handle.result_links() == ["u"]

    def test_missing_done_means_not_done(self):
        """A payload without done is still running."""
        from genai_studio.gateway.types import OperationHandle

        assert OperationHandle.from_payload({"name": "x"}).done is False

    def test_result_links_skip_malformed_samples(self):
        """Malformed samples are skipped."""
        from genai_studio.gateway.types import OperationHandle

        response = {
            "generateVideoResponse": {
                "generatedSamples": [{"video": {}}, "junk", {"video": {"uri": "ok"}}]
            }
        }
        assert OperationHandle("x", done=True, response=response).result_links() == ["ok"]
