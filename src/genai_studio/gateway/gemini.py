"""REST client for the Google Generative Language API.

Every call takes the credential explicitly so the executor decides which key
is used. Non-2xx responses raise GeminiAPIError with the parsed error body;
classification happens in the executor, not here.
"""

import logging
import time
from typing import Any, Dict, Optional

import httpx

from .credentials import mask_credential
from .errors import GeminiAPIError
from .types import OperationHandle

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"


class GeminiClient:
    """Thin async client over the Generative Language REST endpoints."""

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        default_timeout: Optional[float] = 120.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the client.

        Args:
            base_url: API root, e.g. "https://generativelanguage.googleapis.com/v1beta".
            default_timeout: Per-request timeout in seconds, None for no limit.
            transport: Optional httpx transport (used by tests).
        """
        self._base_url = base_url.rstrip("/")
        self._default_timeout = default_timeout
        self._transport = transport

    @property
    def base_url(self) -> str:
        return self._base_url

    def _model_url(self, model: str, method: str) -> str:
        model_path = model if model.startswith("models/") else f"models/{model}"
        return f"{self._base_url}/{model_path}:{method}"

    def _headers(self, api_key: str) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "x-goog-api-key": api_key,
        }

    async def _request(
        self,
        method: str,
        url: str,
        api_key: str,
        payload: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Send one request and return the decoded JSON body.

        Raises:
            GeminiAPIError: On any HTTP status >= 400.
        """
        start_time = time.time()

        async with httpx.AsyncClient(
            timeout=self._default_timeout, transport=self._transport
        ) as client:
            response = await client.request(
                method, url, headers=self._headers(api_key), json=payload
            )
        latency_ms = int((time.time() - start_time) * 1000)

        if response.status_code >= 400:
            logger.warning(
                "Gemini API %s %s returned %d for key %s (%d ms)",
                method,
                url,
                response.status_code,
                mask_credential(api_key),
                latency_ms,
            )
            try:
                body: Any = response.json()
            except ValueError:
                body = None
            raise GeminiAPIError(
                status_code=response.status_code,
                payload=body,
                text=response.text,
            )

        logger.debug("Gemini API %s %s ok (%d ms)", method, url, latency_ms)
        return response.json()

    async def generate_content(
        self, api_key: str, model: str, payload: Dict[str, Any]
    ) -> Dict[str, Any]:
        """Call ``models/{model}:generateContent``."""
        return await self._request(
            "POST", self._model_url(model, "generateContent"), api_key, payload
        )

    async def predict(
        self, api_key: str, model: str, payload: Dict[str, Any]
    ) -> Dict[str, Any]:
        """Call ``models/{model}:predict`` (Imagen)."""
        return await self._request(
            "POST", self._model_url(model, "predict"), api_key, payload
        )

    async def predict_long_running(
        self, api_key: str, model: str, payload: Dict[str, Any]
    ) -> OperationHandle:
        """Start ``models/{model}:predictLongRunning`` (Veo) and return its handle."""
        data = await self._request(
            "POST", self._model_url(model, "predictLongRunning"), api_key, payload
        )
        handle = OperationHandle.from_payload(data)
        if not handle.name:
            raise GeminiAPIError(
                status_code=502,
                payload=data,
                text="Upstream returned no operation name",
            )
        return handle

    async def get_operation(
        self, api_key: str, handle: OperationHandle
    ) -> OperationHandle:
        """Re-fetch an operation's status.

        Operations are tied to the credential that created them, so the same
        api_key must be passed here.
        """
        url = f"{self._base_url}/{handle.name.lstrip('/')}"
        data = await self._request("GET", url, api_key)
        refreshed = OperationHandle.from_payload(data)
        if not refreshed.name:
            refreshed.name = handle.name
        return refreshed
