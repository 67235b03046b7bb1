"""Creative operations over the credential-rotating gateway.

Each operation builds a request payload, hands a closure to the executor that
performs the remote call with whichever credential it is given, and extracts
the relevant field from the response. A missing payload (no image, no text,
no video link) becomes a CONTENT_REJECTED error carrying any refusal text.

CreativeStudio is also the composition root: it owns the credential store,
executor, poller and REST client for one application instance.

Usage:
    from genai_studio.studio import CreativeStudio

    studio = CreativeStudio.from_config()
    studio.set_credentials("key-a,key-b")
    images = await studio.generate_image_from_text("a cat", count=2, aspect_ratio="1:1")
"""

import logging
from enum import Enum
from typing import Any, Dict, List, Optional

import httpx

from . import prompts
from .gateway.credentials import CredentialStore
from .gateway.errors import ContentFilterError, GatewayError
from .gateway.executor import RotatingExecutor, TransitionCallback
from .gateway.gemini import GeminiClient
from .gateway.poller import OperationPoller, ProgressCallback
from .gateway.types import (
    MediaInput,
    OperationHandle,
    extract_content_parts,
    extract_predicted_images,
)
from .messages import ENGLISH, MessageCatalog, get_catalog
from .unified_config import ModelsConfig, StudioConfig, get_config

logger = logging.getLogger(__name__)

ASPECT_RATIOS = ("1:1", "3:4", "4:3", "9:16", "16:9")
MAX_IMAGES = 4
MAX_VIDEOS = 4


class CompositionVariant(Enum):
    """How two input images are combined."""

    SUBJECT_PRODUCT = "subject_product"
    TWO_PEOPLE = "two_people"


def _text_config(temperature: float) -> Dict[str, Any]:
    return {
        "temperature": temperature,
        "thinkingConfig": {"thinkingBudget": 0},
    }


def _validate_count(count: int, maximum: int, what: str) -> None:
    if not 1 <= count <= maximum:
        raise ValueError(f"{what} must be between 1 and {maximum}, got {count}")


class CreativeStudio:
    """Image, video and prompt operations backed by a rotating key pool."""

    def __init__(
        self,
        store: Optional[CredentialStore] = None,
        client: Optional[GeminiClient] = None,
        catalog: MessageCatalog = ENGLISH,
        models: Optional[ModelsConfig] = None,
        poll_interval_seconds: float = 10.0,
        poller: Optional[OperationPoller] = None,
        on_transition: Optional[TransitionCallback] = None,
    ):
        """Initialize the studio.

        Args:
            store: Credential pool. A new empty pool is created if omitted;
                pass an existing one to share rotation state.
            client: REST client for the remote service.
            catalog: Message catalog for all user-facing text.
            models: Model identifiers per operation kind.
            poll_interval_seconds: Wait between video status checks.
            poller: Custom poller (overrides poll_interval_seconds).
            on_transition: Optional executor state-transition callback.
        """
        self._catalog = catalog
        self._store = store or CredentialStore(no_credentials_message=catalog.no_credentials)
        self._client = client or GeminiClient()
        self._models = models or ModelsConfig()
        self._executor = RotatingExecutor(self._store, catalog, on_transition)
        self._poller = poller or OperationPoller(poll_interval_seconds, catalog)

    @classmethod
    def from_config(
        cls,
        config: Optional[StudioConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "CreativeStudio":
        """Build a studio from the unified configuration.

        Args:
            config: Configuration to use. Defaults to the global config.
            transport: Optional httpx transport for the REST client.
        """
        config = config or get_config()
        catalog = get_catalog(config.locale)
        store = CredentialStore(
            config.credentials.api_keys,
            no_credentials_message=catalog.no_credentials,
        )
        client = GeminiClient(
            base_url=config.gemini.base_url,
            default_timeout=config.gemini.timeout_seconds,
            transport=transport,
        )
        return cls(
            store=store,
            client=client,
            catalog=catalog,
            models=config.models,
            poll_interval_seconds=config.polling.interval_seconds,
        )

    @property
    def store(self) -> CredentialStore:
        return self._store

    @property
    def executor(self) -> RotatingExecutor:
        return self._executor

    @property
    def catalog(self) -> MessageCatalog:
        return self._catalog

    def set_credentials(self, raw: str) -> int:
        """Replace the credential pool from a comma-separated string."""
        return self._store.set_credentials(raw)

    # -------------------------------------------------------------------------
    # Shared request/extract helpers
    # -------------------------------------------------------------------------

    async def _generate_text(
        self,
        api_key: str,
        model: str,
        contents: Any,
        generation_config: Dict[str, Any],
    ) -> str:
        if isinstance(contents, str):
            contents = [{"role": "user", "parts": [{"text": contents}]}]
        data = await self._client.generate_content(
            api_key,
            model,
            {"contents": contents, "generationConfig": generation_config},
        )
        parts = extract_content_parts(data)
        if not parts.text:
            raise ContentFilterError(
                self._catalog.no_text_generated, refusal_text=parts.block_reason
            )
        return parts.text

    async def _generate_image(self, api_key: str, parts: List[Dict[str, Any]]) -> bytes:
        data = await self._client.generate_content(
            api_key,
            self._models.image_edit,
            {
                "contents": [{"role": "user", "parts": parts}],
                "generationConfig": {"responseModalities": ["IMAGE", "TEXT"]},
            },
        )
        content = extract_content_parts(data)
        if content.images:
            return content.images[0]

        refusal = (content.texts[0].strip() if content.texts else "") or None
        reason = refusal or content.block_reason or self._catalog.no_image_generated
        raise ContentFilterError(
            self._catalog.image_rejected.format(reason=reason), refusal_text=refusal
        )

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    async def translate(self, text: str, target_language: str) -> str:
        """Translate text into the language named by a tag ("en", "vi", ...).

        Empty or whitespace-only text returns "" without a remote call.
        """
        if not text or not text.strip():
            return ""

        contents = prompts.translation_instruction(text, target_language)

        async def call(api_key: str) -> str:
            return await self._generate_text(
                api_key, self._models.text, contents, _text_config(0.1)
            )

        return await self._executor.execute(
            call,
            self._catalog.translate_failed.format(
                language=self._catalog.language_name(target_language)
            ),
        )

    async def generate_image_from_text(
        self, prompt: str, count: int = 1, aspect_ratio: str = "1:1"
    ) -> List[bytes]:
        """Generate ``count`` images from a text prompt."""
        _validate_count(count, MAX_IMAGES, "count")
        if aspect_ratio not in ASPECT_RATIOS:
            raise ValueError(
                f"aspect_ratio must be one of {', '.join(ASPECT_RATIOS)}, got {aspect_ratio!r}"
            )

        payload = {
            "instances": [{"prompt": prompt}],
            "parameters": {
                "sampleCount": count,
                "aspectRatio": aspect_ratio,
                "outputOptions": {"mimeType": "image/png"},
            },
        }

        async def call(api_key: str) -> List[bytes]:
            data = await self._client.predict(api_key, self._models.image, payload)
            images = extract_predicted_images(data)
            if not images:
                raise ContentFilterError(self._catalog.no_image_generated)
            return images

        return await self._executor.execute(call, self._catalog.text_to_image_failed)

    async def edit_image(self, prompt: str, image: MediaInput) -> bytes:
        """Edit one image following the prompt, keeping the person unchanged."""
        parts = [image.to_inline_part(), {"text": prompts.edit_instruction(prompt)}]

        async def call(api_key: str) -> bytes:
            return await self._generate_image(api_key, parts)

        return await self._executor.execute(call, self._catalog.edit_failed)

    async def combine_images(
        self,
        prompt: str,
        first: MediaInput,
        second: MediaInput,
        variant: CompositionVariant = CompositionVariant.SUBJECT_PRODUCT,
    ) -> bytes:
        """Compose two images into one.

        Args:
            prompt: Creative direction for the scene.
            first: Subject image, or the first person.
            second: Product image, or the second person.
            variant: SUBJECT_PRODUCT or TWO_PEOPLE.
        """
        if variant == CompositionVariant.SUBJECT_PRODUCT:
            instruction = prompts.subject_product_instruction(prompt)
        elif variant == CompositionVariant.TWO_PEOPLE:
            instruction = prompts.two_people_instruction(prompt)
        else:
            raise ValueError(f"unsupported composition variant: {variant!r}")

        parts = [first.to_inline_part(), second.to_inline_part(), {"text": instruction}]

        async def call(api_key: str) -> bytes:
            return await self._generate_image(api_key, parts)

        return await self._executor.execute(call, self._catalog.combine_failed)

    async def generate_video(
        self,
        prompt: str,
        image: Optional[MediaInput] = None,
        count: int = 1,
        on_progress: Optional[ProgressCallback] = None,
    ) -> List[str]:
        """Generate videos and return their download links.

        The initiating call returns an operation handle that is polled with the
        same credential that created it. A quota failure anywhere in the
        attempt restarts the whole generation on the next credential.
        """
        _validate_count(count, MAX_VIDEOS, "count")

        instance: Dict[str, Any] = {"prompt": prompt}
        if image is not None:
            instance["image"] = {
                "bytesBase64Encoded": image.to_base64(),
                "mimeType": image.media_type,
            }
        payload = {"instances": [instance], "parameters": {"sampleCount": count}}

        def report(message: str) -> None:
            if on_progress is not None:
                on_progress(message)

        async def call(api_key: str) -> List[str]:
            report(self._catalog.video_starting)
            handle = await self._client.predict_long_running(
                api_key, self._models.video, payload
            )
            report(self._catalog.video_submitted)

            async def refresh(current: OperationHandle) -> OperationHandle:
                return await self._client.get_operation(api_key, current)

            links = await self._poller.poll(handle, refresh, on_progress)
            report(self._catalog.video_done)
            return [link.replace("/v1main/", "/v1beta/") for link in links]

        return await self._executor.execute(call, self._catalog.video_failed)

    async def elaborate_prompt(self, base_prompt: str) -> str:
        """Expand a short idea into a detailed image-generation prompt."""
        contents = prompts.elaboration_instruction(base_prompt)

        async def call(api_key: str) -> str:
            return await self._generate_text(
                api_key, self._models.text, contents, _text_config(0.8)
            )

        return await self._executor.execute(call, self._catalog.elaborate_failed)

    async def describe_image_for_video(self, image: MediaInput) -> str:
        """Write a video-generation prompt that brings an image to life."""
        contents = [
            {
                "role": "user",
                "parts": [
                    image.to_inline_part(),
                    {"text": prompts.VIDEO_FROM_IMAGE_INSTRUCTION},
                ],
            }
        ]

        async def call(api_key: str) -> str:
            return await self._generate_text(
                api_key,
                self._models.image_edit,
                contents,
                {"responseModalities": ["TEXT"], "temperature": 0.7},
            )

        return await self._executor.execute(call, self._catalog.video_prompt_failed)

    async def suggest_scene_prompt(self, style: Optional[str] = None) -> str:
        """Suggest a background and mood for a subject+product composition.

        Falls back to a fixed prompt when the remote call fails.
        """
        contents = prompts.scene_instruction(style)

        async def call(api_key: str) -> str:
            return await self._generate_text(
                api_key, self._models.text, contents, _text_config(0.9)
            )

        try:
            return await self._executor.execute(call, self._catalog.elaborate_failed)
        except GatewayError as e:
            logger.warning(
                "Scene prompt generation failed (%s), using fallback", e.category.value
            )
            return prompts.DEFAULT_SCENE_PROMPT
