"""Minimal HTTP server for GenAI Studio.

This module exposes the creative operations to a UI layer over HTTP. Images
travel as base64 strings in JSON; classified errors are returned as
``{"category": ..., "message": ...}`` with a status code per category.

Design principles:
- Single-tenant: one credential pool per process (optional bearer token only)
- BYOK: credentials come from the environment or ``PUT /v1/credentials``
- Ephemeral: nothing is persisted, logs go to stdout

Usage:
    pip install "genai-studio[http]"
    genai-studio-server

Or programmatically:
    from genai_studio.http_server import app
    import uvicorn
    uvicorn.run(app, host="127.0.0.1", port=8000)
"""

import asyncio
import json
import logging
import os
from typing import Any, AsyncIterator, Dict, List, Optional, Set

from fastapi import Depends, FastAPI, HTTPException, Request, Security
from fastapi.responses import JSONResponse, StreamingResponse
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel, Field

from ._version import __version__
from .gateway.errors import ErrorCategory, GatewayError
from .gateway.types import MediaInput
from .studio import ASPECT_RATIOS, MAX_IMAGES, MAX_VIDEOS, CompositionVariant, CreativeStudio
from .unified_config import get_config

logger = logging.getLogger(__name__)


# Security scheme for Bearer token authentication
security = HTTPBearer(auto_error=False)


def get_api_token() -> Optional[str]:
    """Get the configured API token from environment.

    Returns None if no token is configured, meaning auth is optional.
    """
    token = os.environ.get("GENAI_STUDIO_API_TOKEN")
    # Treat empty string as not configured
    return token if token else None


async def verify_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(security),
) -> None:
    """Verify the Bearer token if GENAI_STUDIO_API_TOKEN is configured.

    - If GENAI_STUDIO_API_TOKEN is set, all protected endpoints require auth
    - If not set, auth is optional
    - Health endpoint bypasses this check entirely

    Raises:
        HTTPException: 401 if token is required but missing/invalid
    """
    api_token = get_api_token()

    if api_token is None:
        return

    if credentials is None or credentials.credentials != api_token:
        raise HTTPException(
            status_code=401,
            detail="Invalid or missing API token. Provide Authorization: Bearer <token>",
        )


# Dependency for protected endpoints
auth_dependency = Depends(verify_token)


# =============================================================================
# Studio instance
# =============================================================================

_studio: Optional[CreativeStudio] = None


def get_studio() -> CreativeStudio:
    """Return the process-wide studio, built from the unified config on first use."""
    global _studio
    if _studio is None:
        _studio = CreativeStudio.from_config()
    return _studio


def reset_studio() -> None:
    """Drop the process-wide studio so the next request rebuilds it."""
    global _studio
    _studio = None


# FastAPI app instance
app = FastAPI(
    title="GenAI Studio",
    description="Image and video generation with a rotating API key pool",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)


STATUS_BY_CATEGORY: Dict[ErrorCategory, int] = {
    ErrorCategory.CONFIG: 400,
    ErrorCategory.AUTH: 401,
    ErrorCategory.QUOTA: 429,
    ErrorCategory.QUOTA_EXHAUSTED_ALL: 429,
    ErrorCategory.UNAVAILABLE: 503,
    ErrorCategory.INTERNAL: 502,
    ErrorCategory.CONTENT_REJECTED: 422,
    ErrorCategory.UNKNOWN: 502,
}


@app.exception_handler(GatewayError)
async def gateway_error_handler(request: Request, exc: GatewayError) -> JSONResponse:
    return JSONResponse(
        status_code=STATUS_BY_CATEGORY.get(exc.category, 502),
        content=exc.to_dict(),
    )


@app.exception_handler(ValueError)
async def value_error_handler(request: Request, exc: ValueError) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content={"category": "invalid_request", "message": str(exc)},
    )


# =============================================================================
# Request / response models
# =============================================================================


class ImagePayload(BaseModel):
    """An image sent as base64 (a data URL is accepted too)."""

    data: str = Field(..., description="Base64-encoded image bytes or data URL")
    filename: str = Field(default="image.png")
    mime_type: str = Field(default="image/png")

    def to_media(self) -> MediaInput:
        return MediaInput.from_base64(self.filename, self.data, self.mime_type)


class CredentialsRequest(BaseModel):
    keys: str = Field(..., description="Comma-separated API keys")


class CredentialsResponse(BaseModel):
    count: int


class TranslateRequest(BaseModel):
    text: str
    target_language: str = Field(default="en", description="Language tag, e.g. 'en' or 'vi'")


class TextResponse(BaseModel):
    text: str


class GenerateImagesRequest(BaseModel):
    prompt: str
    count: int = Field(default=1, ge=1, le=MAX_IMAGES)
    aspect_ratio: str = Field(
        default="1:1", description=f"One of {', '.join(ASPECT_RATIOS)}"
    )


class EditImageRequest(BaseModel):
    prompt: str
    image: ImagePayload


class CombineImagesRequest(BaseModel):
    prompt: str = ""
    first: ImagePayload
    second: ImagePayload
    variant: CompositionVariant = CompositionVariant.SUBJECT_PRODUCT


class ImagesResponse(BaseModel):
    images: List[str] = Field(..., description="Base64-encoded images")


class ElaborateRequest(BaseModel):
    prompt: str


class VideoPromptRequest(BaseModel):
    image: ImagePayload


class SceneRequest(BaseModel):
    style: Optional[str] = None


class VideoRequest(BaseModel):
    prompt: str
    image: Optional[ImagePayload] = None
    count: int = Field(default=1, ge=1, le=MAX_VIDEOS)


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    service: str
    credentials: Dict[str, Any]


def _encode_images(images: List[bytes]) -> ImagesResponse:
    return ImagesResponse(
        images=[MediaInput("generated.png", data).to_base64() for data in images]
    )


# =============================================================================
# Endpoints
# =============================================================================


@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health(studio: CreativeStudio = Depends(get_studio)) -> HealthResponse:
    """Health check endpoint with credential pool statistics (masked)."""
    return HealthResponse(
        status="ok", service="genai-studio", credentials=studio.store.get_stats()
    )


@app.put(
    "/v1/credentials",
    response_model=CredentialsResponse,
    tags=["Credentials"],
    dependencies=[auth_dependency],
)
async def set_credentials(
    request: CredentialsRequest, studio: CreativeStudio = Depends(get_studio)
) -> CredentialsResponse:
    """Replace the credential pool and reset rotation."""
    return CredentialsResponse(count=studio.set_credentials(request.keys))


@app.post(
    "/v1/translate",
    response_model=TextResponse,
    tags=["Prompts"],
    dependencies=[auth_dependency],
)
async def translate(
    request: TranslateRequest, studio: CreativeStudio = Depends(get_studio)
) -> TextResponse:
    return TextResponse(text=await studio.translate(request.text, request.target_language))


@app.post(
    "/v1/images/generate",
    response_model=ImagesResponse,
    tags=["Images"],
    dependencies=[auth_dependency],
)
async def generate_images(
    request: GenerateImagesRequest, studio: CreativeStudio = Depends(get_studio)
) -> ImagesResponse:
    images = await studio.generate_image_from_text(
        request.prompt, request.count, request.aspect_ratio
    )
    return _encode_images(images)


@app.post(
    "/v1/images/edit",
    response_model=ImagesResponse,
    tags=["Images"],
    dependencies=[auth_dependency],
)
async def edit_image(
    request: EditImageRequest, studio: CreativeStudio = Depends(get_studio)
) -> ImagesResponse:
    image = await studio.edit_image(request.prompt, request.image.to_media())
    return _encode_images([image])


@app.post(
    "/v1/images/combine",
    response_model=ImagesResponse,
    tags=["Images"],
    dependencies=[auth_dependency],
)
async def combine_images(
    request: CombineImagesRequest, studio: CreativeStudio = Depends(get_studio)
) -> ImagesResponse:
    image = await studio.combine_images(
        request.prompt,
        request.first.to_media(),
        request.second.to_media(),
        request.variant,
    )
    return _encode_images([image])


@app.post(
    "/v1/prompts/elaborate",
    response_model=TextResponse,
    tags=["Prompts"],
    dependencies=[auth_dependency],
)
async def elaborate_prompt(
    request: ElaborateRequest, studio: CreativeStudio = Depends(get_studio)
) -> TextResponse:
    return TextResponse(text=await studio.elaborate_prompt(request.prompt))


@app.post(
    "/v1/prompts/video-from-image",
    response_model=TextResponse,
    tags=["Prompts"],
    dependencies=[auth_dependency],
)
async def describe_image_for_video(
    request: VideoPromptRequest, studio: CreativeStudio = Depends(get_studio)
) -> TextResponse:
    return TextResponse(
        text=await studio.describe_image_for_video(request.image.to_media())
    )


@app.post(
    "/v1/prompts/scene",
    response_model=TextResponse,
    tags=["Prompts"],
    dependencies=[auth_dependency],
)
async def suggest_scene_prompt(
    request: SceneRequest, studio: CreativeStudio = Depends(get_studio)
) -> TextResponse:
    return TextResponse(text=await studio.suggest_scene_prompt(request.style))


# =============================================================================
# Video streaming (Server-Sent Events)
# =============================================================================


def get_sse_headers() -> Dict[str, str]:
    return {
        "Cache-Control": "no-cache",
        "Connection": "keep-alive",
        "X-Accel-Buffering": "no",
    }


def format_sse_event(event: str, data: Dict[str, Any]) -> str:
    return f"event: {event}\ndata: {json.dumps(data, ensure_ascii=False)}\n\n"


# Generations outlive a disconnected client; hold them until they finish
_video_tasks: Set["asyncio.Task[List[str]]"] = set()


def _video_task_done(task: "asyncio.Task[List[str]]") -> None:
    _video_tasks.discard(task)
    if not task.cancelled() and task.exception() is not None:
        logger.debug("Video task finished with %s", type(task.exception()).__name__)


async def video_event_generator(
    studio: CreativeStudio,
    prompt: str,
    image: Optional[MediaInput] = None,
    count: int = 1,
) -> AsyncIterator[str]:
    """Run a video generation and yield its progress as SSE events.

    Closing the stream early does not cancel the generation: the remote
    operation and its polling run to completion in the background.

    Events:
        video.progress: {"message": ...} once per progress message
        video.complete: {"links": [...]} on success
        video.error:    {"category": ..., "message": ...} on failure
    """
    queue: "asyncio.Queue[Optional[str]]" = asyncio.Queue()
    task = asyncio.create_task(
        studio.generate_video(prompt, image, count, on_progress=queue.put_nowait)
    )
    _video_tasks.add(task)
    task.add_done_callback(_video_task_done)
    # None marks the end of the progress stream
    task.add_done_callback(lambda _: queue.put_nowait(None))

    while True:
        message = await queue.get()
        if message is None:
            break
        yield format_sse_event("video.progress", {"message": message})

    try:
        links = task.result()
    except GatewayError as e:
        logger.warning("Video generation failed (%s)", e.category.value)
        yield format_sse_event("video.error", e.to_dict())
        return
    except ValueError as e:
        yield format_sse_event(
            "video.error", {"category": "invalid_request", "message": str(e)}
        )
        return

    yield format_sse_event("video.complete", {"links": links})


@app.post("/v1/videos", tags=["Videos"], dependencies=[auth_dependency])
async def generate_video(
    request: VideoRequest, studio: CreativeStudio = Depends(get_studio)
) -> StreamingResponse:
    """Generate videos, streaming progress via Server-Sent Events (SSE).

    **Event Types:**
    - `video.progress`: A progress message
    - `video.complete`: Download links are ready
    - `video.error`: Generation failed (category and message)
    """
    image = request.image.to_media() if request.image is not None else None
    return StreamingResponse(
        video_event_generator(studio, request.prompt, image, request.count),
        media_type="text/event-stream",
        headers=get_sse_headers(),
    )


def main() -> None:
    """Entry point for the genai-studio-server command."""
    import uvicorn

    logging.basicConfig(
        level=os.environ.get("GENAI_STUDIO_LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    config = get_config()
    uvicorn.run(app, host=config.server.host, port=config.server.port)


if __name__ == "__main__":
    main()
