"""GenAI Studio - image and video generation over a rotating API key pool.

Usage:
    from genai_studio import CreativeStudio

    studio = CreativeStudio.from_config()
    studio.set_credentials("key-a,key-b")

    images = await studio.generate_image_from_text("a lighthouse at dusk", count=2)
    links = await studio.generate_video("waves rolling in", on_progress=print)

For HTTP server usage:
    pip install "genai-studio[http]"
    genai-studio-server
"""

from genai_studio.studio import (
    ASPECT_RATIOS,
    CompositionVariant,
    CreativeStudio,
)
from genai_studio.gateway import (
    CredentialStore,
    CredentialsExhaustedError,
    ErrorCategory,
    GatewayError,
    MediaInput,
    RotatingExecutor,
)
from genai_studio.messages import ENGLISH, VIETNAMESE, MessageCatalog, get_catalog
from genai_studio.unified_config import StudioConfig, get_config, reload_config
from genai_studio._version import __version__, __version_tuple__

__all__ = [
    # Facade
    "ASPECT_RATIOS",
    "CompositionVariant",
    "CreativeStudio",
    # Gateway
    "CredentialStore",
    "CredentialsExhaustedError",
    "ErrorCategory",
    "GatewayError",
    "MediaInput",
    "RotatingExecutor",
    # Messages
    "ENGLISH",
    "VIETNAMESE",
    "MessageCatalog",
    "get_catalog",
    # Configuration
    "StudioConfig",
    "get_config",
    "reload_config",
    # Version
    "__version__",
    "__version_tuple__",
]
