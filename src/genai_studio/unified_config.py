"""Unified YAML configuration for GenAI Studio.

Configuration Priority: Environment Variables > YAML > Defaults

Example YAML configuration (genai_studio.yaml):

    studio:
      locale: vi
      credentials:
        api_keys: ${GEMINI_API_KEYS}
      models:
        text: gemini-2.5-flash
        image: imagen-4.0-generate-001
        image_edit: gemini-2.5-flash-image-preview
        video: veo-2.0-generate-001
      gemini:
        base_url: https://generativelanguage.googleapis.com/v1beta
        timeout_seconds: 120
      polling:
        interval_seconds: 10
"""

import logging
import os
import re
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

from .messages import CATALOGS

load_dotenv()

logger = logging.getLogger(__name__)


# =============================================================================
# Sub-configuration Models
# =============================================================================


class CredentialsConfig(BaseModel):
    """Comma-separated credential pool (never serialized back to YAML)."""

    api_keys: str = Field(default="", repr=False)


class ModelsConfig(BaseModel):
    """Remote model identifiers per kind of operation."""

    text: str = "gemini-2.5-flash"
    image: str = "imagen-4.0-generate-001"
    image_edit: str = "gemini-2.5-flash-image-preview"
    video: str = "veo-2.0-generate-001"


class GeminiConfig(BaseModel):
    """Remote endpoint settings."""

    base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    # None disables the per-request HTTP timeout
    timeout_seconds: Optional[float] = Field(default=120.0, gt=0)


class PollingConfig(BaseModel):
    """Long-running operation polling."""

    interval_seconds: float = Field(default=10.0, gt=0, le=600)


class ServerConfig(BaseModel):
    """HTTP surface settings."""

    host: str = "127.0.0.1"
    port: int = Field(default=8000, ge=1, le=65535)


# =============================================================================
# Main Unified Configuration
# =============================================================================


class StudioConfig(BaseModel):
    """Unified configuration for GenAI Studio."""

    locale: str = "en"
    credentials: CredentialsConfig = Field(default_factory=CredentialsConfig)
    models: ModelsConfig = Field(default_factory=ModelsConfig)
    gemini: GeminiConfig = Field(default_factory=GeminiConfig)
    polling: PollingConfig = Field(default_factory=PollingConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)

    @field_validator("locale")
    @classmethod
    def validate_locale(cls, v: str) -> str:
        v = v.lower()
        if v not in CATALOGS:
            raise ValueError(f"invalid locale '{v}', must be one of {sorted(CATALOGS)}")
        return v

    def to_yaml(self) -> str:
        """Serialize configuration to YAML string, without credentials."""
        config_dict = {"studio": self.to_dict()}
        return yaml.dump(config_dict, default_flow_style=False, sort_keys=False)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize configuration to dictionary, without credentials."""
        return self.model_dump(exclude_none=True, exclude={"credentials"})


# =============================================================================
# Configuration Loading Functions
# =============================================================================


def _substitute_env_vars(value: Any) -> Any:
    """Recursively substitute environment variables in configuration values.

    Supports ${VAR_NAME} syntax.
    """
    if isinstance(value, str):
        pattern = r"\$\{([^}]+)\}"
        for var_name in re.findall(pattern, value):
            value = value.replace(f"${{{var_name}}}", os.getenv(var_name, ""))
        return value
    elif isinstance(value, dict):
        return {k: _substitute_env_vars(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [_substitute_env_vars(item) for item in value]
    return value


def load_config(
    config_path: Optional[Path] = None,
    strict: bool = False,
) -> StudioConfig:
    """Load configuration from YAML file.

    Args:
        config_path: Path to YAML configuration file. If None, uses defaults.
        strict: If True, raise ValueError on validation errors. If False,
                log a warning and fall back to defaults on errors.

    Returns:
        StudioConfig object

    Raises:
        ValueError: If strict=True and configuration is invalid
    """
    if config_path is None or not config_path.exists():
        return StudioConfig()

    try:
        with open(config_path, "r") as f:
            raw_config = yaml.safe_load(f)

        if raw_config is None:
            return StudioConfig()

        raw_config = _substitute_env_vars(raw_config)
        return StudioConfig(**(raw_config.get("studio") or {}))

    except yaml.YAMLError as e:
        if strict:
            raise ValueError(f"Invalid YAML: {e}")
        logger.warning("Ignoring invalid YAML in %s: %s", config_path, e)
        return StudioConfig()
    except (TypeError, ValueError, AttributeError) as e:
        if strict:
            raise ValueError(f"Configuration error: {e}")
        logger.warning("Ignoring invalid configuration in %s: %s", config_path, e)
        return StudioConfig()


def _find_config_file() -> Optional[Path]:
    """Find configuration file in standard locations.

    Search order:
    1. GENAI_STUDIO_CONFIG environment variable
    2. ./genai_studio.yaml (current directory)
    3. ~/.config/genai-studio/genai_studio.yaml
    """
    env_path = os.getenv("GENAI_STUDIO_CONFIG")
    if env_path:
        path = Path(env_path)
        if path.exists():
            return path

    cwd_path = Path.cwd() / "genai_studio.yaml"
    if cwd_path.exists():
        return cwd_path

    home_path = Path.home() / ".config" / "genai-studio" / "genai_studio.yaml"
    if home_path.exists():
        return home_path

    return None


def _apply_env_overrides(config: StudioConfig) -> StudioConfig:
    """Apply environment variable overrides to configuration.

    Environment variables take precedence over YAML configuration.
    """
    config_dict = config.model_dump()

    # Credentials (first non-empty wins)
    for env_var in ("GEMINI_API_KEYS", "GEMINI_API_KEY", "GOOGLE_API_KEY"):
        keys = os.getenv(env_var)
        if keys:
            config_dict["credentials"]["api_keys"] = keys
            break

    locale_env = os.getenv("GENAI_STUDIO_LOCALE")
    if locale_env:
        config_dict["locale"] = locale_env

    interval_env = os.getenv("GENAI_STUDIO_POLL_INTERVAL")
    if interval_env:
        config_dict["polling"]["interval_seconds"] = float(interval_env)

    base_url_env = os.getenv("GENAI_STUDIO_BASE_URL")
    if base_url_env:
        config_dict["gemini"]["base_url"] = base_url_env

    timeout_env = os.getenv("GENAI_STUDIO_TIMEOUT")
    if timeout_env:
        config_dict["gemini"]["timeout_seconds"] = (
            None if timeout_env.lower() in ("none", "0") else float(timeout_env)
        )

    # Model overrides
    for kind in ("text", "image", "image_edit", "video"):
        model_env = os.getenv(f"GENAI_STUDIO_{kind.upper()}_MODEL")
        if model_env:
            config_dict["models"][kind] = model_env

    return StudioConfig(**config_dict)


def get_effective_config(config_path: Optional[Path] = None) -> StudioConfig:
    """Get the effective configuration with all overrides applied.

    Priority: Environment Variables > YAML > Defaults

    Args:
        config_path: Optional explicit path to configuration file.
                    If None, searches standard locations.

    Returns:
        StudioConfig with all overrides applied
    """
    if config_path is None:
        config_path = _find_config_file()

    config = load_config(config_path)
    return _apply_env_overrides(config)


# =============================================================================
# Global Configuration Instance
# =============================================================================

_global_config: Optional[StudioConfig] = None


def get_config() -> StudioConfig:
    """Get the global configuration instance.

    This function caches the configuration after first load.
    Use reload_config() to force a reload.
    """
    global _global_config
    if _global_config is None:
        _global_config = get_effective_config()
    return _global_config


def reload_config() -> StudioConfig:
    """Reload the global configuration from disk."""
    global _global_config
    _global_config = get_effective_config()
    return _global_config
