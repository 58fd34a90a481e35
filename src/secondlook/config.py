"""
Configuration management for secondlook package.

Settings are read from a TOML file (``./secondlook.toml`` or
``~/.secondlook.toml``) and may be overridden by environment variables.
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional

import tomli
from pydantic import BaseModel, Field, ValidationError, validator

from .models import DescriptionStyle

CONFIG_FILENAMES = ("secondlook.toml", ".secondlook.toml")


class Auth(BaseModel):
    """Credentials for the content-generation service."""

    google_api_key: str = Field(..., description="Google Generative AI API key")

    @validator("google_api_key")
    def validate_api_key(cls, v: str) -> str:
        cleaned = v.strip()
        if not cleaned:
            raise ValueError("Google API key cannot be empty")
        return cleaned


class Defaults(BaseModel):
    """Generation defaults."""

    text_model: str = Field(
        default="gemini-2.5-flash",
        description="Vision-capable model used to write descriptions",
    )

    request_timeout_seconds: float = Field(
        default=30.0,
        description="Hard ceiling on a single description request",
        gt=0,
        le=600,
    )

    max_concurrent_requests: int = Field(
        default=3, description="Parallel requests in a batch", ge=1, le=50
    )

    requests_per_minute: Optional[int] = Field(
        default=None, description="Optional batch rate limit", ge=1
    )

    default_style: DescriptionStyle = Field(
        default=DescriptionStyle.DETAILED, description="Template used when unset"
    )


class Settings(BaseModel):
    """Complete application settings."""

    auth: Auth
    defaults: Defaults = Field(default_factory=Defaults)


def _find_config_file() -> Optional[Path]:
    candidates = [Path.cwd() / CONFIG_FILENAMES[0], Path.home() / CONFIG_FILENAMES[1]]
    for path in candidates:
        if path.exists():
            return path
    return None


def _apply_env_overrides(data: Dict[str, Any]) -> Dict[str, Any]:
    auth = dict(data.get("auth") or {})
    defaults = dict(data.get("defaults") or {})

    api_key = os.getenv("GOOGLE_API_KEY")
    if api_key:
        auth["google_api_key"] = api_key

    overrides = {
        "SECONDLOOK_TEXT_MODEL": "text_model",
        "SECONDLOOK_REQUEST_TIMEOUT": "request_timeout_seconds",
        "SECONDLOOK_MAX_CONCURRENT": "max_concurrent_requests",
        "SECONDLOOK_REQUESTS_PER_MINUTE": "requests_per_minute",
    }
    for env_name, field_name in overrides.items():
        value = os.getenv(env_name)
        if value:
            defaults[field_name] = value

    return {**data, "auth": auth, "defaults": defaults}


async def load_config() -> Settings:
    """
    Load settings from TOML and environment variables.

    Returns:
        Settings: Validated settings

    Raises:
        FileNotFoundError: If neither a config file nor GOOGLE_API_KEY exists
        ValueError: If the TOML file is malformed or validation fails
    """
    config_file = _find_config_file()
    data: Dict[str, Any] = {}

    if config_file is not None:
        try:
            with open(config_file, "rb") as f:
                data = tomli.load(f)
        except tomli.TOMLDecodeError as e:
            raise ValueError(f"Invalid TOML syntax in {config_file}: {e}") from e
    elif not os.getenv("GOOGLE_API_KEY"):
        raise FileNotFoundError(
            "No configuration file found (./secondlook.toml or ~/.secondlook.toml) "
            "and GOOGLE_API_KEY environment variable is not set"
        )

    data = _apply_env_overrides(data)

    try:
        return Settings(**data)
    except ValidationError as e:
        raise ValueError(f"Configuration validation failed: {e}") from e
