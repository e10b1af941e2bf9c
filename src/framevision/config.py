"""Configuration management for Frame Vision."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_INSTRUCTIONS = "3-Tap: take photo\n______________\n1-Tap: next page\n2-Tap: previous page"


class DeviceConfig(BaseModel):
    """Device configuration."""

    name: str = "frame"
    mode: Literal["production", "development"] = "development"
    log_level: str = "INFO"


class DisplayConfig(BaseModel):
    """Wearable display configuration."""

    page_size: int = Field(default=5, gt=0)
    msg_code: int = 0x0A  # plain text message
    instructions: str = DEFAULT_INSTRUCTIONS
    width: int = 32


class GeminiConfig(BaseModel):
    """Generative model configuration."""

    api_key: str | None = None
    model: str = "gemini-1.5-flash-latest"
    endpoint: str = "https://generativelanguage.googleapis.com/v1beta"
    prompt: str = ""
    timeout_seconds: float = 60.0
    disable_safety: bool = True


class CaptureConfig(BaseModel):
    """Photo capture configuration."""

    # Sensor is mounted rotated 90 degrees clockwise
    rotation: int = 270
    jpeg_quality: int = Field(default=85, ge=1, le=100)
    mock_resolution: list[int] = [640, 480]


class Config(BaseSettings):
    """Main configuration for Frame Vision."""

    model_config = SettingsConfigDict(
        env_prefix="FRAMEVISION_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    device: DeviceConfig = Field(default_factory=DeviceConfig)
    display: DisplayConfig = Field(default_factory=DisplayConfig)
    gemini: GeminiConfig = Field(default_factory=GeminiConfig)
    capture: CaptureConfig = Field(default_factory=CaptureConfig)

    # Mock camera and model for development
    mock_mode: bool = False

    @classmethod
    def from_yaml(cls, path: Path | str) -> Config:
        """Load configuration from YAML file."""
        path = Path(path)
        if not path.exists():
            return cls()

        with open(path) as f:
            data = yaml.safe_load(f) or {}

        return cls(**data)

    def to_yaml(self, path: Path | str) -> None:
        """Save configuration to YAML file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w") as f:
            yaml.dump(self.model_dump(), f, default_flow_style=False)


def load_config(
    config_path: Path | str | None = None,
    env_override: bool = True,
) -> Config:
    """Load configuration from file and environment.

    Args:
        config_path: Path to config file. If None, searches standard locations.
        env_override: Whether to allow environment variables to override config.

    Returns:
        Loaded configuration.
    """
    search_paths = [
        Path.home() / ".config" / "framevision" / "config.yaml",
        Path("framevision.yaml"),
    ]

    if config_path:
        search_paths.insert(0, Path(config_path))

    config_file: Path | None = None
    for path in search_paths:
        if path.exists():
            config_file = path
            break

    if config_file:
        config = Config.from_yaml(config_file)
    else:
        config = Config()

    if env_override:
        api_key = os.environ.get("FRAMEVISION_GEMINI_API_KEY")
        if api_key:
            config.gemini.api_key = api_key

        if os.environ.get("FRAMEVISION_MOCK_MODE", "").lower() in ("1", "true", "yes"):
            config.mock_mode = True

    return config


class SettingsStore:
    """Persists the user-editable API key and prompt.

    Values are kept in a small YAML file separate from the main config so
    saving a new prompt never rewrites the rest of the configuration.
    """

    def __init__(self, path: Path | str | None = None) -> None:
        self.path = Path(path) if path else Path.home() / ".config" / "framevision" / "settings.yaml"

    def load(self) -> dict[str, str]:
        """Load stored settings, empty strings for anything unset."""
        data: dict[str, Any] = {}
        if self.path.exists():
            with open(self.path) as f:
                data = yaml.safe_load(f) or {}

        return {
            "api_key": str(data.get("api_key") or ""),
            "prompt": str(data.get("prompt") or ""),
        }

    def _save(self, key: str, value: str) -> None:
        data = self.load()
        data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w") as f:
            yaml.safe_dump(data, f, default_flow_style=False)

    def save_api_key(self, api_key: str) -> None:
        self._save("api_key", api_key)

    def save_prompt(self, prompt: str) -> None:
        self._save("prompt", prompt)

    def apply(self, config: Config) -> Config:
        """Overlay stored settings onto a config.

        Stored values win over the config file but not over an API key
        already supplied through the environment.
        """
        stored = self.load()
        if stored["api_key"] and not os.environ.get("FRAMEVISION_GEMINI_API_KEY"):
            config.gemini.api_key = stored["api_key"]
        if stored["prompt"]:
            config.gemini.prompt = stored["prompt"]
        return config
