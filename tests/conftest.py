"""Pytest configuration and fixtures for Frame Vision tests."""

from __future__ import annotations

import io

import pytest

from framevision.app import FrameVisionApp
from framevision.common.events import EventBus
from framevision.config import Config
from framevision.sdk.camera import MockCameraBackend
from framevision.sdk.display import FrameDisplay
from framevision.sdk.llm import MockGenerationClient


def pytest_configure(config: pytest.Config) -> None:
    """Configure test markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests")


class RecordingDisplay(FrameDisplay):
    """Display that keeps every text block it is sent."""

    def __init__(self) -> None:
        self.sent: list[tuple[str, int]] = []

    async def send_text(self, text: str, msg_code: int = 0x0A) -> None:
        self.sent.append((text, msg_code))

    @property
    def last(self) -> str | None:
        return self.sent[-1][0] if self.sent else None


@pytest.fixture
def mock_config() -> Config:
    """Get mock configuration."""
    cfg = Config()
    cfg.mock_mode = True
    cfg.device.mode = "development"
    cfg.device.log_level = "DEBUG"
    cfg.display.page_size = 2
    cfg.gemini.prompt = "What am I looking at?"
    return cfg


@pytest.fixture
def display() -> RecordingDisplay:
    return RecordingDisplay()


@pytest.fixture
def event_bus() -> EventBus:
    return EventBus()


@pytest.fixture
def generator() -> MockGenerationClient:
    return MockGenerationClient(response="Hello world\nSecond line\nThird line")


@pytest.fixture
def vision_app(
    mock_config: Config,
    display: RecordingDisplay,
    event_bus: EventBus,
    generator: MockGenerationClient,
) -> FrameVisionApp:
    """Create app wired to mock collaborators."""
    return FrameVisionApp(
        mock_config,
        camera=MockCameraBackend(),
        generator=generator,
        display=display,
        bus=event_bus,
    )


@pytest.fixture
def mock_image_bytes() -> bytes:
    """Create mock JPEG image."""
    from PIL import Image

    img = Image.new("RGB", (640, 480), color=(73, 109, 137))
    buffer = io.BytesIO()
    img.save(buffer, format="JPEG", quality=85)
    return buffer.getvalue()
