"""SDK Camera API - photo capture and preparation."""

from __future__ import annotations

import io
import time
from dataclasses import dataclass, field

from PIL import Image, UnidentifiedImageError

from framevision.common.logging import get_logger
from framevision.config import Config


class PhotoDecodeError(Exception):
    """Raised when a captured photo cannot be decoded."""


@dataclass
class Photo:
    """Captured photo."""

    data: bytes
    width: int
    height: int
    timestamp: float = field(default_factory=time.time)
    metadata: dict = field(default_factory=dict)


class CameraBackend:
    """Abstract camera backend."""

    async def capture(self, quality: int = 85) -> Photo:
        """Capture a JPEG photo."""
        raise NotImplementedError


class MockCameraBackend(CameraBackend):
    """Mock camera producing a solid colour image."""

    def __init__(self, resolution: tuple[int, int] = (640, 480)) -> None:
        self.resolution = resolution
        self._photo_count = 0

    async def capture(self, quality: int = 85) -> Photo:
        """Capture a mock photo."""
        self._photo_count += 1

        width, height = self.resolution
        img = Image.new("RGB", (width, height), color=(73, 109, 137))
        buffer = io.BytesIO()
        img.save(buffer, format="JPEG", quality=quality)

        return Photo(
            data=buffer.getvalue(),
            width=width,
            height=height,
            metadata={"mock": True, "photo_number": self._photo_count},
        )


def prepare_photo(photo: Photo, rotation: int = 270, quality: int = 85) -> bytes:
    """Make a captured photo upright and re-encode it as JPEG.

    Args:
        photo: Photo as delivered by the camera.
        rotation: Clockwise rotation in degrees.
        quality: JPEG quality (1-100).

    Returns:
        JPEG bytes.

    Raises:
        PhotoDecodeError: If the photo is not a decodable image.
    """
    try:
        img = Image.open(io.BytesIO(photo.data))
        img.load()
    except (UnidentifiedImageError, OSError) as e:
        raise PhotoDecodeError("Error decoding photo") from e

    if rotation % 360:
        # PIL rotates counter-clockwise
        img = img.rotate(-rotation, expand=True)

    buffer = io.BytesIO()
    img.convert("RGB").save(buffer, format="JPEG", quality=quality)
    return buffer.getvalue()


def create_camera(config: Config) -> CameraBackend:
    """Create the camera backend for a configuration.

    Capture on the device itself runs over Bluetooth outside this package,
    so only the mock backend ships here.
    """
    if not config.mock_mode:
        get_logger("sdk.camera").warning("no_device_camera", fallback="mock")

    width, height = config.capture.mock_resolution
    return MockCameraBackend(resolution=(width, height))
