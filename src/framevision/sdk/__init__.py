"""Collaborators of the capture pipeline: camera, model and displays.

Example usage:

    from framevision.sdk import MockCameraBackend, MockGenerationClient

    camera = MockCameraBackend()
    photo = await camera.capture()

    async for fragment in MockGenerationClient().generate("What is this?", photo.data):
        print(fragment, end="", flush=True)

"""

from framevision.sdk.camera import CameraBackend, MockCameraBackend, Photo, PhotoDecodeError, prepare_photo
from framevision.sdk.display import ConsoleFrameDisplay, FrameDisplay, PhoneScreen
from framevision.sdk.llm import GeminiClient, GenerationClient, GenerationError, MockGenerationClient

__all__ = [
    "CameraBackend",
    "MockCameraBackend",
    "Photo",
    "PhotoDecodeError",
    "prepare_photo",
    "ConsoleFrameDisplay",
    "FrameDisplay",
    "PhoneScreen",
    "GeminiClient",
    "GenerationClient",
    "GenerationError",
    "MockGenerationClient",
]
