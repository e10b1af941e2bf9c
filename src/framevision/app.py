"""Frame Vision - capture, ask the model, page the answer.

Tap gestures on the wearable drive the app:

    1-Tap: next page
    2-Tap: previous page
    3-Tap: take a photo and stream the model's answer

Usage:
    # Mock camera and model (development)
    framevision run --mock
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass

from framevision.common.events import (
    CAPTURE_COMPLETED,
    CAPTURE_FAILED,
    CAPTURE_STARTED,
    PAGE_CHANGED,
    RESPONSE_UPDATED,
    EventBus,
)
from framevision.common.logging import get_logger
from framevision.config import Config
from framevision.core import AppendResult, ResponseSession
from framevision.sdk.camera import CameraBackend, Photo, prepare_photo
from framevision.sdk.display import FrameDisplay
from framevision.sdk.llm import GenerationClient, GenerationError

APP_ID = "framevision"


@dataclass(frozen=True)
class SharePayload:
    """Text and image handed to the platform share mechanism."""

    text: str
    image: bytes
    mime_type: str = "image/jpeg"
    filename: str = "image.jpg"


class FrameVisionApp:
    """Capture-and-generate pipeline for the wearable."""

    def __init__(
        self,
        config: Config,
        camera: CameraBackend,
        generator: GenerationClient | None,
        display: FrameDisplay,
        bus: EventBus | None = None,
    ) -> None:
        """Initialize the app.

        Args:
            config: Configuration.
            camera: Photo source.
            generator: Model client, None when no API key is set.
            display: Wearable display.
            bus: Event bus for views (created if None).
        """
        self.config = config
        self.camera = camera
        self.generator = generator
        self.display = display
        self.bus = bus or EventBus()
        self.session = ResponseSession(config.display.page_size)
        self.logger = get_logger(APP_ID)

        self._processing = False
        self._task: asyncio.Task | None = None
        self._image: bytes | None = None

    @property
    def processing(self) -> bool:
        """Whether a capture is in flight."""
        return self._processing

    @property
    def image(self) -> bytes | None:
        """Upright JPEG of the last capture."""
        return self._image

    async def print_instructions(self) -> None:
        await self.display.send_text(self.config.display.instructions, self.config.display.msg_code)

    async def show_page(self) -> None:
        """Send the current page to the wearable."""
        await self.display.send_text(self.session.page_text(), self.config.display.msg_code)

    async def tap_handler(self, taps: int) -> asyncio.Task | None:
        """Handle a tap gesture.

        Returns:
            The capture task for a 3-tap that started one, otherwise None.
        """
        if taps == 1:
            self.session.next_page()
            await self._page_changed()
        elif taps == 2:
            self.session.previous_page()
            await self._page_changed()
        elif taps == 3:
            return self.start_capture()
        return None

    def start_capture(self) -> asyncio.Task | None:
        """Start a capture unless one is already in flight."""
        if self._processing:
            self.logger.info("capture_rejected", reason="processing")
            return None

        self._processing = True
        self._task = asyncio.create_task(self._capture_and_process())
        return self._task

    async def _capture_and_process(self) -> None:
        try:
            photo = await self.camera.capture(quality=self.config.capture.jpeg_quality)
        except Exception as e:
            try:
                self.session.reset()
                await self._fail(e)
            finally:
                self._processing = False
            return
        await self.process(photo)

    async def process(self, photo: Photo) -> None:
        """Run the vision pipeline on a captured photo."""
        start_time = time.time()
        self._processing = True
        self.session.reset()
        await self.bus.emit(CAPTURE_STARTED, APP_ID, width=photo.width, height=photo.height)

        try:
            self._image = prepare_photo(
                photo,
                rotation=self.config.capture.rotation,
                quality=self.config.capture.jpeg_quality,
            )

            if self.generator is None:
                raise GenerationError("Set an API key to get model responses")

            first_fragment_ms: int | None = None
            async for fragment in self.generator.generate(self.config.gemini.prompt, self._image):
                if first_fragment_ms is None:
                    first_fragment_ms = int((time.time() - start_time) * 1000)
                self.logger.debug("fragment_received", fragment=fragment)
                result = self.session.append_fragment(fragment)
                await self._response_updated(result)
                await self.show_page()

            view = self.session.snapshot()
            self.logger.info(
                "capture_complete",
                lines=view.line_count,
                pages=view.page_count,
                first_fragment_ms=first_fragment_ms,
                total_ms=int((time.time() - start_time) * 1000),
            )
            await self._response_updated(final=True)
            await self.bus.emit(CAPTURE_COMPLETED, APP_ID, lines=view.line_count)

        except Exception as e:
            await self._fail(e)

        finally:
            self._processing = False

    async def _fail(self, error: Exception) -> None:
        message = f"Error processing photo: {error}"
        self.logger.exception("capture_failed", error=str(error))
        result = self.session.append_line(message)
        await self._response_updated(result, final=True)
        await self.show_page()
        await self.bus.emit(CAPTURE_FAILED, APP_ID, error=str(error))

    async def _response_updated(self, result: AppendResult | None = None, final: bool = False) -> None:
        view = self.session.snapshot()
        # Index of the first new line, for views that only append rows
        first_new_line = result.first_index if result is not None and result.count else None
        await self.bus.emit(
            RESPONSE_UPDATED,
            APP_ID,
            lines=self.session.lines(),
            cursor=view.cursor,
            page_count=view.page_count,
            first_new_line=first_new_line,
            last_line_updated=bool(result and result.last_line_updated),
            final=final,
        )

    async def _page_changed(self) -> None:
        view = self.session.snapshot()
        await self.display.send_text(view.text, self.config.display.msg_code)
        await self.bus.emit(PAGE_CHANGED, APP_ID, cursor=view.cursor, page_count=view.page_count)

    def share_payload(self) -> SharePayload | None:
        """Build the payload for sharing, None before the first capture."""
        if self._image is None:
            return None
        return SharePayload(text=self.session.text(), image=self._image)

    async def wait(self) -> None:
        """Wait for the in-flight capture, if any."""
        if self._task is not None:
            await self._task

    async def run_interactive(self) -> None:
        """Read tap counts from stdin until 'q'."""
        self.logger.info("interactive_mode_active")
        await self.print_instructions()

        loop = asyncio.get_running_loop()
        while True:
            try:
                user_input = await loop.run_in_executor(None, input, "Taps (1/2/3, q to quit): ")
            except EOFError:
                break

            user_input = user_input.strip().lower()
            if user_input == "q":
                break
            if user_input.isdigit():
                await self.tap_handler(int(user_input))

        await self.wait()
