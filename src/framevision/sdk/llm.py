"""SDK LLM API - streaming multimodal generation."""

from __future__ import annotations

import asyncio
import base64
import json
from typing import Any, AsyncIterator

import httpx

from framevision.common.logging import get_logger
from framevision.config import Config, GeminiConfig

HARM_CATEGORIES = (
    "HARM_CATEGORY_HARASSMENT",
    "HARM_CATEGORY_HATE_SPEECH",
    "HARM_CATEGORY_DANGEROUS_CONTENT",
    "HARM_CATEGORY_SEXUALLY_EXPLICIT",
)

MOCK_RESPONSE = (
    "The photo shows a plain blue-grey surface.\n"
    "There are no people or objects in view.\n"
    "\n"
    "Possible reasons:\n"
    "- the lens is covered\n"
    "- the camera faces a wall\n"
    "- the scene is out of focus\n"
    "Try again with the subject centred in view."
)


class GenerationError(Exception):
    """Raised when the model cannot produce a response."""


class GenerationClient:
    """Abstract source of streamed text fragments."""

    async def generate(
        self,
        prompt: str,
        image: bytes | None = None,
    ) -> AsyncIterator[str]:
        """Stream a response to a prompt and optional JPEG image.

        Yields:
            Text fragments in arrival order.
        """
        raise NotImplementedError


class MockGenerationClient(GenerationClient):
    """Mock client streaming a canned response word by word."""

    def __init__(
        self,
        response: str = MOCK_RESPONSE,
        delay: float = 0.0,
        fail_after: int | None = None,
    ) -> None:
        """Initialize the mock client.

        Args:
            response: Text to stream.
            delay: Seconds to wait between fragments.
            fail_after: Raise GenerationError after this many fragments.
        """
        self.response = response
        self.delay = delay
        self.fail_after = fail_after
        self.requests: list[tuple[str, bytes | None]] = []

    def fragments(self) -> list[str]:
        """Split the response into word-sized fragments.

        Newlines stay at the start of the following word, the way streamed
        model output splits them.
        """
        fragments: list[str] = []
        for i, line in enumerate(self.response.split("\n")):
            words = line.split(" ")
            for j, word in enumerate(words):
                fragment = ("\n" if i and j == 0 else "") + word
                if j < len(words) - 1:
                    fragment += " "
                fragments.append(fragment)
        return fragments

    async def generate(
        self,
        prompt: str,
        image: bytes | None = None,
    ) -> AsyncIterator[str]:
        self.requests.append((prompt, image))

        for i, fragment in enumerate(self.fragments()):
            if self.fail_after is not None and i >= self.fail_after:
                raise GenerationError("Mock stream interrupted")
            if self.delay:
                await asyncio.sleep(self.delay)
            yield fragment


class GeminiClient(GenerationClient):
    """Gemini client using the streaming REST endpoint."""

    def __init__(self, config: GeminiConfig, transport: httpx.AsyncBaseTransport | None = None) -> None:
        """Initialize the client.

        Args:
            config: Gemini configuration.
            transport: Optional httpx transport (for testing).
        """
        self.config = config
        self.endpoint = config.endpoint.rstrip("/")
        self._transport = transport
        self.logger = get_logger("sdk.llm", model=config.model)

    def build_request(self, prompt: str, image: bytes | None) -> dict[str, Any]:
        """Build the generateContent request body."""
        parts: list[dict[str, Any]] = []
        if image:
            # Image goes before the text prompt
            parts.append({
                "inline_data": {
                    "mime_type": "image/jpeg",
                    "data": base64.b64encode(image).decode("ascii"),
                }
            })
        parts.append({"text": prompt})

        payload: dict[str, Any] = {"contents": [{"role": "user", "parts": parts}]}
        if self.config.disable_safety:
            payload["safetySettings"] = [
                {"category": category, "threshold": "BLOCK_NONE"}
                for category in HARM_CATEGORIES
            ]
        return payload

    @staticmethod
    def parse_chunk(data: str) -> str:
        """Extract the text of one streamed response chunk."""
        chunk = json.loads(data)
        if "error" in chunk:
            raise GenerationError(chunk["error"].get("message", "Unknown model error"))

        candidates = chunk.get("candidates") or [{}]
        parts = candidates[0].get("content", {}).get("parts", [])
        return "".join(part.get("text", "") for part in parts)

    async def generate(
        self,
        prompt: str,
        image: bytes | None = None,
    ) -> AsyncIterator[str]:
        if not self.config.api_key:
            raise GenerationError("Set an API key to get model responses")
        if not prompt.strip():
            raise GenerationError("Set a prompt to get model responses")

        url = f"{self.endpoint}/models/{self.config.model}:streamGenerateContent"
        headers = {
            "Content-Type": "application/json",
            "x-goog-api-key": self.config.api_key,
        }

        try:
            async with httpx.AsyncClient(
                timeout=self.config.timeout_seconds,
                transport=self._transport,
            ) as client:
                async with client.stream(
                    "POST",
                    url,
                    params={"alt": "sse"},
                    headers=headers,
                    json=self.build_request(prompt, image),
                ) as response:
                    if response.is_error:
                        body = await response.aread()
                        raise GenerationError(
                            f"Model request failed ({response.status_code}): "
                            f"{body.decode(errors='replace')[:200]}"
                        )

                    async for line in response.aiter_lines():
                        if not line.startswith("data: "):
                            continue
                        text = self.parse_chunk(line[6:])
                        if text:
                            yield text

        except httpx.HTTPError as e:
            self.logger.exception("generation_failed", error=str(e))
            raise GenerationError(str(e)) from e
        except json.JSONDecodeError as e:
            raise GenerationError(f"Malformed model response: {e}") from e


def create_generation_client(config: Config) -> GenerationClient | None:
    """Create the generation client for a configuration.

    Returns None when no API key is configured outside mock mode.
    """
    if config.mock_mode:
        return MockGenerationClient()
    if not config.gemini.api_key:
        return None
    return GeminiClient(config.gemini)
