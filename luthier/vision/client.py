from __future__ import annotations

import abc
import asyncio
import os
import logging
from typing import Any, AsyncIterator

from openai import AsyncOpenAI

from luthier.config.settings import settings
from luthier.schema.input_schema import ImagePayload
from luthier.schema.specification import GuitarSpecification
from luthier.vision.errors import AdvisoryBusyError, MissingCredentialError, TransportError
from luthier.vision.prompts import ANALYSIS_PROMPT, build_analysis_user_prompt


logger = logging.getLogger(__name__)


class VisionClient(abc.ABC):
    @abc.abstractmethod
    async def analyze_image(self, image: ImagePayload) -> str:
        """Return the raw JSON text describing the instrument in the image."""
        ...


class AdvisorySession(abc.ABC):
    """
    A long-lived conversation with the advisory model.

    Only one message may be in flight at a time. When a stream fails or is
    abandoned the conversation is rolled back to before that exchange, so the
    session stays usable.
    """

    def __init__(self):
        self._lock = asyncio.Lock()

    @property
    def busy(self) -> bool:
        return self._lock.locked()

    async def send(self, message: str) -> AsyncIterator[str]:
        if self._lock.locked():
            raise AdvisoryBusyError("A response is still streaming")

        async with self._lock:
            checkpoint = self._checkpoint()
            try:
                async for fragment in self._stream(message):
                    if fragment:
                        yield fragment
            except (Exception, GeneratorExit, asyncio.CancelledError):
                self._restore(checkpoint)
                raise

    @abc.abstractmethod
    def _stream(self, message: str) -> AsyncIterator[str]:
        ...

    @abc.abstractmethod
    def _checkpoint(self) -> Any:
        ...

    @abc.abstractmethod
    def _restore(self, checkpoint: Any) -> None:
        ...


class LuthierClient(VisionClient):
    """Every collaborator the workbench talks to: analysis, prompt, render and advice."""

    @abc.abstractmethod
    async def synthesize_prompt(
        self,
        image: ImagePayload,
        specs: GuitarSpecification,
        original_philosophy: str,
    ) -> str:
        ...

    @abc.abstractmethod
    async def render_image(self, technical_prompt: str) -> ImagePayload:
        ...

    @abc.abstractmethod
    def open_advisory_session(self) -> AdvisorySession:
        ...


class OpenAIVisionClient(VisionClient):
    def __init__(self):
        api_key = os.getenv(settings.OPENAI_API_KEY_ENV)
        if not api_key:
            raise MissingCredentialError(f"{settings.OPENAI_API_KEY_ENV} environment variable is not set")
        self.client = AsyncOpenAI(api_key=api_key)

    async def analyze_image(self, image: ImagePayload) -> str:
        try:
            response = await self.client.chat.completions.create(
                model=settings.OPENAI_VISION_MODEL,
                response_format={"type": "json_object"},
                messages=[
                    {
                        "role": "system",
                        "content": ANALYSIS_PROMPT
                    },
                    {
                        "role": "user",
                        "content": [
                            {"type": "text", "text": build_analysis_user_prompt()},
                            {"type": "image_url", "image_url": {"url": image.data_uri()}}
                        ]
                    }
                ]
            )

            return response.choices[0].message.content
        except Exception as e:
            logger.error(f"OpenAI analysis call failed: {e}")
            raise TransportError(f"Failed to analyze image: {e}") from e
