from __future__ import annotations

import os
import asyncio
import base64
import logging
from typing import Any, AsyncIterator, List

import google.generativeai as genai

from luthier.config.settings import settings
from luthier.schema.input_schema import ImagePayload
from luthier.schema.specification import GuitarSpecification
from luthier.vision.client import AdvisorySession, LuthierClient
from luthier.vision.errors import (
    EmptyResultError,
    MalformedResponseError,
    MissingCredentialError,
    TransportError,
)
from luthier.vision.prompts import (
    ADVISORY_SYSTEM_INSTRUCTION,
    ANALYSIS_PROMPT,
    LUTHERIE_SYSTEM_INSTRUCTION,
    build_analysis_user_prompt,
    build_lutherie_prompt,
    build_render_prompt,
)


logger = logging.getLogger(__name__)


def _image_part(image: ImagePayload) -> dict:
    return {"mime_type": image.mime_type, "data": image.data}


def _candidate_parts(response: Any) -> List[Any]:
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return []
    content = getattr(candidates[0], "content", None)
    return list(getattr(content, "parts", None) or [])


def _response_text(response: Any) -> str:
    return "".join(getattr(part, "text", "") or "" for part in _candidate_parts(response))


class GeminiAdvisorySession(AdvisorySession):
    def __init__(self, model: genai.GenerativeModel):
        super().__init__()
        self._model = model
        self._chat = model.start_chat()

    def _checkpoint(self) -> list:
        return list(self._chat.history)

    def _restore(self, history: list) -> None:
        # A broken stream leaves the SDK chat unusable; start over from the last good history
        logger.warning(f"Advisory stream failed, restoring {len(history)} history entries")
        self._chat = self._model.start_chat(history=history)

    async def _stream(self, message: str) -> AsyncIterator[str]:
        response = await self._chat.send_message_async(message, stream=True)
        async for chunk in response:
            yield _response_text(chunk)


class GeminiLuthierClient(LuthierClient):
    def __init__(self):
        api_key = os.getenv(settings.GEMINI_API_KEY_ENV)
        if not api_key:
            raise MissingCredentialError(f"{settings.GEMINI_API_KEY_ENV} environment variable is not set")
        genai.configure(api_key=api_key)

        self.analysis_model = genai.GenerativeModel(
            f"models/{settings.ANALYSIS_MODEL}",
            generation_config=genai.GenerationConfig(
                response_mime_type="application/json",
            )
        )
        self.prompt_model = genai.GenerativeModel(
            f"models/{settings.PROMPT_MODEL}",
            system_instruction=LUTHERIE_SYSTEM_INSTRUCTION,
            generation_config=genai.GenerationConfig(
                temperature=settings.PROMPT_TEMPERATURE,
            )
        )
        self.image_model = genai.GenerativeModel(f"models/{settings.IMAGE_MODEL}")

        logger.info(
            f"Initialized Gemini client: analysis={settings.ANALYSIS_MODEL}, "
            f"prompt={settings.PROMPT_MODEL}, image={settings.IMAGE_MODEL}"
        )

    async def analyze_image(self, image: ImagePayload) -> str:
        """
        Ask the analysis model for a JSON reading of the instrument.

        Args:
            image: Uploaded photo with its MIME type

        Returns:
            Raw JSON text, parsed by the caller

        Raises:
            TransportError: If the API call fails
            MalformedResponseError: If the response carries no text
        """
        full_prompt = f"{ANALYSIS_PROMPT}\n\n{build_analysis_user_prompt()}"

        def sync_call():
            return self.analysis_model.generate_content([
                full_prompt,
                _image_part(image)
            ])

        try:
            response = await asyncio.to_thread(sync_call)
        except Exception as e:
            logger.error(f"Gemini analysis call failed: {e}")
            raise TransportError(f"Failed to analyze image with Gemini: {e}") from e

        text = _response_text(response)
        if not text:
            raise MalformedResponseError("No analysis received")
        return text

    async def synthesize_prompt(
        self,
        image: ImagePayload,
        specs: GuitarSpecification,
        original_philosophy: str = settings.DEFAULT_PHILOSOPHY,
    ) -> str:
        """
        Turn the target specs into a technical image-generation prompt.

        The reference photo is sent along so the model can keep its framing.
        """
        user_prompt = build_lutherie_prompt(specs, original_philosophy)

        def sync_call():
            return self.prompt_model.generate_content([
                _image_part(image),
                user_prompt
            ])

        try:
            response = await asyncio.to_thread(sync_call)
        except Exception as e:
            logger.error(f"Prompt generation failed: {e}")
            raise TransportError(f"Failed to generate lutherie prompt: {e}") from e

        text = _response_text(response).strip()
        if not text:
            raise MalformedResponseError("Prompt synthesizer returned no text")
        return text

    async def render_image(self, technical_prompt: str) -> ImagePayload:
        """
        Render the modified guitar.

        Raises:
            TransportError: If the API call fails
            EmptyResultError: If the response holds no inline image
        """
        render_prompt = build_render_prompt(technical_prompt)

        def sync_call():
            return self.image_model.generate_content([render_prompt])

        try:
            response = await asyncio.to_thread(sync_call)
        except Exception as e:
            logger.error(f"Image generation failed: {e}")
            raise TransportError(f"Failed to render image: {e}") from e

        for part in _candidate_parts(response):
            inline = getattr(part, "inline_data", None)
            data = getattr(inline, "data", None) if inline is not None else None
            if data:
                if isinstance(data, str):
                    data = base64.b64decode(data)
                return ImagePayload(data=data, mime_type=inline.mime_type or "image/png")

        feedback = getattr(response, "prompt_feedback", None)
        block_reason = getattr(feedback, "block_reason", None) if feedback else None
        logger.error(f"Image data not found in response (block_reason={block_reason})")
        raise EmptyResultError("Image data not found in response")

    def open_advisory_session(self) -> GeminiAdvisorySession:
        model = genai.GenerativeModel(
            f"models/{settings.ADVISORY_MODEL}",
            system_instruction=ADVISORY_SYSTEM_INSTRUCTION,
            generation_config=genai.GenerationConfig(
                temperature=settings.ADVISORY_TEMPERATURE,
            )
        )
        logger.info(f"Opened advisory session on {settings.ADVISORY_MODEL}")
        return GeminiAdvisorySession(model)
