"""
In-memory collaborators for workbench and server tests.
"""

from __future__ import annotations

import asyncio
import json
from typing import AsyncIterator, List, Optional

from luthier.schema.input_schema import ImagePayload
from luthier.schema.specification import GuitarSpecification
from luthier.vision.client import AdvisorySession, LuthierClient
from luthier.vision.errors import EmptyResultError, TransportError


PNG_BYTES = b"\x89PNG\r\n\x1a\nfake-render"


def analysis_json(philosophy: str = "Artesanal (Gibson)", notes: str = "Warm mahogany set-neck.") -> str:
    return json.dumps({
        "detectedSpecs": {
            "bodyWood": "Mahogany",
            "bridge": "Tune-o-matic",
            "pickups": "HH",
            "construction": "Set-neck",
            "philosophy": philosophy,
        },
        "luthierNotes": notes,
    })


class FakeAdvisorySession(AdvisorySession):
    def __init__(
        self,
        replies: Optional[List[List[str]]] = None,
        fail_after: Optional[int] = None,
        delay: float = 0.0,
    ):
        super().__init__()
        self.replies = replies or [["Maple ", "gives ", "attack."]]
        self.fail_after = fail_after
        self.delay = delay
        self.history: List[str] = []
        self.sent: List[str] = []

    def _checkpoint(self) -> List[str]:
        return list(self.history)

    def _restore(self, checkpoint: List[str]) -> None:
        self.history = checkpoint

    async def _stream(self, message: str) -> AsyncIterator[str]:
        self.sent.append(message)
        self.history.append(message)
        reply = self.replies[min(len(self.sent), len(self.replies)) - 1]
        for index, fragment in enumerate(reply):
            if self.fail_after is not None and index == self.fail_after:
                raise TransportError("stream dropped")
            if self.delay:
                await asyncio.sleep(self.delay)
            yield fragment
        self.history.append("".join(reply))


class FakeLuthierClient(LuthierClient):
    def __init__(
        self,
        analysis: Optional[str] = None,
        analysis_error: Optional[Exception] = None,
        prompt: str = "A photorealistic 8k close-up shot of a modified electric guitar.",
        prompt_error: Optional[Exception] = None,
        render_error: Optional[Exception] = None,
        advisory: Optional[FakeAdvisorySession] = None,
        advisory_error: Optional[Exception] = None,
    ):
        self.analysis = analysis if analysis is not None else analysis_json()
        self.analysis_error = analysis_error
        self.prompt = prompt
        self.prompt_error = prompt_error
        self.render_error = render_error
        self.advisory = advisory or FakeAdvisorySession()
        self.advisory_error = advisory_error

        self.analyzed: List[ImagePayload] = []
        self.synthesize_calls: List[dict] = []
        self.rendered: List[str] = []

    async def analyze_image(self, image: ImagePayload) -> str:
        self.analyzed.append(image)
        if self.analysis_error:
            raise self.analysis_error
        return self.analysis

    async def synthesize_prompt(
        self,
        image: ImagePayload,
        specs: GuitarSpecification,
        original_philosophy: str,
    ) -> str:
        self.synthesize_calls.append({
            "image": image,
            "specs": specs,
            "original_philosophy": original_philosophy,
        })
        if self.prompt_error:
            raise self.prompt_error
        return self.prompt

    async def render_image(self, technical_prompt: str) -> ImagePayload:
        self.rendered.append(technical_prompt)
        if self.render_error:
            raise self.render_error
        return ImagePayload(data=PNG_BYTES, mime_type="image/png")

    def open_advisory_session(self) -> AdvisorySession:
        if self.advisory_error:
            raise self.advisory_error
        return self.advisory


def failing_render() -> EmptyResultError:
    return EmptyResultError("Image data not found in response")
