from __future__ import annotations

import base64
import json
from typing import AsyncIterator, List

from luthier.schema.input_schema import ImagePayload
from luthier.schema.specification import GuitarSpecification
from luthier.vision.client import AdvisorySession, LuthierClient
from luthier.vision.prompts import build_philosophy_instruction


# 1x1 transparent PNG
_PLACEHOLDER_PNG = base64.b64decode(
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAQAAAC1HAwCAAAAC0lEQVR42mNkYAAAAAYAAjCB0C8AAAAASUVORK5CYII="
)


class MockAdvisorySession(AdvisorySession):
    def __init__(self):
        super().__init__()
        self.history: List[str] = []

    def _checkpoint(self) -> List[str]:
        return list(self.history)

    def _restore(self, checkpoint: List[str]) -> None:
        self.history = checkpoint

    async def _stream(self, message: str) -> AsyncIterator[str]:
        self.history.append(message)
        lowered = message.lower()
        if "attack" in lowered or "definition" in lowered:
            answer = "For attack and definition, go with Maple (Arce): tight transients and snap."
        elif "vintage" in lowered:
            answer = "For a vintage feel, choose a 50s Vintage U profile for mass and coupling."
        else:
            answer = "Alder is the balanced, neutral starting point for most builds."
        for word in answer.split(" "):
            yield word + " "


class MockLuthierClient(LuthierClient):
    """Offline stand-in that answers instantly, for front-end development."""

    async def analyze_image(self, image: ImagePayload) -> str:
        return json.dumps({
            "detectedSpecs": {
                "bodyWood": "Alder",
                "bridge": "Synchronized Tremolo",
                "pickups": "SSS",
                "fretboard": "Rosewood",
                "construction": "Bolt-on",
                "philosophy": "Modular (Fender)",
            },
            "luthierNotes": "Mock analysis: balanced alder body with bright single coils.",
        })

    async def synthesize_prompt(
        self,
        image: ImagePayload,
        specs: GuitarSpecification,
        original_philosophy: str,
    ) -> str:
        return (
            "A photorealistic 8k close-up shot of a modified electric guitar with a "
            f"{specs.body_wood.value} body, {specs.fretboard.value} fretboard, "
            f"{specs.bridge.value} and {specs.pickups.value}. "
            f"{build_philosophy_instruction(specs.notes, original_philosophy)}"
        )

    async def render_image(self, technical_prompt: str) -> ImagePayload:
        return ImagePayload(data=_PLACEHOLDER_PNG, mime_type="image/png")

    def open_advisory_session(self) -> MockAdvisorySession:
        return MockAdvisorySession()
