from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, AsyncIterator, Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

from luthier.advisory.transcript import ConversationTranscript
from luthier.config.settings import settings
from luthier.loader.image_loader import ImageLoader
from luthier.schema.characteristics import describe
from luthier.schema.enums import ChatRole, WorkbenchTab
from luthier.schema.input_schema import ImagePayload
from luthier.schema.output_schema import AnalysisResult, ChatEvent, WorkbenchView
from luthier.schema.specification import GuitarSpecification, SpecSummary, summarize
from luthier.vision.client import AdvisorySession, LuthierClient, VisionClient
from luthier.vision.prompts import ADVISORY_INTERRUPTED
from luthier.vision.response_parser import parse_analysis_response


logger = logging.getLogger(__name__)


ANALYSIS_FAILED_MESSAGE = "Failed to analyze image acoustics. Please check API Key."
GENERATION_FAILED_MESSAGE = "Simulation failed. Ensure you have a valid Gemini API Key enabled."


class OperationInProgressError(RuntimeError):
    pass


class NoImageError(RuntimeError):
    pass


class ChatUnavailableError(RuntimeError):
    pass


class ShellState(BaseModel):
    """Everything the workbench shows. Replaced, never mutated, on each action."""

    model_config = ConfigDict(frozen=True)

    active_tab: WorkbenchTab = WorkbenchTab.configurator
    specs: GuitarSpecification = Field(default_factory=GuitarSpecification)
    original_image: Optional[ImagePayload] = None
    analysis: Optional[AnalysisResult] = None
    generated_prompt: Optional[str] = None
    generated_image: Optional[str] = None
    error: Optional[str] = None
    is_analyzing: bool = False
    is_generating: bool = False
    is_chatting: bool = False
    transcript: ConversationTranscript = Field(default_factory=ConversationTranscript.greeting)


class Workbench:
    """
    Interaction shell for one user session.

    Collaborator failures never escape: they are logged and turned into the
    status string in `state.error`, with busy flags cleared and unrelated
    results left as they were. Duplicate triggers of a running operation are
    refused with OperationInProgressError.
    """

    def __init__(
        self,
        client: LuthierClient,
        analyzer: Optional[VisionClient] = None,
        image_loader: Optional[ImageLoader] = None,
    ):
        self.client = client
        self.analyzer = analyzer or client
        self.image_loader = image_loader or ImageLoader()
        self.state = ShellState()
        self.advisory: Optional[AdvisorySession] = self._open_advisory()

    def _open_advisory(self) -> Optional[AdvisorySession]:
        try:
            return self.client.open_advisory_session()
        except Exception as e:
            logger.error(f"Failed to init chat: {e}")
            return None

    def _update(self, **changes: Any) -> ShellState:
        self.state = self.state.model_copy(update=changes)
        return self.state

    @property
    def chat_available(self) -> bool:
        return self.advisory is not None

    def switch_tab(self, tab: WorkbenchTab) -> ShellState:
        return self._update(active_tab=WorkbenchTab(tab))

    def update_spec(self, field: str, value: Any) -> ShellState:
        return self._update(specs=self.state.specs.set_field(field, value))

    def update_specs(self, changes: Mapping[str, Any]) -> ShellState:
        return self._update(specs=self.state.specs.update(changes))

    def apply_preset(self, name: str) -> ShellState:
        return self._update(specs=self.state.specs.apply_preset(name))

    async def upload_image(self, data: bytes, mime_type: Optional[str] = None) -> ShellState:
        """Replace the source photo, clear everything derived from the old one, then analyze."""
        if self.state.is_analyzing or self.state.is_generating:
            raise OperationInProgressError("Wait for the current operation to finish before uploading")

        image = self.image_loader.load(data, mime_type)
        logger.info(f"Image uploaded: mime_type={image.mime_type}, bytes={len(image.data)}")

        self._update(
            original_image=image,
            generated_image=None,
            generated_prompt=None,
            analysis=None,
            error=None,
            active_tab=WorkbenchTab.configurator,
        )
        return await self.analyze()

    async def analyze(self) -> ShellState:
        image = self.state.original_image
        if image is None:
            raise NoImageError("Upload an instrument image first")
        if self.state.is_analyzing:
            raise OperationInProgressError("Analysis already running")

        self._update(is_analyzing=True)
        start_time = time.perf_counter()
        try:
            raw = await self.analyzer.analyze_image(image)
            result = parse_analysis_response(raw)
        except Exception as e:
            logger.error(f"Analysis failed: {e}")
            return self._update(is_analyzing=False, error=ANALYSIS_FAILED_MESSAGE)

        elapsed_ms = int((time.perf_counter() - start_time) * 1000)
        logger.info(
            f"Analysis complete: philosophy={result.detected_specs.philosophy!r}, time_ms={elapsed_ms}"
        )
        return self._update(is_analyzing=False, analysis=result)

    def original_philosophy(self) -> str:
        analysis = self.state.analysis
        if analysis is not None and analysis.detected_specs.philosophy:
            return analysis.detected_specs.philosophy
        return settings.DEFAULT_PHILOSOPHY

    async def generate(self) -> ShellState:
        """Run the prompt-then-image pipeline. A prompt failure skips the render."""
        image = self.state.original_image
        if image is None:
            raise NoImageError("Upload an instrument image first")
        if self.state.is_generating:
            raise OperationInProgressError("Generation already running")

        specs = self.state.specs
        philosophy = self.original_philosophy()
        self._update(is_generating=True, error=None, generated_image=None, generated_prompt=None)

        start_time = time.perf_counter()
        try:
            prompt = await self.client.synthesize_prompt(image, specs, philosophy)
            self._update(generated_prompt=prompt)
            logger.info(f"Technical prompt ready: chars={len(prompt)}")

            rendered = await self.client.render_image(prompt)
            self._update(generated_image=rendered.data_uri())
        except Exception as e:
            logger.error(f"Simulation failed: {e}")
            self._update(error=GENERATION_FAILED_MESSAGE)
        finally:
            self._update(is_generating=False)

        logger.info(f"Generation finished in {int((time.perf_counter() - start_time) * 1000)}ms")
        return self.state

    def check_can_chat(self, message: str) -> str:
        text = (message or "").strip()
        if not text:
            raise ValueError("Message is empty")
        if self.advisory is None:
            raise ChatUnavailableError("Advisory session is not available")
        if self.state.is_chatting:
            raise OperationInProgressError("A response is still streaming")
        return text

    def begin_chat(self, message: str) -> str:
        """
        Record the user's question and mark the session as chatting.

        Runs without awaiting, so a second question arriving before the first
        answer starts streaming is already refused.
        """
        text = self.check_can_chat(message)
        self._update(transcript=self.state.transcript.add_user(text), is_chatting=True)
        return text

    async def stream_response(self, text: str) -> AsyncIterator[ChatEvent]:
        """
        Stream the answer to a question recorded by begin_chat.

        The transcript's last entry grows with each fragment. If the stream
        breaks or the reader goes away, that entry becomes exactly the
        interruption notice.
        """
        stream = self.advisory.send(text)
        try:
            async for fragment in stream:
                transcript = self.state.transcript
                if not transcript.streaming:
                    transcript = transcript.begin_response()
                self._update(transcript=transcript.extend_response(fragment))
                yield ChatEvent(type="fragment", text=fragment)

            transcript = self.state.transcript
            if not transcript.streaming:
                transcript = transcript.begin_response()
            self._update(transcript=transcript.finish_response())
            yield ChatEvent(type="done", text=self.state.transcript.last.text)
        except (GeneratorExit, asyncio.CancelledError):
            transcript = self.state.transcript
            if transcript.streaming or transcript.last.role == ChatRole.user:
                logger.warning("Advisory stream abandoned before it finished")
                self._update(transcript=transcript.interrupt())
            raise
        except Exception as e:
            logger.error(f"Advisory stream failed: {e}")
            self._update(transcript=self.state.transcript.interrupt())
            yield ChatEvent(type="interrupted", text=ADVISORY_INTERRUPTED)
        finally:
            await stream.aclose()
            self._update(is_chatting=False)

    async def send_message(self, message: str) -> AsyncIterator[ChatEvent]:
        text = self.begin_chat(message)
        events = self.stream_response(text)
        try:
            async for event in events:
                yield event
        finally:
            await events.aclose()

    def summary(self) -> SpecSummary:
        return summarize(self.state.specs)

    def descriptions(self) -> Dict[str, str]:
        specs = self.state.specs
        return {
            "body_wood": describe(specs.body_wood),
            "neck_profile": describe(specs.neck_profile),
            "fretboard": describe(specs.fretboard, brief=True),
            "bridge": describe(specs.bridge),
            "pickups": describe(specs.pickups),
        }

    def view(self, session_id: str) -> WorkbenchView:
        state = self.state
        return WorkbenchView(
            session_id=session_id,
            active_tab=state.active_tab,
            specs=state.specs,
            summary=self.summary(),
            original_image=state.original_image.data_uri() if state.original_image else None,
            analysis=state.analysis,
            generated_prompt=state.generated_prompt,
            generated_image=state.generated_image,
            error=state.error,
            is_analyzing=state.is_analyzing,
            is_generating=state.is_generating,
            is_chatting=state.is_chatting,
            chat_available=self.chat_available,
            transcript=list(state.transcript.messages),
            descriptions=self.descriptions(),
        )
