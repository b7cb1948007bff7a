from __future__ import annotations

from typing import Tuple

from pydantic import BaseModel, ConfigDict

from luthier.schema.enums import ChatRole
from luthier.schema.output_schema import ChatMessage
from luthier.vision.prompts import ADVISORY_GREETING, ADVISORY_INTERRUPTED


class ConversationTranscript(BaseModel):
    """
    Ordered chat history for one advisory session.

    Entries are only ever appended. The one exception is the last model entry
    while its response is streaming: its text grows until the stream ends, or
    is replaced by the interruption notice if the stream fails.
    """

    model_config = ConfigDict(frozen=True)

    messages: Tuple[ChatMessage, ...] = ()
    streaming: bool = False

    @classmethod
    def greeting(cls) -> ConversationTranscript:
        return cls(messages=(ChatMessage(role=ChatRole.model, text=ADVISORY_GREETING),))

    @property
    def last(self) -> ChatMessage | None:
        return self.messages[-1] if self.messages else None

    def _append(self, message: ChatMessage, streaming: bool = False) -> ConversationTranscript:
        return self.model_copy(update={"messages": self.messages + (message,), "streaming": streaming})

    def add_user(self, text: str) -> ConversationTranscript:
        if self.streaming:
            raise ValueError("Cannot add a user message while a response is streaming")
        return self._append(ChatMessage(role=ChatRole.user, text=text))

    def begin_response(self) -> ConversationTranscript:
        if self.streaming:
            raise ValueError("A response is already streaming")
        return self._append(ChatMessage(role=ChatRole.model, text=""), streaming=True)

    def extend_response(self, fragment: str) -> ConversationTranscript:
        if not self.streaming:
            raise ValueError("No response is streaming")
        grown = ChatMessage(role=ChatRole.model, text=self.messages[-1].text + fragment)
        return self.model_copy(update={"messages": self.messages[:-1] + (grown,)})

    def finish_response(self) -> ConversationTranscript:
        return self.model_copy(update={"streaming": False})

    def interrupt(self) -> ConversationTranscript:
        """Replace any partial response with the fixed interruption notice."""
        notice = ChatMessage(role=ChatRole.model, text=ADVISORY_INTERRUPTED)
        if self.streaming:
            return self.model_copy(update={"messages": self.messages[:-1] + (notice,), "streaming": False})
        return self._append(notice)
