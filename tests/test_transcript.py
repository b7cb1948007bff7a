"""
Tests for the advisory transcript.
"""

import pytest

from luthier.advisory.transcript import ConversationTranscript
from luthier.schema.enums import ChatRole
from luthier.vision.prompts import ADVISORY_GREETING, ADVISORY_INTERRUPTED


def test_starts_with_greeting():
    transcript = ConversationTranscript.greeting()
    assert len(transcript.messages) == 1
    assert transcript.last.role == ChatRole.model
    assert transcript.last.text == ADVISORY_GREETING


def test_streaming_response_grows_last_entry():
    transcript = ConversationTranscript.greeting().add_user("Which wood for attack?")
    transcript = transcript.begin_response()
    transcript = transcript.extend_response("Maple ")
    transcript = transcript.extend_response("(Arce).")
    transcript = transcript.finish_response()

    assert [m.role for m in transcript.messages] == [ChatRole.model, ChatRole.user, ChatRole.model]
    assert transcript.last.text == "Maple (Arce)."
    assert not transcript.streaming


def test_interrupt_replaces_partial_text():
    transcript = ConversationTranscript().add_user("q").begin_response().extend_response("half an ans")
    transcript = transcript.interrupt()
    assert transcript.last.text == ADVISORY_INTERRUPTED
    assert len(transcript.messages) == 2
    assert not transcript.streaming


def test_interrupt_before_any_fragment_appends_notice():
    transcript = ConversationTranscript().add_user("q").interrupt()
    assert [m.text for m in transcript.messages] == ["q", ADVISORY_INTERRUPTED]


def test_earlier_entries_are_never_touched():
    base = ConversationTranscript.greeting().add_user("first")
    grown = base.begin_response().extend_response("answer")
    assert grown.messages[:2] == base.messages


def test_guards():
    with pytest.raises(ValueError):
        ConversationTranscript().extend_response("x")
    streaming = ConversationTranscript().begin_response()
    with pytest.raises(ValueError):
        streaming.add_user("too soon")
    with pytest.raises(ValueError):
        streaming.begin_response()
