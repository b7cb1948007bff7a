"""
Tests for the OpenAI analysis provider with AsyncOpenAI replaced by a fake.
"""

import asyncio
from types import SimpleNamespace

import pytest

from luthier.schema.input_schema import ImagePayload
from luthier.vision import client as client_module
from luthier.vision.client import OpenAIVisionClient
from luthier.vision.errors import MissingCredentialError, TransportError


IMAGE = ImagePayload(data=b"\x89PNGphoto", mime_type="image/png")


class FakeCompletions:
    def __init__(self):
        self.requests = []
        self.content = '{"luthierNotes": "ok"}'
        self.error = None

    async def create(self, **kwargs):
        self.requests.append(kwargs)
        if self.error:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


@pytest.fixture
def completions(monkeypatch):
    fake = FakeCompletions()
    created = []

    def make_client(api_key):
        created.append(api_key)
        return SimpleNamespace(chat=SimpleNamespace(completions=fake))

    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    monkeypatch.setattr(client_module, "AsyncOpenAI", make_client)
    fake.created = created
    return fake


def test_missing_key_fails_at_construction(monkeypatch):
    created = []
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    monkeypatch.setattr(client_module, "AsyncOpenAI", lambda api_key: created.append(api_key))

    with pytest.raises(MissingCredentialError):
        OpenAIVisionClient()
    assert created == []


def test_request_carries_image_as_data_uri(completions):
    raw = asyncio.run(OpenAIVisionClient().analyze_image(IMAGE))

    assert raw == '{"luthierNotes": "ok"}'
    assert completions.created == ["sk-test"]
    request = completions.requests[0]
    assert request["response_format"] == {"type": "json_object"}
    assert "Act as an expert Luthier." in request["messages"][0]["content"]
    image_url = request["messages"][1]["content"][1]["image_url"]["url"]
    assert image_url == IMAGE.data_uri()
    assert image_url.startswith("data:image/png;base64,")


def test_sdk_failure_becomes_transport_error(completions):
    completions.error = RuntimeError("429 rate limited")
    with pytest.raises(TransportError):
        asyncio.run(OpenAIVisionClient().analyze_image(IMAGE))
