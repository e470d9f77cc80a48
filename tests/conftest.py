"""Shared fixtures: a scripted chat-completions endpoint behind httpx.MockTransport."""

import io
import json

import httpx
import pytest
from PIL import Image

from medtools.pipeline.clients.llm_client import LLMClient


def completion(content):
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


class FakeLLM:
    """Records requests and answers them from a list of scripted replies.

    A reply may be a string (message content), an ``httpx.Response`` or an
    exception instance, which is raised from the transport.
    """

    def __init__(self, replies=None, models=None):
        self.replies = list(replies or [])
        self.models = models if models is not None else ["qwen2.5:1.5b", "gemma3:4b"]
        self.requests = []

    @property
    def payloads(self):
        return [json.loads(r.content) for r in self.requests if r.url.path.endswith("/chat/completions")]

    def handler(self, request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/models"):
            return httpx.Response(200, json={"data": [{"id": m} for m in self.models]})

        self.requests.append(request)
        reply = self.replies.pop(0) if self.replies else "{}"
        if isinstance(reply, Exception):
            raise reply
        if isinstance(reply, httpx.Response):
            return reply
        return httpx.Response(200, json=completion(reply))

    def client(self, api_key=""):
        llm = LLMClient("http://llm.test/v1", api_key, transport=httpx.MockTransport(self.handler))
        llm.start()
        return llm


@pytest.fixture
def fake_llm():
    return FakeLLM()


@pytest.fixture
def png_bytes():
    image = Image.new("RGB", (40, 20), "white")
    for x in range(10, 30):
        image.putpixel((x, 10), (0, 0, 0))
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def make_fake_llm():
    return FakeLLM
