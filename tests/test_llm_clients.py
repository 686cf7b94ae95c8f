"""Tests for the OpenAI and Anthropic wrappers against local sockets and stubbed SDK calls."""
from __future__ import annotations

import asyncio
import socket
from types import SimpleNamespace

import pytest

from workshop_rag.errors import ProviderError
from workshop_rag.llm.anthropic_client import AnthropicChatClient
from workshop_rag.llm.openai_client import OpenAIChatClient


@pytest.fixture()
def closed_port() -> int:
    """A local port with nothing listening on it."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


@pytest.fixture()
def silent_port():
    """A local port that accepts connections but never answers."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", 0))
    sock.listen(8)
    yield sock.getsockname()[1]
    sock.close()


def _complete(client):
    return asyncio.run(client.complete("system", "user"))


class TestOpenAIChatClient:
    def test_connection_error_becomes_provider_error(self, closed_port):
        client = OpenAIChatClient("sk-test", base_url=f"http://127.0.0.1:{closed_port}/v1", timeout=2)
        with pytest.raises(ProviderError) as excinfo:
            _complete(client)
        assert excinfo.value.provider == "OpenAI"
        assert str(excinfo.value).startswith("OpenAI request failed:")

    def test_timeout_becomes_provider_error(self, silent_port):
        client = OpenAIChatClient("sk-test", base_url=f"http://127.0.0.1:{silent_port}/v1", timeout=0.3)
        with pytest.raises(ProviderError):
            _complete(client)

    def test_output_text_is_joined(self, monkeypatch):
        client = OpenAIChatClient("sk-test", model="gpt-test")
        captured = {}

        async def create(**kwargs):
            captured.update(kwargs)
            return SimpleNamespace(
                output=[
                    SimpleNamespace(type="reasoning", content=None),
                    SimpleNamespace(
                        type="message",
                        content=[
                            SimpleNamespace(type="output_text", text=' {"answer": '),
                            {"type": "output_text", "text": '"ok"} '},
                            SimpleNamespace(type="refusal", text="ignored"),
                        ],
                    ),
                ]
            )

        monkeypatch.setattr(client.client.responses, "create", create)
        assert _complete(client) == '{"answer":\n"ok"}'
        assert captured["model"] == "gpt-test"
        assert captured["input"][0] == {"role": "system", "content": "system"}

    def test_requires_key(self):
        with pytest.raises(ValueError):
            OpenAIChatClient("")


class TestAnthropicChatClient:
    def test_connection_error_becomes_provider_error(self, closed_port):
        client = AnthropicChatClient("sk-ant-test", base_url=f"http://127.0.0.1:{closed_port}", timeout=2)
        with pytest.raises(ProviderError) as excinfo:
            _complete(client)
        assert excinfo.value.provider == "Anthropic"

    def test_timeout_becomes_provider_error(self, silent_port):
        client = AnthropicChatClient("sk-ant-test", base_url=f"http://127.0.0.1:{silent_port}", timeout=0.3)
        with pytest.raises(ProviderError):
            _complete(client)

    def test_text_blocks_are_joined(self, monkeypatch):
        client = AnthropicChatClient("sk-ant-test")
        captured = {}

        async def create(**kwargs):
            captured.update(kwargs)
            return SimpleNamespace(
                content=[
                    SimpleNamespace(type="text", text="first"),
                    SimpleNamespace(type="tool_use", name="lookup"),
                    SimpleNamespace(type="text", text="second "),
                ]
            )

        monkeypatch.setattr(client.client.messages, "create", create)
        assert _complete(client) == "first\nsecond"
        assert captured["system"] == "system"
        assert captured["messages"] == [{"role": "user", "content": "user"}]

    def test_requires_key(self):
        with pytest.raises(ValueError):
            AnthropicChatClient(None)
