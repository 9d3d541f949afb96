"""Shared fixtures: a scripted completion client, a TestClient wired to it,
and transport-level fakes for the Gemini (requests) and Groq (httpx) SDKs."""

import json
from types import SimpleNamespace
from unittest.mock import patch

import httpx
import pytest
import requests
from fastapi.testclient import TestClient

from flowchart_api.core.config import Settings, get_settings
from flowchart_api.main import app
from flowchart_api.services.completion_client import CompletionClient, get_completion_client


class FakeCompletionClient(CompletionClient):
    """Returns a canned completion (or raises) and records every prompt."""

    provider = "fake"

    def __init__(self, text: str = '{"nodes": []}', error: Exception = None):
        self.text = text
        self.error = error
        self.prompts = []

    async def complete(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.text


def gemini_payload(text: str) -> dict:
    return {"candidates": [{"content": {"parts": [{"text": text}], "role": "model"}}]}


def groq_payload(text: str) -> dict:
    return {
        "id": "chatcmpl-test",
        "object": "chat.completion",
        "created": 0,
        "model": "llama-3.3-70b-versatile",
        "choices": [
            {
                "index": 0,
                "message": {"role": "assistant", "content": text},
                "finish_reason": "stop",
            }
        ],
    }


@pytest.fixture
def fake_completion():
    return FakeCompletionClient()


@pytest.fixture
def client(fake_completion):
    """Test client whose pipeline talks to ``fake_completion``."""
    app.dependency_overrides[get_completion_client] = lambda: fake_completion
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def gemini_settings():
    return Settings(_env_file=None, AI_PROVIDER="gemini", GEMINI_API_KEY="test-key")


@pytest.fixture
def groq_settings():
    return Settings(_env_file=None, AI_PROVIDER="groq", GROQ_API_KEY="test-key")


@pytest.fixture
def settings_client():
    """Test client using the real client factory with injected settings."""

    def _make(settings: Settings) -> TestClient:
        app.dependency_overrides[get_settings] = lambda: settings
        return TestClient(app, raise_server_exceptions=False)

    yield _make
    app.dependency_overrides.clear()


@pytest.fixture
def gemini_http():
    """Answer every ``requests`` send with a scripted response and record it."""
    state = SimpleNamespace(status_code=200, payload=gemini_payload('{"nodes": []}'), requests=[])

    def fake_send(session, request, **kwargs):
        state.requests.append(request)
        response = requests.Response()
        response.status_code = state.status_code
        response._content = json.dumps(state.payload).encode("utf-8")
        response.headers["Content-Type"] = "application/json"
        response.encoding = "utf-8"
        response.url = request.url
        response.request = request
        return response

    with patch.object(requests.Session, "send", fake_send):
        yield state


@pytest.fixture
def groq_http():
    """Answer every ``httpx.AsyncClient`` send with a scripted response and record it."""
    state = SimpleNamespace(status_code=200, payload=groq_payload('{"nodes": []}'), requests=[])

    async def fake_send(http_client, request, **kwargs):
        state.requests.append(request)
        return httpx.Response(state.status_code, json=state.payload, request=request)

    with patch.object(httpx.AsyncClient, "send", fake_send):
        yield state
