import sys
from pathlib import Path

import pytest

# This repo uses a src/ layout; make src importable without an editable install.
_src = str(Path(__file__).resolve().parents[2] / "src")
if _src not in sys.path:
    sys.path.insert(0, _src)


class FakeHandler:
    """Scripted provider handler.

    `results` is consumed in order; the last entry repeats once exhausted.
    """

    def __init__(self, name, results):
        self.name = name
        self.results = list(results)
        self.requests = []

    @property
    def calls(self):
        return len(self.requests)

    def call(self, request):
        self.requests.append(request)
        if len(self.results) > 1:
            result = self.results.pop(0)
        else:
            result = self.results[0]
        if isinstance(result, Exception):
            raise result
        return result


class FakeResponse:
    def __init__(self, body=None, *, status_code=200, headers=None, text=None):
        self._body = body
        self.status_code = status_code
        self.headers = headers or {}
        self.text = text if text is not None else ("" if body is None else str(body))

    def json(self):
        if isinstance(self._body, Exception):
            raise self._body
        if self._body is None:
            raise ValueError("No JSON object could be decoded")
        return self._body


class FakeSession:
    """Stands in for requests.Session; records every POST."""

    def __init__(self, responses):
        self.responses = list(responses)
        self.posts = []

    def post(self, url, json=None, headers=None, timeout=None):
        self.posts.append(
            {"url": url, "json": json, "headers": headers or {}, "timeout": timeout}
        )
        response = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture
def sleeps(monkeypatch):
    """Record every backoff sleep instead of blocking."""
    recorded = []
    monkeypatch.setattr("switchboard.llm._retry.time.sleep", recorded.append)
    return recorded


@pytest.fixture
def fake_handler():
    return FakeHandler


@pytest.fixture
def fake_response():
    return FakeResponse


@pytest.fixture
def fake_session():
    return FakeSession


@pytest.fixture
def clean_env(monkeypatch):
    for name in (
        "SERVICE",
        "APP_ENV",
        "RAILS_ENV",
        "LOCAL_LLM_URL",
        "LOCAL_LLM_URL_PRODUCTION",
        "LLM_TIMEOUT_SEC",
        "OPENAI_API_KEY",
        "OPENAI_KEY",
        "ANTHROPIC_API_KEY",
        "CLAUDE_API_KEY",
        "GEMINI_API_KEY",
        "GROQ_API_KEY",
    ):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch
