"""
Shared fixtures.

Required settings are provided through the environment before any
application module is imported. Outbound HTTP is stubbed by replacing
``requests.post`` (extraction provider) and ``requests.get`` (identity
provider) per test.
"""
import json
import os

import pytest
import requests

os.environ.setdefault("EXTRACTION_PROVIDER_URL", "https://provider.test/extract")
os.environ.setdefault("SUPABASE_URL", "https://identity.test")
os.environ.setdefault("SUPABASE_ANON_KEY", "anon-key")

from core.config import reset_settings  # noqa: E402
from llm.client import reset_client  # noqa: E402


def build_response(status_code=200, body=None, text=None) -> requests.Response:
    """Build a real requests.Response carrying a JSON body or raw text."""
    response = requests.Response()
    response.status_code = status_code
    response.encoding = "utf-8"
    if text is None:
        text = json.dumps(body if body is not None else {})
    response._content = text.encode("utf-8")
    response._content_consumed = True
    return response


class HttpStub:
    """Callable standing in for requests.post / requests.get."""

    def __init__(self, body=None):
        self.calls = []
        self.error = None
        self.response = build_response(200, body)

    def respond(self, body=None, status_code=200, text=None):
        self.error = None
        self.response = build_response(status_code, body, text)

    def fail(self, error):
        self.error = error

    def __call__(self, url, **kwargs):
        self.calls.append({"url": url, **kwargs})
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture(autouse=True)
def _reset_singletons():
    """Each test reads settings and builds clients afresh."""
    reset_settings()
    reset_client()
    yield
    reset_settings()
    reset_client()


@pytest.fixture
def provider(monkeypatch):
    """Stub the extraction provider; returns an empty transaction list by default."""
    stub = HttpStub({"transactions": []})
    monkeypatch.setattr(requests, "post", stub)
    return stub


@pytest.fixture
def identity(monkeypatch):
    """Stub the identity provider; accepts every token by default."""
    stub = HttpStub({"id": "user-1", "email": "user@example.com"})
    monkeypatch.setattr(requests, "get", stub)
    return stub
