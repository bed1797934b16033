"""
Global test configuration: environment isolation and a mock completion endpoint.
"""

from collections.abc import Callable
from contextlib import suppress
import json
import logging
import os
from typing import Any

import httpx
import pytest

from case_companion.client import CompletionClient
from case_companion.core.types import CaseContext, InlineDocument
from tests.fixtures.api_responses import completion_body

TEST_API_URL = "https://completions.test/chat/completions"


# --- Environment Isolation (Autouse) ---
@pytest.fixture(autouse=True)
def block_dotenv(request, monkeypatch):
    """Prevent python-dotenv from loading project .env files during tests.

    Opt-in escape hatch: mark a test with @pytest.mark.allow_dotenv.
    """
    if request.node.get_closest_marker("allow_dotenv"):
        return
    with suppress(Exception):
        monkeypatch.setattr(
            "dotenv.load_dotenv", lambda *_args, **_kwargs: False, raising=False
        )


@pytest.fixture(autouse=True)
def isolate_perplexity_env(request, monkeypatch):
    """Ensure a clean PERPLEXITY_* environment for each test.

    Escape hatch: @pytest.mark.allow_env_pollution keeps the current env.
    """
    if request.node.get_closest_marker("allow_env_pollution"):
        return

    for key in list(os.environ.keys()):
        if key.startswith("PERPLEXITY_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.delenv("CASE_COMPANION_TELEMETRY", raising=False)


# --- Logging Fixtures ---
@pytest.fixture(scope="session", autouse=True)
def quiet_noisy_libraries():
    """Sets the log level for noisy external libraries to WARNING."""
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


# --- Case Fixtures ---
@pytest.fixture
def case_details() -> str:
    return json.dumps(
        {
            "title": "Sharma v. Verma",
            "court": "Delhi High Court",
            "caseType": "Civil",
            "briefDescription": "Breach of a commercial lease agreement.",
        }
    )


@pytest.fixture
def text_document() -> InlineDocument:
    return InlineDocument.from_payload("text/plain", "TGVhc2UgZGVlZCBzaWduZWQgb24gMSBNYXJjaA==")


@pytest.fixture
def case_context(case_details, text_document) -> CaseContext:
    return CaseContext(case_details=case_details, documents=(text_document,))


# --- Mock Endpoint ---
class RecordingEndpoint:
    """An httpx handler that replays canned responses and records requests."""

    def __init__(self, responder: Callable[[httpx.Request], httpx.Response]):
        self.responder = responder
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.responder(request)

    @property
    def last_body(self) -> dict[str, Any]:
        return json.loads(self.requests[-1].content)

    @property
    def last_messages(self) -> list[dict[str, str]]:
        return self.last_body["messages"]


@pytest.fixture
def make_client() -> Callable[..., tuple[CompletionClient, RecordingEndpoint]]:
    """Factory for a client wired to a mock transport.

    Usage:
        client, endpoint = make_client(text="WIN PROBABILITY: 70%")
        client, endpoint = make_client(status_code=500, body="boom")
        client, endpoint = make_client(responder=lambda req: ...)
    """

    def _make(
        *,
        text: str | None = None,
        payload: dict[str, Any] | None = None,
        status_code: int = 200,
        body: str | None = None,
        responder: Callable[[httpx.Request], httpx.Response] | None = None,
        api_key: str | None = "test-key",
        **client_kwargs: Any,
    ) -> tuple[CompletionClient, RecordingEndpoint]:
        if responder is None:

            def responder(_request: httpx.Request) -> httpx.Response:
                if body is not None:
                    return httpx.Response(status_code, text=body)
                data = payload if payload is not None else completion_body(text or "")
                return httpx.Response(status_code, json=data)

        endpoint = RecordingEndpoint(responder)
        client = CompletionClient(
            api_key,
            api_url=TEST_API_URL,
            transport=httpx.MockTransport(endpoint),
            **client_kwargs,
        )
        return client, endpoint

    return _make
