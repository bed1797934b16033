"""Completion client: request shape and failure classification."""

import httpx
import pytest

from case_companion.client import CompletionClient
from case_companion.config import resolve_config
from case_companion.core.types import Failure, PromptMessage, Success
from case_companion.exceptions import (
    ConfigurationMissingError,
    ErrorKind,
    MalformedJSONError,
    NonSuccessStatusError,
    TransportFailureError,
)
from case_companion.telemetry import InMemoryReporter, TelemetryContext
from tests.fixtures.api_responses import completion_body

pytestmark = pytest.mark.unit

MESSAGES = (
    PromptMessage("system", "You are helpful."),
    PromptMessage("user", "Hello"),
)


class TestRequest:
    @pytest.mark.asyncio
    async def test_posts_model_and_messages_with_bearer_auth(self, make_client):
        client, endpoint = make_client(text="Hi there")
        result = await client.complete(MESSAGES)

        assert isinstance(result, Success)
        assert result.value.text == "Hi there"
        request = endpoint.requests[0]
        assert request.method == "POST"
        assert request.headers["Authorization"] == "Bearer test-key"
        assert endpoint.last_body == {
            "model": "sonar-pro",
            "messages": [
                {"role": "system", "content": "You are helpful."},
                {"role": "user", "content": "Hello"},
            ],
        }

    @pytest.mark.asyncio
    async def test_model_override_per_call(self, make_client):
        client, endpoint = make_client(text="ok")
        await client.complete(MESSAGES, model="sonar")
        assert endpoint.last_body["model"] == "sonar"

    @pytest.mark.asyncio
    async def test_single_attempt_on_failure(self, make_client):
        client, endpoint = make_client(status_code=503, body="unavailable")
        await client.complete(MESSAGES)
        assert len(endpoint.requests) == 1

    def test_repr_redacts_key(self):
        client = CompletionClient("sk-secret")
        assert "sk-secret" not in repr(client)
        assert "[REDACTED]" in repr(client)

    def test_from_config(self):
        config = resolve_config({"api_key": "k", "model": "sonar", "timeout_seconds": 5})
        client = CompletionClient.from_config(config)
        assert client.model == "sonar"
        assert client.timeout == 5
        assert client.has_credential


class TestReplyParsing:
    @pytest.mark.asyncio
    async def test_citations_and_search_results_pass_through(self, make_client):
        payload = completion_body(
            "answer",
            citations=["https://example.org/a"],
            search_results=[{"title": "A", "url": "https://example.org/a"}],
        )
        client, _ = make_client(payload=payload)
        result = await client.complete(MESSAGES)
        assert isinstance(result, Success)
        metadata = result.value.metadata
        assert metadata.citations == ("https://example.org/a",)
        assert metadata.search_results == (
            {"title": "A", "url": "https://example.org/a"},
        )

    @pytest.mark.asyncio
    async def test_top_level_citations_are_a_fallback(self, make_client):
        payload = completion_body("answer")
        payload["citations"] = ["https://example.org/top"]
        payload["choices"][0]["search_results"] = [{"title": "B"}]
        client, _ = make_client(payload=payload)
        result = await client.complete(MESSAGES)
        assert isinstance(result, Success)
        assert result.value.metadata.citations == ("https://example.org/top",)
        assert result.value.metadata.search_results == ({"title": "B"},)

    @pytest.mark.asyncio
    async def test_missing_metadata_is_none(self, make_client):
        client, _ = make_client(text="answer")
        result = await client.complete(MESSAGES)
        assert isinstance(result, Success)
        assert result.value.metadata.is_empty

    @pytest.mark.asyncio
    async def test_missing_content_is_empty_text(self, make_client):
        client, _ = make_client(payload={"choices": []})
        result = await client.complete(MESSAGES)
        assert isinstance(result, Success)
        assert result.value.text == ""


class TestFailureClassification:
    @pytest.mark.asyncio
    async def test_missing_key_makes_no_request(self, make_client):
        client, endpoint = make_client(api_key=None, text="never sent")
        result = await client.complete(MESSAGES)
        assert isinstance(result, Failure)
        assert isinstance(result.error, ConfigurationMissingError)
        assert result.error.kind is ErrorKind.CONFIGURATION_MISSING
        assert endpoint.requests == []

    @pytest.mark.asyncio
    async def test_blank_key_counts_as_missing(self, make_client):
        client, endpoint = make_client(api_key="", text="never sent")
        result = await client.complete(MESSAGES)
        assert isinstance(result, Failure)
        assert isinstance(result.error, ConfigurationMissingError)
        assert endpoint.requests == []

    @pytest.mark.asyncio
    async def test_non_success_status_keeps_code_and_body(self, make_client):
        client, _ = make_client(status_code=429, body='{"error": "rate limited"}')
        result = await client.complete(MESSAGES)
        assert isinstance(result, Failure)
        assert isinstance(result.error, NonSuccessStatusError)
        assert result.error.status_code == 429
        assert result.error.raw_text == '{"error": "rate limited"}'

    @pytest.mark.asyncio
    async def test_connection_error_is_transport_failure(self, make_client):
        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        client, _ = make_client(responder=refuse)
        result = await client.complete(MESSAGES)
        assert isinstance(result, Failure)
        assert isinstance(result.error, TransportFailureError)

    @pytest.mark.asyncio
    async def test_timeout_is_transport_failure(self, make_client):
        def slow(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        client, _ = make_client(responder=slow)
        result = await client.complete(MESSAGES)
        assert isinstance(result, Failure)
        assert result.error.kind is ErrorKind.TRANSPORT_FAILURE

    @pytest.mark.asyncio
    async def test_non_json_success_body_is_malformed(self, make_client):
        client, _ = make_client(body="<html>gateway</html>")
        result = await client.complete(MESSAGES)
        assert isinstance(result, Failure)
        assert isinstance(result.error, MalformedJSONError)
        assert result.error.raw_text == "<html>gateway</html>"

    @pytest.mark.asyncio
    async def test_json_array_body_is_malformed(self, make_client):
        client, _ = make_client(payload=[])  # type: ignore[arg-type]
        result = await client.complete(MESSAGES)
        assert isinstance(result, Failure)
        assert isinstance(result.error, MalformedJSONError)

    @pytest.mark.asyncio
    async def test_undecodable_success_body_is_malformed(self, make_client):
        client, _ = make_client(
            responder=lambda _req: httpx.Response(200, content=b'{"a": "\xff"}')
        )
        result = await client.complete(MESSAGES)
        assert isinstance(result, Failure)
        assert isinstance(result.error, MalformedJSONError)
        assert result.error.kind is ErrorKind.MALFORMED_JSON

    @pytest.mark.asyncio
    async def test_deeply_nested_success_body_is_malformed(self, make_client):
        client, _ = make_client(body="[" * 100_000 + "]" * 100_000)
        result = await client.complete(MESSAGES)
        assert isinstance(result, Failure)
        assert result.error.kind is ErrorKind.MALFORMED_JSON


class TestTelemetry:
    @pytest.mark.asyncio
    async def test_request_is_timed_and_outcomes_counted(self, make_client):
        reporter = InMemoryReporter()
        tele = TelemetryContext(reporter, enabled=True)
        client, _ = make_client(text="ok", telemetry=tele)

        await client.complete(MESSAGES)

        assert "completion.request" in reporter.timings
        assert "completion.success" in reporter.metrics

    @pytest.mark.asyncio
    async def test_failures_are_counted_by_kind(self, make_client):
        reporter = InMemoryReporter()
        tele = TelemetryContext(reporter, enabled=True)
        client, _ = make_client(api_key=None, telemetry=tele)

        await client.complete(MESSAGES)

        (value, metadata), = reporter.metrics["completion.failure"]
        assert value == 1
        assert metadata["kind"] == "configuration_missing"
