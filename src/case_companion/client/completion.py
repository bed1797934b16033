"""HTTP boundary to the chat-completion endpoint.

One POST per call, no retries. Every failure is classified and returned as a
``Failure`` so flows can decide how to degrade; nothing here raises for
upstream problems.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
import logging
from typing import TYPE_CHECKING, Any

import httpx

from case_companion.constants import DEFAULT_MODEL, NETWORK_TIMEOUT, PERPLEXITY_API_URL
from case_companion.core.types import (
    CompletionReply,
    Failure,
    PromptMessage,
    ProviderMetadata,
    Result,
    Success,
)
from case_companion.exceptions import (
    ConfigurationMissingError,
    ExtractionError,
    MalformedJSONError,
    NonSuccessStatusError,
    TransportFailureError,
)
from case_companion.telemetry import TelemetryContext

if TYPE_CHECKING:
    from case_companion.config.types import FrozenConfig
    from case_companion.telemetry import TelemetryContextProtocol

log = logging.getLogger(__name__)

# --- Telemetry scopes ---
T_REQUEST = "completion.request"
T_SUCCESS = "completion.success"
T_FAILURE = "completion.failure"


class CompletionClient:
    """Async client for a Perplexity-compatible ``/chat/completions`` endpoint.

    The credential is injected at construction and never read from the
    environment at call time. A client without a credential is valid; each
    call then fails fast with ``ConfigurationMissingError``.

    Example:
        client = CompletionClient(api_key, transport=httpx.MockTransport(handler))
        result = await client.complete(messages)
    """

    def __init__(
        self,
        api_key: str | None,
        *,
        api_url: str = PERPLEXITY_API_URL,
        model: str = DEFAULT_MODEL,
        timeout: float = NETWORK_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
        telemetry: TelemetryContextProtocol | None = None,
    ):
        self._api_key = api_key or None
        self.api_url = api_url
        self.model = model
        self.timeout = timeout
        self._transport = transport
        self._tele = telemetry or TelemetryContext()

    @classmethod
    def from_config(cls, config: FrozenConfig, **kwargs: Any) -> CompletionClient:
        """Build a client from resolved configuration."""
        return cls(
            config.api_key,
            api_url=config.api_url,
            model=config.model,
            timeout=config.timeout_seconds,
            **kwargs,
        )

    @property
    def has_credential(self) -> bool:
        return self._api_key is not None

    def __repr__(self) -> str:
        key = "[REDACTED]" if self._api_key else None
        return f"CompletionClient(api_url={self.api_url!r}, model={self.model!r}, api_key={key})"

    async def complete(
        self,
        messages: Iterable[PromptMessage],
        *,
        model: str | None = None,
    ) -> Result[CompletionReply, ExtractionError]:
        """Send one completion request.

        Args:
            messages: Ordered conversation, system message first.
            model: Overrides the client's default model for this call.

        Returns:
            ``Success(CompletionReply)`` or ``Failure`` carrying one of
            ``ConfigurationMissingError``, ``TransportFailureError``,
            ``NonSuccessStatusError`` or ``MalformedJSONError``.
        """
        if self._api_key is None:
            log.error("Completion endpoint credential is not configured")
            self._tele.count(T_FAILURE, kind="configuration_missing")
            return Failure(
                ConfigurationMissingError(
                    "API key is not configured. Set PERPLEXITY_API_KEY."
                )
            )

        chosen_model = model or self.model
        payload = {
            "model": chosen_model,
            "messages": [m.to_wire() for m in messages],
        }

        with self._tele(T_REQUEST, model=chosen_model, message_count=len(payload["messages"])):
            result = await self._post(payload, chosen_model)

        if isinstance(result, Success):
            self._tele.count(T_SUCCESS)
        else:
            self._tele.count(T_FAILURE, kind=result.error.kind.value)
        return result

    # --- Internal helpers ---

    def _create_http_client(self) -> httpx.AsyncClient:
        """Create a configured HTTP client"""
        return httpx.AsyncClient(timeout=self.timeout, transport=self._transport)

    async def _post(
        self, payload: dict[str, Any], model: str
    ) -> Result[CompletionReply, ExtractionError]:
        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }
        try:
            async with self._create_http_client() as client:
                response = await client.post(self.api_url, json=payload, headers=headers)
        except httpx.TimeoutException as e:
            log.error("Completion request timed out after %ss: %s", self.timeout, e)
            return Failure(TransportFailureError(f"Request timed out: {e}"))
        except httpx.RequestError as e:
            log.error("Completion request failed: %s", e)
            return Failure(TransportFailureError(f"Request failed: {e}"))

        if not response.is_success:
            body = response.text
            log.error(
                "Completion endpoint returned %d: %s", response.status_code, body[:500]
            )
            return Failure(
                NonSuccessStatusError(
                    f"API request failed with status {response.status_code}",
                    status_code=response.status_code,
                    raw_text=body,
                )
            )

        try:
            data = response.json()
        except (ValueError, RecursionError) as e:
            # JSONDecodeError and UnicodeDecodeError are both ValueError
            log.error("Completion endpoint returned a non-JSON body: %s", e)
            return Failure(
                MalformedJSONError(
                    f"Response body is not JSON: {type(e).__name__}", raw_text=response.text
                )
            )
        if not isinstance(data, Mapping):
            log.error("Completion endpoint returned %s, expected an object", type(data).__name__)
            return Failure(
                MalformedJSONError("Response body is not a JSON object", raw_text=response.text)
            )

        return Success(parse_completion_body(data, model))


def parse_completion_body(data: Mapping[str, Any], model: str) -> CompletionReply:
    """Read the first choice's text and the provider metadata from a 2xx body.

    Missing content yields an empty string; flows decide what that means.
    """
    message = _first_message(data)
    content = message.get("content")
    text = content if isinstance(content, str) else ""

    citations = message.get("citations")
    if citations is None:
        citations = data.get("citations")

    search_results = data.get("search_results")
    if search_results is None:
        first_choice = _first_choice(data)
        search_results = first_choice.get("search_results")

    return CompletionReply(
        text=text,
        model=str(data.get("model") or model),
        metadata=ProviderMetadata(
            citations=_as_tuple(citations),
            search_results=_as_tuple(search_results),
        ),
    )


def _first_choice(data: Mapping[str, Any]) -> Mapping[str, Any]:
    choices = data.get("choices")
    if isinstance(choices, list) and choices and isinstance(choices[0], Mapping):
        return choices[0]
    return {}


def _first_message(data: Mapping[str, Any]) -> Mapping[str, Any]:
    message = _first_choice(data).get("message")
    return message if isinstance(message, Mapping) else {}


def _as_tuple(value: Any) -> tuple[Any, ...] | None:
    if value is None:
        return None
    if isinstance(value, list | tuple):
        return tuple(value)
    return (value,)
