"""Tests for the POST /v1/prompt endpoint."""

import random
from collections.abc import AsyncGenerator
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import ASGITransport, AsyncClient

from promptgateway.gateway import GatewayHandler, ProviderSelector
from promptgateway.main import app
from promptgateway.providers import Provider, ProviderResponse, ProviderUnavailableError
from promptgateway.telemetry import TelemetryLogger

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

_RESPONSE = ProviderResponse(
    text="Hi!",
    model="claude-3-opus-20240229",
    finish_reason="stop",
    usage={"input_tokens": 2, "output_tokens": 1},
    cost=None,
)


class _RecordingSink:
    def __init__(self) -> None:
        self.entries: list[dict[str, Any]] = []

    async def append(self, entry: dict[str, Any]) -> None:
        self.entries.append(entry)


def _make_invoker(response: Any = _RESPONSE, error: Exception | None = None) -> MagicMock:
    invoker = MagicMock()
    invoker.default_model.return_value = "claude-3-opus-20240229"
    invoker.invoke = AsyncMock(return_value=response, side_effect=error)
    return invoker


def _install_handler(invoker: MagicMock, draw: float = 0.9) -> _RecordingSink:
    rng = MagicMock(spec=random.Random)
    rng.random.return_value = draw
    sink = _RecordingSink()
    app.state.handler = GatewayHandler(
        invoker=invoker,
        selector=ProviderSelector(rng),
        telemetry=TelemetryLogger(sink),
    )
    return sink


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def cleanup_handler():
    """Remove app.state.handler after every test to prevent cross-test leakage."""
    yield
    if hasattr(app.state, "handler"):
        del app.state.handler


@pytest.fixture
async def client() -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


# ---------------------------------------------------------------------------
# get_handler() dependency
# ---------------------------------------------------------------------------


class TestGetHandler:
    async def test_missing_handler_returns_503(self, client: AsyncClient) -> None:
        response = await client.post("/v1/prompt", json={"prompt": "hello"})
        assert response.status_code == 503


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class TestPrompt:
    async def test_success(self, client: AsyncClient) -> None:
        invoker = _make_invoker()
        sink = _install_handler(invoker)

        response = await client.post("/v1/prompt", json={"prompt": "hello"})

        assert response.status_code == 200
        body = response.json()
        assert body["provider"] == "anthropic"
        assert body["response"]["text"] == "Hi!"
        assert body["response"]["usage"] == {"input_tokens": 2, "output_tokens": 1}
        invoker.invoke.assert_awaited_once_with([], "hello", Provider.ANTHROPIC, None)
        assert [e["outcome"] for e in sink.entries] == ["success"]

    async def test_raw_body_forwarded_as_event(self, client: AsyncClient) -> None:
        sink = _install_handler(_make_invoker())
        await client.post(
            "/v1/prompt",
            content=b'{"prompt": "hello"}',
            headers={"content-type": "application/json"},
        )
        assert '\\"prompt\\": \\"hello\\"' in sink.entries[0]["raw_request"]

    async def test_empty_prompt_returns_400(self, client: AsyncClient) -> None:
        invoker = _make_invoker()
        _install_handler(invoker)

        response = await client.post("/v1/prompt", json={"prompt": ""})

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "Invalid request body."
        assert "prompt" in body["details"]["fieldErrors"]
        invoker.invoke.assert_not_awaited()

    async def test_unknown_provider_returns_400(self, client: AsyncClient) -> None:
        _install_handler(_make_invoker())
        response = await client.post("/v1/prompt", json={"prompt": "hi", "provider": "mistral"})
        assert response.status_code == 400
        assert "provider" in response.json()["details"]["fieldErrors"]

    async def test_malformed_json_returns_500(self, client: AsyncClient) -> None:
        sink = _install_handler(_make_invoker())
        response = await client.post(
            "/v1/prompt",
            content=b"{prompt",
            headers={"content-type": "application/json"},
        )
        assert response.status_code == 500
        assert "error" in response.json()
        assert [e["outcome"] for e in sink.entries] == ["failure"]

    async def test_invalid_utf8_returns_500(self, client: AsyncClient) -> None:
        invoker = _make_invoker()
        sink = _install_handler(invoker)
        response = await client.post(
            "/v1/prompt",
            content=b'{"prompt": "caf\xe9"}',
            headers={"content-type": "application/json"},
        )
        assert response.status_code == 500
        assert "utf-8" in response.json()["error"]
        invoker.invoke.assert_not_awaited()
        assert [e["outcome"] for e in sink.entries] == ["failure"]

    async def test_backend_failure_returns_500(self, client: AsyncClient) -> None:
        error = ProviderUnavailableError("anthropic is unavailable: 503", provider="anthropic")
        _install_handler(_make_invoker(error=error))

        response = await client.post("/v1/prompt", json={"prompt": "hello"})

        assert response.status_code == 500
        assert response.json() == {"error": "anthropic is unavailable: 503"}
