"""Tests for the suggestion boundary using ``httpx.MockTransport``."""

from __future__ import annotations

import json
from unittest.mock import AsyncMock

import httpx
import pytest

from calchub.calculators import CalculatorRegistry
from calchub.services.suggestion_service import (
    EMPTY_PROMPT_MESSAGE,
    FAILURE_MESSAGE,
    SuggestionClient,
    SuggestionService,
)
from calchub.settings import AppSettings

SERVICE_URL = "https://suggest.example.test/v1/suggest"


def _client(handler) -> SuggestionClient:
    return SuggestionClient(
        SERVICE_URL, api_key="secret", timeout=5, transport=httpx.MockTransport(handler)
    )


@pytest.mark.asyncio
async def test_known_names_map_to_ids_and_unknown_names_have_no_link(
    registry: CalculatorRegistry,
) -> None:
    captured: dict[str, object] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["body"] = json.loads(request.content)
        captured["auth"] = request.headers.get("Authorization")
        return httpx.Response(
            200, json={"suggestedCalculators": ["Loan Calculator", "Mortgage Wizard"]}
        )

    service = SuggestionService(registry, _client(handler))
    response = await service.suggest("  how much will my car loan cost?  ")

    assert response.error is None
    assert [(s.name, s.calculator_id) for s in response.suggestions] == [
        ("Loan Calculator", "loan-calculator"),
        ("Mortgage Wizard", None),
    ]
    assert captured["body"] == {
        "prompt": "how much will my car loan cost?",
        "calculatorNames": registry.names(),
    }
    assert captured["auth"] == "Bearer secret"


@pytest.mark.asyncio
@pytest.mark.parametrize("prompt", ["", "   \n"])
async def test_empty_prompt_is_rejected_without_calling_out(
    registry: CalculatorRegistry, prompt: str
) -> None:
    client = _client(lambda request: httpx.Response(500))
    client.fetch = AsyncMock()  # type: ignore[method-assign]

    response = await SuggestionService(registry, client).suggest(prompt)

    assert response.error == EMPTY_PROMPT_MESSAGE
    assert response.suggestions == []
    client.fetch.assert_not_awaited()


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "handler",
    [
        lambda request: httpx.Response(503, json={"error": "overloaded"}),
        lambda request: httpx.Response(200, text="<html>not json</html>"),
        lambda request: httpx.Response(200, json={"suggestedCalculators": "Loan Calculator"}),
        lambda request: httpx.Response(200, json=["Loan Calculator"]),
    ],
    ids=["http-status", "not-json", "wrong-shape", "not-an-object"],
)
async def test_remote_failures_collapse_into_retry_message(
    registry: CalculatorRegistry, handler
) -> None:
    response = await SuggestionService(registry, _client(handler)).suggest("split a bill")

    assert response.error == FAILURE_MESSAGE
    assert response.suggestions == []


@pytest.mark.asyncio
async def test_transport_errors_collapse_into_retry_message(
    registry: CalculatorRegistry,
) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    response = await SuggestionService(registry, _client(handler)).suggest("split a bill")

    assert response.error == FAILURE_MESSAGE


@pytest.mark.asyncio
async def test_unconfigured_service_answers_with_retry_message(
    registry: CalculatorRegistry,
) -> None:
    response = await SuggestionService(registry, None).suggest("split a bill")

    assert response.error == FAILURE_MESSAGE


def test_client_from_settings(app_settings: AppSettings) -> None:
    assert SuggestionClient.from_settings(app_settings) is None

    configured = app_settings.model_copy(update={"suggestion_service_url": SERVICE_URL})
    assert isinstance(SuggestionClient.from_settings(configured), SuggestionClient)
