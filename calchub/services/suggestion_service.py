"""Boundary to the external calculator suggestion service.

The remote service receives a free-text prompt plus the names of every
registered calculator and answers with the subset it considers relevant. The
answer is not trusted to stay on-list: names the registry does not know come
back without a calculator id so the caller can render them without a link.

:class:`SuggestionService` never raises. Empty prompts are rejected with a
fixed message and every remote failure collapses into a single retry message.
"""

from __future__ import annotations

import logging

import httpx
from pydantic import ValidationError

from calchub.calculators.registry import CalculatorRegistry
from calchub.schemas.suggestion import (
    Suggestion,
    SuggestionResponse,
    SuggestionServiceRequest,
    SuggestionServiceResponse,
)
from calchub.settings import AppSettings

logger = logging.getLogger(__name__)

EMPTY_PROMPT_MESSAGE = "Prompt cannot be empty."
FAILURE_MESSAGE = "Failed to get suggestions from AI. Please try again."


class SuggestionClient:
    """Thin ``httpx`` client speaking the suggestion service's JSON protocol."""

    def __init__(
        self,
        url: str,
        *,
        api_key: str | None = None,
        timeout: float = 20.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._url = url
        self._api_key = api_key
        self._timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: AppSettings) -> "SuggestionClient | None":
        if not settings.suggestion_service_url:
            return None
        return cls(
            settings.suggestion_service_url,
            api_key=settings.suggestion_api_key,
            timeout=settings.suggestion_timeout_seconds,
        )

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"
        return headers

    async def fetch(self, prompt: str, calculator_names: list[str]) -> list[str]:
        """POST the prompt and return the suggested calculator names.

        Raises ``httpx.HTTPError`` on transport or status failures and
        ``ValueError`` (including pydantic's ``ValidationError``) when the
        response body is not the expected shape.
        """

        payload = SuggestionServiceRequest(prompt=prompt, calculator_names=calculator_names)
        async with httpx.AsyncClient(
            timeout=httpx.Timeout(self._timeout),
            headers=self._headers(),
            transport=self._transport,
        ) as client:
            response = await client.post(self._url, json=payload.model_dump(by_alias=True))
            response.raise_for_status()
            body = response.json()

        parsed = SuggestionServiceResponse.model_validate(body)
        return parsed.suggested_calculators


class SuggestionService:
    """Map a prompt to calculator suggestions, degrading to a retry message."""

    def __init__(
        self, registry: CalculatorRegistry, client: SuggestionClient | None
    ) -> None:
        self._registry = registry
        self._client = client

    async def suggest(self, prompt: str) -> SuggestionResponse:
        cleaned = prompt.strip()
        if not cleaned:
            return SuggestionResponse(error=EMPTY_PROMPT_MESSAGE)

        if self._client is None:
            logger.warning("Suggestion requested but SUGGESTION_SERVICE_URL is not configured")
            return SuggestionResponse(error=FAILURE_MESSAGE)

        try:
            names = await self._client.fetch(cleaned, self._registry.names())
        except httpx.HTTPError as exc:
            logger.warning("Suggestion service request failed: %s", exc)
            return SuggestionResponse(error=FAILURE_MESSAGE)
        except (ValidationError, ValueError) as exc:
            logger.warning("Suggestion service returned an unusable payload: %s", exc)
            return SuggestionResponse(error=FAILURE_MESSAGE)

        suggestions: list[Suggestion] = []
        for name in names:
            definition = self._registry.find_by_name(name)
            suggestions.append(
                Suggestion(name=name, calculator_id=definition.id if definition else None)
            )
        logger.debug("Suggestion service proposed %d calculators", len(suggestions))
        return SuggestionResponse(suggestions=suggestions)


__all__ = [
    "EMPTY_PROMPT_MESSAGE",
    "FAILURE_MESSAGE",
    "SuggestionClient",
    "SuggestionService",
]
