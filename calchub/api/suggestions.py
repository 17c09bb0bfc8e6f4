"""Pass-through to the calculator suggestion service."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from calchub.schemas.suggestion import SuggestionRequest, SuggestionResponse
from calchub.services.dependencies import get_suggestion_service
from calchub.services.suggestion_service import SuggestionService

router = APIRouter()


@router.post("", response_model=SuggestionResponse)
@router.post("/", response_model=SuggestionResponse, include_in_schema=False)
async def suggest_calculators(
    payload: SuggestionRequest,
    service: SuggestionService = Depends(get_suggestion_service),
) -> SuggestionResponse:
    """Always answers 200; failures are reported in the ``error`` field."""

    return await service.suggest(payload.prompt)
