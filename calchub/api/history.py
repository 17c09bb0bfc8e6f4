"""FastAPI router for per-calculator calculation history."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Response, status

from calchub.calculators.registry import CalculatorRegistry
from calchub.schemas.history import HistoryResponse
from calchub.services.dependencies import get_history_store, get_registry_dependency
from calchub.services.history_service import HistoryStore

router = APIRouter()


@router.get("/{calculator_id}", response_model=HistoryResponse)
async def get_history(
    calculator_id: str,
    profile_id: str = Query("default", min_length=1, description="Owning profile"),
    registry: CalculatorRegistry = Depends(get_registry_dependency),
    store: HistoryStore = Depends(get_history_store),
) -> HistoryResponse:
    """Return the calculator's entries, most recent first."""

    definition = registry.require(calculator_id)
    entries = await store.load(profile_id, definition.id)
    return HistoryResponse(profile_id=profile_id, calculator_id=definition.id, entries=entries)


@router.delete("/{calculator_id}", status_code=status.HTTP_204_NO_CONTENT)
async def clear_history(
    calculator_id: str,
    profile_id: str = Query("default", min_length=1, description="Owning profile"),
    registry: CalculatorRegistry = Depends(get_registry_dependency),
    store: HistoryStore = Depends(get_history_store),
) -> Response:
    definition = registry.require(calculator_id)
    await store.clear(profile_id, definition.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
