"""Catalog, computation and export endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query, Response

from calchub.calculators.base import CalculatorDefinition, Category
from calchub.calculators.registry import CalculatorRegistry
from calchub.exporting import ExportKind, export_filename, format_export
from calchub.schemas.calculator import (
    CalculatorDetail,
    CalculatorListResponse,
    CalculatorSummary,
    ComputeRequest,
    ComputeResponse,
    ExportRequest,
)
from calchub.services.dependencies import (
    get_favorites_store,
    get_history_store,
    get_registry_dependency,
    get_settings_dependency,
)
from calchub.services.favorites_service import FavoritesStore
from calchub.services.history_service import HistoryStore
from calchub.settings import AppSettings

logger = logging.getLogger(__name__)

router = APIRouter()

PROFILE_QUERY = Query("default", min_length=1, description="Profile owning favorites and history")


def _summary(definition: CalculatorDefinition, favorites: set[str]) -> CalculatorSummary:
    return CalculatorSummary(
        id=definition.id,
        name=definition.name,
        description=definition.description,
        category=definition.category.value,
        is_favorite=definition.id in favorites,
    )


@router.get("", response_model=CalculatorListResponse)
@router.get("/", response_model=CalculatorListResponse, include_in_schema=False)
async def list_calculators(
    category: Category | None = Query(None, description="Restrict to one category"),
    q: str | None = Query(None, description="Substring matched against name and description"),
    favorites_only: bool = Query(False, description="Only return favorited calculators"),
    profile_id: str = PROFILE_QUERY,
    registry: CalculatorRegistry = Depends(get_registry_dependency),
    favorites_store: FavoritesStore = Depends(get_favorites_store),
) -> CalculatorListResponse:
    """Return catalog entries filtered the same way the catalog page filters."""

    definitions = registry.search(q) if q else registry.all()
    if category is not None:
        definitions = [item for item in definitions if item.category is category]

    favorites = set(await favorites_store.load(profile_id))
    if favorites_only:
        definitions = [item for item in definitions if item.id in favorites]

    summaries = [_summary(definition, favorites) for definition in definitions]
    return CalculatorListResponse(total=len(summaries), calculators=summaries)


@router.get("/categories", response_model=list[str])
async def list_categories(
    registry: CalculatorRegistry = Depends(get_registry_dependency),
) -> list[str]:
    return [category.value for category in registry.categories()]


@router.get("/{calculator_id}", response_model=CalculatorDetail)
async def get_calculator(
    calculator_id: str,
    profile_id: str = PROFILE_QUERY,
    registry: CalculatorRegistry = Depends(get_registry_dependency),
    favorites_store: FavoritesStore = Depends(get_favorites_store),
) -> CalculatorDetail:
    definition = registry.require(calculator_id)
    favorites = set(await favorites_store.load(profile_id))
    summary = _summary(definition, favorites)
    return CalculatorDetail(
        **summary.model_dump(),
        inputs=definition.input_fields(),
        outputs=[spec.describe() for spec in definition.outputs],
    )


@router.post("/{calculator_id}/compute", response_model=ComputeResponse)
async def compute(
    calculator_id: str,
    payload: ComputeRequest,
    profile_id: str = PROFILE_QUERY,
    registry: CalculatorRegistry = Depends(get_registry_dependency),
    history_store: HistoryStore = Depends(get_history_store),
    settings: AppSettings = Depends(get_settings_dependency),
) -> ComputeResponse:
    """Validate and run a calculator, recording the outcome in history.

    Validation failures propagate as ``CalculationValidationError`` and are
    rendered as a 422 payload by the application's exception handler; nothing
    is written to history in that case.
    """

    definition = registry.require(calculator_id)
    result = definition.compute(payload.inputs)
    summary = definition.summarize(result)

    record = (
        settings.record_history_default
        if payload.record_history is None
        else payload.record_history
    )
    history_entry_id: str | None = None
    if record:
        entries = await history_store.append(profile_id, definition.id, result.inputs, summary)
        history_entry_id = entries[0].id

    return ComputeResponse(
        calculator_id=definition.id,
        inputs=result.inputs,
        values=result.values,
        display=definition.format_values(result),
        summary=summary,
        history_entry_id=history_entry_id,
    )


@router.post("/{calculator_id}/export")
async def export(
    calculator_id: str,
    payload: ExportRequest,
    kind: ExportKind = Query(ExportKind.TEXT, description="text (.txt) or table (.csv)"),
    registry: CalculatorRegistry = Depends(get_registry_dependency),
) -> Response:
    """Recompute from the supplied inputs and return the export as a download."""

    definition = registry.require(calculator_id)
    result = definition.compute(payload.inputs)
    content = format_export(definition, result.inputs, result, kind)
    filename = export_filename(definition, kind)
    logger.debug("Exporting %s as %s", definition.id, filename)
    return Response(
        content=content,
        media_type=kind.media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
