"""FastAPI router exposing a profile's favorite calculators."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from calchub.calculators.registry import CalculatorRegistry
from calchub.schemas.favorites import FavoritesResponse, FavoriteToggleResponse
from calchub.services.dependencies import get_favorites_store, get_registry_dependency
from calchub.services.favorites_service import FavoritesStore

router = APIRouter()


@router.get("", response_model=FavoritesResponse)
@router.get("/", response_model=FavoritesResponse, include_in_schema=False)
async def list_favorites(
    profile_id: str = Query("default", min_length=1, description="Owning profile"),
    store: FavoritesStore = Depends(get_favorites_store),
) -> FavoritesResponse:
    return FavoritesResponse(profile_id=profile_id, favorites=await store.load(profile_id))


@router.post("/{calculator_id}/toggle", response_model=FavoriteToggleResponse)
async def toggle_favorite(
    calculator_id: str,
    profile_id: str = Query("default", min_length=1, description="Owning profile"),
    registry: CalculatorRegistry = Depends(get_registry_dependency),
    store: FavoritesStore = Depends(get_favorites_store),
) -> FavoriteToggleResponse:
    """Add the calculator to favorites if absent, remove it otherwise."""

    definition = registry.require(calculator_id)
    favorites = await store.toggle(profile_id, definition.id)
    return FavoriteToggleResponse(
        profile_id=profile_id,
        favorites=favorites,
        calculator_id=definition.id,
        is_favorite=definition.id in favorites,
    )
