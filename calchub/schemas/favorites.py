"""Pydantic schemas for the favorites endpoints."""

from __future__ import annotations

from pydantic import BaseModel, Field


class FavoritesResponse(BaseModel):
    """Current favorites of a profile in insertion order."""

    profile_id: str
    favorites: list[str] = Field(default_factory=list)


class FavoriteToggleResponse(FavoritesResponse):
    calculator_id: str
    is_favorite: bool = Field(..., description="Membership after the toggle")
