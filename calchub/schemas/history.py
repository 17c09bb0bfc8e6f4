"""Pydantic schemas for calculation history entries."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class HistoryEntry(BaseModel):
    """One past computation, serialised exactly as it is persisted."""

    model_config = ConfigDict(extra="ignore")

    id: str = Field(..., min_length=1, description="Opaque unique identifier")
    timestamp: datetime = Field(..., description="UTC instant the entry was recorded")
    inputs: dict[str, Any] = Field(
        default_factory=dict, description="Raw field values supplied by the caller"
    )
    result: str = Field(..., description="Display string of the computed result")


class HistoryResponse(BaseModel):
    profile_id: str
    calculator_id: str
    entries: list[HistoryEntry] = Field(default_factory=list)
