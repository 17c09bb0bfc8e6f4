"""Schemas for the calculator suggestion boundary."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class SuggestionServiceRequest(BaseModel):
    """Wire payload sent to the external suggestion service."""

    model_config = ConfigDict(populate_by_name=True)

    prompt: str
    calculator_names: list[str] = Field(..., alias="calculatorNames")


class SuggestionServiceResponse(BaseModel):
    """Wire payload returned by the external suggestion service."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    suggested_calculators: list[str] = Field(
        default_factory=list, alias="suggestedCalculators"
    )


class SuggestionRequest(BaseModel):
    prompt: str = Field("", description="Free-text description of the calculation need")


class Suggestion(BaseModel):
    name: str = Field(..., description="Calculator name as returned by the service")
    calculator_id: str | None = Field(
        None, description="Matching calculator id, or None when the name is unknown"
    )


class SuggestionResponse(BaseModel):
    suggestions: list[Suggestion] = Field(default_factory=list)
    error: str | None = None
