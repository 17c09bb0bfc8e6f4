"""Pydantic schemas describing calculators and computations over HTTP."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class InputFieldDescriptor(BaseModel):
    """Declarative description of one calculator input for form rendering."""

    name: str = Field(..., description="Key expected in the compute payload")
    label: str = Field(..., description="Human-readable label")
    kind: str = Field(
        ...,
        description="Semantic type: number, integer, enum, date or text.",
    )
    required: bool = Field(True, description="Whether the field must be supplied")
    unit: str | None = Field(None, description="Display unit appended to values")
    minimum: float | None = Field(None, description="Inclusive lower bound")
    exclusive_minimum: float | None = Field(None, description="Exclusive lower bound")
    maximum: float | None = Field(None, description="Inclusive upper bound")
    exclusive_maximum: float | None = Field(None, description="Exclusive upper bound")
    choices: list[str] | None = Field(None, description="Allowed values for enum fields")
    default: Any = Field(None, description="Suggested starting value")


class OutputDescriptor(BaseModel):
    """Presentation metadata for one computed value."""

    key: str
    label: str
    unit: str | None = None
    decimals: int | None = None


class CalculatorSummary(BaseModel):
    """Catalog entry returned by list endpoints."""

    id: str = Field(..., description="Stable calculator identifier (slug)")
    name: str
    description: str
    category: str
    is_favorite: bool = Field(False, description="Whether the profile favorited it")


class CalculatorListResponse(BaseModel):
    total: int
    calculators: list[CalculatorSummary]


class CalculatorDetail(CalculatorSummary):
    """Full calculator description including its input schema."""

    inputs: list[InputFieldDescriptor] = Field(default_factory=list)
    outputs: list[OutputDescriptor] = Field(default_factory=list)


class ComputeRequest(BaseModel):
    """Payload submitted to run a calculator."""

    inputs: dict[str, Any] = Field(
        default_factory=dict,
        description="Raw field values keyed by input name, as collected by the form.",
    )
    record_history: bool | None = Field(
        None,
        description=(
            "Write a history entry on success. ``None`` falls back to the"
            " service-wide default."
        ),
    )


class ComputeResponse(BaseModel):
    """Structured computation result plus display strings."""

    calculator_id: str
    inputs: dict[str, Any] = Field(..., description="Validated, coerced inputs")
    values: dict[str, Any] = Field(..., description="Unrounded computed values")
    display: dict[str, str] = Field(..., description="Formatted values for presentation")
    summary: str = Field(..., description="One-line rendering stored in history")
    history_entry_id: str | None = Field(
        None, description="Identifier of the history entry written, if any"
    )


class ExportRequest(BaseModel):
    """Inputs to re-compute and serialise as a downloadable export."""

    inputs: dict[str, Any] = Field(default_factory=dict)
