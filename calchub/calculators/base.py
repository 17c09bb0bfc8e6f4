"""Computation contract shared by every calculator.

A calculator is a :class:`CalculatorDefinition`: a pydantic input model, an
optional list of cross-field :class:`Refinement` checks, a pure function from
validated inputs to raw values, and the :class:`OutputSpec` list that says how
those values are presented. Definitions are immutable once built.

Validation failures are reported as :class:`CalculationValidationError` with
one entry per offending field; the pure function is never called with input
that failed validation. Rounding happens only in :meth:`OutputSpec.format`, the
values kept in :class:`CalculationResult` are the unrounded floats.
"""

from __future__ import annotations

import math
import typing
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError
from pydantic.fields import FieldInfo

from calchub.schemas.calculator import InputFieldDescriptor, OutputDescriptor
from calchub.schemas.error import ValidationErrorDetail


class Category(str, Enum):
    """Fixed set of domain categories used for grouping and filtering."""

    FINANCE = "Finance"
    HEALTH_FITNESS = "Health & Fitness"
    MATH = "Math"
    CONVERSIONS = "Conversions"
    TIME_DATE = "Time & Date"
    EVERYDAY = "Everyday Utilities"


class CalculatorInputs(BaseModel):
    """Base class for calculator input models.

    Unknown keys are dropped and non-finite numbers are rejected, so a form
    posting extra widgets or ``Infinity`` never reaches a formula.
    """

    model_config = ConfigDict(extra="ignore", allow_inf_nan=False, frozen=True)


def input_field(
    default: Any = ...,
    *,
    label: str,
    unit: str | None = None,
    suggested: Any = None,
    **constraints: Any,
) -> Any:
    """Declare an input field with a display label and an optional unit.

    ``suggested`` pre-fills the form of a required field without making the
    field optional.
    """

    extra: dict[str, Any] = {}
    if unit:
        extra["unit"] = unit
    if suggested is not None:
        extra["suggested"] = suggested
    return Field(default, title=label, json_schema_extra=extra or None, **constraints)


class CalculationValidationError(Exception):
    """Raised when raw inputs do not satisfy a calculator's input schema."""

    def __init__(self, calculator_id: str, errors: list[ValidationErrorDetail]) -> None:
        self.calculator_id = calculator_id
        self.errors = errors
        fields = ", ".join(error.field for error in errors)
        super().__init__(f"Invalid input for {calculator_id}: {fields}")

    @property
    def fields(self) -> list[str]:
        return [error.field for error in self.errors]


@dataclass(frozen=True)
class Refinement:
    """Cross-field rule evaluated once every individual field is valid."""

    field: str
    message: str
    check: Callable[[Any], bool]


def _plain_number(value: float) -> str:
    if value.is_integer() and abs(value) < 1e16:
        return str(int(value))
    return repr(value)


def format_value(
    value: Any,
    *,
    decimals: int | None = None,
    max_decimals: int | None = None,
    grouping: bool = False,
) -> str:
    """Render ``value`` for display without touching the stored number.

    ``decimals`` pads to a fixed number of places; ``max_decimals`` rounds to at
    most that many and drops trailing zeros.
    """

    if value is None:
        return ""
    if isinstance(value, bool):
        return "Yes" if value else "No"
    if isinstance(value, int):
        return f"{value:,}" if grouping else str(value)
    if isinstance(value, float):
        if not math.isfinite(value):
            return str(value)
        if decimals is not None:
            return f"{value:,.{decimals}f}" if grouping else f"{value:.{decimals}f}"
        if max_decimals is not None:
            text = f"{value:,.{max_decimals}f}" if grouping else f"{value:.{max_decimals}f}"
            return text.rstrip("0").rstrip(".") if "." in text else text
        return _plain_number(value)
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


@dataclass(frozen=True)
class OutputSpec:
    """Presentation metadata for one computed value.

    ``raw_in_table`` writes the unrounded number into table exports instead of
    the display rendering.
    """

    key: str
    label: str
    unit: str | None = None
    decimals: int | None = None
    grouping: bool = False
    max_decimals: int | None = None
    raw_in_table: bool = False

    def format(self, value: Any, *, grouping: bool | None = None) -> str:
        use_grouping = self.grouping if grouping is None else grouping
        return format_value(
            value,
            decimals=self.decimals,
            max_decimals=self.max_decimals,
            grouping=use_grouping,
        )

    def format_table(self, value: Any) -> str:
        if self.raw_in_table:
            return format_value(value)
        return self.format(value, grouping=False)

    def describe(self) -> OutputDescriptor:
        return OutputDescriptor(
            key=self.key, label=self.label, unit=self.unit, decimals=self.decimals
        )


@dataclass(frozen=True)
class CalculationResult:
    """Structured outcome of a successful computation."""

    calculator_id: str
    inputs: dict[str, Any]
    values: dict[str, Any]


_MESSAGE_BUILDERS: dict[str, Callable[[dict[str, Any]], str]] = {
    "missing": lambda ctx: "is required",
    "float_parsing": lambda ctx: "must be a number",
    "float_type": lambda ctx: "must be a number",
    "finite_number": lambda ctx: "must be a finite number",
    "int_parsing": lambda ctx: "must be a whole number",
    "int_type": lambda ctx: "must be a whole number",
    "int_from_float": lambda ctx: "must be a whole number",
    "greater_than_equal": lambda ctx: f"must be ≥ {ctx.get('ge')}",
    "greater_than": lambda ctx: f"must be > {ctx.get('gt')}",
    "less_than_equal": lambda ctx: f"must be ≤ {ctx.get('le')}",
    "less_than": lambda ctx: f"must be < {ctx.get('lt')}",
    "literal_error": lambda ctx: f"must be one of: {ctx.get('expected')}",
    "enum": lambda ctx: f"must be one of: {ctx.get('expected')}",
    "date_parsing": lambda ctx: "must be a valid date (YYYY-MM-DD)",
    "date_from_datetime_parsing": lambda ctx: "must be a valid date (YYYY-MM-DD)",
    "date_from_datetime_inexact": lambda ctx: "must be a valid date (YYYY-MM-DD)",
    "date_type": lambda ctx: "must be a valid date (YYYY-MM-DD)",
    "string_too_short": lambda ctx: "must not be empty",
    "string_type": lambda ctx: "must be text",
}


def _field_errors(exc: PydanticValidationError) -> list[ValidationErrorDetail]:
    details: list[ValidationErrorDetail] = []
    seen: set[str] = set()
    for error in exc.errors():
        location = error.get("loc") or ()
        field_name = str(location[0]) if location else "__root__"
        if field_name in seen:
            continue
        seen.add(field_name)
        builder = _MESSAGE_BUILDERS.get(error["type"])
        message = builder(error.get("ctx") or {}) if builder else error["msg"]
        value = error.get("input")
        if error["type"] == "missing":
            value = None
        details.append(ValidationErrorDetail(field=field_name, message=message, value=value))
    return details


def _overflow_errors(model: CalculatorInputs) -> list[ValidationErrorDetail]:
    """Blame the numeric inputs of a computation whose result is not finite."""

    details = [
        ValidationErrorDetail(
            field=name, message="is too large to produce a finite result", value=value
        )
        for name, value in model
        if isinstance(value, (int, float)) and not isinstance(value, bool)
    ]
    return details or [
        ValidationErrorDetail(field="__root__", message="result is not a finite number")
    ]


def _field_kind(annotation: Any) -> tuple[str, list[str] | None]:
    """Map an input annotation onto the semantic kinds exposed to clients."""

    origin = typing.get_origin(annotation)
    args = typing.get_args(annotation)
    if origin is typing.Union or (origin is not None and type(None) in args):
        non_null = [arg for arg in args if arg is not type(None)]
        if len(non_null) == 1:
            return _field_kind(non_null[0])
    if origin is Literal:
        return "enum", [str(arg) for arg in args]
    if isinstance(annotation, type):
        if issubclass(annotation, Enum):
            return "enum", [str(member.value) for member in annotation]
        if issubclass(annotation, bool):
            return "boolean", None
        if issubclass(annotation, int):
            return "integer", None
        if issubclass(annotation, float):
            return "number", None
        if issubclass(annotation, date):
            return "date", None
    return "text", None


def _describe_field(name: str, info: FieldInfo) -> InputFieldDescriptor:
    kind, choices = _field_kind(info.annotation)
    bounds: dict[str, float | None] = {
        "minimum": None,
        "exclusive_minimum": None,
        "maximum": None,
        "exclusive_maximum": None,
    }
    for constraint in info.metadata:
        for attr, key in (
            ("ge", "minimum"),
            ("gt", "exclusive_minimum"),
            ("le", "maximum"),
            ("lt", "exclusive_maximum"),
        ):
            bound = getattr(constraint, attr, None)
            if bound is not None:
                bounds[key] = float(bound)

    extra = info.json_schema_extra if isinstance(info.json_schema_extra, dict) else {}
    if info.is_required():
        default = extra.get("suggested")
    else:
        default = info.get_default(call_default_factory=True)
    if isinstance(default, Enum):
        default = default.value
    elif isinstance(default, date):
        default = default.isoformat()
    return InputFieldDescriptor(
        name=name,
        label=info.title or name,
        kind=kind,
        required=info.is_required(),
        unit=extra.get("unit"),
        choices=choices,
        default=default,
        **bounds,
    )


@dataclass(frozen=True)
class CalculatorDefinition:
    """Immutable description of one calculator."""

    id: str
    name: str
    description: str
    category: Category
    input_model: type[CalculatorInputs]
    function: Callable[[Any], dict[str, Any]]
    outputs: tuple[OutputSpec, ...]
    refinements: tuple[Refinement, ...] = ()
    export_title: str | None = None
    export_name: str | None = None
    _output_index: dict[str, OutputSpec] = field(
        default_factory=dict, init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        if not self.id or self.id != self.id.strip():
            raise ValueError("Calculator ids must be non-empty and unpadded")
        index = {spec.key: spec for spec in self.outputs}
        if len(index) != len(self.outputs):
            raise ValueError(f"Duplicate output keys declared for {self.id}")
        object.__setattr__(self, "_output_index", index)

    @property
    def title(self) -> str:
        return self.export_title or self.name

    @property
    def file_stem(self) -> str:
        return self.export_name or self.id

    def input_fields(self) -> list[InputFieldDescriptor]:
        return [
            _describe_field(name, info)
            for name, info in self.input_model.model_fields.items()
        ]

    def input_label(self, name: str, *, with_unit: bool = False) -> str:
        info = self.input_model.model_fields.get(name)
        if info is None:
            return name
        label = info.title or name
        extra = info.json_schema_extra if isinstance(info.json_schema_extra, dict) else {}
        unit = extra.get("unit")
        if with_unit and unit:
            return f"{label} ({unit})"
        return label

    def input_unit(self, name: str) -> str | None:
        info = self.input_model.model_fields.get(name)
        if info is None or not isinstance(info.json_schema_extra, dict):
            return None
        return info.json_schema_extra.get("unit")

    def output(self, key: str) -> OutputSpec | None:
        return self._output_index.get(key)

    def validate(self, raw_inputs: Mapping[str, Any]) -> CalculatorInputs:
        """Coerce ``raw_inputs`` into the input model or raise field errors."""

        try:
            model = self.input_model.model_validate(dict(raw_inputs))
        except PydanticValidationError as exc:
            raise CalculationValidationError(self.id, _field_errors(exc)) from None

        failures = [
            ValidationErrorDetail(
                field=rule.field,
                message=rule.message,
                value=getattr(model, rule.field, None),
            )
            for rule in self.refinements
            if not rule.check(model)
        ]
        if failures:
            raise CalculationValidationError(self.id, failures)
        return model

    def compute(self, raw_inputs: Mapping[str, Any]) -> CalculationResult:
        """Validate ``raw_inputs`` and run the pure computation."""

        model = self.validate(raw_inputs)
        try:
            values = self.function(model)
        except OverflowError:
            raise CalculationValidationError(self.id, _overflow_errors(model)) from None
        missing = [spec.key for spec in self.outputs if spec.key not in values]
        if missing:
            raise RuntimeError(f"{self.id} did not produce outputs: {', '.join(missing)}")
        if any(
            isinstance(values[spec.key], float) and not math.isfinite(values[spec.key])
            for spec in self.outputs
        ):
            raise CalculationValidationError(self.id, _overflow_errors(model))
        return CalculationResult(
            calculator_id=self.id,
            inputs=model.model_dump(mode="json"),
            values={spec.key: values[spec.key] for spec in self.outputs},
        )

    def format_values(
        self, result: CalculationResult, *, grouping: bool | None = None
    ) -> dict[str, str]:
        return {
            spec.key: spec.format(result.values[spec.key], grouping=grouping)
            for spec in self.outputs
        }

    def summarize(self, result: CalculationResult) -> str:
        """One-line display string, e.g. ``"Acreage: 1.0000 acres; ..."``."""

        parts: list[str] = []
        for spec in self.outputs:
            text = spec.format(result.values[spec.key])
            if spec.unit:
                text = f"{text} {spec.unit}"
            parts.append(f"{spec.label}: {text}")
        return "; ".join(parts)


__all__ = [
    "CalculationResult",
    "CalculationValidationError",
    "CalculatorDefinition",
    "CalculatorInputs",
    "Category",
    "OutputSpec",
    "Refinement",
    "format_value",
    "input_field",
]
