"""Text and CSV serialisation of a single computation.

Both renderings are pure functions of the definition, the validated inputs and
the computed result, so the same computation always produces byte-identical
content. The layouts are fixed because previously downloaded exports are
expected to keep matching newly generated ones:

Text::

    Acreage Calculation

    Inputs:
    - Length: 208.71 ft
    - Width: 208.71 ft

    Result:
    - Acreage: 1.0000 acres
    - Square Feet: 43,559.864 sq ft

Table (header line, data line, no trailing newline)::

    Length (ft),Width (ft),Acreage,Square Feet
    208.71,208.71,1.0000,43559.864100000006
"""

from __future__ import annotations

import csv
import io
from collections.abc import Mapping
from enum import Enum
from typing import Any

from calchub.calculators.base import CalculationResult, CalculatorDefinition, format_value


class ExportKind(str, Enum):
    """Supported export renderings."""

    TEXT = "text"
    TABLE = "table"

    @property
    def extension(self) -> str:
        return "txt" if self is ExportKind.TEXT else "csv"

    @property
    def media_type(self) -> str:
        return "text/plain" if self is ExportKind.TEXT else "text/csv"


def _present_inputs(
    definition: CalculatorDefinition, inputs: Mapping[str, Any]
) -> list[tuple[str, Any]]:
    """Inputs in schema order, skipping optional fields left blank."""

    ordered = [name for name in definition.input_model.model_fields if name in inputs]
    ordered.extend(name for name in inputs if name not in ordered)
    return [(name, inputs[name]) for name in ordered if inputs[name] is not None]


def _with_unit(text: str, unit: str | None) -> str:
    return f"{text} {unit}" if unit else text


def _format_text(
    definition: CalculatorDefinition,
    inputs: Mapping[str, Any],
    result: CalculationResult,
) -> str:
    lines = [definition.title, "", "Inputs:"]
    for name, value in _present_inputs(definition, inputs):
        rendered = _with_unit(format_value(value), definition.input_unit(name))
        lines.append(f"- {definition.input_label(name)}: {rendered}")

    lines.extend(["", "Result:"])
    for spec in definition.outputs:
        rendered = _with_unit(spec.format(result.values[spec.key]), spec.unit)
        lines.append(f"- {spec.label}: {rendered}")
    return "\n".join(lines)


def _format_table(
    definition: CalculatorDefinition,
    inputs: Mapping[str, Any],
    result: CalculationResult,
) -> str:
    present = _present_inputs(definition, inputs)
    header = [definition.input_label(name, with_unit=True) for name, _ in present]
    header.extend(spec.label for spec in definition.outputs)
    row = [format_value(value) for _, value in present]
    row.extend(spec.format_table(result.values[spec.key]) for spec in definition.outputs)

    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n", quoting=csv.QUOTE_MINIMAL)
    writer.writerow(header)
    writer.writerow(row)
    return buffer.getvalue().rstrip("\n")


def format_export(
    definition: CalculatorDefinition,
    inputs: Mapping[str, Any],
    result: CalculationResult,
    kind: ExportKind | str,
) -> str:
    """Render ``result`` for download in the requested ``kind``."""

    export_kind = ExportKind(kind)
    if export_kind is ExportKind.TEXT:
        return _format_text(definition, inputs, result)
    return _format_table(definition, inputs, result)


def export_filename(definition: CalculatorDefinition, kind: ExportKind | str) -> str:
    return f"{definition.file_stem}.{ExportKind(kind).extension}"


__all__ = ["ExportKind", "export_filename", "format_export"]
