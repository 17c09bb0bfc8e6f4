"""Unit and measurement conversions."""

from __future__ import annotations

from typing import Literal

from calchub.calculators.base import (
    CalculatorDefinition,
    CalculatorInputs,
    Category,
    OutputSpec,
    Refinement,
    input_field,
)

SQUARE_FEET_PER_ACRE = 43_560
MESH_MICRON_CONSTANT = 14_832

# Factors relative to the first unit of each group.
LINEAR_FACTORS: dict[str, dict[str, float]] = {
    "length": {
        "meters": 1,
        "kilometers": 0.001,
        "miles": 0.000621371,
        "feet": 3.28084,
        "inches": 39.3701,
    },
    "weight": {
        "kilograms": 1,
        "grams": 1000,
        "pounds": 2.20462,
        "ounces": 35.274,
    },
}
TEMPERATURE_UNITS = ("celsius", "fahrenheit", "kelvin")


def units_for(group: str) -> tuple[str, ...]:
    if group == "temperature":
        return TEMPERATURE_UNITS
    return tuple(LINEAR_FACTORS.get(group, {}))


class AcreageInputs(CalculatorInputs):
    length: float = input_field(label="Length", suggested=208.71, unit="ft", ge=0.1)
    width: float = input_field(label="Width", suggested=208.71, unit="ft", ge=0.1)


def _acreage(inputs: AcreageInputs) -> dict[str, float]:
    square_feet = inputs.length * inputs.width
    return {"acres": square_feet / SQUARE_FEET_PER_ACRE, "square_feet": square_feet}


ACREAGE = CalculatorDefinition(
    id="acreage-calculator",
    name="Acreage Calculator",
    description="Calculate the acreage of a rectangular plot from its length and width.",
    category=Category.CONVERSIONS,
    input_model=AcreageInputs,
    function=_acreage,
    outputs=(
        OutputSpec("acres", "Acreage", unit="acres", decimals=4),
        OutputSpec(
            "square_feet",
            "Square Feet",
            unit="sq ft",
            max_decimals=3,
            grouping=True,
            raw_in_table=True,
        ),
    ),
    export_title="Acreage Calculation",
    export_name="acreage-calculation",
)


class UnitConversionInputs(CalculatorInputs):
    category: Literal["length", "weight", "temperature"] = input_field(
        "length", label="Category"
    )
    from_unit: str = input_field("meters", label="From", min_length=1)
    to_unit: str = input_field("feet", label="To", min_length=1)
    value: float = input_field(label="Value", suggested=10)


def _to_celsius(value: float, unit: str) -> float:
    if unit == "fahrenheit":
        return (value - 32) * 5 / 9
    if unit == "kelvin":
        return value - 273.15
    return value


def _from_celsius(value: float, unit: str) -> float:
    if unit == "fahrenheit":
        return value * 9 / 5 + 32
    if unit == "kelvin":
        return value + 273.15
    return value


def convert_units(group: str, from_unit: str, to_unit: str, value: float) -> float:
    if from_unit == to_unit:
        return value
    if group == "temperature":
        return _from_celsius(_to_celsius(value, from_unit), to_unit)
    factors = LINEAR_FACTORS[group]
    return value / factors[from_unit] * factors[to_unit]


def _unit_conversion(inputs: UnitConversionInputs) -> dict[str, float]:
    return {
        "converted_value": convert_units(
            inputs.category, inputs.from_unit, inputs.to_unit, inputs.value
        )
    }


UNIT_CONVERTER = CalculatorDefinition(
    id="unit-converter",
    name="Unit Converter",
    description="Convert between different units of length, weight, and temperature.",
    category=Category.CONVERSIONS,
    input_model=UnitConversionInputs,
    function=_unit_conversion,
    outputs=(OutputSpec("converted_value", "Converted Value", decimals=4, grouping=True),),
    refinements=(
        Refinement(
            "from_unit",
            "from unit does not belong to the selected category",
            lambda inputs: inputs.from_unit in units_for(inputs.category),
        ),
        Refinement(
            "to_unit",
            "to unit does not belong to the selected category",
            lambda inputs: inputs.to_unit in units_for(inputs.category),
        ),
    ),
    export_title="Unit Conversion",
    export_name="unit-conversion",
)


class MeshMicronInputs(CalculatorInputs):
    value: float = input_field(label="Value", suggested=100, ge=0.1)
    unit: Literal["mesh", "micron"] = input_field("mesh", label="From")


def _mesh_micron(inputs: MeshMicronInputs) -> dict[str, float | str]:
    # The relation is its own inverse: microns = 14832 / mesh and vice versa.
    return {
        "to_unit": "micron" if inputs.unit == "mesh" else "mesh",
        "converted_value": MESH_MICRON_CONSTANT / inputs.value,
    }


MESH_TO_MICRON = CalculatorDefinition(
    id="mesh-to-micron-converter",
    name="Mesh to Micron Converter",
    description="Convert between sieve mesh sizes and particle size in microns.",
    category=Category.CONVERSIONS,
    input_model=MeshMicronInputs,
    function=_mesh_micron,
    outputs=(
        OutputSpec("to_unit", "To"),
        OutputSpec("converted_value", "Converted Value", decimals=2),
    ),
    export_title="Mesh/Micron Conversion",
    export_name="mesh-micron-conversion",
)


DEFINITIONS = (ACREAGE, UNIT_CONVERTER, MESH_TO_MICRON)
