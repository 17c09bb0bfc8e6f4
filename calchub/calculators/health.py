"""Health and fitness formulas."""

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

IMPERIAL_BMI_FACTOR = 703


class BmiInputs(CalculatorInputs):
    unit: Literal["metric", "imperial"] = input_field("metric", label="Units")
    height_cm: float | None = input_field(None, label="Height", unit="cm", gt=0)
    weight_kg: float | None = input_field(None, label="Weight", unit="kg", gt=0)
    height_ft: float | None = input_field(None, label="Height (feet)", unit="ft", ge=0)
    height_in: float | None = input_field(None, label="Height (inches)", unit="in", ge=0)
    weight_lbs: float | None = input_field(None, label="Weight", unit="lbs", gt=0)


def bmi_category(bmi: float) -> str:
    if bmi < 18.5:
        return "Underweight"
    if bmi < 25:
        return "Normal weight"
    if bmi < 30:
        return "Overweight"
    return "Obese"


def _imperial_height_inches(inputs: BmiInputs) -> float:
    return (inputs.height_ft or 0) * 12 + (inputs.height_in or 0)


def _bmi(inputs: BmiInputs) -> dict[str, float | str]:
    if inputs.unit == "metric":
        height_m = inputs.height_cm / 100
        bmi = inputs.weight_kg / (height_m * height_m)
    else:
        total_inches = _imperial_height_inches(inputs)
        bmi = inputs.weight_lbs / (total_inches * total_inches) * IMPERIAL_BMI_FACTOR
    return {"bmi": bmi, "category": bmi_category(bmi)}


BMI = CalculatorDefinition(
    id="bmi-calculator",
    name="BMI Calculator",
    description="Calculate your Body Mass Index to assess your weight status.",
    category=Category.HEALTH_FITNESS,
    input_model=BmiInputs,
    function=_bmi,
    outputs=(
        OutputSpec("bmi", "BMI", decimals=1),
        OutputSpec("category", "Category"),
    ),
    refinements=(
        Refinement(
            "height_cm",
            "Height is required for metric units",
            lambda i: i.unit != "metric" or i.height_cm is not None,
        ),
        Refinement(
            "weight_kg",
            "Weight is required for metric units",
            lambda i: i.unit != "metric" or i.weight_kg is not None,
        ),
        Refinement(
            "height_ft",
            "Height must be greater than zero for imperial units",
            lambda i: i.unit != "imperial" or _imperial_height_inches(i) > 0,
        ),
        Refinement(
            "weight_lbs",
            "Weight is required for imperial units",
            lambda i: i.unit != "imperial" or i.weight_lbs is not None,
        ),
    ),
    export_title="BMI Calculation",
)


DEFINITIONS = (BMI,)
