"""Combinatorics, percentages and factorials."""

from __future__ import annotations

import math
from typing import Literal

from calchub.calculators.base import (
    CalculatorDefinition,
    CalculatorInputs,
    Category,
    OutputSpec,
    Refinement,
    input_field,
)


class CombinationsInputs(CalculatorInputs):
    n: int = input_field(label="Total number of items (n)", suggested=10, ge=1, le=170)
    r: int = input_field(label="Number of items to choose (r)", suggested=3, ge=1, le=170)


def _combinations(inputs: CombinationsInputs) -> dict[str, int]:
    return {
        "combinations": math.comb(inputs.n, inputs.r),
        "permutations": math.perm(inputs.n, inputs.r),
    }


COMBINATIONS_PERMUTATIONS = CalculatorDefinition(
    id="combinations-permutations-calculator",
    name="Combinations & Permutations Calculator",
    description="Count the ways to choose or arrange r items out of n (n up to 170).",
    category=Category.MATH,
    input_model=CombinationsInputs,
    function=_combinations,
    outputs=(
        OutputSpec("combinations", "Combinations (nCr)", grouping=True),
        OutputSpec("permutations", "Permutations (nPr)", grouping=True),
    ),
    refinements=(
        Refinement("r", "n must be greater than or equal to r", lambda i: i.n >= i.r),
    ),
    export_title="Combinations & Permutations",
)


class PercentageInputs(CalculatorInputs):
    mode: Literal["percent_of", "what_percent"] = input_field(
        "percent_of", label="Question"
    )
    x: float = input_field(label="X")
    y: float = input_field(label="Y")


def _percentage(inputs: PercentageInputs) -> dict[str, float]:
    if inputs.mode == "percent_of":
        # What is X% of Y?
        return {"result": inputs.x / 100 * inputs.y}
    # X is what % of Y?
    return {"result": inputs.x / inputs.y * 100}


PERCENTAGE = CalculatorDefinition(
    id="percentage-calculator",
    name="Percentage Calculator",
    description="Solve various percentage problems easily.",
    category=Category.MATH,
    input_model=PercentageInputs,
    function=_percentage,
    outputs=(OutputSpec("result", "Result", decimals=2),),
    refinements=(
        Refinement(
            "y",
            "Total value cannot be zero",
            lambda i: i.mode != "what_percent" or i.y != 0,
        ),
    ),
    export_title="Percentage Calculation",
)


class FactorialInputs(CalculatorInputs):
    number: int = input_field(label="Number", suggested=5, ge=0, le=170)


def _factorial(inputs: FactorialInputs) -> dict[str, int]:
    value = math.factorial(inputs.number)
    return {"factorial": value, "digits": len(str(value))}


FACTORIAL = CalculatorDefinition(
    id="factorial-calculator",
    name="Factorial Calculator",
    description="Compute n! exactly for any whole number up to 170.",
    category=Category.MATH,
    input_model=FactorialInputs,
    function=_factorial,
    outputs=(
        OutputSpec("factorial", "Factorial"),
        OutputSpec("digits", "Digits"),
    ),
    export_title="Factorial Calculation",
)


DEFINITIONS = (COMBINATIONS_PERMUTATIONS, PERCENTAGE, FACTORIAL)
