"""Everyday utility calculators."""

from __future__ import annotations

from calchub.calculators.base import (
    CalculatorDefinition,
    CalculatorInputs,
    Category,
    OutputSpec,
    input_field,
)


class TipInputs(CalculatorInputs):
    bill_amount: float = input_field(label="Bill Amount", suggested=50, unit="USD", ge=0.01)
    tip_percentage: float = input_field(label="Tip Percentage", suggested=15, unit="%", ge=0)
    number_of_people: int = input_field(label="Number of People", suggested=1, ge=1)


def _tip(inputs: TipInputs) -> dict[str, float]:
    tip_amount = inputs.bill_amount * inputs.tip_percentage / 100
    total = inputs.bill_amount + tip_amount
    return {
        "tip_amount": tip_amount,
        "total_amount": total,
        "tip_per_person": tip_amount / inputs.number_of_people,
        "total_per_person": total / inputs.number_of_people,
    }


TIP = CalculatorDefinition(
    id="tip-calculator",
    name="Tip Calculator",
    description="Quickly calculate the tip for a bill for any number of people.",
    category=Category.EVERYDAY,
    input_model=TipInputs,
    function=_tip,
    outputs=(
        OutputSpec("tip_amount", "Tip Amount", unit="USD", decimals=2, grouping=True),
        OutputSpec("total_amount", "Total Amount", unit="USD", decimals=2, grouping=True),
        OutputSpec("tip_per_person", "Tip per Person", unit="USD", decimals=2, grouping=True),
        OutputSpec(
            "total_per_person", "Total per Person", unit="USD", decimals=2, grouping=True
        ),
    ),
    export_title="Tip Calculation",
)


class FuelCostInputs(CalculatorInputs):
    distance: float = input_field(label="Distance", suggested=300, unit="miles", ge=1)
    fuel_efficiency: float = input_field(label="Fuel Efficiency", suggested=25, unit="MPG", ge=1)
    fuel_price: float = input_field(label="Fuel Price", suggested=3.5, unit="USD/gal", ge=0.01)


def _fuel_cost(inputs: FuelCostInputs) -> dict[str, float]:
    fuel_needed = inputs.distance / inputs.fuel_efficiency
    return {"fuel_needed": fuel_needed, "total_cost": fuel_needed * inputs.fuel_price}


FUEL_COST = CalculatorDefinition(
    id="fuel-cost-calculator",
    name="Fuel Cost Calculator",
    description="Estimate the total fuel cost for a road trip based on distance and MPG.",
    category=Category.EVERYDAY,
    input_model=FuelCostInputs,
    function=_fuel_cost,
    outputs=(
        OutputSpec("fuel_needed", "Fuel Needed", unit="gallons", decimals=2),
        OutputSpec("total_cost", "Total Cost", unit="USD", decimals=2, grouping=True),
    ),
    export_title="Fuel Cost Calculation",
)


DEFINITIONS = (TIP, FUEL_COST)
