"""Date and time arithmetic."""

from __future__ import annotations

import calendar
from datetime import date
from typing import Literal

from calchub.calculators.base import (
    CalculatorDefinition,
    CalculatorInputs,
    Category,
    OutputSpec,
    Refinement,
    input_field,
)


def add_months(day: date, months: int) -> date:
    """Shift ``day`` by whole months, clamping to the target month's last day."""

    month_index = day.month - 1 + months
    year = day.year + month_index // 12
    month = month_index % 12 + 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))


def calendar_difference(start: date, end: date) -> tuple[int, int, int]:
    """Return the (years, months, days) separating ``start`` from ``end``."""

    years = end.year - start.year
    if add_months(start, years * 12) > end:
        years -= 1
    anchor = add_months(start, years * 12)

    months = (end.year - anchor.year) * 12 + end.month - anchor.month
    if add_months(anchor, months) > end:
        months -= 1
    anchor = add_months(anchor, months)

    return years, months, (end - anchor).days


class DateDifferenceInputs(CalculatorInputs):
    start_date: date = input_field(label="Start Date")
    end_date: date = input_field(label="End Date")


def _date_difference(inputs: DateDifferenceInputs) -> dict[str, int]:
    years, months, days = calendar_difference(inputs.start_date, inputs.end_date)
    return {
        "years": years,
        "months": months,
        "days": days,
        "total_days": (inputs.end_date - inputs.start_date).days,
    }


DATE_DIFFERENCE = CalculatorDefinition(
    id="date-difference-calculator",
    name="Date Difference Calculator",
    description="Calculate the number of days, months, and years between two dates.",
    category=Category.TIME_DATE,
    input_model=DateDifferenceInputs,
    function=_date_difference,
    outputs=(
        OutputSpec("years", "Years"),
        OutputSpec("months", "Months"),
        OutputSpec("days", "Days"),
        OutputSpec("total_days", "Total Days", grouping=True),
    ),
    refinements=(
        Refinement(
            "end_date",
            "End date must be on or after the start date",
            lambda i: i.end_date >= i.start_date,
        ),
    ),
    export_title="Date Difference Calculation",
)


MAX_HOURS = 1_000_000


class TimeInputs(CalculatorInputs):
    h1: int = input_field(label="Hours (first)", suggested=1, ge=0, le=MAX_HOURS)
    m1: int = input_field(label="Minutes (first)", suggested=0, ge=0, le=59)
    s1: int = input_field(label="Seconds (first)", suggested=0, ge=0, le=59)
    op: Literal["add", "subtract"] = input_field("add", label="Operation")
    h2: int = input_field(label="Hours (second)", suggested=0, ge=0, le=MAX_HOURS)
    m2: int = input_field(label="Minutes (second)", suggested=30, ge=0, le=59)
    s2: int = input_field(label="Seconds (second)", suggested=0, ge=0, le=59)


def format_duration(total_seconds: int) -> str:
    sign = "-" if total_seconds < 0 else ""
    hours, remainder = divmod(abs(total_seconds), 3600)
    minutes, seconds = divmod(remainder, 60)
    return f"{sign}{hours}h {minutes}m {seconds}s"


def _time(inputs: TimeInputs) -> dict[str, int | str]:
    first = inputs.h1 * 3600 + inputs.m1 * 60 + inputs.s1
    second = inputs.h2 * 3600 + inputs.m2 * 60 + inputs.s2
    total = first + second if inputs.op == "add" else first - second
    return {"duration": format_duration(total), "total_seconds": total}


TIME_CALCULATOR = CalculatorDefinition(
    id="time-calculator",
    name="Time Calculator",
    description="Add or subtract time values in hours, minutes, and seconds.",
    category=Category.TIME_DATE,
    input_model=TimeInputs,
    function=_time,
    outputs=(
        OutputSpec("duration", "Result"),
        OutputSpec("total_seconds", "Total Seconds", grouping=True),
    ),
    export_title="Time Calculation",
)


DEFINITIONS = (DATE_DIFFERENCE, TIME_CALCULATOR)
