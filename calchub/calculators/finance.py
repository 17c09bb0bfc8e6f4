"""Loans, interest and price calculations."""

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

COMPOUNDING_PERIODS = {"annually": 1, "semiannually": 2, "quarterly": 4, "monthly": 12}


def _money(key: str, label: str) -> OutputSpec:
    return OutputSpec(key, label, unit="USD", decimals=2, grouping=True)


class LoanInputs(CalculatorInputs):
    loan_amount: float = input_field(label="Loan Amount", suggested=10_000, unit="USD", gt=0)
    interest_rate: float = input_field(
        label="Annual Interest Rate", suggested=5, unit="%", ge=0, le=100
    )
    loan_term: int = input_field(label="Loan Term", suggested=5, unit="years", ge=1, le=50)


def monthly_payment(principal: float, annual_rate_percent: float, months: int) -> float:
    rate = annual_rate_percent / 100 / 12
    if rate == 0:
        return principal / months
    growth = (1 + rate) ** months
    return principal * rate * growth / (growth - 1)


def _loan(inputs: LoanInputs) -> dict[str, float | int]:
    months = inputs.loan_term * 12
    payment = monthly_payment(inputs.loan_amount, inputs.interest_rate, months)
    total_paid = payment * months
    return {
        "monthly_payment": payment,
        "number_of_payments": months,
        "total_paid": total_paid,
        "total_interest": total_paid - inputs.loan_amount,
    }


LOAN = CalculatorDefinition(
    id="loan-calculator",
    name="Loan Calculator",
    description="Determine the repayment schedule for any type of fixed-rate loan.",
    category=Category.FINANCE,
    input_model=LoanInputs,
    function=_loan,
    outputs=(
        _money("monthly_payment", "Monthly Payment"),
        OutputSpec("number_of_payments", "Number of Payments"),
        _money("total_paid", "Total Paid"),
        _money("total_interest", "Total Interest"),
    ),
    export_title="Loan Calculation",
)


class CompoundInterestInputs(CalculatorInputs):
    initial_principal: float = input_field(
        label="Initial Principal", suggested=1_000, unit="USD", ge=0
    )
    monthly_contribution: float = input_field(
        label="Monthly Contribution", suggested=100, unit="USD", ge=0
    )
    interest_rate: float = input_field(
        label="Annual Interest Rate", suggested=5, unit="%", ge=0.01, le=100
    )
    years: int = input_field(label="Years", suggested=10, ge=1, le=100)
    compound_frequency: Literal["annually", "semiannually", "quarterly", "monthly"] = (
        input_field("monthly", label="Compound Frequency")
    )


def _compound_interest(inputs: CompoundInterestInputs) -> dict[str, float]:
    periods = COMPOUNDING_PERIODS[inputs.compound_frequency]
    annual_rate = inputs.interest_rate / 100
    # Contributions are monthly, so work with the equivalent monthly rate.
    monthly_rate = (1 + annual_rate / periods) ** (periods / 12) - 1
    months = inputs.years * 12
    growth = (1 + monthly_rate) ** months
    principal_value = inputs.initial_principal * growth
    contribution_value = inputs.monthly_contribution * (growth - 1) / monthly_rate
    total_contributions = inputs.initial_principal + inputs.monthly_contribution * months
    future_value = principal_value + contribution_value
    return {
        "future_value": future_value,
        "total_contributions": total_contributions,
        "total_interest": future_value - total_contributions,
    }


COMPOUND_INTEREST = CalculatorDefinition(
    id="compound-interest-calculator",
    name="Compound Interest Calculator",
    description="Calculate how much your investments will grow over time.",
    category=Category.FINANCE,
    input_model=CompoundInterestInputs,
    function=_compound_interest,
    outputs=(
        _money("future_value", "Future Value"),
        _money("total_contributions", "Total Contributions"),
        _money("total_interest", "Total Interest"),
    ),
    export_title="Compound Interest Calculation",
)


class SalesTaxInputs(CalculatorInputs):
    price: float = input_field(label="Price", suggested=100, unit="USD", ge=0.01)
    tax_rate: float = input_field(label="Tax Rate", suggested=8, unit="%", ge=0)


def _sales_tax(inputs: SalesTaxInputs) -> dict[str, float]:
    tax_amount = inputs.price * inputs.tax_rate / 100
    return {"tax_amount": tax_amount, "total_price": inputs.price + tax_amount}


SALES_TAX = CalculatorDefinition(
    id="sales-tax-calculator",
    name="Sales Tax Calculator",
    description="Calculate the sales tax and total price for a purchase.",
    category=Category.FINANCE,
    input_model=SalesTaxInputs,
    function=_sales_tax,
    outputs=(_money("tax_amount", "Tax Amount"), _money("total_price", "Total Price")),
    export_title="Sales Tax Calculation",
)


class DiscountInputs(CalculatorInputs):
    price_before: float = input_field(
        label="Price Before Discount", suggested=100, unit="USD", ge=0.01
    )
    discount_value: float = input_field(label="Discount", suggested=20, ge=0)
    discount_type: Literal["percent", "fixed"] = input_field("percent", label="Discount Type")


def _discount(inputs: DiscountInputs) -> dict[str, float]:
    if inputs.discount_type == "percent":
        saved = inputs.price_before * inputs.discount_value / 100
    else:
        saved = inputs.discount_value
    return {"amount_saved": saved, "price_after": inputs.price_before - saved}


DISCOUNT = CalculatorDefinition(
    id="discount-calculator",
    name="Discount Calculator",
    description="Work out the sale price and savings for a percentage or fixed discount.",
    category=Category.FINANCE,
    input_model=DiscountInputs,
    function=_discount,
    outputs=(_money("price_after", "Price After"), _money("amount_saved", "Amount Saved")),
    refinements=(
        Refinement(
            "discount_value",
            "Percentage discount cannot exceed 100",
            lambda i: i.discount_type != "percent" or i.discount_value <= 100,
        ),
        Refinement(
            "discount_value",
            "Fixed discount cannot exceed the original price",
            lambda i: i.discount_type != "fixed" or i.discount_value <= i.price_before,
        ),
    ),
    export_title="Discount Calculation",
)


DEFINITIONS = (LOAN, COMPOUND_INTEREST, SALES_TAX, DISCOUNT)
