from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import List, Optional

from compound_calc.schemas.compound import (
    SUPPORTED_CONTRIBUTIONS_PER_YEAR,
    CalculationInput,
    CalculationMode,
    PaymentTiming,
)


class CalculatorError(ValueError):
    """Base class for recoverable calculation failures."""


class InvalidInputError(CalculatorError):
    def __init__(self, errors: List[str]):
        super().__init__("; ".join(errors))
        self.errors = errors


class SolverNonConvergenceError(CalculatorError):
    def __init__(self, mode: CalculationMode, message: str):
        super().__init__(message)
        self.mode = mode
        self.errors = [message]


@dataclass(frozen=True)
class PreparedInput:
    initial_capital: float
    periodic_contribution: float
    periods_per_year: int
    payment_due: bool
    period_rate: float
    total_periods: float
    target_amount: float

    @property
    def annual_rate_percent(self) -> float:
        return self.period_rate * self.periods_per_year * 100

    @property
    def years(self) -> float:
        return self.total_periods / self.periods_per_year


@dataclass
class PreparationResult:
    prepared: Optional[PreparedInput]
    errors: List[str] = field(default_factory=list)


MAX_HORIZON_YEARS = 200

_AMOUNT_FIELDS = (
    ("initial_capital", "initial capital"),
    ("periodic_contribution", "periodic contribution"),
    ("annual_rate_percent", "annual rate"),
    ("years", "years"),
    ("target_amount", "target amount"),
)


def prepare_input(calculation_input: CalculationInput, mode: CalculationMode) -> PreparationResult:
    errors: List[str] = []

    for attribute, label in _AMOUNT_FIELDS:
        value = getattr(calculation_input, attribute)
        if not math.isfinite(value):
            errors.append(f"{label} must be a finite number")
        elif value < 0:
            errors.append(f"{label} must be non-negative")

    if calculation_input.years > MAX_HORIZON_YEARS:
        errors.append(f"years must not exceed {MAX_HORIZON_YEARS}")

    periods_per_year = calculation_input.contributions_per_year
    if periods_per_year not in SUPPORTED_CONTRIBUTIONS_PER_YEAR:
        errors.append(
            f"contributions per year must be one of {SUPPORTED_CONTRIBUTIONS_PER_YEAR}, got {periods_per_year}"
        )

    if errors:
        return PreparationResult(prepared=None, errors=errors)

    prepared = PreparedInput(
        initial_capital=calculation_input.initial_capital,
        periodic_contribution=calculation_input.periodic_contribution,
        periods_per_year=periods_per_year,
        payment_due=calculation_input.payment_timing == PaymentTiming.START_OF_PERIOD,
        period_rate=calculation_input.annual_rate_percent / 100 / periods_per_year,
        total_periods=calculation_input.years * periods_per_year,
        target_amount=calculation_input.target_amount,
    )

    if mode == CalculationMode.TIME_TO_GOAL:
        if prepared.target_amount > prepared.initial_capital and prepared.periodic_contribution == 0:
            if prepared.period_rate == 0:
                errors.append("target amount is unreachable without contributions or interest")
            elif prepared.initial_capital == 0:
                errors.append("target amount is unreachable without contributions or initial capital")
    elif mode in (CalculationMode.REQUIRED_CONTRIBUTION, CalculationMode.REQUIRED_RATE):
        if prepared.total_periods == 0:
            errors.append("years must be greater than zero to solve for a target")

    if errors:
        return PreparationResult(prepared=None, errors=errors)
    return PreparationResult(prepared=prepared)
