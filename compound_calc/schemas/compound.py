"""Data contracts for compound growth calculations."""

from __future__ import annotations

from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

FREQUENCY_LABELS = {
    "annual": 1,
    "yearly": 1,
    "quarterly": 4,
    "monthly": 12,
}

SUPPORTED_CONTRIBUTIONS_PER_YEAR = (1, 4, 12)


class CalculationMode(str, Enum):
    FINAL_CAPITAL = "finalCapital"
    TIME_TO_GOAL = "timeToGoal"
    REQUIRED_CONTRIBUTION = "requiredContribution"
    REQUIRED_RATE = "requiredRate"


class PaymentTiming(str, Enum):
    """Whether a period's contribution accrues interest during that same period."""

    START_OF_PERIOD = "start"
    END_OF_PERIOD = "end"


class CalculationInput(BaseModel):
    """Inputs for one solver invocation.

    Range checks (non-negative amounts, supported frequencies) live in the
    domain layer so they surface as InvalidInputError rather than as a
    schema error.
    """

    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    initial_capital: float = Field(0.0, description="Balance at period 0.")
    periodic_contribution: float = Field(0.0, description="Amount paid in every period.")
    contributions_per_year: int = Field(
        12,
        description="Compounding and contribution periods per year (1, 4 or 12).",
    )
    payment_timing: PaymentTiming = Field(
        PaymentTiming.END_OF_PERIOD,
        description="Contribution paid at the start or at the end of each period.",
    )
    annual_rate_percent: float = Field(
        0.0,
        description="Nominal annual rate expressed in percent (5.0 for 5%).",
    )
    years: float = Field(0.0, description="Horizon in years, may be fractional.")
    target_amount: float = Field(0.0, description="Goal amount for the goal-seeking modes.")

    @field_validator("contributions_per_year", mode="before")
    @classmethod
    def _parse_frequency(cls, value: Any) -> Any:
        if isinstance(value, str):
            label = value.strip().lower()
            if label in FREQUENCY_LABELS:
                return FREQUENCY_LABELS[label]
        return value

    @field_validator("payment_timing", mode="before")
    @classmethod
    def _parse_timing(cls, value: Any) -> Any:
        if isinstance(value, str):
            label = value.strip().lower()
            if label in ("beginning", "start_of_period"):
                return PaymentTiming.START_OF_PERIOD
            if label == "end_of_period":
                return PaymentTiming.END_OF_PERIOD
            return label
        return value


class YearlyEntry(BaseModel):
    """Single year of the evolution trace."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    year: int = Field(..., ge=1)
    opening_balance: float
    contribution: float
    interest: float
    closing_balance: float


class CalculationResult(BaseModel):
    """Solver output. Exactly one of the required_* fields is set in goal-seeking modes."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    mode: CalculationMode
    final_amount: float
    total_contributions: float
    total_interest: float
    total_periods: float = Field(..., ge=0)
    years: float = Field(..., ge=0)

    required_time: Optional[float] = Field(None, description="Years needed to reach the target.")
    required_contribution: Optional[float] = None
    required_rate: Optional[float] = Field(None, description="Annual rate in percent.")

    evolution: List[YearlyEntry] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)


class CompoundRequest(CalculationInput):
    """HTTP payload: the calculation input plus the mode selector."""

    mode: CalculationMode = CalculationMode.FINAL_CAPITAL


class ScenarioRequest(BaseModel):
    """HTTP payload for comparing one input across several annual rates."""

    model_config = ConfigDict(
        extra="forbid",
        alias_generator=to_camel,
        populate_by_name=True,
    )

    input: CalculationInput
    annual_rates: List[float] = Field(..., min_length=1, max_length=10)


class Composition(BaseModel):
    """Share of the final amount coming from each source, for the breakdown chart."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    initial_capital: float
    contributions: float
    interest: float
    initial_capital_share: float
    contributions_share: float
    interest_share: float


class TimeBreakdown(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    years: int
    months: int


class CompoundResponse(CalculationResult):
    composition: Composition
    required_time_breakdown: Optional[TimeBreakdown] = None


class ScenarioResponse(BaseModel):
    scenarios: List[CalculationResult]
