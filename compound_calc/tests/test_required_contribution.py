from __future__ import annotations

from math import isclose

import pytest

from compound_calc.core.compound import solve
from compound_calc.domain.compound import InvalidInputError
from compound_calc.schemas.compound import CalculationInput, CalculationMode, PaymentTiming

CONTRIBUTION = CalculationMode.REQUIRED_CONTRIBUTION


def plan(**overrides) -> CalculationInput:
    values = dict(
        initial_capital=5000.0,
        contributions_per_year=12,
        annual_rate_percent=5.0,
        years=10.0,
        target_amount=50000.0,
    )
    values.update(overrides)
    return CalculationInput(**values)


@pytest.mark.parametrize("timing", list(PaymentTiming))
@pytest.mark.parametrize(
    "overrides",
    [
        {},
        {"contributions_per_year": 1, "years": 25, "annual_rate_percent": 8},
        {"contributions_per_year": 4, "initial_capital": 0, "target_amount": 12000},
        {"years": 2.5, "annual_rate_percent": 2.25},
    ],
)
def test_contribution_round_trip(timing, overrides):
    calculation_input = plan(payment_timing=timing, **overrides)
    solved = solve(CONTRIBUTION, calculation_input)

    replay = solve(
        CalculationMode.FINAL_CAPITAL,
        calculation_input.model_copy(update={"periodic_contribution": solved.required_contribution}),
    )

    assert solved.required_contribution > 0
    assert isclose(replay.final_amount, calculation_input.target_amount, rel_tol=1e-4)
    assert isclose(solved.final_amount, calculation_input.target_amount, rel_tol=1e-6)


def test_zero_rate_splits_gap_evenly():
    result = solve(CONTRIBUTION, plan(annual_rate_percent=0, initial_capital=2000, target_amount=14000, years=1))

    assert isclose(result.required_contribution, 1000.0, rel_tol=1e-12)
    assert result.total_interest == pytest.approx(0.0, abs=1e-9)


def test_start_of_period_needs_less():
    end = solve(CONTRIBUTION, plan())
    start = solve(CONTRIBUTION, plan(payment_timing=PaymentTiming.START_OF_PERIOD))

    assert isclose(start.required_contribution, end.required_contribution / (1 + 0.05 / 12), rel_tol=1e-12)


def test_target_exceeded_by_initial_capital_warns():
    result = solve(CONTRIBUTION, plan(initial_capital=100000, annual_rate_percent=7, target_amount=1000))

    assert result.required_contribution < 0
    assert result.warnings
    assert isclose(result.final_amount, 1000.0, rel_tol=1e-6)


def test_zero_years_rejected_before_computation():
    with pytest.raises(InvalidInputError) as excinfo:
        solve(CONTRIBUTION, plan(years=0))

    assert "years" in excinfo.value.errors[0]
