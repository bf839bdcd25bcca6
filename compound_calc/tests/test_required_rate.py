from __future__ import annotations

from math import isclose

import pytest

from compound_calc.core.compound import solve
from compound_calc.domain.compound import InvalidInputError, SolverNonConvergenceError
from compound_calc.schemas.compound import CalculationInput, CalculationMode, PaymentTiming

RATE = CalculationMode.REQUIRED_RATE


def test_recovers_known_annual_rate():
    """Inverse of 1000 * 1.07^20."""
    result = solve(
        RATE,
        CalculationInput(
            initial_capital=1000,
            periodic_contribution=0,
            contributions_per_year=1,
            years=20,
            target_amount=1000 * 1.07**20,
        ),
    )

    assert isclose(result.required_rate, 7.0, rel_tol=1e-6)


@pytest.mark.parametrize("timing", list(PaymentTiming))
@pytest.mark.parametrize(
    "initial, contribution, per_year, years, target",
    [
        (1000.0, 100.0, 12, 10.0, 20000.0),
        (0.0, 2400.0, 1, 30.0, 250000.0),
        (15000.0, 0.0, 4, 8.0, 22000.0),
        (500.0, 75.0, 12, 3.5, 3800.0),
    ],
)
def test_rate_round_trip(timing, initial, contribution, per_year, years, target):
    calculation_input = CalculationInput(
        initial_capital=initial,
        periodic_contribution=contribution,
        contributions_per_year=per_year,
        payment_timing=timing,
        years=years,
        target_amount=target,
    )
    solved = solve(RATE, calculation_input)

    replay = solve(
        CalculationMode.FINAL_CAPITAL,
        calculation_input.model_copy(update={"annual_rate_percent": solved.required_rate}),
    )

    assert solved.required_rate > 0
    assert isclose(replay.final_amount, target, rel_tol=1e-4)
    assert isclose(solved.final_amount, target, rel_tol=1e-4)


def test_target_equal_to_plain_savings_needs_no_interest():
    result = solve(
        RATE,
        CalculationInput(initial_capital=0, periodic_contribution=100, contributions_per_year=1, years=10, target_amount=1000),
    )

    assert result.required_rate == pytest.approx(0.0, abs=1e-2)


def test_target_below_savings_has_no_non_negative_rate():
    with pytest.raises(SolverNonConvergenceError) as excinfo:
        solve(
            RATE,
            CalculationInput(initial_capital=1000, periodic_contribution=0, contributions_per_year=1, years=10, target_amount=500),
        )

    assert excinfo.value.mode == RATE


def test_nothing_invested_cannot_grow():
    with pytest.raises(SolverNonConvergenceError):
        solve(RATE, CalculationInput(initial_capital=0, periodic_contribution=0, years=5, target_amount=100))


def test_zero_years_rejected():
    with pytest.raises(InvalidInputError):
        solve(RATE, CalculationInput(initial_capital=100, years=0, target_amount=200))
