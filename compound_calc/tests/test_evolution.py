from __future__ import annotations

from math import isclose

import pytest

from compound_calc.core.compound import solve
from compound_calc.core.evolution import build_evolution
from compound_calc.domain.compound import prepare_input
from compound_calc.schemas.compound import CalculationInput, CalculationMode, PaymentTiming


def prepared(**overrides):
    values = dict(
        initial_capital=1000.0,
        periodic_contribution=100.0,
        contributions_per_year=1,
        annual_rate_percent=10.0,
        years=2.0,
    )
    values.update(overrides)
    return prepare_input(CalculationInput(**values), CalculationMode.FINAL_CAPITAL).prepared


def test_end_of_period_contribution_earns_nothing_in_its_own_period():
    rows = build_evolution(prepared())

    assert [row.year for row in rows] == [1, 2]
    assert isclose(rows[0].interest, 100.0)
    assert isclose(rows[0].closing_balance, 1200.0)
    assert isclose(rows[1].opening_balance, 1200.0)
    assert isclose(rows[1].interest, 120.0)
    assert isclose(rows[1].closing_balance, 1420.0)


def test_start_of_period_contribution_earns_interest_immediately():
    rows = build_evolution(prepared(payment_timing=PaymentTiming.START_OF_PERIOD))

    assert isclose(rows[0].interest, 110.0)
    assert isclose(rows[0].closing_balance, 1210.0)
    assert isclose(rows[1].interest, 131.0)
    assert isclose(rows[1].closing_balance, 1441.0)


def test_partial_final_year():
    rows = build_evolution(prepared(contributions_per_year=12, years=1.5))

    assert len(rows) == 2
    assert isclose(rows[0].contribution, 1200.0)
    assert isclose(rows[1].contribution, 600.0)


def test_no_periods_no_rows():
    assert build_evolution(prepared(years=0)) == []


def test_trace_is_restartable():
    item = prepared(contributions_per_year=4, years=7.25)

    assert build_evolution(item) == build_evolution(item)


@pytest.mark.parametrize("timing", list(PaymentTiming))
@pytest.mark.parametrize(
    "mode, overrides",
    [
        (CalculationMode.FINAL_CAPITAL, {"years": 12.0}),
        (CalculationMode.FINAL_CAPITAL, {"years": 3.75, "contributions_per_year": 4}),
        (CalculationMode.TIME_TO_GOAL, {"target_amount": 40000.0}),
        (CalculationMode.REQUIRED_CONTRIBUTION, {"years": 8.0, "target_amount": 30000.0}),
        (CalculationMode.REQUIRED_RATE, {"years": 6.0, "target_amount": 16000.0}),
    ],
)
def test_trace_closes_on_result_totals(timing, mode, overrides):
    values = dict(
        initial_capital=2000.0,
        periodic_contribution=150.0,
        contributions_per_year=12,
        payment_timing=timing,
        annual_rate_percent=6.0,
    )
    values.update(overrides)
    result = solve(mode, CalculationInput(**values))

    rows = result.evolution
    assert rows
    assert isclose(rows[0].opening_balance, 2000.0)
    assert isclose(rows[-1].closing_balance, result.final_amount, rel_tol=1e-9)
    assert isclose(sum(row.contribution for row in rows), result.total_contributions, rel_tol=1e-9)
    assert isclose(sum(row.interest for row in rows), result.total_interest, rel_tol=1e-6)
    for previous, current in zip(rows, rows[1:]):
        assert isclose(current.opening_balance, previous.closing_balance)
