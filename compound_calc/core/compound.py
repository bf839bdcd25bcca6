"""Compound growth solver: final capital, time to goal, required contribution, required rate.

All four modes share one periodic model. With period rate r, n periods,
initial capital PV and contribution PMT:

    FV = PV * (1+r)^n + PMT * ((1+r)^n - 1) / r          (end of period)
    FV = PV * (1+r)^n + PMT * ((1+r)^n - 1) / r * (1+r)  (start of period)

Goal-seeking modes invert this for n, PMT or r, then re-run the closed form
at the solved value so every result carries consistent totals and an
evolution trace.
"""

from __future__ import annotations

import logging
import math
from dataclasses import replace
from typing import Iterable, List, Tuple

from compound_calc.core.evolution import build_evolution
from compound_calc.domain.compound import (
    InvalidInputError,
    PreparedInput,
    SolverNonConvergenceError,
    prepare_input,
)
from compound_calc.schemas.compound import (
    CalculationInput,
    CalculationMode,
    CalculationResult,
)

logger = logging.getLogger(__name__)

TOLERANCE = 1e-6
MAX_ITERATIONS = 100

INITIAL_PERIOD_GUESS = 10.0
MAX_YEARS = 60

INITIAL_RATE_GUESS = 0.05
MIN_PERIOD_RATE = -0.99
MAX_PERIOD_RATE = 2.0
ZERO_RATE_THRESHOLD = 1e-10
MIN_SLOPE = 1e-15


def _growth(rate: float, periods: float) -> float:
    try:
        return (1 + rate) ** periods
    except OverflowError:
        return math.inf


def annuity_factor(rate: float, periods: float) -> float:
    """((1+r)^n - 1) / r, computed without cancellation for small r."""
    if rate == 0:
        return periods
    try:
        return math.expm1(periods * math.log1p(rate)) / rate
    except OverflowError:
        return math.inf


def future_value(prepared: PreparedInput) -> float:
    """Closed-form balance after total_periods. Never iterates."""
    rate = prepared.period_rate
    periods = prepared.total_periods
    if rate == 0:
        return prepared.initial_capital + prepared.periodic_contribution * periods

    principal = prepared.initial_capital * _growth(rate, periods) if prepared.initial_capital else 0.0
    annuity = 0.0
    if prepared.periodic_contribution:
        annuity = prepared.periodic_contribution * annuity_factor(rate, periods)
        if prepared.payment_due:
            annuity *= 1 + rate
    return principal + annuity


def _summarize(prepared: PreparedInput, mode: CalculationMode, **solved) -> CalculationResult:
    final_amount = future_value(prepared)
    if not math.isfinite(final_amount):
        raise InvalidInputError(["inputs produce a balance too large to represent"])

    total_contributions = prepared.periodic_contribution * prepared.total_periods
    return CalculationResult(
        mode=mode,
        final_amount=final_amount,
        total_contributions=total_contributions,
        total_interest=final_amount - prepared.initial_capital - total_contributions,
        total_periods=prepared.total_periods,
        years=prepared.years,
        evolution=build_evolution(prepared),
        **solved,
    )


def calculate_final_capital(prepared: PreparedInput) -> CalculationResult:
    return _summarize(prepared, CalculationMode.FINAL_CAPITAL)


def _goal_gap(prepared: PreparedInput, payment: float, periods: float) -> float:
    rate = prepared.period_rate
    growth = _growth(rate, periods)
    return prepared.initial_capital * growth + payment * (growth - 1) / rate - prepared.target_amount


def _beyond_horizon() -> SolverNonConvergenceError:
    return SolverNonConvergenceError(
        CalculationMode.TIME_TO_GOAL,
        f"unable to reach the target within {MAX_YEARS} years with the given parameters",
    )


def _solve_periods(prepared: PreparedInput) -> float:
    """Newton-Raphson on n for PV(1+r)^n + PMT((1+r)^n - 1)/r = target.

    An iterate that overshoots the horizon is pulled back to it when the
    goal is reached by then; otherwise the goal lies beyond the horizon.
    """
    rate = prepared.period_rate
    payment = prepared.periodic_contribution
    if prepared.payment_due:
        payment *= 1 + rate
    base = prepared.initial_capital + payment / rate
    log_growth = math.log1p(rate)
    max_periods = MAX_YEARS * prepared.periods_per_year

    if _goal_gap(prepared, payment, max_periods) < 0:
        logger.warning(
            "time to goal beyond %d years (initial=%s, contribution=%s, rate=%s, target=%s)",
            MAX_YEARS,
            prepared.initial_capital,
            prepared.periodic_contribution,
            prepared.period_rate,
            prepared.target_amount,
        )
        raise _beyond_horizon()

    periods = INITIAL_PERIOD_GUESS
    for iteration in range(MAX_ITERATIONS):
        growth = _growth(rate, periods)
        value = _goal_gap(prepared, payment, periods)
        slope = growth * log_growth * base
        if not math.isfinite(slope) or slope == 0:
            break

        next_periods = periods - value / slope
        if not math.isfinite(next_periods):
            break
        if next_periods > max_periods:
            next_periods = float(max_periods)
        if abs(next_periods - periods) < TOLERANCE:
            if 0 <= next_periods <= max_periods:
                logger.debug("time to goal converged after %d iterations: n=%.6f", iteration + 1, next_periods)
                return next_periods
            break

        periods = next_periods
        if periods < 0:
            break

    logger.warning(
        "time to goal did not converge (initial=%s, contribution=%s, rate=%s, target=%s)",
        prepared.initial_capital,
        prepared.periodic_contribution,
        prepared.period_rate,
        prepared.target_amount,
    )
    raise SolverNonConvergenceError(
        CalculationMode.TIME_TO_GOAL,
        "unable to find the time needed to reach the target with the given parameters",
    )


def calculate_time_to_goal(prepared: PreparedInput) -> CalculationResult:
    mode = CalculationMode.TIME_TO_GOAL
    if prepared.target_amount <= prepared.initial_capital:
        return CalculationResult(
            mode=mode,
            final_amount=prepared.target_amount,
            total_contributions=0.0,
            total_interest=prepared.target_amount - prepared.initial_capital,
            total_periods=0.0,
            years=0.0,
            required_time=0.0,
        )

    if prepared.period_rate == 0:
        periods = (prepared.target_amount - prepared.initial_capital) / prepared.periodic_contribution
        max_periods = MAX_YEARS * prepared.periods_per_year
        if periods > max_periods:
            logger.warning(
                "time to goal beyond %d years without interest (gap=%s, contribution=%s)",
                MAX_YEARS,
                prepared.target_amount - prepared.initial_capital,
                prepared.periodic_contribution,
            )
            raise _beyond_horizon()
    else:
        periods = _solve_periods(prepared)

    solved = replace(prepared, total_periods=periods)
    return _summarize(solved, mode, required_time=solved.years)


def calculate_required_contribution(prepared: PreparedInput) -> CalculationResult:
    rate = prepared.period_rate
    periods = prepared.total_periods

    if rate == 0:
        contribution = (prepared.target_amount - prepared.initial_capital) / periods
    else:
        growth = _growth(rate, periods)
        if not math.isfinite(growth):
            raise InvalidInputError(["inputs produce a balance too large to represent"])
        remaining = prepared.target_amount - prepared.initial_capital * growth
        contribution = remaining / annuity_factor(rate, periods)
        if prepared.payment_due:
            contribution /= 1 + rate

    warnings: List[str] = []
    if contribution < 0:
        warnings.append("initial capital alone exceeds the target; the required contribution is negative")

    solved = replace(prepared, periodic_contribution=contribution)
    result = _summarize(solved, CalculationMode.REQUIRED_CONTRIBUTION, required_contribution=contribution)
    result.warnings.extend(warnings)
    return result


def _rate_objective(prepared: PreparedInput, rate: float) -> Tuple[float, float]:
    """Return f(r) and f'(r) for the required-rate search."""
    periods = prepared.total_periods
    initial = prepared.initial_capital
    payment = prepared.periodic_contribution
    due = prepared.payment_due

    if abs(rate) < ZERO_RATE_THRESHOLD:
        # limits at r -> 0: A(0) = n, A'(0) = n(n-1)/2
        value = initial + payment * periods - prepared.target_amount
        slope = initial * periods + payment * periods * (periods - 1) / 2
        if due:
            slope += payment * periods
        return value, slope

    growth = (1 + rate) ** periods
    d_growth = periods * (1 + rate) ** (periods - 1)
    annuity = annuity_factor(rate, periods)
    d_annuity = (d_growth - annuity) / rate

    if due:
        value = initial * growth + payment * annuity * (1 + rate) - prepared.target_amount
        slope = initial * d_growth + payment * (d_annuity * (1 + rate) + annuity)
    else:
        value = initial * growth + payment * annuity - prepared.target_amount
        slope = initial * d_growth + payment * d_annuity
    return value, slope


def _solve_rate(prepared: PreparedInput) -> float:
    rate = INITIAL_RATE_GUESS
    for iteration in range(MAX_ITERATIONS):
        try:
            value, slope = _rate_objective(prepared, rate)
        except OverflowError:
            break
        if not (math.isfinite(value) and math.isfinite(slope)) or abs(slope) < MIN_SLOPE:
            break

        next_rate = rate - value / slope
        if not math.isfinite(next_rate):
            break
        if abs(next_rate - rate) < TOLERANCE:
            if next_rate < -TOLERANCE:
                break
            next_rate = max(next_rate, 0.0)
            logger.debug("required rate converged after %d iterations: r=%.8f", iteration + 1, next_rate)
            return next_rate

        rate = next_rate
        if rate < MIN_PERIOD_RATE or rate > MAX_PERIOD_RATE:
            break

    logger.warning(
        "required rate did not converge (initial=%s, contribution=%s, periods=%s, target=%s)",
        prepared.initial_capital,
        prepared.periodic_contribution,
        prepared.total_periods,
        prepared.target_amount,
    )
    raise SolverNonConvergenceError(
        CalculationMode.REQUIRED_RATE,
        "unable to find a non-negative interest rate that reaches the target",
    )


def calculate_required_rate(prepared: PreparedInput) -> CalculationResult:
    rate = _solve_rate(prepared)
    solved = replace(prepared, period_rate=rate)
    return _summarize(solved, CalculationMode.REQUIRED_RATE, required_rate=solved.annual_rate_percent)


_SOLVERS = {
    CalculationMode.FINAL_CAPITAL: calculate_final_capital,
    CalculationMode.TIME_TO_GOAL: calculate_time_to_goal,
    CalculationMode.REQUIRED_CONTRIBUTION: calculate_required_contribution,
    CalculationMode.REQUIRED_RATE: calculate_required_rate,
}


def solve(mode: CalculationMode, calculation_input: CalculationInput) -> CalculationResult:
    """Validate the input and run the solver for the given mode.

    Raises InvalidInputError before any numeric work when the input is
    rejected, and SolverNonConvergenceError when an iterative search fails.
    """
    mode = CalculationMode(mode)
    preparation = prepare_input(calculation_input, mode)
    if preparation.errors or not preparation.prepared:
        raise InvalidInputError(preparation.errors)

    return _SOLVERS[mode](preparation.prepared)


def compare_rates(calculation_input: CalculationInput, annual_rates: Iterable[float]) -> List[CalculationResult]:
    """Final capital for the same input under each annual rate, in the order given."""
    return [
        solve(
            CalculationMode.FINAL_CAPITAL,
            calculation_input.model_copy(update={"annual_rate_percent": rate}),
        )
        for rate in annual_rates
    ]


__all__ = [
    "TOLERANCE",
    "MAX_ITERATIONS",
    "annuity_factor",
    "future_value",
    "calculate_final_capital",
    "calculate_time_to_goal",
    "calculate_required_contribution",
    "calculate_required_rate",
    "solve",
    "compare_rates",
]
