"""Year-by-year balance trace for a resolved compound growth input."""

from __future__ import annotations

import math
from typing import List

from compound_calc.domain.compound import PreparedInput
from compound_calc.schemas.compound import YearlyEntry

# Fractions of a period smaller than this are treated as float noise.
PERIOD_EPSILON = 1e-9


def _fractional_step(balance: float, prepared: PreparedInput, fraction: float) -> float:
    """Grow a balance over part of a period, matching the closed-form annuity at fractional n."""
    rate = prepared.period_rate
    if rate == 0:
        return balance + prepared.periodic_contribution * fraction

    growth = (1 + rate) ** fraction
    contribution = prepared.periodic_contribution
    if prepared.payment_due:
        contribution *= 1 + rate
    return balance * growth + contribution * (growth - 1) / rate


def build_evolution(prepared: PreparedInput) -> List[YearlyEntry]:
    """
    Simulate the balance period by period and record one entry per year.

    Per period:
      - start of period: add contribution, then accrue interest on the new balance
      - end of period: accrue interest, then add contribution

    The final year may be partial. A fractional trailing period is closed
    with the closed-form growth of that fraction so the last closing balance
    equals the final amount.
    """
    total_periods = prepared.total_periods
    if total_periods <= PERIOD_EPSILON:
        return []

    per_year = prepared.periods_per_year
    rate = prepared.period_rate
    contribution = prepared.periodic_contribution

    balance = prepared.initial_capital
    remaining = total_periods
    entries: List[YearlyEntry] = []

    year = 0
    while remaining > PERIOD_EPSILON:
        year += 1
        span = min(float(per_year), remaining)
        whole = int(math.floor(span + PERIOD_EPSILON))
        fraction = span - whole if span - whole > PERIOD_EPSILON else 0.0

        opening = balance
        paid = 0.0
        earned = 0.0

        for _ in range(whole):
            if prepared.payment_due:
                balance += contribution
                paid += contribution
            interest = balance * rate
            earned += interest
            balance += interest
            if not prepared.payment_due:
                balance += contribution
                paid += contribution

        if fraction:
            closing = _fractional_step(balance, prepared, fraction)
            partial_paid = contribution * fraction
            paid += partial_paid
            earned += closing - balance - partial_paid
            balance = closing

        entries.append(
            YearlyEntry(
                year=year,
                opening_balance=opening,
                contribution=paid,
                interest=earned,
                closing_balance=balance,
            )
        )
        remaining -= span

    return entries
