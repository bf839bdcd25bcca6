"""HTTP routes for the Flask API."""

from __future__ import annotations

import logging
import math
from http import HTTPStatus
from typing import Any, Dict, Optional

from flask import Blueprint, current_app, g, jsonify, request
from pydantic import ValidationError

from compound_calc.core.compound import compare_rates, solve
from compound_calc.core.ping import get_ping_message, get_service_version
from compound_calc.domain.compound import InvalidInputError, SolverNonConvergenceError
from compound_calc.schemas.compound import (
    CalculationInput,
    CalculationMode,
    CalculationResult,
    Composition,
    CompoundRequest,
    CompoundResponse,
    ScenarioRequest,
    ScenarioResponse,
    TimeBreakdown,
)
from compound_calc.schemas.ping import PingResponse

logger = logging.getLogger(__name__)

api_bp = Blueprint("api", __name__)


@api_bp.errorhandler(ValidationError)
def _handle_validation_error(exc: ValidationError):
    """Convert Pydantic validation errors into JSON responses."""
    logger.info("rejected malformed payload on %s", request.path, extra={"path": request.path})
    return (
        jsonify({"detail": exc.errors(include_url=False, include_context=False)}),
        HTTPStatus.BAD_REQUEST,
    )


@api_bp.errorhandler(InvalidInputError)
def _handle_invalid_input(exc: InvalidInputError):
    logger.info("invalid calculator input: %s", exc, extra={"path": request.path})
    return jsonify({"error": exc.errors, "kind": "invalid_input"}), HTTPStatus.BAD_REQUEST


@api_bp.errorhandler(SolverNonConvergenceError)
def _handle_non_convergence(exc: SolverNonConvergenceError):
    logger.info(
        "solver failed for %s: %s",
        exc.mode.value,
        exc,
        extra={"path": request.path, "mode": exc.mode.value},
    )
    return (
        jsonify({"error": exc.errors, "kind": "solver_non_convergence"}),
        HTTPStatus.UNPROCESSABLE_ENTITY,
    )


def _share(part: float, whole: float) -> float:
    return part / whole * 100 if whole else 0.0


def build_composition(calculation_input: CalculationInput, result: CalculationResult) -> Composition:
    """Split the final amount into initial capital, contributions and interest."""
    initial = calculation_input.initial_capital
    whole = initial + result.total_contributions + result.total_interest
    return Composition(
        initial_capital=initial,
        contributions=result.total_contributions,
        interest=result.total_interest,
        initial_capital_share=_share(initial, whole),
        contributions_share=_share(result.total_contributions, whole),
        interest_share=_share(result.total_interest, whole),
    )


def split_years(required_time: Optional[float]) -> Optional[TimeBreakdown]:
    """Whole years plus rounded months, carrying 12 months into the next year."""
    if required_time is None:
        return None
    years = math.floor(required_time)
    months = round((required_time - years) * 12)
    if months == 12:
        years, months = years + 1, 0
    return TimeBreakdown(years=years, months=months)


@api_bp.get("/ping")
def ping() -> Any:
    """Health-check endpoint."""
    settings = current_app.config["SETTINGS"]
    response = PingResponse(
        message=get_ping_message(),
        service=settings.service_name,
        version=get_service_version(),
    )
    return jsonify(response.model_dump())


@api_bp.post("/calc/compound")
def compound() -> Any:
    """Run one calculator mode and return totals, evolution and composition."""
    raw_payload: Dict[str, Any] = request.get_json(force=True, silent=False)
    payload = CompoundRequest.model_validate(raw_payload)
    g.calc_mode = payload.mode
    calculation_input = CalculationInput.model_validate(payload.model_dump(exclude={"mode"}))

    result = solve(payload.mode, calculation_input)
    response = CompoundResponse(
        **result.model_dump(),
        composition=build_composition(calculation_input, result),
        required_time_breakdown=(
            split_years(result.required_time) if payload.mode == CalculationMode.TIME_TO_GOAL else None
        ),
    )
    return jsonify(response.model_dump(mode="json", by_alias=True))


@api_bp.post("/calc/compound/scenarios")
def compound_scenarios() -> Any:
    """Final capital for one input under several annual rates."""
    raw_payload: Dict[str, Any] = request.get_json(force=True, silent=False)
    payload = ScenarioRequest.model_validate(raw_payload)
    results = compare_rates(payload.input, payload.annual_rates)
    response = ScenarioResponse(scenarios=results)
    return jsonify(response.model_dump(mode="json", by_alias=True))
