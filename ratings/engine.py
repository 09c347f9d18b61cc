"""
Claim evaluation pipeline.

Runs the rating engine end to end for one set of selected conditions:
combined rating, range estimate, compensation, TDIU, SMC and the composite
score. Every call builds fresh results; nothing is cached or persisted.
"""

import logging
from dataclasses import asdict, dataclass, field
from datetime import date
from enum import Enum
from typing import List, Optional, Sequence

from .catalog import SelectedCondition
from .compensation import CompensationResult, Dependents, calculate_compensation
from .ingestion import conditions_to_rating_inputs
from .rate_tables import RateTable
from .scoring import calculate_claim_score
from .va_math import (
    CombinedRatingResult,
    RatingRange,
    calculate_combined_rating,
    calculate_rating_range,
)
from .va_special_compensation import (
    SMCResult,
    TDIUEligibility,
    TDIUResult,
    check_smc_eligibility,
    check_tdiu_eligibility,
)

logger = logging.getLogger(__name__)

DAYS_PER_MONTH = 30


@dataclass
class ClaimEvaluation:
    """Everything the engine derives for one claim"""
    combined: CombinedRatingResult
    rating_range: RatingRange
    compensation: CompensationResult
    tdiu: TDIUResult
    smc: List[SMCResult] = field(default_factory=list)
    score: int = 0
    max_monthly_benefit: float = 0.0
    potential_backpay: float = 0.0


def estimate_backpay(monthly: float, effective_date: date, as_of: date) -> float:
    """
    Retroactive benefit estimate: whole 30-day months since the effective
    date, times the monthly amount. Never negative.
    """
    months = max(0, (as_of - effective_date).days // DAYS_PER_MONTH)
    return round(monthly * months, 2)


def _max_monthly_benefit(
    tdiu: TDIUResult,
    compensation: CompensationResult,
    smc: Sequence[SMCResult],
    dependents: Optional[Dependents],
    rates: RateTable,
) -> float:
    # TDIU pays at the 100% rate
    if tdiu.eligible == TDIUEligibility.ELIGIBLE:
        monthly = calculate_compensation(100, dependents, rates).monthly
    else:
        monthly = compensation.monthly

    monthly += sum(result.amount for result in smc if result.eligible)
    return round(monthly, 2)


def evaluate_claim(
    conditions: Sequence[SelectedCondition],
    dependents: Optional[Dependents],
    rates: RateTable,
    evidence_score: float = 0,
    effective_date: Optional[date] = None,
    as_of: Optional[date] = None,
) -> ClaimEvaluation:
    """
    Evaluate a claim from the claimant's selected conditions.

    Args:
        conditions: Selected conditions; unselected or 0% ones do not combine
        dependents: Dependents for compensation add-ons
        rates: Rate table used for every dollar amount
        evidence_score: Evidence strength 0-100, only used by the score
        effective_date: Claim effective date, enables the backpay estimate
        as_of: Date the backpay estimate runs to
    """
    ratings = conditions_to_rating_inputs(conditions)
    combined = calculate_combined_rating(ratings)

    rating_range = calculate_rating_range([
        (condition.name, condition.ratings or (condition.selected_rating or 0,))
        for condition in conditions
    ])

    compensation = calculate_compensation(combined.combined, dependents, rates)
    tdiu = check_tdiu_eligibility(ratings, combined)
    smc = check_smc_eligibility(conditions, ratings, rates, combined)

    score = calculate_claim_score(
        combined.combined,
        tdiu.eligible,
        smc,
        evidence_score,
        len(conditions),
    )

    max_monthly = _max_monthly_benefit(tdiu, compensation, smc, dependents, rates)

    backpay = 0.0
    if effective_date is not None and as_of is not None:
        backpay = estimate_backpay(max_monthly, effective_date, as_of)

    logger.debug(
        "Evaluated claim: %d conditions, combined=%s, tdiu=%s, smc=%d, score=%s",
        len(conditions), combined.combined, tdiu.eligible.value, len(smc), score,
    )

    return ClaimEvaluation(
        combined=combined,
        rating_range=rating_range,
        compensation=compensation,
        tdiu=tdiu,
        smc=smc,
        score=score,
        max_monthly_benefit=max_monthly,
        potential_backpay=backpay,
    )


def _primitive(value):
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, dict):
        return {key: _primitive(item) for key, item in value.items()}
    if isinstance(value, (set, frozenset)):
        return sorted(_primitive(item) for item in value)
    if isinstance(value, (list, tuple)):
        return [_primitive(item) for item in value]
    return value


def serialize_evaluation(evaluation) -> dict:
    """JSON-ready dict of any engine result dataclass (enums by value, dates ISO)."""
    return _primitive(asdict(evaluation))
