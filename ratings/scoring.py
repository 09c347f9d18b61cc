"""
Composite claim (DEM) score for display.

A weighted 0-100 summary of rating potential, eligibility and evidence
strength. Advisory only; nothing downstream depends on it.
"""

from typing import Sequence

from .va_math import round_half_up
from .va_special_compensation import SMCResult, TDIUEligibility

# Weights in points per 100
COMBINED_RATING_WEIGHT = 40
EVIDENCE_WEIGHT = 15

TDIU_BONUS = {
    TDIUEligibility.ELIGIBLE: 20,
    TDIUEligibility.EXTRASCHEDULAR: 10,
    TDIUEligibility.INELIGIBLE: 0,
}

SMC_POINTS_EACH = 5
SMC_POINTS_MAX = 15
CONDITION_POINTS_EACH = 2
CONDITION_POINTS_MAX = 10


def calculate_claim_score(
    combined_rating: int,
    tdiu_eligibility: TDIUEligibility,
    smc_results: Sequence[SMCResult],
    evidence_score: float,
    condition_count: int,
) -> int:
    """
    score = 0.40 × combined + TDIU bonus + min(15, 5 × eligible SMC)
            + 0.15 × evidence + min(10, 2 × conditions), clamped to [0, 100]
    """
    eligible_smc = sum(1 for r in smc_results if r.eligible)

    score = (
        combined_rating * COMBINED_RATING_WEIGHT / 100
        + TDIU_BONUS[tdiu_eligibility]
        + min(SMC_POINTS_MAX, SMC_POINTS_EACH * eligible_smc)
        + evidence_score * EVIDENCE_WEIGHT / 100
        + min(CONDITION_POINTS_MAX, CONDITION_POINTS_EACH * condition_count)
    )
    return int(min(100, max(0, round_half_up(score))))
