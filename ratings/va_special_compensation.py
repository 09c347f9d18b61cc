"""
VA Special Monthly Compensation (SMC) and TDIU Eligibility Calculator

Implements eligibility checking for:
- TDIU (Total Disability Individual Unemployability), first matching pathway wins
- SMC(k), SMC(s), SMC(t) and an SMC(l) review flag, each evaluated independently

References:
- 38 CFR 3.350 - Special Monthly Compensation
- 38 CFR 4.16 - Total disability ratings for compensation based on unemployability
- 38 U.S.C. § 1114 - Rates of wartime disability compensation
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Sequence

from .catalog import SelectedCondition, TriggerTag
from .rate_tables import RateTable
from .va_math import CombinedRatingResult, RatingInput, calculate_combined_rating

logger = logging.getLogger(__name__)


class TDIUEligibility(Enum):
    """Outcome of the TDIU decision procedure"""
    ELIGIBLE = "eligible"
    INELIGIBLE = "ineligible"
    EXTRASCHEDULAR = "extraschedular"


class TDIUPathway(Enum):
    """Which TDIU rule matched"""
    SINGLE_CONDITION = "Single Condition"
    COMBINED_CONDITIONS = "Combined Conditions"
    EXTRASCHEDULAR = "Extrascheduler"


class SMCType(Enum):
    """SMC award codes"""
    K = "SMC-K"  # Loss of use, anatomical loss
    L = "SMC-L"  # Aid and attendance or loss of paired extremities
    M = "SMC-M"
    N = "SMC-N"
    O = "SMC-O"
    P = "SMC-P"  # Intermediate rate
    R1 = "SMC-R1"
    R2 = "SMC-R2"
    S = "SMC-S"  # Housebound (100% + 60%+)
    T = "SMC-T"  # Aid and attendance for TBI residuals


@dataclass
class TDIUResult:
    """Result of TDIU eligibility check"""
    eligible: TDIUEligibility
    pathway: Optional[TDIUPathway]
    explanation: str
    requirements: List[str] = field(default_factory=list)
    forms: List[str] = field(default_factory=list)
    highest_rating: int = 0
    highest_condition: str = ""
    combined_rating: int = 0


@dataclass
class SMCResult:
    """One fired SMC trigger"""
    type: SMCType
    amount: float
    reason: str
    cfr_reference: str
    conditions: List[str] = field(default_factory=list)
    eligible: bool = True
    # Heuristic flags that need manual review rather than a determination
    requires_review: bool = False


# 38 CFR 4.16(a) schedular thresholds
TDIU_SINGLE_CONDITION_MIN = 60
TDIU_COMBINED_MIN_SINGLE = 40
TDIU_COMBINED_MIN_TOTAL = 70
TDIU_EXTRASCHEDULAR_MIN = 40

TDIU_REQUIREMENTS = {
    TDIUPathway.SINGLE_CONDITION: [
        "VA Form 21-8940 (TDIU Application)",
        "Complete employment history for past 5 years",
        "Evidence disability prevents substantial gainful employment",
        "Medical opinion linking unemployability to service-connected disability",
        "Documentation of education and training",
    ],
    TDIUPathway.COMBINED_CONDITIONS: [
        "VA Form 21-8940 (TDIU Application)",
        "Complete employment history for past 5 years",
        "Evidence showing combined effect of disabilities on employment",
        "Medical opinion addressing how conditions together prevent work",
        "Documentation of education and work experience",
    ],
    TDIUPathway.EXTRASCHEDULAR: [
        "VA Form 21-8940 (TDIU Application)",
        "Compelling evidence of unemployability despite ratings",
        "Detailed medical opinions explaining unique circumstances",
        "Documentation of failed employment attempts",
        "Evidence showing disabilities are uniquely debilitating for your occupation",
        "Request for extraschedular referral in cover letter",
    ],
}

TDIU_FORMS = {
    TDIUPathway.SINGLE_CONDITION: ["21-8940", "21-4192"],
    TDIUPathway.COMBINED_CONDITIONS: ["21-8940", "21-4192"],
    TDIUPathway.EXTRASCHEDULAR: ["21-8940", "21-4138"],
}

SMC_INFO: Dict[SMCType, Dict[str, str]] = {
    SMCType.K: {
        "description": "Loss of use of creative organ, one hand, one foot, or one eye",
        "cfr_reference": "38 U.S.C. § 1114(k)",
    },
    SMCType.L: {
        "description": "Anatomical loss of both feet, both hands, or one of each",
        "cfr_reference": "38 U.S.C. § 1114(l)",
    },
    SMCType.M: {
        "description": "Loss of use of both hands or both feet plus blindness",
        "cfr_reference": "38 U.S.C. § 1114(m)",
    },
    SMCType.N: {
        "description": "Anatomical loss of both arms at elbow or above",
        "cfr_reference": "38 U.S.C. § 1114(n)",
    },
    SMCType.O: {
        "description": "Most severe disability combinations",
        "cfr_reference": "38 U.S.C. § 1114(o)",
    },
    SMCType.P: {
        "description": "Intermediate rate between SMC levels",
        "cfr_reference": "38 U.S.C. § 1114(p)",
    },
    SMCType.R1: {
        "description": "Higher level aid and attendance",
        "cfr_reference": "38 U.S.C. § 1114(r)(1)",
    },
    SMCType.R2: {
        "description": "Aid and attendance plus regular nursing care",
        "cfr_reference": "38 U.S.C. § 1114(r)(2)",
    },
    SMCType.S: {
        "description": "Housebound - total rating plus 60%+ independent disability",
        "cfr_reference": "38 U.S.C. § 1114(s)",
    },
    SMCType.T: {
        "description": "Aid and attendance for residuals of TBI",
        "cfr_reference": "38 U.S.C. § 1114(t)",
    },
}


def check_tdiu_eligibility(
    ratings: Sequence[RatingInput],
    combined: Optional[CombinedRatingResult] = None,
) -> TDIUResult:
    """
    Check eligibility for Total Disability Individual Unemployability (TDIU).

    TDIU allows a veteran to receive 100% compensation even if their combined
    rating is less than 100%, if they cannot maintain substantially gainful
    employment due to service-connected disabilities.

    Pathways, in priority order (first match wins):
    1. One disability rated 60% or more (38 CFR 4.16(a))
    2. One disability rated 40%+ and a combined rating of 70%+ (38 CFR 4.16(a))
    3. Combined rating of 40%+: extraschedular referral (38 CFR 4.16(b))

    Args:
        ratings: Individual rating inputs
        combined: Bilateral-inclusive combined result, computed when omitted
    """
    if not ratings:
        return TDIUResult(
            eligible=TDIUEligibility.INELIGIBLE,
            pathway=None,
            explanation=(
                "No ratings provided for TDIU analysis. Add your service-connected "
                "conditions to check eligibility."
            ),
        )

    if combined is None:
        combined = calculate_combined_rating(ratings)

    highest = sorted(ratings, key=lambda r: r.value, reverse=True)[0]
    highest_rating = highest.value
    highest_condition = highest.name or "Unknown"
    combined_rating = combined.combined

    result = TDIUResult(
        eligible=TDIUEligibility.INELIGIBLE,
        pathway=None,
        explanation="",
        highest_rating=highest_rating,
        highest_condition=highest_condition,
        combined_rating=combined_rating,
    )

    if highest_rating >= TDIU_SINGLE_CONDITION_MIN:
        result.eligible = TDIUEligibility.ELIGIBLE
        result.pathway = TDIUPathway.SINGLE_CONDITION
        result.explanation = (
            f"Your {highest_condition} ({highest_rating}%) meets the single condition "
            f"threshold of 60% or higher. You may qualify for TDIU if this disability "
            f"prevents you from maintaining substantially gainful employment."
        )
    elif highest_rating >= TDIU_COMBINED_MIN_SINGLE and combined_rating >= TDIU_COMBINED_MIN_TOTAL:
        result.eligible = TDIUEligibility.ELIGIBLE
        result.pathway = TDIUPathway.COMBINED_CONDITIONS
        result.explanation = (
            f"Your highest rating ({highest_condition} at {highest_rating}%) combined with "
            f"your overall rating of {combined_rating}% meets the 40%/70% combined threshold. "
            f"You may qualify for TDIU if your combined disabilities prevent substantially "
            f"gainful employment."
        )
    elif combined_rating >= TDIU_EXTRASCHEDULAR_MIN:
        result.eligible = TDIUEligibility.EXTRASCHEDULAR
        result.pathway = TDIUPathway.EXTRASCHEDULAR
        result.explanation = (
            f"Your combined rating ({combined_rating}%) does not meet the standard TDIU "
            f"schedular criteria. However, you may request extraschedular consideration "
            f"if your unique circumstances prevent employment. This requires referral to "
            f"the Director of Compensation Service."
        )
    else:
        result.explanation = (
            f"Your current ratings do not meet TDIU schedular criteria. To qualify, you need "
            f"either one condition rated 60% or higher (your highest is {highest_condition} "
            f"at {highest_rating}%), or one condition at 40%+ with a combined rating of 70%+ "
            f"(your combined is {combined_rating}%). Consider filing for increased ratings "
            f"on your most impactful condition."
        )

    if result.pathway is not None:
        result.requirements = list(TDIU_REQUIREMENTS[result.pathway])
        result.forms = list(TDIU_FORMS[result.pathway])

    return result


def _smc_result(smc_type: SMCType, rates: RateTable, reason: str, conditions: List[str], **kwargs) -> SMCResult:
    return SMCResult(
        type=smc_type,
        amount=rates.smc.get(smc_type.value, 0.0),
        reason=reason,
        cfr_reference=SMC_INFO[smc_type]["cfr_reference"],
        conditions=conditions,
        **kwargs,
    )


def check_smc_k(conditions: Sequence[SelectedCondition], rates: RateTable) -> Optional[SMCResult]:
    """
    SMC(k): loss or loss of use of a creative organ.

    One record covers every qualifying condition.
    """
    qualifying = [c.name for c in conditions if TriggerTag.CREATIVE_ORGAN_LOSS in c.tags]
    if not qualifying:
        return None
    return _smc_result(SMCType.K, rates, SMC_INFO[SMCType.K]["description"], qualifying)


def check_smc_s(
    ratings: Sequence[RatingInput],
    combined: CombinedRatingResult,
    rates: RateTable,
) -> Optional[SMCResult]:
    """
    SMC(s): a single disability rated 100% plus additional disabilities
    independently combining to 60% or more.
    """
    if combined.combined != 100 or len(ratings) < 2:
        return None

    ordered = sorted(ratings, key=lambda r: r.value, reverse=True)
    total, remaining = ordered[0], ordered[1:]
    if total.value != 100:
        return None

    remaining_combined = calculate_combined_rating(remaining).combined
    if remaining_combined < 60:
        return None

    return _smc_result(
        SMCType.S,
        rates,
        f"100% schedular rating plus independent {remaining_combined}% disability",
        [total.name] + [r.name for r in remaining],
    )


def check_smc_t(
    conditions: Sequence[SelectedCondition],
    ratings: Sequence[RatingInput],
    rates: RateTable,
) -> Optional[SMCResult]:
    """
    SMC(t): TBI residuals rated 70% or more.

    The TBI condition's own rating is looked up by condition name.
    """
    tbi = next((c for c in conditions if TriggerTag.TRAUMATIC_BRAIN_INJURY in c.tags), None)
    if tbi is None:
        return None

    tbi_rating = next((r.value for r in ratings if r.name == tbi.name), 0)
    if tbi_rating < 70:
        return None

    return _smc_result(
        SMCType.T,
        rates,
        "May qualify for aid and attendance due to TBI residuals",
        [tbi.name],
    )


def check_smc_l_review(conditions: Sequence[SelectedCondition], rates: RateTable) -> Optional[SMCResult]:
    """
    SMC(l) review flag: two or more amputation / loss of use conditions.

    This is a heuristic for manual review, not an eligibility determination.
    """
    limb_losses = [c.name for c in conditions if TriggerTag.LIMB_LOSS in c.tags]
    if len(limb_losses) < 2:
        return None

    return _smc_result(
        SMCType.L,
        rates,
        "Multiple loss of use conditions detected - review for SMC-L eligibility",
        limb_losses,
        requires_review=True,
    )


def check_smc_eligibility(
    conditions: Sequence[SelectedCondition],
    ratings: Sequence[RatingInput],
    rates: RateTable,
    combined: Optional[CombinedRatingResult] = None,
) -> List[SMCResult]:
    """
    Check every SMC trigger independently.

    Any subset may fire; results are returned in the fixed order K, S, T, L.

    Args:
        conditions: Selected conditions with their trigger tags
        ratings: Individual rating inputs
        rates: Rate table supplying award amounts
        combined: Bilateral-inclusive combined result, computed when omitted
    """
    if combined is None:
        combined = calculate_combined_rating(ratings)

    fired = [
        check_smc_k(conditions, rates),
        check_smc_s(ratings, combined, rates),
        check_smc_t(conditions, ratings, rates),
        check_smc_l_review(conditions, rates),
    ]
    results = [r for r in fired if r is not None]

    logger.debug("SMC triggers fired: %s", [r.type.value for r in results])
    return results


def get_smc_info(smc_type: SMCType, rates: RateTable) -> Dict[str, object]:
    """
    Description, citation and current amount for an SMC code.
    """
    info = SMC_INFO[smc_type]
    return {
        "type": smc_type.value,
        "description": info["description"],
        "cfr_reference": info["cfr_reference"],
        "amount": rates.smc.get(smc_type.value, 0.0),
    }


def get_all_smc_types(rates: RateTable) -> List[Dict[str, object]]:
    """
    Get information about all SMC levels for educational display.
    """
    return [get_smc_info(smc_type, rates) for smc_type in SMCType]
