"""
VA Combined Rating Calculator

The VA uses a "whole person" theory for combining disability ratings.
Each rating is applied to the remaining "healthy" efficiency, not added directly.
The combination is commutative: the unrounded result never depends on input
order. Ratings are still processed highest first so the step-by-step trace
reads like the published combined ratings table.

References:
- 38 CFR § 4.25 - Combined ratings table
- 38 CFR § 4.26 - Bilateral factor
"""

import logging
from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)

BILATERAL_FACTOR = Decimal('0.10')


class LimbSide(Enum):
    """Which side of a paired extremity a rating affects"""
    LEFT = "left"
    RIGHT = "right"
    BILATERAL = "bilateral"


@dataclass
class RatingInput:
    """One disability's numeric contribution to the combined rating"""
    id: str
    name: str
    value: int
    is_bilateral: bool = False
    side: Optional[LimbSide] = None
    limb_type: str = ""  # e.g., "knee", "hip", "shoulder"


@dataclass
class CalculationStep:
    """A single line of the audit trail"""
    description: str
    value: float
    remaining_efficiency: float


@dataclass
class RatingBreakdown:
    """Partition of inputs actually used by the calculation"""
    bilateral: List[RatingInput] = field(default_factory=list)
    non_bilateral: List[RatingInput] = field(default_factory=list)


@dataclass
class CombinedRatingResult:
    """Result of VA combined rating calculation"""
    exact_value: float
    combined: int
    bilateral_factor: int
    bilateral_combined: int
    breakdown: RatingBreakdown
    steps: List[CalculationStep]


@dataclass
class RatingRange:
    """Best-case / worst-case combined ratings across severity tiers"""
    min: int = 0
    max: int = 0
    min_exact: float = 0.0
    max_exact: float = 0.0


def validate_rating(percentage: int) -> bool:
    """
    Validate that a rating is a valid VA disability percentage.
    VA ratings must be 0-100 in increments of 10.
    """
    return 0 <= percentage <= 100 and percentage % 10 == 0


def round_half_up(value: float, places: int = 0) -> float:
    """
    Round using 0.5-and-above-rounds-up, the way VA tables are published.

    Python's round() uses banker's rounding (round(4.5) == 4), which would
    drop a point of bilateral factor on exact halves.
    """
    exponent = Decimal(1).scaleb(-places)
    return float(Decimal(str(value)).quantize(exponent, rounding=ROUND_HALF_UP))


def round_to_nearest_10(value: float) -> int:
    """
    Round combined rating to nearest 10% per VA rules.

    Per 38 CFR § 4.25:
    - 0.5 and above rounds up
    - Below 0.5 rounds down

    Examples:
    - 65% rounds to 70%
    - 64% rounds to 60%
    - 75% rounds to 80%
    """
    d = Decimal(str(value))
    rounded = int((d / 10).quantize(Decimal('1'), rounding=ROUND_HALF_UP) * 10)
    return min(100, max(0, rounded))


def _apply(efficiency: float, value: float) -> float:
    return efficiency - efficiency * (value / 100)


def combine_two_ratings(rating1: float, rating2: float) -> float:
    """
    Combine two disability ratings using VA Math formula.

    Formula: A + B(1-A) = Combined
    Where A and B are expressed as decimals.

    Example: 50% + 30%
    - 0.50 + 0.30(1 - 0.50) = 0.50 + 0.30(0.50) = 0.50 + 0.15 = 0.65 = 65%
    """
    a = rating1 / 100.0
    b = rating2 / 100.0
    return (a + b * (1 - a)) * 100


def combine_ratings(values: Sequence[int]) -> float:
    """
    Combine plain percentages highest first, without bilateral handling.

    Returns the unrounded combined value.
    """
    efficiency = 100.0
    for value in sorted(values, reverse=True):
        efficiency = _apply(efficiency, value)
    return round_half_up(100 - efficiency, 4)


def calculate_bilateral_factor(values: Sequence[int]) -> Tuple[int, int]:
    """
    Combine the bilateral ratings and compute the 10% bilateral factor.

    Per 38 CFR § 4.26 the combined bilateral value is rounded to a whole
    percent before the factor is taken, and the factor itself is rounded
    half-up.

    Returns: (bilateral_subtotal, bilateral_factor)
    """
    if not values:
        return 0, 0
    subtotal = int(round_half_up(combine_ratings(values)))
    factor = int((subtotal * BILATERAL_FACTOR).quantize(Decimal('1'), rounding=ROUND_HALF_UP))
    return subtotal, factor


def _split_bilateral(ratings: Sequence[RatingInput]) -> Tuple[List[RatingInput], List[RatingInput], List[str]]:
    """
    Partition ratings into the bilateral block and ordinary ratings.

    A limb group qualifies when it has a left/right pair, an explicit
    bilateral entry, or two or more flagged entries of the same limb type.
    """
    groups: Dict[str, List[RatingInput]] = {}
    non_bilateral: List[RatingInput] = []

    for rating in ratings:
        if rating.is_bilateral and rating.limb_type:
            groups.setdefault(rating.limb_type, []).append(rating)
        else:
            non_bilateral.append(rating)

    bilateral: List[RatingInput] = []
    qualifying_types: List[str] = []
    for limb_type, limbs in groups.items():
        sides = {limb.side for limb in limbs}
        paired = LimbSide.LEFT in sides and LimbSide.RIGHT in sides
        if paired or LimbSide.BILATERAL in sides or len(limbs) >= 2:
            bilateral.extend(limbs)
            qualifying_types.append(limb_type)
        else:
            non_bilateral.extend(limbs)

    return bilateral, non_bilateral, qualifying_types


def calculate_combined_rating(
    ratings: Sequence[RatingInput],
    include_bilateral: bool = True,
) -> CombinedRatingResult:
    """
    Calculate combined VA disability rating with full bilateral factor support.

    Process:
    1. Separate bilateral and non-bilateral ratings
    2. Combine bilateral ratings and add 10% bilateral factor
    3. Combine bilateral block with non-bilateral ratings
    4. Round to nearest 10%
    """
    if not ratings:
        return CombinedRatingResult(
            exact_value=0.0,
            combined=0,
            bilateral_factor=0,
            bilateral_combined=0,
            breakdown=RatingBreakdown(),
            steps=[],
        )

    steps: List[CalculationStep] = []

    if include_bilateral:
        bilateral, non_bilateral, limb_types = _split_bilateral(ratings)
        for limb_type in limb_types:
            steps.append(CalculationStep(f"Bilateral pair identified: {limb_type}", 0, 100))
    else:
        bilateral, non_bilateral = [], list(ratings)

    bilateral = sorted(bilateral, key=lambda r: r.value, reverse=True)
    non_bilateral = sorted(non_bilateral, key=lambda r: r.value, reverse=True)

    bilateral_combined = 0
    bilateral_factor = 0

    if bilateral:
        steps.append(CalculationStep("Bilateral conditions (38 CFR § 4.26)", 0, 100))
        efficiency = 100.0
        for i, rating in enumerate(bilateral, start=1):
            efficiency = _apply(efficiency, rating.value)
            steps.append(CalculationStep(
                f"Bilateral #{i}: {rating.value}% ({rating.name})",
                rating.value,
                round_half_up(efficiency, 4),
            ))

        raw_bilateral = round_half_up(100 - efficiency, 4)
        subtotal, bilateral_factor = calculate_bilateral_factor([r.value for r in bilateral])
        steps.append(CalculationStep(
            f"Bilateral subtotal: {raw_bilateral:.2f}% → {subtotal}%",
            subtotal,
            100 - subtotal,
        ))

        # A block already at 100% cannot exceed total disability
        bilateral_combined = min(100, subtotal + bilateral_factor)
        steps.append(CalculationStep(
            f"Bilateral factor (+10%): +{bilateral_factor}%",
            bilateral_factor,
            100 - bilateral_combined,
        ))
        steps.append(CalculationStep(
            f"Bilateral total with factor: {bilateral_combined}%",
            bilateral_combined,
            100 - bilateral_combined,
        ))

    steps.append(CalculationStep("Final combination (38 CFR § 4.25)", 0, 100))
    efficiency = 100.0

    # The bilateral block goes first regardless of magnitude; the result is
    # the same because the combination is commutative.
    if bilateral_combined > 0:
        efficiency = _apply(efficiency, bilateral_combined)
        steps.append(CalculationStep(
            f"Applied bilateral block: {bilateral_combined}%",
            bilateral_combined,
            round_half_up(efficiency, 4),
        ))

    for i, rating in enumerate(non_bilateral, start=1):
        efficiency = _apply(efficiency, rating.value)
        steps.append(CalculationStep(
            f"Rating #{i}: {rating.value}% ({rating.name})",
            rating.value,
            round_half_up(efficiency, 4),
        ))

    exact_value = round_half_up(100 - efficiency, 4)
    steps.append(CalculationStep(
        f"Exact combined value: {exact_value:.4f}%",
        exact_value,
        round_half_up(efficiency, 4),
    ))

    combined = round_to_nearest_10(exact_value)
    steps.append(CalculationStep(
        f"Rounded to nearest 10%: {combined}%",
        combined,
        100 - combined,
    ))

    logger.debug(
        "Combined %d ratings (%d bilateral): exact=%s combined=%s",
        len(ratings), len(bilateral), exact_value, combined,
    )

    return CombinedRatingResult(
        exact_value=exact_value,
        combined=combined,
        bilateral_factor=bilateral_factor,
        bilateral_combined=bilateral_combined,
        breakdown=RatingBreakdown(bilateral=bilateral, non_bilateral=non_bilateral),
        steps=steps,
    )


def calculate_rating_range(condition_ratings: Sequence[Tuple[str, Sequence[int]]]) -> RatingRange:
    """
    Best and worst case combined ratings for a set of conditions.

    Each entry is (name, possible rating tiers). The low end uses each
    condition's smallest non-zero tier, the high end its largest tier.
    Bilateral factor is not applied to estimates.
    """
    if not condition_ratings:
        return RatingRange()

    min_inputs = []
    max_inputs = []
    for i, (name, tiers) in enumerate(condition_ratings):
        nonzero = [t for t in tiers if t > 0]
        min_inputs.append(RatingInput(id=f"min-{i}", name=name, value=min(nonzero) if nonzero else 0))
        max_inputs.append(RatingInput(id=f"max-{i}", name=name, value=max(tiers) if tiers else 0))

    low = calculate_combined_rating(min_inputs, include_bilateral=False)
    high = calculate_combined_rating(max_inputs, include_bilateral=False)

    return RatingRange(
        min=low.combined,
        max=high.combined,
        min_exact=low.exact_value,
        max_exact=high.exact_value,
    )
