"""
Normalization of caller input before it reaches the rating engine.

The engine trusts its inputs. This is the boundary that guarantees rating
values are clamped to 0-100 and sit on a schedular tier, resolves catalog
conditions, and turns selections into RatingInputs.
"""

import logging
from typing import List, Optional, Sequence

from .catalog import (
    SelectedCondition,
    derive_trigger_tags,
    get_condition,
    is_bilateral_eligible,
)
from .va_math import LimbSide, RatingInput, round_to_nearest_10, validate_rating

logger = logging.getLogger(__name__)

# Intent level (none, mild, moderate, severe, total) to approximate rating
INTENT_TO_RATING = {
    0: 0,
    1: 10,
    2: 30,
    3: 50,
    4: 100,
}


def _nearest_tier(value: int, tiers: Sequence[int]) -> int:
    # Ties go to the higher tier
    return min(tiers, key=lambda tier: (abs(tier - value), -tier))


def normalize_rating_value(value: int, allowed: Optional[Sequence[int]] = None) -> int:
    """
    Clamp a rating to 0-100 and snap it onto an allowed tier.

    Without explicit tiers, values are rounded to the nearest 10%.
    """
    original = value
    value = min(100, max(0, int(value)))

    if allowed:
        value = _nearest_tier(value, allowed)
    elif not validate_rating(value):
        value = round_to_nearest_10(value)

    if value != original:
        logger.warning("Normalized rating value %s to %s", original, value)
    return value


def rating_for_severity(possible: Sequence[int], severity: int) -> int:
    """Map an intent level (0-4) onto the closest of a condition's tiers."""
    target = INTENT_TO_RATING.get(severity, 0)
    if not possible:
        return target
    return _nearest_tier(target, possible)


def build_selected_condition(
    condition_id: str = "",
    name: str = "",
    selected_rating: Optional[int] = None,
    severity: Optional[int] = None,
    side: Optional[LimbSide] = None,
    is_bilateral: Optional[bool] = None,
    limb_type: str = "",
    ratings: Sequence[int] = (),
) -> SelectedCondition:
    """
    Resolve a claimant selection into a SelectedCondition.

    Catalog conditions bring their own tiers, limb type and trigger tags.
    Free-text conditions get tags derived from their name, once, here.
    An explicit rating wins over a severity level.
    """
    catalog = get_condition(condition_id) if condition_id else None

    if catalog is not None:
        condition = SelectedCondition(
            id=catalog.id,
            name=name or catalog.name,
            ratings=catalog.ratings,
            side=side,
            is_bilateral=is_bilateral,
            bilateral_eligible=catalog.bilateral_eligible,
            limb_type=limb_type or catalog.limb_type,
            tags=catalog.tags | derive_trigger_tags(name),
        )
    else:
        condition = SelectedCondition(
            id=condition_id or name.strip().lower().replace(" ", "-"),
            name=name,
            ratings=tuple(sorted(set(ratings))),
            side=side,
            is_bilateral=is_bilateral,
            limb_type=limb_type,
            tags=derive_trigger_tags(name),
        )

    if selected_rating is not None:
        condition.selected_rating = normalize_rating_value(selected_rating, condition.ratings or None)
    elif severity is not None:
        condition.selected_rating = rating_for_severity(condition.ratings, severity)

    return condition


def conditions_to_rating_inputs(conditions: Sequence[SelectedCondition]) -> List[RatingInput]:
    """
    Convert selected conditions into rating inputs for the calculator.

    Conditions without a positive selected rating are left out. An explicit
    bilateral flag wins; otherwise a bilateral side selection or catalog
    eligibility decides.
    """
    inputs = []
    for condition in conditions:
        if not condition.selected_rating or condition.selected_rating <= 0:
            continue

        if condition.is_bilateral is not None:
            bilateral = condition.is_bilateral
        else:
            bilateral = condition.side == LimbSide.BILATERAL or is_bilateral_eligible(condition)

        inputs.append(RatingInput(
            id=condition.id,
            name=condition.name,
            value=condition.selected_rating,
            is_bilateral=bilateral,
            side=condition.side,
            limb_type=condition.limb_type,
        ))
    return inputs
