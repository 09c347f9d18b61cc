"""
Monthly compensation estimate for a combined rating.

Dependent add-ons only apply at 30% and above. The COLA fields on the result
are display metadata copied from the rate table; they are never applied to
the computed amounts.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from .rate_tables import RateTable


@dataclass
class Dependents:
    """Dependents claimed by the veteran"""
    spouse: bool = False
    children: int = 0
    dependent_parents: int = 0


@dataclass
class CompensationBreakdown:
    """Monthly amount by dependent category"""
    base: float = 0.0
    spouse: float = 0.0
    children: float = 0.0
    parents: float = 0.0


@dataclass
class CompensationResult:
    """Estimated VA compensation"""
    monthly: float
    annual: float
    cola_rate: float
    cola_year: int
    effective_date: date
    breakdown: CompensationBreakdown = field(default_factory=CompensationBreakdown)


def calculate_compensation(
    combined_rating: int,
    dependents: Optional[Dependents],
    rates: RateTable,
) -> CompensationResult:
    """
    Estimate monthly VA disability compensation.

    Args:
        combined_rating: The combined VA disability rating (0-100, multiples of 10)
        dependents: Spouse, children and dependent parents; None means no dependents
        rates: Rate table to price the rating with

    Note: This is an estimate. Actual rates depend on many factors
    including effective date, special monthly compensation, etc.
    """
    dependents = dependents or Dependents()

    base = rates.base.get(combined_rating, 0.0)
    spouse = 0.0
    children = 0.0
    parents = 0.0

    if combined_rating >= 30:
        if dependents.spouse:
            spouse = rates.spouse.get(combined_rating, 0.0)

        if dependents.children > 0:
            children = rates.first_child.get(combined_rating, 0.0)
            children += (dependents.children - 1) * rates.additional_child.get(combined_rating, 0.0)

        # Flat per-parent heuristic, see rate_tables
        if dependents.dependent_parents > 0:
            parents = dependents.dependent_parents * rates.dependent_parent

    monthly = base + spouse + children + parents

    return CompensationResult(
        monthly=round(monthly, 2),
        annual=round(monthly * 12, 2),
        cola_rate=rates.cola_rate,
        cola_year=rates.year,
        effective_date=rates.effective_date,
        breakdown=CompensationBreakdown(
            base=round(base, 2),
            spouse=round(spouse, 2),
            children=round(children, 2),
            parents=round(parents, 2),
        ),
    )


def format_currency(amount: float) -> str:
    """Format amount as USD currency"""
    return f"${amount:,.2f}"
