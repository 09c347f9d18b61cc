"""
VA compensation and SMC rate tables.

Rates are configuration data, not engine logic. Every engine function that
needs a dollar amount receives a RateTable explicitly, so choosing a rate year
(or testing with a custom table) is the caller's decision.

The dependent-parent amount is a flat simplification pending review; it is
not tier sensitive the way the published VA tables are.
"""

import logging
from dataclasses import dataclass
from datetime import date
from types import MappingProxyType
from typing import Mapping, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RateTable:
    """One year's compensation rates (monthly amounts in USD)"""
    year: int
    cola_rate: float
    effective_date: date
    base: Mapping[int, float]
    spouse: Mapping[int, float]
    first_child: Mapping[int, float]
    additional_child: Mapping[int, float]
    dependent_parent: float
    smc: Mapping[str, float]


def _frozen(mapping: dict) -> Mapping:
    return MappingProxyType(dict(mapping))


# 2026 rates (2.8% COLA)
RATE_TABLE_2026 = RateTable(
    year=2026,
    cola_rate=0.028,
    effective_date=date(2026, 1, 1),
    base=_frozen({
        0: 0.00,
        10: 175.51,
        20: 346.85,
        30: 537.02,
        40: 773.85,
        50: 1102.04,
        60: 1395.08,
        70: 1758.56,
        80: 2044.33,
        90: 2297.65,
        100: 3831.30,
    }),
    spouse=_frozen({
        30: 63.16, 40: 86.74, 50: 110.05, 60: 133.39,
        70: 157.68, 80: 181.70, 90: 205.44, 100: 212.72,
    }),
    first_child=_frozen({
        30: 28.00, 40: 37.00, 50: 47.00, 60: 56.00,
        70: 66.00, 80: 75.00, 90: 85.00, 100: 94.36,
    }),
    additional_child=_frozen({
        30: 20.00, 40: 20.00, 50: 28.00, 60: 28.00,
        70: 28.00, 80: 28.00, 90: 28.00, 100: 28.00,
    }),
    dependent_parent=50.00,
    # Keyed by SMC award code
    smc=_frozen({
        'SMC-K': 139.09,
        'SMC-L': 4871.62,
        'SMC-M': 5377.04,
        'SMC-N': 6102.73,
        'SMC-O': 6769.50,
        'SMC-P': 0.00,
        'SMC-R1': 9542.99,
        'SMC-R2': 10942.90,
        'SMC-S': 4474.34,
        'SMC-T': 4474.34,
    }),
)

# Master lookup for all years
RATE_TABLES = {
    2026: RATE_TABLE_2026,
}

LATEST_RATE_YEAR = max(RATE_TABLES)


def get_rate_table(year: Optional[int] = None) -> RateTable:
    """
    Return the rate table for a year.

    With no year, the configured VA_RATE_YEAR setting is used. Unknown years
    fall back to the most recent table.
    """
    if year is None:
        from django.conf import settings
        year = getattr(settings, 'VA_RATE_YEAR', LATEST_RATE_YEAR)

    table = RATE_TABLES.get(year)
    if table is None:
        logger.warning("No rate table for %s; using %s rates", year, LATEST_RATE_YEAR)
        table = RATE_TABLES[LATEST_RATE_YEAR]
    return table
