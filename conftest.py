"""
Pytest configuration and shared fixtures for Claim Navigator tests.

This file provides:
- Django setup for the ratings and api apps
- Shared rate table and condition fixtures
- Settings overrides for tests
"""

import os
import django

# Configure Django settings before any Django imports
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'claim_navigator.settings')
django.setup()

import pytest

from ratings.compensation import Dependents
from ratings.ingestion import build_selected_condition
from ratings.rate_tables import RATE_TABLE_2026
from ratings.va_math import LimbSide


# =============================================================================
# RATING ENGINE FIXTURES
# =============================================================================

@pytest.fixture
def rate_table():
    """The 2026 compensation rate table."""
    return RATE_TABLE_2026


@pytest.fixture
def veteran_with_spouse():
    return Dependents(spouse=True)


@pytest.fixture
def bilateral_knee_conditions():
    """Left and right knee at 20% each."""
    return [
        build_selected_condition(condition_id='knee', selected_rating=20, side=LimbSide.LEFT),
        build_selected_condition(condition_id='knee', selected_rating=20, side=LimbSide.RIGHT),
    ]


# =============================================================================
# DJANGO SETTINGS OVERRIDES
# =============================================================================

@pytest.fixture(autouse=True)
def use_locmem_cache(settings):
    """Use local memory cache for tests (API throttling state)."""
    settings.CACHES = {
        'default': {
            'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
        }
    }


@pytest.fixture(autouse=True)
def pin_rate_year(settings):
    """Tests are written against the 2026 tables."""
    settings.VA_RATE_YEAR = 2026
