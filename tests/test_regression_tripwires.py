"""
Regression Tripwires: fast, deterministic tests for critical invariants.

These tests run under pytest with no database and no external services.
They ensure engine guarantees (rounding rules, bilateral factor, purity) and
route integrity are not reverted.

Run with: pytest tests/test_regression_tripwires.py -v
"""

import copy

import pytest
from django.urls import reverse, resolve, NoReverseMatch
from django.urls.exceptions import Resolver404

from ratings.engine import evaluate_claim
from ratings.ingestion import build_selected_condition
from ratings.va_math import LimbSide, RatingInput, calculate_combined_rating
from ratings.va_special_compensation import TDIUEligibility, check_tdiu_eligibility


# =============================================================================
# Goal A: Engine invariants
# =============================================================================

class TestCombinedRatingInvariants:
    """
    Validates the combined rating guarantees every consumer relies on.

    Document generation and the score display read `combined` directly, so
    these must hold for every input.
    """

    @pytest.mark.parametrize("values", [
        [],
        [0],
        [10],
        [50, 30],
        [90, 90],
        [100, 100],
        [70, 60, 50, 40, 30, 20, 10],
    ])
    def test_combined_is_multiple_of_10_in_range(self, values):
        """Combined must be a multiple of 10 within [0, 100]."""
        result = calculate_combined_rating([
            RatingInput(id=str(i), name="", value=v) for i, v in enumerate(values)
        ])

        assert result.combined % 10 == 0, (
            f"REGRESSION: combined rating {result.combined} is not a multiple of 10."
        )
        assert 0 <= result.combined <= 100

    def test_bilateral_factor_rounds_half_up(self):
        """A 65% bilateral subtotal must get a 7% factor, not Python's round() 6%."""
        result = calculate_combined_rating([
            RatingInput("l", "Left knee", 50, is_bilateral=True, side=LimbSide.LEFT, limb_type="knee"),
            RatingInput("r", "Right knee", 30, is_bilateral=True, side=LimbSide.RIGHT, limb_type="knee"),
        ])

        assert result.bilateral_factor == 7, (
            "REGRESSION: bilateral factor is not rounded half-up. "
            "38 CFR § 4.26 rounding must not use banker's rounding."
        )

    def test_tdiu_edge_59_60(self):
        """59% must miss the single condition pathway, 60% must meet it."""
        assert check_tdiu_eligibility([RatingInput("a", "A", 59)]).eligible != TDIUEligibility.ELIGIBLE
        assert check_tdiu_eligibility([RatingInput("a", "A", 60)]).eligible == TDIUEligibility.ELIGIBLE

    def test_evaluation_does_not_mutate_inputs(self, bilateral_knee_conditions, veteran_with_spouse, rate_table):
        """The engine must never modify the caller's conditions."""
        conditions = bilateral_knee_conditions + [
            build_selected_condition(condition_id='tbi', selected_rating=70),
        ]
        snapshot = copy.deepcopy(conditions)

        evaluate_claim(conditions, veteran_with_spouse, rate_table, evidence_score=40)

        assert conditions == snapshot, "REGRESSION: evaluate_claim mutated its input conditions."

    def test_evaluation_is_repeatable(self, rate_table):
        """Identical inputs must give identical evaluations."""
        conditions = [build_selected_condition(condition_id='ptsd', selected_rating=70)]
        first = evaluate_claim(conditions, None, rate_table)
        second = evaluate_claim(conditions, None, rate_table)

        assert first == second


# =============================================================================
# Goal B: URL Resolution Integrity (no DB required)
# =============================================================================

class TestURLResolutionIntegrity:
    """
    Validates that named URLs resolve and paths map to views.

    These tests use Django's URL resolver only - no HTTP requests, no DB access.
    They prevent silent route loss from URL configuration changes.
    """

    @pytest.mark.parametrize("url_name", [
        "health_check",
        "api:condition_list",
        "api:combined_rating",
        "api:rating_range",
        "api:compensation",
        "api:evaluate_claim",
    ])
    def test_named_url_resolves(self, url_name):
        """Named URLs must resolve without NoReverseMatch error."""
        try:
            url = reverse(url_name)
            assert url is not None and url != ""
        except NoReverseMatch as e:
            pytest.fail(
                f"Named URL '{url_name}' failed to resolve: {e}. "
                f"This URL pattern may have been removed or renamed."
            )

    @pytest.mark.parametrize("path", [
        "/health/",
        "/api/v1/conditions/",
        "/api/v1/ratings/combined/",
        "/api/v1/ratings/range/",
        "/api/v1/ratings/compensation/",
        "/api/v1/claims/evaluate/",
    ])
    def test_path_resolves_to_view(self, path):
        """URL paths must resolve to a view function (not raise Resolver404)."""
        try:
            match = resolve(path)
            assert match.func is not None, f"Path '{path}' resolved but has no view function."
        except Resolver404:
            pytest.fail(
                f"Path '{path}' raised Resolver404. "
                f"This route does not exist in URL configuration."
            )


# =============================================================================
# Goal C: Route HTTP Behavior
# =============================================================================

class TestRouteHTTPBehavior:
    """
    Validates HTTP response behavior for critical routes.

    Rules:
    - /health/ must return 200
    - Calculator endpoints are anonymous: never 401/403
    """

    @pytest.fixture
    def client(self):
        """Django test client for anonymous requests."""
        from django.test import Client
        return Client()

    def test_health_returns_200(self, client):
        response = client.get("/health/")

        assert response.status_code == 200, (
            f"Route '/health/' returned {response.status_code}, expected 200."
        )

    @pytest.mark.parametrize("path", [
        "/api/v1/ratings/combined/",
        "/api/v1/ratings/range/",
        "/api/v1/ratings/compensation/",
        "/api/v1/claims/evaluate/",
    ])
    def test_calculator_is_anonymous(self, client, path):
        """Invalid anonymous requests get a 400, never an auth error."""
        response = client.post(path, data={}, content_type='application/json')

        assert response.status_code == 400, (
            f"Route '{path}' returned {response.status_code}, expected 400 for an empty body. "
            f"Calculator endpoints must not require authentication."
        )
