"""
Tests for the Rating Engine API

Tests the JSON endpoints in front of the ratings engine:
- Condition catalog search
- Combined rating
- Rating range
- Compensation
- Claim evaluation
"""

import pytest
from unittest.mock import patch
from django.urls import reverse
from rest_framework.test import APIClient
from rest_framework import status

from ratings.catalog import CONDITION_CATALOG


@pytest.fixture
def api_client():
    """Return an API client for testing."""
    return APIClient()


@pytest.fixture
def bilateral_knees():
    return [
        {'name': 'Left knee', 'value': 30, 'is_bilateral': True, 'side': 'left', 'limb_type': 'knee'},
        {'name': 'Right knee', 'value': 20, 'is_bilateral': True, 'side': 'right', 'limb_type': 'knee'},
    ]


class TestConditionList:
    """Tests for /api/v1/conditions/ endpoint."""

    def test_list_all(self, api_client):
        response = api_client.get(reverse('api:condition_list'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['count'] == len(CONDITION_CATALOG)

    def test_search(self, api_client):
        response = api_client.get(reverse('api:condition_list'), {'q': 'knee'})

        assert response.status_code == status.HTTP_200_OK
        assert response.data['count'] == 1
        knee = response.data['results'][0]
        assert knee['id'] == 'knee'
        assert knee['limb_type'] == 'knee'
        assert knee['ratings'] == [0, 10, 20, 30, 40, 50, 60]

    def test_tags_rendered_by_value(self, api_client):
        response = api_client.get(reverse('api:condition_list'), {'q': 'erectile'})

        assert response.data['results'][0]['tags'] == ['creative_organ_loss']

    def test_post_not_allowed(self, api_client):
        response = api_client.post(reverse('api:condition_list'), {}, format='json')

        assert response.status_code == status.HTTP_405_METHOD_NOT_ALLOWED


class TestCombinedRating:
    """Tests for /api/v1/ratings/combined/ endpoint."""

    def test_bilateral_knees(self, api_client, bilateral_knees):
        """Knees 30/20: factor 4, block 48, combined 50."""
        response = api_client.post(reverse('api:combined_rating'), {'ratings': bilateral_knees}, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['bilateral_factor'] == 4
        assert response.data['bilateral_combined'] == 48
        assert response.data['combined'] == 50
        assert len(response.data['breakdown']['bilateral']) == 2
        assert response.data['steps']

    def test_include_bilateral_false(self, api_client, bilateral_knees):
        response = api_client.post(
            reverse('api:combined_rating'),
            {'ratings': bilateral_knees, 'include_bilateral': False},
            format='json',
        )

        assert response.data['bilateral_factor'] == 0
        assert response.data['combined'] == 40

    def test_empty_ratings(self, api_client):
        response = api_client.post(reverse('api:combined_rating'), {'ratings': []}, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['combined'] == 0
        assert response.data['steps'] == []

    def test_out_of_range_value_is_clamped(self, api_client):
        response = api_client.post(
            reverse('api:combined_rating'),
            {'ratings': [{'name': 'PTSD', 'value': 150}]},
            format='json',
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['exact_value'] == 100.0

    def test_off_tier_value_is_snapped(self, api_client):
        response = api_client.post(
            reverse('api:combined_rating'),
            {'ratings': [{'value': 45}]},
            format='json',
        )

        assert response.data['exact_value'] == 50.0

    def test_invalid_side(self, api_client):
        response = api_client.post(
            reverse('api:combined_rating'),
            {'ratings': [{'value': 20, 'side': 'up'}]},
            format='json',
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'ratings' in response.data

    def test_missing_ratings(self, api_client):
        response = api_client.post(reverse('api:combined_rating'), {}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST


class TestRatingRange:
    """Tests for /api/v1/ratings/range/ endpoint."""

    def test_range(self, api_client):
        response = api_client.post(reverse('api:rating_range'), {
            'conditions': [
                {'name': 'PTSD', 'ratings': [0, 10, 30, 50, 70, 100]},
                {'name': 'Tinnitus', 'ratings': [10]},
            ],
        }, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data == {'min': 20, 'max': 100, 'min_exact': 19.0, 'max_exact': 100.0}

    def test_rejects_out_of_range_tier(self, api_client):
        response = api_client.post(reverse('api:rating_range'), {
            'conditions': [{'name': 'PTSD', 'ratings': [0, 150]}],
        }, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST


class TestCompensation:
    """Tests for /api/v1/ratings/compensation/ endpoint."""

    def test_with_spouse(self, api_client):
        response = api_client.post(reverse('api:compensation'), {
            'combined_rating': 70,
            'dependents': {'spouse': True},
        }, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['monthly'] == 1916.24
        assert response.data['monthly_display'] == '$1,916.24'
        assert response.data['breakdown']['spouse'] == 157.68
        assert response.data['cola_year'] == 2026
        assert response.data['effective_date'] == '2026-01-01'

    def test_no_dependents(self, api_client):
        response = api_client.post(reverse('api:compensation'), {'combined_rating': 10}, format='json')

        assert response.data['monthly'] == 175.51

    def test_off_tier_rating_is_snapped(self, api_client):
        response = api_client.post(reverse('api:compensation'), {'combined_rating': 75}, format='json')

        assert response.data['breakdown']['base'] == 2044.33

    def test_unknown_rate_year(self, api_client):
        response = api_client.post(reverse('api:compensation'), {
            'combined_rating': 70,
            'rate_year': 1999,
        }, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'rate_year' in response.data

    def test_too_many_dependent_parents(self, api_client):
        response = api_client.post(reverse('api:compensation'), {
            'combined_rating': 70,
            'dependents': {'dependent_parents': 3},
        }, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST


class TestEvaluateClaim:
    """Tests for /api/v1/claims/evaluate/ endpoint."""

    @pytest.fixture
    def claim(self):
        return {
            'conditions': [
                {'condition_id': 'ptsd', 'selected_rating': 70},
                {'condition_id': 'knee', 'selected_rating': 10, 'side': 'left'},
                {'condition_id': 'knee', 'selected_rating': 10, 'side': 'right'},
            ],
            'dependents': {'spouse': True},
            'evidence_score': 50,
        }

    def test_full_evaluation(self, api_client, claim):
        response = api_client.post(reverse('api:evaluate_claim'), claim, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['combined']['combined'] == 80
        assert response.data['tdiu']['eligible'] == 'eligible'
        assert response.data['tdiu']['pathway'] == 'Single Condition'
        assert response.data['smc'] == []
        assert response.data['score'] == 66
        assert response.data['max_monthly_benefit'] == 4044.02
        assert response.data['potential_backpay'] == 0.0

    def test_severity_and_free_text(self, api_client):
        response = api_client.post(reverse('api:evaluate_claim'), {
            'conditions': [
                {'condition_id': 'tbi', 'severity': 4},
                {'name': 'Erectile dysfunction', 'selected_rating': 0},
            ],
        }, format='json')

        assert response.status_code == status.HTTP_200_OK
        # Total maps TBI to its 100% tier
        assert response.data['combined']['combined'] == 100
        assert [s['type'] for s in response.data['smc']] == ['SMC-K', 'SMC-T']

    def test_effective_date_estimates_backpay(self, api_client, claim):
        claim['effective_date'] = '2020-01-01'
        response = api_client.post(reverse('api:evaluate_claim'), claim, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['potential_backpay'] > 0

    def test_unknown_condition_id(self, api_client):
        response = api_client.post(reverse('api:evaluate_claim'), {
            'conditions': [{'condition_id': 'not-a-condition', 'selected_rating': 10}],
        }, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'conditions' in response.data

    def test_condition_needs_id_or_name(self, api_client):
        response = api_client.post(reverse('api:evaluate_claim'), {
            'conditions': [{'selected_rating': 10}],
        }, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_evidence_score_bounds(self, api_client, claim):
        claim['evidence_score'] = 120
        response = api_client.post(reverse('api:evaluate_claim'), claim, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'evidence_score' in response.data

    def test_condition_names_not_logged(self, api_client, claim):
        with patch('api.views.logger') as mock_logger:
            api_client.post(reverse('api:evaluate_claim'), claim, format='json')

        logged = str(mock_logger.info.call_args)
        assert 'Claim evaluated' in logged
        assert 'PTSD' not in logged


class TestHealthCheck:
    """Tests for /health/ endpoint."""

    def test_reports_rate_year(self, client):
        response = client.get(reverse('health_check'))

        assert response.status_code == 200
        assert response.json() == {'status': 'healthy', 'rate_year': 2026, 'latest_rate_year': 2026}
