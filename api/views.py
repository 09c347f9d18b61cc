"""
Rating Engine API Views

Stateless JSON endpoints over the ratings engine:
- /api/v1/conditions/ - Condition catalog listing and search
- /api/v1/ratings/combined/ - Combined rating with bilateral factor
- /api/v1/ratings/range/ - Best/worst case combined rating
- /api/v1/ratings/compensation/ - Monthly compensation estimate
- /api/v1/claims/evaluate/ - Full claim evaluation (rating, TDIU, SMC, score)

Condition names are health information: logs carry counts and outcomes only.
"""

import logging

from django.utils import timezone
from rest_framework.decorators import api_view
from rest_framework.response import Response

from ratings.catalog import search_conditions
from ratings.compensation import calculate_compensation, format_currency
from ratings.engine import evaluate_claim, serialize_evaluation
from ratings.va_math import calculate_combined_rating, calculate_rating_range

from .serializers import (
    ClaimEvaluationRequestSerializer,
    CombinedRatingRequestSerializer,
    CompensationRequestSerializer,
    RatingRangeRequestSerializer,
)

logger = logging.getLogger(__name__)


@api_view(['GET'])
def condition_list(request):
    """
    List catalog conditions, optionally filtered by name or keyword.

    GET /api/v1/conditions/?q=knee

    Response:
    {
        "count": 1,
        "results": [
            {"id": "knee", "name": "Knee Condition", "system": "musculoskeletal",
             "ratings": [0, 10, 20, 30, 40, 50, 60], "bilateral_eligible": true, ...}
        ]
    }
    """
    conditions = search_conditions(request.query_params.get('q', ''))
    return Response({
        'count': len(conditions),
        'results': [serialize_evaluation(condition) for condition in conditions],
    })


@api_view(['POST'])
def combined_rating(request):
    """
    Combine individual ratings using VA Math.

    POST /api/v1/ratings/combined/

    Response: exact_value, combined, bilateral_factor, bilateral_combined,
    breakdown and the step-by-step trace.
    """
    serializer = CombinedRatingRequestSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    ratings = serializer.get_rating_inputs()
    result = calculate_combined_rating(
        ratings,
        include_bilateral=serializer.validated_data['include_bilateral'],
    )

    logger.info("Combined rating for %d ratings: %s%%", len(ratings), result.combined)
    return Response(serialize_evaluation(result))


@api_view(['POST'])
def rating_range(request):
    """
    Best and worst case combined rating across each condition's tiers.

    POST /api/v1/ratings/range/
    """
    serializer = RatingRangeRequestSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    result = calculate_rating_range(serializer.get_condition_ratings())
    return Response(serialize_evaluation(result))


@api_view(['POST'])
def compensation(request):
    """
    Estimate monthly compensation for a combined rating.

    POST /api/v1/ratings/compensation/

    Response:
    {
        "monthly": 1916.24,
        "annual": 22994.88,
        "monthly_display": "$1,916.24",
        "cola_rate": 0.028,
        "cola_year": 2026,
        "effective_date": "2026-01-01",
        "breakdown": {"base": 1758.56, "spouse": 157.68, "children": 0.0, "parents": 0.0}
    }
    """
    serializer = CompensationRequestSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    result = calculate_compensation(
        serializer.validated_data['combined_rating'],
        serializer.get_dependents(),
        serializer.get_rates(),
    )

    data = serialize_evaluation(result)
    data['monthly_display'] = format_currency(result.monthly)
    data['annual_display'] = format_currency(result.annual)
    return Response(data)


@api_view(['POST'])
def evaluate(request):
    """
    Evaluate a claim: combined rating, range, compensation, TDIU, SMC and
    composite score.

    POST /api/v1/claims/evaluate/

    Backpay is estimated through today when an effective_date is given.
    """
    serializer = ClaimEvaluationRequestSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    conditions = serializer.get_conditions()
    effective_date = serializer.validated_data.get('effective_date')

    evaluation = evaluate_claim(
        conditions,
        serializer.get_dependents(),
        serializer.get_rates(),
        evidence_score=serializer.validated_data['evidence_score'],
        effective_date=effective_date,
        as_of=timezone.localdate() if effective_date else None,
    )

    logger.info(
        "Claim evaluated: %d conditions, combined=%s%%, tdiu=%s, smc=%d, score=%s",
        len(conditions),
        evaluation.combined.combined,
        evaluation.tdiu.eligible.value,
        len(evaluation.smc),
        evaluation.score,
    )
    return Response(serialize_evaluation(evaluation))
