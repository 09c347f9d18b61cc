"""
Request serializers for the rating engine API.

This is the validation boundary in front of the engine: types and ranges are
checked here, rating values are normalized onto schedular tiers, and catalog
ids are resolved. Anything that passes arrives at the engine well formed.
"""

from rest_framework import serializers

from ratings.catalog import get_condition
from ratings.compensation import Dependents
from ratings.ingestion import build_selected_condition, normalize_rating_value
from ratings.rate_tables import RATE_TABLES, get_rate_table
from ratings.va_math import LimbSide, RatingInput

SIDE_CHOICES = [side.value for side in LimbSide]

# Intent levels accepted for condition severity
SEVERITY_CHOICES = [
    (0, 'None'),
    (1, 'Mild'),
    (2, 'Moderate'),
    (3, 'Severe'),
    (4, 'Total'),
]


def _side(value):
    return LimbSide(value) if value else None


class RateYearMixin:
    """Validates an optional rate year against the published tables."""

    def validate_rate_year(self, value):
        if value is not None and value not in RATE_TABLES:
            raise serializers.ValidationError(
                f"No compensation rates for {value}. Available: {sorted(RATE_TABLES)}"
            )
        return value

    def get_rates(self):
        return get_rate_table(self.validated_data.get('rate_year'))


class RatingInputSerializer(serializers.Serializer):
    id = serializers.CharField(required=False, allow_blank=True, default='')
    name = serializers.CharField(required=False, allow_blank=True, default='', max_length=200)
    value = serializers.IntegerField()
    is_bilateral = serializers.BooleanField(required=False, default=False)
    side = serializers.ChoiceField(choices=SIDE_CHOICES, required=False, allow_null=True)
    limb_type = serializers.CharField(required=False, allow_blank=True, default='', max_length=50)

    def validate_value(self, value):
        return normalize_rating_value(value)

    @staticmethod
    def to_rating_input(data, index):
        return RatingInput(
            id=data.get('id') or f"rating-{index}",
            name=data.get('name', ''),
            value=data['value'],
            is_bilateral=data.get('is_bilateral', False),
            side=_side(data.get('side')),
            limb_type=data.get('limb_type', '').strip().lower(),
        )


class CombinedRatingRequestSerializer(serializers.Serializer):
    """
    POST /api/v1/ratings/combined/
    {
        "ratings": [
            {"name": "Left knee", "value": 20, "is_bilateral": true, "side": "left", "limb_type": "knee"},
            {"name": "PTSD", "value": 50}
        ],
        "include_bilateral": true
    }
    """
    ratings = RatingInputSerializer(many=True)
    include_bilateral = serializers.BooleanField(required=False, default=True)

    def get_rating_inputs(self):
        return [
            RatingInputSerializer.to_rating_input(data, i)
            for i, data in enumerate(self.validated_data['ratings'])
        ]


class RangeConditionSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=200)
    ratings = serializers.ListField(
        child=serializers.IntegerField(min_value=0, max_value=100),
        allow_empty=True,
    )


class RatingRangeRequestSerializer(serializers.Serializer):
    """
    POST /api/v1/ratings/range/
    {"conditions": [{"name": "PTSD", "ratings": [0, 10, 30, 50, 70, 100]}]}
    """
    conditions = RangeConditionSerializer(many=True)

    def get_condition_ratings(self):
        return [
            (condition['name'], condition['ratings'])
            for condition in self.validated_data['conditions']
        ]


class DependentsSerializer(serializers.Serializer):
    spouse = serializers.BooleanField(required=False, default=False)
    children = serializers.IntegerField(required=False, default=0, min_value=0, max_value=20)
    dependent_parents = serializers.IntegerField(required=False, default=0, min_value=0, max_value=2)

    @staticmethod
    def to_dependents(data):
        if not data:
            return Dependents()
        return Dependents(
            spouse=data.get('spouse', False),
            children=data.get('children', 0),
            dependent_parents=data.get('dependent_parents', 0),
        )


class CompensationRequestSerializer(RateYearMixin, serializers.Serializer):
    """
    POST /api/v1/ratings/compensation/
    {"combined_rating": 70, "dependents": {"spouse": true, "children": 2}, "rate_year": 2026}
    """
    combined_rating = serializers.IntegerField(min_value=0, max_value=100)
    dependents = DependentsSerializer(required=False)
    rate_year = serializers.IntegerField(required=False, allow_null=True)

    def validate_combined_rating(self, value):
        return normalize_rating_value(value)

    def get_dependents(self):
        return DependentsSerializer.to_dependents(self.validated_data.get('dependents'))


class SelectedConditionSerializer(serializers.Serializer):
    """A catalog condition (by id) or a free-text condition with its own tiers"""
    condition_id = serializers.CharField(required=False, allow_blank=True, default='')
    name = serializers.CharField(required=False, allow_blank=True, default='', max_length=200)
    selected_rating = serializers.IntegerField(required=False, allow_null=True)
    severity = serializers.ChoiceField(choices=SEVERITY_CHOICES, required=False, allow_null=True)
    side = serializers.ChoiceField(choices=SIDE_CHOICES, required=False, allow_null=True)
    is_bilateral = serializers.BooleanField(required=False, allow_null=True, default=None)
    limb_type = serializers.CharField(required=False, allow_blank=True, default='', max_length=50)
    ratings = serializers.ListField(
        child=serializers.IntegerField(min_value=0, max_value=100),
        required=False,
        default=list,
    )

    def validate_condition_id(self, value):
        if value and get_condition(value) is None:
            raise serializers.ValidationError(f"Unknown condition '{value}'.")
        return value

    def validate(self, attrs):
        if not attrs.get('condition_id') and not attrs.get('name', '').strip():
            raise serializers.ValidationError("Provide a catalog condition_id or a condition name.")
        return attrs

    @staticmethod
    def to_selected_condition(data):
        return build_selected_condition(
            condition_id=data.get('condition_id', ''),
            name=data.get('name', '').strip(),
            selected_rating=data.get('selected_rating'),
            severity=data.get('severity'),
            side=_side(data.get('side')),
            is_bilateral=data.get('is_bilateral'),
            limb_type=data.get('limb_type', '').strip().lower(),
            ratings=data.get('ratings') or (),
        )


class ClaimEvaluationRequestSerializer(RateYearMixin, serializers.Serializer):
    """
    POST /api/v1/claims/evaluate/
    {
        "conditions": [
            {"condition_id": "ptsd", "selected_rating": 70},
            {"condition_id": "knee", "selected_rating": 10, "side": "left"},
            {"condition_id": "knee", "selected_rating": 10, "side": "right"}
        ],
        "dependents": {"spouse": true, "children": 1},
        "evidence_score": 60,
        "effective_date": "2025-06-01"
    }
    """
    conditions = SelectedConditionSerializer(many=True)
    dependents = DependentsSerializer(required=False)
    evidence_score = serializers.FloatField(required=False, default=0, min_value=0, max_value=100)
    rate_year = serializers.IntegerField(required=False, allow_null=True)
    effective_date = serializers.DateField(required=False, allow_null=True)

    def get_conditions(self):
        return [
            SelectedConditionSerializer.to_selected_condition(data)
            for data in self.validated_data['conditions']
        ]

    def get_dependents(self):
        return DependentsSerializer.to_dependents(self.validated_data.get('dependents'))
