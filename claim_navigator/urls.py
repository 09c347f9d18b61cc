"""
URL configuration for claim_navigator project.
"""

from django.conf import settings
from django.http import JsonResponse
from django.urls import include, path

from ratings.rate_tables import LATEST_RATE_YEAR, RATE_TABLES


def health_check(request):
    """Health check endpoint for load balancers and monitoring."""
    year = settings.VA_RATE_YEAR
    return JsonResponse({
        "status": "healthy" if year in RATE_TABLES else "degraded",
        "rate_year": year,
        "latest_rate_year": LATEST_RATE_YEAR,
    }, status=200)


urlpatterns = [
    # Health check for load balancers/monitoring
    path('health/', health_check, name='health_check'),

    # Rating engine JSON API
    path('api/v1/', include('api.urls', namespace='api')),
]
