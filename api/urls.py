"""
Rating Engine API URL Configuration

All API endpoints are prefixed with /api/v1/
"""

from django.urls import path

from . import views

app_name = 'api'

urlpatterns = [
    # Catalog
    path('conditions/', views.condition_list, name='condition_list'),

    # Rating math
    path('ratings/combined/', views.combined_rating, name='combined_rating'),
    path('ratings/range/', views.rating_range, name='rating_range'),
    path('ratings/compensation/', views.compensation, name='compensation'),

    # Full evaluation
    path('claims/evaluate/', views.evaluate, name='evaluate_claim'),
]
