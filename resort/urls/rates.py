"""Rate URL patterns: promotions, surcharges, overrides, restrictions, rate calendar."""

from django.urls import path
from resort.views import (
    PromotionView,
    SurchargeView,
    RateCalendarView,
    RateOverrideView,
    RateOverrideDeleteView,
    RestrictionView,
)

urlpatterns = [
    path('resort/<slug:resort_code>/api/promotions/',
         PromotionView.as_view(), name='promotions'),
    path('resort/<slug:resort_code>/api/surcharges/',
         SurchargeView.as_view(), name='surcharges'),
    path('resort/<slug:resort_code>/api/rates/',
         RateCalendarView.as_view(), name='rate_calendar'),
    path('resort/<slug:resort_code>/api/rates/overrides/',
         RateOverrideView.as_view(), name='rate_overrides'),
    path('resort/<slug:resort_code>/api/rates/overrides/delete/',
         RateOverrideDeleteView.as_view(), name='rate_override_delete'),
    path('resort/<slug:resort_code>/api/rates/restrictions/',
         RestrictionView.as_view(), name='rate_restrictions'),
]
