"""Pricing URL patterns: quotes, bookings, profit planner."""

from django.urls import path
from resort.views import (
    BookingQuoteView,
    BookingCreateView,
    ProfitPlanView,
)

urlpatterns = [
    path('resort/<slug:resort_code>/api/pricing/quote/',
         BookingQuoteView.as_view(), name='booking_quote'),
    path('resort/<slug:resort_code>/api/bookings/',
         BookingCreateView.as_view(), name='booking_create'),
    path('resort/<slug:resort_code>/api/profit-plan/',
         ProfitPlanView.as_view(), name='profit_plan'),
]
