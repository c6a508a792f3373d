"""Season URL patterns: ranges, calendar days, settings, overheads."""

from django.urls import path
from resort.views import (
    SeasonRangeView,
    SeasonRangeDeleteView,
    SeasonAssignmentView,
    SeasonSettingsView,
    OverheadView,
)

urlpatterns = [
    path('resort/<slug:resort_code>/api/season-ranges/',
         SeasonRangeView.as_view(), name='season_ranges'),
    path('resort/<slug:resort_code>/api/season-ranges/<int:pk>/delete/',
         SeasonRangeDeleteView.as_view(), name='season_range_delete'),
    path('resort/<slug:resort_code>/api/season-assignments/',
         SeasonAssignmentView.as_view(), name='season_assignments'),
    path('resort/<slug:resort_code>/api/season-settings/',
         SeasonSettingsView.as_view(), name='season_settings'),
    path('resort/<slug:resort_code>/api/overheads/',
         OverheadView.as_view(), name='overheads'),
]
