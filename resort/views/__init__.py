"""
Views package.

Re-exports all views so URL modules can write:
    from resort.views import BookingQuoteView, monthly_forecast_ajax
"""

# Mixins
from .mixins import ResortMixin

# Pricing views
from .pricing import (
    BookingQuoteView,
    BookingCreateView,
    ProfitPlanView,
)

# Forecast views
from .forecasts import (
    monthly_forecast_ajax,
    dashboard_data_ajax,
    ForecastReportPDFView,
)

# Season calendar and settings views
from .seasons import (
    SeasonRangeView,
    SeasonRangeDeleteView,
    SeasonAssignmentView,
    SeasonSettingsView,
    OverheadView,
)

# Expense views
from .expenses import (
    ExpenseListView,
    ExpenseUpdateView,
    ExpenseDeleteView,
    ExpenseBillsView,
    ExpenseSummaryView,
    ExpenseTrendView,
    ExpenseExportView,
)

# Rate rule views
from .rates import (
    PromotionView,
    SurchargeView,
    RateCalendarView,
    RateOverrideView,
    RateOverrideDeleteView,
    RestrictionView,
)

__all__ = [
    # Mixins
    'ResortMixin',
    # Pricing
    'BookingQuoteView',
    'BookingCreateView',
    'ProfitPlanView',
    # Forecasts
    'monthly_forecast_ajax',
    'dashboard_data_ajax',
    'ForecastReportPDFView',
    # Seasons
    'SeasonRangeView',
    'SeasonRangeDeleteView',
    'SeasonAssignmentView',
    'SeasonSettingsView',
    'OverheadView',
    # Expenses
    'ExpenseListView',
    'ExpenseUpdateView',
    'ExpenseDeleteView',
    'ExpenseBillsView',
    'ExpenseSummaryView',
    'ExpenseTrendView',
    'ExpenseExportView',
    # Rates
    'PromotionView',
    'SurchargeView',
    'RateCalendarView',
    'RateOverrideView',
    'RateOverrideDeleteView',
    'RestrictionView',
]
