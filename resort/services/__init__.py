"""
Services package.

Re-exports the service classes and functions so callers can write:
    from resort.services import MonthlyForecastService, set_season_range
"""

from .pricing_service import (
    BookingPricingService,
    calc_booking_totals,
    calculate_profit_plan,
    apply_price_rules,
    round_rm5,
)
from .forecast_service import MonthlyForecastService, summarize_forecast, parse_month
from .season_service import (
    set_season_range,
    get_season_ranges,
    get_season_assignments,
    delete_season_range,
    save_season_assignments,
    get_season_for_date,
    generate_calendar_months,
)
from .analytics_service import BookingAnalysisService
from .expense_service import (
    ExpenseImportService,
    monthly_expense_summary,
    yearly_expense_trend,
    attach_bill_urls,
    remove_bill_url,
    export_expenses_csv,
)
from .report_service import ForecastReportService
from .rate_service import (
    RestrictionError,
    get_active_promotions,
    get_active_surcharges,
    collect_price_rules,
    upsert_rate_override,
    delete_rate_override,
    bulk_apply_overrides,
    get_restriction,
    upsert_restriction,
    delete_restriction,
    bulk_apply_restrictions,
    check_restrictions,
    get_rates_for_range,
    resolve_nightly_rate,
    filter_dates_by_weekdays,
)

__all__ = [
    'BookingPricingService',
    'calc_booking_totals',
    'calculate_profit_plan',
    'apply_price_rules',
    'round_rm5',
    'MonthlyForecastService',
    'summarize_forecast',
    'parse_month',
    'set_season_range',
    'get_season_ranges',
    'get_season_assignments',
    'delete_season_range',
    'save_season_assignments',
    'get_season_for_date',
    'generate_calendar_months',
    'BookingAnalysisService',
    'ExpenseImportService',
    'monthly_expense_summary',
    'yearly_expense_trend',
    'attach_bill_urls',
    'remove_bill_url',
    'export_expenses_csv',
    'ForecastReportService',
    'RestrictionError',
    'get_active_promotions',
    'get_active_surcharges',
    'collect_price_rules',
    'upsert_rate_override',
    'delete_rate_override',
    'bulk_apply_overrides',
    'get_restriction',
    'upsert_restriction',
    'delete_restriction',
    'bulk_apply_restrictions',
    'check_restrictions',
    'get_rates_for_range',
    'resolve_nightly_rate',
    'filter_dates_by_weekdays',
]
