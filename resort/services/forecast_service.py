"""
Monthly Forecast Service

Aggregates a month of bookings against the month's fixed overhead:
- revenue, profit and net profit
- breakeven booking count at the month's average profit
- profit projections at 50 / 75 / 100 % of the booked profit
"""

import logging
from decimal import Decimal, ROUND_HALF_UP
from datetime import date, datetime
import calendar
import math

from django.conf import settings

logger = logging.getLogger(__name__)

DEFAULT_OVERHEAD_MONTHLY = Decimal('77000')

PROJECTION_SHARES = (
    ('projection_50', Decimal('0.5')),
    ('projection_75', Decimal('0.75')),
)


def default_overhead_monthly():
    return Decimal(str(getattr(settings, 'RESORT_DEFAULT_OVERHEAD_MONTHLY', DEFAULT_OVERHEAD_MONTHLY)))


def parse_month(value):
    """
    First day of the month for a date, datetime or 'YYYY-MM[-DD]' string.

    Raises:
        ValueError: if the string is not a month
    """
    if isinstance(value, datetime):
        value = value.date()
    if isinstance(value, date):
        return value.replace(day=1)

    text = str(value).strip()
    for fmt in ('%Y-%m-%d', '%Y-%m'):
        try:
            return datetime.strptime(text, fmt).date().replace(day=1)
        except ValueError:
            continue
    raise ValueError(f"Invalid month: {value!r} (expected YYYY-MM or YYYY-MM-DD)")


def month_bounds(month):
    """(first day, last day) of the month."""
    month_start = parse_month(month)
    last_day = calendar.monthrange(month_start.year, month_start.month)[1]
    return month_start, month_start.replace(day=last_day)


def summarize_forecast(bookings, overhead_monthly, month=None):
    """
    Forecast figures for a month from its bookings.

    Args:
        bookings: iterable of objects or dicts with nights, price_total and
            profit_total (already filtered to active bookings of the month)
        overhead_monthly: fixed overhead for the month
        month: optional month label carried into the result

    Breakeven divides by ``max(avg_profit_per_booking, 1)``: a month with no
    profit (or a loss) per booking reports ``ceil(overhead)`` bookings
    instead of dividing by zero or going negative.
    """
    overhead_monthly = Decimal(str(overhead_monthly))

    total_bookings = 0
    total_nights = 0
    revenue = Decimal('0')
    profit = Decimal('0')

    for booking in bookings:
        if isinstance(booking, dict):
            nights = booking.get('nights')
            price_total = booking.get('price_total')
            profit_total = booking.get('profit_total')
        else:
            nights = booking.nights
            price_total = booking.price_total
            profit_total = booking.profit_total

        total_bookings += 1
        total_nights += nights or 0
        revenue += Decimal(str(price_total or 0))
        profit += Decimal(str(profit_total or 0))

    if total_bookings > 0:
        avg_profit_per_booking = profit / total_bookings
    else:
        avg_profit_per_booking = Decimal('0')

    breakeven_bookings = math.ceil(overhead_monthly / max(avg_profit_per_booking, Decimal('1')))

    net_profit = profit - overhead_monthly

    result = {
        'month': month.isoformat() if isinstance(month, date) else month,
        'overhead_monthly': overhead_monthly,
        'total_bookings': total_bookings,
        'total_nights': total_nights,
        'revenue': revenue,
        'profit': profit,
        'net_profit': net_profit,
        'avg_profit_per_booking': avg_profit_per_booking.quantize(Decimal('0.01'), rounding=ROUND_HALF_UP),
        'breakeven_bookings': breakeven_bookings,
    }

    for key, share in PROJECTION_SHARES:
        if total_bookings > 0:
            result[key] = profit * share - overhead_monthly
        else:
            result[key] = -overhead_monthly
    result['projection_100'] = profit - overhead_monthly

    return result


class MonthlyForecastService:
    """
    Monthly profit forecast for one resort.

    Usage:
        service = MonthlyForecastService(resort)
        forecast = service.compute_monthly_forecast('2025-03')
        print(forecast['net_profit'], forecast['breakeven_bookings'])
    """

    def __init__(self, resort):
        self.resort = resort

    def resolve_overhead_monthly(self, month):
        """
        Overhead for the month.

        Exact (resort, month) row first, then the most recent earlier month,
        then the configured default (77000).
        """
        from resort.models import Overhead

        month_start = parse_month(month)

        overhead = Overhead.objects.filter(resort=self.resort, month=month_start).first()
        if overhead is not None:
            return overhead.overhead_monthly

        overhead = (
            Overhead.objects.filter(resort=self.resort, month__lt=month_start)
            .order_by('-month')
            .first()
        )
        if overhead is not None:
            return overhead.overhead_monthly

        fallback = default_overhead_monthly()
        logger.warning(
            "No overhead configured for %s up to %s; using default %s",
            self.resort.code, month_start.isoformat(), fallback,
        )
        return fallback

    def get_month_bookings(self, month):
        """Active bookings checking in during the month."""
        from resort.models import Booking

        month_start, month_end = month_bounds(month)
        return (
            Booking.objects.active()
            .filter(resort=self.resort)
            .checking_in_between(month_start, month_end)
        )

    def compute_monthly_forecast(self, month):
        """
        Forecast for a month (date or 'YYYY-MM' / 'YYYY-MM-DD').

        Returns:
            dict with month, overhead_monthly, total_bookings, total_nights,
            revenue, profit, net_profit, avg_profit_per_booking,
            breakeven_bookings, projection_50, projection_75, projection_100
        """
        month_start = parse_month(month)
        overhead_monthly = self.resolve_overhead_monthly(month_start)
        bookings = self.get_month_bookings(month_start).values('nights', 'price_total', 'profit_total')
        return summarize_forecast(bookings, overhead_monthly, month_start)

    def compute_year(self, year):
        """Forecast for each month of a year."""
        return [
            self.compute_monthly_forecast(date(year, month, 1))
            for month in range(1, 13)
        ]
