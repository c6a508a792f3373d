"""
Analytics services: dashboard rollups over bookings.
"""

from decimal import Decimal, ROUND_HALF_UP
from datetime import date, timedelta
from collections import OrderedDict
import calendar

from django.db.models import Sum, Count


class BookingAnalysisService:
    """
    Read-only aggregations over a resort's bookings for the dashboard.

    Only active bookings (pending, confirmed, completed) are counted.
    """

    def __init__(self, resort):
        self.resort = resort

    def _get_base_queryset(self):
        """Active bookings for the resort."""
        from resort.models import Booking

        return Booking.objects.active().filter(resort=self.resort)

    def revenue_by_room_type(self, start, end):
        """
        Revenue grouped by room type for check-ins between start and end.

        Returns:
            list of {'room_type', 'revenue'}; bookings without a room type
            are grouped under 'Unknown'
        """
        rows = (
            self._get_base_queryset()
            .checking_in_between(start, end)
            .values('room_type__name')
            .annotate(revenue=Sum('price_total'))
            .order_by('room_type__name')
        )

        revenue_map = OrderedDict()
        for row in rows:
            name = row['room_type__name'] or 'Unknown'
            revenue_map[name] = revenue_map.get(name, Decimal('0.00')) + (row['revenue'] or Decimal('0.00'))

        return [
            {'room_type': room_type, 'revenue': revenue}
            for room_type, revenue in revenue_map.items()
        ]

    def season_mix(self, start, end):
        """
        Booked nights per season, read from each booking's season snapshot.

        Snapshot nights without a season count as mid; labels other than
        low/mid/high are ignored.
        """
        from resort.models import DEFAULT_SEASON

        counts = OrderedDict([('low', 0), ('mid', 0), ('high', 0)])

        snapshots = (
            self._get_base_queryset()
            .checking_in_between(start, end)
            .values_list('season_snapshot', flat=True)
        )
        for snapshot in snapshots:
            if not isinstance(snapshot, list):
                continue
            for night in snapshot:
                season = (night or {}).get('season') or DEFAULT_SEASON
                if season in counts:
                    counts[season] += 1

        return [{'season': season, 'bookings': count} for season, count in counts.items()]

    def avg_package_profit_by_month(self, year):
        """Average profit per booking and booking count for each month of a year."""
        monthly_data = []

        for month in range(1, 13):
            month_start = date(year, month, 1)
            month_end = date(year, month, calendar.monthrange(year, month)[1])

            stats = (
                self._get_base_queryset()
                .checking_in_between(month_start, month_end)
                .aggregate(total_profit=Sum('profit_total'), bookings=Count('id'))
            )
            bookings = stats['bookings'] or 0
            total_profit = stats['total_profit'] or Decimal('0.00')
            avg_profit = (total_profit / bookings).quantize(Decimal('0.01')) if bookings else Decimal('0.00')

            monthly_data.append({
                'month': month,
                'month_name': calendar.month_abbr[month],
                'avg_profit': avg_profit,
                'bookings': bookings,
            })

        return monthly_data

    def daily_occupancy(self, start, end):
        """
        Occupancy for each day from start to end inclusive.

        A booking occupies a day when check_in <= day < check_out. The
        denominator is the number of active room types (1 when there are
        none).

        Returns:
            list of {'date', 'occupancy_pct', 'occupied_rooms', 'total_rooms'}
        """
        from resort.models import RoomType

        total_rooms = RoomType.objects.filter(resort=self.resort, is_active=True).count() or 1

        stays = list(
            self._get_base_queryset()
            .filter(check_in__lte=end, check_out__gt=start)
            .values_list('check_in', 'check_out')
        )

        daily_data = []
        day = start
        while day <= end:
            occupied = sum(1 for check_in, check_out in stays if check_in <= day < check_out)
            occupancy_pct = (
                Decimal(occupied) / Decimal(total_rooms) * 100
            ).quantize(Decimal('0.1'), rounding=ROUND_HALF_UP)

            daily_data.append({
                'date': day.isoformat(),
                'occupancy_pct': occupancy_pct,
                'occupied_rooms': occupied,
                'total_rooms': total_rooms,
            })
            day += timedelta(days=1)

        return daily_data

    def get_dashboard_data(self, today=None):
        """
        Everything the dashboard shows, in one call.

        - forecast for the current month
        - revenue by room type for the current month
        - season mix for the last 90 days
        - average profit per booking for each month of the current year
        - daily occupancy for the last 60 days
        """
        from resort.services.forecast_service import MonthlyForecastService, month_bounds

        today = today or date.today()
        month_start, month_end = month_bounds(today)

        return {
            'forecast': MonthlyForecastService(self.resort).compute_monthly_forecast(month_start),
            'revenue_by_room_type': self.revenue_by_room_type(month_start, month_end),
            'season_mix': self.season_mix(today - timedelta(days=90), today),
            'profit_by_month': self.avg_package_profit_by_month(today.year),
            'occupancy': self.daily_occupancy(today - timedelta(days=60), today),
        }
