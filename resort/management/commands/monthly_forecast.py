"""
Print the monthly profit forecast for a resort.

Usage:
    python manage.py monthly_forecast <resort_code>
    python manage.py monthly_forecast <resort_code> --month 2025-03
"""

from datetime import date

from django.core.management.base import BaseCommand, CommandError


class Command(BaseCommand):
    help = 'Show bookings, profit, breakeven and scenarios for a month'

    def add_arguments(self, parser):
        parser.add_argument('resort_code', type=str, help='Resort code')
        parser.add_argument('--month', type=str, default=None, help='YYYY-MM (default: current month)')

    def handle(self, *args, **options):
        from resort.models import Resort
        from resort.services import MonthlyForecastService, parse_month

        try:
            resort = Resort.objects.get(code=options['resort_code'])
        except Resort.DoesNotExist:
            raise CommandError(f"Resort not found: {options['resort_code']}")

        try:
            month = parse_month(options['month'] or date.today())
        except ValueError as e:
            raise CommandError(str(e))

        forecast = MonthlyForecastService(resort).compute_monthly_forecast(month)
        currency = resort.currency_symbol

        self.stdout.write(f"{resort.name} - {month:%B %Y}")
        self.stdout.write(f"  Bookings:            {forecast['total_bookings']}")
        self.stdout.write(f"  Nights:              {forecast['total_nights']}")
        self.stdout.write(f"  Revenue:             {currency} {forecast['revenue']:,.2f}")
        self.stdout.write(f"  Profit:              {currency} {forecast['profit']:,.2f}")
        self.stdout.write(f"  Overhead:            {currency} {forecast['overhead_monthly']:,.2f}")

        net_line = f"  Net profit:          {currency} {forecast['net_profit']:,.2f}"
        if forecast['net_profit'] >= 0:
            self.stdout.write(self.style.SUCCESS(net_line))
        else:
            self.stdout.write(self.style.ERROR(net_line))

        self.stdout.write(f"  Breakeven bookings:  {forecast['breakeven_bookings']}")
        for share in (50, 75, 100):
            self.stdout.write(f"  Scenario {share}%:        {currency} {forecast[f'projection_{share}']:,.2f}")
