"""
Paint a season onto every day of a date range.

Usage:
    python manage.py set_season_range <resort_code> 2025-12-15 2026-01-05 high --description "Year end"
"""

from datetime import datetime

from django.core.management.base import BaseCommand, CommandError


def parse_day(value):
    try:
        return datetime.strptime(value, '%Y-%m-%d').date()
    except ValueError:
        raise CommandError(f'Invalid date (expected YYYY-MM-DD): {value}')


class Command(BaseCommand):
    help = 'Assign a season to every day between two dates (inclusive)'

    def add_arguments(self, parser):
        parser.add_argument('resort_code', type=str, help='Resort code')
        parser.add_argument('date_start', type=str, help='First day (YYYY-MM-DD)')
        parser.add_argument('date_end', type=str, help='Last day (YYYY-MM-DD)')
        parser.add_argument('season', type=str, choices=['low', 'mid', 'high'])
        parser.add_argument('--description', type=str, default=None)

    def handle(self, *args, **options):
        from resort.models import Resort
        from resort.services import set_season_range

        try:
            resort = Resort.objects.get(code=options['resort_code'])
        except Resort.DoesNotExist:
            raise CommandError(f"Resort not found: {options['resort_code']}")

        date_start = parse_day(options['date_start'])
        date_end = parse_day(options['date_end'])

        result = set_season_range(
            resort, date_start, date_end, options['season'], options['description'],
        )

        days = len(result['dates'])
        if days == 0:
            self.stdout.write(self.style.WARNING('End date is before start date; no days were painted'))
        else:
            self.stdout.write(self.style.SUCCESS(
                f"Set {days} days to {options['season']} ({date_start} to {date_end})"
            ))
