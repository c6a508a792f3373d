"""
Season calendar, season settings and overhead endpoints.
"""

import logging

from django.core.exceptions import ValidationError
from django.views.generic import View

from resort.models import SeasonSettings, Overhead, SEASONS
from resort.services import (
    set_season_range,
    get_season_ranges,
    get_season_assignments,
    delete_season_range,
    save_season_assignments,
    generate_calendar_months,
    parse_month,
)

from .mixins import ResortMixin, validation_message

logger = logging.getLogger(__name__)

# Longest span one request may paint
MAX_RANGE_DAYS = 3 * 366


def serialize_range(season_range):
    return {
        'id': season_range.id,
        'date_start': season_range.date_start,
        'date_end': season_range.date_end,
        'season': season_range.season,
        'description': season_range.description,
        'day_count': season_range.day_count,
    }


def serialize_assignment(assignment):
    return {
        'date': assignment.date,
        'season': assignment.season,
        'is_holiday': assignment.is_holiday,
        'description': assignment.description,
    }


class SeasonRangeView(ResortMixin, View):
    """
    API: List season ranges of a year (GET) or paint a new range (POST).

    POST body: {"date_start", "date_end", "season", "description"}
    """

    def get(self, request, *args, **kwargs):
        resort = self.get_resort()
        year = self.parse_year()
        if year is None:
            return self.error_response('Invalid year')

        ranges = get_season_ranges(resort, year)
        return self.success_response(data=[serialize_range(r) for r in ranges])

    def post(self, request, *args, **kwargs):
        resort = self.get_resort()

        data = self.parse_json_body()
        if data is None:
            return self.error_response('Invalid JSON')

        date_start = self.parse_date(data.get('date_start'))
        date_end = self.parse_date(data.get('date_end'))
        if not date_start or not date_end:
            return self.error_response('Valid date_start and date_end are required')
        if (date_end - date_start).days + 1 > MAX_RANGE_DAYS:
            return self.error_response(f'A season range may span at most {MAX_RANGE_DAYS} days')

        season = data.get('season')
        if season not in SEASONS:
            return self.error_response(f'Unknown season: {season}')

        description = self.parse_text(data.get('description'))
        if description is None:
            return self.error_response('description must be a string')

        try:
            result = set_season_range(resort, date_start, date_end, season, description)
        except Exception as e:
            logger.exception("Season range save error")
            return self.json_response({'success': False, 'message': str(e)}, status=500)

        return self.success_response(
            data={
                'range': serialize_range(result['range']),
                'days_written': len(result['dates']),
            },
            message=f"Season range saved ({len(result['dates'])} days)",
            status=201,
        )


class SeasonRangeDeleteView(ResortMixin, View):
    """API: Delete a season range record. Painted days keep their season."""

    def post(self, request, *args, **kwargs):
        resort = self.get_resort()

        if not delete_season_range(resort, kwargs.get('pk')):
            return self.error_response('Season range not found', status=404)

        return self.success_response(message='Season range deleted')


class SeasonAssignmentView(ResortMixin, View):
    """
    API: Season calendar of a year (GET) or bulk save painted days (POST).

    POST body: {"assignments": [{"date", "season", "is_holiday"}, ...]}
    """

    def get(self, request, *args, **kwargs):
        resort = self.get_resort()
        year = self.parse_year()
        if year is None:
            return self.error_response('Invalid year')

        assignments = get_season_assignments(resort, year=year)
        return self.success_response(data={
            'year': year,
            'assignments': [serialize_assignment(a) for a in assignments],
            'months': generate_calendar_months(year),
        })

    def post(self, request, *args, **kwargs):
        resort = self.get_resort()

        data = self.parse_json_body()
        if data is None:
            return self.error_response('Invalid JSON')

        items = data.get('assignments')
        if not isinstance(items, list):
            return self.error_response('assignments must be a list')

        assignments = []
        for item in items:
            if not isinstance(item, dict):
                return self.error_response('Each assignment must be an object')
            day = self.parse_date(item.get('date'))
            if day is None:
                return self.error_response(f"Invalid date: {item.get('date')}")
            if item.get('season') not in SEASONS:
                return self.error_response(f"Unknown season: {item.get('season')}")
            is_holiday = item.get('is_holiday', False)
            if not isinstance(is_holiday, bool):
                return self.error_response('is_holiday must be true or false')
            assignments.append({
                'date': day,
                'season': item['season'],
                'is_holiday': is_holiday,
            })

        try:
            saved = save_season_assignments(resort, assignments)
        except Exception as e:
            logger.exception("Season assignment save error")
            return self.json_response({'success': False, 'message': str(e)}, status=500)

        return self.success_response(data={'saved': saved}, message=f'Saved {saved} days')


class SeasonSettingsView(ResortMixin, View):
    """API: Read or update the resort's season percentages and pricing defaults."""

    PCT_FIELDS = [
        'low_pct',
        'mid_pct',
        'high_pct',
        'weekend_surcharge_pct',
        'holiday_surcharge_pct',
        'margin_pct',
    ]

    def serialize(self, settings_obj):
        data = {field: getattr(settings_obj, field) for field in self.PCT_FIELDS}
        data['round_to_rm5'] = settings_obj.round_to_rm5
        data['multipliers'] = settings_obj.multipliers
        return data

    def get(self, request, *args, **kwargs):
        resort = self.get_resort()
        return self.success_response(data=self.serialize(resort.get_season_settings()))

    def post(self, request, *args, **kwargs):
        resort = self.get_resort()

        data = self.parse_json_body()
        if data is None:
            return self.error_response('Invalid JSON')

        settings_obj, _ = SeasonSettings.objects.get_or_create(resort=resort)

        for field in self.PCT_FIELDS:
            if field in data:
                value = self.parse_decimal(data[field], default=None)
                if value is None:
                    return self.error_response(f'Invalid value for {field}')
                setattr(settings_obj, field, value)
        if 'round_to_rm5' in data:
            if not isinstance(data['round_to_rm5'], bool):
                return self.error_response('round_to_rm5 must be true or false')
            settings_obj.round_to_rm5 = data['round_to_rm5']

        try:
            settings_obj.full_clean()
        except ValidationError as e:
            return self.error_response(validation_message(e))

        settings_obj.save()
        logger.info("Updated season settings for %s", resort.code)

        return self.success_response(data=self.serialize(settings_obj), message='Settings saved')


class OverheadView(ResortMixin, View):
    """
    API: Monthly overhead rows (GET) or upsert one month (POST).

    POST body: {"month": "YYYY-MM", "overhead_monthly", "overhead_per_room_day",
                "allocation_mode", "fixed_per_package", "notes"}
    overhead_daily is derived as overhead_monthly / 30 when not given.
    """

    def serialize(self, overhead):
        return {
            'id': overhead.id,
            'month': overhead.month.strftime('%Y-%m'),
            'overhead_monthly': overhead.overhead_monthly,
            'overhead_daily': overhead.overhead_daily,
            'overhead_per_room_day': overhead.overhead_per_room_day,
            'allocation_mode': overhead.allocation_mode,
            'fixed_per_package': overhead.fixed_per_package,
            'notes': overhead.notes,
        }

    def get(self, request, *args, **kwargs):
        resort = self.get_resort()
        overheads = Overhead.objects.filter(resort=resort).order_by('-month')
        return self.success_response(data=[self.serialize(o) for o in overheads])

    def post(self, request, *args, **kwargs):
        resort = self.get_resort()

        data = self.parse_json_body()
        if data is None:
            return self.error_response('Invalid JSON')

        try:
            month = parse_month(data.get('month'))
        except ValueError as e:
            return self.error_response(str(e))

        allocation_mode = data.get('allocation_mode') or Overhead.ALLOCATION_PER_ROOM_DAY
        if allocation_mode not in [mode for mode, _ in Overhead.ALLOCATION_MODES]:
            return self.error_response(f'Unknown allocation mode: {allocation_mode}')

        overhead_monthly = self.parse_decimal(data.get('overhead_monthly'), default=None)
        if overhead_monthly is None or overhead_monthly < 0:
            return self.error_response('overhead_monthly must be a non-negative number')

        notes = self.parse_text(data.get('notes'))
        if notes is None:
            return self.error_response('notes must be a string')

        defaults = {
            'overhead_monthly': overhead_monthly,
            'overhead_per_room_day': self.parse_decimal(data.get('overhead_per_room_day')),
            'allocation_mode': allocation_mode,
            'fixed_per_package': self.parse_decimal(data.get('fixed_per_package')),
            'notes': notes,
        }
        # None lets Overhead.save derive it from the monthly figure
        defaults['overhead_daily'] = self.parse_decimal(data.get('overhead_daily'), default=None)

        overhead, created = Overhead.objects.update_or_create(
            resort=resort,
            month=month,
            defaults=defaults,
        )
        logger.info(
            "%s overhead %s for %s",
            'Created' if created else 'Updated', month.strftime('%Y-%m'), resort.code,
        )

        return self.success_response(
            data=self.serialize(overhead),
            message='Overhead saved',
            status=201 if created else 200,
        )
