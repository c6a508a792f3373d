from datetime import date
from decimal import Decimal
from unittest import mock

import pytest
from django.db import DatabaseError

from resort.models import SeasonAssignment, SeasonRange, SeasonSettings
from resort.services import (
    set_season_range,
    get_season_ranges,
    get_season_assignments,
    delete_season_range,
    save_season_assignments,
    get_season_for_date,
    generate_calendar_months,
)


@pytest.mark.django_db
class TestSetSeasonRange:

    def test_paints_every_day_inclusive(self, resort):
        result = set_season_range(resort, date(2025, 3, 1), date(2025, 3, 3), 'high', 'School holidays')

        assert result['dates'] == [date(2025, 3, 1), date(2025, 3, 2), date(2025, 3, 3)]
        assert SeasonRange.objects.filter(resort=resort).count() == 1
        assignments = SeasonAssignment.objects.filter(resort=resort).order_by('date')
        assert [a.season for a in assignments] == ['high', 'high', 'high']
        assert {a.description for a in assignments} == {'School holidays'}

    def test_overlapping_range_overwrites_days(self, resort):
        set_season_range(resort, date(2025, 3, 1), date(2025, 3, 5), 'high')
        set_season_range(resort, date(2025, 3, 4), date(2025, 3, 8), 'low')

        assert SeasonAssignment.objects.filter(resort=resort).count() == 8
        assert get_season_for_date(resort, date(2025, 3, 3)) == 'high'
        assert get_season_for_date(resort, date(2025, 3, 4)) == 'low'
        assert SeasonRange.objects.filter(resort=resort).count() == 2

    def test_end_before_start_paints_nothing(self, resort):
        result = set_season_range(resort, date(2025, 3, 5), date(2025, 3, 1), 'high')

        assert result['dates'] == []
        assert not SeasonAssignment.objects.filter(resort=resort).exists()
        assert SeasonRange.objects.filter(resort=resort).count() == 1

    def test_repeating_a_range_is_idempotent_for_the_calendar(self, resort):
        set_season_range(resort, date(2025, 3, 1), date(2025, 3, 3), 'high')
        set_season_range(resort, date(2025, 3, 1), date(2025, 3, 3), 'high')

        assert SeasonAssignment.objects.filter(resort=resort).count() == 3
        assert SeasonRange.objects.filter(resort=resort).count() == 2

    def test_keeps_holiday_flag(self, resort):
        save_season_assignments(resort, [{'date': date(2025, 3, 2), 'season': 'mid', 'is_holiday': True}])

        set_season_range(resort, date(2025, 3, 1), date(2025, 3, 3), 'high')

        day = SeasonAssignment.objects.get(resort=resort, date=date(2025, 3, 2))
        assert day.season == 'high'
        assert day.is_holiday is True

    def test_unknown_season(self, resort):
        with pytest.raises(ValueError):
            set_season_range(resort, date(2025, 3, 1), date(2025, 3, 3), 'peak')
        assert not SeasonRange.objects.exists()


@pytest.mark.django_db
class TestSeasonCalendar:

    def test_unassigned_day_is_mid(self, resort):
        assert get_season_for_date(resort, date(2025, 7, 1)) == 'mid'

    def test_ranges_for_year(self, resort):
        set_season_range(resort, date(2024, 12, 20), date(2025, 1, 5), 'high')
        set_season_range(resort, date(2025, 6, 1), date(2025, 6, 30), 'low')
        set_season_range(resort, date(2026, 1, 1), date(2026, 1, 2), 'mid')

        ranges = get_season_ranges(resort, 2025)
        assert [r.season for r in ranges] == ['high', 'low']

    def test_assignments_for_year(self, resort):
        set_season_range(resort, date(2024, 12, 30), date(2025, 1, 2), 'high')

        assignments = get_season_assignments(resort, year=2025)
        assert [a.date for a in assignments] == [date(2025, 1, 1), date(2025, 1, 2)]

    def test_deleting_range_keeps_painted_days(self, resort):
        result = set_season_range(resort, date(2025, 3, 1), date(2025, 3, 3), 'high')

        assert delete_season_range(resort, result['range'].pk) is True
        assert not SeasonRange.objects.exists()
        assert SeasonAssignment.objects.filter(resort=resort, season='high').count() == 3

    def test_delete_missing_range(self, resort):
        assert delete_season_range(resort, 9999) is False

    def test_bulk_save_upserts(self, resort):
        save_season_assignments(resort, [
            {'date': date(2025, 3, 1), 'season': 'low'},
            {'date': date(2025, 3, 2), 'season': 'high', 'is_holiday': True},
        ])
        saved = save_season_assignments(resort, [{'date': date(2025, 3, 1), 'season': 'high'}])

        assert saved == 1
        assert SeasonAssignment.objects.filter(resort=resort).count() == 2
        assert get_season_for_date(resort, date(2025, 3, 1)) == 'high'

    def test_bulk_save_rejects_unknown_season_before_writing(self, resort):
        with pytest.raises(ValueError):
            save_season_assignments(resort, [
                {'date': date(2025, 3, 1), 'season': 'low'},
                {'date': date(2025, 3, 2), 'season': 'peak'},
            ])
        assert not SeasonAssignment.objects.exists()


class TestGenerateCalendarMonths:

    def test_twelve_months_with_sunday_first_padding(self):
        months = generate_calendar_months(2025)

        assert len(months) == 12
        # 1 Jan 2025 is a Wednesday
        assert months[0]['name'] == 'January'
        assert months[0]['days'][:3] == [None, None, None]
        assert months[0]['days'][3] == {'day': 1, 'date': '2025-01-01'}
        # 1 Jun 2025 is a Sunday
        assert months[5]['days'][0] == {'day': 1, 'date': '2025-06-01'}

    def test_leap_february(self):
        february = generate_calendar_months(2024)[1]
        assert [d for d in february['days'] if d][-1]['day'] == 29


@pytest.mark.django_db
class TestSeasonSettings:

    def test_created_with_resort(self, resort):
        settings = SeasonSettings.objects.get(resort=resort)
        assert settings.multipliers == {
            'low': settings.get_multiplier('low'),
            'mid': settings.get_multiplier('mid'),
            'high': settings.get_multiplier('high'),
        }
        assert settings.get_multiplier('low') == Decimal('0.9')
        assert settings.get_multiplier('high') == Decimal('1.3')

    def test_unknown_season(self, resort):
        with pytest.raises(ValueError):
            resort.get_season_settings().get_multiplier('peak')


def fail_on_call(real, call_number):
    """Wrap ``real`` so that its ``call_number``-th call raises DatabaseError."""
    calls = []

    def wrapper(*args, **kwargs):
        calls.append(1)
        if len(calls) == call_number:
            raise DatabaseError('connection lost')
        return real(*args, **kwargs)

    return wrapper


@pytest.mark.django_db
class TestCalendarWritesAreAllOrNothing:

    def test_failed_range_leaves_no_range_and_no_days(self, resort):
        manager = SeasonAssignment.objects
        with mock.patch.object(manager, 'update_or_create', fail_on_call(manager.update_or_create, 2)):
            with pytest.raises(DatabaseError):
                set_season_range(resort, date(2025, 3, 1), date(2025, 3, 3), 'high')

        assert not SeasonRange.objects.exists()
        assert not SeasonAssignment.objects.exists()

    def test_failed_bulk_save_keeps_previous_calendar(self, resort):
        save_season_assignments(resort, [{'date': date(2025, 3, 1), 'season': 'low'}])

        manager = SeasonAssignment.objects
        with mock.patch.object(manager, 'update_or_create', fail_on_call(manager.update_or_create, 2)):
            with pytest.raises(DatabaseError):
                save_season_assignments(resort, [
                    {'date': date(2025, 3, 1), 'season': 'high'},
                    {'date': date(2025, 3, 2), 'season': 'high'},
                ])

        assert get_season_for_date(resort, date(2025, 3, 1)) == 'low'
        assert SeasonAssignment.objects.filter(resort=resort).count() == 1
