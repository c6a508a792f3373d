"""
Season calendar services: range expansion, calendar reads and bulk saves.
"""

import logging
from datetime import date, timedelta
import calendar

from django.db import transaction

logger = logging.getLogger(__name__)


def iter_days(date_start, date_end):
    """Every calendar day from start to end inclusive (nothing if end < start)."""
    current = date_start
    while current <= date_end:
        yield current
        current += timedelta(days=1)


def validate_season(season):
    from resort.models import SEASONS

    if season not in SEASONS:
        raise ValueError(f"Unknown season: {season!r} (expected one of {', '.join(SEASONS)})")
    return season


def set_season_range(resort, date_start, date_end, season, description=None):
    """
    Record a season range and paint every day of it onto the calendar.

    The range row is always inserted; overlapping or duplicate ranges are
    allowed. Each day from ``date_start`` to ``date_end`` inclusive gets
    its SeasonAssignment created or overwritten (season and description;
    the holiday flag is left alone). ``date_end`` before ``date_start``
    paints nothing. Running it twice with the same arguments leaves the
    calendar unchanged.

    The range and all of its days are written in one transaction, so a
    failure part-way leaves no partial calendar behind.

    Returns:
        dict with 'range' (SeasonRange), 'assignments' (list of
        SeasonAssignment) and 'dates' (list of date)
    """
    from resort.models import SeasonRange, SeasonAssignment

    validate_season(season)
    description = description or None

    with transaction.atomic():
        season_range = SeasonRange.objects.create(
            resort=resort,
            date_start=date_start,
            date_end=date_end,
            season=season,
            description=description,
        )

        assignments = []
        for day in iter_days(date_start, date_end):
            assignment, _ = SeasonAssignment.objects.update_or_create(
                resort=resort,
                date=day,
                defaults={'season': season, 'description': description},
            )
            assignments.append(assignment)

    logger.info(
        "Season range %s for %s: %s to %s as %s (%d days)",
        season_range.pk, resort.code, date_start, date_end, season, len(assignments),
    )

    return {
        'range': season_range,
        'assignments': assignments,
        'dates': [a.date for a in assignments],
    }


def get_season_ranges(resort, year):
    """Ranges overlapping the year, ordered by start date."""
    from resort.models import SeasonRange

    return list(
        SeasonRange.objects.filter(
            resort=resort,
            date_end__gte=date(year, 1, 1),
            date_start__lte=date(year, 12, 31),
        ).order_by('date_start', 'id')
    )


def get_season_assignments(resort, year=None, start=None, end=None):
    """Assignments for a year, or for an explicit start..end window."""
    from resort.models import SeasonAssignment

    if year is not None:
        start, end = date(year, 1, 1), date(year, 12, 31)

    queryset = SeasonAssignment.objects.filter(resort=resort)
    if start is not None:
        queryset = queryset.filter(date__gte=start)
    if end is not None:
        queryset = queryset.filter(date__lte=end)
    return list(queryset.order_by('date'))


def delete_season_range(resort, range_id):
    """
    Delete a range record.

    The days it painted keep their season; ranges hold no link to them.
    Returns True when a range was deleted.
    """
    from resort.models import SeasonRange

    deleted, _ = SeasonRange.objects.filter(resort=resort, pk=range_id).delete()
    return deleted > 0


def save_season_assignments(resort, assignments):
    """
    Bulk upsert of painted calendar days.

    Args:
        assignments: iterable of dicts with 'date', 'season' and optional
            'is_holiday'

    Returns:
        number of days written
    """
    from resort.models import SeasonAssignment

    rows = []
    for item in assignments:
        rows.append((item['date'], validate_season(item['season']), bool(item.get('is_holiday', False))))

    with transaction.atomic():
        for day, season, is_holiday in rows:
            SeasonAssignment.objects.update_or_create(
                resort=resort,
                date=day,
                defaults={'season': season, 'is_holiday': is_holiday},
            )

    logger.info("Saved %d season assignments for %s", len(rows), resort.code)
    return len(rows)


def get_season_for_date(resort, day):
    """Season label of a day (mid when unassigned)."""
    from resort.models import SeasonAssignment, DEFAULT_SEASON

    assignment = SeasonAssignment.objects.filter(resort=resort, date=day).only('season').first()
    return assignment.season if assignment else DEFAULT_SEASON


def generate_calendar_months(year):
    """
    Twelve month grids for a year calendar.

    Each month's ``days`` list starts with ``None`` padding up to the
    weekday of the 1st (Sunday first), followed by {'day', 'date'} cells.
    """
    months = []
    for month in range(1, 13):
        first_day = date(year, month, 1)
        days_in_month = calendar.monthrange(year, month)[1]
        # date.weekday(): Monday=0; shift so Sunday=0
        padding = (first_day.weekday() + 1) % 7

        days = [None] * padding
        for day in range(1, days_in_month + 1):
            days.append({
                'day': day,
                'date': date(year, month, day).isoformat(),
            })

        months.append({
            'month': month,
            'name': calendar.month_name[month],
            'days': days,
        })

    return months
