"""
Rate Rule Services
==================

Promotions and surcharges for the nights of a stay, per-date room rate
overrides, booking restrictions and the nightly rate calendar.

Nightly rate:
    base (room type price) -> override (set / +amount / +percent)
    -> × season multiplier = nightly price
"""

import logging
from datetime import date, timedelta
from decimal import Decimal, ROUND_HALF_UP

from django.db import transaction

logger = logging.getLogger(__name__)


class RestrictionError(ValueError):
    """A stay breaks one or more booking restrictions."""

    def __init__(self, problems):
        self.problems = list(problems)
        super().__init__('; '.join(self.problems))


def iter_nights(check_in, check_out):
    current = check_in
    while current < check_out:
        yield current
        current += timedelta(days=1)


def filter_dates_by_weekdays(dates, weekdays=None):
    """Keep dates whose ISO weekday (Monday=1 ... Sunday=7) is in ``weekdays``."""
    if not weekdays:
        return list(dates)
    weekdays = {int(day) for day in weekdays}
    return [day for day in dates if day.isoweekday() in weekdays]


# =============================================================================
# PROMOTIONS & SURCHARGES
# =============================================================================

def _rules_overlapping(model, resort, start, end):
    return list(
        model.objects.filter(
            resort=resort,
            is_active=True,
            date_start__lte=end,
            date_end__gte=start,
        ).select_related('room_type').order_by('date_start', 'id')
    )


def get_active_promotions(resort, day, season, room_type=None, package_code='', booked_on=None):
    """Promotions that apply to the night of ``day``."""
    from resort.models import Promotion

    return [
        promotion for promotion in _rules_overlapping(Promotion, resort, day, day)
        if promotion.applies_to(day, season, room_type, package_code, booked_on)
    ]


def get_active_surcharges(resort, day, season, room_type=None, package_code=''):
    """Surcharges that apply to the night of ``day``."""
    from resort.models import Surcharge

    return [
        surcharge for surcharge in _rules_overlapping(Surcharge, resort, day, day)
        if surcharge.applies_to(day, season, room_type, package_code)
    ]


def collect_price_rules(resort, nights, room_type=None, package_code='', booked_on=None):
    """
    Promotions and surcharges for every night of a stay, in application order.

    Night by night, the night's promotions come first and then its
    surcharges.

    Args:
        nights: list of (date, season) for the stay

    Returns:
        list of rule dicts for apply_price_rules
    """
    from resort.models import Promotion, Surcharge

    if not nights:
        return []

    first, last = nights[0][0], nights[-1][0]
    promotions = _rules_overlapping(Promotion, resort, first, last)
    surcharges = _rules_overlapping(Surcharge, resort, first, last)

    rules = []
    for day, season in nights:
        for promotion in promotions:
            if promotion.applies_to(day, season, room_type, package_code, booked_on):
                rules.append({
                    'kind': 'promotion',
                    'name': promotion.name,
                    'date': day.isoformat(),
                    'percent_off': promotion.percent_off,
                })
        for surcharge in surcharges:
            if surcharge.applies_to(day, season, room_type, package_code):
                rules.append({
                    'kind': 'surcharge',
                    'name': surcharge.name,
                    'date': day.isoformat(),
                    'amount_per_pax': surcharge.amount_per_pax,
                })
    return rules


# =============================================================================
# RATE OVERRIDES
# =============================================================================

def validate_override_type(override_type):
    from resort.models import RoomRateOverride

    allowed = [choice for choice, _ in RoomRateOverride.OVERRIDE_TYPE_CHOICES]
    if override_type not in allowed:
        raise ValueError(f"Unknown override type: {override_type!r} (expected one of {', '.join(allowed)})")
    return override_type


def get_override_map(room_type, start, end):
    """{date: RoomRateOverride} for start..end inclusive."""
    from resort.models import RoomRateOverride

    return {
        override.date: override
        for override in RoomRateOverride.objects.filter(room_type=room_type, date__gte=start, date__lte=end)
    }


def upsert_rate_override(room_type, day, override_type, value, note=''):
    """Create or replace the override of a room type on one date."""
    from resort.models import RoomRateOverride

    validate_override_type(override_type)
    override, _ = RoomRateOverride.objects.update_or_create(
        room_type=room_type,
        date=day,
        defaults={
            'resort': room_type.resort,
            'override_type': override_type,
            'value': value,
            'note': note or '',
        },
    )
    return override


def delete_rate_override(room_type, day):
    """Returns True when an override was deleted."""
    from resort.models import RoomRateOverride

    deleted, _ = RoomRateOverride.objects.filter(room_type=room_type, date=day).delete()
    return deleted > 0


def bulk_apply_overrides(room_types, dates, override_type, value, note='', weekdays=None):
    """
    Upsert one override per room type and date.

    ``weekdays`` (Monday=1 ... Sunday=7) limits the dates written. All rows
    are written in one transaction.

    Returns:
        number of overrides written
    """
    validate_override_type(override_type)
    dates = filter_dates_by_weekdays(dates, weekdays)

    count = 0
    with transaction.atomic():
        for room_type in room_types:
            for day in dates:
                upsert_rate_override(room_type, day, override_type, value, note)
                count += 1

    logger.info("Applied %d rate overrides (%s %s)", count, override_type, value)
    return count


# =============================================================================
# RESTRICTIONS
# =============================================================================

def _validate_restriction_fields(restrictions):
    from resort.models import RoomRateRestriction

    unknown = set(restrictions) - set(RoomRateRestriction.RULE_FIELDS)
    if unknown:
        raise TypeError(f"Unknown restriction fields: {', '.join(sorted(unknown))}")


def get_restriction(room_type, day):
    """Restriction of a date, or an unsaved one with nothing restricted."""
    from resort.models import RoomRateRestriction

    restriction = RoomRateRestriction.objects.filter(room_type=room_type, date=day).first()
    if restriction is None:
        restriction = RoomRateRestriction(resort=room_type.resort, room_type=room_type, date=day)
    return restriction


def upsert_restriction(room_type, day, **restrictions):
    from resort.models import RoomRateRestriction

    _validate_restriction_fields(restrictions)
    restriction, _ = RoomRateRestriction.objects.update_or_create(
        room_type=room_type,
        date=day,
        defaults={'resort': room_type.resort, **restrictions},
    )
    return restriction


def delete_restriction(room_type, day):
    from resort.models import RoomRateRestriction

    deleted, _ = RoomRateRestriction.objects.filter(room_type=room_type, date=day).delete()
    return deleted > 0


def bulk_apply_restrictions(room_types, dates, restrictions, weekdays=None):
    """Upsert the same restrictions for every room type and date, in one transaction."""
    _validate_restriction_fields(restrictions)
    dates = filter_dates_by_weekdays(dates, weekdays)

    count = 0
    with transaction.atomic():
        for room_type in room_types:
            for day in dates:
                upsert_restriction(room_type, day, **restrictions)
                count += 1

    logger.info("Applied %d rate restrictions", count)
    return count


def check_restrictions(room_type, check_in, check_out, booked_on=None):
    """
    Restrictions a stay would break.

    Returns:
        list of messages (empty when the stay is allowed)
    """
    from resort.models import RoomRateRestriction

    restrictions = {
        r.date: r
        for r in RoomRateRestriction.objects.filter(room_type=room_type, date__gte=check_in, date__lte=check_out)
    }
    if not restrictions:
        return []

    nights = (check_out - check_in).days
    problems = []

    for night in iter_nights(check_in, check_out):
        restriction = restrictions.get(night)
        if restriction and restriction.is_closed:
            problems.append(f"{room_type.name} is closed on {night.isoformat()}")

    arrival = restrictions.get(check_in)
    if arrival:
        if arrival.close_to_arrival:
            problems.append(f"No arrivals on {check_in.isoformat()}")
        if arrival.min_los and nights < arrival.min_los:
            problems.append(f"Stays from {check_in.isoformat()} need at least {arrival.min_los} nights")
        if arrival.max_los and nights > arrival.max_los:
            problems.append(f"Stays from {check_in.isoformat()} are limited to {arrival.max_los} nights")

        lead_days = (check_in - (booked_on or date.today())).days
        if arrival.min_advance_days is not None and lead_days < arrival.min_advance_days:
            problems.append(f"Must be booked at least {arrival.min_advance_days} days in advance")
        if arrival.max_advance_days is not None and lead_days > arrival.max_advance_days:
            problems.append(f"Cannot be booked more than {arrival.max_advance_days} days in advance")

    departure = restrictions.get(check_out)
    if departure and departure.close_to_departure:
        problems.append(f"No departures on {check_out.isoformat()}")

    return problems


# =============================================================================
# RATE CALENDAR
# =============================================================================

def get_rates_for_range(resort, room_types, start, end):
    """
    Nightly rates of each room type for start..end inclusive.

    Returns:
        list of {'room_type_id', 'room_type_name', 'rates': [...]} where
        each rate has date, season, base, adjusted_base, price, cost,
        override_applied, override and restriction
    """
    from resort.models import (
        SeasonAssignment, RoomRateOverride, RoomRateRestriction, DEFAULT_SEASON,
    )

    settings = resort.get_season_settings()
    multipliers = settings.multipliers
    room_types = list(room_types)

    days = []
    current = start
    while current <= end:
        days.append(current)
        current += timedelta(days=1)

    seasons = dict(
        SeasonAssignment.objects.filter(resort=resort, date__gte=start, date__lte=end)
        .values_list('date', 'season')
    )
    overrides = {
        (o.room_type_id, o.date): o
        for o in RoomRateOverride.objects.filter(room_type__in=room_types, date__gte=start, date__lte=end)
    }
    restrictions = {
        (r.room_type_id, r.date): r
        for r in RoomRateRestriction.objects.filter(room_type__in=room_types, date__gte=start, date__lte=end)
    }

    results = []
    for room_type in room_types:
        rates = []
        for day in days:
            season = seasons.get(day) or DEFAULT_SEASON
            override = overrides.get((room_type.pk, day))
            adjusted_base = override.apply(room_type.price_room) if override else room_type.price_room
            restriction = restrictions.get((room_type.pk, day))

            rates.append({
                'date': day,
                'season': season,
                'base': room_type.price_room,
                'adjusted_base': adjusted_base,
                'price': (adjusted_base * multipliers[season]).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP),
                'cost': room_type.cost_room,
                'override_applied': override is not None,
                'override': {
                    'override_type': override.override_type,
                    'value': override.value,
                    'note': override.note,
                } if override else None,
                'restriction': restriction.as_dict() if restriction else None,
            })
        results.append({
            'room_type_id': room_type.pk,
            'room_type_name': room_type.name,
            'rates': rates,
        })

    return results


def resolve_nightly_rate(resort, room_type, day):
    """Nightly rate of one room type on one date (see get_rates_for_range)."""
    return get_rates_for_range(resort, [room_type], day, day)[0]['rates'][0]
