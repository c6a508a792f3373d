"""
Pricing Calculation Services
============================

Package pricing for a single booking.

Calculation Flow:
1. Room  = rate × room multiplier × nights (+ per-date rate overrides)
2. Meals = (adult rate × adults + child rate × children) × nights
3. Boat  = (adult rate × adults + child rate × children) × nights
4. Base  = room + meals + boat + add-ons (cost and price side separately)
5. Overhead is added to the cost side only
6. Base price × season multiplier = Season Price
7. Season Price + surcharge % = After Surcharge
8. After Surcharge + margin % = With Margin
   With Margin, less promotions, plus per-guest surcharges = After Rules
9. Round to nearest 5 (or to a whole unit when rounding is off)
10. Profit = Price − Cost
"""

import logging
from decimal import Decimal, ROUND_HALF_UP
from datetime import timedelta
import math

from .rate_service import (
    RestrictionError,
    check_restrictions,
    collect_price_rules,
    get_override_map,
)

logger = logging.getLogger(__name__)

ZERO = Decimal('0')
ONE = Decimal('1')
FIVE = Decimal('5')
HUNDRED = Decimal('100')

OVERHEAD_NONE = 'none'
OVERHEAD_PER_ROOM_DAY = 'per_room_day'
OVERHEAD_FIXED_PER_PACKAGE = 'fixed_per_package'
OVERHEAD_MODES = (OVERHEAD_NONE, OVERHEAD_PER_ROOM_DAY, OVERHEAD_FIXED_PER_PACKAGE)

# Nights (by weekday of the night) that carry the weekend surcharge: Fri, Sat
WEEKEND_NIGHTS = (4, 5)


def to_decimal(value, default=ZERO):
    """Coerce ints, floats and numeric strings to Decimal (None -> default)."""
    if value is None or value == '':
        return default
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def quantize_money(value):
    """Round to cents for storage."""
    return to_decimal(value).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)


def round_rm5(value, enabled=True):
    """
    Round a currency amount to the nearest 5, or to a whole unit.

    Ties go away from zero: 102.5 -> 105 and 2.5 -> 3.

    >>> round_rm5(102), round_rm5(103), round_rm5(102.4, False)
    (Decimal('100'), Decimal('105'), Decimal('102'))
    """
    value = to_decimal(value)
    if enabled:
        return (value / FIVE).quantize(ONE, rounding=ROUND_HALF_UP) * FIVE
    return value.quantize(ONE, rounding=ROUND_HALF_UP)


def apply_price_rules(price, rules, total_pax):
    """
    Apply promotions and per-guest surcharges to a package price.

    Rules are applied in order. A promotion takes ``percent_off`` of the
    running price, so promotions on several nights compound; a surcharge
    adds ``amount_per_pax`` for every guest.

    Args:
        price: package price before the rules
        rules: list of dicts with 'kind' ('promotion' or 'surcharge'),
            'name', 'date' and 'percent_off' or 'amount_per_pax'
        total_pax: adults + children

    Returns:
        (price, applied_promotions, applied_surcharges)
    """
    price = to_decimal(price)
    total_pax = to_decimal(total_pax)
    applied_promotions = []
    applied_surcharges = []

    for rule in rules:
        if rule['kind'] == 'promotion':
            percent_off = to_decimal(rule['percent_off'])
            discount = price * percent_off / HUNDRED
            price -= discount
            applied_promotions.append({
                'name': rule['name'],
                'date': rule['date'],
                'percent_off': percent_off,
                'discount': quantize_money(discount),
            })
        elif rule['kind'] == 'surcharge':
            amount_per_pax = to_decimal(rule['amount_per_pax'])
            amount = amount_per_pax * total_pax
            price += amount
            applied_surcharges.append({
                'name': rule['name'],
                'date': rule['date'],
                'amount_per_pax': amount_per_pax,
                'total_amount': quantize_money(amount),
            })
        else:
            raise ValueError(f"Unknown price rule kind: {rule['kind']!r}")

    return price, applied_promotions, applied_surcharges


def calc_booking_totals(*, nights, room_multiplier, pax_adult, pax_child,
                        cost_room, price_room,
                        meal_cost_adult, meal_cost_child,
                        meal_price_adult, meal_price_child,
                        boat_cost_adult, boat_cost_child,
                        boat_price_adult, boat_price_child,
                        addons_cost=ZERO, addons_price=ZERO,
                        season_mult, surcharge_pct, margin_pct,
                        overhead_mode=OVERHEAD_NONE,
                        overhead_per_room_day=ZERO,
                        overhead_fixed_per_package=ZERO,
                        round_to_rm5=True,
                        room_price_adjustment=ZERO,
                        price_rules=()):
    """
    Compute cost, price and profit totals for one booking.

    Every input except the add-ons must already be defaulted by the caller.
    Overhead only ever increases cost; it is never passed on in the price.
    ``room_price_adjustment`` is added to the room price before the season
    multiplier; ``price_rules`` (see apply_price_rules) run on the price
    with margin, and the result is floored at zero before rounding.

    Returns:
        dict with the step-by-step breakdown plus
        cost_total, price_total and profit_total
    """
    if overhead_mode not in OVERHEAD_MODES:
        raise ValueError(f"Unknown overhead mode: {overhead_mode!r}")

    nights = to_decimal(nights)
    room_multiplier = to_decimal(room_multiplier)
    pax_adult = to_decimal(pax_adult)
    pax_child = to_decimal(pax_child)

    room_cost = to_decimal(cost_room) * room_multiplier * nights
    room_price = to_decimal(price_room) * room_multiplier * nights + to_decimal(room_price_adjustment)

    meals_cost = (to_decimal(meal_cost_adult) * pax_adult + to_decimal(meal_cost_child) * pax_child) * nights
    meals_price = (to_decimal(meal_price_adult) * pax_adult + to_decimal(meal_price_child) * pax_child) * nights

    boat_cost = (to_decimal(boat_cost_adult) * pax_adult + to_decimal(boat_cost_child) * pax_child) * nights
    boat_price = (to_decimal(boat_price_adult) * pax_adult + to_decimal(boat_price_child) * pax_child) * nights

    addons_cost = to_decimal(addons_cost)
    addons_price = to_decimal(addons_price)

    base_cost = room_cost + meals_cost + boat_cost + addons_cost
    base_price = room_price + meals_price + boat_price + addons_price

    if overhead_mode == OVERHEAD_PER_ROOM_DAY:
        overhead = to_decimal(overhead_per_room_day) * nights
    elif overhead_mode == OVERHEAD_FIXED_PER_PACKAGE:
        overhead = to_decimal(overhead_fixed_per_package)
    else:
        overhead = ZERO

    cost_total = base_cost + overhead

    season_price = base_price * to_decimal(season_mult)
    after_surcharge = season_price * (ONE + to_decimal(surcharge_pct) / HUNDRED)
    with_margin = after_surcharge * (ONE + to_decimal(margin_pct) / HUNDRED)

    applied_promotions, applied_surcharges = [], []
    after_rules = with_margin
    if price_rules:
        after_rules, applied_promotions, applied_surcharges = apply_price_rules(
            with_margin, price_rules, pax_adult + pax_child,
        )
        after_rules = max(after_rules, ZERO)

    price_total = round_rm5(after_rules, round_to_rm5)
    profit_total = price_total - cost_total

    return {
        'room_cost': room_cost,
        'room_price': room_price,
        'meals_cost': meals_cost,
        'meals_price': meals_price,
        'boat_cost': boat_cost,
        'boat_price': boat_price,
        'addons_cost': addons_cost,
        'addons_price': addons_price,
        'base_cost': base_cost,
        'base_price': base_price,
        'overhead': overhead,
        'season_price': season_price,
        'after_surcharge': after_surcharge,
        'with_margin': with_margin,
        'room_price_adjustment': to_decimal(room_price_adjustment),
        'after_rules': after_rules,
        'applied_promotions': applied_promotions,
        'applied_surcharges': applied_surcharges,
        'cost_total': cost_total,
        'price_total': price_total,
        'profit_total': profit_total,
    }


def calculate_profit_plan(overhead_monthly, avg_package_price, avg_profit_margin,
                          total_rooms, days_in_month=30):
    """
    What-if planner: breakeven and occupancy projections for a month.

    Args:
        overhead_monthly: fixed overhead for the month
        avg_package_price: expected average package price
        avg_profit_margin: profit margin percent of the package price
        total_rooms: rooms available each night
        days_in_month: nominal month length (30)

    Returns:
        dict with profit_per_package, breakeven_packages,
        breakeven_occupancy and a projections list for 50/75/100 %
    """
    overhead_monthly = to_decimal(overhead_monthly)
    avg_package_price = to_decimal(avg_package_price)
    avg_profit_margin = to_decimal(avg_profit_margin)

    avg_cost = avg_package_price * (ONE - avg_profit_margin / HUNDRED)
    profit_per_package = avg_package_price - avg_cost
    total_room_days = int(total_rooms) * int(days_in_month)

    if profit_per_package > 0:
        breakeven_packages = math.ceil(overhead_monthly / profit_per_package)
    else:
        breakeven_packages = None

    breakeven_occupancy = None
    if breakeven_packages is not None and total_room_days > 0:
        breakeven_occupancy = (
            Decimal(breakeven_packages) / Decimal(total_room_days) * HUNDRED
        ).quantize(Decimal('0.1'), rounding=ROUND_HALF_UP)

    projections = []
    for occupancy in (50, 75, 100):
        packages = math.floor(total_room_days * occupancy / 100)
        projections.append({
            'occupancy': occupancy,
            'packages': packages,
            'revenue': packages * avg_package_price,
            'cost': packages * avg_cost + overhead_monthly,
            'profit': packages * profit_per_package - overhead_monthly,
        })

    return {
        'overhead_monthly': overhead_monthly,
        'avg_package_price': avg_package_price,
        'avg_cost': avg_cost,
        'profit_per_package': profit_per_package,
        'total_room_days': total_room_days,
        'breakeven_packages': breakeven_packages,
        'breakeven_occupancy': breakeven_occupancy,
        'projections': projections,
    }


class BookingPricingService:
    """
    Quotes and creates bookings for a resort.

    Pulls the season of each night from the season calendar, the season
    multipliers, surcharges, margin and rounding from SeasonSettings, and
    the overhead allocation from the Overhead row of the check-in month.

    Usage:
        service = BookingPricingService(resort)
        quote = service.quote(
            check_in=date(2025, 3, 1),
            check_out=date(2025, 3, 4),
            pax_adult=2,
            room_type=room,
            meal_price_adult=Decimal('60.00'),
        )
        print(quote['price_total'], quote['season_snapshot'])
    """

    RATE_FIELDS = (
        'cost_room', 'price_room',
        'meal_cost_adult', 'meal_cost_child', 'meal_price_adult', 'meal_price_child',
        'boat_cost_adult', 'boat_cost_child', 'boat_price_adult', 'boat_price_child',
        'addons_cost', 'addons_price',
    )

    def __init__(self, resort):
        self.resort = resort
        self.settings = resort.get_season_settings()

    def _nightly_calendar(self, check_in, check_out):
        """List of (night, season, is_holiday) for every night of the stay."""
        from resort.models import SeasonAssignment, DEFAULT_SEASON

        assignments = {
            a.date: a
            for a in SeasonAssignment.objects.filter(
                resort=self.resort,
                date__gte=check_in,
                date__lt=check_out,
            )
        }

        nights = []
        current = check_in
        while current < check_out:
            assignment = assignments.get(current)
            if assignment:
                nights.append((current, assignment.season or DEFAULT_SEASON, assignment.is_holiday))
            else:
                nights.append((current, DEFAULT_SEASON, False))
            current += timedelta(days=1)
        return nights

    def build_season_snapshot(self, check_in, check_out):
        """Per-night [{'date', 'season'}] for the stay as the calendar stands now."""
        return [
            {'date': night.isoformat(), 'season': season}
            for night, season, _ in self._nightly_calendar(check_in, check_out)
        ]

    def season_multiplier(self, snapshot):
        """Mean season multiplier over the snapshot nights."""
        from resort.models import DEFAULT_SEASON

        if not snapshot:
            return self.settings.get_multiplier(DEFAULT_SEASON)
        total = sum(
            (self.settings.get_multiplier(night.get('season') or DEFAULT_SEASON) for night in snapshot),
            ZERO,
        )
        return (total / len(snapshot)).quantize(Decimal('0.0001'), rounding=ROUND_HALF_UP)

    def nightly_surcharge_pct(self, nights):
        """
        Mean surcharge percent over (night, season, is_holiday) tuples.

        Holidays take the holiday surcharge; other Friday and Saturday
        nights take the weekend surcharge.
        """
        if not nights:
            return ZERO
        total = ZERO
        for night, _, is_holiday in nights:
            if is_holiday:
                total += self.settings.holiday_surcharge_pct
            elif night.weekday() in WEEKEND_NIGHTS:
                total += self.settings.weekend_surcharge_pct
        return (total / len(nights)).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)

    def resolve_overhead(self, check_in):
        """
        Overhead allocation for a booking checking in on ``check_in``.

        Uses the Overhead row of that month, else the most recent prior
        month. Returns (mode, rate); ('none', 0) when nothing is configured.
        """
        from resort.models import Overhead

        month_start = check_in.replace(day=1)
        overhead = (
            Overhead.objects.filter(resort=self.resort, month__lte=month_start)
            .order_by('-month')
            .first()
        )
        if overhead is None:
            return OVERHEAD_NONE, ZERO
        return overhead.allocation_mode, overhead.allocation_rate

    def room_override_adjustment(self, room_type, base_rate, check_in, check_out):
        """Sum over the stay of (overridden nightly rate - base rate)."""
        overrides = get_override_map(room_type, check_in, check_out - timedelta(days=1))
        return sum(
            (override.apply(base_rate) - base_rate for override in overrides.values()),
            ZERO,
        )

    def quote(self, check_in, check_out, pax_adult=2, pax_child=0, room_type=None,
              room_multiplier=ONE, margin_pct=None, overhead_mode=None,
              overhead_rate=None, round_to_rm5=None, package_code='',
              booked_on=None, **rates):
        """
        Price a stay without saving it.

        Room rates default to the room type's rates and every other unit
        rate defaults to 0. Margin, rounding and overhead default to the
        resort's settings.

        With a room type, per-date rate overrides adjust the room price
        (unless ``price_room`` is given) and the stay is checked against
        the room type's restrictions. Promotions and surcharges matching
        the nights, room type and ``package_code`` are applied to the
        price; ``booked_on`` (default today) drives advance-booking rules.

        Returns:
            dict with the calculation breakdown, the inputs used, the
            season_snapshot for the stay and the list of restrictions the
            stay breaks
        """
        unknown = set(rates) - set(self.RATE_FIELDS)
        if unknown:
            raise TypeError(f"Unknown rate fields: {', '.join(sorted(unknown))}")

        inputs = {field: to_decimal(rates.get(field)) for field in self.RATE_FIELDS}
        if room_type is not None:
            if rates.get('cost_room') is None:
                inputs['cost_room'] = room_type.cost_room
            if rates.get('price_room') is None:
                inputs['price_room'] = room_type.price_room

        nights_calendar = self._nightly_calendar(check_in, check_out)
        snapshot = [
            {'date': night.isoformat(), 'season': season}
            for night, season, _ in nights_calendar
        ]
        season_mult = self.season_multiplier(snapshot)
        surcharge_pct = self.nightly_surcharge_pct(nights_calendar)

        if overhead_mode is None:
            overhead_mode, default_rate = self.resolve_overhead(check_in)
            if overhead_rate is None:
                overhead_rate = default_rate
        overhead_rate = to_decimal(overhead_rate)

        if margin_pct is None:
            margin_pct = self.settings.margin_pct
        if round_to_rm5 is None:
            round_to_rm5 = self.settings.round_to_rm5

        inputs.update({
            'nights': len(nights_calendar),
            'room_multiplier': to_decimal(room_multiplier, ONE),
            'pax_adult': int(pax_adult),
            'pax_child': int(pax_child),
            'season_mult': season_mult,
            'surcharge_pct': surcharge_pct,
            'margin_pct': to_decimal(margin_pct),
            'overhead_mode': overhead_mode,
            'round_to_rm5': round_to_rm5,
        })

        room_price_adjustment = ZERO
        restrictions = []
        if room_type is not None:
            if rates.get('price_room') is None:
                room_price_adjustment = self.room_override_adjustment(
                    room_type, inputs['price_room'], check_in, check_out,
                ) * inputs['room_multiplier']
            restrictions = check_restrictions(room_type, check_in, check_out, booked_on)

        price_rules = collect_price_rules(
            self.resort,
            [(night, season) for night, season, _ in nights_calendar],
            room_type=room_type,
            package_code=package_code or '',
            booked_on=booked_on,
        )

        totals = calc_booking_totals(
            overhead_per_room_day=overhead_rate,
            overhead_fixed_per_package=overhead_rate,
            room_price_adjustment=room_price_adjustment,
            price_rules=price_rules,
            **inputs
        )

        result = dict(inputs)
        result.update(totals)
        result['overhead_rate'] = overhead_rate
        result['package_code'] = package_code or ''
        result['season_snapshot'] = snapshot
        result['restrictions'] = restrictions
        return result

    def create_booking(self, check_in, check_out, guest_name='', status=None,
                       room_type=None, **quote_kwargs):
        """
        Quote the stay, freeze its season snapshot and save the booking.

        Raises RestrictionError when the stay breaks a restriction.
        """
        from resort.models import Booking

        quote = self.quote(check_in, check_out, room_type=room_type, **quote_kwargs)
        if quote['restrictions']:
            raise RestrictionError(quote['restrictions'])

        applied_rules = [
            dict(rule, kind='promotion') for rule in quote['applied_promotions']
        ] + [
            dict(rule, kind='surcharge') for rule in quote['applied_surcharges']
        ]
        applied_rules = [
            {key: str(value) if isinstance(value, Decimal) else value for key, value in rule.items()}
            for rule in applied_rules
        ]

        booking = Booking.objects.create(
            resort=self.resort,
            room_type=room_type,
            guest_name=guest_name,
            check_in=check_in,
            check_out=check_out,
            nights=quote['nights'],
            pax_adult=quote['pax_adult'],
            pax_child=quote['pax_child'],
            room_multiplier=quote['room_multiplier'],
            season_mult=quote['season_mult'],
            surcharge_pct=quote['surcharge_pct'],
            margin_pct=quote['margin_pct'],
            overhead_mode=quote['overhead_mode'],
            overhead_rate=quote['overhead_rate'],
            round_to_rm5=quote['round_to_rm5'],
            season_snapshot=quote['season_snapshot'],
            package_code=quote['package_code'],
            applied_rules=applied_rules,
            status=status or Booking.STATUS_PENDING,
            cost_total=quantize_money(quote['cost_total']),
            price_total=quantize_money(quote['price_total']),
            **{field: quote[field] for field in self.RATE_FIELDS}
        )

        logger.info(
            "Created booking %s for %s: %s nights, price %s, cost %s",
            booking.pk, self.resort.code, booking.nights, booking.price_total, booking.cost_total,
        )
        return booking
