from datetime import date
from decimal import Decimal
from unittest import mock

import pytest
from django.core.exceptions import ValidationError
from django.db import DatabaseError

from resort.models import Promotion, RoomRateOverride, RoomRateRestriction, RoomType
from resort.services import (
    bulk_apply_overrides,
    bulk_apply_restrictions,
    check_restrictions,
    delete_rate_override,
    filter_dates_by_weekdays,
    get_rates_for_range,
    set_season_range,
    upsert_rate_override,
    upsert_restriction,
)
from resort.services.season_service import iter_days


def march(day):
    return date(2025, 3, day)


class TestRoomRateOverrideApply:

    def override(self, override_type, value):
        return RoomRateOverride(override_type=override_type, value=Decimal(value))

    def test_set(self):
        assert self.override('set', '300').apply(Decimal('250')) == Decimal('300.00')

    def test_delta_amount(self):
        assert self.override('delta_amount', '-40').apply(Decimal('250')) == Decimal('210.00')

    def test_delta_percent(self):
        assert self.override('delta_percent', '12.5').apply(Decimal('250')) == Decimal('281.25')

    def test_never_below_zero(self):
        assert self.override('delta_amount', '-300').apply(Decimal('250')) == Decimal('0.00')

    def test_adjustment_display(self):
        assert self.override('set', '300').get_adjustment_display() == '= 300'
        assert self.override('delta_amount', '20').get_adjustment_display() == '+20'
        assert self.override('delta_percent', '-10').get_adjustment_display() == '-10%'


@pytest.mark.django_db
class TestStayRuleModel:

    def promotion(self, resort, **kwargs):
        params = {
            'resort': resort,
            'name': 'Early Bird',
            'date_start': march(1),
            'date_end': march(31),
            'percent_off': Decimal('10'),
        }
        params.update(kwargs)
        return Promotion(**params)

    def test_end_before_start_is_invalid(self, resort):
        with pytest.raises(ValidationError):
            self.promotion(resort, date_end=date(2025, 2, 1)).full_clean()

    def test_weekday_mask_digits_only(self, resort):
        with pytest.raises(ValidationError):
            self.promotion(resort, weekday_mask='08').full_clean()

    def test_percent_off_capped_at_hundred(self, resort):
        with pytest.raises(ValidationError):
            self.promotion(resort, percent_off=Decimal('150')).full_clean()

    def test_applies_to_checks_dates_and_weekdays(self, resort):
        # Sat 8 and Sun 9 March 2025
        promotion = self.promotion(resort, weekday_mask='67')

        assert promotion.applies_to(march(8), 'mid')
        assert not promotion.applies_to(march(10), 'mid')
        assert not promotion.applies_to(date(2025, 4, 5), 'mid')


@pytest.mark.django_db
class TestRestrictionModel:

    def test_max_los_below_min_los_is_invalid(self, resort, room_type):
        restriction = RoomRateRestriction(resort=resort, room_type=room_type, date=march(3),
                                          min_los=3, max_los=2)
        with pytest.raises(ValidationError):
            restriction.clean()

    def test_one_row_per_room_type_and_date(self, resort, room_type):
        upsert_restriction(room_type, march(3), min_los=2)
        upsert_restriction(room_type, march(3), min_los=4)

        restriction = RoomRateRestriction.objects.get(room_type=room_type, date=march(3))
        assert restriction.min_los == 4

    def test_unknown_field(self, room_type):
        with pytest.raises(TypeError):
            upsert_restriction(room_type, march(3), min_nights=2)


class TestFilterDatesByWeekdays:

    def test_keeps_matching_weekdays(self):
        # Mon 3 .. Sun 9 March 2025
        days = list(iter_days(march(3), march(9)))
        assert filter_dates_by_weekdays(days, [6, 7]) == [march(8), march(9)]

    def test_no_weekdays_keeps_everything(self):
        days = list(iter_days(march(3), march(9)))
        assert filter_dates_by_weekdays(days) == days


@pytest.mark.django_db
class TestRateOverrides:

    def test_upsert_replaces_existing(self, room_type):
        upsert_rate_override(room_type, march(3), 'set', Decimal('300'))
        upsert_rate_override(room_type, march(3), 'delta_percent', Decimal('10'), note='Regatta')

        override = RoomRateOverride.objects.get(room_type=room_type, date=march(3))
        assert override.override_type == 'delta_percent'
        assert override.note == 'Regatta'

    def test_unknown_override_type(self, room_type):
        with pytest.raises(ValueError):
            upsert_rate_override(room_type, march(3), 'double', Decimal('2'))
        assert not RoomRateOverride.objects.exists()

    def test_delete(self, room_type):
        upsert_rate_override(room_type, march(3), 'set', Decimal('300'))

        assert delete_rate_override(room_type, march(3)) is True
        assert delete_rate_override(room_type, march(3)) is False

    def test_bulk_apply_to_weekends(self, resort, room_type):
        sea_view = RoomType.objects.create(resort=resort, name='Sea View', cost_room=150, price_room=400)

        count = bulk_apply_overrides(
            [room_type, sea_view], list(iter_days(march(3), march(9))),
            'delta_amount', Decimal('20'), weekdays=[6, 7],
        )

        assert count == 4
        assert set(RoomRateOverride.objects.values_list('date', flat=True)) == {march(8), march(9)}

    def test_failed_bulk_apply_writes_nothing(self, room_type):
        manager = RoomRateOverride.objects
        real = manager.update_or_create
        calls = []

        def update_or_create(*args, **kwargs):
            calls.append(1)
            if len(calls) == 2:
                raise DatabaseError('connection lost')
            return real(*args, **kwargs)

        with mock.patch.object(manager, 'update_or_create', update_or_create):
            with pytest.raises(DatabaseError):
                bulk_apply_overrides([room_type], [march(3), march(4)], 'set', Decimal('300'))

        assert not RoomRateOverride.objects.exists()


@pytest.mark.django_db
class TestCheckRestrictions:
    """Stay of Mon 3 to Wed 5 March 2025 (two nights)."""

    def check(self, room_type, booked_on=date(2025, 2, 1)):
        return check_restrictions(room_type, march(3), march(5), booked_on)

    def test_unrestricted(self, room_type):
        assert self.check(room_type) == []

    def test_closed_night(self, room_type):
        upsert_restriction(room_type, march(4), is_closed=True)
        assert self.check(room_type) == ['Garden Chalet is closed on 2025-03-04']

    def test_closed_check_out_date_is_not_a_night(self, room_type):
        upsert_restriction(room_type, march(5), is_closed=True)
        assert self.check(room_type) == []

    def test_arrival_rules(self, room_type):
        upsert_restriction(room_type, march(3), close_to_arrival=True, max_los=1)

        assert self.check(room_type) == [
            'No arrivals on 2025-03-03',
            'Stays from 2025-03-03 are limited to 1 nights',
        ]

    def test_departure_closed(self, room_type):
        upsert_restriction(room_type, march(5), close_to_departure=True)
        assert self.check(room_type) == ['No departures on 2025-03-05']

    def test_advance_booking_window(self, room_type):
        upsert_restriction(room_type, march(3), min_advance_days=7, max_advance_days=60)

        assert self.check(room_type, booked_on=march(1)) == ['Must be booked at least 7 days in advance']
        assert self.check(room_type, booked_on=date(2024, 12, 1)) == [
            'Cannot be booked more than 60 days in advance',
        ]
        assert self.check(room_type, booked_on=date(2025, 2, 1)) == []


@pytest.mark.django_db
class TestBulkApplyRestrictions:

    def test_applies_to_selected_weekdays(self, room_type):
        count = bulk_apply_restrictions(
            [room_type], list(iter_days(march(3), march(9))), {'min_los': 2}, weekdays=[5, 6],
        )

        assert count == 2
        assert list(
            RoomRateRestriction.objects.order_by('date').values_list('date', 'min_los')
        ) == [(march(7), 2), (march(8), 2)]


@pytest.mark.django_db
class TestRateCalendar:

    def test_season_and_override_per_night(self, resort, room_type):
        set_season_range(resort, march(4), march(4), 'high')
        upsert_rate_override(room_type, march(4), 'delta_percent', Decimal('10'))
        upsert_restriction(room_type, march(4), min_los=2)

        result = get_rates_for_range(resort, [room_type], march(3), march(4))

        assert len(result) == 1
        plain, high = result[0]['rates']
        assert plain['season'] == 'mid'
        assert plain['price'] == Decimal('250.00')
        assert plain['override_applied'] is False
        assert plain['restriction'] is None

        assert high['season'] == 'high'
        assert high['adjusted_base'] == Decimal('275.00')
        assert high['price'] == Decimal('357.50')
        assert high['override']['override_type'] == 'delta_percent'
        assert high['restriction']['min_los'] == 2
