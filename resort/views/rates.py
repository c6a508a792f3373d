"""
Rate rule endpoints: promotions, surcharges, per-date overrides,
restrictions and the nightly rate calendar.
"""

import logging

from django.core.exceptions import ValidationError
from django.views.generic import View

from resort.models import Promotion, Surcharge, RoomRateOverride, RoomRateRestriction, RoomType, TARGET_ANY
from resort.services import (
    bulk_apply_overrides,
    bulk_apply_restrictions,
    delete_rate_override,
    get_rates_for_range,
)
from resort.services.season_service import iter_days

from .mixins import ResortMixin, validation_message

logger = logging.getLogger(__name__)

# Longest span one request may read or write
MAX_SPAN_DAYS = 366


class RateInputMixin(ResortMixin):
    """Date span, weekday and room type parsing shared by the rate views."""

    def parse_span(self, start_value, end_value):
        """Returns (start, end, error)."""
        start = self.parse_date(start_value)
        end = self.parse_date(end_value)
        if not start or not end:
            return None, None, 'Valid start and end dates are required'
        if end < start:
            return None, None, 'End date cannot be before start date'
        if (end - start).days + 1 > MAX_SPAN_DAYS:
            return None, None, f'A date span may cover at most {MAX_SPAN_DAYS} days'
        return start, end, None

    def parse_weekdays(self, value):
        """List of ISO weekdays (1-7); [] for every day, None when invalid."""
        if value in (None, ''):
            return []
        if not isinstance(value, list):
            return None
        weekdays = [self.parse_int(day) for day in value]
        if any(day is None or not 1 <= day <= 7 for day in weekdays):
            return None
        return weekdays

    def get_room_types(self, resort, ids):
        """Room types of the resort by id (all active ones when ``ids`` is empty)."""
        queryset = RoomType.objects.filter(resort=resort)
        if not ids:
            return list(queryset.filter(is_active=True))
        parsed = [self.parse_int(room_type_id) for room_type_id in ids]
        if any(room_type_id is None for room_type_id in parsed):
            return None
        room_types = list(queryset.filter(pk__in=parsed))
        if len(room_types) != len(set(parsed)):
            return None
        return room_types


# =============================================================================
# PROMOTIONS & SURCHARGES
# =============================================================================

class StayRuleView(RateInputMixin, View):
    """
    API: List (GET) or create (POST) promotions or surcharges.

    POST body: {"name", "date_start", "date_end", "target_season",
                "room_type_id", "package_code", "weekday_mask", "is_active",
                and the rule's own fields}
    """
    model = None
    value_fields = []
    int_fields = []

    def serialize(self, rule):
        data = {
            'id': rule.id,
            'name': rule.name,
            'date_start': rule.date_start,
            'date_end': rule.date_end,
            'target_season': rule.target_season,
            'room_type_id': rule.room_type_id,
            'package_code': rule.package_code,
            'weekday_mask': rule.weekday_mask,
            'is_active': rule.is_active,
        }
        for field in self.value_fields + self.int_fields:
            data[field] = getattr(rule, field)
        return data

    def get(self, request, *args, **kwargs):
        resort = self.get_resort()
        rules = self.model.objects.filter(resort=resort)
        if request.GET.get('active') == '1':
            rules = rules.filter(is_active=True)
        return self.success_response(data=[self.serialize(rule) for rule in rules])

    def post(self, request, *args, **kwargs):
        resort = self.get_resort()

        data = self.parse_json_body()
        if data is None:
            return self.error_response('Invalid JSON')

        rule = self.model(resort=resort)

        for field in ('name', 'package_code', 'weekday_mask'):
            value = self.parse_text(data.get(field))
            if value is None:
                return self.error_response(f'{field} must be a string')
            setattr(rule, field, value)

        rule.date_start = self.parse_date(data.get('date_start'))
        rule.date_end = self.parse_date(data.get('date_end'))
        if not rule.date_start or not rule.date_end:
            return self.error_response('Valid date_start and date_end are required')

        target_season = data.get('target_season') or TARGET_ANY
        if not isinstance(target_season, str):
            return self.error_response('target_season must be a string')
        rule.target_season = target_season

        if data.get('room_type_id') not in (None, ''):
            room_types = self.get_room_types(resort, [data['room_type_id']])
            if not room_types:
                return self.error_response('Invalid room_type_id')
            rule.room_type = room_types[0]

        if 'is_active' in data:
            if not isinstance(data['is_active'], bool):
                return self.error_response('is_active must be true or false')
            rule.is_active = data['is_active']

        for field in self.value_fields:
            value = self.parse_decimal(data.get(field), default=None)
            if value is None:
                return self.error_response(f'{field} must be a number')
            setattr(rule, field, value)
        for field in self.int_fields:
            value = self.parse_int(data.get(field), 0)
            if value is None or value < 0:
                return self.error_response(f'{field} must be a non-negative integer')
            setattr(rule, field, value)

        try:
            rule.full_clean()
        except ValidationError as e:
            return self.error_response(validation_message(e))

        rule.save()
        logger.info("Created %s %s for %s", self.model._meta.verbose_name, rule.pk, resort.code)

        return self.success_response(
            data=self.serialize(rule),
            message=f'{self.model._meta.verbose_name} saved',
            status=201,
        )


class PromotionView(StayRuleView):
    model = Promotion
    value_fields = ['percent_off']
    int_fields = ['min_days_in_advance']


class SurchargeView(StayRuleView):
    model = Surcharge
    value_fields = ['amount_per_pax']


# =============================================================================
# RATE CALENDAR, OVERRIDES & RESTRICTIONS
# =============================================================================

class RateCalendarView(RateInputMixin, View):
    """
    API: Nightly rates per room type.

    GET params: start=YYYY-MM-DD, end=YYYY-MM-DD, room_type (repeatable;
    default all active room types)
    """

    def get(self, request, *args, **kwargs):
        resort = self.get_resort()

        start, end, error = self.parse_span(request.GET.get('start'), request.GET.get('end'))
        if error:
            return self.error_response(error)

        room_types = self.get_room_types(resort, request.GET.getlist('room_type'))
        if room_types is None:
            return self.error_response('Unknown room type')

        return self.success_response(data=get_rates_for_range(resort, room_types, start, end))


class RateOverrideView(RateInputMixin, View):
    """
    API: Apply one override to many room types and dates.

    POST body: {"room_type_ids": [...], "date_start", "date_end",
                "weekdays": [1-7, ...], "override_type", "value", "note"}
    """

    def post(self, request, *args, **kwargs):
        resort = self.get_resort()

        data = self.parse_json_body()
        if data is None:
            return self.error_response('Invalid JSON')

        start, end, error = self.parse_span(data.get('date_start'), data.get('date_end'))
        if error:
            return self.error_response(error)

        weekdays = self.parse_weekdays(data.get('weekdays'))
        if weekdays is None:
            return self.error_response('weekdays must be a list of numbers from 1 (Monday) to 7 (Sunday)')

        room_type_ids = data.get('room_type_ids') or []
        if not isinstance(room_type_ids, list):
            return self.error_response('room_type_ids must be a list')
        room_types = self.get_room_types(resort, room_type_ids)
        if not room_types:
            return self.error_response('Unknown room type')

        override_type = data.get('override_type')
        if override_type not in [choice for choice, _ in RoomRateOverride.OVERRIDE_TYPE_CHOICES]:
            return self.error_response(f'Unknown override type: {override_type}')

        value = self.parse_decimal(data.get('value'), default=None)
        if value is None:
            return self.error_response('value must be a number')

        note = self.parse_text(data.get('note'))
        if note is None:
            return self.error_response('note must be a string')

        try:
            count = bulk_apply_overrides(
                room_types, list(iter_days(start, end)), override_type, value, note, weekdays,
            )
        except Exception as e:
            logger.exception("Rate override save error")
            return self.json_response({'success': False, 'message': str(e)}, status=500)

        return self.success_response(data={'saved': count}, message=f'Saved {count} overrides')


class RateOverrideDeleteView(RateInputMixin, View):
    """API: Remove the override of one room type on one date."""

    def post(self, request, *args, **kwargs):
        resort = self.get_resort()

        data = self.parse_json_body()
        if data is None:
            return self.error_response('Invalid JSON')

        room_types = self.get_room_types(resort, [data.get('room_type_id')])
        day = self.parse_date(data.get('date'))
        if not room_types or day is None:
            return self.error_response('Valid room_type_id and date are required')

        if not delete_rate_override(room_types[0], day):
            return self.error_response('Override not found', status=404)

        return self.success_response(message='Override deleted')


class RestrictionView(RateInputMixin, View):
    """
    API: Apply the same restrictions to many room types and dates.

    POST body: {"room_type_ids": [...], "date_start", "date_end",
                "weekdays": [...], "restrictions": {"is_closed", "min_los", ...}}
    """

    BOOL_FIELDS = ['is_closed', 'close_to_arrival', 'close_to_departure']
    INT_FIELDS = ['min_los', 'max_los', 'min_advance_days', 'max_advance_days']

    def parse_restrictions(self, values):
        """Returns (restrictions, error)."""
        if not isinstance(values, dict):
            return None, 'restrictions must be an object'

        unknown = set(values) - set(RoomRateRestriction.RULE_FIELDS)
        if unknown:
            return None, f"Unknown restriction fields: {', '.join(sorted(unknown))}"

        restrictions = {}
        for field in self.BOOL_FIELDS:
            if field in values:
                if not isinstance(values[field], bool):
                    return None, f'{field} must be true or false'
                restrictions[field] = values[field]
        for field in self.INT_FIELDS:
            if field in values:
                if values[field] is None:
                    restrictions[field] = None
                    continue
                number = self.parse_int(values[field])
                if number is None or number < 0:
                    return None, f'{field} must be a non-negative integer'
                restrictions[field] = number
        if 'notes' in values:
            notes = self.parse_text(values['notes'])
            if notes is None:
                return None, 'notes must be a string'
            restrictions['notes'] = notes

        try:
            RoomRateRestriction(**restrictions).clean()
        except ValidationError as e:
            return None, validation_message(e)
        return restrictions, None

    def post(self, request, *args, **kwargs):
        resort = self.get_resort()

        data = self.parse_json_body()
        if data is None:
            return self.error_response('Invalid JSON')

        start, end, error = self.parse_span(data.get('date_start'), data.get('date_end'))
        if error:
            return self.error_response(error)

        weekdays = self.parse_weekdays(data.get('weekdays'))
        if weekdays is None:
            return self.error_response('weekdays must be a list of numbers from 1 (Monday) to 7 (Sunday)')

        room_type_ids = data.get('room_type_ids') or []
        if not isinstance(room_type_ids, list):
            return self.error_response('room_type_ids must be a list')
        room_types = self.get_room_types(resort, room_type_ids)
        if not room_types:
            return self.error_response('Unknown room type')

        restrictions, error = self.parse_restrictions(data.get('restrictions'))
        if error:
            return self.error_response(error)

        try:
            count = bulk_apply_restrictions(room_types, list(iter_days(start, end)), restrictions, weekdays)
        except Exception as e:
            logger.exception("Rate restriction save error")
            return self.json_response({'success': False, 'message': str(e)}, status=500)

        return self.success_response(data={'saved': count}, message=f'Saved {count} restrictions')
