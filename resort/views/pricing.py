"""
Pricing views: booking quotes, booking creation and the profit planner.
"""

import logging
from datetime import date
from decimal import Decimal

from django.shortcuts import get_object_or_404
from django.views.generic import View

from resort.models import RoomType, Booking
from resort.services import (
    BookingPricingService,
    MonthlyForecastService,
    RestrictionError,
    calculate_profit_plan,
)
from resort.services.pricing_service import OVERHEAD_MODES

from .mixins import ResortMixin

logger = logging.getLogger(__name__)


class BookingInputMixin(ResortMixin):
    """Parses and validates the stay and rate inputs of a quote request."""

    def parse_booking_inputs(self, data, resort):
        """
        Returns (kwargs, error). ``kwargs`` feeds BookingPricingService.quote.
        """
        check_in = self.parse_date(data.get('check_in'))
        check_out = self.parse_date(data.get('check_out'))
        if not check_in or not check_out:
            return None, 'Valid check_in and check_out dates are required'
        if check_out < check_in:
            return None, 'check_out must not be before check_in'

        pax_adult = self.parse_int(data.get('pax_adult'), 2)
        pax_child = self.parse_int(data.get('pax_child'), 0)
        if pax_adult is None or pax_child is None or pax_adult < 0 or pax_child < 0:
            return None, 'Pax counts must be non-negative integers'

        kwargs = {
            'check_in': check_in,
            'check_out': check_out,
            'pax_adult': pax_adult,
            'pax_child': pax_child,
            'room_multiplier': self.parse_decimal(data.get('room_multiplier'), Decimal('1.00')),
        }

        if data.get('room_type_id') not in (None, ''):
            room_type_id = self.parse_int(data['room_type_id'])
            if room_type_id is None or isinstance(data['room_type_id'], bool):
                return None, 'Invalid room_type_id'
            kwargs['room_type'] = get_object_or_404(RoomType, pk=room_type_id, resort=resort)

        for field in BookingPricingService.RATE_FIELDS:
            if data.get(field) not in (None, ''):
                kwargs[field] = self.parse_decimal(data[field])

        if data.get('margin_pct') not in (None, ''):
            kwargs['margin_pct'] = self.parse_decimal(data['margin_pct'])

        overhead_mode = data.get('overhead_mode')
        if overhead_mode:
            if overhead_mode not in OVERHEAD_MODES:
                return None, f'Unknown overhead mode: {overhead_mode}'
            kwargs['overhead_mode'] = overhead_mode
            kwargs['overhead_rate'] = self.parse_decimal(data.get('overhead_rate'))

        if 'round_to_rm5' in data:
            if not isinstance(data['round_to_rm5'], bool):
                return None, 'round_to_rm5 must be true or false'
            kwargs['round_to_rm5'] = data['round_to_rm5']

        package_code = self.parse_text(data.get('package_code'))
        if package_code is None:
            return None, 'package_code must be a string'
        kwargs['package_code'] = package_code

        if data.get('booked_on') not in (None, ''):
            booked_on = self.parse_date(data['booked_on'])
            if booked_on is None:
                return None, 'booked_on must be a YYYY-MM-DD date'
            kwargs['booked_on'] = booked_on

        return kwargs, None


class BookingQuoteView(BookingInputMixin, View):
    """API: Price a stay without saving it."""

    def post(self, request, *args, **kwargs):
        resort = self.get_resort()

        data = self.parse_json_body()
        if data is None:
            return self.error_response('Invalid JSON')

        inputs, error = self.parse_booking_inputs(data, resort)
        if error:
            return self.error_response(error)

        try:
            quote = BookingPricingService(resort).quote(**inputs)
        except Exception as e:
            logger.exception("Booking quote error")
            return self.json_response({'success': False, 'message': str(e)}, status=500)

        return self.success_response(data=quote)


class BookingCreateView(BookingInputMixin, View):
    """API: Quote a stay and save it as a booking."""

    def post(self, request, *args, **kwargs):
        resort = self.get_resort()

        data = self.parse_json_body()
        if data is None:
            return self.error_response('Invalid JSON')

        inputs, error = self.parse_booking_inputs(data, resort)
        if error:
            return self.error_response(error)

        status = data.get('status') or Booking.STATUS_PENDING
        if status not in [choice for choice, _ in Booking.STATUS_CHOICES]:
            return self.error_response(f'Unknown status: {status}')

        guest_name = self.parse_text(data.get('guest_name'))
        if guest_name is None:
            return self.error_response('guest_name must be a string')

        try:
            booking = BookingPricingService(resort).create_booking(
                guest_name=guest_name,
                status=status,
                **inputs
            )
        except RestrictionError as e:
            return self.error_response(str(e))
        except Exception as e:
            logger.exception("Booking create error")
            return self.json_response({'success': False, 'message': str(e)}, status=500)

        return self.success_response(
            data={
                'id': booking.id,
                'nights': booking.nights,
                'cost_total': booking.cost_total,
                'price_total': booking.price_total,
                'profit_total': booking.profit_total,
                'season_snapshot': booking.season_snapshot,
                'applied_rules': booking.applied_rules,
            },
            message='Booking created successfully',
            status=201,
        )


class ProfitPlanView(ResortMixin, View):
    """
    API: What-if breakeven planner.

    Params: avg_package_price, avg_profit_margin, total_rooms, month
    Overhead defaults to the resolved overhead of ``month`` (current month).
    """

    def get(self, request, *args, **kwargs):
        resort = self.get_resort()

        month = request.GET.get('month') or None
        try:
            forecast_service = MonthlyForecastService(resort)
            if request.GET.get('overhead_monthly'):
                overhead = self.parse_decimal(request.GET['overhead_monthly'])
            else:
                overhead = forecast_service.resolve_overhead_monthly(month or date.today())
        except ValueError as e:
            return self.error_response(str(e))

        total_rooms = self.parse_int(request.GET.get('total_rooms'))
        if total_rooms is None:
            total_rooms = resort.active_room_type_count or 10

        plan = calculate_profit_plan(
            overhead_monthly=overhead,
            avg_package_price=self.parse_decimal(request.GET.get('avg_package_price'), Decimal('1500')),
            avg_profit_margin=self.parse_decimal(request.GET.get('avg_profit_margin'), Decimal('25')),
            total_rooms=total_rooms,
        )
        return self.success_response(data=plan)
