import json
from datetime import date
from decimal import Decimal

import pytest
from django.urls import reverse

from resort.models import (
    Booking,
    Expense,
    Overhead,
    Promotion,
    RoomRateOverride,
    RoomRateRestriction,
    SeasonAssignment,
    SeasonRange,
)


def post_json(client, url, payload):
    return client.post(url, data=json.dumps(payload), content_type='application/json')


def url(name, resort, **kwargs):
    return reverse(f'resort:{name}', kwargs={'resort_code': resort.code, **kwargs})


@pytest.mark.django_db
class TestPricingViews:

    def test_quote(self, client, resort, room_type):
        response = post_json(client, url('booking_quote', resort), {
            'check_in': '2025-03-03',
            'check_out': '2025-03-05',
            'room_type_id': room_type.id,
            'pax_adult': 2,
            'margin_pct': 0,
            'round_to_rm5': False,
        })

        assert response.status_code == 200
        data = response.json()
        assert data['success'] is True
        assert data['data']['nights'] == 2
        assert data['data']['price_total'] == 500.0
        assert data['data']['cost_total'] == 240.0
        assert len(data['data']['season_snapshot']) == 2
        assert not Booking.objects.exists()

    def test_quote_rejects_reversed_dates(self, client, resort):
        response = post_json(client, url('booking_quote', resort), {
            'check_in': '2025-03-05',
            'check_out': '2025-03-03',
        })

        assert response.status_code == 400
        assert response.json() == {'success': False, 'error': 'check_out must not be before check_in'}

    def test_quote_rejects_unknown_overhead_mode(self, client, resort):
        response = post_json(client, url('booking_quote', resort), {
            'check_in': '2025-03-03',
            'check_out': '2025-03-05',
            'overhead_mode': 'per_guest',
        })

        assert response.status_code == 400
        assert response.json()['success'] is False

    def test_invalid_json(self, client, resort):
        response = client.post(url('booking_quote', resort), data='{oops', content_type='application/json')
        assert response.status_code == 400

    def test_unknown_resort(self, client, db):
        response = post_json(client, '/resort/nowhere/api/pricing/quote/', {})
        assert response.status_code == 404

    def test_create_booking(self, client, resort, room_type):
        response = post_json(client, url('booking_create', resort), {
            'check_in': '2025-03-03',
            'check_out': '2025-03-04',
            'room_type_id': room_type.id,
            'guest_name': '  Aminah ',
            'status': 'confirmed',
        })

        assert response.status_code == 201
        booking = Booking.objects.get()
        assert booking.guest_name == 'Aminah'
        assert booking.status == Booking.STATUS_CONFIRMED
        assert response.json()['data']['id'] == booking.id

    def test_create_booking_rejects_unknown_status(self, client, resort):
        response = post_json(client, url('booking_create', resort), {
            'check_in': '2025-03-03',
            'check_out': '2025-03-04',
            'status': 'maybe',
        })

        assert response.status_code == 400
        assert not Booking.objects.exists()

    def test_quote_rejects_non_numeric_room_type(self, client, resort):
        response = post_json(client, url('booking_quote', resort), {
            'check_in': '2025-03-03',
            'check_out': '2025-03-05',
            'room_type_id': 'abc',
        })

        assert response.status_code == 400
        assert response.json() == {'success': False, 'error': 'Invalid room_type_id'}

    def test_quote_rounding_flag_must_be_boolean(self, client, resort):
        response = post_json(client, url('booking_quote', resort), {
            'check_in': '2025-03-03',
            'check_out': '2025-03-05',
            'round_to_rm5': 'false',
        })

        assert response.status_code == 400
        assert response.json()['error'] == 'round_to_rm5 must be true or false'

    def test_create_booking_rejects_non_string_guest_name(self, client, resort):
        response = post_json(client, url('booking_create', resort), {
            'check_in': '2025-03-03',
            'check_out': '2025-03-04',
            'guest_name': ['Aminah'],
        })

        assert response.status_code == 400
        assert not Booking.objects.exists()

    def test_create_booking_refuses_restricted_stay(self, client, resort, room_type):
        RoomRateRestriction.objects.create(resort=resort, room_type=room_type,
                                           date=date(2025, 3, 3), close_to_arrival=True)

        response = post_json(client, url('booking_create', resort), {
            'check_in': '2025-03-03',
            'check_out': '2025-03-04',
            'room_type_id': room_type.id,
        })

        assert response.status_code == 400
        assert response.json() == {'success': False, 'error': 'No arrivals on 2025-03-03'}
        assert not Booking.objects.exists()

    def test_profit_plan(self, client, resort):
        response = client.get(url('profit_plan', resort), {
            'overhead_monthly': '77000',
            'avg_package_price': '1500',
            'avg_profit_margin': '25',
            'total_rooms': '10',
        })

        assert response.status_code == 200
        data = response.json()['data']
        assert data['breakeven_packages'] == 206
        assert data['breakeven_occupancy'] == 68.7


@pytest.mark.django_db
class TestForecastViews:

    def test_monthly_forecast(self, client, resort, make_booking):
        Overhead.objects.create(resort=resort, month=date(2025, 3, 1), overhead_monthly=Decimal('1000'))
        make_booking(date(2025, 3, 1), date(2025, 3, 4), price_total='1000', cost_total='600')

        response = client.get(url('monthly_forecast_ajax', resort), {'month': '2025-03'})

        assert response.status_code == 200
        forecast = response.json()['forecast']
        assert forecast['total_bookings'] == 1
        assert forecast['net_profit'] == -600.0
        assert forecast['breakeven_bookings'] == 3

    def test_monthly_forecast_bad_month(self, client, resort):
        response = client.get(url('monthly_forecast_ajax', resort), {'month': 'soon'})
        assert response.status_code == 400

    def test_dashboard(self, client, resort):
        response = client.get(url('dashboard_data_ajax', resort))

        assert response.status_code == 200
        assert set(response.json()['data']) == {
            'forecast', 'revenue_by_room_type', 'season_mix', 'profit_by_month', 'occupancy',
        }

    def test_forecast_pdf(self, client, resort):
        response = client.get(url('forecast_report_pdf', resort), {'month': '2025-03'})

        assert response.status_code == 200
        assert response['Content-Type'] == 'application/pdf'
        assert response.content.startswith(b'%PDF')


@pytest.mark.django_db
class TestSeasonViews:

    def test_create_and_list_range(self, client, resort):
        response = post_json(client, url('season_ranges', resort), {
            'date_start': '2025-03-01',
            'date_end': '2025-03-03',
            'season': 'high',
            'description': 'Sports week',
        })

        assert response.status_code == 201
        assert response.json()['data']['days_written'] == 3
        assert SeasonAssignment.objects.filter(resort=resort, season='high').count() == 3

        listing = client.get(url('season_ranges', resort), {'year': 2025}).json()
        assert [r['description'] for r in listing['data']] == ['Sports week']

    def test_range_rejects_unknown_season(self, client, resort):
        response = post_json(client, url('season_ranges', resort), {
            'date_start': '2025-03-01',
            'date_end': '2025-03-03',
            'season': 'peak',
        })
        assert response.status_code == 400
        assert not SeasonRange.objects.exists()

    def test_delete_range(self, client, resort):
        season_range = SeasonRange.objects.create(
            resort=resort, date_start=date(2025, 3, 1), date_end=date(2025, 3, 2), season='low',
        )

        response = client.post(url('season_range_delete', resort, pk=season_range.pk))
        assert response.status_code == 200
        assert not SeasonRange.objects.exists()

        response = client.post(url('season_range_delete', resort, pk=season_range.pk))
        assert response.status_code == 404

    def test_assignments(self, client, resort):
        response = post_json(client, url('season_assignments', resort), {
            'assignments': [
                {'date': '2025-03-01', 'season': 'high', 'is_holiday': True},
                {'date': '2025-03-02', 'season': 'low'},
            ],
        })
        assert response.status_code == 200
        assert response.json()['data'] == {'saved': 2}

        data = client.get(url('season_assignments', resort), {'year': 2025}).json()['data']
        assert data['assignments'][0] == {
            'date': '2025-03-01', 'season': 'high', 'is_holiday': True, 'description': None,
        }
        assert len(data['months']) == 12

    def test_assignments_reject_bad_date(self, client, resort):
        response = post_json(client, url('season_assignments', resort), {
            'assignments': [{'date': '2025-02-30', 'season': 'high'}],
        })
        assert response.status_code == 400
        assert not SeasonAssignment.objects.exists()

    def test_settings(self, client, resort):
        data = client.get(url('season_settings', resort)).json()['data']
        assert data['high_pct'] == 30.0
        assert data['multipliers']['low'] == 0.9

        response = post_json(client, url('season_settings', resort), {'high_pct': 40, 'round_to_rm5': False})
        assert response.status_code == 200
        assert response.json()['data']['multipliers']['high'] == 1.4
        resort.season_settings.refresh_from_db()
        assert resort.season_settings.round_to_rm5 is False

    def test_settings_reject_out_of_range_percent(self, client, resort):
        response = post_json(client, url('season_settings', resort), {'mid_pct': -250})

        assert response.status_code == 400
        assert response.json()['success'] is False
        assert 'mid_pct' in response.json()['error']
        resort.season_settings.refresh_from_db()
        assert resort.season_settings.mid_pct == Decimal('0')

    def test_settings_rounding_flag_must_be_boolean(self, client, resort):
        response = post_json(client, url('season_settings', resort), {'round_to_rm5': 'false'})

        assert response.status_code == 400
        resort.season_settings.refresh_from_db()
        assert resort.season_settings.round_to_rm5 is True

    def test_range_span_is_capped(self, client, resort):
        response = post_json(client, url('season_ranges', resort), {
            'date_start': '2025-01-01',
            'date_end': '2030-12-31',
            'season': 'high',
        })

        assert response.status_code == 400
        assert not SeasonRange.objects.exists()
        assert not SeasonAssignment.objects.exists()

    def test_range_description_must_be_text(self, client, resort):
        response = post_json(client, url('season_ranges', resort), {
            'date_start': '2025-03-01',
            'date_end': '2025-03-03',
            'season': 'high',
            'description': 42,
        })

        assert response.status_code == 400
        assert not SeasonRange.objects.exists()

    def test_overhead_upsert(self, client, resort):
        response = post_json(client, url('overheads', resort), {
            'month': '2025-03',
            'overhead_monthly': '77000',
            'allocation_mode': 'per_room_day',
            'overhead_per_room_day': '85',
        })
        assert response.status_code == 201
        assert response.json()['data']['overhead_daily'] == pytest.approx(2566.67)

        response = post_json(client, url('overheads', resort), {
            'month': '2025-03-15',
            'overhead_monthly': '60000',
        })
        assert response.status_code == 200
        overhead = Overhead.objects.get(resort=resort)
        assert overhead.month == date(2025, 3, 1)
        assert overhead.overhead_monthly == Decimal('60000')
        assert overhead.overhead_daily == Decimal('2000.00')

    def test_overhead_rejects_unknown_mode(self, client, resort):
        response = post_json(client, url('overheads', resort), {
            'month': '2025-03',
            'overhead_monthly': '77000',
            'allocation_mode': 'per_guest',
        })
        assert response.status_code == 400


@pytest.mark.django_db
class TestExpenseViews:

    def create(self, client, resort, **payload):
        body = {
            'expense_date': '2025-03-05',
            'vendor': 'TNB',
            'category': 'utilities',
            'subtotal': '100.00',
            'tax': '6.00',
        }
        body.update(payload)
        return post_json(client, url('expenses', resort), body)

    def test_create_and_list(self, client, resort):
        response = self.create(client, resort)
        assert response.status_code == 201
        assert response.json()['data']['total'] == 106.0

        listing = client.get(url('expenses', resort), {'month': '2025-03'}).json()['data']
        assert listing['month'] == '2025-03'
        assert [e['vendor'] for e in listing['expenses']] == ['TNB']

    def test_create_validates(self, client, resort):
        assert self.create(client, resort, expense_date='').status_code == 400
        assert self.create(client, resort, category='snacks').status_code == 400
        assert self.create(client, resort, subtotal='-5').status_code == 400
        assert self.create(client, resort, payment_method='cheque').status_code == 400
        assert not Expense.objects.exists()

    def test_text_fields_must_be_strings(self, client, resort):
        response = self.create(client, resort, vendor=123)

        assert response.status_code == 400
        assert response.json() == {'success': False, 'error': 'vendor must be a string'}
        assert self.create(client, resort, description={'note': 'x'}).status_code == 400
        assert not Expense.objects.exists()

    def test_list_filters_by_category(self, client, resort):
        self.create(client, resort)
        self.create(client, resort, vendor='Petronas', category='fuel')

        listing = client.get(url('expenses', resort), {'month': '2025-03', 'category': 'fuel'}).json()['data']
        assert [e['vendor'] for e in listing['expenses']] == ['Petronas']

    def test_update_recomputes_total(self, client, resort):
        expense_id = self.create(client, resort).json()['data']['id']

        response = post_json(client, url('expense_update', resort, pk=expense_id), {'subtotal': '200.00'})

        assert response.status_code == 200
        assert response.json()['data']['total'] == 206.0

    def test_delete(self, client, resort):
        expense_id = self.create(client, resort).json()['data']['id']

        response = client.post(url('expense_delete', resort, pk=expense_id))

        assert response.status_code == 200
        assert not Expense.objects.exists()

    def test_bills(self, client, resort):
        expense_id = self.create(client, resort).json()['data']['id']

        response = post_json(client, url('expense_bills', resort, pk=expense_id), {
            'add': ['https://files.example.com/a.pdf', 'https://files.example.com/b.pdf'],
        })
        assert response.json()['data']['bill_urls'] == [
            'https://files.example.com/a.pdf', 'https://files.example.com/b.pdf',
        ]

        response = post_json(client, url('expense_bills', resort, pk=expense_id), {
            'remove': 'https://files.example.com/a.pdf',
        })
        assert response.json()['data']['bill_urls'] == ['https://files.example.com/b.pdf']

    def test_summary_and_trend(self, client, resort):
        self.create(client, resort)

        summary = client.get(url('expense_summary', resort), {'month': '2025-03'}).json()['data']
        assert summary == {'month': '2025-03', 'total': 106.0, 'by_category': {'utilities': 106.0}, 'count': 1}

        trend = client.get(url('expense_trend', resort), {'year': 2025}).json()['data']
        assert trend['months'][2]['total'] == 106.0

    def test_export(self, client, resort):
        self.create(client, resort)

        response = client.get(url('expense_export', resort), {'month': '2025-03'})

        assert response.status_code == 200
        assert response['Content-Type'].startswith('text/csv')
        assert 'attachment; filename="redang_expenses_2025_03.csv"' == response['Content-Disposition']
        assert b'TNB' in response.content


@pytest.mark.django_db
class TestRateViews:

    def test_create_and_list_promotion(self, client, resort):
        response = post_json(client, url('promotions', resort), {
            'name': 'Early Bird',
            'date_start': '2025-03-01',
            'date_end': '2025-03-31',
            'percent_off': 10,
            'min_days_in_advance': 30,
            'weekday_mask': '1234',
        })

        assert response.status_code == 201
        promotion = Promotion.objects.get()
        assert promotion.percent_off == Decimal('10')
        assert promotion.target_season == 'any'

        listing = client.get(url('promotions', resort)).json()['data']
        assert [p['name'] for p in listing] == ['Early Bird']

    def test_promotion_validates(self, client, resort):
        body = {'name': 'Too Good', 'date_start': '2025-03-01', 'date_end': '2025-03-31'}

        assert post_json(client, url('promotions', resort), dict(body, percent_off=150)).status_code == 400
        assert post_json(client, url('promotions', resort), dict(body, percent_off=10, weekday_mask='89')).status_code == 400
        assert post_json(client, url('promotions', resort), dict(body, percent_off=10, date_end='2025-02-01')).status_code == 400
        assert not Promotion.objects.exists()

    def test_create_surcharge(self, client, resort, room_type):
        response = post_json(client, url('surcharges', resort), {
            'name': 'Regatta',
            'date_start': '2025-03-07',
            'date_end': '2025-03-08',
            'room_type_id': room_type.id,
            'amount_per_pax': '35.00',
        })

        assert response.status_code == 201
        assert response.json()['data']['room_type_id'] == room_type.id

    def test_weekend_override_shows_in_calendar(self, client, resort, room_type):
        response = post_json(client, url('rate_overrides', resort), {
            'room_type_ids': [room_type.id],
            'date_start': '2025-03-03',
            'date_end': '2025-03-09',
            'weekdays': [6, 7],
            'override_type': 'set',
            'value': 300,
        })
        assert response.status_code == 200
        assert response.json()['data'] == {'saved': 2}

        calendar = client.get(url('rate_calendar', resort), {
            'start': '2025-03-07', 'end': '2025-03-08', 'room_type': room_type.id,
        }).json()['data']
        friday, saturday = calendar[0]['rates']
        assert friday['override_applied'] is False
        assert friday['price'] == 250.0
        assert saturday['price'] == 300.0

    def test_override_rejects_bad_input(self, client, resort, room_type):
        body = {
            'room_type_ids': [room_type.id],
            'date_start': '2025-03-03',
            'date_end': '2025-03-09',
            'override_type': 'set',
            'value': 300,
        }

        assert post_json(client, url('rate_overrides', resort), dict(body, override_type='double')).status_code == 400
        assert post_json(client, url('rate_overrides', resort), dict(body, weekdays=[0, 8])).status_code == 400
        assert post_json(client, url('rate_overrides', resort), dict(body, room_type_ids=[9999])).status_code == 400
        assert post_json(client, url('rate_overrides', resort), dict(body, date_end='2027-01-01')).status_code == 400
        assert not RoomRateOverride.objects.exists()

    def test_delete_override(self, client, resort, room_type):
        RoomRateOverride.objects.create(resort=resort, room_type=room_type, date=date(2025, 3, 3),
                                        override_type='set', value=Decimal('300'))
        body = {'room_type_id': room_type.id, 'date': '2025-03-03'}

        assert post_json(client, url('rate_override_delete', resort), body).status_code == 200
        assert post_json(client, url('rate_override_delete', resort), body).status_code == 404

    def test_restrictions(self, client, resort, room_type):
        response = post_json(client, url('rate_restrictions', resort), {
            'room_type_ids': [room_type.id],
            'date_start': '2025-03-03',
            'date_end': '2025-03-03',
            'restrictions': {'min_los': 3, 'close_to_departure': False},
        })
        assert response.status_code == 200

        response = post_json(client, url('booking_create', resort), {
            'check_in': '2025-03-03',
            'check_out': '2025-03-05',
            'room_type_id': room_type.id,
        })
        assert response.status_code == 400
        assert response.json()['error'] == 'Stays from 2025-03-03 need at least 3 nights'

    def test_restrictions_reject_bad_input(self, client, resort, room_type):
        body = {'room_type_ids': [room_type.id], 'date_start': '2025-03-03', 'date_end': '2025-03-03'}

        for restrictions in ({'min_nights': 2}, {'is_closed': 'yes'}, {'min_los': -1}, {'min_los': 4, 'max_los': 2}):
            response = post_json(client, url('rate_restrictions', resort), dict(body, restrictions=restrictions))
            assert response.status_code == 400
        assert not RoomRateRestriction.objects.exists()
