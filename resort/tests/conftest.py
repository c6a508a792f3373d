from datetime import date
from decimal import Decimal

import pytest

from resort.models import Resort, RoomType, Booking


@pytest.fixture
def resort(db):
    return Resort.objects.create(name='Redang Beach Resort', code='redang')


@pytest.fixture
def room_type(resort):
    return RoomType.objects.create(
        resort=resort,
        name='Garden Chalet',
        cost_room=Decimal('120.00'),
        price_room=Decimal('250.00'),
    )


@pytest.fixture
def make_booking(resort):
    """Create a booking with explicit totals, bypassing the calculator."""

    def _make(check_in, check_out, price_total='0', cost_total='0', **kwargs):
        kwargs.setdefault('status', Booking.STATUS_CONFIRMED)
        return Booking.objects.create(
            resort=resort,
            check_in=check_in,
            check_out=check_out,
            price_total=Decimal(price_total),
            cost_total=Decimal(cost_total),
            **kwargs
        )

    return _make


@pytest.fixture
def march_2025():
    return date(2025, 3, 1)
