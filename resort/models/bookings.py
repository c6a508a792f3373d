"""
Booking model.
"""

from django.db import models
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from decimal import Decimal

from .core import Resort, RoomType, Overhead


def money_field(**kwargs):
    kwargs.setdefault('default', Decimal('0.00'))
    return models.DecimalField(max_digits=12, decimal_places=2, **kwargs)


class BookingQuerySet(models.QuerySet):

    def active(self):
        """Bookings that count toward revenue and occupancy."""
        return self.filter(status__in=Booking.ACTIVE_STATUSES)

    def checking_in_between(self, start, end):
        return self.filter(check_in__gte=start, check_in__lte=end)

    def staying_on(self, day):
        """Bookings whose stay covers the night of ``day``."""
        return self.filter(check_in__lte=day, check_out__gt=day)


class Booking(models.Model):
    """
    A package booking with its cost/price inputs and computed totals.

    The unit rates, season multiplier and surcharge are copied in when the
    booking is created, and ``season_snapshot`` records the season of every
    night at that moment. Reports read the snapshot and never look the
    season up again, so repainting the calendar does not rewrite history.
    """
    STATUS_PENDING = 'pending'
    STATUS_CONFIRMED = 'confirmed'
    STATUS_COMPLETED = 'completed'
    STATUS_CANCELLED = 'cancelled'

    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending'),
        (STATUS_CONFIRMED, 'Confirmed'),
        (STATUS_COMPLETED, 'Completed'),
        (STATUS_CANCELLED, 'Cancelled'),
    ]

    ACTIVE_STATUSES = [STATUS_PENDING, STATUS_CONFIRMED, STATUS_COMPLETED]

    resort = models.ForeignKey(
        Resort,
        on_delete=models.CASCADE,
        related_name='bookings',
    )
    room_type = models.ForeignKey(
        RoomType,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='bookings',
    )
    guest_name = models.CharField(max_length=200, blank=True)

    # Stay
    check_in = models.DateField(db_index=True)
    check_out = models.DateField()
    nights = models.PositiveIntegerField(default=0)
    pax_adult = models.PositiveIntegerField(default=2)
    pax_child = models.PositiveIntegerField(default=0)
    room_multiplier = models.DecimalField(
        max_digits=6,
        decimal_places=2,
        default=Decimal('1.00'),
        validators=[MinValueValidator(0)],
        help_text="Occupancy-based scalar applied to the room rate"
    )

    # Unit rates (copied at booking time)
    cost_room = money_field()
    price_room = money_field()
    meal_cost_adult = money_field()
    meal_cost_child = money_field()
    meal_price_adult = money_field()
    meal_price_child = money_field()
    boat_cost_adult = money_field()
    boat_cost_child = money_field()
    boat_price_adult = money_field()
    boat_price_child = money_field()
    addons_cost = money_field()
    addons_price = money_field()

    # Adjustments applied at booking time
    season_mult = models.DecimalField(max_digits=6, decimal_places=4, default=Decimal('1.0000'))
    surcharge_pct = models.DecimalField(max_digits=6, decimal_places=2, default=Decimal('0.00'))
    margin_pct = models.DecimalField(max_digits=6, decimal_places=2, default=Decimal('0.00'))
    overhead_mode = models.CharField(
        max_length=20,
        choices=Overhead.ALLOCATION_MODES,
        default=Overhead.ALLOCATION_NONE,
    )
    overhead_rate = money_field()
    round_to_rm5 = models.BooleanField(default=True)

    season_snapshot = models.JSONField(
        default=list,
        blank=True,
        help_text="Per-night [{date, season}] recorded when the booking was created"
    )
    package_code = models.CharField(max_length=50, blank=True)
    applied_rules = models.JSONField(
        default=list,
        blank=True,
        help_text="Promotions and surcharges applied when the booking was priced"
    )

    status = models.CharField(
        max_length=20,
        choices=STATUS_CHOICES,
        default=STATUS_PENDING,
        db_index=True,
    )

    # Totals
    cost_total = money_field()
    price_total = money_field()
    profit_total = money_field()

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = BookingQuerySet.as_manager()

    class Meta:
        ordering = ['-check_in']
        indexes = [
            models.Index(fields=['resort', 'check_in'], name='booking_resort_checkin_idx'),
            models.Index(fields=['resort', 'status'], name='booking_resort_status_idx'),
        ]
        verbose_name = "Booking"
        verbose_name_plural = "Bookings"

    def __str__(self):
        guest = self.guest_name or "Guest"
        return f"{guest} {self.check_in:%Y-%m-%d} ({self.nights}n, {self.get_status_display()})"

    @property
    def is_active(self):
        return self.status in self.ACTIVE_STATUSES

    def save(self, *args, **kwargs):
        # nights always follows the stay dates, including after a date change
        if self.check_in and self.check_out:
            self.nights = max((self.check_out - self.check_in).days, 0)

        if self.pk:
            stored = Booking.objects.filter(pk=self.pk).values_list('season_snapshot', flat=True).first()
            if stored is not None and stored != self.season_snapshot:
                raise ValidationError("The season snapshot of an existing booking cannot be changed.")

        self.profit_total = Decimal(str(self.price_total)) - Decimal(str(self.cost_total))
        super().save(*args, **kwargs)
