"""
Core models: Resort, RoomType, SeasonSettings, Overhead.
"""

from django.db import models
from decimal import Decimal
from django.core.validators import MinValueValidator, MaxValueValidator
from datetime import date

# =============================================================================
# RESORT & ROOMS
# =============================================================================

class Resort(models.Model):
    """
    A resort managed by the back office.

    Every booking, season, overhead and expense row is scoped to one resort.
    """
    name = models.CharField(
        max_length=200,
        help_text="Resort name (e.g., 'Pulau Redang Beach Resort')"
    )
    code = models.SlugField(
        max_length=50,
        unique=True,
        help_text="URL-friendly code (e.g., 'redang-beach')"
    )

    currency_symbol = models.CharField(
        max_length=5,
        default='RM',
        help_text="Currency symbol for display"
    )

    location = models.CharField(
        max_length=255,
        blank=True,
        help_text="e.g., Terengganu, Malaysia"
    )

    is_active = models.BooleanField(
        default=True,
        help_text="Whether this resort is active"
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['name']
        verbose_name = "Resort"
        verbose_name_plural = "Resorts"

    def __str__(self):
        return self.name

    @property
    def active_room_type_count(self):
        """Return count of active room types."""
        return self.room_types.filter(is_active=True).count()

    def get_season_settings(self):
        """Return the resort's season settings, creating defaults if missing."""
        settings, _ = SeasonSettings.objects.get_or_create(resort=self)
        return settings


class RoomType(models.Model):
    """
    Room category with default nightly cost and price.

    Bookings copy these rates at quote time so later rate edits never
    change historical totals.
    """
    resort = models.ForeignKey(
        Resort,
        on_delete=models.CASCADE,
        related_name='room_types',
        help_text="Resort this room type belongs to"
    )
    name = models.CharField(max_length=100, help_text="e.g., Garden Chalet, Sea View Deluxe")

    cost_room = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal('0.00'),
        help_text="Nightly cost of the room"
    )
    price_room = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal('0.00'),
        help_text="Nightly selling price of the room"
    )

    sort_order = models.PositiveIntegerField(default=0, help_text="Display order")
    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ['resort', 'sort_order', 'name']
        verbose_name = "Room Type"
        verbose_name_plural = "Room Types"

    def __str__(self):
        return self.name


# =============================================================================
# SEASON SETTINGS
# =============================================================================

class SeasonSettings(models.Model):
    """
    Per-resort pricing settings.

    Season multipliers are stored as percentage offsets (the figure staff
    type in, e.g. -10 / 0 / 30) and converted to multipliers with
    ``1 + pct / 100`` whenever a price is calculated.
    """
    resort = models.OneToOneField(
        Resort,
        on_delete=models.CASCADE,
        related_name='season_settings',
    )

    low_pct = models.DecimalField(
        max_digits=6,
        decimal_places=2,
        default=Decimal('-10.00'),
        validators=[MinValueValidator(-100)],
        help_text="Low season offset in percent (e.g., -10 for 0.90x)"
    )
    mid_pct = models.DecimalField(
        max_digits=6,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=[MinValueValidator(-100)],
        help_text="Mid season offset in percent"
    )
    high_pct = models.DecimalField(
        max_digits=6,
        decimal_places=2,
        default=Decimal('30.00'),
        validators=[MinValueValidator(-100)],
        help_text="High season offset in percent (e.g., 30 for 1.30x)"
    )

    weekend_surcharge_pct = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=Decimal('5.00'),
        validators=[MinValueValidator(0), MaxValueValidator(100)],
        help_text="Surcharge applied to Friday and Saturday nights"
    )
    holiday_surcharge_pct = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=Decimal('15.00'),
        validators=[MinValueValidator(0), MaxValueValidator(100)],
        help_text="Surcharge applied to nights flagged as holidays"
    )

    margin_pct = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=Decimal('25.00'),
        validators=[MinValueValidator(0)],
        help_text="Profit margin added on top of the surcharged price"
    )

    round_to_rm5 = models.BooleanField(
        default=True,
        help_text="Round package prices to the nearest 5"
    )

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Season Settings"
        verbose_name_plural = "Season Settings"

    def __str__(self):
        return f"Season settings ({self.resort.name})"

    def get_pct(self, season):
        """Percentage offset for a season label."""
        try:
            return getattr(self, {'low': 'low_pct', 'mid': 'mid_pct', 'high': 'high_pct'}[season])
        except KeyError:
            raise ValueError(f"Unknown season: {season!r}")

    def get_multiplier(self, season):
        """Multiplier for a season label (e.g., -10% -> 0.90)."""
        return Decimal('1') + self.get_pct(season) / Decimal('100')

    @property
    def multipliers(self):
        return {season: self.get_multiplier(season) for season in ('low', 'mid', 'high')}


# =============================================================================
# OVERHEAD
# =============================================================================

class Overhead(models.Model):
    """
    Fixed monthly operating cost for a resort.

    ``month`` is always the first day of the month it applies to.
    """
    ALLOCATION_NONE = 'none'
    ALLOCATION_PER_ROOM_DAY = 'per_room_day'
    ALLOCATION_FIXED_PER_PACKAGE = 'fixed_per_package'

    ALLOCATION_MODES = [
        (ALLOCATION_NONE, 'None'),
        (ALLOCATION_PER_ROOM_DAY, 'Per Room Day'),
        (ALLOCATION_FIXED_PER_PACKAGE, 'Fixed Per Package'),
    ]

    resort = models.ForeignKey(
        Resort,
        on_delete=models.CASCADE,
        related_name='overheads',
    )
    month = models.DateField(help_text="First day of the month")

    overhead_monthly = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal('0.00'),
        help_text="Total fixed overhead for the month"
    )
    overhead_daily = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        null=True,
        blank=True,
    )
    overhead_per_room_day = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        null=True,
        blank=True,
        help_text="Overhead charged to a booking per night"
    )
    allocation_mode = models.CharField(
        max_length=20,
        choices=ALLOCATION_MODES,
        default=ALLOCATION_PER_ROOM_DAY,
        help_text="How overhead is allocated to booking cost"
    )
    fixed_per_package = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        null=True,
        blank=True,
        help_text="Flat overhead charged to each booking"
    )
    notes = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['resort', '-month']
        unique_together = ['resort', 'month']
        verbose_name = "Overhead"
        verbose_name_plural = "Overheads"

    def __str__(self):
        return f"{self.resort.name} {self.month.strftime('%Y-%m')}: {self.overhead_monthly}"

    def save(self, *args, **kwargs):
        if isinstance(self.month, date):
            self.month = self.month.replace(day=1)
        if self.overhead_daily is None:
            self.overhead_daily = self.daily_from_monthly()
        super().save(*args, **kwargs)

    def daily_from_monthly(self, days_in_month=30):
        """Spread the monthly figure over a nominal 30-day month."""
        return (self.overhead_monthly / Decimal(days_in_month)).quantize(Decimal('0.01'))

    @property
    def allocation_rate(self):
        """Rate matching ``allocation_mode`` (0 when unset)."""
        if self.allocation_mode == self.ALLOCATION_PER_ROOM_DAY:
            return self.overhead_per_room_day or Decimal('0.00')
        if self.allocation_mode == self.ALLOCATION_FIXED_PER_PACKAGE:
            return self.fixed_per_package or Decimal('0.00')
        return Decimal('0.00')
