"""
Rate rules: promotions, date-range surcharges, per-date room rate
overrides and booking restrictions.
"""

from datetime import date
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator, MaxValueValidator, RegexValidator
from django.db import models

from .core import Resort, RoomType
from .seasons import SEASON_CHOICES

TARGET_ANY = 'any'
TARGET_SEASON_CHOICES = [(TARGET_ANY, 'Any season')] + SEASON_CHOICES

weekday_mask_validator = RegexValidator(
    r'^[1-7]*$',
    "Use the digits 1 (Monday) to 7 (Sunday), e.g. '567'.",
)


# =============================================================================
# PROMOTIONS & SURCHARGES
# =============================================================================

class StayRule(models.Model):
    """
    Base for rules that apply to individual nights of a stay.

    A rule applies to a night when it is active, the night falls inside
    ``date_start``..``date_end`` (inclusive), and the night matches every
    filter that is set: target season, room type, package code and
    weekday mask.
    """
    resort = models.ForeignKey(
        Resort,
        on_delete=models.CASCADE,
        related_name='%(class)ss',
    )
    name = models.CharField(max_length=100, help_text="e.g., 'Early Bird', 'Chinese New Year'")

    date_start = models.DateField(help_text="First night covered (inclusive)")
    date_end = models.DateField(help_text="Last night covered (inclusive)")

    target_season = models.CharField(
        max_length=10,
        choices=TARGET_SEASON_CHOICES,
        default=TARGET_ANY,
    )
    room_type = models.ForeignKey(
        RoomType,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='%(class)ss',
        help_text="Limit to one room type (blank = all)"
    )
    package_code = models.CharField(
        max_length=50,
        blank=True,
        help_text="Limit to one package code (blank = all)"
    )
    weekday_mask = models.CharField(
        max_length=7,
        blank=True,
        validators=[weekday_mask_validator],
        help_text="Nights it applies to, Monday=1 to Sunday=7 (blank = every night)"
    )

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True
        ordering = ['resort', 'date_start', 'name']

    def __str__(self):
        status = "" if self.is_active else " [INACTIVE]"
        return f"{self.name} ({self.date_start:%b %d} - {self.date_end:%b %d, %Y}){status}"

    def clean(self):
        if self.date_start and self.date_end and self.date_end < self.date_start:
            raise ValidationError({'date_end': 'End date cannot be before start date.'})

    def covers(self, day):
        return self.date_start <= day <= self.date_end

    def runs_on_weekday(self, day):
        return not self.weekday_mask or str(day.isoweekday()) in self.weekday_mask

    def applies_to(self, day, season, room_type=None, package_code=''):
        """Check if this rule applies to the night of ``day``."""
        if not self.is_active or not self.covers(day):
            return False
        if self.target_season != TARGET_ANY and self.target_season != season:
            return False
        if self.room_type_id and (room_type is None or room_type.pk != self.room_type_id):
            return False
        if self.package_code and self.package_code != (package_code or ''):
            return False
        return self.runs_on_weekday(day)


class Promotion(StayRule):
    """
    Percentage discount on the package price for matching nights.

    ``min_days_in_advance`` limits it to stays booked at least that many
    days before the night.
    """
    percent_off = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        validators=[MinValueValidator(0), MaxValueValidator(100)],
        help_text="Discount in percent (e.g., 10 for 10% off)"
    )
    min_days_in_advance = models.PositiveIntegerField(
        default=0,
        help_text="Days between booking and the night (0 = no limit)"
    )

    class Meta(StayRule.Meta):
        verbose_name = "Promotion"
        verbose_name_plural = "Promotions"

    def applies_to(self, day, season, room_type=None, package_code='', booked_on=None):
        if not super().applies_to(day, season, room_type, package_code):
            return False
        if self.min_days_in_advance:
            lead_days = (day - (booked_on or date.today())).days
            if lead_days < self.min_days_in_advance:
                return False
        return True


class Surcharge(StayRule):
    """Flat amount per guest added to the package price for matching nights."""
    amount_per_pax = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(0)],
        help_text="Charged once per guest (adults + children) per matching night"
    )

    class Meta(StayRule.Meta):
        verbose_name = "Surcharge"
        verbose_name_plural = "Surcharges"


# =============================================================================
# PER-DATE ROOM RATES
# =============================================================================

class RoomRateOverride(models.Model):
    """
    Override of a room type's base nightly rate on one date.

    The override adjusts the base rate before the season multiplier:
        - set: the base rate becomes ``value``
        - delta_amount: ``value`` is added to the base rate
        - delta_percent: the base rate changes by ``value`` percent
    """
    OVERRIDE_SET = 'set'
    OVERRIDE_DELTA_AMOUNT = 'delta_amount'
    OVERRIDE_DELTA_PERCENT = 'delta_percent'

    OVERRIDE_TYPE_CHOICES = [
        (OVERRIDE_SET, 'Set Rate'),
        (OVERRIDE_DELTA_AMOUNT, 'Adjust by Amount'),
        (OVERRIDE_DELTA_PERCENT, 'Adjust by Percent'),
    ]

    resort = models.ForeignKey(
        Resort,
        on_delete=models.CASCADE,
        related_name='rate_overrides',
    )
    room_type = models.ForeignKey(
        RoomType,
        on_delete=models.CASCADE,
        related_name='rate_overrides',
    )
    date = models.DateField()
    override_type = models.CharField(
        max_length=20,
        choices=OVERRIDE_TYPE_CHOICES,
        default=OVERRIDE_SET,
    )
    value = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        help_text="Rate, amount or percent depending on the override type"
    )
    note = models.CharField(max_length=255, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['room_type', 'date']
        constraints = [
            models.UniqueConstraint(fields=['room_type', 'date'], name='unique_rate_override_per_day'),
        ]
        verbose_name = "Room Rate Override"
        verbose_name_plural = "Room Rate Overrides"

    def __str__(self):
        return f"{self.room_type.name} {self.date.isoformat()}: {self.get_adjustment_display()}"

    def get_adjustment_display(self):
        if self.override_type == self.OVERRIDE_SET:
            return f"= {self.value}"
        sign = '+' if self.value >= 0 else ''
        if self.override_type == self.OVERRIDE_DELTA_AMOUNT:
            return f"{sign}{self.value}"
        return f"{sign}{self.value}%"

    def apply(self, base_rate):
        """
        Apply this override to a base nightly rate.

        Returns:
            Decimal adjusted rate, never below zero
        """
        base_rate = Decimal(str(base_rate))
        if self.override_type == self.OVERRIDE_SET:
            adjusted = self.value
        elif self.override_type == self.OVERRIDE_DELTA_AMOUNT:
            adjusted = base_rate + self.value
        else:
            adjusted = base_rate * (Decimal('1') + self.value / Decimal('100'))

        if adjusted < Decimal('0.00'):
            adjusted = Decimal('0.00')

        return adjusted.quantize(Decimal('0.01'))


class RoomRateRestriction(models.Model):
    """
    Booking restrictions for a room type on one date.

    Closure applies to every night of a stay; arrival, length-of-stay and
    advance rules are read from the check-in date and departure rules from
    the check-out date.
    """
    resort = models.ForeignKey(
        Resort,
        on_delete=models.CASCADE,
        related_name='rate_restrictions',
    )
    room_type = models.ForeignKey(
        RoomType,
        on_delete=models.CASCADE,
        related_name='rate_restrictions',
    )
    date = models.DateField()

    is_closed = models.BooleanField(default=False, help_text="No stays over this night")
    close_to_arrival = models.BooleanField(default=False, help_text="No check-ins on this date")
    close_to_departure = models.BooleanField(default=False, help_text="No check-outs on this date")

    min_los = models.PositiveIntegerField(null=True, blank=True, help_text="Minimum nights for arrivals")
    max_los = models.PositiveIntegerField(null=True, blank=True, help_text="Maximum nights for arrivals")
    min_advance_days = models.PositiveIntegerField(null=True, blank=True)
    max_advance_days = models.PositiveIntegerField(null=True, blank=True)

    notes = models.CharField(max_length=255, blank=True)

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['room_type', 'date']
        constraints = [
            models.UniqueConstraint(fields=['room_type', 'date'], name='unique_rate_restriction_per_day'),
        ]
        verbose_name = "Room Rate Restriction"
        verbose_name_plural = "Room Rate Restrictions"

    RULE_FIELDS = [
        'is_closed',
        'close_to_arrival',
        'close_to_departure',
        'min_los',
        'max_los',
        'min_advance_days',
        'max_advance_days',
        'notes',
    ]

    def __str__(self):
        return f"{self.room_type.name} {self.date.isoformat()}"

    def clean(self):
        if self.min_los and self.max_los and self.max_los < self.min_los:
            raise ValidationError({'max_los': 'Maximum stay cannot be shorter than the minimum stay.'})
        if (self.min_advance_days is not None and self.max_advance_days is not None
                and self.max_advance_days < self.min_advance_days):
            raise ValidationError({'max_advance_days': 'Maximum advance cannot be below the minimum advance.'})

    def as_dict(self):
        return {field: getattr(self, field) for field in self.RULE_FIELDS}
