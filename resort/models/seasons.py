"""
Season calendar models: SeasonRange, SeasonAssignment.
"""

from django.db import models

from .core import Resort

SEASON_LOW = 'low'
SEASON_MID = 'mid'
SEASON_HIGH = 'high'

SEASON_CHOICES = [
    (SEASON_LOW, 'Low'),
    (SEASON_MID, 'Mid'),
    (SEASON_HIGH, 'High'),
]

SEASONS = [choice[0] for choice in SEASON_CHOICES]

# Nights with no assignment are priced as mid season
DEFAULT_SEASON = SEASON_MID


class SeasonRange(models.Model):
    """
    A date range painted with one season.

    Creating a range expands it into one SeasonAssignment per day. The
    range keeps no link to those rows, so deleting it leaves the calendar
    as it is. Overlapping ranges are allowed; the latest one wins per day.
    """
    resort = models.ForeignKey(
        Resort,
        on_delete=models.CASCADE,
        related_name='season_ranges',
    )
    date_start = models.DateField()
    date_end = models.DateField()
    season = models.CharField(max_length=10, choices=SEASON_CHOICES)
    description = models.CharField(max_length=255, blank=True, null=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['resort', 'date_start']
        verbose_name = "Season Range"
        verbose_name_plural = "Season Ranges"

    def __str__(self):
        return f"{self.get_season_display()} ({self.date_start:%b %d} - {self.date_end:%b %d, %Y})"

    @property
    def day_count(self):
        return max((self.date_end - self.date_start).days + 1, 0)


class SeasonAssignment(models.Model):
    """
    Season for one calendar day of a resort.

    One row per (resort, date); the last write wins.
    """
    resort = models.ForeignKey(
        Resort,
        on_delete=models.CASCADE,
        related_name='season_assignments',
    )
    date = models.DateField()
    season = models.CharField(max_length=10, choices=SEASON_CHOICES, default=DEFAULT_SEASON)
    is_holiday = models.BooleanField(default=False)
    description = models.CharField(max_length=255, blank=True, null=True)

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['resort', 'date']
        constraints = [
            models.UniqueConstraint(fields=['resort', 'date'], name='unique_season_assignment_per_day'),
        ]
        verbose_name = "Season Assignment"
        verbose_name_plural = "Season Assignments"

    def __str__(self):
        holiday = " (holiday)" if self.is_holiday else ""
        return f"{self.date.isoformat()}: {self.season}{holiday}"
