"""
Signal handlers for auto-creating per-resort season settings.
"""

from django.db.models.signals import post_save
from django.dispatch import receiver
from .models import Resort, SeasonSettings


@receiver(post_save, sender=Resort)
def create_season_settings(sender, instance, created, **kwargs):
    """
    When a resort is created, give it season settings with the default
    percentages (low -10, mid 0, high +30).
    """
    if created:
        SeasonSettings.objects.get_or_create(resort=instance)
