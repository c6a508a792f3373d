"""
Resort models package.

Re-exports all models so Django migrations and existing imports
continue to work unchanged:
    from resort.models import Booking, SeasonAssignment, etc.
"""

# Core: Resort, rooms, settings, overheads
from .core import (
    Resort,
    RoomType,
    SeasonSettings,
    Overhead,
)

# Season calendar
from .seasons import (
    SeasonRange,
    SeasonAssignment,
    SEASONS,
    SEASON_CHOICES,
    DEFAULT_SEASON,
)

# Bookings
from .bookings import Booking

# Expenses
from .expenses import Expense

# Rate rules
from .rates import (
    Promotion,
    Surcharge,
    RoomRateOverride,
    RoomRateRestriction,
    TARGET_ANY,
)

__all__ = [
    # Core
    'Resort', 'RoomType', 'SeasonSettings', 'Overhead',
    # Seasons
    'SeasonRange', 'SeasonAssignment', 'SEASONS', 'SEASON_CHOICES', 'DEFAULT_SEASON',
    # Bookings
    'Booking',
    # Expenses
    'Expense',
    # Rate rules
    'Promotion', 'Surcharge', 'RoomRateOverride', 'RoomRateRestriction', 'TARGET_ANY',
]
