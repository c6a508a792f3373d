"""
Resort admin configuration.

Supports:
- Resort management with room type and season settings inlines
- Season ranges and painted calendar days
- Monthly overheads
- Bookings (season snapshot is read-only once saved)
- Expenses
- Promotions, surcharges, per-date rate overrides and restrictions
"""

from django.contrib import admin
from django.urls import reverse
from django.utils.html import format_html

from .models import (
    Resort, RoomType, SeasonSettings, Overhead,
    SeasonRange, SeasonAssignment,
    Booking, Expense,
    Promotion, Surcharge, RoomRateOverride, RoomRateRestriction,
)


# =============================================================================
# RESORT & ROOM TYPES
# =============================================================================

class RoomTypeInline(admin.TabularInline):
    """Inline for room types within a resort."""
    model = RoomType
    extra = 0
    fields = ['name', 'cost_room', 'price_room', 'sort_order', 'is_active']


class SeasonSettingsInline(admin.StackedInline):
    model = SeasonSettings
    can_delete = False
    extra = 0
    fields = [
        ('low_pct', 'mid_pct', 'high_pct'),
        ('weekend_surcharge_pct', 'holiday_surcharge_pct'),
        ('margin_pct', 'round_to_rm5'),
    ]


@admin.register(Resort)
class ResortAdmin(admin.ModelAdmin):
    """Admin for resorts."""
    list_display = ['name', 'code', 'location', 'room_type_count_display', 'is_active', 'created_at']
    list_filter = ['is_active']
    search_fields = ['name', 'code', 'location']
    prepopulated_fields = {'code': ('name',)}
    ordering = ['name']

    fieldsets = (
        (None, {
            'fields': ('name', 'code', 'location', 'is_active')
        }),
        ('Currency', {
            'fields': ('currency_symbol',),
        }),
    )

    inlines = [RoomTypeInline, SeasonSettingsInline]

    def room_type_count_display(self, obj):
        """Display count of active room types."""
        count = obj.active_room_type_count
        if count > 0:
            url = reverse('admin:resort_roomtype_changelist') + f'?resort__id__exact={obj.id}'
            return format_html('<a href="{}">{} room types</a>', url, count)
        return '0'
    room_type_count_display.short_description = 'Room Types'


@admin.register(RoomType)
class RoomTypeAdmin(admin.ModelAdmin):
    list_display = ['name', 'resort', 'cost_room', 'price_room', 'margin_display', 'sort_order', 'is_active']
    list_filter = ['resort', 'is_active']
    search_fields = ['name', 'resort__name']
    list_editable = ['sort_order', 'is_active']
    ordering = ['resort', 'sort_order', 'name']

    def margin_display(self, obj):
        """Room margin per night."""
        return f"{obj.price_room - obj.cost_room:,.2f}"
    margin_display.short_description = 'Margin / night'


# =============================================================================
# SEASONS & OVERHEAD
# =============================================================================

SEASON_COLORS = {
    'low': '#2563eb',
    'mid': '#6b7280',
    'high': '#dc2626',
}


def season_badge(season, label):
    return format_html(
        '<span style="background:{};color:white;padding:2px 8px;border-radius:3px;">{}</span>',
        SEASON_COLORS.get(season, '#6b7280'), label,
    )


@admin.register(SeasonRange)
class SeasonRangeAdmin(admin.ModelAdmin):
    """
    Season range records. Deleting one leaves the painted days unchanged;
    use the calendar days list to repaint.
    """
    list_display = ['resort', 'date_start', 'date_end', 'day_count', 'season_display', 'description', 'created_at']
    list_filter = ['resort', 'season']
    date_hierarchy = 'date_start'
    readonly_fields = ['created_at']

    def season_display(self, obj):
        return season_badge(obj.season, obj.get_season_display())
    season_display.short_description = 'Season'
    season_display.admin_order_field = 'season'


@admin.register(SeasonAssignment)
class SeasonAssignmentAdmin(admin.ModelAdmin):
    list_display = ['date', 'resort', 'season_display', 'is_holiday', 'description']
    list_filter = ['resort', 'season', 'is_holiday']
    date_hierarchy = 'date'
    ordering = ['resort', 'date']

    def season_display(self, obj):
        return season_badge(obj.season, obj.get_season_display())
    season_display.short_description = 'Season'
    season_display.admin_order_field = 'season'


@admin.register(Overhead)
class OverheadAdmin(admin.ModelAdmin):
    list_display = ['resort', 'month_display', 'overhead_monthly', 'overhead_daily', 'allocation_mode', 'allocation_rate']
    list_filter = ['resort', 'allocation_mode']
    ordering = ['resort', '-month']

    fieldsets = (
        (None, {
            'fields': ('resort', 'month', 'notes')
        }),
        ('Amounts', {
            'fields': (('overhead_monthly', 'overhead_daily'),),
            'description': 'Daily overhead defaults to the monthly figure / 30.',
        }),
        ('Allocation to bookings', {
            'fields': ('allocation_mode', ('overhead_per_room_day', 'fixed_per_package')),
        }),
    )

    def month_display(self, obj):
        return obj.month.strftime('%Y-%m')
    month_display.short_description = 'Month'
    month_display.admin_order_field = 'month'


# =============================================================================
# BOOKINGS
# =============================================================================

@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    """Admin for package bookings."""
    list_display = [
        'guest_display', 'resort', 'room_type',
        'check_in', 'check_out', 'nights',
        'price_total_display', 'profit_total_display', 'status_display',
    ]
    list_filter = [
        'resort', 'status', 'room_type', 'overhead_mode',
        ('check_in', admin.DateFieldListFilter),
    ]
    search_fields = ['guest_name', 'resort__name']
    date_hierarchy = 'check_in'
    ordering = ['-check_in']

    readonly_fields = [
        'nights', 'season_mult', 'surcharge_pct', 'season_snapshot_display', 'applied_rules',
        'cost_total', 'price_total', 'profit_total',
        'created_at', 'updated_at',
    ]

    fieldsets = (
        ('Booking', {
            'fields': ('resort', 'guest_name', 'status', 'room_type')
        }),
        ('Stay', {
            'fields': (
                ('check_in', 'check_out', 'nights'),
                ('pax_adult', 'pax_child', 'room_multiplier'),
            )
        }),
        ('Unit Rates', {
            'fields': (
                ('cost_room', 'price_room'),
                ('meal_cost_adult', 'meal_cost_child', 'meal_price_adult', 'meal_price_child'),
                ('boat_cost_adult', 'boat_cost_child', 'boat_price_adult', 'boat_price_child'),
                ('addons_cost', 'addons_price'),
            ),
            'classes': ('collapse',),
        }),
        ('Adjustments', {
            'fields': (
                ('season_mult', 'surcharge_pct', 'margin_pct'),
                ('overhead_mode', 'overhead_rate', 'round_to_rm5'),
                'season_snapshot_display',
                'package_code',
                'applied_rules',
            )
        }),
        ('Totals', {
            'fields': (('cost_total', 'price_total', 'profit_total'),)
        }),
        ('Metadata', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',),
        }),
    )

    def guest_display(self, obj):
        return obj.guest_name or '-'
    guest_display.short_description = 'Guest'
    guest_display.admin_order_field = 'guest_name'

    def price_total_display(self, obj):
        """Display price with currency."""
        return f"{obj.resort.currency_symbol} {obj.price_total:,.2f}"
    price_total_display.short_description = 'Price'
    price_total_display.admin_order_field = 'price_total'

    def profit_total_display(self, obj):
        """Profit in green, loss in red."""
        color = 'green' if obj.profit_total >= 0 else 'red'
        amount = f"{obj.profit_total:,.2f}"
        return format_html('<span style="color:{};">{}</span>', color, amount)
    profit_total_display.short_description = 'Profit'
    profit_total_display.admin_order_field = 'profit_total'

    def status_display(self, obj):
        """Display status with color coding."""
        colors = {
            'pending': 'orange',
            'confirmed': 'blue',
            'completed': 'green',
            'cancelled': 'red',
        }
        color = colors.get(obj.status, 'gray')
        return format_html('<span style="color:{};">{}</span>', color, obj.get_status_display())
    status_display.short_description = 'Status'
    status_display.admin_order_field = 'status'

    def season_snapshot_display(self, obj):
        """Per-night seasons recorded at booking time."""
        if not obj.season_snapshot:
            return '-'
        return format_html(
            '<br>'.join(['{}: {}'] * len(obj.season_snapshot)),
            *[value for night in obj.season_snapshot for value in (night.get('date'), night.get('season'))]
        )
    season_snapshot_display.short_description = 'Season snapshot'


# =============================================================================
# EXPENSES
# =============================================================================

@admin.register(Expense)
class ExpenseAdmin(admin.ModelAdmin):
    list_display = [
        'expense_date', 'resort', 'vendor', 'category',
        'subtotal', 'tax', 'total', 'payment_method', 'status_display', 'bill_count',
    ]
    list_filter = [
        'resort', 'category', 'payment_method', 'status',
        ('expense_date', admin.DateFieldListFilter),
    ]
    search_fields = ['vendor', 'description', 'reference_no']
    date_hierarchy = 'expense_date'
    ordering = ['-expense_date']
    readonly_fields = ['total', 'created_at', 'updated_at']

    fieldsets = (
        (None, {
            'fields': ('resort', 'expense_date', 'vendor', 'category', 'description')
        }),
        ('Amounts', {
            'fields': (('subtotal', 'tax', 'total'),)
        }),
        ('Payment', {
            'fields': (('payment_method', 'status'), 'reference_no')
        }),
        ('Bills', {
            'fields': ('bill_urls',),
            'classes': ('collapse',),
        }),
        ('Metadata', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',),
        }),
    )

    def status_display(self, obj):
        colors = {'paid': 'green', 'partial': 'orange', 'unpaid': 'red'}
        return format_html(
            '<span style="color:{};">{}</span>',
            colors.get(obj.status, 'gray'), obj.get_status_display(),
        )
    status_display.short_description = 'Status'
    status_display.admin_order_field = 'status'

    def bill_count(self, obj):
        return len(obj.bill_urls or [])
    bill_count.short_description = 'Bills'


# =============================================================================
# RATE RULES
# =============================================================================

class StayRuleAdmin(admin.ModelAdmin):
    """Shared admin for promotions and surcharges."""
    list_filter = ['resort', 'is_active', 'target_season']
    search_fields = ['name', 'package_code']
    date_hierarchy = 'date_start'
    readonly_fields = ['created_at', 'updated_at']

    def period_display(self, obj):
        if obj.date_start == obj.date_end:
            return obj.date_start.strftime('%b %d, %Y')
        return f"{obj.date_start:%b %d} - {obj.date_end:%b %d, %Y}"
    period_display.short_description = 'Period'
    period_display.admin_order_field = 'date_start'

    def active_display(self, obj):
        if obj.is_active:
            return format_html('<span style="color:green;">{}</span>', 'Active')
        return format_html('<span style="color:gray;">{}</span>', 'Inactive')
    active_display.short_description = 'Status'
    active_display.admin_order_field = 'is_active'


@admin.register(Promotion)
class PromotionAdmin(StayRuleAdmin):
    list_display = ['name', 'resort', 'period_display', 'percent_off', 'target_season',
                    'room_type', 'min_days_in_advance', 'active_display']

    fieldsets = (
        (None, {
            'fields': ('resort', 'name', ('date_start', 'date_end'), 'is_active')
        }),
        ('Discount', {
            'fields': (('percent_off', 'min_days_in_advance'),)
        }),
        ('Applies to', {
            'fields': ('target_season', 'room_type', 'package_code', 'weekday_mask'),
            'description': 'Weekday mask uses 1 (Monday) to 7 (Sunday); blank means every night.',
        }),
        ('Metadata', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',),
        }),
    )


@admin.register(Surcharge)
class SurchargeAdmin(StayRuleAdmin):
    list_display = ['name', 'resort', 'period_display', 'amount_per_pax', 'target_season',
                    'room_type', 'active_display']

    fieldsets = (
        (None, {
            'fields': ('resort', 'name', ('date_start', 'date_end'), 'is_active')
        }),
        ('Amount', {
            'fields': ('amount_per_pax',)
        }),
        ('Applies to', {
            'fields': ('target_season', 'room_type', 'package_code', 'weekday_mask'),
            'description': 'Weekday mask uses 1 (Monday) to 7 (Sunday); blank means every night.',
        }),
        ('Metadata', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',),
        }),
    )


@admin.register(RoomRateOverride)
class RoomRateOverrideAdmin(admin.ModelAdmin):
    list_display = ['date', 'room_type', 'resort', 'override_type', 'adjustment_display', 'note']
    list_filter = ['resort', 'room_type', 'override_type']
    date_hierarchy = 'date'
    ordering = ['room_type', 'date']

    def adjustment_display(self, obj):
        return obj.get_adjustment_display()
    adjustment_display.short_description = 'Adjustment'


@admin.register(RoomRateRestriction)
class RoomRateRestrictionAdmin(admin.ModelAdmin):
    list_display = ['date', 'room_type', 'resort', 'is_closed', 'close_to_arrival',
                    'close_to_departure', 'min_los', 'max_los']
    list_filter = ['resort', 'room_type', 'is_closed', 'close_to_arrival', 'close_to_departure']
    date_hierarchy = 'date'
    ordering = ['room_type', 'date']

    fieldsets = (
        (None, {
            'fields': ('resort', 'room_type', 'date', 'notes')
        }),
        ('Closures', {
            'fields': (('is_closed', 'close_to_arrival', 'close_to_departure'),)
        }),
        ('Stay length & lead time', {
            'fields': (('min_los', 'max_los'), ('min_advance_days', 'max_advance_days')),
        }),
    )
