from decimal import Decimal

import django.core.validators
import django.db.models.deletion
from django.db import migrations, models


def money(**kwargs):
    return models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12, **kwargs)


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Resort',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(help_text="Resort name (e.g., 'Pulau Redang Beach Resort')", max_length=200)),
                ('code', models.SlugField(help_text="URL-friendly code (e.g., 'redang-beach')", unique=True)),
                ('currency_symbol', models.CharField(default='RM', help_text='Currency symbol for display', max_length=5)),
                ('location', models.CharField(blank=True, help_text='e.g., Terengganu, Malaysia', max_length=255)),
                ('is_active', models.BooleanField(default=True, help_text='Whether this resort is active')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Resort',
                'verbose_name_plural': 'Resorts',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='RoomType',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(help_text='e.g., Garden Chalet, Sea View Deluxe', max_length=100)),
                ('cost_room', money(help_text='Nightly cost of the room')),
                ('price_room', money(help_text='Nightly selling price of the room')),
                ('sort_order', models.PositiveIntegerField(default=0, help_text='Display order')),
                ('is_active', models.BooleanField(default=True)),
                ('resort', models.ForeignKey(help_text='Resort this room type belongs to', on_delete=django.db.models.deletion.CASCADE, related_name='room_types', to='resort.resort')),
            ],
            options={
                'verbose_name': 'Room Type',
                'verbose_name_plural': 'Room Types',
                'ordering': ['resort', 'sort_order', 'name'],
            },
        ),
        migrations.CreateModel(
            name='SeasonSettings',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('low_pct', models.DecimalField(decimal_places=2, default=Decimal('-10.00'), help_text='Low season offset in percent (e.g., -10 for 0.90x)', max_digits=6, validators=[django.core.validators.MinValueValidator(-100)])),
                ('mid_pct', models.DecimalField(decimal_places=2, default=Decimal('0.00'), help_text='Mid season offset in percent', max_digits=6, validators=[django.core.validators.MinValueValidator(-100)])),
                ('high_pct', models.DecimalField(decimal_places=2, default=Decimal('30.00'), help_text='High season offset in percent (e.g., 30 for 1.30x)', max_digits=6, validators=[django.core.validators.MinValueValidator(-100)])),
                ('weekend_surcharge_pct', models.DecimalField(decimal_places=2, default=Decimal('5.00'), help_text='Surcharge applied to Friday and Saturday nights', max_digits=5, validators=[django.core.validators.MinValueValidator(0), django.core.validators.MaxValueValidator(100)])),
                ('holiday_surcharge_pct', models.DecimalField(decimal_places=2, default=Decimal('15.00'), help_text='Surcharge applied to nights flagged as holidays', max_digits=5, validators=[django.core.validators.MinValueValidator(0), django.core.validators.MaxValueValidator(100)])),
                ('margin_pct', models.DecimalField(decimal_places=2, default=Decimal('25.00'), help_text='Profit margin added on top of the surcharged price', max_digits=5, validators=[django.core.validators.MinValueValidator(0)])),
                ('round_to_rm5', models.BooleanField(default=True, help_text='Round package prices to the nearest 5')),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('resort', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='season_settings', to='resort.resort')),
            ],
            options={
                'verbose_name': 'Season Settings',
                'verbose_name_plural': 'Season Settings',
            },
        ),
        migrations.CreateModel(
            name='Overhead',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('month', models.DateField(help_text='First day of the month')),
                ('overhead_monthly', money(help_text='Total fixed overhead for the month')),
                ('overhead_daily', models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ('overhead_per_room_day', models.DecimalField(blank=True, decimal_places=2, help_text='Overhead charged to a booking per night', max_digits=12, null=True)),
                ('allocation_mode', models.CharField(choices=[('none', 'None'), ('per_room_day', 'Per Room Day'), ('fixed_per_package', 'Fixed Per Package')], default='per_room_day', help_text='How overhead is allocated to booking cost', max_length=20)),
                ('fixed_per_package', models.DecimalField(blank=True, decimal_places=2, help_text='Flat overhead charged to each booking', max_digits=12, null=True)),
                ('notes', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('resort', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='overheads', to='resort.resort')),
            ],
            options={
                'verbose_name': 'Overhead',
                'verbose_name_plural': 'Overheads',
                'ordering': ['resort', '-month'],
                'unique_together': {('resort', 'month')},
            },
        ),
        migrations.CreateModel(
            name='SeasonRange',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('date_start', models.DateField()),
                ('date_end', models.DateField()),
                ('season', models.CharField(choices=[('low', 'Low'), ('mid', 'Mid'), ('high', 'High')], max_length=10)),
                ('description', models.CharField(blank=True, max_length=255, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('resort', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='season_ranges', to='resort.resort')),
            ],
            options={
                'verbose_name': 'Season Range',
                'verbose_name_plural': 'Season Ranges',
                'ordering': ['resort', 'date_start'],
            },
        ),
        migrations.CreateModel(
            name='SeasonAssignment',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('date', models.DateField()),
                ('season', models.CharField(choices=[('low', 'Low'), ('mid', 'Mid'), ('high', 'High')], default='mid', max_length=10)),
                ('is_holiday', models.BooleanField(default=False)),
                ('description', models.CharField(blank=True, max_length=255, null=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('resort', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='season_assignments', to='resort.resort')),
            ],
            options={
                'verbose_name': 'Season Assignment',
                'verbose_name_plural': 'Season Assignments',
                'ordering': ['resort', 'date'],
            },
        ),
        migrations.AddConstraint(
            model_name='seasonassignment',
            constraint=models.UniqueConstraint(fields=('resort', 'date'), name='unique_season_assignment_per_day'),
        ),
        migrations.CreateModel(
            name='Booking',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('guest_name', models.CharField(blank=True, max_length=200)),
                ('check_in', models.DateField(db_index=True)),
                ('check_out', models.DateField()),
                ('nights', models.PositiveIntegerField(default=0)),
                ('pax_adult', models.PositiveIntegerField(default=2)),
                ('pax_child', models.PositiveIntegerField(default=0)),
                ('room_multiplier', models.DecimalField(decimal_places=2, default=Decimal('1.00'), help_text='Occupancy-based scalar applied to the room rate', max_digits=6, validators=[django.core.validators.MinValueValidator(0)])),
                ('cost_room', money()),
                ('price_room', money()),
                ('meal_cost_adult', money()),
                ('meal_cost_child', money()),
                ('meal_price_adult', money()),
                ('meal_price_child', money()),
                ('boat_cost_adult', money()),
                ('boat_cost_child', money()),
                ('boat_price_adult', money()),
                ('boat_price_child', money()),
                ('addons_cost', money()),
                ('addons_price', money()),
                ('season_mult', models.DecimalField(decimal_places=4, default=Decimal('1.0000'), max_digits=6)),
                ('surcharge_pct', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=6)),
                ('margin_pct', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=6)),
                ('overhead_mode', models.CharField(choices=[('none', 'None'), ('per_room_day', 'Per Room Day'), ('fixed_per_package', 'Fixed Per Package')], default='none', max_length=20)),
                ('overhead_rate', money()),
                ('round_to_rm5', models.BooleanField(default=True)),
                ('season_snapshot', models.JSONField(blank=True, default=list, help_text='Per-night [{date, season}] recorded when the booking was created')),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('confirmed', 'Confirmed'), ('completed', 'Completed'), ('cancelled', 'Cancelled')], db_index=True, default='pending', max_length=20)),
                ('cost_total', money()),
                ('price_total', money()),
                ('profit_total', money()),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('resort', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='bookings', to='resort.resort')),
                ('room_type', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='bookings', to='resort.roomtype')),
            ],
            options={
                'verbose_name': 'Booking',
                'verbose_name_plural': 'Bookings',
                'ordering': ['-check_in'],
                'indexes': [
                    models.Index(fields=['resort', 'check_in'], name='booking_resort_checkin_idx'),
                    models.Index(fields=['resort', 'status'], name='booking_resort_status_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Expense',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('expense_date', models.DateField(db_index=True)),
                ('vendor', models.CharField(blank=True, max_length=200)),
                ('category', models.CharField(choices=[('utilities', 'Utilities'), ('salary', 'Salary'), ('maintenance', 'Maintenance'), ('fuel', 'Fuel'), ('boat_vendor', 'Boat Vendor'), ('supplies', 'Supplies'), ('marketing', 'Marketing'), ('tax', 'Tax'), ('rent', 'Rent'), ('insurance', 'Insurance'), ('misc', 'Miscellaneous')], default='misc', max_length=20)),
                ('description', models.TextField(blank=True)),
                ('subtotal', money()),
                ('tax', money()),
                ('total', money()),
                ('payment_method', models.CharField(choices=[('cash', 'Cash'), ('bank_transfer', 'Bank Transfer'), ('card', 'Card'), ('FPX', 'FPX'), ('QR', 'QR'), ('OTA', 'OTA'), ('other', 'Other')], default='bank_transfer', max_length=20)),
                ('status', models.CharField(choices=[('paid', 'Paid'), ('partial', 'Partial'), ('unpaid', 'Unpaid')], default='paid', max_length=10)),
                ('reference_no', models.CharField(blank=True, max_length=100)),
                ('bill_urls', models.JSONField(blank=True, default=list)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('resort', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='expenses', to='resort.resort')),
            ],
            options={
                'verbose_name': 'Expense',
                'verbose_name_plural': 'Expenses',
                'ordering': ['-expense_date', '-id'],
                'indexes': [
                    models.Index(fields=['resort', 'expense_date'], name='expense_resort_date_idx'),
                ],
            },
        ),
    ]
