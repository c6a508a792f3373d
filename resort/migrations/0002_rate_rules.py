from decimal import Decimal

import django.core.validators
import django.db.models.deletion
from django.db import migrations, models


SEASON_TARGETS = [('any', 'Any season'), ('low', 'Low'), ('mid', 'Mid'), ('high', 'High')]


def stay_rule_fields():
    return [
        ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
        ('name', models.CharField(help_text="e.g., 'Early Bird', 'Chinese New Year'", max_length=100)),
        ('date_start', models.DateField(help_text='First night covered (inclusive)')),
        ('date_end', models.DateField(help_text='Last night covered (inclusive)')),
        ('target_season', models.CharField(choices=SEASON_TARGETS, default='any', max_length=10)),
        ('package_code', models.CharField(blank=True, help_text='Limit to one package code (blank = all)', max_length=50)),
        ('weekday_mask', models.CharField(blank=True, help_text='Nights it applies to, Monday=1 to Sunday=7 (blank = every night)', max_length=7, validators=[django.core.validators.RegexValidator('^[1-7]*$', "Use the digits 1 (Monday) to 7 (Sunday), e.g. '567'.")])),
        ('is_active', models.BooleanField(default=True)),
        ('created_at', models.DateTimeField(auto_now_add=True)),
        ('updated_at', models.DateTimeField(auto_now=True)),
    ]


class Migration(migrations.Migration):

    dependencies = [
        ('resort', '0001_initial'),
    ]

    operations = [
        migrations.AddField(
            model_name='booking',
            name='package_code',
            field=models.CharField(blank=True, max_length=50),
        ),
        migrations.AddField(
            model_name='booking',
            name='applied_rules',
            field=models.JSONField(blank=True, default=list, help_text='Promotions and surcharges applied when the booking was priced'),
        ),
        migrations.CreateModel(
            name='Promotion',
            fields=stay_rule_fields() + [
                ('percent_off', models.DecimalField(decimal_places=2, help_text='Discount in percent (e.g., 10 for 10% off)', max_digits=5, validators=[django.core.validators.MinValueValidator(0), django.core.validators.MaxValueValidator(100)])),
                ('min_days_in_advance', models.PositiveIntegerField(default=0, help_text='Days between booking and the night (0 = no limit)')),
                ('resort', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='promotions', to='resort.resort')),
                ('room_type', models.ForeignKey(blank=True, help_text='Limit to one room type (blank = all)', null=True, on_delete=django.db.models.deletion.CASCADE, related_name='promotions', to='resort.roomtype')),
            ],
            options={
                'verbose_name': 'Promotion',
                'verbose_name_plural': 'Promotions',
                'ordering': ['resort', 'date_start', 'name'],
                'abstract': False,
            },
        ),
        migrations.CreateModel(
            name='Surcharge',
            fields=stay_rule_fields() + [
                ('amount_per_pax', models.DecimalField(decimal_places=2, help_text='Charged once per guest (adults + children) per matching night', max_digits=12, validators=[django.core.validators.MinValueValidator(0)])),
                ('resort', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='surcharges', to='resort.resort')),
                ('room_type', models.ForeignKey(blank=True, help_text='Limit to one room type (blank = all)', null=True, on_delete=django.db.models.deletion.CASCADE, related_name='surcharges', to='resort.roomtype')),
            ],
            options={
                'verbose_name': 'Surcharge',
                'verbose_name_plural': 'Surcharges',
                'ordering': ['resort', 'date_start', 'name'],
                'abstract': False,
            },
        ),
        migrations.CreateModel(
            name='RoomRateOverride',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('date', models.DateField()),
                ('override_type', models.CharField(choices=[('set', 'Set Rate'), ('delta_amount', 'Adjust by Amount'), ('delta_percent', 'Adjust by Percent')], default='set', max_length=20)),
                ('value', models.DecimalField(decimal_places=2, help_text='Rate, amount or percent depending on the override type', max_digits=12)),
                ('note', models.CharField(blank=True, max_length=255)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('resort', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='rate_overrides', to='resort.resort')),
                ('room_type', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='rate_overrides', to='resort.roomtype')),
            ],
            options={
                'verbose_name': 'Room Rate Override',
                'verbose_name_plural': 'Room Rate Overrides',
                'ordering': ['room_type', 'date'],
            },
        ),
        migrations.AddConstraint(
            model_name='roomrateoverride',
            constraint=models.UniqueConstraint(fields=('room_type', 'date'), name='unique_rate_override_per_day'),
        ),
        migrations.CreateModel(
            name='RoomRateRestriction',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('date', models.DateField()),
                ('is_closed', models.BooleanField(default=False, help_text='No stays over this night')),
                ('close_to_arrival', models.BooleanField(default=False, help_text='No check-ins on this date')),
                ('close_to_departure', models.BooleanField(default=False, help_text='No check-outs on this date')),
                ('min_los', models.PositiveIntegerField(blank=True, help_text='Minimum nights for arrivals', null=True)),
                ('max_los', models.PositiveIntegerField(blank=True, help_text='Maximum nights for arrivals', null=True)),
                ('min_advance_days', models.PositiveIntegerField(blank=True, null=True)),
                ('max_advance_days', models.PositiveIntegerField(blank=True, null=True)),
                ('notes', models.CharField(blank=True, max_length=255)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('resort', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='rate_restrictions', to='resort.resort')),
                ('room_type', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='rate_restrictions', to='resort.roomtype')),
            ],
            options={
                'verbose_name': 'Room Rate Restriction',
                'verbose_name_plural': 'Room Rate Restrictions',
                'ordering': ['room_type', 'date'],
            },
        ),
        migrations.AddConstraint(
            model_name='roomraterestriction',
            constraint=models.UniqueConstraint(fields=('room_type', 'date'), name='unique_rate_restriction_per_day'),
        ),
    ]
