"""
Expense model.
"""

from django.db import models
from decimal import Decimal

from .core import Resort


class Expense(models.Model):
    """
    A bill or payment made by the resort.

    ``total`` is always ``subtotal + tax``; whatever is assigned to it is
    replaced on save.
    """
    CATEGORY_CHOICES = [
        ('utilities', 'Utilities'),
        ('salary', 'Salary'),
        ('maintenance', 'Maintenance'),
        ('fuel', 'Fuel'),
        ('boat_vendor', 'Boat Vendor'),
        ('supplies', 'Supplies'),
        ('marketing', 'Marketing'),
        ('tax', 'Tax'),
        ('rent', 'Rent'),
        ('insurance', 'Insurance'),
        ('misc', 'Miscellaneous'),
    ]
    CATEGORIES = [choice[0] for choice in CATEGORY_CHOICES]

    PAYMENT_METHOD_CHOICES = [
        ('cash', 'Cash'),
        ('bank_transfer', 'Bank Transfer'),
        ('card', 'Card'),
        ('FPX', 'FPX'),
        ('QR', 'QR'),
        ('OTA', 'OTA'),
        ('other', 'Other'),
    ]
    PAYMENT_METHODS = [choice[0] for choice in PAYMENT_METHOD_CHOICES]

    STATUS_CHOICES = [
        ('paid', 'Paid'),
        ('partial', 'Partial'),
        ('unpaid', 'Unpaid'),
    ]
    STATUSES = [choice[0] for choice in STATUS_CHOICES]

    resort = models.ForeignKey(
        Resort,
        on_delete=models.CASCADE,
        related_name='expenses',
    )
    expense_date = models.DateField(db_index=True)
    vendor = models.CharField(max_length=200, blank=True)
    category = models.CharField(max_length=20, choices=CATEGORY_CHOICES, default='misc')
    description = models.TextField(blank=True)

    subtotal = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    tax = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    total = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))

    payment_method = models.CharField(max_length=20, choices=PAYMENT_METHOD_CHOICES, default='bank_transfer')
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default='paid')
    reference_no = models.CharField(max_length=100, blank=True)

    bill_urls = models.JSONField(default=list, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-expense_date', '-id']
        indexes = [
            models.Index(fields=['resort', 'expense_date'], name='expense_resort_date_idx'),
        ]
        verbose_name = "Expense"
        verbose_name_plural = "Expenses"

    def __str__(self):
        vendor = self.vendor or self.get_category_display()
        return f"{self.expense_date:%Y-%m-%d} {vendor}: {self.total}"

    def save(self, *args, **kwargs):
        self.total = Decimal(str(self.subtotal or 0)) + Decimal(str(self.tax or 0))
        super().save(*args, **kwargs)
