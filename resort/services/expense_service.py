"""
Expense services: monthly rollups, bill attachments, CSV export and import.
"""

import csv
import io
import logging
from decimal import Decimal, InvalidOperation
from datetime import date, datetime
from pathlib import Path
from typing import Dict, List, Optional, Any
import calendar

import pandas as pd
from dateutil.relativedelta import relativedelta
from django.db import transaction
from django.db.models import Sum, Count
from django.utils import timezone

from .forecast_service import parse_month

logger = logging.getLogger(__name__)


def _month_range(month):
    """[start, next month start) for a month."""
    start = parse_month(month)
    return start, start + relativedelta(months=1)


def get_month_expenses(resort, month, categories=None):
    """Expenses dated within the month, newest first, optionally by category."""
    from resort.models import Expense

    start, end = _month_range(month)
    queryset = Expense.objects.filter(
        resort=resort,
        expense_date__gte=start,
        expense_date__lt=end,
    )
    if categories:
        queryset = queryset.filter(category__in=categories)
    return queryset.order_by('-expense_date', '-id')


def monthly_expense_summary(resort, month):
    """
    Total, per-category totals and count of a month's expenses.

    Returns:
        {'month': 'YYYY-MM', 'total', 'by_category': {category: total}, 'count'}
    """
    start, _ = _month_range(month)

    rows = (
        get_month_expenses(resort, start)
        .values('category')
        .annotate(total=Sum('total'), count=Count('id'))
        .order_by('category')
    )

    by_category = {}
    total = Decimal('0.00')
    count = 0
    for row in rows:
        category = row['category'] or 'misc'
        amount = row['total'] or Decimal('0.00')
        by_category[category] = by_category.get(category, Decimal('0.00')) + amount
        total += amount
        count += row['count']

    return {
        'month': start.strftime('%Y-%m'),
        'total': total,
        'by_category': by_category,
        'count': count,
    }


def yearly_expense_trend(resort, year):
    """Monthly expense totals and counts for a year."""
    monthly_data = []
    for month in range(1, 13):
        summary = monthly_expense_summary(resort, date(year, month, 1))
        monthly_data.append({
            'month': month,
            'month_name': calendar.month_abbr[month],
            'total': summary['total'],
            'count': summary['count'],
        })
    return monthly_data


def attach_bill_urls(expense, urls):
    """
    Append bill URLs to an expense.

    The row is locked while the list is merged, so concurrent uploads
    cannot drop each other's URLs.
    """
    from resort.models import Expense

    with transaction.atomic():
        locked = Expense.objects.select_for_update().get(pk=expense.pk)
        merged = list(locked.bill_urls or []) + [url for url in (urls or []) if url]
        Expense.objects.filter(pk=locked.pk).update(bill_urls=merged, updated_at=timezone.now())

    expense.bill_urls = merged
    return merged


def remove_bill_url(expense, url):
    """Remove every occurrence of a bill URL from an expense."""
    from resort.models import Expense

    with transaction.atomic():
        locked = Expense.objects.select_for_update().get(pk=expense.pk)
        remaining = [u for u in (locked.bill_urls or []) if u != url]
        Expense.objects.filter(pk=locked.pk).update(bill_urls=remaining, updated_at=timezone.now())

    expense.bill_urls = remaining
    return remaining


def export_expenses_csv(resort, month, categories=None):
    """CSV text of a month's expenses with a short header block and a total row."""
    start, _ = _month_range(month)
    expenses = list(get_month_expenses(resort, start, categories))

    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(['Expenses Export'])
    writer.writerow(['Resort:', resort.name])
    writer.writerow(['Month:', start.strftime('%Y-%m')])
    writer.writerow(['Generated:', timezone.now().strftime('%Y-%m-%d %H:%M')])
    writer.writerow([])
    writer.writerow([
        'Date', 'Vendor', 'Category', 'Description', 'Subtotal', 'Tax', 'Total',
        'Payment Method', 'Status', 'Reference',
    ])

    grand_total = Decimal('0.00')
    for expense in expenses:
        writer.writerow([
            expense.expense_date.isoformat(),
            expense.vendor,
            expense.category,
            expense.description,
            f"{expense.subtotal:.2f}",
            f"{expense.tax:.2f}",
            f"{expense.total:.2f}",
            expense.payment_method,
            expense.status,
            expense.reference_no,
        ])
        grand_total += expense.total

    writer.writerow([])
    writer.writerow(['', '', '', 'TOTAL', '', '', f"{grand_total:.2f}"])
    return buffer.getvalue()


class ExpenseImportService:
    """
    Import expenses from Excel or CSV files.

    Column names are matched case-insensitively against DEFAULT_COLUMN_MAPPING,
    so exports from accounting tools with headers such as "Bill Date",
    "Supplier" or "Amount" load without editing.
    """

    DEFAULT_COLUMN_MAPPING = {
        'expense_date': ['expense_date', 'date', 'bill date', 'invoice date'],
        'vendor': ['vendor', 'supplier', 'payee'],
        'category': ['category', 'type'],
        'description': ['description', 'details', 'notes'],
        'subtotal': ['subtotal', 'amount', 'net'],
        'tax': ['tax', 'sst', 'gst'],
        'payment_method': ['payment_method', 'payment method', 'method'],
        'status': ['status', 'payment status'],
        'reference_no': ['reference_no', 'reference', 'ref', 'invoice no'],
    }

    REQUIRED_COLUMNS = ['expense_date', 'subtotal']

    def __init__(self, resort, column_mapping: Dict = None):
        self.resort = resort
        self.column_mapping = column_mapping or self.DEFAULT_COLUMN_MAPPING
        self.errors = []
        self.stats = {
            'rows_total': 0,
            'rows_created': 0,
            'rows_skipped': 0,
        }

    def _read_file(self, file_path: Path) -> Optional[pd.DataFrame]:
        """Read Excel or CSV file into DataFrame."""
        suffix = file_path.suffix.lower()

        if suffix in ['.xlsx', '.xls']:
            return pd.read_excel(file_path)
        if suffix == '.csv':
            for encoding in ['utf-8', 'latin1']:
                try:
                    return pd.read_csv(file_path, encoding=encoding, index_col=False)
                except UnicodeDecodeError:
                    continue
        self.errors.append({'row': 0, 'message': f'Unsupported file format: {suffix}'})
        return None

    def _map_columns(self, df: pd.DataFrame) -> pd.DataFrame:
        """Rename recognised columns to model field names."""
        renames = {}
        for column in df.columns:
            key = str(column).strip().lower()
            for field, aliases in self.column_mapping.items():
                if key in aliases and field not in renames.values():
                    renames[column] = field
                    break
        return df.rename(columns=renames)

    def _parse_date(self, value) -> Optional[date]:
        if pd.isna(value):
            return None
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        text = str(value).strip()
        for fmt in ('%Y-%m-%d', '%d/%m/%Y', '%d-%m-%Y', '%d.%m.%Y'):
            try:
                return datetime.strptime(text, fmt).date()
            except ValueError:
                continue
        return None

    def _parse_decimal(self, value, default: Decimal = Decimal('0.00')) -> Optional[Decimal]:
        if pd.isna(value):
            return default
        text = str(value).replace(',', '').replace('RM', '').strip()
        if not text:
            return default
        try:
            return Decimal(text).quantize(Decimal('0.01'))
        except InvalidOperation:
            return None

    def _parse_choice(self, value, choices: List[str], default: str) -> str:
        if pd.isna(value):
            return default
        text = str(value).strip()
        for choice in choices:
            if text.lower() == choice.lower():
                return choice
        normalized = text.lower().replace(' ', '_')
        return normalized if normalized in choices else default

    def _build_expense(self, row: pd.Series, row_num: int) -> Optional[Any]:
        from resort.models import Expense

        expense_date = self._parse_date(row.get('expense_date'))
        if expense_date is None:
            self.errors.append({'row': row_num, 'message': f"Invalid date: {row.get('expense_date')}"})
            return None

        subtotal = self._parse_decimal(row.get('subtotal'))
        tax = self._parse_decimal(row.get('tax'))
        if subtotal is None or tax is None:
            self.errors.append({'row': row_num, 'message': 'Invalid amount'})
            return None

        def text(field):
            value = row.get(field)
            return '' if pd.isna(value) else str(value).strip()

        return Expense(
            resort=self.resort,
            expense_date=expense_date,
            vendor=text('vendor')[:200],
            category=self._parse_choice(row.get('category'), Expense.CATEGORIES, 'misc'),
            description=text('description'),
            subtotal=subtotal,
            tax=tax,
            payment_method=self._parse_choice(row.get('payment_method'), Expense.PAYMENT_METHODS, 'bank_transfer'),
            status=self._parse_choice(row.get('status'), Expense.STATUSES, 'paid'),
            reference_no=text('reference_no')[:100],
        )

    def import_file(self, file_path: str) -> Dict:
        """
        Import expenses from a file.

        Rows that fail to parse are skipped and reported in ``errors``;
        valid rows are saved together in one transaction.
        """
        file_path = Path(file_path)
        started = timezone.now()

        df = self._read_file(file_path)
        if df is None or df.empty:
            if not self.errors:
                self.errors.append({'row': 0, 'message': 'File is empty or could not be read'})
            return self._build_result(started, status='failed')

        df = self._map_columns(df)
        missing = [column for column in self.REQUIRED_COLUMNS if column not in df.columns]
        if missing:
            self.errors.append({'row': 0, 'message': f"Missing columns: {', '.join(missing)}"})
            return self._build_result(started, status='failed')

        self.stats['rows_total'] = len(df)

        expenses = []
        for index, row in df.iterrows():
            # Header is row 1 in the source file
            expense = self._build_expense(row, index + 2)
            if expense is None:
                self.stats['rows_skipped'] += 1
            else:
                expenses.append(expense)

        with transaction.atomic():
            for expense in expenses:
                expense.save()
        self.stats['rows_created'] = len(expenses)

        logger.info(
            "Imported %d expenses for %s from %s (%d skipped)",
            len(expenses), self.resort.code, file_path.name, self.stats['rows_skipped'],
        )

        status = 'completed_with_errors' if self.errors else 'completed'
        return self._build_result(started, status=status)

    def validate_file(self, file_path: str) -> Dict:
        """Check a file without importing it."""
        file_path = Path(file_path)
        issues = []
        warnings = []

        df = self._read_file(file_path)
        if df is None or df.empty:
            issues.append({'message': 'File is empty or could not be read'})
            return {'valid': False, 'issues': issues, 'warnings': warnings, 'stats': {}}

        df = self._map_columns(df)
        for column in self.REQUIRED_COLUMNS:
            if column not in df.columns:
                issues.append({'message': f'Missing required column: {column}'})

        stats = {
            'total_rows': len(df),
            'columns_found': [c for c in df.columns if c in self.column_mapping],
        }

        if 'expense_date' in df.columns:
            dates = [d for d in (self._parse_date(v) for v in df['expense_date']) if d]
            unparsed = len(df) - len(dates)
            if unparsed:
                warnings.append({'message': f'{unparsed} rows have unreadable dates'})
            if dates:
                stats['date_range'] = {'start': min(dates).isoformat(), 'end': max(dates).isoformat()}

        return {
            'valid': not issues,
            'issues': issues,
            'warnings': warnings,
            'stats': stats,
        }

    def _build_result(self, started, status) -> Dict:
        rows_total = self.stats['rows_total']
        return {
            'success': status != 'failed',
            'status': status,
            'rows_total': rows_total,
            'rows_created': self.stats['rows_created'],
            'rows_skipped': self.stats['rows_skipped'],
            'success_rate': (self.stats['rows_created'] / rows_total * 100) if rows_total else 0.0,
            'duration_seconds': (timezone.now() - started).total_seconds(),
            'errors': self.errors,
        }
