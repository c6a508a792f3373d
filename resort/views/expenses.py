"""
Expense endpoints: CRUD, monthly summary, yearly trend, bills and CSV export.
"""

import logging
from datetime import date

from django.http import HttpResponse
from django.shortcuts import get_object_or_404
from django.views.generic import View

from resort.models import Expense
from resort.services import (
    monthly_expense_summary,
    yearly_expense_trend,
    attach_bill_urls,
    remove_bill_url,
    export_expenses_csv,
    parse_month,
)
from resort.services.expense_service import get_month_expenses

from .mixins import ResortMixin

logger = logging.getLogger(__name__)


def serialize_expense(expense):
    return {
        'id': expense.id,
        'expense_date': expense.expense_date,
        'vendor': expense.vendor,
        'category': expense.category,
        'description': expense.description,
        'subtotal': expense.subtotal,
        'tax': expense.tax,
        'total': expense.total,
        'payment_method': expense.payment_method,
        'status': expense.status,
        'reference_no': expense.reference_no,
        'bill_urls': expense.bill_urls or [],
    }


class ExpenseFormMixin(ResortMixin):
    """Validation shared by expense create and update."""

    TEXT_FIELDS = {
        'vendor': 200,
        'description': None,
        'reference_no': 100,
    }

    def get_month(self):
        return parse_month(self.request.GET.get('month') or date.today())

    def get_categories(self):
        """``?category=`` may repeat or be comma separated."""
        categories = []
        for value in self.request.GET.getlist('category'):
            categories.extend(c.strip() for c in value.split(',') if c.strip())
        return categories

    def apply_expense_data(self, expense, data, partial=False):
        """
        Copy validated fields from ``data`` onto ``expense``.

        Returns an error message, or None when everything is valid.
        """
        if 'expense_date' in data or not partial:
            expense_date = self.parse_date(data.get('expense_date'))
            if expense_date is None:
                return 'Valid expense_date is required'
            expense.expense_date = expense_date

        for field in ('subtotal', 'tax'):
            if field in data:
                value = self.parse_decimal(data[field], default=None)
                if value is None or value < 0:
                    return f'{field} must be a non-negative number'
                setattr(expense, field, value)

        choices = {
            'category': Expense.CATEGORIES,
            'payment_method': Expense.PAYMENT_METHODS,
            'status': Expense.STATUSES,
        }
        for field, allowed in choices.items():
            if field in data:
                if data[field] not in allowed:
                    return f'Unknown {field}: {data[field]}'
                setattr(expense, field, data[field])

        for field, max_length in self.TEXT_FIELDS.items():
            if field in data:
                value = self.parse_text(data[field])
                if value is None:
                    return f'{field} must be a string'
                if max_length and len(value) > max_length:
                    return f'{field} is too long (max {max_length} characters)'
                setattr(expense, field, value)

        if 'bill_urls' in data:
            urls = data['bill_urls']
            if not isinstance(urls, list) or not all(isinstance(u, str) for u in urls):
                return 'bill_urls must be a list of strings'
            expense.bill_urls = urls

        return None


class ExpenseListView(ExpenseFormMixin, View):
    """
    API: Expenses of a month (GET) or create an expense (POST).

    GET params: month=YYYY-MM, category (repeatable)
    """

    def get(self, request, *args, **kwargs):
        resort = self.get_resort()
        try:
            month = self.get_month()
        except ValueError as e:
            return self.error_response(str(e))

        expenses = get_month_expenses(resort, month, self.get_categories())
        return self.success_response(data={
            'month': month.strftime('%Y-%m'),
            'expenses': [serialize_expense(e) for e in expenses],
        })

    def post(self, request, *args, **kwargs):
        resort = self.get_resort()

        data = self.parse_json_body()
        if data is None:
            return self.error_response('Invalid JSON')

        expense = Expense(resort=resort)
        error = self.apply_expense_data(expense, data)
        if error:
            return self.error_response(error)

        expense.save()
        logger.info("Created expense %s for %s: %s", expense.pk, resort.code, expense.total)

        return self.success_response(
            data=serialize_expense(expense),
            message='Expense created successfully',
            status=201,
        )


class ExpenseUpdateView(ExpenseFormMixin, View):
    """API: Partial update of an expense. The total is recomputed on save."""

    def post(self, request, *args, **kwargs):
        resort = self.get_resort()
        expense = get_object_or_404(Expense, pk=kwargs.get('pk'), resort=resort)

        data = self.parse_json_body()
        if data is None:
            return self.error_response('Invalid JSON')

        error = self.apply_expense_data(expense, data, partial=True)
        if error:
            return self.error_response(error)

        expense.save()
        return self.success_response(data=serialize_expense(expense), message='Expense updated successfully')


class ExpenseDeleteView(ResortMixin, View):
    """API: Delete an expense."""

    def post(self, request, *args, **kwargs):
        resort = self.get_resort()
        expense = get_object_or_404(Expense, pk=kwargs.get('pk'), resort=resort)
        expense_id = expense.id
        expense.delete()
        logger.info("Deleted expense %s for %s", expense_id, resort.code)
        return self.success_response(message='Expense deleted successfully')


class ExpenseBillsView(ResortMixin, View):
    """
    API: Attach or remove bill URLs.

    POST body: {"add": [url, ...]} and/or {"remove": url}
    """

    def post(self, request, *args, **kwargs):
        resort = self.get_resort()
        expense = get_object_or_404(Expense, pk=kwargs.get('pk'), resort=resort)

        data = self.parse_json_body()
        if data is None:
            return self.error_response('Invalid JSON')

        add = data.get('add') or []
        remove = data.get('remove')
        if not isinstance(add, list) or not all(isinstance(u, str) for u in add):
            return self.error_response('add must be a list of URLs')
        if remove is not None and not isinstance(remove, str):
            return self.error_response('remove must be a URL')
        if not add and not remove:
            return self.error_response('Nothing to add or remove')

        try:
            if add:
                attach_bill_urls(expense, add)
            if remove:
                remove_bill_url(expense, remove)
        except Exception as e:
            logger.exception("Expense bill update error")
            return self.json_response({'success': False, 'message': str(e)}, status=500)

        return self.success_response(data={'bill_urls': expense.bill_urls})


class ExpenseSummaryView(ExpenseFormMixin, View):
    """API: Month total, per-category totals and count."""

    def get(self, request, *args, **kwargs):
        resort = self.get_resort()
        try:
            month = self.get_month()
        except ValueError as e:
            return self.error_response(str(e))
        return self.success_response(data=monthly_expense_summary(resort, month))


class ExpenseTrendView(ResortMixin, View):
    """API: Monthly expense totals for a year."""

    def get(self, request, *args, **kwargs):
        resort = self.get_resort()
        year = self.parse_year()
        if year is None:
            return self.error_response('Invalid year')
        return self.success_response(data={'year': year, 'months': yearly_expense_trend(resort, year)})


class ExpenseExportView(ExpenseFormMixin, View):
    """
    Export a month's expenses as CSV.

    URL: /resort/{resort_code}/api/expenses/export/?month=YYYY-MM
    """

    def get(self, request, *args, **kwargs):
        resort = self.get_resort()
        try:
            month = self.get_month()
        except ValueError as e:
            return HttpResponse(str(e), status=400)

        content = export_expenses_csv(resort, month, self.get_categories())

        filename = f"{resort.code}_expenses_{month:%Y_%m}.csv"
        response = HttpResponse(content, content_type='text/csv')
        response['Content-Disposition'] = f'attachment; filename="{filename}"'
        return response
