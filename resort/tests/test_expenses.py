from datetime import date
from decimal import Decimal
from unittest import mock

import pytest
from django.db import DatabaseError

from resort.models import Expense
from resort.services import (
    ExpenseImportService,
    monthly_expense_summary,
    yearly_expense_trend,
    attach_bill_urls,
    remove_bill_url,
    export_expenses_csv,
)


@pytest.fixture
def make_expense(resort):

    def _make(expense_date, subtotal, tax='0', **kwargs):
        return Expense.objects.create(
            resort=resort,
            expense_date=expense_date,
            subtotal=Decimal(subtotal),
            tax=Decimal(tax),
            **kwargs
        )

    return _make


@pytest.mark.django_db
class TestExpenseModel:

    def test_total_is_subtotal_plus_tax(self, make_expense):
        expense = make_expense(date(2025, 3, 5), '100.00', '6.00')
        assert expense.total == Decimal('106.00')

    def test_total_recomputed_on_update(self, make_expense):
        expense = make_expense(date(2025, 3, 5), '100.00', '6.00')

        expense.subtotal = Decimal('200.00')
        expense.total = Decimal('1.00')
        expense.save()
        expense.refresh_from_db()

        assert expense.total == Decimal('206.00')


@pytest.mark.django_db
class TestExpenseRollups:

    def test_monthly_summary(self, resort, make_expense):
        make_expense(date(2025, 3, 1), '1000', category='utilities')
        make_expense(date(2025, 3, 15), '500', '30', category='utilities')
        make_expense(date(2025, 3, 31), '2500', category='salary')
        make_expense(date(2025, 4, 1), '999', category='salary')

        summary = monthly_expense_summary(resort, '2025-03')

        assert summary['month'] == '2025-03'
        assert summary['count'] == 3
        assert summary['total'] == Decimal('4030')
        assert summary['by_category'] == {
            'salary': Decimal('2500'),
            'utilities': Decimal('1530'),
        }

    def test_empty_month(self, resort):
        summary = monthly_expense_summary(resort, '2025-03')
        assert summary == {'month': '2025-03', 'total': Decimal('0.00'), 'by_category': {}, 'count': 0}

    def test_yearly_trend(self, resort, make_expense):
        make_expense(date(2025, 1, 10), '100')
        make_expense(date(2025, 3, 10), '300')
        make_expense(date(2025, 3, 11), '200')

        trend = yearly_expense_trend(resort, 2025)

        assert len(trend) == 12
        assert trend[0]['total'] == Decimal('100')
        assert trend[2] == {'month': 3, 'month_name': 'Mar', 'total': Decimal('500'), 'count': 2}
        assert trend[1]['count'] == 0


@pytest.mark.django_db
class TestBillUrls:

    def test_attach_appends(self, make_expense):
        expense = make_expense(date(2025, 3, 5), '100', bill_urls=['https://files.example.com/a.pdf'])

        urls = attach_bill_urls(expense, ['https://files.example.com/b.pdf', ''])

        assert urls == ['https://files.example.com/a.pdf', 'https://files.example.com/b.pdf']
        expense.refresh_from_db()
        assert expense.bill_urls == urls

    def test_attach_merges_with_stored_list(self, make_expense):
        expense = make_expense(date(2025, 3, 5), '100')
        stale = Expense.objects.get(pk=expense.pk)

        attach_bill_urls(expense, ['https://files.example.com/a.pdf'])
        attach_bill_urls(stale, ['https://files.example.com/b.pdf'])

        expense.refresh_from_db()
        assert expense.bill_urls == ['https://files.example.com/a.pdf', 'https://files.example.com/b.pdf']

    def test_remove(self, make_expense):
        expense = make_expense(date(2025, 3, 5), '100', bill_urls=['a', 'b', 'a'])

        assert remove_bill_url(expense, 'a') == ['b']
        expense.refresh_from_db()
        assert expense.bill_urls == ['b']


@pytest.mark.django_db
class TestExportCsv:

    def test_rows_and_total(self, resort, make_expense):
        make_expense(date(2025, 3, 2), '100.00', '6.00', vendor='TNB', category='utilities')
        make_expense(date(2025, 3, 9), '50.00', vendor='Petronas', category='fuel')
        make_expense(date(2025, 4, 1), '999.00', vendor='Later')

        content = export_expenses_csv(resort, '2025-03')
        lines = content.splitlines()

        assert lines[0] == 'Expenses Export'
        assert 'Month:,2025-03' in lines
        assert any(line.startswith('2025-03-02,TNB,utilities') and '106.00' in line for line in lines)
        assert not any('Later' in line for line in lines)
        assert lines[-1] == ',,,TOTAL,,,156.00'

    def test_category_filter(self, resort, make_expense):
        make_expense(date(2025, 3, 2), '100.00', vendor='TNB', category='utilities')
        make_expense(date(2025, 3, 9), '50.00', vendor='Petronas', category='fuel')

        content = export_expenses_csv(resort, '2025-03', categories=['fuel'])

        assert 'Petronas' in content
        assert 'TNB' not in content


@pytest.mark.django_db
class TestExpenseImport:

    def write_csv(self, tmp_path, text):
        path = tmp_path / 'bills.csv'
        path.write_text(text)
        return path

    def test_imports_valid_rows_and_reports_bad_ones(self, resort, tmp_path):
        path = self.write_csv(tmp_path, (
            'Date,Supplier,Category,Amount,Tax,Status\n'
            '2025-03-05,TNB,Utilities,150.00,9.00,Paid\n'
            '06/03/2025,Petronas,fuel,80,,unpaid\n'
            'not a date,Nobody,misc,10,,paid\n'
        ))

        result = ExpenseImportService(resort).import_file(str(path))

        assert result['success'] is True
        assert result['status'] == 'completed_with_errors'
        assert result['rows_total'] == 3
        assert result['rows_created'] == 2
        assert result['rows_skipped'] == 1
        assert result['errors'][0]['row'] == 4

        tnb = Expense.objects.get(resort=resort, vendor='TNB')
        assert tnb.category == 'utilities'
        assert tnb.total == Decimal('159.00')
        petronas = Expense.objects.get(resort=resort, vendor='Petronas')
        assert petronas.expense_date == date(2025, 3, 6)
        assert petronas.status == 'unpaid'
        assert petronas.payment_method == 'bank_transfer'

    def test_missing_required_column(self, resort, tmp_path):
        path = self.write_csv(tmp_path, 'Supplier,Amount\nTNB,150\n')

        result = ExpenseImportService(resort).import_file(str(path))

        assert result['success'] is False
        assert result['status'] == 'failed'
        assert not Expense.objects.exists()

    def test_validate_file(self, resort, tmp_path):
        path = self.write_csv(tmp_path, (
            'Date,Supplier,Amount\n'
            '2025-03-05,TNB,150\n'
            '2025-03-20,TNB,150\n'
        ))

        result = ExpenseImportService(resort).validate_file(str(path))

        assert result['valid'] is True
        assert result['stats']['total_rows'] == 2
        assert result['stats']['date_range'] == {'start': '2025-03-05', 'end': '2025-03-20'}
        assert not Expense.objects.exists()

    def test_failed_save_rolls_back_the_whole_file(self, resort, tmp_path):
        path = self.write_csv(tmp_path, (
            'Date,Supplier,Amount\n'
            '2025-03-05,TNB,150\n'
            '2025-03-06,Petronas,80\n'
        ))
        real_save = Expense.save
        calls = []

        def save(expense, *args, **kwargs):
            calls.append(expense)
            if len(calls) == 2:
                raise DatabaseError('connection lost')
            return real_save(expense, *args, **kwargs)

        with mock.patch.object(Expense, 'save', autospec=True, side_effect=save):
            with pytest.raises(DatabaseError):
                ExpenseImportService(resort).import_file(str(path))

        assert not Expense.objects.exists()
