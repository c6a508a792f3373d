"""
Management command to import expenses from Excel/CSV files.

Usage:
    python manage.py import_expenses <resort_code> path/to/bills.xlsx
    python manage.py import_expenses <resort_code> path/to/bills.csv --validate-only
    python manage.py import_expenses <resort_code> path/to/bills.csv --verbose
"""

from django.core.management.base import BaseCommand, CommandError
from pathlib import Path


class Command(BaseCommand):
    help = 'Import expenses from Excel or CSV file'

    def add_arguments(self, parser):
        parser.add_argument('resort_code', type=str, help='Resort code')
        parser.add_argument(
            'file_path',
            type=str,
            help='Path to the Excel or CSV file to import'
        )
        parser.add_argument(
            '--validate-only',
            action='store_true',
            help='Only validate the file without importing'
        )
        parser.add_argument(
            '--verbose',
            action='store_true',
            help='Show every row error'
        )

    def handle(self, *args, **options):
        from resort.models import Resort
        from resort.services import ExpenseImportService

        try:
            resort = Resort.objects.get(code=options['resort_code'])
        except Resort.DoesNotExist:
            raise CommandError(f"Resort not found: {options['resort_code']}")

        file_path = Path(options['file_path'])
        if not file_path.exists():
            raise CommandError(f'File not found: {file_path}')
        if file_path.suffix.lower() not in ['.xlsx', '.xls', '.csv']:
            raise CommandError(f'Unsupported file format: {file_path.suffix}')

        service = ExpenseImportService(resort)

        self.stdout.write(f'Processing: {file_path.name} for {resort.name}')

        if options['validate_only']:
            result = service.validate_file(str(file_path))

            if result['valid']:
                self.stdout.write(self.style.SUCCESS('File is valid'))
            else:
                self.stdout.write(self.style.ERROR('File has issues'))

            for issue in result['issues']:
                self.stdout.write(self.style.ERROR(f"  - {issue['message']}"))
            for warning in result['warnings']:
                self.stdout.write(self.style.WARNING(f"  - {warning['message']}"))

            stats = result.get('stats', {})
            self.stdout.write(f"  Total rows: {stats.get('total_rows', '?')}")
            if stats.get('date_range'):
                self.stdout.write(f"  Date range: {stats['date_range']['start']} to {stats['date_range']['end']}")
            self.stdout.write(f"  Columns found: {', '.join(stats.get('columns_found', []))}")
            return

        try:
            result = service.import_file(str(file_path))
        except Exception as e:
            raise CommandError(f'Import failed: {e}')

        if result['success']:
            self.stdout.write(self.style.SUCCESS(f"Import completed: {result['status']}"))
        else:
            self.stdout.write(self.style.ERROR(f"Import failed: {result['status']}"))

        self.stdout.write(f"  Total rows:    {result['rows_total']}")
        self.stdout.write(self.style.SUCCESS(f"  Created:       {result['rows_created']}"))
        self.stdout.write(f"  Skipped:       {result['rows_skipped']}")
        self.stdout.write(f"  Success rate:  {result['success_rate']:.1f}%")

        errors = result['errors']
        if errors and (options['verbose'] or len(errors) <= 10):
            self.stdout.write(self.style.WARNING(f"Errors ({len(errors)}):"))
            for error in errors:
                self.stdout.write(f"  Row {error.get('row', '?')}: {error.get('message')}")
        elif errors:
            self.stdout.write(self.style.WARNING(f"{len(errors)} errors (use --verbose to see details)"))
