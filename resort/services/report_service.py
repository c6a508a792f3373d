"""
PDF reports: monthly forecast with expense summary.
"""

from io import BytesIO
from decimal import Decimal

from django.utils import timezone
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import mm
from reportlab.platypus import SimpleDocTemplate, Table, TableStyle, Paragraph, Spacer

from .forecast_service import MonthlyForecastService, parse_month
from .expense_service import monthly_expense_summary


class ForecastReportService:
    """
    Builds the monthly forecast PDF for a resort.

    Usage:
        pdf_bytes = ForecastReportService(resort).generate_pdf('2025-03')
    """

    HEADER_COLOR = colors.HexColor('#1e3a5f')
    ACCENT_COLOR = colors.HexColor('#059669')

    def __init__(self, resort):
        self.resort = resort
        self.currency = resort.currency_symbol or 'RM'

    def _money(self, value):
        return f"{self.currency} {Decimal(value):,.2f}"

    def _table(self, rows, col_widths):
        table = Table(rows, colWidths=col_widths)
        table.setStyle(TableStyle([
            ('BACKGROUND', (0, 0), (-1, 0), self.HEADER_COLOR),
            ('TEXTCOLOR', (0, 0), (-1, 0), colors.white),
            ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
            ('FONTSIZE', (0, 0), (-1, -1), 9),
            ('ALIGN', (1, 0), (-1, -1), 'RIGHT'),
            ('GRID', (0, 0), (-1, -1), 0.5, colors.lightgrey),
            ('ROWBACKGROUNDS', (0, 1), (-1, -1), [colors.white, colors.HexColor('#f1f5f9')]),
            ('TOPPADDING', (0, 0), (-1, -1), 4),
            ('BOTTOMPADDING', (0, 0), (-1, -1), 4),
        ]))
        return table

    def build_context(self, month):
        """Forecast and expense figures the report prints."""
        month_start = parse_month(month)
        return {
            'month': month_start,
            'forecast': MonthlyForecastService(self.resort).compute_monthly_forecast(month_start),
            'expenses': monthly_expense_summary(self.resort, month_start),
        }

    def generate_pdf(self, month):
        """Render the report and return the PDF bytes."""
        context = self.build_context(month)
        forecast = context['forecast']
        expenses = context['expenses']

        buffer = BytesIO()
        doc = SimpleDocTemplate(
            buffer,
            pagesize=A4,
            rightMargin=15*mm,
            leftMargin=15*mm,
            topMargin=15*mm,
            bottomMargin=15*mm,
            title=f"Monthly Forecast - {self.resort.name}",
        )

        styles = getSampleStyleSheet()
        title_style = ParagraphStyle(
            'ReportTitle',
            parent=styles['Heading1'],
            fontSize=18,
            spaceAfter=6,
            textColor=self.HEADER_COLOR,
        )
        subtitle_style = ParagraphStyle(
            'ReportSubtitle',
            parent=styles['Normal'],
            fontSize=10,
            textColor=colors.grey,
            spaceAfter=12,
        )
        section_style = ParagraphStyle(
            'SectionHeader',
            parent=styles['Heading2'],
            fontSize=12,
            spaceBefore=12,
            spaceAfter=6,
            textColor=self.ACCENT_COLOR,
        )

        story = [
            Paragraph(f"Monthly Forecast - {self.resort.name}", title_style),
            Paragraph(
                f"{context['month']:%B %Y} | Generated: {timezone.now():%B %d, %Y at %H:%M}",
                subtitle_style,
            ),
            Paragraph("Bookings and Profit", section_style),
            self._table([
                ['Metric', 'Value'],
                ['Bookings', str(forecast['total_bookings'])],
                ['Nights', str(forecast['total_nights'])],
                ['Revenue', self._money(forecast['revenue'])],
                ['Profit', self._money(forecast['profit'])],
                ['Avg profit / booking', self._money(forecast['avg_profit_per_booking'])],
                ['Monthly overhead', self._money(forecast['overhead_monthly'])],
                ['Net profit', self._money(forecast['net_profit'])],
                ['Breakeven bookings', str(forecast['breakeven_bookings'])],
            ], [90*mm, 60*mm]),
            Paragraph("Scenarios", section_style),
            self._table([
                ['Scenario', 'Net profit'],
                ['50% of booked profit', self._money(forecast['projection_50'])],
                ['75% of booked profit', self._money(forecast['projection_75'])],
                ['100% of booked profit', self._money(forecast['projection_100'])],
            ], [90*mm, 60*mm]),
            Paragraph("Expenses", section_style),
        ]

        expense_rows = [['Category', 'Total']]
        for category, total in sorted(expenses['by_category'].items()):
            expense_rows.append([category.replace('_', ' ').title(), self._money(total)])
        expense_rows.append([f"Total ({expenses['count']} bills)", self._money(expenses['total'])])
        story.append(self._table(expense_rows, [90*mm, 60*mm]))
        story.append(Spacer(1, 6*mm))

        doc.build(story)
        return buffer.getvalue()
