"""
Forecast views: monthly forecast, dashboard data and the forecast PDF.
"""

import logging
from datetime import date

from django.http import JsonResponse, HttpResponse
from django.shortcuts import get_object_or_404
from django.views.decorators.http import require_GET
from django.views.generic import View

from resort.models import Resort
from resort.services import MonthlyForecastService, BookingAnalysisService, ForecastReportService, parse_month

from .mixins import ResortMixin, to_json

logger = logging.getLogger(__name__)


# =============================================================================
# AJAX ENDPOINTS
# =============================================================================

@require_GET
def monthly_forecast_ajax(request, resort_code):
    """
    AJAX endpoint for the monthly profit forecast.

    Query params:
        month: YYYY-MM (default: current month)
    """
    resort = get_object_or_404(Resort, code=resort_code, is_active=True)

    try:
        month = parse_month(request.GET.get('month') or date.today())
    except ValueError as e:
        return JsonResponse({'success': False, 'error': str(e)}, status=400)

    try:
        forecast = MonthlyForecastService(resort).compute_monthly_forecast(month)
    except Exception as e:
        logger.exception("Monthly forecast AJAX error")
        return JsonResponse({'success': False, 'message': str(e)}, status=500)

    return JsonResponse({
        'success': True,
        'forecast': to_json(forecast),
    })


@require_GET
def dashboard_data_ajax(request, resort_code):
    """
    AJAX endpoint returning every dashboard widget's data.

    Returns JSON with forecast, revenue_by_room_type, season_mix,
    profit_by_month and occupancy.
    """
    resort = get_object_or_404(Resort, code=resort_code, is_active=True)

    try:
        dashboard_data = BookingAnalysisService(resort).get_dashboard_data()
    except Exception as e:
        logger.exception("Dashboard AJAX error")
        return JsonResponse({'success': False, 'message': str(e)}, status=500)

    return JsonResponse({
        'success': True,
        'data': to_json(dashboard_data),
    })


# =============================================================================
# PDF EXPORT
# =============================================================================

class ForecastReportPDFView(ResortMixin, View):
    """
    Export the monthly forecast as a PDF.

    URL: /resort/{resort_code}/reports/forecast.pdf?month=YYYY-MM
    """

    def get(self, request, *args, **kwargs):
        resort = self.get_resort()

        try:
            month = parse_month(request.GET.get('month') or date.today())
        except ValueError as e:
            return HttpResponse(str(e), status=400)

        pdf = ForecastReportService(resort).generate_pdf(month)

        filename = f"{resort.code}_forecast_{month:%Y_%m}.pdf"
        response = HttpResponse(pdf, content_type='application/pdf')
        response['Content-Disposition'] = f'attachment; filename="{filename}"'
        return response
