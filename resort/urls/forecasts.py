"""Forecast URL patterns: monthly forecast, dashboard, PDF report."""

from django.urls import path
from resort.views import (
    monthly_forecast_ajax,
    dashboard_data_ajax,
    ForecastReportPDFView,
)

urlpatterns = [
    path('resort/<slug:resort_code>/api/forecast/',
         monthly_forecast_ajax, name='monthly_forecast_ajax'),
    path('resort/<slug:resort_code>/api/dashboard/',
         dashboard_data_ajax, name='dashboard_data_ajax'),
    path('resort/<slug:resort_code>/reports/forecast.pdf',
         ForecastReportPDFView.as_view(), name='forecast_report_pdf'),
]
