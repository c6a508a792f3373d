"""Expense URL patterns."""

from django.urls import path
from resort.views import (
    ExpenseListView,
    ExpenseUpdateView,
    ExpenseDeleteView,
    ExpenseBillsView,
    ExpenseSummaryView,
    ExpenseTrendView,
    ExpenseExportView,
)

urlpatterns = [
    path('resort/<slug:resort_code>/api/expenses/',
         ExpenseListView.as_view(), name='expenses'),
    path('resort/<slug:resort_code>/api/expenses/<int:pk>/update/',
         ExpenseUpdateView.as_view(), name='expense_update'),
    path('resort/<slug:resort_code>/api/expenses/<int:pk>/delete/',
         ExpenseDeleteView.as_view(), name='expense_delete'),
    path('resort/<slug:resort_code>/api/expenses/<int:pk>/bills/',
         ExpenseBillsView.as_view(), name='expense_bills'),
    path('resort/<slug:resort_code>/api/expenses/summary/',
         ExpenseSummaryView.as_view(), name='expense_summary'),
    path('resort/<slug:resort_code>/api/expenses/trend/',
         ExpenseTrendView.as_view(), name='expense_trend'),
    path('resort/<slug:resort_code>/api/expenses/export/',
         ExpenseExportView.as_view(), name='expense_export'),
]
