"""
View mixins: ResortMixin and JSON helpers shared by the API views.
"""

import json
import logging
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from django.shortcuts import get_object_or_404
from django.http import JsonResponse

from resort.models import Resort

logger = logging.getLogger(__name__)


def validation_message(error):
    """Flatten a ValidationError into one 'field: message' line."""
    if hasattr(error, 'message_dict'):
        return '; '.join(
            f"{field}: {' '.join(messages)}" for field, messages in error.message_dict.items()
        )
    return ' '.join(error.messages)


def to_json(value):
    """Recursively turn Decimals into floats and dates into ISO strings."""
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, dict):
        return {key: to_json(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_json(item) for item in value]
    return value


class ResortMixin:
    """
    Mixin to get the resort from URL kwargs and answer in JSON.

    URL kwargs:
        - resort_code: Resort.code
    """

    def get_resort(self):
        """Get active resort by code from URL."""
        return get_object_or_404(
            Resort.objects.filter(is_active=True),
            code=self.kwargs.get('resort_code'),
        )

    def json_response(self, data, status=200):
        """Return JSON response."""
        return JsonResponse(to_json(data), status=status, safe=False)

    def error_response(self, message, status=400):
        """Return error JSON response."""
        return JsonResponse({'success': False, 'error': message}, status=status)

    def success_response(self, data=None, message=None, status=200):
        """Return success JSON response."""
        response = {'success': True}
        if message:
            response['message'] = message
        if data is not None:
            response['data'] = to_json(data)
        return JsonResponse(response, status=status)

    def parse_json_body(self):
        """Request body as a dict (None when it is not a JSON object)."""
        try:
            data = json.loads(self.request.body or b'{}')
        except (json.JSONDecodeError, UnicodeDecodeError):
            return None
        return data if isinstance(data, dict) else None

    def parse_decimal(self, value, default=Decimal('0.00')):
        """Safely parse decimal from string."""
        if value is None or value == '':
            return default
        try:
            return Decimal(str(value))
        except (InvalidOperation, ValueError):
            return default

    def parse_int(self, value, default=None):
        if value is None or value == '':
            return default
        try:
            return int(value)
        except (TypeError, ValueError):
            return default

    def parse_text(self, value):
        """Stripped string ('' when missing, None when not a string)."""
        if value is None:
            return ''
        if not isinstance(value, str):
            return None
        return value.strip()

    def parse_date(self, value):
        """Parse date from string (YYYY-MM-DD)."""
        if not value:
            return None
        try:
            return datetime.strptime(str(value), '%Y-%m-%d').date()
        except ValueError:
            return None

    def parse_year(self):
        """``?year=`` query parameter, current year when absent, None when invalid."""
        value = self.request.GET.get('year')
        if not value:
            return date.today().year
        return self.parse_int(value)
