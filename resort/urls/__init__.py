"""
URL configuration package.

Combines the URL patterns of the five pillars into a single
urlpatterns list under the 'resort' namespace.
"""

from .pricing import urlpatterns as pricing_urls
from .forecasts import urlpatterns as forecast_urls
from .seasons import urlpatterns as season_urls
from .expenses import urlpatterns as expense_urls
from .rates import urlpatterns as rate_urls

app_name = 'resort'

urlpatterns = (
    pricing_urls
    + forecast_urls
    + season_urls
    + expense_urls
    + rate_urls
)
