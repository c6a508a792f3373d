"""
URL configuration for Resort Back-Office project.
"""

from django.contrib import admin
from django.urls import path, include

admin.site.site_header = "Resort Back-Office Admin"
admin.site.site_title = "Resort Back-Office"
admin.site.index_title = "Bookings, seasons & expenses"

urlpatterns = [
    path('admin/', admin.site.urls),
    path('', include('resort.urls')),
]
