"""
URL configuration for core_backend project.

The `urlpatterns` list routes URLs to views. For more information please see:
    https://docs.djangoproject.com/en/5.1/topics/http/urls/
"""

from django.contrib import admin
from django.urls import path, include
from django.http import JsonResponse


def health_check(request):
    """Simple health check endpoint that doesn't require authentication"""
    return JsonResponse({"status": "ok", "message": "Backend is running"})


urlpatterns = [
    path("api/health/", health_check, name="health_check"),
    path("admin/", admin.site.urls),
    # The orders app registers orders/, tables/ and kitchen/items/ itself.
    path("api/", include("orders.urls")),
    path("api/", include("customers.urls")),
    path("api/inventory/", include("inventory.urls")),
    path("api/finance/", include("finance.urls")),
]
