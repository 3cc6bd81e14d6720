"""
URL configuration for marine_poi project.
"""

from django.conf import settings
from django.contrib import admin
from django.http import JsonResponse
from django.shortcuts import redirect
from django.urls import include, path


def health_check(request):
    """Simple health check endpoint."""
    return JsonResponse({"status": "ok"})


def home_redirect(request):
    """Redirect root URL to the marker API."""
    return redirect("/api/markers/")


urlpatterns = [
    path("", home_redirect, name="home"),
    path("admin/", admin.site.urls),
    path("health/", health_check, name="health"),
    path("api/", include("markers.urls")),
    path("api/auth/", include("rest_framework.urls", namespace="rest_framework")),
]

if settings.DEBUG and "debug_toolbar" in settings.INSTALLED_APPS:
    import debug_toolbar

    urlpatterns = [
        path("__debug__/", include(debug_toolbar.urls)),
    ] + urlpatterns
