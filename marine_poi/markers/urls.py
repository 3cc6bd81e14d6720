"""
URL configuration for markers app API endpoints.
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .views import MarkerViewSet, ReviewViewSet

router = DefaultRouter()
router.register(r"markers", MarkerViewSet, basename="marker")
router.register(r"reviews", ReviewViewSet, basename="review")

app_name = "markers"

urlpatterns = [
    path("", include(router.urls)),
]
