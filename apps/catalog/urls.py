"""URL routing for the instrument catalog."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import DefaultRouter  # type: ignore

from .views import InstrumentViewSet

router = DefaultRouter()
router.register(r"instruments", InstrumentViewSet, basename="instrument")

urlpatterns = [
    path("", include(router.urls)),
]
