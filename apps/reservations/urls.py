"""URL routing for instrument requests."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import DefaultRouter  # type: ignore

from .views import AvailabilityView, ReservationCartView, ReservationRequestViewSet

router = DefaultRouter()
router.register(r"requests", ReservationRequestViewSet, basename="reservation-request")

urlpatterns = [
    path("availability/", AvailabilityView.as_view(), name="reservation-availability"),
    path("carts/", ReservationCartView.as_view(), name="reservation-cart"),
    path("", include(router.urls)),
]
