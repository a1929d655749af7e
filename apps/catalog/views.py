"""Read-only catalog API."""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend  # type: ignore
from rest_framework import permissions, viewsets  # type: ignore
from rest_framework.filters import OrderingFilter, SearchFilter  # type: ignore

from .filters import InstrumentFilterSet
from .models import Instrument
from .serializers import InstrumentSerializer


class InstrumentViewSet(viewsets.ReadOnlyModelViewSet):
    """Instruments offered for rent or borrow; archived rows are hidden."""

    queryset = Instrument.objects.filter(is_archived=False)
    serializer_class = InstrumentSerializer
    permission_classes = [permissions.AllowAny]
    lookup_field = "slug"
    filter_backends = [DjangoFilterBackend, SearchFilter, OrderingFilter]
    filterset_class = InstrumentFilterSet
    search_fields = ["name", "brand", "category", "slug"]
    ordering_fields = ["name", "price_per_day", "total_quantity"]
