"""Invoice API views."""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend  # type: ignore
from rest_framework import permissions, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from .models import Invoice
from .serializers import InvoiceSerializer


class InvoiceViewSet(viewsets.ReadOnlyModelViewSet):
    """Staff access to invoices raised for approved bookings."""

    queryset = Invoice.objects.select_related("booking").all()
    serializer_class = InvoiceSerializer
    permission_classes = [permissions.IsAdminUser]
    filter_backends = [DjangoFilterBackend]
    filterset_fields = ["status", "booking"]

    @action(detail=True, methods=["post"], url_path="mark-paid")
    def mark_paid(self, request, pk=None):  # type: ignore
        invoice = self.get_object()
        if invoice.status != Invoice.Status.PAID:
            invoice.mark_paid()
        return Response(InvoiceSerializer(invoice).data)
