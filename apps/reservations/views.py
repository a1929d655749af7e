"""API views for instrument requests."""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend  # type: ignore
from rest_framework import permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import APIView  # type: ignore

from shared.application.message_bus import message_bus
from shared.domain.value_objects import DateRange

from .application.command_handlers import TransitionRequestStatusCommand
from .domain import lifecycle
from .models import ReservationRequest
from .serializers import (
    AvailabilityQuerySerializer,
    ReservationCartSerializer,
    ReservationRequestSerializer,
)
from .services import availability_breakdown


class AvailabilityView(APIView):
    """Live availability of one instrument for a date range (advisory)."""

    permission_classes = [permissions.AllowAny]

    def get(self, request):  # type: ignore
        query = AvailabilityQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        dates = DateRange(query.validated_data["start"], query.validated_data["end"])
        return Response(availability_breakdown(query.validated_data["instrument"], dates))


class ReservationCartView(APIView):
    """Create a cart of rent/borrow requests atomically."""

    permission_classes = [permissions.IsAuthenticated]

    def post(self, request):  # type: ignore
        serializer = ReservationCartSerializer(data=request.data, context={"request": request})
        serializer.is_valid(raise_exception=True)
        command = serializer.to_command(request.headers.get("Idempotency-Key"))
        result = message_bus.handle_command(command)
        requests = ReservationRequest.objects.filter(pk__in=result.request_ids).select_related(
            "instrument", "cart"
        )
        by_id = {item.pk: item for item in requests}
        return Response(
            {
                "cart_id": str(result.cart_id),
                "request_ids": result.request_ids,
                "reconciliation": result.reconciliation,
                "replayed": result.replayed,
                "requests": ReservationRequestSerializer(
                    [by_id[pk] for pk in result.request_ids], many=True
                ).data,
            },
            status=status.HTTP_200_OK if result.replayed else status.HTTP_201_CREATED,
        )


class ReservationRequestViewSet(viewsets.ReadOnlyModelViewSet):
    """Staff view of the request ledger and its status transitions."""

    queryset = ReservationRequest.objects.select_related("instrument", "cart").all()
    serializer_class = ReservationRequestSerializer
    filter_backends = [DjangoFilterBackend]
    filterset_fields = ["status", "kind", "instrument__slug", "requester_email"]
    lookup_value_regex = r"\d+"

    def get_permissions(self):  # type: ignore
        if self.action == "mine":
            return [permissions.IsAuthenticated()]
        return [permissions.IsAdminUser()]

    @action(detail=False, methods=["get"])
    def mine(self, request):  # type: ignore
        """
        Requests the current user submitted, newest first.

        GET /api/v1/reservations/requests/mine/?status=pending
        """
        queryset = self.filter_queryset(self.get_queryset().filter(requested_by=request.user))
        return Response(self.get_serializer(queryset, many=True).data)

    def _transition(self, request, pk, target_status):  # type: ignore
        updated = message_bus.handle_command(
            TransitionRequestStatusCommand(
                request_id=int(pk),
                target_status=target_status,
                actor_id=request.user.pk,
            )
        )
        return Response(ReservationRequestSerializer(updated).data)

    @action(detail=True, methods=["post"])
    def approve(self, request, pk=None):  # type: ignore
        return self._transition(request, pk, lifecycle.APPROVED)

    @action(detail=True, methods=["post"])
    def reject(self, request, pk=None):  # type: ignore
        return self._transition(request, pk, lifecycle.REJECTED)

    @action(detail=True, methods=["post"], url_path="mark-paid")
    def mark_paid(self, request, pk=None):  # type: ignore
        return self._transition(request, pk, lifecycle.PAID)

    @action(detail=True, methods=["post"], url_path="mark-returned")
    def mark_returned(self, request, pk=None):  # type: ignore
        return self._transition(request, pk, lifecycle.RETURNED)
