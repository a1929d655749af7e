"""API views for ensemble bookings."""

from __future__ import annotations

from django.db.models import Q
from django_filters.rest_framework import DjangoFilterBackend  # type: ignore
from rest_framework import mixins, permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from shared.application.message_bus import message_bus

from .application.command_handlers import TransitionBookingStatusCommand
from .domain.lifecycle import APPROVED, REJECTED
from .models import Booking
from .serializers import BookingCreateSerializer, BookingSerializer
from .services import find_conflicts


class BookingViewSet(
    mixins.CreateModelMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    """Anyone may request the ensemble; staff review and decide."""

    queryset = Booking.objects.all()
    filter_backends = [DjangoFilterBackend]
    filterset_fields = ["status", "service", "date"]
    lookup_value_regex = r"\d+"

    def get_permissions(self):  # type: ignore
        if self.action == "create":
            return [permissions.AllowAny()]
        if self.action == "mine":
            return [permissions.IsAuthenticated()]
        return [permissions.IsAdminUser()]

    def get_serializer_class(self):  # type: ignore
        if self.action == "create":
            return BookingCreateSerializer
        return BookingSerializer

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        booking = message_bus.handle_command(serializer.to_command())
        return Response(BookingSerializer(booking).data, status=status.HTTP_201_CREATED)

    def _transition(self, request, pk, target_status):  # type: ignore
        booking = message_bus.handle_command(
            TransitionBookingStatusCommand(
                booking_id=int(pk),
                target_status=target_status,
                actor_id=request.user.pk,
            )
        )
        return Response(BookingSerializer(booking).data)

    @action(detail=True, methods=["post"])
    def approve(self, request, pk=None):  # type: ignore
        return self._transition(request, pk, APPROVED)

    @action(detail=True, methods=["post"])
    def reject(self, request, pk=None):  # type: ignore
        return self._transition(request, pk, REJECTED)

    @action(detail=True, methods=["get"])
    def conflicts(self, request, pk=None):  # type: ignore
        booking: Booking = self.get_object()  # type: ignore
        conflicts = find_conflicts(booking)
        return Response(
            {
                "booking": booking.pk,
                "has_conflicts": bool(conflicts),
                "conflicts": [other.summary() for other in conflicts],
            }
        )

    @action(detail=False, methods=["get"])
    def mine(self, request):  # type: ignore
        """Bookings the current user submitted or that were made under their email."""
        mine = Q(requested_by=request.user)
        if request.user.email:
            mine |= Q(email__iexact=request.user.email)
        queryset = self.filter_queryset(self.get_queryset().filter(mine))
        return Response(BookingSerializer(queryset, many=True).data)
