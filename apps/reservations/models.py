"""Instrument request ledger."""

from __future__ import annotations

import uuid
from decimal import Decimal

from django.conf import settings  # type: ignore
from django.core.validators import MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from shared.domain.value_objects import DateRange

from .domain import lifecycle
from .domain.inventory import Allocation


class ReservationCart(models.Model):
    """A batch of request lines admitted together, all or nothing."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    idempotency_key = models.CharField(
        max_length=128,
        unique=True,
        null=True,
        blank=True,
        help_text=_("Client supplied key; resubmitting it returns the original requests."),
    )
    requester_email = models.EmailField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _("Reservation cart")
        verbose_name_plural = _("Reservation carts")
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return f"Cart {self.id}"

    def request_ids(self) -> list[int]:
        return list(self.requests.order_by("cart_position").values_list("id", flat=True))


class ReservationRequestQuerySet(models.QuerySet):
    def consuming_capacity(self):
        return self.filter(status__in=lifecycle.CAPACITY_CONSUMING)

    def overlapping(self, dates: DateRange):
        return self.filter(start_date__lte=dates.end_date, end_date__gte=dates.start_date)


class ReservationRequest(models.Model):
    """A rent or borrow request for ``quantity`` units of one instrument."""

    class Kind(models.TextChoices):
        RENT = "rent", _("Rent")
        BORROW = "borrow", _("Borrow")

    class Status(models.TextChoices):
        PENDING = lifecycle.PENDING, _("Pending")
        APPROVED = lifecycle.APPROVED, _("Approved")
        REJECTED = lifecycle.REJECTED, _("Rejected")
        PAID = lifecycle.PAID, _("Paid")
        RETURNED = lifecycle.RETURNED, _("Returned")

    kind = models.CharField(max_length=10, choices=Kind.choices, default=Kind.RENT)
    instrument = models.ForeignKey(
        "catalog.Instrument",
        on_delete=models.PROTECT,
        related_name="reservation_requests",
    )
    cart = models.ForeignKey(
        ReservationCart,
        on_delete=models.PROTECT,
        related_name="requests",
    )
    cart_position = models.PositiveSmallIntegerField(default=0)
    quantity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    start_date = models.DateField()
    end_date = models.DateField()
    status = models.CharField(
        max_length=16,
        choices=Status.choices,
        default=Status.PENDING,
    )
    requester_name = models.CharField(max_length=150)
    requester_email = models.EmailField()
    requester_phone = models.CharField(max_length=32, blank=True)
    purpose = models.CharField(max_length=255, blank=True)
    notes = models.TextField(blank=True)
    requested_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="reservation_requests",
    )
    rental_fee = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text=_("Informational fee computed at submission."),
    )
    decided_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="decided_reservation_requests",
    )
    decided_at = models.DateTimeField(null=True, blank=True)
    paid_at = models.DateTimeField(null=True, blank=True)
    returned_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = ReservationRequestQuerySet.as_manager()

    class Meta:
        verbose_name = _("Reservation request")
        verbose_name_plural = _("Reservation requests")
        ordering = ["-created_at", "cart_position"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(end_date__gte=models.F("start_date")),
                name="reservation_valid_dates",
            ),
            models.CheckConstraint(
                condition=models.Q(quantity__gte=1),
                name="reservation_positive_quantity",
            ),
        ]
        indexes = [
            models.Index(fields=["instrument", "status", "start_date", "end_date"]),
            models.Index(fields=["status"]),
        ]

    def __str__(self) -> str:
        return f"{self.get_kind_display()} #{self.pk} {self.quantity}x{self.instrument_id} ({self.status})"

    @property
    def dates(self) -> DateRange:
        return DateRange(self.start_date, self.end_date)

    @property
    def consumes_capacity(self) -> bool:
        return self.status in lifecycle.CAPACITY_CONSUMING

    def to_allocation(self) -> Allocation:
        return Allocation(
            quantity=self.quantity,
            dates=self.dates,
            status=self.status,
            request_id=self.pk,
        )
