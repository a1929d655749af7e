"""Ensemble booking models."""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from shared.domain.value_objects import TimeWindow

from .domain import lifecycle


class EnsembleCalendar(models.Model):
    """The ensemble as a bookable resource.

    A single row. Approvals lock it so that overlapping approvals are
    decided one after the other.
    """

    name = models.CharField(max_length=120, default="Ensemble")
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Ensemble calendar")
        verbose_name_plural = _("Ensemble calendar")

    def __str__(self) -> str:
        return self.name

    @classmethod
    def load(cls) -> "EnsembleCalendar":
        calendar, _created = cls.objects.get_or_create(pk=1)
        return calendar


class BookingQuerySet(models.QuerySet):
    def approved(self):
        return self.filter(status__in=lifecycle.BLOCKING)

    def on_window(self, window: TimeWindow):
        return self.filter(
            date=window.date,
            start_time__lt=window.end_time,
            end_time__gt=window.start_time,
        )


class Booking(models.Model):
    """A request for the ensemble to perform on one date and time slot."""

    class Service(models.TextChoices):
        BAND_GIG = "Band Gig", _("Band Gig")
        PARADE_EVENT = "Parade Event", _("Parade Event")
        MUSIC_WORKSHOP = "Music Workshop", _("Music Workshop")
        MUSIC_ARRANGEMENT = "Music Arrangement", _("Music Arrangement")

    class Status(models.TextChoices):
        PENDING = lifecycle.PENDING, _("Pending")
        APPROVED = lifecycle.APPROVED, _("Approved")
        REJECTED = lifecycle.REJECTED, _("Rejected")

    customer_name = models.CharField(max_length=150)
    email = models.EmailField()
    phone = models.CharField(max_length=32, blank=True)
    service = models.CharField(max_length=32, choices=Service.choices)
    package = models.CharField(
        max_length=64,
        blank=True,
        help_text=_("Band package key for gigs and parades."),
    )
    pieces = models.PositiveSmallIntegerField(
        default=1,
        help_text=_("Number of pieces for arrangement requests."),
    )
    location = models.CharField(max_length=255, blank=True)
    date = models.DateField()
    start_time = models.TimeField()
    end_time = models.TimeField()
    status = models.CharField(
        max_length=16,
        choices=Status.choices,
        default=Status.PENDING,
    )
    estimated_value = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
    )
    currency = models.CharField(max_length=3, default="PHP")
    notes = models.TextField(blank=True)
    requested_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="ensemble_bookings",
    )
    decided_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="decided_ensemble_bookings",
    )
    decided_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = BookingQuerySet.as_manager()

    class Meta:
        verbose_name = _("Booking")
        verbose_name_plural = _("Bookings")
        ordering = ["date", "start_time"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(end_time__gt=models.F("start_time")),
                name="booking_valid_window",
            ),
        ]
        indexes = [
            models.Index(fields=["status", "date"]),
        ]

    def __str__(self) -> str:
        return f"{self.service} #{self.pk} on {self.date} ({self.status})"

    @property
    def window(self) -> TimeWindow:
        return TimeWindow(self.date, self.start_time, self.end_time)

    def summary(self) -> dict:
        """Compact description used when reporting a conflict."""
        return {
            "id": self.pk,
            "customer_name": self.customer_name,
            "email": self.email,
            "service": self.service,
            "location": self.location,
            "date": self.date.isoformat(),
            "start_time": self.start_time.strftime("%H:%M"),
            "end_time": self.end_time.strftime("%H:%M"),
            "status": self.status,
        }
