"""Instrument catalog models."""

from __future__ import annotations

from decimal import Decimal

from django.core.validators import MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from .domain import CatalogEntry


class Instrument(models.Model):
    """An instrument model held in stock, e.g. ``trumpet`` x 3."""

    class Condition(models.TextChoices):
        GOOD = "good", _("Good")
        FAIR = "fair", _("Fair")
        POOR = "poor", _("Poor")
        UNAVAILABLE = "unavailable", _("Unavailable")

    slug = models.SlugField(max_length=64, unique=True)
    name = models.CharField(max_length=120)
    category = models.CharField(max_length=64, blank=True)
    brand = models.CharField(max_length=64, blank=True)
    total_quantity = models.PositiveIntegerField(default=0)
    price_per_day = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(Decimal("0.00"))],
    )
    condition_status = models.CharField(
        max_length=20,
        choices=Condition.choices,
        default=Condition.GOOD,
    )
    is_archived = models.BooleanField(default=False)
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Instrument")
        verbose_name_plural = _("Instruments")
        ordering = ["category", "name"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(price_per_day__gte=0),
                name="instrument_price_not_negative",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.name} ({self.slug})"

    def to_entry(self) -> CatalogEntry:
        return CatalogEntry(
            instrument_id=self.pk,
            slug=self.slug,
            name=self.name,
            total_quantity=self.total_quantity,
            price_per_day=self.price_per_day,
            condition_status=self.condition_status,
            is_archived=self.is_archived,
        )
