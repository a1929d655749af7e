"""
Pricing table

Pure price lookups used to fill the informational ``rental_fee`` and
``estimated_value`` fields. Prices never take part in admission.

The table is built once from ``settings.ENSEMBLE_PRICING`` and passed to
the command handlers, so tests can inject a fixed table instead of
reading module-level state.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Mapping

from django.conf import settings  # type: ignore

from shared.domain.value_objects import DateRange, Money

from .domain import CatalogEntry

BAND_SERVICES = ("Band Gig", "Parade Event")
ARRANGEMENT_SERVICE = "Music Arrangement"
WORKSHOP_SERVICE = "Music Workshop"


@dataclass(frozen=True)
class BandPackage:
    key: str
    label: str
    price: Decimal


@dataclass(frozen=True)
class PricingTable:
    version: str
    currency: str = "PHP"
    instrument_rates: Mapping[str, Decimal] = field(default_factory=dict)
    band_packages: Mapping[str, BandPackage] = field(default_factory=dict)
    arrangement_base_price: Decimal = Decimal("0")
    workshop_base_price: Decimal = Decimal("0")
    default_booking_value: Decimal = Decimal("0")

    @classmethod
    def from_config(cls, config: Mapping) -> "PricingTable":
        packages = {
            key: BandPackage(key=key, label=value["label"], price=Decimal(str(value["price"])))
            for key, value in config.get("band_packages", {}).items()
        }
        return cls(
            version=str(config.get("version", "unversioned")),
            currency=config.get("currency", "PHP"),
            instrument_rates={
                slug: Decimal(str(rate))
                for slug, rate in config.get("instrument_rates", {}).items()
            },
            band_packages=packages,
            arrangement_base_price=Decimal(str(config.get("arrangement_base_price", 0))),
            workshop_base_price=Decimal(str(config.get("workshop_base_price", 0))),
            default_booking_value=Decimal(str(config.get("default_booking_value", 0))),
        )

    def daily_rate(self, entry: CatalogEntry) -> Decimal:
        """Catalog price wins; the table rate covers instruments priced at zero."""
        if entry.price_per_day:
            return entry.price_per_day
        return self.instrument_rates.get(entry.slug, Decimal("0"))

    def rental_fee(self, entry: CatalogEntry, dates: DateRange, quantity: int = 1) -> Money:
        return Money(self.daily_rate(entry), self.currency) * (len(dates) * quantity)

    def booking_value(self, service: str, package: str | None = None, pieces: int = 1) -> Money:
        if service in BAND_SERVICES:
            found = self.band_packages.get(package or "")
            return Money(found.price if found else Decimal("0"), self.currency)
        if service == ARRANGEMENT_SERVICE:
            return Money(self.arrangement_base_price, self.currency) * max(pieces, 1)
        if service == WORKSHOP_SERVICE:
            return Money(self.workshop_base_price, self.currency)
        return Money(self.default_booking_value, self.currency)


def get_pricing_table() -> PricingTable:
    return PricingTable.from_config(getattr(settings, "ENSEMBLE_PRICING", {}))
