"""FilterSet for the instrument catalog listing."""

from __future__ import annotations

import django_filters  # type: ignore

from .models import Instrument


class InstrumentFilterSet(django_filters.FilterSet):
    category = django_filters.CharFilter(field_name="category", lookup_expr="iexact")
    brand = django_filters.CharFilter(field_name="brand", lookup_expr="icontains")
    name = django_filters.CharFilter(field_name="name", lookup_expr="icontains")
    price_max = django_filters.NumberFilter(field_name="price_per_day", lookup_expr="lte")
    in_stock = django_filters.BooleanFilter(method="filter_in_stock")

    class Meta:
        model = Instrument
        fields = ["category", "brand", "condition_status"]

    def filter_in_stock(self, queryset, name, value):  # type: ignore
        if value is None:
            return queryset
        in_stock = queryset.filter(total_quantity__gt=0).exclude(
            condition_status=Instrument.Condition.UNAVAILABLE
        )
        if value:
            return in_stock
        return queryset.exclude(pk__in=in_stock.values("pk"))
