"""FilterSets for room and seasonal rate listings."""

from __future__ import annotations

import django_filters  # type: ignore

from .models import Room, SeasonalRate


class RoomFilter(django_filters.FilterSet):
    price_min = django_filters.NumberFilter(field_name="base_price_per_night", lookup_expr="gte")
    price_max = django_filters.NumberFilter(field_name="base_price_per_night", lookup_expr="lte")
    guests = django_filters.NumberFilter(field_name="max_guests", lookup_expr="gte")

    class Meta:
        model = Room
        fields = ["is_active", "inventory_mode"]


class SeasonalRateFilter(django_filters.FilterSet):
    """``start``/``end`` keep rates whose window touches [start, end]."""

    start = django_filters.DateFilter(field_name="end_date", lookup_expr="gte")
    end = django_filters.DateFilter(field_name="start_date", lookup_expr="lte")

    class Meta:
        model = SeasonalRate
        fields = ["priority"]
