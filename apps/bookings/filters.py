"""FilterSet for the staff booking list."""

from __future__ import annotations

import django_filters  # type: ignore

from .models import Booking


class BookingFilter(django_filters.FilterSet):
    room = django_filters.NumberFilter(field_name="room_id")
    status = django_filters.MultipleChoiceFilter(choices=Booking.Status.choices)
    check_in_from = django_filters.DateFilter(field_name="check_in", lookup_expr="gte")
    check_in_to = django_filters.DateFilter(field_name="check_in", lookup_expr="lte")
    # bookings occupying at least one night of [stay_from, stay_to)
    stay_from = django_filters.DateFilter(field_name="check_out", lookup_expr="gt")
    stay_to = django_filters.DateFilter(field_name="check_in", lookup_expr="lt")

    class Meta:
        model = Booking
        fields = ["room", "status", "payment_status"]
