"""Admin registration for bookings."""

from __future__ import annotations

from django.contrib import admin

from .models import Booking


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = (
        "reference",
        "tenant",
        "room",
        "guest_name",
        "status",
        "payment_status",
        "check_in",
        "check_out",
        "total_amount",
        "currency",
        "created_at",
    )
    list_filter = ("tenant", "status", "payment_status", "check_in")
    search_fields = ("reference", "guest_name", "guest_email", "room__name")
    list_select_related = ("tenant", "room")
    readonly_fields = (
        "reference",
        "base_total",
        "addons_total",
        "total_amount",
        "price_breakdown",
        "addons",
        "retry_count",
        "created_at",
        "updated_at",
    )
