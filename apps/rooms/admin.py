"""Admin registrations for rooms, seasonal rates and add-ons."""

from __future__ import annotations

from django.contrib import admin

from .models import AddOn, Room, SeasonalRate


class SeasonalRateInline(admin.TabularInline):
    model = SeasonalRate
    extra = 0
    fields = ("name", "start_date", "end_date", "price_per_night", "priority")


@admin.register(Room)
class RoomAdmin(admin.ModelAdmin):
    list_display = (
        "name",
        "tenant",
        "base_price_per_night",
        "currency",
        "inventory_mode",
        "total_units",
        "is_active",
    )
    list_filter = ("tenant", "is_active", "inventory_mode")
    search_fields = ("name", "room_code", "tenant__name")
    inlines = (SeasonalRateInline,)
    readonly_fields = ("created_at", "updated_at")


@admin.register(SeasonalRate)
class SeasonalRateAdmin(admin.ModelAdmin):
    list_display = ("name", "room", "start_date", "end_date", "price_per_night", "priority")
    list_filter = ("tenant", "room")
    search_fields = ("name", "room__name")
    date_hierarchy = "start_date"


@admin.register(AddOn)
class AddOnAdmin(admin.ModelAdmin):
    list_display = ("name", "tenant", "addon_type", "price", "pricing_type", "is_active")
    list_filter = ("tenant", "addon_type", "pricing_type", "is_active")
    search_fields = ("name", "addon_code")
    filter_horizontal = ("rooms",)
