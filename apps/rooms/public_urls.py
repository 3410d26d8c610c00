"""Guest-facing routes, tenant identified by slug."""

from __future__ import annotations

from django.urls import path  # type: ignore

from apps.bookings.views import PublicBookingCreateView

from .views import (
    PublicRoomAddOnsView,
    PublicRoomAvailabilityView,
    PublicRoomCalendarView,
    PublicRoomListView,
    PublicRoomPricingView,
)

urlpatterns = [
    path("<slug:tenant_slug>/rooms/", PublicRoomListView.as_view(), name="public-room-list"),
    path(
        "<slug:tenant_slug>/rooms/<int:room_id>/availability/",
        PublicRoomAvailabilityView.as_view(),
        name="public-room-availability",
    ),
    path(
        "<slug:tenant_slug>/rooms/<int:room_id>/pricing/",
        PublicRoomPricingView.as_view(),
        name="public-room-pricing",
    ),
    path(
        "<slug:tenant_slug>/rooms/<int:room_id>/calendar/",
        PublicRoomCalendarView.as_view(),
        name="public-room-calendar",
    ),
    path(
        "<slug:tenant_slug>/rooms/<int:room_id>/addons/",
        PublicRoomAddOnsView.as_view(),
        name="public-room-addons",
    ),
    path(
        "<slug:tenant_slug>/bookings/",
        PublicBookingCreateView.as_view(),
        name="public-booking-create",
    ),
]
