"""URL routing for rooms, seasonal rates and add-ons (staff API)."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import SimpleRouter  # type: ignore

from .views import AddOnViewSet, RoomViewSet, SeasonalRateViewSet

router = SimpleRouter()
router.register(r"addons", AddOnViewSet, basename="addon")
router.register(r"", RoomViewSet, basename="room")

seasonal_list = SeasonalRateViewSet.as_view({"get": "list", "post": "create"})
seasonal_detail = SeasonalRateViewSet.as_view(
    {"patch": "partial_update", "put": "update", "delete": "destroy", "get": "retrieve"}
)
seasonal_bulk_delete = SeasonalRateViewSet.as_view({"post": "bulk_delete"})

urlpatterns = [
    path(
        "<int:room_id>/seasonal-rates/",
        seasonal_list,
        name="room-seasonal-rate-list",
    ),
    path(
        "<int:room_id>/seasonal-rates/bulk-delete/",
        seasonal_bulk_delete,
        name="room-seasonal-rate-bulk-delete",
    ),
    path(
        "<int:room_id>/seasonal-rates/<int:pk>/",
        seasonal_detail,
        name="room-seasonal-rate-detail",
    ),
    path("", include(router.urls)),
]
