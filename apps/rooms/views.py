"""Room, seasonal rate and add-on API views, staff and public."""

from __future__ import annotations

from datetime import timedelta

from django.shortcuts import get_object_or_404  # type: ignore
from rest_framework import generics, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import APIView  # type: ignore

from apps.bookings import services
from apps.bookings.domain.exceptions import BookingError
from apps.bookings.domain.pricing import effective_price, resolve_nightly_prices
from apps.bookings.exceptions import to_api_error
from apps.bookings.serializers import (
    AvailabilitySerializer,
    PricingSerializer,
    QuoteRequestSerializer,
    QuoteSerializer,
    StayDatesSerializer,
)
from apps.tenants.permissions import IsTenantStaff, PublicTenantMixin, TenantScopedMixin
from shared.domain.value_objects import StayRange

from .filters import RoomFilter, SeasonalRateFilter
from .models import AddOn, Room, SeasonalRate
from .serializers import (
    AddOnSerializer,
    CalendarDaySerializer,
    CalendarRangeSerializer,
    EffectivePriceSerializer,
    PriceDateSerializer,
    PublicAddOnSerializer,
    PublicRoomSerializer,
    RoomSerializer,
    SeasonalRateSerializer,
    SeasonalRateWriteSerializer,
)


def _validated(serializer_class, data) -> dict:
    serializer = serializer_class(data=data)
    serializer.is_valid(raise_exception=True)
    return serializer.validated_data


class RoomEngineMixin:
    """Availability, pricing and quote responses shared by staff and public views."""

    def availability_response(self, room: Room, params) -> Response:
        stay = _validated(StayDatesSerializer, params)
        try:
            result = services.check_availability(room, stay["check_in"], stay["check_out"])
        except BookingError as exc:
            raise to_api_error(exc) from exc
        return Response(AvailabilitySerializer(result.to_dict()).data)

    def pricing_response(self, room: Room, params) -> Response:
        stay = _validated(StayDatesSerializer, params)
        try:
            quote = services.quote_stay(room, stay["check_in"], stay["check_out"])
        except BookingError as exc:
            raise to_api_error(exc) from exc
        return Response(PricingSerializer(quote.to_pricing_dict()).data)

    def quote_response(self, room: Room, data) -> Response:
        request = _validated(QuoteRequestSerializer, data)
        try:
            stay = StayRange(request["check_in"], request["check_out"])
            addons = services.resolve_addons(
                room, request["addons"], nights=len(stay), guests=request["guests"]
            )
            quote = services.quote_stay(room, stay.check_in, stay.check_out, addons=addons)
        except BookingError as exc:
            raise to_api_error(exc) from exc
        return Response(QuoteSerializer(quote.to_dict()).data)

    def calendar_response(self, room: Room, params) -> Response:
        period = _validated(CalendarRangeSerializer, params)
        stay = StayRange(period["start"], period["end"] + timedelta(days=1))
        try:
            services.ensure_room_active(room)
            rates = services.load_seasonal_rates(room, stay)
        except BookingError as exc:
            raise to_api_error(exc) from exc
        lines = resolve_nightly_prices(room.to_snapshot(), rates, stay.check_in, stay.check_out)
        occupancy = services.load_room_inventory(room, stay).occupancy_by_night(stay)

        days = []
        for line in lines:
            free = max(room.total_units - occupancy.get(line.date, 0), 0)
            days.append({
                "date": line.date,
                "price": line.price.amount,
                "rate_name": line.rate_name,
                "available_units": free,
                "available": free > 0,
            })
        return Response({
            "room_id": room.pk,
            "currency": room.currency,
            "dates": CalendarDaySerializer(days, many=True).data,
        })


class RoomViewSet(RoomEngineMixin, TenantScopedMixin, viewsets.ModelViewSet):
    """Staff management of the tenant's rooms. DELETE deactivates."""

    queryset = Room.objects.all()
    serializer_class = RoomSerializer
    filterset_class = RoomFilter
    search_fields = ["name", "room_code"]
    ordering_fields = ["name", "base_price_per_night", "created_at"]

    def perform_destroy(self, instance):  # type: ignore
        instance.deactivate()

    @action(detail=True, methods=["post"])
    def deactivate(self, request, pk=None):  # type: ignore
        room: Room = self.get_object()  # type: ignore
        room.deactivate()
        return Response({"id": room.pk, "is_active": room.is_active})

    @action(detail=True, methods=["post"])
    def activate(self, request, pk=None):  # type: ignore
        room: Room = self.get_object()  # type: ignore
        if not room.is_active:
            room.is_active = True
            room.save(update_fields=["is_active", "updated_at"])
        return Response({"id": room.pk, "is_active": room.is_active})

    @action(detail=True, methods=["get"])
    def price(self, request, pk=None):  # type: ignore
        """Effective nightly price on ``?date=YYYY-MM-DD``."""
        room: Room = self.get_object()  # type: ignore
        night = _validated(PriceDateSerializer, request.query_params)["date"]
        try:
            services.ensure_room_active(room)
            rates = services.load_seasonal_rates(room, StayRange(night, night + timedelta(days=1)))
        except BookingError as exc:
            raise to_api_error(exc) from exc
        line = effective_price(room.to_snapshot(), rates, night)
        seasonal_rate = None
        if line.rate_id is not None:
            seasonal_rate = {
                "id": line.rate_id,
                "name": line.rate_name,
                "price_per_night": line.price.amount,
            }
        payload = {
            "date": night,
            "base_price": room.base_price_per_night,
            "effective_price": line.price.amount,
            "seasonal_rate": seasonal_rate,
            "currency": room.currency,
        }
        return Response(EffectivePriceSerializer(payload).data)

    @action(detail=True, methods=["get"])
    def prices(self, request, pk=None):  # type: ignore
        return self.pricing_response(self.get_object(), request.query_params)

    @action(detail=True, methods=["post"])
    def quote(self, request, pk=None):  # type: ignore
        return self.quote_response(self.get_object(), request.data)

    @action(detail=True, methods=["get"])
    def availability(self, request, pk=None):  # type: ignore
        return self.availability_response(self.get_object(), request.query_params)

    @action(detail=True, methods=["get"])
    def calendar(self, request, pk=None):  # type: ignore
        return self.calendar_response(self.get_object(), request.query_params)


class RoomScopedMixin:
    """Loads the tenant's room from the ``room_id`` URL kwarg."""

    room_lookup_url_kwarg = "room_id"
    permission_classes = [IsTenantStaff]

    def initial(self, request, *args, **kwargs):  # type: ignore
        super().initial(request, *args, **kwargs)
        self.room_object = get_object_or_404(
            Room,
            pk=kwargs.get(self.room_lookup_url_kwarg),
            tenant_id=request.user.tenant_id,
        )

    def get_room(self) -> Room:
        return self.room_object

    def get_serializer_context(self):  # type: ignore
        context = super().get_serializer_context()
        context["room"] = getattr(self, "room_object", None)
        return context


class SeasonalRateViewSet(RoomScopedMixin, viewsets.ModelViewSet):
    """Seasonal rates of one room."""

    serializer_class = SeasonalRateSerializer
    queryset = SeasonalRate.objects.select_related("room").all()
    filterset_class = SeasonalRateFilter

    def get_serializer_class(self):  # type: ignore
        if self.action in {"create", "update", "partial_update"}:
            return SeasonalRateWriteSerializer
        return SeasonalRateSerializer

    def get_queryset(self):  # type: ignore
        room = self.get_room()
        return (
            super().get_queryset()
            .filter(tenant_id=room.tenant_id, room=room)
            .order_by("start_date", "-priority")
        )

    def perform_create(self, serializer):  # type: ignore
        room = self.get_room()
        serializer.save(room=room, tenant_id=room.tenant_id)

    @action(detail=False, methods=["post"], url_path="bulk-delete")
    def bulk_delete(self, request, room_id=None):  # type: ignore
        ids = request.data.get("ids", [])
        if not isinstance(ids, list):
            return Response({"detail": "Expected a list of ids."}, status=status.HTTP_400_BAD_REQUEST)
        deleted, _ = self.get_queryset().filter(id__in=ids).delete()
        return Response({"deleted": deleted}, status=status.HTTP_200_OK)

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        self.perform_create(serializer)
        read_serializer = SeasonalRateSerializer(serializer.instance, context=self.get_serializer_context())
        headers = self.get_success_headers(read_serializer.data)
        return Response(read_serializer.data, status=status.HTTP_201_CREATED, headers=headers)

    def update(self, request, *args, **kwargs):  # type: ignore
        partial = kwargs.pop("partial", False)
        instance = self.get_object()
        serializer = self.get_serializer(instance, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        self.perform_update(serializer)
        read_serializer = SeasonalRateSerializer(serializer.instance, context=self.get_serializer_context())
        return Response(read_serializer.data, status=status.HTTP_200_OK)


class AddOnViewSet(TenantScopedMixin, viewsets.ModelViewSet):
    queryset = AddOn.objects.prefetch_related("rooms").all()
    serializer_class = AddOnSerializer
    search_fields = ["name", "addon_code"]

    def get_serializer_context(self):  # type: ignore
        context = super().get_serializer_context()
        context["tenant"] = getattr(self.request.user, "tenant", None)
        return context


# ===== Public (guest-facing) =====

class PublicRoomMixin(PublicTenantMixin):
    def get_room(self) -> Room:
        return get_object_or_404(
            Room.objects.select_related("tenant").active(),
            pk=self.kwargs["room_id"],
            tenant=self.get_tenant(),
        )


class PublicRoomListView(PublicTenantMixin, generics.ListAPIView):
    serializer_class = PublicRoomSerializer

    def get_queryset(self):  # type: ignore
        return Room.objects.for_tenant(self.get_tenant()).active()


class PublicRoomAvailabilityView(RoomEngineMixin, PublicRoomMixin, APIView):
    def get(self, request, tenant_slug, room_id):  # type: ignore
        return self.availability_response(self.get_room(), request.query_params)


class PublicRoomPricingView(RoomEngineMixin, PublicRoomMixin, APIView):
    def get(self, request, tenant_slug, room_id):  # type: ignore
        return self.pricing_response(self.get_room(), request.query_params)


class PublicRoomCalendarView(RoomEngineMixin, PublicRoomMixin, APIView):
    def get(self, request, tenant_slug, room_id):  # type: ignore
        return self.calendar_response(self.get_room(), request.query_params)


class PublicRoomAddOnsView(PublicRoomMixin, generics.ListAPIView):
    serializer_class = PublicAddOnSerializer
    pagination_class = None

    def get_queryset(self):  # type: ignore
        return AddOn.objects.available_for(self.get_room())
