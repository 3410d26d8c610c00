"""API views for bookings."""

from __future__ import annotations

from rest_framework import generics, mixins, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.tenants.permissions import PublicTenantMixin, TenantScopedMixin

from . import services
from .application.command_handlers import (
    CancelBookingCommand,
    CancelBookingHandler,
    CheckRetryAvailabilityHandler,
    CheckRetryAvailabilityQuery,
    ConfirmPaymentCommand,
    ConfirmPaymentHandler,
    ModifyBookingAddOnsCommand,
    ModifyBookingAddOnsHandler,
    RetryBookingCommand,
    RetryBookingHandler,
)
from .domain.exceptions import BookingError
from .exceptions import to_api_error
from .filters import BookingFilter
from .models import Booking
from .serializers import (
    BookingAddOnsSerializer,
    BookingCreateSerializer,
    BookingSerializer,
    CancelBookingSerializer,
    ConflictCheckSerializer,
)


class BookingCreateMixin:
    """Creates through the engine and answers with the read serializer."""

    def get_serializer_context(self):  # type: ignore
        context = super().get_serializer_context()
        context["tenant"] = self.get_tenant()
        return context

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = BookingCreateSerializer(data=request.data, context=self.get_serializer_context())
        serializer.is_valid(raise_exception=True)
        booking = serializer.save()
        read_serializer = BookingSerializer(booking, context=self.get_serializer_context())
        return Response(read_serializer.data, status=status.HTTP_201_CREATED)


class BookingViewSet(
    BookingCreateMixin,
    TenantScopedMixin,
    mixins.CreateModelMixin,
    viewsets.ReadOnlyModelViewSet,
):
    """Staff view of the tenant's bookings."""

    queryset = Booking.objects.select_related("room").all()
    serializer_class = BookingSerializer
    filterset_class = BookingFilter
    search_fields = ["reference", "guest_name", "guest_email"]
    ordering_fields = ["check_in", "created_at", "total_amount"]

    def get_serializer_class(self):  # type: ignore
        if self.action == "create":
            return BookingCreateSerializer
        if self.action == "check_conflicts":
            return ConflictCheckSerializer
        if self.action == "addons":
            return BookingAddOnsSerializer
        if self.action == "cancel":
            return CancelBookingSerializer
        return BookingSerializer

    def _run(self, handler, message):
        try:
            return handler.handle(message)
        except BookingError as exc:
            raise to_api_error(exc) from exc

    @action(detail=False, methods=["post"], url_path="check-conflicts")
    def check_conflicts(self, request):  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        try:
            room = services.get_room(self.get_tenant().pk, data["room_id"], active_only=False)
            conflicts = services.find_conflicts(
                room,
                data["check_in"],
                data["check_out"],
                exclude_booking_id=data.get("exclude_booking_id"),
            )
        except BookingError as exc:
            raise to_api_error(exc) from exc
        return Response({"has_conflict": bool(conflicts), "conflicts": conflicts})

    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):  # type: ignore
        booking: Booking = self.get_object()  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        booking = self._run(
            CancelBookingHandler(),
            CancelBookingCommand(
                tenant_id=booking.tenant_id,
                booking_id=booking.pk,
                reason=serializer.validated_data["reason"],
            ),
        )
        return Response({"status": booking.status}, status=status.HTTP_200_OK)

    @action(detail=True, methods=["post"], url_path="confirm-payment")
    def confirm_payment(self, request, pk=None):  # type: ignore
        booking: Booking = self.get_object()  # type: ignore
        booking = self._run(
            ConfirmPaymentHandler(),
            ConfirmPaymentCommand(tenant_id=booking.tenant_id, booking_id=booking.pk),
        )
        return Response({"status": booking.status, "payment_status": booking.payment_status})

    @action(detail=True, methods=["put"])
    def addons(self, request, pk=None):  # type: ignore
        booking: Booking = self.get_object()  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        booking = self._run(
            ModifyBookingAddOnsHandler(),
            ModifyBookingAddOnsCommand(
                tenant_id=booking.tenant_id,
                booking_id=booking.pk,
                addons=serializer.validated_data["addons"],
            ),
        )
        return Response(BookingSerializer(booking, context=self.get_serializer_context()).data)

    @action(detail=True, methods=["get"], url_path="retry-availability")
    def retry_availability(self, request, pk=None):  # type: ignore
        booking: Booking = self.get_object()  # type: ignore
        result = self._run(
            CheckRetryAvailabilityHandler(),
            CheckRetryAvailabilityQuery(tenant_id=booking.tenant_id, booking_id=booking.pk),
        )
        return Response(result.to_dict())

    @action(detail=True, methods=["post"])
    def retry(self, request, pk=None):  # type: ignore
        booking: Booking = self.get_object()  # type: ignore
        result = self._run(
            RetryBookingHandler(),
            RetryBookingCommand(tenant_id=booking.tenant_id, booking_id=booking.pk),
        )
        data = result.to_dict()
        data["booking"] = BookingSerializer(result.booking, context=self.get_serializer_context()).data
        return Response(data)


class PublicBookingCreateView(BookingCreateMixin, PublicTenantMixin, generics.GenericAPIView):
    """Guest checkout: ``POST public/<tenant_slug>/bookings/``."""

    serializer_class = BookingCreateSerializer

    def post(self, request, *args, **kwargs):  # type: ignore
        return self.create(request, *args, **kwargs)
