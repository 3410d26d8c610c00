"""Serializers for bookings and quotes."""

from __future__ import annotations

from datetime import date

from rest_framework import serializers  # type: ignore

from .application.command_handlers import CreateBookingCommand, CreateBookingHandler
from .domain.exceptions import BookingError
from .exceptions import to_api_error
from .models import Booking


MONEY = {"max_digits": 12, "decimal_places": 2}


class StayDatesSerializer(serializers.Serializer):
    """check_in / check_out pair, check_out strictly after check_in."""

    check_in = serializers.DateField()
    check_out = serializers.DateField()

    def validate(self, attrs):  # type: ignore
        check_in: date = attrs["check_in"]
        check_out: date = attrs["check_out"]
        if check_out <= check_in:
            raise serializers.ValidationError(
                {"check_out": "Check-out date must be after check-in date."}
            )
        return attrs


class AddOnChoiceSerializer(serializers.Serializer):
    id = serializers.IntegerField(min_value=1)
    quantity = serializers.IntegerField(min_value=1, default=1)


class QuoteRequestSerializer(StayDatesSerializer):
    guests = serializers.IntegerField(min_value=1, default=1)
    addons = AddOnChoiceSerializer(many=True, required=False, default=list)


class NightlyPriceSerializer(serializers.Serializer):
    date = serializers.DateField()
    price = serializers.DecimalField(**MONEY)
    rate_name = serializers.CharField(allow_null=True)


class AddOnLineSerializer(serializers.Serializer):
    id = serializers.IntegerField(allow_null=True)
    name = serializers.CharField()
    price = serializers.DecimalField(**MONEY)
    quantity = serializers.IntegerField()
    total = serializers.DecimalField(**MONEY)


class PricingSerializer(serializers.Serializer):
    """Shape returned by the public pricing endpoint."""

    room_name = serializers.CharField()
    nights = NightlyPriceSerializer(many=True)
    subtotal = serializers.DecimalField(**MONEY)
    currency = serializers.CharField()
    night_count = serializers.IntegerField()


class QuoteSerializer(PricingSerializer):
    check_in = serializers.DateField()
    check_out = serializers.DateField()
    addons = AddOnLineSerializer(many=True)
    base_total = serializers.DecimalField(**MONEY)
    addons_total = serializers.DecimalField(**MONEY)
    total_amount = serializers.DecimalField(**MONEY)


class AvailabilitySerializer(serializers.Serializer):
    available = serializers.BooleanField()
    available_units = serializers.IntegerField()
    total_units = serializers.IntegerField()
    nights = serializers.IntegerField()
    min_stay_nights = serializers.IntegerField()
    max_stay_nights = serializers.IntegerField(allow_null=True)
    meets_min_stay = serializers.BooleanField()
    meets_max_stay = serializers.BooleanField()


class BookingCreateSerializer(StayDatesSerializer):
    """Guest or staff booking request; pricing always happens server side."""

    room_id = serializers.IntegerField(min_value=1)
    guest_name = serializers.CharField(max_length=255)
    guest_email = serializers.EmailField()
    guest_phone = serializers.CharField(max_length=32, required=False, allow_blank=True, default="")
    guests = serializers.IntegerField(min_value=1, default=1)
    addons = AddOnChoiceSerializer(many=True, required=False, default=list)
    special_requests = serializers.CharField(required=False, allow_blank=True, default="")

    def create(self, validated_data):  # type: ignore
        tenant = self.context["tenant"]
        command = CreateBookingCommand(tenant_id=tenant.pk, **validated_data)
        try:
            return CreateBookingHandler().handle(command)
        except BookingError as exc:
            raise to_api_error(exc) from exc


class BookingSerializer(serializers.ModelSerializer):
    room_id = serializers.ReadOnlyField(source="room.id")
    room_name = serializers.ReadOnlyField(source="room.name")
    nights = serializers.ReadOnlyField()

    class Meta:
        model = Booking
        fields = [
            "id",
            "reference",
            "room_id",
            "room_name",
            "guest_name",
            "guest_email",
            "guest_phone",
            "guests",
            "check_in",
            "check_out",
            "nights",
            "status",
            "payment_status",
            "base_total",
            "addons_total",
            "total_amount",
            "currency",
            "price_breakdown",
            "addons",
            "special_requests",
            "retry_count",
            "expires_at",
            "cancelled_at",
            "cancellation_reason",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class ConflictCheckSerializer(StayDatesSerializer):
    room_id = serializers.IntegerField(min_value=1)
    exclude_booking_id = serializers.IntegerField(min_value=1, required=False, allow_null=True)


class BookingAddOnsSerializer(serializers.Serializer):
    addons = AddOnChoiceSerializer(many=True, allow_empty=True)


class CancelBookingSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default="", max_length=255)
