"""Serializers for rooms, seasonal rates and add-ons."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import AddOn, Room, SeasonalRate


class RoomSerializer(serializers.ModelSerializer):
    class Meta:
        model = Room
        fields = [
            "id",
            "name",
            "room_code",
            "description",
            "base_price_per_night",
            "currency",
            "inventory_mode",
            "total_units",
            "max_guests",
            "min_stay_nights",
            "max_stay_nights",
            "is_active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["created_at", "updated_at"]
        extra_kwargs = {"currency": {"required": False}}

    def validate(self, attrs):  # type: ignore
        instance = self.instance
        mode = attrs.get("inventory_mode", getattr(instance, "inventory_mode", Room.InventoryMode.SINGLE_UNIT))
        units = attrs.get("total_units", getattr(instance, "total_units", 1))
        if mode == Room.InventoryMode.SINGLE_UNIT and units != 1:
            raise serializers.ValidationError(
                {"total_units": "A single unit room has exactly one unit."}
            )
        min_stay = attrs.get("min_stay_nights", getattr(instance, "min_stay_nights", 1))
        max_stay = attrs.get("max_stay_nights", getattr(instance, "max_stay_nights", None))
        if max_stay is not None and max_stay < min_stay:
            raise serializers.ValidationError(
                {"max_stay_nights": "Maximum stay cannot be shorter than minimum stay."}
            )
        return attrs


class PublicRoomSerializer(serializers.ModelSerializer):
    class Meta:
        model = Room
        fields = [
            "id",
            "name",
            "description",
            "base_price_per_night",
            "currency",
            "max_guests",
            "min_stay_nights",
            "max_stay_nights",
        ]


class SeasonalRateSerializer(serializers.ModelSerializer):
    room_id = serializers.ReadOnlyField(source="room.id")
    period_label = serializers.SerializerMethodField()

    class Meta:
        model = SeasonalRate
        fields = [
            "id",
            "room_id",
            "name",
            "start_date",
            "end_date",
            "price_per_night",
            "priority",
            "period_label",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["room_id", "created_at", "updated_at", "period_label"]

    def get_period_label(self, obj: SeasonalRate) -> str:
        return f"{obj.start_date:%Y-%m-%d} .. {obj.end_date:%Y-%m-%d}"


class SeasonalRateWriteSerializer(serializers.ModelSerializer):
    class Meta:
        model = SeasonalRate
        fields = [
            "name",
            "start_date",
            "end_date",
            "price_per_night",
            "priority",
        ]

    def validate(self, attrs):  # type: ignore
        start = attrs.get("start_date", getattr(self.instance, "start_date", None))
        end = attrs.get("end_date", getattr(self.instance, "end_date", None))
        if start and end and start > end:
            raise serializers.ValidationError({"end_date": "End date cannot be before start date."})
        return attrs


class AddOnSerializer(serializers.ModelSerializer):
    rooms = serializers.PrimaryKeyRelatedField(many=True, required=False, queryset=Room.objects.none())

    class Meta:
        model = AddOn
        fields = [
            "id",
            "name",
            "description",
            "addon_code",
            "addon_type",
            "price",
            "pricing_type",
            "max_quantity",
            "rooms",
            "is_active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["created_at", "updated_at"]

    def __init__(self, *args, **kwargs):  # type: ignore
        super().__init__(*args, **kwargs)
        tenant = self.context.get("tenant")
        if tenant is not None:
            self.fields["rooms"].child_relation.queryset = Room.objects.for_tenant(tenant)


class PublicAddOnSerializer(serializers.ModelSerializer):
    class Meta:
        model = AddOn
        fields = ["id", "name", "description", "addon_type", "price", "pricing_type", "max_quantity"]


class EffectivePriceSerializer(serializers.Serializer):
    date = serializers.DateField()
    base_price = serializers.DecimalField(max_digits=12, decimal_places=2)
    effective_price = serializers.DecimalField(max_digits=12, decimal_places=2)
    seasonal_rate = serializers.DictField(allow_null=True)
    currency = serializers.CharField()


class CalendarDaySerializer(serializers.Serializer):
    date = serializers.DateField()
    price = serializers.DecimalField(max_digits=12, decimal_places=2)
    rate_name = serializers.CharField(allow_null=True)
    available_units = serializers.IntegerField()
    available = serializers.BooleanField()


class CalendarRangeSerializer(serializers.Serializer):
    start = serializers.DateField()
    end = serializers.DateField()

    max_days = 366

    def validate(self, attrs):  # type: ignore
        if attrs["end"] < attrs["start"]:
            raise serializers.ValidationError({"end": "End date cannot be before start date."})
        if (attrs["end"] - attrs["start"]).days >= self.max_days:
            raise serializers.ValidationError(
                {"end": f"A calendar covers at most {self.max_days} days."}
            )
        return attrs


class PriceDateSerializer(serializers.Serializer):
    date = serializers.DateField()
