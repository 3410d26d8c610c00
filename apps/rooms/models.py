"""Room inventory models.

A room is one bookable listing of a tenant. ``total_units`` lets a single
room stand for several interchangeable units (a room type); seasonal
rates override its base nightly price for inclusive date windows.
"""

from __future__ import annotations

from decimal import Decimal

from django.core.validators import MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from apps.bookings.domain.entities import RoomSnapshot, SeasonalRateSnapshot
from apps.tenants.models import CURRENCY_VALIDATOR


class RoomQuerySet(models.QuerySet):
    def for_tenant(self, tenant):
        return self.filter(tenant=tenant)

    def active(self):
        return self.filter(is_active=True)


class Room(models.Model):

    class InventoryMode(models.TextChoices):
        SINGLE_UNIT = "single_unit", _("Single unit")
        ROOM_TYPE = "room_type", _("Room type (multiple units)")

    tenant = models.ForeignKey(
        "tenants.Tenant",
        on_delete=models.CASCADE,
        related_name="rooms",
    )
    name = models.CharField(max_length=255)
    room_code = models.CharField(max_length=50, blank=True)
    description = models.TextField(blank=True)
    base_price_per_night = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.00"))],
    )
    currency = models.CharField(max_length=3, blank=True, validators=[CURRENCY_VALIDATOR])
    inventory_mode = models.CharField(
        max_length=20,
        choices=InventoryMode.choices,
        default=InventoryMode.SINGLE_UNIT,
    )
    total_units = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])
    max_guests = models.PositiveSmallIntegerField(default=2, validators=[MinValueValidator(1)])
    min_stay_nights = models.PositiveSmallIntegerField(default=1, validators=[MinValueValidator(1)])
    max_stay_nights = models.PositiveSmallIntegerField(
        null=True,
        blank=True,
        validators=[MinValueValidator(1)],
        help_text=_("Leave empty for no upper limit."),
    )
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = RoomQuerySet.as_manager()

    class Meta:
        verbose_name = _("Room")
        verbose_name_plural = _("Rooms")
        ordering = ["name", "id"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(total_units__gte=1),
                name="room_total_units_positive",
            ),
            models.CheckConstraint(
                condition=models.Q(base_price_per_night__gte=0),
                name="room_base_price_non_negative",
            ),
            models.CheckConstraint(
                condition=(
                    models.Q(max_stay_nights__isnull=True)
                    | models.Q(max_stay_nights__gte=models.F("min_stay_nights"))
                ),
                name="room_min_max_stay_valid",
            ),
        ]
        indexes = [
            models.Index(fields=["tenant", "is_active"], name="room_tenant_active_idx"),
        ]

    def __str__(self) -> str:
        return self.name

    def save(self, *args, **kwargs):  # type: ignore
        if not self.currency and self.tenant_id:
            self.currency = self.tenant.currency
        if self.inventory_mode == self.InventoryMode.SINGLE_UNIT:
            self.total_units = 1
        super().save(*args, **kwargs)

    def deactivate(self) -> None:
        if self.is_active:
            self.is_active = False
            self.save(update_fields=["is_active", "updated_at"])

    def to_snapshot(self) -> RoomSnapshot:
        return RoomSnapshot(
            id=self.pk,
            tenant_id=self.tenant_id,
            name=self.name,
            base_price_per_night=self.base_price_per_night,
            currency=self.currency or self.tenant.currency,
            total_units=self.total_units,
            is_active=self.is_active,
            min_stay_nights=self.min_stay_nights,
            max_stay_nights=self.max_stay_nights,
        )


class SeasonalRateQuerySet(models.QuerySet):
    def touching(self, check_in, check_out):
        """Rates whose inclusive window shares a night with [check_in, check_out)"""
        return self.filter(start_date__lt=check_out, end_date__gte=check_in)


class SeasonalRate(models.Model):
    """Nightly price override for an inclusive date window."""

    tenant = models.ForeignKey(
        "tenants.Tenant",
        on_delete=models.CASCADE,
        related_name="seasonal_rates",
    )
    room = models.ForeignKey(
        Room,
        on_delete=models.CASCADE,
        related_name="seasonal_rates",
    )
    name = models.CharField(max_length=120)
    start_date = models.DateField()
    end_date = models.DateField(help_text=_("Inclusive: the rate applies to this night too."))
    price_per_night = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.00"))],
    )
    priority = models.IntegerField(
        default=0,
        help_text=_("Where windows overlap the higher priority wins."),
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = SeasonalRateQuerySet.as_manager()

    class Meta:
        verbose_name = _("Seasonal rate")
        verbose_name_plural = _("Seasonal rates")
        ordering = ["start_date", "-priority"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(end_date__gte=models.F("start_date")),
                name="seasonal_rate_valid_date_range",
            ),
            models.CheckConstraint(
                condition=models.Q(price_per_night__gte=0),
                name="seasonal_rate_price_non_negative",
            ),
        ]
        indexes = [
            models.Index(fields=["tenant", "room", "start_date", "end_date"], name="seasonal_rate_window_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.room.name}: {self.name} {self.start_date} - {self.end_date}"

    def save(self, *args, **kwargs):  # type: ignore
        if not self.tenant_id and self.room_id:
            self.tenant_id = self.room.tenant_id
        super().save(*args, **kwargs)

    def to_snapshot(self) -> SeasonalRateSnapshot:
        return SeasonalRateSnapshot(
            id=self.pk,
            name=self.name,
            start_date=self.start_date,
            end_date=self.end_date,
            price_per_night=self.price_per_night,
            priority=self.priority,
            created_at=self.created_at,
        )


class AddOnQuerySet(models.QuerySet):
    def available_for(self, room):
        """Active add-ons offered for ``room``; no linked rooms means every room"""
        return (
            self.filter(tenant_id=room.tenant_id, is_active=True)
            .filter(models.Q(rooms__isnull=True) | models.Q(rooms=room))
            .distinct()
        )


class AddOn(models.Model):
    """Extra that a guest can add to a stay (breakfast, transfer, tour)."""

    class AddOnType(models.TextChoices):
        SERVICE = "service", _("Service")
        PRODUCT = "product", _("Product")
        EXPERIENCE = "experience", _("Experience")

    class PricingType(models.TextChoices):
        PER_BOOKING = "per_booking", _("Per booking")
        PER_NIGHT = "per_night", _("Per night")
        PER_GUEST = "per_guest", _("Per guest")
        PER_GUEST_PER_NIGHT = "per_guest_per_night", _("Per guest per night")

    tenant = models.ForeignKey(
        "tenants.Tenant",
        on_delete=models.CASCADE,
        related_name="addons",
    )
    name = models.CharField(max_length=120)
    description = models.TextField(blank=True)
    addon_code = models.CharField(max_length=50, blank=True)
    addon_type = models.CharField(
        max_length=20,
        choices=AddOnType.choices,
        default=AddOnType.SERVICE,
    )
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.00"))],
    )
    pricing_type = models.CharField(
        max_length=30,
        choices=PricingType.choices,
        default=PricingType.PER_BOOKING,
    )
    max_quantity = models.PositiveSmallIntegerField(default=10, validators=[MinValueValidator(1)])
    rooms = models.ManyToManyField(
        Room,
        blank=True,
        related_name="addons",
        help_text=_("Leave empty to offer the add-on for every room."),
    )
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = AddOnQuerySet.as_manager()

    class Meta:
        verbose_name = _("Add-on")
        verbose_name_plural = _("Add-ons")
        ordering = ["name"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(price__gte=0),
                name="addon_price_non_negative",
            ),
        ]

    def __str__(self) -> str:
        return self.name
