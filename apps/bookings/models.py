"""Booking persistence model."""

from __future__ import annotations

import secrets
import string
import time
from decimal import Decimal

from django.core.exceptions import ValidationError  # type: ignore
from django.core.serializers.json import DjangoJSONEncoder  # type: ignore
from django.db import models  # type: ignore
from django.utils import timezone  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from shared.domain.value_objects import StayRange

from .domain.entities import BLOCKING_STATUSES, BookedStay, BookingStatus

_BASE36 = string.digits + string.ascii_uppercase


def _to_base36(number: int) -> str:
    digits = []
    while number:
        number, remainder = divmod(number, 36)
        digits.append(_BASE36[remainder])
    return "".join(reversed(digits)) or "0"


class BookingQuerySet(models.QuerySet):
    def for_tenant(self, tenant):
        return self.filter(tenant=tenant)

    def blocking(self):
        return self.filter(status__in=BLOCKING_STATUSES)

    def overlapping(self, check_in, check_out):
        """Half-open overlap with [check_in, check_out)"""
        return self.filter(check_in__lt=check_out, check_out__gt=check_in)


class Booking(models.Model):

    class Status(models.TextChoices):
        PENDING = BookingStatus.PENDING.value, _("Pending")
        CONFIRMED = BookingStatus.CONFIRMED.value, _("Confirmed")
        CHECKED_IN = BookingStatus.CHECKED_IN.value, _("Checked in")
        CHECKED_OUT = BookingStatus.CHECKED_OUT.value, _("Checked out")
        CANCELLED = BookingStatus.CANCELLED.value, _("Cancelled")
        COMPLETED = BookingStatus.COMPLETED.value, _("Completed")
        PAYMENT_FAILED = BookingStatus.PAYMENT_FAILED.value, _("Payment failed")
        CART_ABANDONED = BookingStatus.CART_ABANDONED.value, _("Cart abandoned")

    class PaymentStatus(models.TextChoices):
        UNPAID = "unpaid", _("Unpaid")
        PAID = "paid", _("Paid")
        REFUNDED = "refunded", _("Refunded")
        FAILED = "failed", _("Failed")

    tenant = models.ForeignKey(
        "tenants.Tenant",
        on_delete=models.CASCADE,
        related_name="bookings",
    )
    room = models.ForeignKey(
        "rooms.Room",
        on_delete=models.PROTECT,
        related_name="bookings",
    )
    reference = models.CharField(max_length=32, unique=True, editable=False)
    guest_name = models.CharField(max_length=255)
    guest_email = models.EmailField()
    guest_phone = models.CharField(max_length=32, blank=True)
    guests = models.PositiveSmallIntegerField(default=1)
    check_in = models.DateField()
    check_out = models.DateField()
    status = models.CharField(
        max_length=32,
        choices=Status.choices,
        default=Status.PENDING,
    )
    payment_status = models.CharField(
        max_length=20,
        choices=PaymentStatus.choices,
        default=PaymentStatus.UNPAID,
    )
    base_total = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    addons_total = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    total_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    currency = models.CharField(max_length=3)
    price_breakdown = models.JSONField(
        default=list,
        blank=True,
        encoder=DjangoJSONEncoder,
        help_text=_("Nightly prices frozen at booking time."),
    )
    addons = models.JSONField(default=list, blank=True, encoder=DjangoJSONEncoder)
    special_requests = models.TextField(blank=True)
    retry_count = models.PositiveSmallIntegerField(default=0)
    expires_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text=_("Pending carts not paid by this time are abandoned."),
    )
    cancelled_at = models.DateTimeField(null=True, blank=True)
    cancellation_reason = models.CharField(max_length=255, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = BookingQuerySet.as_manager()

    class Meta:
        verbose_name = _("Booking")
        verbose_name_plural = _("Bookings")
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(check_out__gt=models.F("check_in")),
                name="booking_valid_dates",
            ),
        ]
        indexes = [
            models.Index(fields=["tenant", "room", "check_in", "check_out"], name="booking_room_dates_idx"),
            models.Index(fields=["status"], name="booking_status_idx"),
        ]

    def __str__(self) -> str:
        return f"Booking {self.reference} ({self.room_id})"

    def clean(self) -> None:
        if self.check_in and self.check_out and self.check_out <= self.check_in:
            raise ValidationError(_("Check-out must be after check-in."))
        if self.room_id and self.tenant_id and self.room.tenant_id != self.tenant_id:
            raise ValidationError(_("Room belongs to another tenant."))

    def save(self, *args, **kwargs):  # type: ignore
        if self._state.adding and not self.reference:
            self.reference = self.generate_reference()
        super().save(*args, **kwargs)

    @staticmethod
    def generate_reference() -> str:
        suffix = "".join(secrets.choice(_BASE36) for _ in range(4))
        return f"BK-{_to_base36(int(time.time() * 1000))}-{suffix}"

    @property
    def stay(self) -> StayRange:
        return StayRange(self.check_in, self.check_out)

    @property
    def nights(self) -> int:
        return (self.check_out - self.check_in).days

    @property
    def blocks_inventory(self) -> bool:
        return self.status in BLOCKING_STATUSES

    def to_booked_stay(self) -> BookedStay:
        return BookedStay(
            booking_id=self.pk,
            stay=self.stay,
            status=self.status,
            guest_name=self.guest_name,
        )

    def mark_cancelled(self, reason: str = "") -> None:
        self.status = self.Status.CANCELLED
        self.cancellation_reason = reason
        self.cancelled_at = timezone.now()
        self.save(update_fields=["status", "cancellation_reason", "cancelled_at", "updated_at"])

    def mark_confirmed(self) -> None:
        self.status = self.Status.CONFIRMED
        self.payment_status = self.PaymentStatus.PAID
        self.expires_at = None
        self.save(update_fields=["status", "payment_status", "expires_at", "updated_at"])

    def mark_payment_failed(self) -> None:
        self.status = self.Status.PAYMENT_FAILED
        self.payment_status = self.PaymentStatus.FAILED
        self.save(update_fields=["status", "payment_status", "updated_at"])

    def should_expire(self) -> bool:
        return bool(
            self.expires_at
            and self.status == self.Status.PENDING
            and timezone.now() > self.expires_at
        )
