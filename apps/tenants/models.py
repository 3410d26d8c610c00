"""Tenant model: the lodging business that owns rooms, rates and bookings."""

from __future__ import annotations

from django.core.validators import RegexValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


CURRENCY_VALIDATOR = RegexValidator(
    regex=r"^[A-Z]{3}$",
    message=_("Use a three letter ISO 4217 currency code."),
)


class TenantQuerySet(models.QuerySet):
    def active(self):
        return self.filter(is_active=True)


class Tenant(models.Model):
    name = models.CharField(max_length=255)
    slug = models.SlugField(max_length=80, unique=True)
    currency = models.CharField(
        max_length=3,
        default="ZAR",
        validators=[CURRENCY_VALIDATOR],
        help_text=_("Default currency for new rooms and add-ons."),
    )
    contact_email = models.EmailField(blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = TenantQuerySet.as_manager()

    class Meta:
        verbose_name = _("Tenant")
        verbose_name_plural = _("Tenants")
        ordering = ["name"]

    def __str__(self) -> str:
        return f"{self.name} ({self.slug})"
