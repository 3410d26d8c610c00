"""Admin registrations for users."""

from __future__ import annotations

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.utils.translation import gettext_lazy as _

from .models import CustomUser


@admin.register(CustomUser)
class CustomUserAdmin(BaseUserAdmin):
    fieldsets = (
        (None, {"fields": ("email", "password")}),
        (_("Tenant access"), {"fields": ("tenant", "role", "username")}),
        (_("Permissions"), {"fields": ("is_active", "is_staff", "is_superuser", "groups")}),
        (_("Dates"), {"fields": ("last_login", "date_joined")}),
    )
    add_fieldsets = (
        (None, {"classes": ("wide",), "fields": ("email", "password1", "password2", "tenant", "role")}),
    )
    list_display = ("email", "tenant", "role", "is_active")
    list_filter = ("role", "tenant", "is_active")
    search_fields = ("email", "tenant__name")
    ordering = ("email",)
    list_select_related = ("tenant",)
