"""Permission classes and view helpers for tenant-scoped staff APIs."""

from __future__ import annotations

from django.shortcuts import get_object_or_404  # type: ignore
from rest_framework import permissions  # type: ignore
from rest_framework.exceptions import PermissionDenied  # type: ignore

from .models import Tenant


class IsTenantStaff(permissions.BasePermission):
    """
    Authenticated owner or staff member of an active tenant.

    Users without a tenant cannot reach tenant data, platform
    superusers included: every query needs a tenant to filter on.
    """

    message = "A tenant staff account is required."

    def has_permission(self, request, view) -> bool:  # type: ignore
        user = request.user
        if not user or not user.is_authenticated:
            return False
        tenant = getattr(user, "tenant", None)
        if tenant is None or not tenant.is_active:
            return False
        return hasattr(user, "is_tenant_staff") and user.is_tenant_staff()

    def has_object_permission(self, request, view, obj) -> bool:  # type: ignore
        return getattr(obj, "tenant_id", None) == request.user.tenant_id


class TenantScopedMixin:
    """Filters the view's queryset by the requesting user's tenant."""

    permission_classes = [IsTenantStaff]

    def get_tenant(self) -> Tenant:
        tenant = getattr(self.request.user, "tenant", None)
        if tenant is None:
            raise PermissionDenied(IsTenantStaff.message)
        return tenant

    def get_queryset(self):  # type: ignore[override]
        return super().get_queryset().filter(tenant=self.get_tenant())

    def perform_create(self, serializer):  # type: ignore[override]
        serializer.save(tenant=self.get_tenant())


class PublicTenantMixin:
    """Resolves the tenant from the ``tenant_slug`` URL kwarg."""

    permission_classes = [permissions.AllowAny]
    authentication_classes: list = []

    def get_tenant(self) -> Tenant:
        if not hasattr(self, "_tenant"):
            self._tenant = get_object_or_404(
                Tenant.objects.active(), slug=self.kwargs["tenant_slug"]
            )
        return self._tenant
