"""Tests for tenant staff access rules."""

from __future__ import annotations

from decimal import Decimal

from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.rooms.models import Room
from apps.tenants.models import Tenant
from apps.users.models import User


class TenantPermissionTests(APITestCase):
    def setUp(self) -> None:
        self.tenant = Tenant.objects.create(name="Karoo Lodge", slug="karoo-lodge")
        Room.objects.create(tenant=self.tenant, name="Garden Suite", base_price_per_night=Decimal("1000.00"))
        self.url = reverse("room-list")

    def test_anonymous_is_rejected(self) -> None:
        response = self.client.get(self.url)

        self.assertIn(response.status_code, (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN))

    def test_user_without_tenant_is_forbidden(self) -> None:
        admin = User.objects.create_superuser(email="root@example.com", password="RootPass123")
        self.client.force_authenticate(admin)

        response = self.client.get(self.url)

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_staff_of_inactive_tenant_is_forbidden(self) -> None:
        staff = User.objects.create_user(
            email="staff@karoo.example",
            password="StaffPass123",
            role=User.RoleChoices.STAFF,
            tenant=self.tenant,
        )
        self.tenant.is_active = False
        self.tenant.save()
        self.client.force_authenticate(staff)

        response = self.client.get(self.url)

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_owner_sees_tenant_rooms(self) -> None:
        owner = User.objects.create_user(
            email="owner@karoo.example",
            password="OwnerPass123",
            role=User.RoleChoices.OWNER,
            tenant=self.tenant,
        )
        self.client.force_authenticate(owner)

        response = self.client.get(self.url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["count"], 1)
        self.assertTrue(owner.is_owner())
        self.assertTrue(owner.is_tenant_staff())
