"""Tests for seasonal rate and add-on management."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.rooms.models import AddOn, Room, SeasonalRate
from apps.tenants.models import Tenant
from apps.users.models import User


class SeasonalRateAPITests(APITestCase):
    def setUp(self) -> None:
        self.tenant = Tenant.objects.create(name="Karoo Lodge", slug="karoo-lodge")
        self.owner = User.objects.create_user(
            email="owner@karoo.example",
            password="OwnerPass123",
            role=User.RoleChoices.OWNER,
            tenant=self.tenant,
        )
        self.room = Room.objects.create(
            tenant=self.tenant, name="Garden Suite", base_price_per_night=Decimal("1000.00")
        )
        self.client.force_authenticate(self.owner)

    def _list_url(self, room_id=None) -> str:
        return reverse("room-seasonal-rate-list", kwargs={"room_id": room_id or self.room.id})

    def _detail_url(self, pk: int) -> str:
        return reverse("room-seasonal-rate-detail", kwargs={"room_id": self.room.id, "pk": pk})

    def test_create_and_list_rates(self) -> None:
        response = self.client.post(
            self._list_url(),
            {
                "name": "Festive season",
                "start_date": "2024-12-15",
                "end_date": "2025-01-05",
                "price_per_night": "1800.00",
                "priority": 2,
            },
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(response.data["room_id"], self.room.id)
        self.assertEqual(response.data["period_label"], "2024-12-15 .. 2025-01-05")
        rate = SeasonalRate.objects.get(pk=response.data["id"])
        self.assertEqual(rate.tenant, self.tenant)

        listing = self.client.get(self._list_url(), {"start": "2025-01-01", "end": "2025-01-31"})
        self.assertEqual([item["id"] for item in listing.data["results"]], [rate.id])

    def test_single_day_rate_is_allowed_but_reversed_window_is_not(self) -> None:
        one_day = self.client.post(
            self._list_url(),
            {"name": "Heritage Day", "start_date": "2025-09-24", "end_date": "2025-09-24", "price_per_night": "1200"},
            format="json",
        )
        reversed_window = self.client.post(
            self._list_url(),
            {"name": "Broken", "start_date": "2025-09-25", "end_date": "2025-09-24", "price_per_night": "1200"},
            format="json",
        )

        self.assertEqual(one_day.status_code, status.HTTP_201_CREATED, one_day.data)
        self.assertEqual(reversed_window.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("end_date", reversed_window.data)

    def test_update_and_delete_rate(self) -> None:
        rate = SeasonalRate.objects.create(
            room=self.room, name="Winter", start_date=date(2025, 6, 1), end_date=date(2025, 8, 31),
            price_per_night=Decimal("800.00"),
        )

        patched = self.client.patch(self._detail_url(rate.id), {"price_per_night": "850.00"}, format="json")
        deleted = self.client.delete(self._detail_url(rate.id))

        self.assertEqual(patched.status_code, status.HTTP_200_OK, patched.data)
        self.assertEqual(patched.data["price_per_night"], Decimal("850.00"))
        self.assertEqual(deleted.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(SeasonalRate.objects.filter(pk=rate.id).exists())

    def test_bulk_delete(self) -> None:
        rates = [
            SeasonalRate.objects.create(
                room=self.room, name=f"Rate {day}", start_date=date(2025, 7, day), end_date=date(2025, 7, day),
                price_per_night=Decimal("900.00"),
            )
            for day in (1, 2, 3)
        ]

        response = self.client.post(
            reverse("room-seasonal-rate-bulk-delete", kwargs={"room_id": self.room.id}),
            {"ids": [rates[0].id, rates[1].id]},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["deleted"], 2)
        self.assertEqual(list(SeasonalRate.objects.values_list("id", flat=True)), [rates[2].id])

    def test_rates_of_other_tenant_rooms_are_not_reachable(self) -> None:
        other = Tenant.objects.create(name="Coastal Inn", slug="coastal-inn")
        foreign = Room.objects.create(tenant=other, name="Sea View", base_price_per_night=Decimal("900.00"))

        response = self.client.get(self._list_url(foreign.id))

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_addon_rooms_are_limited_to_tenant(self) -> None:
        other = Tenant.objects.create(name="Coastal Inn", slug="coastal-inn")
        foreign = Room.objects.create(tenant=other, name="Sea View", base_price_per_night=Decimal("900.00"))
        url = reverse("addon-list")

        allowed = self.client.post(
            url,
            {"name": "Breakfast", "price": "150.00", "pricing_type": "per_guest", "rooms": [self.room.id]},
            format="json",
        )
        refused = self.client.post(
            url, {"name": "Kayak", "price": "200.00", "rooms": [foreign.id]}, format="json"
        )

        self.assertEqual(allowed.status_code, status.HTTP_201_CREATED, allowed.data)
        self.assertEqual(AddOn.objects.get(pk=allowed.data["id"]).tenant, self.tenant)
        self.assertEqual(refused.status_code, status.HTTP_400_BAD_REQUEST)
