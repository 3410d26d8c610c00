"""Tests for the guest-facing API."""

from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal

from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.bookings.models import Booking
from apps.rooms.models import AddOn, Room, SeasonalRate
from apps.tenants.models import Tenant


class PublicAPITests(APITestCase):
    def setUp(self) -> None:
        self.tenant = Tenant.objects.create(name="Karoo Lodge", slug="karoo-lodge", currency="ZAR")
        self.room = Room.objects.create(
            tenant=self.tenant,
            name="Garden Suite",
            base_price_per_night=Decimal("1000.00"),
            max_guests=3,
        )
        self.hidden = Room.objects.create(
            tenant=self.tenant,
            name="Closed Wing",
            base_price_per_night=Decimal("500.00"),
            is_active=False,
        )
        self.check_in = date.today() + timedelta(days=14)

    def _url(self, name: str, room: Room | None = None, slug: str = "karoo-lodge") -> str:
        return reverse(name, kwargs={"tenant_slug": slug, "room_id": (room or self.room).id})

    def test_room_list_shows_active_rooms_only(self) -> None:
        response = self.client.get(reverse("public-room-list", kwargs={"tenant_slug": "karoo-lodge"}))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([room["name"] for room in response.data["results"]], ["Garden Suite"])

    def test_unknown_tenant_is_not_found(self) -> None:
        response = self.client.get(reverse("public-room-list", kwargs={"tenant_slug": "nowhere"}))

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_inactive_room_is_not_found(self) -> None:
        response = self.client.get(
            self._url("public-room-availability", self.hidden),
            {"check_in": str(self.check_in), "check_out": str(self.check_in + timedelta(days=1))},
        )

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_availability(self) -> None:
        response = self.client.get(
            self._url("public-room-availability"),
            {"check_in": str(self.check_in), "check_out": str(self.check_in + timedelta(days=2))},
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(
            response.data,
            {
                "available": True,
                "available_units": 1,
                "total_units": 1,
                "nights": 2,
                "min_stay_nights": 1,
                "max_stay_nights": None,
                "meets_min_stay": True,
                "meets_max_stay": True,
            },
        )

    def test_pricing(self) -> None:
        SeasonalRate.objects.create(
            room=self.room, name="Peak", start_date=self.check_in, end_date=self.check_in,
            price_per_night=Decimal("1250.00"),
        )

        response = self.client.get(
            self._url("public-room-pricing"),
            {"check_in": str(self.check_in), "check_out": str(self.check_in + timedelta(days=2))},
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(set(response.data), {"room_name", "nights", "subtotal", "currency", "night_count"})
        self.assertEqual(response.data["subtotal"], Decimal("2250.00"))
        self.assertEqual(response.data["nights"][0]["rate_name"], "Peak")
        self.assertIsNone(response.data["nights"][1]["rate_name"])

    def test_room_addons(self) -> None:
        AddOn.objects.create(tenant=self.tenant, name="Breakfast", price=Decimal("150.00"))
        AddOn.objects.create(tenant=self.tenant, name="Retired", price=Decimal("10.00"), is_active=False)
        other_room_only = AddOn.objects.create(tenant=self.tenant, name="Cot", price=Decimal("0.00"))
        other_room_only.rooms.add(self.hidden)

        response = self.client.get(self._url("public-room-addons"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([addon["name"] for addon in response.data], ["Breakfast"])

    def test_calendar(self) -> None:
        response = self.client.get(
            self._url("public-room-calendar"),
            {"start": str(self.check_in), "end": str(self.check_in + timedelta(days=6))},
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(len(response.data["dates"]), 7)
        self.assertTrue(all(day["available"] for day in response.data["dates"]))

    def test_guest_checkout(self) -> None:
        url = reverse("public-booking-create", kwargs={"tenant_slug": "karoo-lodge"})
        payload = {
            "room_id": self.room.id,
            "check_in": str(self.check_in),
            "check_out": str(self.check_in + timedelta(days=3)),
            "guest_name": "Kagiso Molefe",
            "guest_email": "kagiso@example.com",
            "guests": 2,
        }

        created = self.client.post(url, payload, format="json")
        duplicate = self.client.post(url, payload, format="json")

        self.assertEqual(created.status_code, status.HTTP_201_CREATED, created.data)
        self.assertEqual(created.data["total_amount"], Decimal("3000.00"))
        self.assertEqual(duplicate.status_code, status.HTTP_409_CONFLICT)
        booking = Booking.objects.get()
        self.assertEqual(booking.tenant, self.tenant)
        self.assertEqual(booking.status, Booking.Status.PENDING)

    def test_guest_checkout_respects_room_capacity(self) -> None:
        url = reverse("public-booking-create", kwargs={"tenant_slug": "karoo-lodge"})

        response = self.client.post(
            url,
            {
                "room_id": self.room.id,
                "check_in": str(self.check_in),
                "check_out": str(self.check_in + timedelta(days=1)),
                "guest_name": "Large party",
                "guest_email": "party@example.com",
                "guests": 6,
            },
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["code"], "invalid_stay")
