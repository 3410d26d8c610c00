"""Shared pytest fixtures."""

from __future__ import annotations

from datetime import timedelta
from decimal import Decimal

import pytest


@pytest.fixture
def future_date():
    """``future_date(n)`` is today plus ``n`` days"""
    from django.utils import timezone

    today = timezone.localdate()
    return lambda days: today + timedelta(days=days)


@pytest.fixture
def tenant(db):
    from apps.tenants.models import Tenant

    return Tenant.objects.create(name="Karoo Lodge", slug="karoo-lodge", currency="ZAR")


@pytest.fixture
def room(tenant):
    from apps.rooms.models import Room

    return Room.objects.create(
        tenant=tenant,
        name="Garden Suite",
        base_price_per_night=Decimal("1000.00"),
        max_guests=4,
    )


@pytest.fixture
def room_type(tenant):
    from apps.rooms.models import Room

    return Room.objects.create(
        tenant=tenant,
        name="Standard Double",
        base_price_per_night=Decimal("800.00"),
        inventory_mode=Room.InventoryMode.ROOM_TYPE,
        total_units=2,
        max_guests=2,
    )
