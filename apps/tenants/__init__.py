"""Tenants app package: the lodging businesses that own rooms and bookings."""
