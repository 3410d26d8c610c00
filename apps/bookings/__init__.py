"""Bookings app package.

This app holds the booking engine: the pure availability and pricing
domain, the command handlers that commit bookings under a room lock, and
the Celery tasks that release abandoned carts.
"""
