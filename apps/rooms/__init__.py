"""Rooms app package: rooms, seasonal rates and the add-on catalog."""
