"""Booking-slot scheduling engine for pet-service providers."""

__version__ = "0.1.0"
