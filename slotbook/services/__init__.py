"""
Slotbook Services Module

Availability computation for single interviewers and panels, and the
booking lifecycle (book, reschedule, cancel) on top of a calendar provider
and an interview store.
"""

# === Availability ===
from .availability_service import (
    AvailabilityService,
    compute_slots,
    default_availability_config,
    intersect_slots,
)

# === Booking Lifecycle ===
from .booking_service import BookingService

# === Exported Interface ===
__all__ = [
    "AvailabilityService",
    "BookingService",
    "compute_slots",
    "default_availability_config",
    "intersect_slots",
]
