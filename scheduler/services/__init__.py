"""
Slot Scheduler Services Module

The slot engine owns every bookable slot of the calendar and answers
nearest-slot searches, bookings and cancellations.
"""

from .slot_engine_service import Booking, Slot, SlotEngine, SlotGridConfig

__all__ = [
    "Booking",
    "Slot",
    "SlotEngine",
    "SlotGridConfig",
]
