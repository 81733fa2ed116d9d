"""
Module 'slots': modèle de créneaux et arithmétique de chevauchement (logique pure).
"""

from .timeslot import (
    MINUTES_PER_DAY,
    TimeSlot,
    parse_date_key,
    overlaps,
    is_past,
    enumerate_slots,
    minutes_label,
)

__all__ = [
    "MINUTES_PER_DAY",
    "TimeSlot",
    "parse_date_key",
    "overlaps",
    "is_past",
    "enumerate_slots",
    "minutes_label",
]
