"""
Module 'reservations' (feature-first): stockage durable des créneaux tenus/confirmés.
Réunit les types de ligne, le repository Supabase (insert atomique, updates conditionnels)
et les cas d'usage de lecture/maintenance.
"""

from .models import (
    ACTIVE_STATUSES,
    Customer,
    PaymentStatus,
    Reservation,
    ReservationStatus,
    Sport,
)
from .repository import (
    reserve_batch,
    mark_confirmed,
    attach_external_order,
    detach_external_order,
    expire_pending_older_than,
    find_by_order,
    get_reservations,
    list_active_for_date,
)

__all__ = [
    # models
    "ACTIVE_STATUSES",
    "Customer",
    "PaymentStatus",
    "Reservation",
    "ReservationStatus",
    "Sport",
    # repository
    "reserve_batch",
    "mark_confirmed",
    "attach_external_order",
    "detach_external_order",
    "expire_pending_older_than",
    "find_by_order",
    "get_reservations",
    "list_active_for_date",
]
