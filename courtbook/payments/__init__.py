"""
Module 'payments' (feature-first): point d'entrée public.
Réunit le décodage des événements webhook et la réconciliation des confirmations de paiement.
"""

from .events import PaymentCaptured, OrderPaid, IgnoredEvent, parse_event
from .service import (
    ConfirmationResult,
    confirm_from_client_callback,
    confirm_from_webhook,
)

__all__ = [
    # events
    "PaymentCaptured",
    "OrderPaid",
    "IgnoredEvent",
    "parse_event",
    # services
    "ConfirmationResult",
    "confirm_from_client_callback",
    "confirm_from_webhook",
]
