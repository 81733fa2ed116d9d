"""
Taxonomie des erreurs du cœur réservation/paiement.

Chaque erreur porte:
- reason: code stable (snake_case) pour que l'appelant distingue conflit / validation / transitoire
- status_code: classe de statut HTTP équivalente (400, 409, 502, ...)
- un message lisible (français, comme le reste de l'API)

Les vues ne construisent pas de réponse elles-mêmes: le handler enregistré dans
app_setup/exceptions.py rend ces erreurs en JSON {"detail", "reason", ...extra}.
"""
from typing import Any, Dict, List, Optional


class CourtBookError(Exception):
    status_code = 500
    reason = "error"

    def __init__(self, message: str, reason: Optional[str] = None, **extra: Any):
        super().__init__(message)
        self.message = message
        if reason:
            self.reason = reason
        self.extra: Dict[str, Any] = extra

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"detail": self.message, "reason": self.reason}
        payload.update(self.extra)
        return payload


class ValidationError(CourtBookError):
    """Champs manquants ou mal formés; toujours récupérable par l'appelant."""
    status_code = 400
    reason = "invalid_request"


class ConflictError(CourtBookError):
    """Un ou plusieurs créneaux demandés chevauchent une réservation active."""
    status_code = 409
    reason = "slot_conflict"

    def __init__(self, message: str, slots: Optional[List[Dict[str, Any]]] = None, **extra: Any):
        super().__init__(message, slots=list(slots or []), **extra)
        self.slots = list(slots or [])


class OrderError(CourtBookError):
    pass


class SlotUnavailable(OrderError, ConflictError):
    reason = "slot_unavailable"


class GatewayFailure(OrderError):
    """Passerelle de paiement injoignable ou refus; les réservations restent PENDING."""
    status_code = 502
    reason = "gateway_failure"

    def __init__(self, message: str, reservation_ids: Optional[List[str]] = None, **extra: Any):
        super().__init__(message, reservationIds=list(reservation_ids or []), **extra)
        self.reservation_ids = list(reservation_ids or [])


class VerificationError(CourtBookError):
    status_code = 400
    reason = "verification_failed"


class SignatureMismatch(VerificationError):
    reason = "signature_mismatch"


class ReservationExpired(CourtBookError):
    """Paiement reçu pour des réservations déjà expirées (remboursement hors bande)."""
    status_code = 409
    reason = "reservation_expired"


class UnknownReservation(CourtBookError):
    status_code = 404
    reason = "reservation_not_found"


class StorageFailure(CourtBookError):
    """Erreur de stockage fatale pour la requête courante (aucun état partiel)."""
    status_code = 500
    reason = "storage_failure"


class OrderAlreadyAttached(OrderError):
    """Les réservations portent déjà l'order d'un autre checkout (relance concurrente)."""
    status_code = 409
    reason = "order_already_attached"
