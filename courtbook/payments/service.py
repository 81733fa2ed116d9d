"""
Cas d'usage 'payments': réconciliation des confirmations de paiement.

Deux points d'entrée indépendants convergent vers le même état final:
- confirm_from_client_callback: signature "order_id|payment_id" (key_secret) vérifiée par le SDK Razorpay
- confirm_from_webhook: signature du corps brut (webhook_secret) vérifiée par le SDK Razorpay

Les deux appellent repository.mark_confirmed, idempotent: l'ordre d'arrivée et les
doublons n'ont pas d'effet. Politique retenue pour un paiement reçu après expiration:
la réservation reste EXPIRED (état terminal), le cas est journalisé pour remboursement
hors bande et signalé avec outcome="expired".
"""
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union
import logging

from courtbook import config
from courtbook.errors import CourtBookError, SignatureMismatch, ValidationError
from courtbook.reservations import repository
from courtbook.reservations.models import ReservationStatus
from . import events, razorpay_client

logger = logging.getLogger(__name__)

CONFIRMED = "confirmed"
ALREADY_CONFIRMED = "already_confirmed"
EXPIRED = "expired"
UNKNOWN_ORDER = "unknown_order"
IGNORED = "ignored"


@dataclass(frozen=True)
class ConfirmationResult:
    order_id: Optional[str]
    payment_id: Optional[str]
    updated: int
    outcome: str

    def to_dict(self) -> Dict[str, Any]:
        return {"orderId": self.order_id, "paymentId": self.payment_id, "updated": self.updated, "outcome": self.outcome}


def _require_secret(secret: str, name: str) -> str:
    if not secret:
        logger.error("payments.%s not configured", name)
        raise CourtBookError("Configuration paiement incomplète", reason="payment_not_configured")
    return secret


def confirm_from_client_callback(order_id: str, payment_id: str, signature: str) -> ConfirmationResult:
    """
    Vérifie la signature renvoyée par le checkout client puis confirme.
    - ValidationError si un champ manque.
    - SignatureMismatch (événement de sécurité, journalisé) si la signature ne correspond pas.
    """
    order_id = (order_id or "").strip()
    payment_id = (payment_id or "").strip()
    if not order_id or not payment_id or not signature:
        raise ValidationError("Champs de vérification manquants", reason="missing_fields")

    _require_secret(config.RAZORPAY_KEY_SECRET, "RAZORPAY_KEY_SECRET")
    if not razorpay_client.verify_payment_signature(order_id, payment_id, signature):
        logger.warning("security: client payment signature mismatch order_id=%s payment_id=%s", order_id, payment_id)
        raise SignatureMismatch("Signature de paiement invalide")

    return _apply_confirmation(order_id, payment_id, source="client_callback")


def confirm_from_webhook(raw_body: Union[bytes, str], signature_header: Optional[str]) -> ConfirmationResult:
    """
    Vérifie la signature du webhook sur le corps brut (jamais sur une chaîne dérivée),
    puis agit uniquement sur payment.captured / order.paid.
    - SignatureMismatch si la signature est absente ou fausse.
    - ValidationError si le corps signé n'est pas un objet JSON.
    - Événement non reconnu: outcome="ignored", aucune écriture.
    """
    body = raw_body.encode("utf-8") if isinstance(raw_body, str) else (raw_body or b"")
    secret = _require_secret(config.RAZORPAY_WEBHOOK_SECRET, "RAZORPAY_WEBHOOK_SECRET")
    try:
        text = body.decode("utf-8")
    except UnicodeDecodeError:
        logger.warning("payments.webhook non utf-8 body size=%s", len(body))
        raise ValidationError("Payload webhook illisible", reason="invalid_payload")
    if not razorpay_client.verify_webhook_signature(text, signature_header, secret):
        logger.warning("security: webhook signature mismatch size=%s", len(body))
        raise SignatureMismatch("Signature webhook invalide")

    try:
        event = events.parse_event(text)
    except ValueError:
        logger.warning("payments.webhook unparsable signed body size=%s", len(body))
        raise ValidationError("Payload webhook illisible", reason="invalid_payload")

    if isinstance(event, events.IgnoredEvent):
        logger.info("payments.webhook ignored kind=%s reason=%s", event.kind, event.reason)
        return ConfirmationResult(order_id=None, payment_id=None, updated=0, outcome=IGNORED)

    return _apply_confirmation(event.order_id, event.payment_id, source=f"webhook:{event.kind}")


def _apply_confirmation(order_id: str, payment_id: str, source: str) -> ConfirmationResult:
    updated = repository.mark_confirmed(order_id, payment_id)
    if updated:
        logger.info("payments.confirmed source=%s order_id=%s payment_id=%s updated=%s", source, order_id, payment_id, updated)
        return ConfirmationResult(order_id, payment_id, updated, CONFIRMED)

    # Aucune ligne pending: doublon, paiement tardif, ou order inconnu (lecture pour le diagnostic seulement)
    rows = repository.find_by_order(order_id)
    if not rows:
        logger.warning("payments.unknown_order source=%s order_id=%s payment_id=%s", source, order_id, payment_id)
        return ConfirmationResult(order_id, payment_id, 0, UNKNOWN_ORDER)
    if any(r.status == ReservationStatus.CONFIRMED for r in rows):
        logger.info("payments.duplicate source=%s order_id=%s payment_id=%s", source, order_id, payment_id)
        return ConfirmationResult(order_id, payment_id, 0, ALREADY_CONFIRMED)
    logger.warning(
        "payments.late_payment source=%s order_id=%s payment_id=%s statuses=%s (remboursement hors bande requis)",
        source, order_id, payment_id, sorted({r.status.value for r in rows}),
    )
    return ConfirmationResult(order_id, payment_id, 0, EXPIRED)
