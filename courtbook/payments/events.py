"""
Désérialisation des événements webhook Razorpay en variantes typées.

Seuls les événements qui confirment un paiement sont reconnus; tout le reste
devient IgnoredEvent (acquitté, jamais rejeté) pour ne pas dépendre du schéma
complet du processeur.
"""
import json
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

PAYMENT_CAPTURED = "payment.captured"
ORDER_PAID = "order.paid"

# module courtbook.payments.events
@dataclass(frozen=True)
class PaymentCaptured:
    order_id: str
    payment_id: str
    kind: str = PAYMENT_CAPTURED

@dataclass(frozen=True)
class OrderPaid:
    order_id: str
    payment_id: str
    kind: str = ORDER_PAID

@dataclass(frozen=True)
class IgnoredEvent:
    kind: str
    reason: str = "unhandled_event"

WebhookEvent = Union[PaymentCaptured, OrderPaid, IgnoredEvent]

def _entity(payload: Dict[str, Any], name: str) -> Dict[str, Any]:
    node = (payload or {}).get(name) or {}
    entity = node.get("entity") if isinstance(node, dict) else None
    return entity if isinstance(entity, dict) else {}

def parse_event(raw_body: Union[bytes, str]) -> WebhookEvent:
    """
    Convertit le corps brut (déjà authentifié) en événement typé.
    - payment.captured: order_id/id dans payload.payment.entity
    - order.paid: id dans payload.order.entity (repli sur payment.entity.order_id), paiement dans payload.payment.entity
    - Identifiants manquants => IgnoredEvent(reason="missing_ids")
    - Soulève ValueError si le corps n'est pas un objet JSON.
    """
    if isinstance(raw_body, bytes):
        raw_body = raw_body.decode("utf-8")
    event = json.loads(raw_body)
    if not isinstance(event, dict):
        raise ValueError("webhook body must be a JSON object")

    kind = str(event.get("event") or "")
    payload = event.get("payload") or {}
    if not isinstance(payload, dict):
        payload = {}
    payment = _entity(payload, "payment")

    order_id: Optional[str] = None
    if kind == PAYMENT_CAPTURED:
        order_id = payment.get("order_id")
    elif kind == ORDER_PAID:
        order_id = _entity(payload, "order").get("id") or payment.get("order_id")
    else:
        return IgnoredEvent(kind=kind or "unknown")

    payment_id = payment.get("id")
    if not order_id or not payment_id:
        return IgnoredEvent(kind=kind, reason="missing_ids")
    if kind == PAYMENT_CAPTURED:
        return PaymentCaptured(order_id=str(order_id), payment_id=str(payment_id))
    return OrderPaid(order_id=str(order_id), payment_id=str(payment_id))
