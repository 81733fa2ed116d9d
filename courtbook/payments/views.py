import logging
from typing import Optional

from fastapi import APIRouter, Request, HTTPException
from fastapi.responses import JSONResponse
from pydantic import AliasChoices, BaseModel, Field

from courtbook.errors import CourtBookError, ReservationExpired, UnknownReservation
from courtbook.payments import service as payments_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/payments", tags=["Payments API"])

SIGNATURE_HEADER = "X-Razorpay-Signature"

class VerifyPaymentRequest(BaseModel):
    # Accepte les noms renvoyés tels quels par le checkout Razorpay (razorpay_*)
    order_id: str = Field(default="", validation_alias=AliasChoices("orderId", "razorpay_order_id", "order_id"))
    payment_id: str = Field(default="", validation_alias=AliasChoices("paymentId", "razorpay_payment_id", "payment_id"))
    signature: Optional[str] = Field(default=None, validation_alias=AliasChoices("signature", "razorpay_signature"))

# module courtbook.payments.views
@router.post("/verify")
def verify_payment(req: VerifyPaymentRequest):
    """
    Confirmation côté client (handler du checkout) après paiement.
    - Entrée JSON: {orderId, paymentId, signature}
    - Signature: HMAC(key_secret, "orderId|paymentId"), comparaison en temps constant
    - Réponses: {"ok": true, "updated": <int>} (y compris si déjà confirmé par le webhook)
    - Erreurs: 400 signature invalide, 409 réservation expirée (paiement à rembourser), 404 order inconnu
    """
    try:
        result = payments_service.confirm_from_client_callback(req.order_id, req.payment_id, req.signature or "")
    except CourtBookError:
        raise
    except Exception:
        logger.exception("Erreur verify_payment")
        raise HTTPException(status_code=500, detail="Erreur serveur")

    if result.outcome == payments_service.EXPIRED:
        raise ReservationExpired(
            "Réservation expirée avant le paiement; le remboursement sera traité",
            orderId=result.order_id,
        )
    if result.outcome == payments_service.UNKNOWN_ORDER:
        raise UnknownReservation("Aucune réservation pour cette commande", orderId=result.order_id)
    return {"ok": True, "updated": result.updated}

@router.post("/webhook", include_in_schema=False)
async def razorpay_webhook(request: Request):
    """
    Webhook Razorpay (anonyme mais signé): confirme les réservations sur payment.captured / order.paid.
    - Signature: HMAC(webhook_secret, corps brut) dans l'en-tête X-Razorpay-Signature
    - Réponse: {"received": true} pour toute requête correctement signée, même si l'événement est ignoré
      ou si le paiement arrive après expiration (évite des relances sans fin du processeur)
    - Erreurs: 400 si signature invalide ou corps illisible; 500 si le stockage échoue (Razorpay relancera)
    """
    body = await request.body()
    signature = request.headers.get(SIGNATURE_HEADER)
    try:
        result = payments_service.confirm_from_webhook(body, signature)
    except CourtBookError:
        raise
    except Exception:
        logger.exception("Erreur razorpay_webhook")
        raise HTTPException(status_code=500, detail="Erreur serveur")
    logger.info("payments.webhook outcome=%s order_id=%s updated=%s", result.outcome, result.order_id, result.updated)
    return JSONResponse({"received": True})
