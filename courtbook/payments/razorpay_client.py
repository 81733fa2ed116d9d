"""
Adaptateur Razorpay: centralise le client SDK et la vérification des signatures.
- Callback client: utility.verify_payment_signature (clé secrète API sur "order_id|payment_id")
- Webhook: utility.verify_webhook_signature (secret webhook sur le corps brut)
Les erreurs SignatureVerificationError du SDK sont converties en booléen pour le service.
"""
from typing import Optional

import razorpay
from razorpay.errors import SignatureVerificationError

from courtbook import config

# module courtbook.payments.razorpay_client
def require_razorpay() -> razorpay.Client:
    """
    Retourne un client Razorpay authentifié (key_id, key_secret).
    - verify_payment_signature utilise le key_secret porté par l'auth du client.
    """
    return razorpay.Client(auth=(config.RAZORPAY_KEY_ID, config.RAZORPAY_KEY_SECRET))

def verify_payment_signature(order_id: str, payment_id: str, signature: Optional[str]) -> bool:
    """Vrai si la signature du checkout correspond; une signature absente ne correspond jamais."""
    signature = (signature or "").strip()
    if not signature:
        return False
    client = require_razorpay()
    try:
        client.utility.verify_payment_signature({
            "razorpay_order_id": order_id,
            "razorpay_payment_id": payment_id,
            "razorpay_signature": signature,
        })
    except SignatureVerificationError:
        return False
    return True

def verify_webhook_signature(body: str, signature: Optional[str], secret: str) -> bool:
    """Vrai si X-Razorpay-Signature correspond au corps brut (texte tel que reçu)."""
    signature = (signature or "").strip()
    if not signature:
        return False
    client = require_razorpay()
    try:
        client.utility.verify_webhook_signature(body, signature, secret)
    except SignatureVerificationError:
        return False
    return True
