"""
Adaptateur passerelle de paiement: centralise la création d'order côté processeur.

- PaymentGateway: interface consommée par le service de commande.
- RazorpayGateway: appel REST POST /v1/orders (auth Basic key_id:key_secret) via httpx,
  délai borné, une seule relance au plus sur erreur réseau ou 5xx (jamais sur 4xx).
"""
from typing import Any, Dict, Optional
import logging

import httpx

from courtbook import config

logger = logging.getLogger(__name__)

# module courtbook.orders.gateway
class GatewayError(Exception):
    """Passerelle injoignable, refus explicite ou réponse inexploitable."""


class PaymentGateway:
    key_id: str = ""

    def create_order(
        self,
        amount_minor_units: int,
        currency: str,
        receipt_key: str,
        metadata: Dict[str, Any],
    ) -> Dict[str, Any]:
        """Retour attendu: {"external_order_id": "...", "amount": <int>, "currency": "..."}"""
        raise NotImplementedError


class RazorpayGateway(PaymentGateway):
    def __init__(
        self,
        key_id: str,
        key_secret: str,
        api_url: str = "https://api.razorpay.com/v1",
        timeout: float = 10.0,
        max_retries: int = 1,
    ):
        self.key_id = key_id
        self._key_secret = key_secret
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.max_retries = max(0, min(max_retries, 1))

    def create_order(self, amount_minor_units, currency, receipt_key, metadata):
        payload = {
            "amount": int(amount_minor_units),
            "currency": currency,
            # Razorpay limite le reçu à 40 caractères
            "receipt": str(receipt_key)[:40],
            "payment_capture": 1,
            "notes": {str(k): str(v)[:256] for k, v in (metadata or {}).items()},
        }
        last_error: Optional[str] = None
        for attempt in range(1 + self.max_retries):
            try:
                resp = httpx.post(
                    f"{self.api_url}/orders",
                    json=payload,
                    auth=(self.key_id, self._key_secret),
                    timeout=self.timeout,
                )
            except httpx.HTTPError as e:
                last_error = f"{type(e).__name__}: {e}"
                logger.warning("razorpay.create_order network error attempt=%s receipt=%s error=%s", attempt + 1, receipt_key, last_error)
                continue

            if resp.status_code >= 500:
                last_error = f"HTTP {resp.status_code}"
                logger.warning("razorpay.create_order upstream error attempt=%s receipt=%s status=%s", attempt + 1, receipt_key, resp.status_code)
                continue
            if resp.status_code >= 400:
                logger.error("razorpay.create_order rejected receipt=%s status=%s body=%s", receipt_key, resp.status_code, resp.text[:500])
                raise GatewayError(f"Commande refusée par la passerelle (HTTP {resp.status_code})")

            try:
                data = resp.json()
            except ValueError:
                raise GatewayError("Réponse passerelle illisible")
            order_id = (data or {}).get("id")
            if not order_id:
                raise GatewayError("Réponse passerelle sans identifiant d'order")
            return {
                "external_order_id": str(order_id),
                "amount": int(data.get("amount") or amount_minor_units),
                "currency": data.get("currency") or currency,
            }

        raise GatewayError(f"Passerelle injoignable ({last_error})")


_gateway: Optional[PaymentGateway] = None

def get_gateway() -> PaymentGateway:
    """
    Retourne la passerelle configurée (singleton, comme les clients Supabase).
    - Soulève GatewayError si les clés Razorpay sont absentes.
    """
    global _gateway
    if _gateway is None:
        if not config.RAZORPAY_KEY_ID or not config.RAZORPAY_KEY_SECRET:
            raise GatewayError("RAZORPAY_KEY_ID / RAZORPAY_KEY_SECRET manquants")
        _gateway = RazorpayGateway(
            key_id=config.RAZORPAY_KEY_ID,
            key_secret=config.RAZORPAY_KEY_SECRET,
            api_url=config.RAZORPAY_API_URL,
            timeout=config.GATEWAY_TIMEOUT_SECONDS,
            max_retries=config.GATEWAY_MAX_RETRIES,
        )
    return _gateway
