# module courtbook.orders.views

"""Endpoints de l'user story Réservation/Commande.
- POST /api/v1/orders: tient les créneaux et crée l'order de paiement (rate-limité).
- POST /api/v1/orders/retry: recrée l'order pour des réservations restées PENDING après un échec passerelle.
Erreurs: les erreurs métier (CourtBookError) sont rendues par le handler global
(400 validation, 409 conflit, 502 passerelle); toute autre erreur => 500 journalisée.
"""
from fastapi import APIRouter, Depends, HTTPException
import logging

from courtbook.errors import CourtBookError
from courtbook.utils.rate_limit import optional_rate_limit
from courtbook.orders import service as orders_service
from courtbook.orders.models import OrderRequest, RetryOrderRequest

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/orders", tags=["Orders API"])


@router.post("", dependencies=[Depends(optional_rate_limit(times=10, seconds=60))])
def api_create_order(req: OrderRequest):
    """Crée une commande pour un ou plusieurs créneaux.
    Entrée: {name, phone, email?, notes?, sport, slotMinutes, slots: [{dateKey, start}]}
    Retour: {orderId, amount, currency, gatewayKeyId, reservationIds}
    """
    try:
        handle = orders_service.create_order(req)
        return handle.to_dict()
    except CourtBookError:
        raise
    except Exception:
        logger.exception("Erreur api_create_order")
        raise HTTPException(status_code=500, detail="Erreur serveur")


@router.post("/retry", dependencies=[Depends(optional_rate_limit(times=10, seconds=60))])
def api_retry_order(req: RetryOrderRequest):
    """Recrée l'order passerelle pour des réservations déjà tenues.
    Entrée: {reservationIds: [...]}; même format de retour que la création.
    """
    try:
        handle = orders_service.retry_order(req.reservation_ids)
        return handle.to_dict()
    except CourtBookError:
        raise
    except Exception:
        logger.exception("Erreur api_retry_order")
        raise HTTPException(status_code=500, detail="Erreur serveur")
