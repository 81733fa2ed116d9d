# module courtbook.reservations.views
"""Endpoints de consultation et de maintenance des réservations.
- /availability: état des créneaux d'une journée (free/held/past), source de vérité pour griser l'UI.
- /expire: déclenche manuellement le balayage TTL (jeton admin).
"""
from fastapi import APIRouter, Depends, HTTPException
import logging

from courtbook.slots import parse_date_key
from courtbook.utils.security import require_admin
from courtbook.reservations import service as reservations_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/reservations", tags=["Reservations API"])


@router.get("/availability")
def availability(date: str):
    """Disponibilités d'une date (YYYY-MM-DD).
    - 400 si la date est mal formée.
    - Les erreurs de stockage remontent au handler global (500 structuré).
    """
    try:
        day = parse_date_key(date)
    except ValueError:
        raise HTTPException(status_code=400, detail="Date invalide (format attendu YYYY-MM-DD)")
    return reservations_service.get_availability(day)


@router.post("/expire", dependencies=[Depends(require_admin)])
def expire_pending():
    """Balayage TTL manuel; retourne {"expired": <int>}."""
    expired = reservations_service.run_expiry_sweep()
    logger.info("reservations.expire manual expired=%s", expired)
    return {"expired": expired}
