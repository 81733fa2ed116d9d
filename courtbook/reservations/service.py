"""
Cas d'usage 'reservations': disponibilités d'une journée et balayage TTL.
- get_availability: dérive l'état des créneaux (free/held/past) depuis la base, jamais depuis un cache client.
- run_expiry_sweep: expire les réservations pending/unpaid plus vieilles que RESERVATION_TTL_MINUTES.
"""
from datetime import date, datetime, timedelta
from typing import Any, Dict, List, Optional
from zoneinfo import ZoneInfo
import logging

from courtbook import config
from courtbook.slots import TimeSlot, enumerate_slots, is_past, minutes_label, overlaps
from . import repository

logger = logging.getLogger(__name__)

def court_now() -> datetime:
    """Heure courante dans le fuseau du terrain (base de is_past et du rejet des dates passées)."""
    return datetime.now(ZoneInfo(config.COURT_TIMEZONE))

def get_availability(day: date, now: Optional[datetime] = None) -> Dict[str, Any]:
    """
    Liste les créneaux d'une journée avec leur statut:
    - past: déjà commencé (jour courant) ou date antérieure
    - held: chevauche une réservation pending/confirmed
    - free: réservable
    """
    now = now or court_now()
    active = repository.list_active_for_date(config.COURT_ID, day)
    slots: List[Dict[str, Any]] = []
    for start in enumerate_slots(config.SLOT_MINUTES, config.OPENING_MINUTE, config.CLOSING_MINUTE):
        slot = TimeSlot(day, start, config.SLOT_MINUTES)
        if day < now.date() or is_past(slot, now):
            status = "past"
        elif any(overlaps(slot, r.slot) for r in active):
            status = "held"
        else:
            status = "free"
        slots.append({"start": start, "label": minutes_label(start), "status": status})
    return {"date": day.isoformat(), "slotMinutes": config.SLOT_MINUTES, "slots": slots}

def run_expiry_sweep(now: Optional[datetime] = None) -> int:
    """Expire les réservations en attente au-delà du TTL configuré; retourne le nombre de lignes expirées."""
    ttl = timedelta(minutes=config.RESERVATION_TTL_MINUTES)
    return repository.expire_pending_older_than(ttl, now=now)
