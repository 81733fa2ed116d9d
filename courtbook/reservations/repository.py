"""
Accès aux données pour la feature 'reservations' (table 'reservations').

Toute la coordination entre requêtes concurrentes passe par la base:
- reserve_batch: un seul insert PostgREST (une transaction) pour tout le panier;
  la contrainte d'exclusion GiST rejette le lot entier si un créneau chevauche
  une réservation pending/confirmed du même terrain.
- mark_confirmed / expire_pending_older_than: UPDATE conditionnels sur status='pending',
  le premier qui commit gagne, l'autre ne modifie aucune ligne.
"""
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterable, List, Optional, Sequence
import logging

from postgrest.exceptions import APIError

# Import du module (et non des fonctions) pour rester patchable en tests
import courtbook.infra.supabase_client as supabase_client
from courtbook.errors import ConflictError, StorageFailure
from courtbook.slots import TimeSlot, overlaps
from .models import (
    ACTIVE_STATUSES,
    Customer,
    PaymentStatus,
    Reservation,
    ReservationStatus,
    Sport,
    new_row,
)

logger = logging.getLogger(__name__)

TABLE = "reservations"
# 23P01: exclusion_violation (chevauchement), 23505: unique_violation (même créneau exact)
CONFLICT_CODES = {"23P01", "23505"}


def _table():
    return supabase_client.get_service_supabase().table(TABLE)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _api_error_code(e: APIError) -> Optional[str]:
    code = getattr(e, "code", None)
    if not code and e.args and isinstance(e.args[0], dict):
        code = e.args[0].get("code")
    return str(code) if code else None


def _overlapping_pairs(slots: Sequence[TimeSlot]) -> List[TimeSlot]:
    """Créneaux du même lot qui se chevauchent entre eux (rejetés avant toute écriture)."""
    clashing: List[TimeSlot] = []
    for i, a in enumerate(slots):
        for b in slots[i + 1:]:
            if overlaps(a, b):
                for s in (a, b):
                    if s not in clashing:
                        clashing.append(s)
    return clashing


def reserve_batch(court_id: str, slots: Sequence[TimeSlot], customer: Customer, sport: Sport) -> List[Reservation]:
    """
    Tient tous les créneaux demandés, ou aucun.
    - Un seul insert (bulk) => une transaction côté PostgREST: pas d'insertion partielle possible.
    - Conflit (23P01/23505) => ConflictError nommant les créneaux en cause.
    - Toute autre erreur => StorageFailure (rien n'a été écrit).
    Retour: les réservations créées (pending/unpaid), dans l'ordre des créneaux.
    """
    slots = list(slots)
    clashing = _overlapping_pairs(slots)
    if clashing:
        raise ConflictError(
            "Créneaux en double ou qui se chevauchent dans la demande",
            slots=[s.to_dict() for s in clashing],
        )

    rows = [new_row(court_id, s, customer, sport) for s in slots]
    try:
        res = _table().insert(rows).execute()
    except APIError as e:
        code = _api_error_code(e)
        if code in CONFLICT_CODES:
            taken = find_conflicts(court_id, slots)
            logger.info("reservations.reserve_batch conflict court_id=%s slots=%s", court_id, [s.to_dict() for s in taken])
            raise ConflictError(
                "Créneau indisponible, veuillez choisir un autre horaire",
                slots=[s.to_dict() for s in taken],
            )
        logger.exception("reservations.reserve_batch failed court_id=%s code=%s", court_id, code)
        raise StorageFailure("Échec d'enregistrement des réservations")
    except Exception:
        logger.exception("reservations.reserve_batch failed court_id=%s", court_id)
        raise StorageFailure("Échec d'enregistrement des réservations")

    data = res.data or []
    if len(data) != len(rows):
        logger.error("reservations.reserve_batch unexpected row count expected=%s got=%s", len(rows), len(data))
        raise StorageFailure("Réponse de stockage incohérente")
    created = [Reservation.from_row(r) for r in data]
    logger.info("reservations.reserve_batch held=%s court_id=%s ids=%s", len(created), court_id, [r.id for r in created])
    return created


def list_active_for_date(court_id: str, date_key) -> List[Reservation]:
    """
    Réservations pending/confirmed d'un terrain pour une date.
    - Lecture seule: sert à la vue disponibilités et à nommer les conflits.
    """
    try:
        res = (
            _table()
            .select("*")
            .eq("court_id", court_id)
            .eq("date_key", date_key.isoformat())
            .in_("status", list(ACTIVE_STATUSES))
            .order("start_minute")
            .execute()
        )
    except Exception:
        logger.exception("reservations.list_active_for_date failed court_id=%s date=%s", court_id, date_key)
        raise StorageFailure("Lecture des réservations impossible")
    return [Reservation.from_row(r) for r in (res.data or [])]


def find_conflicts(court_id: str, slots: Iterable[TimeSlot]) -> List[TimeSlot]:
    """
    Créneaux demandés qui chevauchent une réservation active.
    - Si la relecture échoue ou ne trouve rien (réservation expirée entre-temps),
      tous les créneaux demandés sont renvoyés.
    """
    slots = list(slots)
    taken: List[TimeSlot] = []
    try:
        for day in sorted({s.date_key for s in slots}):
            active = list_active_for_date(court_id, day)
            for s in slots:
                if s.date_key == day and any(overlaps(s, r.slot) for r in active):
                    taken.append(s)
    except StorageFailure:
        return slots
    return taken or slots


def attach_external_order(reservation_ids: Sequence[str], external_order_id: str) -> int:
    """Associe l'order passerelle aux réservations encore pending et sans order."""
    if not reservation_ids:
        return 0
    try:
        res = (
            _table()
            .update({"external_order_id": external_order_id, "updated_at": _now().isoformat()})
            .in_("id", list(reservation_ids))
            .eq("status", ReservationStatus.PENDING.value)
            .is_("external_order_id", "null")
            .execute()
        )
    except Exception:
        logger.exception("reservations.attach_external_order failed order_id=%s", external_order_id)
        raise StorageFailure("Association de la commande impossible")
    return len(res.data or [])


def detach_external_order(reservation_ids: Sequence[str], external_order_id: str) -> int:
    """
    Retire un order des réservations encore pending qui le portent (association partielle annulée).
    - Conditionnel sur l'order: n'efface jamais l'order d'un autre checkout.
    """
    if not reservation_ids:
        return 0
    try:
        res = (
            _table()
            .update({"external_order_id": None, "updated_at": _now().isoformat()})
            .in_("id", list(reservation_ids))
            .eq("external_order_id", external_order_id)
            .eq("status", ReservationStatus.PENDING.value)
            .execute()
        )
    except Exception:
        logger.exception("reservations.detach_external_order failed order_id=%s", external_order_id)
        raise StorageFailure("Dissociation de la commande impossible")
    return len(res.data or [])


def mark_confirmed(external_order_id: str, external_payment_id: str) -> int:
    """
    Confirme les réservations d'un order payé. Idempotent:
    - UPDATE conditionnel (order + status='pending'), jamais de lecture-modification-écriture.
    - Un second appel (ou une livraison webhook en double) renvoie 0 sans erreur.
    - Une réservation expirée n'est pas réanimée (0 ligne).
    """
    try:
        res = (
            _table()
            .update({
                "status": ReservationStatus.CONFIRMED.value,
                "payment_status": PaymentStatus.PAID.value,
                "external_payment_id": external_payment_id,
                "updated_at": _now().isoformat(),
            })
            .eq("external_order_id", external_order_id)
            .eq("status", ReservationStatus.PENDING.value)
            .execute()
        )
    except Exception:
        logger.exception("reservations.mark_confirmed failed order_id=%s", external_order_id)
        raise StorageFailure("Mise à jour des réservations impossible")
    updated = len(res.data or [])
    logger.info("reservations.mark_confirmed order_id=%s payment_id=%s updated=%s", external_order_id, external_payment_id, updated)
    return updated


def expire_pending_older_than(ttl: timedelta, now: Optional[datetime] = None) -> int:
    """
    Balayage de maintenance: pending/unpaid créées avant now - ttl => expired.
    Libère les créneaux (la contrainte d'exclusion ignore les lignes expirées).
    """
    cutoff = (now or _now()) - ttl
    try:
        res = (
            _table()
            .update({"status": ReservationStatus.EXPIRED.value, "updated_at": _now().isoformat()})
            .eq("status", ReservationStatus.PENDING.value)
            .eq("payment_status", PaymentStatus.UNPAID.value)
            .lt("created_at", cutoff.isoformat())
            .execute()
        )
    except Exception:
        logger.exception("reservations.expire_pending_older_than failed cutoff=%s", cutoff)
        raise StorageFailure("Balayage des réservations impossible")
    expired = len(res.data or [])
    if expired:
        logger.info("reservations.expire_pending_older_than expired=%s cutoff=%s", expired, cutoff.isoformat())
    return expired


def find_by_order(external_order_id: str) -> List[Reservation]:
    try:
        res = _table().select("*").eq("external_order_id", external_order_id).execute()
    except Exception:
        logger.exception("reservations.find_by_order failed order_id=%s", external_order_id)
        raise StorageFailure("Lecture des réservations impossible")
    return [Reservation.from_row(r) for r in (res.data or [])]


def get_reservations(reservation_ids: Sequence[str]) -> List[Reservation]:
    """Réservations par ids, dans l'ordre demandé (les ids inconnus sont omis)."""
    if not reservation_ids:
        return []
    try:
        res = _table().select("*").in_("id", list(reservation_ids)).execute()
    except Exception:
        logger.exception("reservations.get_reservations failed ids=%s", reservation_ids)
        raise StorageFailure("Lecture des réservations impossible")
    by_id: Dict[str, Any] = {str(r.get("id")): r for r in (res.data or [])}
    return [Reservation.from_row(by_id[i]) for i in reservation_ids if i in by_id]
