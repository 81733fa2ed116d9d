"""Couche service de la création de commande.
Rôles:
- Valider la demande (client, sport, durée de session, créneaux dans la fenêtre et non passés).
- Tenir les créneaux de manière atomique (repository.reserve_batch).
- Calculer le montant et créer l'order côté passerelle (reçu = id de la première réservation).
- En cas d'échec passerelle: les réservations restent PENDING; retry_order permet de recréer
  l'order, sinon le balayage TTL libère les créneaux.
"""
from datetime import datetime
from typing import List, Optional, Sequence
import logging

from courtbook import config
from courtbook.errors import ConflictError, GatewayFailure, OrderAlreadyAttached, ReservationExpired, SlotUnavailable, UnknownReservation, ValidationError
from courtbook.reservations import repository
from courtbook.reservations.models import Customer, PaymentStatus, Reservation, ReservationStatus, Sport
from courtbook.reservations.service import court_now
from courtbook.slots import TimeSlot, is_past, parse_date_key
from . import pricing
from .gateway import GatewayError, get_gateway
from .models import OrderHandle, OrderRequest

logger = logging.getLogger(__name__)

def _validated_slots(request: OrderRequest, now: datetime) -> List[TimeSlot]:
    """Construit les TimeSlot demandés; soulève ValidationError avec une raison stable."""
    duration = request.slot_minutes if request.slot_minutes is not None else config.SLOT_MINUTES
    if duration != config.SLOT_MINUTES:
        raise ValidationError(
            f"Durée de session invalide (attendu {config.SLOT_MINUTES} minutes)",
            reason="invalid_slot_minutes",
        )

    slots: List[TimeSlot] = []
    for raw in request.slots:
        try:
            day = parse_date_key(raw.date_key)
        except ValueError:
            raise ValidationError("Date de créneau invalide", reason="invalid_slot", slot={"dateKey": raw.date_key, "start": raw.start})
        if raw.start is None:
            raise ValidationError("Heure de début manquante", reason="invalid_slot", slot={"dateKey": raw.date_key, "start": None})
        slot = TimeSlot(day, int(raw.start), duration)
        if not slot.fits_window(config.OPENING_MINUTE, config.CLOSING_MINUTE):
            raise ValidationError("Créneau hors des horaires d'ouverture", reason="outside_opening_hours", slot=slot.to_dict())
        if day < now.date():
            raise ValidationError("Date déjà passée", reason="date_in_past", slot=slot.to_dict())
        if is_past(slot, now):
            raise ValidationError("Créneau déjà commencé", reason="slot_in_past", slot=slot.to_dict())
        if slot in slots:
            raise ValidationError("Créneau demandé en double", reason="duplicate_slot", slot=slot.to_dict())
        slots.append(slot)
    return slots

def create_order(request: OrderRequest, now: Optional[datetime] = None) -> OrderHandle:
    """Valide, tient les créneaux, calcule le prix puis crée l'order passerelle.
    - ValidationError (400): champs manquants, sport inconnu, durée/créneau invalide.
    - SlotUnavailable (409): au moins un créneau déjà tenu; rien n'est écrit.
    - GatewayFailure (502): order non créé; les réservations restent PENDING (ids fournis).
    - ReservationExpired / OrderAlreadyAttached (409): les réservations ont expiré ou porté un autre order
      pendant l'appel passerelle; l'order créé n'est pas renvoyé.
    """
    name = (request.name or "").strip()
    phone = (request.phone or "").strip()
    if not name or not phone:
        raise ValidationError("Nom et téléphone requis", reason="missing_customer")
    if not request.slots:
        raise ValidationError("Sélectionnez au moins un créneau", reason="no_slots")
    sport_value = (request.sport or "").strip().lower()
    if sport_value not in config.SPORTS or sport_value not in config.PRICE_PER_MINUTE:
        raise ValidationError("Sport inconnu", reason="invalid_sport")

    slots = _validated_slots(request, now or court_now())
    customer = Customer(
        name=name,
        phone=phone,
        email=(request.email or "").strip() or None,
        notes=(request.notes or "").strip() or None,
    )

    try:
        reservations = repository.reserve_batch(config.COURT_ID, slots, customer, Sport(sport_value))
    except ConflictError as e:
        raise SlotUnavailable(e.message, slots=e.slots)

    return _create_gateway_order(reservations)

def retry_order(reservation_ids: Sequence[str]) -> OrderHandle:
    """Recrée l'order passerelle pour un checkout resté PENDING après un échec passerelle.
    - Toutes les réservations doivent exister, être pending/unpaid, sans order, et du même checkout.
    - ReservationExpired (409) si le balayage TTL est passé entre-temps.
    """
    ids = list(dict.fromkeys(i for i in reservation_ids if i))
    if not ids:
        raise ValidationError("Aucune réservation fournie", reason="no_reservations")

    reservations = repository.get_reservations(ids)
    if len(reservations) != len(ids):
        found = {r.id for r in reservations}
        raise UnknownReservation("Réservation introuvable", reservationIds=[i for i in ids if i not in found])

    if any(r.status == ReservationStatus.EXPIRED for r in reservations):
        raise ReservationExpired("Réservation expirée, veuillez recommencer la sélection", reservationIds=ids)
    if any(r.status != ReservationStatus.PENDING or r.payment_status != PaymentStatus.UNPAID for r in reservations):
        raise ValidationError("Réservation déjà réglée ou annulée", reason="not_pending")
    attached = sorted({r.external_order_id for r in reservations if r.external_order_id})
    if attached:
        raise OrderAlreadyAttached("Une commande de paiement existe déjà pour ces réservations", orderIds=attached)

    first = reservations[0]
    if any(
        r.sport != first.sport
        or r.slot.duration_minutes != first.slot.duration_minutes
        or r.customer.phone != first.customer.phone
        for r in reservations
    ):
        raise ValidationError("Les réservations n'appartiennent pas au même checkout", reason="mixed_checkout")

    return _create_gateway_order(reservations)

def _reject_partial_attach(ids: List[str], external_order_id: str, attached: int) -> None:
    """
    L'order passerelle n'a pas pu être porté par toutes les réservations du checkout
    (balayage TTL pendant l'appel passerelle, ou relance concurrente arrivée la première).
    L'order n'est jamais renvoyé au client: aucune réservation ne pourrait être confirmée par ce paiement.
    """
    if attached:
        repository.detach_external_order(ids, external_order_id)
    logger.warning(
        "orders.create partial attach order_id=%s attached=%s expected=%s (order abandonné)",
        external_order_id, attached, len(ids),
    )
    rows = repository.get_reservations(ids)
    if len(rows) != len(ids) or any(r.status == ReservationStatus.EXPIRED for r in rows):
        raise ReservationExpired("Réservation expirée, veuillez recommencer la sélection", reservationIds=ids)
    others = sorted({r.external_order_id for r in rows if r.external_order_id and r.external_order_id != external_order_id})
    if others:
        raise OrderAlreadyAttached("Une commande de paiement existe déjà pour ces réservations", orderIds=others)
    raise ValidationError("Réservation déjà réglée ou annulée", reason="not_pending")

def _create_gateway_order(reservations: List[Reservation]) -> OrderHandle:
    first = reservations[0]
    ids = [r.id for r in reservations]
    amount = pricing.compute_amount(first.sport.value, first.slot.duration_minutes, len(reservations))
    metadata = {
        "court_id": first.court_id,
        "sport": first.sport.value,
        "reservation_ids": ",".join(ids),
    }

    try:
        gateway = get_gateway()
        order = gateway.create_order(amount, config.CURRENCY, ids[0], metadata)
    except GatewayError as e:
        logger.warning("orders.create gateway failure reservation_ids=%s error=%s", ids, e)
        raise GatewayFailure(
            "Échec de création de la commande de paiement, réessayez",
            reservation_ids=ids,
        )

    external_order_id = order["external_order_id"]
    attached = repository.attach_external_order(ids, external_order_id)
    if attached != len(ids):
        _reject_partial_attach(ids, external_order_id, attached)
    logger.info("orders.create order_id=%s amount=%s reservations=%s", external_order_id, amount, len(ids))
    return OrderHandle(
        order_id=external_order_id,
        amount=amount,
        currency=config.CURRENCY,
        gateway_key_id=getattr(gateway, "key_id", "") or config.RAZORPAY_KEY_ID,
        reservation_ids=ids,
    )
