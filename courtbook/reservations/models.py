# module courtbook.reservations.models
"""Types de la table 'reservations' et conversion ligne <-> objet.
- ReservationStatus / PaymentStatus: valeurs stockées en minuscules (CHECK SQL).
- Customer: coordonnées saisies au checkout.
- Reservation: une ligne = un créneau tenu (pending) ou confirmé.
"""
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from courtbook.slots import TimeSlot, parse_date_key


class ReservationStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    EXPIRED = "expired"
    CANCELLED = "cancelled"


class PaymentStatus(str, Enum):
    UNPAID = "unpaid"
    PAID = "paid"


class Sport(str, Enum):
    PADEL = "padel"
    PICKLEBALL = "pickleball"


# Statuts qui tiennent un créneau (pris en compte par la contrainte d'exclusion)
ACTIVE_STATUSES = (ReservationStatus.PENDING.value, ReservationStatus.CONFIRMED.value)


@dataclass(frozen=True)
class Customer:
    name: str
    phone: str
    email: Optional[str] = None
    notes: Optional[str] = None


@dataclass
class Reservation:
    id: str
    court_id: str
    slot: TimeSlot
    customer: Customer
    sport: Sport
    status: ReservationStatus = ReservationStatus.PENDING
    payment_status: PaymentStatus = PaymentStatus.UNPAID
    external_order_id: Optional[str] = None
    external_payment_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Reservation":
        return cls(
            id=str(row.get("id") or ""),
            court_id=str(row.get("court_id") or ""),
            slot=TimeSlot(
                date_key=parse_date_key(row.get("date_key")),
                start_minute=int(row.get("start_minute") or 0),
                duration_minutes=int(row.get("duration_minutes") or 0),
            ),
            customer=Customer(
                name=row.get("name") or "",
                phone=row.get("phone") or "",
                email=row.get("email"),
                notes=row.get("notes"),
            ),
            sport=Sport(row.get("sport") or Sport.PADEL.value),
            status=ReservationStatus(row.get("status") or ReservationStatus.PENDING.value),
            payment_status=PaymentStatus(row.get("payment_status") or PaymentStatus.UNPAID.value),
            external_order_id=row.get("external_order_id"),
            external_payment_id=row.get("external_payment_id"),
            created_at=_parse_ts(row.get("created_at")),
            updated_at=_parse_ts(row.get("updated_at")),
        )


def new_row(court_id: str, slot: TimeSlot, customer: Customer, sport: Sport) -> Dict[str, Any]:
    """Ligne à insérer: toujours pending/unpaid, l'id et les horodatages sont générés par la base."""
    return {
        "court_id": court_id,
        "date_key": slot.date_key.isoformat(),
        "start_minute": slot.start_minute,
        "duration_minutes": slot.duration_minutes,
        "sport": sport.value,
        "name": customer.name,
        "phone": customer.phone,
        "email": customer.email,
        "notes": customer.notes,
        "status": ReservationStatus.PENDING.value,
        "payment_status": PaymentStatus.UNPAID.value,
    }


def _parse_ts(value: Any) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    try:
        # PostgREST renvoie de l'ISO 8601, parfois suffixé par 'Z'
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return None
