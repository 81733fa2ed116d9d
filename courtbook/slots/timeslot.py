"""
Logique créneaux pure (pas de DB, pas de passerelle).

Un créneau est un intervalle semi-ouvert [start, start + duration) en minutes
depuis minuit, sur une date donnée. Deux créneaux se chevauchent s'ils sont
le même jour et que leurs intervalles s'intersectent: un créneau qui finit
exactement quand l'autre commence ne chevauche pas.
"""
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, List, Union

MINUTES_PER_DAY = 24 * 60


@dataclass(frozen=True, order=True)
class TimeSlot:
    date_key: date
    start_minute: int
    duration_minutes: int

    @property
    def end_minute(self) -> int:
        return self.start_minute + self.duration_minutes

    def fits_window(self, opening_minute: int, closing_minute: int) -> bool:
        """Vrai si le créneau tient dans la fenêtre d'ouverture (jamais au-delà de minuit)."""
        if self.duration_minutes <= 0:
            return False
        if not (0 <= self.start_minute < MINUTES_PER_DAY):
            return False
        return opening_minute <= self.start_minute and self.end_minute <= min(closing_minute, MINUTES_PER_DAY)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "dateKey": self.date_key.isoformat(),
            "start": self.start_minute,
            "minutes": self.duration_minutes,
            "label": minutes_label(self.start_minute),
        }


def parse_date_key(value: Union[str, date]) -> date:
    """
    Convertit 'YYYY-MM-DD' en date.
    - Accepte une date déjà construite.
    - Soulève ValueError si le format est invalide.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value or "").strip())


def overlaps(a: TimeSlot, b: TimeSlot) -> bool:
    if a.date_key != b.date_key:
        return False
    return a.start_minute < b.end_minute and b.start_minute < a.end_minute


def is_past(slot: TimeSlot, now: datetime) -> bool:
    """
    Vrai uniquement pour un créneau du jour courant dont le début est déjà atteint.
    Les autres dates ne sont jamais « passées » ici; le rejet des dates antérieures
    relève de la validation de commande.
    """
    if slot.date_key != now.date():
        return False
    return slot.start_minute <= now.hour * 60 + now.minute


def enumerate_slots(duration_minutes: int, opening_minute: int, closing_minute: int) -> List[int]:
    """Débuts de créneaux candidats, par pas de duration_minutes, tant que start + duration <= closing."""
    if duration_minutes <= 0:
        return []
    starts: List[int] = []
    start = opening_minute
    while start + duration_minutes <= closing_minute:
        starts.append(start)
        start += duration_minutes
    return starts


def minutes_label(minute: int) -> str:
    """Libellé 12h ('9:00 AM', '12:30 PM') pour une minute depuis minuit."""
    hours, mins = divmod(minute, 60)
    suffix = "PM" if hours % 24 >= 12 else "AM"
    h12 = hours % 12 or 12
    return f"{h12}:{mins:02d} {suffix}"
