"""
Tarification pure (pas de passerelle, pas de DB).
"""
from typing import Dict, Optional

from courtbook import config

def price_per_minute(sport: str, rates: Optional[Dict[str, int]] = None) -> int:
    """
    Tarif par minute (unités mineures) pour un sport.
    - Soulève KeyError si le sport n'a pas de tarif configuré.
    """
    table = rates if rates is not None else config.PRICE_PER_MINUTE
    return int(table[sport])

def compute_amount(
    sport: str,
    duration_minutes: int,
    slot_count: int,
    rates: Optional[Dict[str, int]] = None,
    minimum_charge: Optional[int] = None,
) -> int:
    """
    Montant d'un checkout en unités mineures:
    max(minimum_charge, tarif[sport] * durée * nombre de créneaux).
    """
    floor = config.MINIMUM_CHARGE if minimum_charge is None else minimum_charge
    return max(int(floor), price_per_minute(sport, rates) * int(duration_minutes) * int(slot_count))
