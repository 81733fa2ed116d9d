from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field

# Corps de requête permissifs: les règles métier (champs requis, durée, créneaux passés)
# sont vérifiées par le service pour renvoyer des raisons stables (400), pas un 422 générique.

class SlotIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)
    date_key: str = Field(default="", alias="dateKey")
    start: Optional[int] = None

class OrderRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)
    name: str = ""
    phone: str = ""
    email: Optional[str] = None
    notes: Optional[str] = None
    sport: str = ""
    slot_minutes: Optional[int] = Field(default=None, alias="slotMinutes")
    slots: List[SlotIn] = Field(default_factory=list)

class RetryOrderRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)
    reservation_ids: List[str] = Field(default_factory=list, alias="reservationIds")

@dataclass
class OrderHandle:
    """Order passerelle rattaché à un checkout (éphémère, non persisté en tant que tel)."""
    order_id: str
    amount: int
    currency: str
    gateway_key_id: str
    reservation_ids: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "orderId": self.order_id,
            "amount": self.amount,
            "currency": self.currency,
            "gatewayKeyId": self.gateway_key_id,
            "reservationIds": list(self.reservation_ids),
        }
