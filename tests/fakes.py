"""
Doubles de test pour Supabase (table 'reservations') et la passerelle de paiement.

FakeSupabase reproduit ce dont le repository dépend côté base:
- insert en lot transactionnel (tout ou rien)
- contrainte d'exclusion: pas de chevauchement entre lignes pending/confirmed d'un même terrain et jour (23P01)
- filtres eq / in_ / is_ / lt, order, limit, et update renvoyant les lignes modifiées
"""
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from postgrest.exceptions import APIError

from courtbook.orders.gateway import GatewayError, PaymentGateway

ACTIVE = ("pending", "confirmed")


def _as_dt(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


def _rows_overlap(a: Dict[str, Any], b: Dict[str, Any]) -> bool:
    if a["court_id"] != b["court_id"] or a["date_key"] != b["date_key"]:
        return False
    a_end = a["start_minute"] + a["duration_minutes"]
    b_end = b["start_minute"] + b["duration_minutes"]
    return a["start_minute"] < b_end and b["start_minute"] < a_end


class FakeResponse:
    def __init__(self, data: List[Dict[str, Any]]):
        self.data = data


class FakeQuery:
    def __init__(self, db: "FakeSupabase", op: str, values: Any = None):
        self.db = db
        self.op = op
        self.values = values
        self.filters: List[Callable[[Dict[str, Any]], bool]] = []
        self._order: Optional[str] = None
        self._limit: Optional[int] = None

    def eq(self, col, value):
        self.filters.append(lambda r: str(r.get(col)) == str(value))
        return self

    def in_(self, col, values):
        allowed = {str(v) for v in values}
        self.filters.append(lambda r: str(r.get(col)) in allowed)
        return self

    def is_(self, col, value):
        if str(value).lower() == "null":
            self.filters.append(lambda r: r.get(col) is None)
        else:
            self.filters.append(lambda r: r.get(col) == value)
        return self

    def lt(self, col, value):
        bound = _as_dt(value)
        self.filters.append(lambda r: r.get(col) is not None and _as_dt(r.get(col)) < bound)
        return self

    def order(self, col, desc=False):
        self._order = col
        return self

    def limit(self, n):
        self._limit = n
        return self

    def _matching(self) -> List[Dict[str, Any]]:
        return [r for r in self.db.rows if all(f(r) for f in self.filters)]

    def execute(self) -> FakeResponse:
        self.db.calls.append(self.op)
        if self.db.fail_next is not None:
            err, self.db.fail_next = self.db.fail_next, None
            raise err
        if self.op == "insert":
            return FakeResponse(self.db._insert(self.values))
        if self.op == "update":
            updated = []
            for row in self._matching():
                row.update(self.values)
                updated.append(dict(row))
            return FakeResponse(updated)
        rows = [dict(r) for r in self._matching()]
        if self._order:
            rows.sort(key=lambda r: r.get(self._order))
        if self._limit is not None:
            rows = rows[: self._limit]
        return FakeResponse(rows)


class FakeTable:
    def __init__(self, db: "FakeSupabase"):
        self.db = db

    def select(self, *columns):
        return FakeQuery(self.db, "select")

    def insert(self, rows):
        return FakeQuery(self.db, "insert", rows if isinstance(rows, list) else [rows])

    def update(self, values):
        return FakeQuery(self.db, "update", dict(values))


class FakeSupabase:
    """
    Client Supabase en mémoire.
    - now: horodatage utilisé pour created_at (modifiable pour simuler l'ancienneté)
    - fail_insert_at: numéro (1-based) de la ligne dont l'insertion échoue, le lot entier est annulé
    - fail_next: exception levée par le prochain execute()
    """

    def __init__(self):
        self.rows: List[Dict[str, Any]] = []
        self.now = datetime.now(timezone.utc)
        self.fail_insert_at: Optional[int] = None
        self.fail_next: Optional[Exception] = None
        self.calls: List[str] = []

    def table(self, name: str) -> FakeTable:
        assert name == "reservations", name
        return FakeTable(self)

    def _insert(self, rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        staged: List[Dict[str, Any]] = []
        for index, raw in enumerate(rows, start=1):
            if self.fail_insert_at == index:
                raise APIError({"code": "XX000", "message": "simulated storage failure", "details": None, "hint": None})
            row = dict(raw)
            row.setdefault("external_order_id", None)
            row.setdefault("external_payment_id", None)
            row["id"] = str(uuid.uuid4())
            row["created_at"] = self.now.isoformat()
            row["updated_at"] = self.now.isoformat()
            if row.get("status") in ACTIVE:
                for other in self.rows + staged:
                    if other.get("status") in ACTIVE and _rows_overlap(row, other):
                        raise APIError({
                            "code": "23P01",
                            "message": 'conflicting key value violates exclusion constraint "reservations_no_overlap"',
                            "details": None,
                            "hint": None,
                        })
            staged.append(row)
        # Commit: tout le lot ou rien
        self.rows.extend(staged)
        return [dict(r) for r in staged]

    def by_status(self, status: str) -> List[Dict[str, Any]]:
        return [r for r in self.rows if r.get("status") == status]


class FakeGateway(PaymentGateway):
    """Passerelle simulée: enregistre les appels, peut échouer à la demande."""

    key_id = "rzp_test_key"

    def __init__(self):
        self.calls: List[Dict[str, Any]] = []
        self.fail = False
        self.during_call: Optional[Callable[[], Any]] = None

    def create_order(self, amount_minor_units, currency, receipt_key, metadata):
        self.calls.append({
            "amount": amount_minor_units,
            "currency": currency,
            "receipt": receipt_key,
            "metadata": dict(metadata),
        })
        if self.during_call is not None:
            # Effet concurrent pendant l'appel passerelle (balayage TTL, autre relance...)
            self.during_call()
        if self.fail:
            raise GatewayError("Passerelle injoignable (ConnectTimeout)")
        return {
            "external_order_id": f"order_test_{len(self.calls)}",
            "amount": amount_minor_units,
            "currency": currency,
        }
