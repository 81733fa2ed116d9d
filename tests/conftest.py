import os

# Environnement de test figé avant tout import de courtbook (config lu à l'import)
os.environ["DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS"] = "1"
os.environ["RESERVATION_SWEEP_INTERVAL_SECONDS"] = "0"
os.environ["SUPABASE_URL"] = "http://localhost:54321"
os.environ["SUPABASE_SERVICE_KEY"] = "service-test-key"
os.environ["RAZORPAY_KEY_ID"] = "rzp_test_key"
os.environ["RAZORPAY_KEY_SECRET"] = "test_key_secret"
os.environ["RAZORPAY_WEBHOOK_SECRET"] = "test_webhook_secret"
os.environ["ADMIN_API_KEY"] = "test-admin-key"
os.environ["COURT_TIMEZONE"] = "Asia/Kolkata"
os.environ["CORS_ORIGINS"] = "http://localhost:5173"
os.environ["ALLOWED_HOSTS"] = "localhost,127.0.0.1,testserver"
os.environ.pop("LOCAL_RATE_LIMIT_FALLBACK", None)

import hashlib
import hmac
import json
from datetime import datetime
from typing import Generator
from zoneinfo import ZoneInfo

import pytest
from fastapi.testclient import TestClient

from courtbook.app_setup import create_app
from fakes import FakeGateway, FakeSupabase

# Veille de la date des scénarios (2024-06-01), midi heure du terrain
FROZEN_NOW = datetime(2024, 5, 31, 12, 0, tzinfo=ZoneInfo("Asia/Kolkata"))

# Marquage automatique selon le dossier
def pytest_collection_modifyitems(config, items):
    for item in items:
        nodeid = item.nodeid.replace("\\", "/")
        if "/tests/unit/" in nodeid or nodeid.startswith("tests/unit/") or nodeid.startswith("unit/"):
            item.add_marker(pytest.mark.unit)
        elif "/tests/integration/" in nodeid or nodeid.startswith("tests/integration/") or nodeid.startswith("integration/"):
            item.add_marker(pytest.mark.integration)

@pytest.fixture(scope="session")
def app():
    return create_app()

@pytest.fixture()
def client(app) -> Generator[TestClient, None, None]:
    with TestClient(app) as c:
        yield c

@pytest.fixture()
def admin_headers():
    return {"Authorization": "Bearer test-admin-key"}

# Base simulée pour tous les tests: aucun accès réseau à Supabase
@pytest.fixture(autouse=True)
def fake_db(monkeypatch) -> FakeSupabase:
    fake = FakeSupabase()
    monkeypatch.setattr("courtbook.infra.supabase_client.get_service_supabase", lambda: fake)
    return fake

# Passerelle simulée: aucun appel HTTP vers Razorpay hors des tests dédiés à l'adaptateur
@pytest.fixture(autouse=True)
def gateway(monkeypatch) -> FakeGateway:
    fake = FakeGateway()
    monkeypatch.setattr("courtbook.orders.service.get_gateway", lambda: fake)
    return fake

# Horloge du terrain figée
@pytest.fixture(autouse=True)
def frozen_now(monkeypatch) -> datetime:
    monkeypatch.setattr("courtbook.reservations.service.court_now", lambda: FROZEN_NOW)
    monkeypatch.setattr("courtbook.orders.service.court_now", lambda: FROZEN_NOW)
    return FROZEN_NOW

def sign(secret: str, message: bytes) -> str:
    return hmac.new(secret.encode("utf-8"), message, hashlib.sha256).hexdigest()

@pytest.fixture()
def webhook_body():
    """Construit un corps webhook Razorpay (bytes) et sa signature."""
    def _build(event: str, order_id: str, payment_id: str = "pay_test_1", secret: str = "test_webhook_secret"):
        payload = {"payment": {"entity": {"id": payment_id, "order_id": order_id, "status": "captured"}}}
        if event == "order.paid":
            payload["order"] = {"entity": {"id": order_id, "status": "paid"}}
        body = json.dumps({"entity": "event", "event": event, "payload": payload}).encode("utf-8")
        return body, sign(secret, body)
    return _build

@pytest.fixture()
def order_payload():
    def _build(starts=(540, 600), date_key="2024-06-01", sport="padel", **overrides):
        payload = {
            "name": "Asha Rao",
            "phone": "+91 98450 00000",
            "email": "asha@example.com",
            "sport": sport,
            "slotMinutes": 60,
            "slots": [{"dateKey": date_key, "start": s} for s in starts],
        }
        payload.update(overrides)
        return payload
    return _build

@pytest.fixture()
def signer():
    return sign
