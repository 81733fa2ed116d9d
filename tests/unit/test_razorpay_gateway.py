import httpx
import pytest

from courtbook.orders import gateway as gateway_mod
from courtbook.orders.gateway import GatewayError, RazorpayGateway

URL = "https://api.razorpay.test/v1"

def _response(status, payload=None):
    return httpx.Response(status, json=payload or {}, request=httpx.Request("POST", f"{URL}/orders"))

def _gw():
    return RazorpayGateway("rzp_test_key", "secret", api_url=URL, timeout=2.0, max_retries=1)

def test_create_order_payload_and_result(monkeypatch):
    seen = []

    def _post(url, json=None, auth=None, timeout=None):
        seen.append({"url": url, "json": json, "auth": auth, "timeout": timeout})
        return _response(200, {"id": "order_abc", "amount": json["amount"], "currency": "INR"})

    monkeypatch.setattr(gateway_mod.httpx, "post", _post)
    order = _gw().create_order(84000, "INR", "r" * 64, {"sport": "padel"})
    assert order == {"external_order_id": "order_abc", "amount": 84000, "currency": "INR"}
    call = seen[0]
    assert call["url"] == f"{URL}/orders"
    assert call["auth"] == ("rzp_test_key", "secret")
    assert call["timeout"] == 2.0
    assert call["json"]["receipt"] == "r" * 40
    assert call["json"]["payment_capture"] == 1
    assert call["json"]["notes"] == {"sport": "padel"}

def test_retries_once_on_server_error(monkeypatch):
    responses = [_response(503), _response(200, {"id": "order_2", "amount": 1000, "currency": "INR"})]
    calls = []

    def _post(url, **kwargs):
        calls.append(url)
        return responses.pop(0)

    monkeypatch.setattr(gateway_mod.httpx, "post", _post)
    assert _gw().create_order(1000, "INR", "rid", {})["external_order_id"] == "order_2"
    assert len(calls) == 2

def test_network_errors_give_up_after_one_retry(monkeypatch):
    calls = []

    def _post(url, **kwargs):
        calls.append(url)
        raise httpx.ConnectTimeout("timed out")

    monkeypatch.setattr(gateway_mod.httpx, "post", _post)
    with pytest.raises(GatewayError):
        _gw().create_order(1000, "INR", "rid", {})
    assert len(calls) == 2

def test_client_error_is_not_retried(monkeypatch):
    calls = []

    def _post(url, **kwargs):
        calls.append(url)
        return _response(400, {"error": {"description": "amount too small"}})

    monkeypatch.setattr(gateway_mod.httpx, "post", _post)
    with pytest.raises(GatewayError):
        _gw().create_order(10, "INR", "rid", {})
    assert len(calls) == 1

def test_response_without_id_is_an_error(monkeypatch):
    monkeypatch.setattr(gateway_mod.httpx, "post", lambda url, **kwargs: _response(200, {"status": "created"}))
    with pytest.raises(GatewayError):
        _gw().create_order(1000, "INR", "rid", {})

def test_get_gateway_requires_keys(monkeypatch):
    monkeypatch.setattr(gateway_mod, "_gateway", None)
    monkeypatch.setattr(gateway_mod.config, "RAZORPAY_KEY_SECRET", "")
    with pytest.raises(GatewayError):
        gateway_mod.get_gateway()
