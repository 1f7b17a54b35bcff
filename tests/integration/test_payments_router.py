import time
import pytest
import stripe
from unittest.mock import MagicMock
from fastapi.testclient import TestClient

from storefront.app_setup.factory import create_app
from storefront.config import Settings
from storefront.payments import service as payments_service
from storefront.payments.models import PartialFailure

CHECKOUT = "/api/v1/payments/create-checkout"
VERIFY = "/api/v1/payments/verify-payment"


@pytest.fixture
def mock_stripe(monkeypatch):
    """Mock des appels SDK Stripe (création, lecture, recherche client)."""
    create = MagicMock(return_value={"id": "cs_test_123", "url": "https://checkout.stripe.com/c/pay/cs_test_123"})
    retrieve = MagicMock(return_value={
        "id": "cs_test_123",
        "payment_status": "paid",
        "customer_details": {"email": "jiwoo@example.com", "name": "Ji-woo"},
        "amount_total": 239800,
        "currency": "inr",
        "payment_intent": "pi_123",
        "created": 1700000000,
    })
    monkeypatch.setattr(stripe.checkout.Session, "create", create)
    monkeypatch.setattr(stripe.checkout.Session, "retrieve", retrieve)
    monkeypatch.setattr(stripe.Customer, "list", MagicMock(return_value={"data": []}))
    return {"create": create, "retrieve": retrieve}


def _existing_order(supabase_mock, status="pending"):
    chain = supabase_mock.table.return_value.select.return_value.eq.return_value.limit.return_value
    chain.execute.return_value = MagicMock(data=[{"id": "o1", "status": status, "user_id": None, "payment_session_id": "cs_test_123"}])


def test_create_checkout_guest(client: TestClient, mock_stripe, supabase_mock, cart_payload):
    r = client.post(CHECKOUT, json=cart_payload, headers={"Origin": "https://kbeauty.example"})
    assert r.status_code == 200
    assert r.json() == {"url": "https://checkout.stripe.com/c/pay/cs_test_123", "session_id": "cs_test_123"}

    kwargs = mock_stripe["create"].call_args.kwargs
    assert kwargs["success_url"].startswith("https://kbeauty.example/payment-success")
    assert kwargs["line_items"][0]["price_data"]["unit_amount"] == 119900

    inserted = supabase_mock.table.return_value.insert.call_args.args[0]
    assert inserted["status"] == "pending"
    assert inserted["total_amount"] == 2398.0
    assert inserted["payment_session_id"] == "cs_test_123"


def test_create_checkout_price_alias(client: TestClient, mock_stripe):
    r = client.post(CHECKOUT, json={"items": [{"product_id": 7, "name": "Toner", "price": 450, "quantity": 1}]})
    assert r.status_code == 200


def test_create_checkout_empty_cart(client: TestClient, mock_stripe):
    r = client.post(CHECKOUT, json={"items": []})
    assert r.status_code == 400
    assert r.json() == {"error": "No items provided for checkout"}
    mock_stripe["create"].assert_not_called()


def test_create_checkout_malformed_body(client: TestClient, mock_stripe):
    r = client.post(CHECKOUT, json={"items": [{"name": "no id or price"}]})
    assert r.status_code == 400
    assert "error" in r.json()


def test_create_checkout_not_configured(unconfigured_settings, mock_stripe, cart_payload):
    with TestClient(create_app(unconfigured_settings)) as c:
        r = c.post(CHECKOUT, json=cart_payload)
    assert r.status_code == 503
    assert r.json() == {"error": "Payment service unavailable. Please contact support."}


def test_create_checkout_gateway_rejection(client: TestClient, monkeypatch, mock_stripe, cart_payload):
    mock_stripe["create"].side_effect = stripe.InvalidRequestError("Invalid currency: xyz", "currency")
    r = client.post(CHECKOUT, json=cart_payload)
    assert r.status_code == 400
    assert r.json() == {"error": "Invalid currency: xyz"}


def test_create_checkout_gateway_down(client: TestClient, mock_stripe, cart_payload):
    mock_stripe["create"].side_effect = stripe.APIConnectionError("Network error")
    r = client.post(CHECKOUT, json=cart_payload)
    assert r.status_code == 502
    assert "error" in r.json()


def test_create_checkout_order_insert_failure_still_returns_url(client: TestClient, mock_stripe, supabase_mock, cart_payload):
    supabase_mock.table.return_value.insert.return_value.execute.side_effect = Exception("orders table unavailable")
    r = client.post(CHECKOUT, json=cart_payload)
    assert r.status_code == 200
    assert r.json()["url"] == "https://checkout.stripe.com/c/pay/cs_test_123"


def test_create_checkout_timeout(settings, monkeypatch, cart_payload):
    def _slow(body, **kwargs):
        time.sleep(0.5)
        return PartialFailure(url="https://late", session_id="cs_late")
    monkeypatch.setattr(payments_service, "create_checkout_session", _slow)

    fast = Settings(stripe_secret_key="sk_test_123", checkout_timeout=0.05)
    with TestClient(create_app(fast)) as c:
        r = c.post(CHECKOUT, json=cart_payload)
    assert r.status_code == 504
    assert "error" in r.json()


def test_create_checkout_unexpected_error(client: TestClient, monkeypatch, cart_payload):
    def _boom(body, **kwargs):
        raise RuntimeError("unexpected")
    monkeypatch.setattr(payments_service, "create_checkout_session", _boom)
    r = client.post(CHECKOUT, json=cart_payload)
    assert r.status_code == 500
    assert r.json() == {"error": "Payment processing failed"}


def test_create_checkout_forwards_bearer(client: TestClient, monkeypatch, cart_payload):
    seen = {}

    def _capture(body, **kwargs):
        seen.update(kwargs)
        return PartialFailure(url="https://checkout.stripe.com/c/pay/cs_x", session_id="cs_x")
    monkeypatch.setattr(payments_service, "create_checkout_session", _capture)

    r = client.post(CHECKOUT, json=cart_payload, headers={"Authorization": "Bearer jwt-abc"})
    assert r.status_code == 200
    assert seen["access_token"] == "jwt-abc"


def test_verify_payment(client: TestClient, mock_stripe, supabase_mock):
    _existing_order(supabase_mock)
    update_chain = supabase_mock.table.return_value.update.return_value.eq.return_value.in_.return_value
    update_chain.execute.return_value = MagicMock(data=[{"id": "o1", "status": "paid", "user_id": None}])

    r = client.post(VERIFY, json={"session_id": "cs_test_123"})
    assert r.status_code == 200
    body = r.json()
    assert body["session_id"] == "cs_test_123"
    assert body["payment_status"] == "paid"
    assert body["customer_email"] == "jiwoo@example.com"
    assert body["amount_total"] == 239800
    assert body["currency"] == "inr"
    assert body["payment_intent"] == "pi_123"
    assert body["created"] == 1700000000
    assert supabase_mock.table.return_value.update.call_args.args[0]["status"] == "paid"


def test_verify_payment_unpaid(client: TestClient, mock_stripe, supabase_mock):
    _existing_order(supabase_mock)
    mock_stripe["retrieve"].return_value = {"id": "cs_test_123", "payment_status": "unpaid"}
    r = client.post(VERIFY, json={"session_id": "cs_test_123"})
    assert r.status_code == 200
    assert r.json()["payment_status"] == "unpaid"
    assert supabase_mock.table.return_value.update.call_args.args[0]["status"] == "failed"


def test_verify_payment_get_variant(client: TestClient, mock_stripe):
    r = client.get(VERIFY, params={"session_id": "cs_test_123"})
    assert r.status_code == 200
    assert r.json()["payment_status"] == "paid"


@pytest.mark.parametrize("payload", [{}, {"session_id": ""}])
def test_verify_payment_requires_session_id(client: TestClient, mock_stripe, payload):
    r = client.post(VERIFY, json=payload)
    assert r.status_code == 400
    assert r.json() == {"error": "Session ID is required"}
    mock_stripe["retrieve"].assert_not_called()


def test_verify_payment_unknown_session(client: TestClient, mock_stripe):
    mock_stripe["retrieve"].side_effect = stripe.InvalidRequestError("No such checkout.session: cs_nope", "id")
    r = client.post(VERIFY, json={"session_id": "cs_nope"})
    assert r.status_code == 400
    assert "cs_nope" in r.json()["error"]


def test_verify_payment_not_configured(unconfigured_settings):
    with TestClient(create_app(unconfigured_settings)) as c:
        r = c.post(VERIFY, json={"session_id": "cs_test_123"})
    assert r.status_code == 503


@pytest.mark.parametrize("path", [CHECKOUT, VERIFY, "/api/v1/orders"])
def test_preflight(client: TestClient, path):
    r = client.options(path, headers={"Origin": "https://kbeauty.example", "Access-Control-Request-Method": "POST"})
    assert r.status_code == 204
    assert r.content == b""
    assert r.headers["access-control-allow-origin"] == "*"
    assert r.headers["access-control-allow-headers"] == "authorization, x-client-info, apikey, content-type"
    assert r.headers["access-control-allow-methods"] == "GET, POST, OPTIONS"


def test_security_headers(client: TestClient, mock_stripe):
    r = client.get(VERIFY, params={"session_id": "cs_test_123"})
    assert r.headers["x-content-type-options"] == "nosniff"
    assert r.headers["x-frame-options"] == "DENY"
    assert "content-security-policy" in r.headers
    assert "strict-transport-security" not in r.headers


def test_hsts_header_when_enabled():
    secure = Settings(stripe_secret_key="sk_test_123", hsts_enabled=True)
    with TestClient(create_app(secure)) as c:
        r = c.get("/health")
    assert r.headers["strict-transport-security"].startswith("max-age=")
