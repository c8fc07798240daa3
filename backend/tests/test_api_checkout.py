from dataclasses import replace

import httpx
import pytest

import agency.services.mercadopago_client as mercadopago_client
from agency.api.dependencies import get_payment_config
from agency.main import app

URL = "/api/v1/payments/mercadopago/checkout"

PAYLOAD = {
    "clientId": 42,
    "amount": 500,
    "contractNumber": "VIA-1001",
}


def fake_processor(monkeypatch, status_code=201, body=None, raw=None):
    """Patch httpx.Client in the processor module; return the captured calls."""
    calls = []
    if body is None and raw is None:
        body = {
            "id": "123456-pref",
            "init_point": "https://www.mercadopago.com.mx/checkout/v1/redirect?pref_id=123456-pref",
        }

    class FakeClient:
        def __init__(self, *args, **kwargs):
            calls.append({"timeout": kwargs.get("timeout")})

        def __enter__(self):
            return self

        def __exit__(self, exc_type, exc, tb):
            return False

        def post(self, url, json=None, headers=None):
            calls[-1].update({"url": url, "json": json, "headers": headers})
            request = httpx.Request("POST", url)
            if raw is not None:
                return httpx.Response(status_code, content=raw, request=request)
            return httpx.Response(status_code, json=body, request=request)

    monkeypatch.setattr(mercadopago_client.httpx, "Client", FakeClient)
    return calls


def test_checkout_creates_preference_with_grossed_up_price(api, monkeypatch, make_agency_settings):
    make_agency_settings(payment_mode="production")
    calls = fake_processor(monkeypatch)

    res = api.post(URL, json=PAYLOAD, headers={"Origin": "https://viajes.example"})

    assert res.status_code == 200
    assert res.json() == {
        "id": "123456-pref",
        "init_point": "https://www.mercadopago.com.mx/checkout/v1/redirect?pref_id=123456-pref",
        "total": 528.46,
    }
    call = calls[0]
    assert call["url"] == "https://api.mercadopago.test/checkout/preferences"
    assert call["headers"]["Authorization"] == "Bearer APP_USR-prod-token"
    assert call["timeout"] == 5.0
    assert call["json"] == {
        "items": [
            {
                "title": "Anticipo de Reserva",
                "unit_price": 528.46,
                "quantity": 1,
                "currency_id": "MXN",
            }
        ],
        "external_reference": "42",
        "back_urls": {
            "success": "https://viajes.example/payment-success?contract=VIA-1001",
            "failure": "https://viajes.example/payment-failure",
        },
        "auto_return": "approved",
    }


def test_checkout_uses_test_token_in_test_mode(api, monkeypatch, make_agency_settings):
    make_agency_settings(payment_mode="test")
    calls = fake_processor(monkeypatch)

    res = api.post(URL, json={**PAYLOAD, "description": "Tour Chiapas"})

    assert res.status_code == 200
    assert calls[0]["headers"]["Authorization"] == "Bearer TEST-sandbox-token"
    assert calls[0]["json"]["items"][0]["title"] == "Tour Chiapas"


def test_checkout_without_settings_row_uses_production_defaults(api, monkeypatch):
    calls = fake_processor(monkeypatch)

    res = api.post(URL, json=PAYLOAD)

    assert res.status_code == 200
    assert res.json()["total"] == 528.46
    assert calls[0]["headers"]["Authorization"] == "Bearer APP_USR-prod-token"
    # No Origin header: redirects fall back to the configured frontend
    assert calls[0]["json"]["back_urls"]["failure"] == "https://agencia.example/payment-failure"


def test_checkout_respects_configured_fees(api, monkeypatch, make_agency_settings):
    make_agency_settings(commission=0, fixed_fee=0)
    fake_processor(monkeypatch)

    res = api.post(URL, json={**PAYLOAD, "amount": 250.5})

    assert res.status_code == 200
    assert res.json()["total"] == 250.5


def test_missing_test_token_names_test_mode(api, monkeypatch, payment_config, make_agency_settings):
    make_agency_settings(payment_mode="test")
    calls = fake_processor(monkeypatch)
    app.dependency_overrides[get_payment_config] = lambda: replace(payment_config, test_access_token="")

    res = api.post(URL, json=PAYLOAD)

    assert res.status_code == 400
    body = res.json()
    assert body["code"] == "credential_not_configured"
    assert "Prueba" in body["error"]
    assert calls == []


def test_missing_production_token_names_production_mode(api, monkeypatch, payment_config):
    fake_processor(monkeypatch)
    app.dependency_overrides[get_payment_config] = lambda: replace(payment_config, access_token="")

    res = api.post(URL, json=PAYLOAD)

    assert res.status_code == 400
    assert res.json() == {
        "error": "Token de Mercado Pago (Producción) no configurado",
        "code": "credential_not_configured",
    }


def test_processor_rejection_is_passed_through(api, monkeypatch):
    fake_processor(monkeypatch, status_code=400, body={"message": "unit_price invalid", "status": 400})

    res = api.post(URL, json=PAYLOAD)

    assert res.status_code == 400
    assert res.json() == {"error": "unit_price invalid", "code": "external_failure"}


@pytest.mark.parametrize(
    "kwargs",
    [
        {"status_code": 201, "body": {"id": "only-id"}},
        {"status_code": 200, "raw": b"<html>gateway</html>"},
    ],
)
def test_malformed_processor_response_fails(api, monkeypatch, kwargs):
    fake_processor(monkeypatch, **kwargs)

    res = api.post(URL, json=PAYLOAD)

    assert res.status_code == 400
    assert res.json() == {"error": "Invalid Mercado Pago response", "code": "external_failure"}


def test_checkout_validation(api, monkeypatch):
    calls = fake_processor(monkeypatch)
    bad = [
        {**PAYLOAD, "amount": 0},
        {**PAYLOAD, "amount": -10},
        {**PAYLOAD, "amount": "lots"},
        {"clientId": 42, "amount": 500},
        {**PAYLOAD, "clientId": None},
        {**PAYLOAD, "contractNumber": ""},
    ]
    for payload in bad:
        res = api.post(URL, json=payload)
        assert res.status_code == 400, payload
        assert res.json()["code"] == "bad_request"
    assert calls == []


def test_checkout_preflight(api):
    res = api.options(URL)
    assert res.status_code == 200
    assert res.content == b""


def test_oversized_checkout_amount_is_bad_request(api, monkeypatch):
    calls = fake_processor(monkeypatch)

    for amount in (1e30, 100000000):
        res = api.post(URL, json={**PAYLOAD, "amount": amount})
        assert res.status_code == 400, amount
        body = res.json()
        assert body["code"] == "bad_request"
        assert "amount" in body["field_errors"]
    assert calls == []
