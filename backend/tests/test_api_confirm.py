from decimal import Decimal

from sqlalchemy import text

from agency.models import Client, ClientPayment
from agency.services.payment_confirmation import NOTHING_TO_CREDIT_MESSAGE

URL = "/api/v1/payments/confirm"


def test_confirm_returns_credited_amount(api, make_contract):
    make_contract(total_amount="1000", total_paid="0", advance_payment="200")

    res = api.post(URL, json={"contractNumber": "VIA-1001"})

    assert res.status_code == 200
    assert res.json() == {"success": True, "credited": 200.0}


def test_confirm_accepts_numeric_strings(api, make_contract, Session):
    client_id = make_contract(total_paid="200")

    res = api.post(URL, json={"contractNumber": "via-1001", "amount": "250.50", "method": "tarjeta"})

    assert res.status_code == 200
    assert res.json()["credited"] == 250.5
    db = Session()
    client = db.get(Client, client_id)
    assert client.total_paid == Decimal("450.50")
    assert client.status == "confirmed"
    db.close()


def test_nothing_to_credit_is_success_message(api, make_contract, Session):
    make_contract(total_paid="1000", total_amount="1000")

    res = api.post(URL, json={"contractNumber": "VIA-1001", "amount": "n/a"})

    assert res.status_code == 200
    assert res.json() == {"message": NOTHING_TO_CREDIT_MESSAGE}
    db = Session()
    assert db.query(ClientPayment).count() == 0
    db.close()


def test_unknown_contract_is_client_error(api, make_contract):
    make_contract()

    res = api.post(URL, json={"contractNumber": "NOPE-1"})

    assert res.status_code == 400
    assert res.json() == {"error": "Contrato no encontrado", "code": "contract_not_found"}


def test_malformed_payloads_are_bad_requests(api, make_contract, Session):
    make_contract()
    payloads = [
        {},
        {"contractNumber": "   "},
        {"contractNumber": 1001},
        {"contractNumber": "VIA-1001", "amount": [100]},
        {"contractNumber": "VIA-1001", "amount": {"value": 100}},
        {"contractNumber": "VIA-1001", "amount": True},
        {"contractNumber": "VIA-1001", "method": 7},
    ]
    for payload in payloads:
        res = api.post(URL, json=payload)
        assert res.status_code == 400, payload
        body = res.json()
        assert body["code"] == "bad_request"
        assert body["error"]
        assert body["field_errors"]

    db = Session()
    assert db.query(ClientPayment).count() == 0
    db.close()


def test_invalid_json_body_is_bad_request(api):
    res = api.post(URL, content=b"{not json", headers={"Content-Type": "application/json"})
    assert res.status_code == 400
    assert res.json()["code"] == "bad_request"


def test_database_failure_leaves_no_partial_write(api, make_contract, engine, Session):
    client_id = make_contract(total_paid="0", advance_payment="200")
    with engine.begin() as conn:
        conn.execute(
            text(
                "CREATE TRIGGER reject_payment BEFORE INSERT ON client_payments "
                "BEGIN SELECT RAISE(ABORT, 'payment insert rejected'); END;"
            )
        )

    res = api.post(URL, json={"contractNumber": "VIA-1001"})

    assert res.status_code == 400
    body = res.json()
    assert body["code"] == "external_failure"
    assert "payment insert rejected" in body["error"]
    db = Session()
    client = db.get(Client, client_id)
    assert client.total_paid == Decimal("0")
    assert client.status == "pending"
    assert client.version == 1
    assert db.query(ClientPayment).count() == 0
    db.close()


def test_bare_options_returns_empty_ok(api):
    res = api.options(URL)
    assert res.status_code == 200
    assert res.content == b""


def test_cors_preflight_allows_any_origin(api):
    res = api.options(
        URL,
        headers={
            "Origin": "https://viajes.example",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "content-type",
        },
    )
    assert res.status_code == 200
    assert res.content == b""
    assert res.headers.get("access-control-allow-origin") == "*"


def test_payment_responses_are_not_cacheable(api, make_contract):
    make_contract()

    res = api.post(URL, json={"contractNumber": "VIA-1001"})

    assert res.headers.get("Cache-Control") == "no-store"
    assert res.headers.get("X-Content-Type-Options") == "nosniff"
    assert res.headers.get("Server-Timing", "").startswith("app;dur=")


def test_oversized_amount_is_bad_request(api, make_contract, Session):
    make_contract(total_paid="200")

    for amount in (1e30, "1e30", 100000000):
        res = api.post(URL, json={"contractNumber": "VIA-1001", "amount": amount})
        assert res.status_code == 400, amount
        body = res.json()
        assert body["code"] == "bad_request"
        assert "amount" in body["field_errors"]

    db = Session()
    assert db.query(ClientPayment).count() == 0
    db.close()


def test_sub_cent_amounts_are_rejected_not_rounded(api, make_contract, Session):
    client_id = make_contract(total_paid="0", advance_payment="200")

    for amount in (0.004, "0.005", 12.345):
        res = api.post(URL, json={"contractNumber": "VIA-1001", "amount": amount})
        assert res.status_code == 400, amount
        assert res.json()["code"] == "bad_request"

    db = Session()
    assert db.query(ClientPayment).count() == 0
    assert db.get(Client, client_id).total_paid == Decimal("0")
    db.close()

    # Trailing zeros are still whole cents
    res = api.post(URL, json={"contractNumber": "VIA-1001", "amount": "12.500"})
    assert res.status_code == 200
    assert res.json() == {"success": True, "credited": 12.5}
