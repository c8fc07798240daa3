from pathlib import Path
from dotenv import load_dotenv
import os

# Load environment variables for tests before the app reads its settings
load_dotenv(Path(__file__).resolve().parents[1] / ".env.test")
os.environ.setdefault("PYTEST_RUN", "1")

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from agency.main import app
from agency.database import Base, get_db
from agency.api.dependencies import get_payment_config
from agency.core.payment_config import PaymentConfig
from agency.models import AgencySettings, Client


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def Session(engine):
    return sessionmaker(bind=engine)


@pytest.fixture
def db(Session):
    session = Session()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def payment_config():
    return PaymentConfig(
        access_token="APP_USR-prod-token",
        test_access_token="TEST-sandbox-token",
        api_base_url="https://api.mercadopago.test",
        timeout_seconds=5.0,
        currency="MXN",
        frontend_url="https://agencia.example",
        confirm_max_attempts=3,
    )


@pytest.fixture
def api(Session, payment_config):
    """TestClient bound to the per-test database and payment config."""

    def override_db():
        session = Session()
        try:
            yield session
        finally:
            session.close()

    prev = dict(app.dependency_overrides)
    app.dependency_overrides[get_db] = override_db
    app.dependency_overrides[get_payment_config] = lambda: payment_config
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
        app.dependency_overrides.update(prev)


@pytest.fixture
def make_contract(Session):
    """Insert a client contract and return its id."""

    def _make(contract_number="VIA-1001", total_amount="1000", total_paid="0", advance_payment="200", **extra):
        session = Session()
        try:
            client = Client(
                contract_number=contract_number,
                total_amount=Decimal(str(total_amount)),
                total_paid=Decimal(str(total_paid)),
                advance_payment=None if advance_payment is None else Decimal(str(advance_payment)),
                **extra,
            )
            session.add(client)
            session.commit()
            return client.id
        finally:
            session.close()

    return _make


@pytest.fixture
def make_agency_settings(Session):
    def _make(payment_mode="production", commission=None, fixed_fee=None):
        session = Session()
        try:
            row = AgencySettings(
                payment_mode=payment_mode,
                mp_commission_percentage=commission,
                mp_fixed_fee=fixed_fee,
            )
            session.add(row)
            session.commit()
            return row.id
        finally:
            session.close()

    return _make
