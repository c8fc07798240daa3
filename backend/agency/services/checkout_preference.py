from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Dict, Optional
from urllib.parse import urlencode

from sqlalchemy.orm import Session

from .. import crud
from ..core.payment_config import PaymentConfig, normalize_mode
from ..schemas import CheckoutRequest
from ..utils.errors import BadRequestError, ProcessorError
from ..utils.metrics import Timer, incr
from .checkout_fees import FeeSettings, compute_gross_charge, net_proceeds
from .mercadopago_client import MercadoPagoClient
from .money import quantize_cents

logger = logging.getLogger(__name__)

DEFAULT_ITEM_TITLE = "Anticipo de Reserva"


def resolve_origin(origin: Optional[str], config: PaymentConfig) -> str:
    """Prefer the caller's Origin header so redirects land on the same site."""
    value = (origin or "").strip()
    if not value or value == "null":
        value = config.frontend_url
    if not value:
        raise BadRequestError("No se pudo determinar el origen de la solicitud")
    return value.rstrip("/")


def build_back_urls(origin: str, contract_number: str) -> Dict[str, str]:
    return {
        "success": f"{origin}/payment-success?{urlencode({'contract': contract_number})}",
        "failure": f"{origin}/payment-failure",
    }


def build_preference_payload(
    request: CheckoutRequest,
    gross: Decimal,
    currency: str,
    origin: str,
) -> Dict[str, Any]:
    return {
        "items": [
            {
                "title": request.description or DEFAULT_ITEM_TITLE,
                "unit_price": float(gross),
                "quantity": 1,
                "currency_id": currency,
            }
        ],
        "external_reference": request.client_id,
        "back_urls": build_back_urls(origin, request.contract_number),
        "auto_return": "approved",
    }


def create_checkout_preference(
    db: Session,
    request: CheckoutRequest,
    config: PaymentConfig,
    origin: Optional[str] = None,
) -> Dict[str, Any]:
    """Gross up the requested deposit and open a hosted checkout for it.

    Returns ``{"id", "init_point", "total"}`` where ``total`` is the rounded
    gross amount the payer will see.
    """
    agency = crud.get_agency_settings(db)
    mode = normalize_mode(agency.payment_mode if agency is not None else None)
    token = config.token_for(mode)

    fees = FeeSettings.from_row(agency)
    gross = compute_gross_charge(request.amount, fees.commission_percentage, fees.fixed_fee)
    payload = build_preference_payload(
        request, gross, config.currency, resolve_origin(origin, config)
    )

    mp = MercadoPagoClient(token, base_url=config.api_base_url, timeout=config.timeout_seconds)
    try:
        with Timer("checkout.preference.ms", tags={"mode": mode}):
            preference = mp.create_preference(payload)
    except ProcessorError:
        incr("checkout.preference.failed", tags={"mode": mode})
        raise

    incr("checkout.preference.created", tags={"mode": mode})
    logger.info(
        "Checkout preference %s created client=%s contract=%s net=%s gross=%s expected_net=%s mode=%s",
        preference["id"],
        request.client_id,
        request.contract_number,
        request.amount,
        gross,
        quantize_cents(net_proceeds(gross, fees.commission_percentage, fees.fixed_fee)),
        mode,
    )
    return {
        "id": str(preference["id"]),
        "init_point": preference["init_point"],
        "total": float(gross),
    }
