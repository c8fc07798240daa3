"""Credit a payment against a client contract.

The payment row and the client's running balance are written in a single
transaction. ``Client.version`` guards the balance update: when a concurrent
confirmation commits first, the whole unit is rolled back and re-resolved
from fresh data, up to ``PaymentConfig.confirm_max_attempts`` times.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any, Optional

from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from .. import crud
from ..core.payment_config import PaymentConfig
from ..models import ClientStatus, DEFAULT_PAYMENT_METHOD
from ..schemas import ConfirmPaymentRequest
from ..utils.errors import ConcurrentUpdateError, ContractNotFoundError
from ..utils.metrics import incr
from .money import ZERO, quantize_cents, to_decimal

logger = logging.getLogger(__name__)

NOTHING_TO_CREDIT_MESSAGE = "El contrato ya está liquidado o no requiere abono."
CONFLICT_MESSAGE = "El contrato fue modificado por otra operación, intenta de nuevo."


@dataclass
class ConfirmationResult:
    credited: Decimal
    total_paid: Decimal
    status: Optional[str] = None
    payment_id: Optional[int] = None

    @property
    def nothing_to_credit(self) -> bool:
        return self.credited <= ZERO


def resolve_credit_amount(
    amount: Optional[Decimal],
    total_paid: Any,
    advance_payment: Any,
) -> Decimal:
    """Pick how much to credit.

    A positive explicit amount always wins. Otherwise the first payment on a
    contract falls back to its agreed advance payment; later calls credit 0.
    """
    if amount is not None and amount > ZERO:
        return quantize_cents(amount)
    if to_decimal(total_paid) == ZERO:
        return quantize_cents(max(to_decimal(advance_payment), ZERO))
    return ZERO


def derive_client_status(total_paid: Any, total_amount: Any) -> ClientStatus:
    paid = to_decimal(total_paid)
    if paid >= to_decimal(total_amount):
        return ClientStatus.COMPLETED
    if paid <= ZERO:
        return ClientStatus.PENDING
    return ClientStatus.CONFIRMED


def _utc_today() -> date:
    return datetime.now(timezone.utc).date()


def confirm_payment(
    db: Session,
    request: ConfirmPaymentRequest,
    config: PaymentConfig,
    today: Optional[date] = None,
) -> ConfirmationResult:
    method = request.method or DEFAULT_PAYMENT_METHOD
    payment_date = today or _utc_today()
    attempts = max(1, config.confirm_max_attempts)

    for attempt in range(1, attempts + 1):
        client = crud.get_client_by_contract_number(db, request.contract_number)
        if client is None:
            logger.info("Confirmation for unknown contract %s", request.contract_number)
            raise ContractNotFoundError()

        previous = to_decimal(client.total_paid)
        credit = resolve_credit_amount(request.amount, previous, client.advance_payment)
        if credit <= ZERO:
            incr("payments.confirm.noop")
            logger.info(
                "Nothing to credit for contract %s (total_paid=%s)",
                client.contract_number,
                previous,
            )
            return ConfirmationResult(credited=ZERO, total_paid=previous, status=client.status)

        new_total = previous + credit
        new_status = derive_client_status(new_total, client.total_amount)
        try:
            payment = crud.apply_credit(
                db,
                client,
                amount=credit,
                method=method,
                payment_date=payment_date,
                new_total_paid=new_total,
                new_status=new_status.value,
            )
        except StaleDataError:
            db.rollback()
            incr("payments.confirm.conflict")
            logger.warning(
                "Concurrent update on contract %s, retrying (%s/%s)",
                request.contract_number,
                attempt,
                attempts,
            )
            continue

        incr("payments.confirm.credited", tags={"method": method})
        logger.info(
            "Credited %s to contract %s via %s: total_paid %s -> %s status=%s",
            credit,
            client.contract_number,
            method,
            previous,
            new_total,
            new_status.value,
        )
        return ConfirmationResult(
            credited=credit,
            total_paid=new_total,
            status=new_status.value,
            payment_id=payment.id,
        )

    logger.error(
        "Giving up on contract %s after %s conflicting attempts",
        request.contract_number,
        attempts,
    )
    raise ConcurrentUpdateError(CONFLICT_MESSAGE)
