from __future__ import annotations

from typing import List

from fastapi import status
from sqlalchemy.orm import Session

from .. import crud, models
from ..schemas import ClientPaymentRead, ContractDetails
from ..utils.errors import ContractNotFoundError
from .money import to_decimal


def _require_client(db: Session, contract_number: str) -> models.Client:
    client = crud.get_client_by_contract_number(db, contract_number)
    if client is None:
        raise ContractNotFoundError(status_code=status.HTTP_404_NOT_FOUND)
    return client


def get_contract_payments(db: Session, contract_number: str) -> List[ClientPaymentRead]:
    client = _require_client(db, contract_number)
    return [
        ClientPaymentRead.model_validate(p)
        for p in crud.list_payments_for_client(db, client.id)
    ]


def get_contract_details(db: Session, contract_number: str) -> ContractDetails:
    """Public view of a contract: balances plus its payment history."""
    client = _require_client(db, contract_number)
    payments = [
        ClientPaymentRead.model_validate(p)
        for p in crud.list_payments_for_client(db, client.id)
    ]
    balance = to_decimal(client.total_amount) - to_decimal(client.total_paid)
    return ContractDetails(
        id=client.id,
        contract_number=client.contract_number,
        first_name=client.first_name,
        last_name=client.last_name,
        email=client.email,
        phone=client.phone,
        total_amount=float(to_decimal(client.total_amount)),
        total_paid=float(to_decimal(client.total_paid)),
        advance_payment=(
            float(client.advance_payment) if client.advance_payment is not None else None
        ),
        balance_due=float(max(balance, to_decimal(0))),
        status=client.status,
        updated_at=client.updated_at,
        payments_history=payments,
    )
