from datetime import date
from decimal import Decimal
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from .. import models


def get_client(db: Session, client_id: int) -> Optional[models.Client]:
    return db.query(models.Client).filter(models.Client.id == client_id).first()


def get_client_by_contract_number(db: Session, contract_number: str) -> Optional[models.Client]:
    """Case-insensitive exact match on the contract number.

    Returns ``None`` unless exactly one row matches, so a legacy duplicate that
    differs only by case is never credited silently.
    """
    needle = (contract_number or "").strip().lower()
    if not needle:
        return None
    rows = (
        db.query(models.Client)
        .filter(func.lower(models.Client.contract_number) == needle)
        .limit(2)
        .all()
    )
    if len(rows) != 1:
        return None
    return rows[0]


def apply_credit(
    db: Session,
    client: models.Client,
    amount: Decimal,
    method: str,
    payment_date: date,
    new_total_paid: Decimal,
    new_status: str,
) -> models.ClientPayment:
    """Insert the payment row and update the client balance in one commit.

    The client UPDATE is guarded by ``Client.version``; if another writer got
    there first the flush raises ``StaleDataError`` and nothing is persisted.
    Callers own the rollback.
    """
    payment = models.ClientPayment(
        client_id=client.id,
        amount=amount,
        payment_method=method,
        payment_date=payment_date,
    )
    db.add(payment)
    client.total_paid = new_total_paid
    client.status = new_status
    client.touch()
    db.commit()
    db.refresh(payment)
    return payment
