from typing import List

from sqlalchemy.orm import Session

from .. import models


def list_payments_for_client(db: Session, client_id: int) -> List[models.ClientPayment]:
    """Return payments newest first; same-day payments by insertion order."""
    return (
        db.query(models.ClientPayment)
        .filter(models.ClientPayment.client_id == client_id)
        .order_by(models.ClientPayment.payment_date.desc(), models.ClientPayment.id.desc())
        .all()
    )
