from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from .. import schemas
from ..services import contract_lookup
from .dependencies import get_db

router = APIRouter(tags=["contracts"])


@router.post("/payments", response_model=schemas.ClientPaymentsResponse)
def read_contract_payments(
    payload: schemas.ContractLookupRequest,
    db: Session = Depends(get_db),
):
    """Public payment history for a contract, newest first."""
    payments = contract_lookup.get_contract_payments(db, payload.contract_number)
    return schemas.ClientPaymentsResponse(payments=payments)


@router.post("/details", response_model=schemas.ContractDetailsResponse)
def read_contract_details(
    payload: schemas.ContractLookupRequest,
    db: Session = Depends(get_db),
):
    details = contract_lookup.get_contract_details(db, payload.contract_number)
    return schemas.ContractDetailsResponse(contract_details=details)
