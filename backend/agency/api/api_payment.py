from typing import Union

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from .. import schemas
from ..core.payment_config import PaymentConfig
from ..services.checkout_preference import create_checkout_preference
from ..services.payment_confirmation import NOTHING_TO_CREDIT_MESSAGE, confirm_payment
from .dependencies import get_db, get_payment_config, get_request_origin

router = APIRouter(tags=["payments"])


@router.options("/confirm", include_in_schema=False)
@router.options("/mercadopago/checkout", include_in_schema=False)
def payments_preflight() -> Response:
    """Bare OPTIONS probes; real CORS preflights are answered by CORSMiddleware."""
    return Response(status_code=status.HTTP_200_OK)


@router.post(
    "/confirm",
    response_model=Union[schemas.ConfirmPaymentResponse, schemas.NothingToCreditResponse],
)
def confirm_client_payment(
    payload: schemas.ConfirmPaymentRequest,
    db: Session = Depends(get_db),
    config: PaymentConfig = Depends(get_payment_config),
):
    """Credit a payment against a contract.

    When no positive amount is given the first payment falls back to the
    contract's advance payment; if there is still nothing to credit the call
    succeeds with an explanatory message and changes nothing.
    """
    result = confirm_payment(db, payload, config)
    if result.nothing_to_credit:
        return schemas.NothingToCreditResponse(message=NOTHING_TO_CREDIT_MESSAGE)
    return schemas.ConfirmPaymentResponse(success=True, credited=float(result.credited))


@router.post("/mercadopago/checkout", response_model=schemas.CheckoutResponse)
def create_mercadopago_checkout(
    payload: schemas.CheckoutRequest,
    db: Session = Depends(get_db),
    config: PaymentConfig = Depends(get_payment_config),
    origin: str | None = Depends(get_request_origin),
):
    """Open a Mercado Pago checkout charging the grossed-up deposit."""
    return create_checkout_preference(db, payload, config, origin=origin)
