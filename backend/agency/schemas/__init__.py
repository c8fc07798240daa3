from .payment import (
    ConfirmPaymentRequest,
    ConfirmPaymentResponse,
    NothingToCreditResponse,
    CheckoutRequest,
    CheckoutResponse,
)
from .contract import (
    ContractLookupRequest,
    ClientPaymentRead,
    ClientPaymentsResponse,
    ContractDetails,
    ContractDetailsResponse,
)
