from .client import Client, ClientStatus
from .client_payment import ClientPayment, DEFAULT_PAYMENT_METHOD
from .agency_settings import (
    AgencySettings,
    DEFAULT_COMMISSION_PERCENTAGE,
    DEFAULT_FIXED_FEE,
)

__all__ = [
    "Client",
    "ClientStatus",
    "ClientPayment",
    "DEFAULT_PAYMENT_METHOD",
    "AgencySettings",
    "DEFAULT_COMMISSION_PERCENTAGE",
    "DEFAULT_FIXED_FEE",
]
