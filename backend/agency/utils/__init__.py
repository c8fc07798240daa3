from .errors import (
    ErrorKind,
    PaymentError,
    BadRequestError,
    ContractNotFoundError,
    CredentialNotConfiguredError,
    ProcessorError,
    ConcurrentUpdateError,
)

__all__ = [
    "ErrorKind",
    "PaymentError",
    "BadRequestError",
    "ContractNotFoundError",
    "CredentialNotConfiguredError",
    "ProcessorError",
    "ConcurrentUpdateError",
]
