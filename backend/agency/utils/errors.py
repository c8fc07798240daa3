import enum
from typing import Dict, Optional
from fastapi import status


class ErrorKind(str, enum.Enum):
    BAD_REQUEST = "bad_request"
    CONTRACT_NOT_FOUND = "contract_not_found"
    CREDENTIAL_NOT_CONFIGURED = "credential_not_configured"
    EXTERNAL_FAILURE = "external_failure"
    CONFLICT = "conflict"


class PaymentError(Exception):
    """Failure raised by the payment and contract services.

    Rendered by the application as ``{"error": message, "code": kind}`` so
    callers can branch on ``code`` instead of matching message text.
    """

    kind: ErrorKind = ErrorKind.EXTERNAL_FAILURE
    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(
        self,
        message: str,
        kind: Optional[ErrorKind] = None,
        status_code: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if kind is not None:
            self.kind = kind
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self) -> Dict[str, str]:
        return {"error": self.message, "code": self.kind.value}


class BadRequestError(PaymentError):
    kind = ErrorKind.BAD_REQUEST


class ContractNotFoundError(PaymentError):
    kind = ErrorKind.CONTRACT_NOT_FOUND

    def __init__(self, message: str = "Contrato no encontrado", status_code: Optional[int] = None) -> None:
        super().__init__(message, status_code=status_code)


class CredentialNotConfiguredError(PaymentError):
    kind = ErrorKind.CREDENTIAL_NOT_CONFIGURED


class ProcessorError(PaymentError):
    kind = ErrorKind.EXTERNAL_FAILURE


class ConcurrentUpdateError(PaymentError):
    kind = ErrorKind.CONFLICT
