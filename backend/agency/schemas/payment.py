from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Largest value a Numeric(10, 2) money column holds
MAX_AMOUNT = Decimal("99999999.99")
_CENT = Decimal("0.01")


def _parse_amount(value: Any) -> Optional[Decimal]:
    """Return a finite Decimal for numeric input, ``None`` for unusable text.

    Free-form strings from the public form that do not parse as a number are
    treated as "no amount given"; structured junk (bools, lists, objects) is
    rejected outright.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValueError("amount must be a number")
    if isinstance(value, Decimal):
        parsed = value
    elif isinstance(value, (int, float)):
        parsed = Decimal(str(value))
    elif isinstance(value, str):
        try:
            parsed = Decimal(value.strip())
        except InvalidOperation:
            return None
    else:
        raise ValueError("amount must be a number or numeric string")
    if not parsed.is_finite():
        return None
    if parsed > MAX_AMOUNT:
        raise ValueError(f"amount must not exceed {MAX_AMOUNT}")
    # Positive amounts are credited as given, so they must already be whole cents
    if parsed > 0 and parsed != parsed.quantize(_CENT):
        raise ValueError("amount must have at most 2 decimal places")
    return parsed


def _required_text(value: Any) -> Any:
    if isinstance(value, str):
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
    return value


class ConfirmPaymentRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    contract_number: str = Field(alias="contractNumber")
    method: Optional[str] = None
    amount: Optional[Decimal] = None

    @field_validator("contract_number", mode="before")
    def _strip_contract(cls, v: Any) -> Any:
        return _required_text(v)

    @field_validator("method", mode="before")
    def _blank_method(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v.strip() if isinstance(v, str) else v

    @field_validator("amount", mode="before")
    def _coerce_amount(cls, v: Any) -> Optional[Decimal]:
        return _parse_amount(v)


class ConfirmPaymentResponse(BaseModel):
    success: bool = True
    credited: float


class NothingToCreditResponse(BaseModel):
    message: str


class CheckoutRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    client_id: str = Field(alias="clientId")
    amount: Decimal = Field(gt=0, le=MAX_AMOUNT, allow_inf_nan=False)
    description: Optional[str] = None
    contract_number: str = Field(alias="contractNumber")

    @field_validator("client_id", mode="before")
    def _client_id_text(cls, v: Any) -> Any:
        if isinstance(v, bool):
            raise ValueError("clientId must be a string or integer")
        if isinstance(v, int):
            return str(v)
        return _required_text(v)

    @field_validator("amount", mode="before")
    def _reject_bool_amount(cls, v: Any) -> Any:
        if isinstance(v, bool):
            raise ValueError("amount must be a number")
        return v

    @field_validator("contract_number", mode="before")
    def _strip_contract(cls, v: Any) -> Any:
        return _required_text(v)

    @field_validator("description", mode="before")
    def _blank_description(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v


class CheckoutResponse(BaseModel):
    id: str
    init_point: str
    total: float
