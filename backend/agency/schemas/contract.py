from datetime import date, datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ContractLookupRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    contract_number: str = Field(alias="contractNumber")

    @field_validator("contract_number", mode="before")
    def _strip_contract(cls, v: Any) -> Any:
        if isinstance(v, str):
            v = v.strip()
            if not v:
                raise ValueError("Contract number is required.")
        return v


class ClientPaymentRead(BaseModel):
    id: int
    amount: float
    payment_method: str
    payment_date: date

    model_config = {"from_attributes": True}


class ClientPaymentsResponse(BaseModel):
    payments: List[ClientPaymentRead]


class ContractDetails(BaseModel):
    id: int
    contract_number: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    total_amount: float
    total_paid: float
    advance_payment: Optional[float] = None
    balance_due: float
    status: str
    updated_at: Optional[datetime] = None
    payments_history: List[ClientPaymentRead] = []

    model_config = {"from_attributes": True}


class ContractDetailsResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    contract_details: ContractDetails = Field(alias="contractDetails")
