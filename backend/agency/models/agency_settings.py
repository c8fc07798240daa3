from decimal import Decimal
from sqlalchemy import Column, Integer, Numeric, String

from .base import BaseModel

DEFAULT_COMMISSION_PERCENTAGE = Decimal("3.99")
DEFAULT_FIXED_FEE = Decimal("4.0")


class AgencySettings(BaseModel):
    """Singleton row with the agency's checkout configuration.

    ``NULL`` fee columns mean "use the processor defaults"; see
    :mod:`agency.services.checkout_fees`.
    """

    __tablename__ = "agency_settings"

    id = Column(Integer, primary_key=True, index=True)
    payment_mode = Column(String(20), nullable=False, default="production")
    mp_commission_percentage = Column(Numeric(6, 3), nullable=True)
    mp_fixed_fee = Column(Numeric(10, 2), nullable=True)
    advance_payment_amount = Column(Numeric(10, 2), nullable=True)
    mp_public_key = Column(String, nullable=True)
