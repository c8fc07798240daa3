import enum
from sqlalchemy import Column, Integer, Numeric, String
from sqlalchemy.orm import relationship

from .base import BaseModel


class ClientStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"


class Client(BaseModel):
    """A travel contract sold by the agency."""

    __tablename__ = "clients"

    id = Column(Integer, primary_key=True, index=True)
    contract_number = Column(String(64), nullable=False, unique=True, index=True)
    first_name = Column(String, nullable=True)
    last_name = Column(String, nullable=True)
    email = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    total_amount = Column(Numeric(10, 2), nullable=False, default=0)
    total_paid = Column(Numeric(10, 2), nullable=False, default=0)
    advance_payment = Column(Numeric(10, 2), nullable=True)
    status = Column(String(20), nullable=False, default=ClientStatus.PENDING.value)
    # Bumped on every UPDATE; stale writers match zero rows and get StaleDataError
    version = Column(Integer, nullable=False, default=1, server_default="1")

    payments = relationship(
        "ClientPayment",
        back_populates="client",
        cascade="all, delete-orphan",
        order_by="ClientPayment.payment_date.desc()",
    )

    __mapper_args__ = {"version_id_col": version}
