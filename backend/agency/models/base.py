from datetime import datetime
from sqlalchemy import Column, DateTime
from ..database import Base


class BaseModel(Base):
    """Abstract base adding audit timestamps to mutable tables."""

    __abstract__ = True

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def touch(self) -> None:
        """Stamp ``updated_at`` explicitly for writes that must record it."""
        self.updated_at = datetime.utcnow()
