import logging

from sqlalchemy import inspect, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from . import models
from .crud import get_agency_settings

logger = logging.getLogger(__name__)


def add_column_if_missing(engine: Engine, table: str, column: str, ddl: str) -> bool:
    """Add a column to *table* if it does not exist.

    Returns ``True`` when the column was added.
    """
    inspector = inspect(engine)
    if table not in inspector.get_table_names():
        return False
    column_names = [col["name"] for col in inspector.get_columns(table)]
    if column in column_names:
        return False
    with engine.begin() as conn:
        conn.execute(text(f"ALTER TABLE {table} ADD COLUMN {ddl}"))
    logger.info("Added missing column %s.%s", table, column)
    return True


def ensure_client_version_column(engine: Engine) -> None:
    """Ensure ``clients`` carries the optimistic-lock ``version`` column.

    Contracts imported before optimistic locking existed lack the column;
    existing rows start at version 1.
    """
    add_column_if_missing(
        engine,
        "clients",
        "version",
        "version INTEGER NOT NULL DEFAULT 1",
    )


def ensure_agency_settings_row(db: Session) -> models.AgencySettings:
    """Return the settings singleton, creating it with defaults when absent."""
    row = get_agency_settings(db)
    if row is not None:
        return row
    row = models.AgencySettings(
        payment_mode="production",
        mp_commission_percentage=models.DEFAULT_COMMISSION_PERCENTAGE,
        mp_fixed_fee=models.DEFAULT_FIXED_FEE,
    )
    db.add(row)
    db.commit()
    db.refresh(row)
    logger.info("Seeded agency_settings with default Mercado Pago fees")
    return row
