from typing import Optional

from sqlalchemy.orm import Session

from .. import models


def get_agency_settings(db: Session) -> Optional[models.AgencySettings]:
    """Return the singleton settings row (lowest id wins if several exist)."""
    return db.query(models.AgencySettings).order_by(models.AgencySettings.id.asc()).first()
