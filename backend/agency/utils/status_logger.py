import logging
from sqlalchemy import event
from sqlalchemy.orm.attributes import NO_VALUE

from .. import models

logger = logging.getLogger(__name__)

_registered = False


def _status_change(target, value, oldvalue, initiator):  # noqa: ANN001
    """Log client status transitions as they are assigned."""
    if oldvalue is NO_VALUE or oldvalue == value:
        return value
    logger.info(
        "Client id=%s contract=%s status changed from %s to %s",
        getattr(target, "id", "unknown"),
        getattr(target, "contract_number", "unknown"),
        oldvalue,
        value,
    )
    return value


def register_status_listeners() -> None:
    """Attach the status listener to ``Client.status`` once per process."""
    global _registered
    if _registered:
        return
    event.listen(
        models.Client.status, "set", _status_change, retval=False, active_history=True
    )
    _registered = True
