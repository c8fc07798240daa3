from fastapi import Request

from ..core.config import settings
from ..core.payment_config import PaymentConfig
from ..database import get_db

__all__ = ["get_db", "get_payment_config", "get_request_origin"]


def get_payment_config() -> PaymentConfig:
    """Payment credentials and limits for the current request.

    Overridden in tests via ``app.dependency_overrides`` so handlers never
    depend on the process environment.
    """
    return PaymentConfig.from_settings(settings)


def get_request_origin(request: Request) -> str | None:
    return request.headers.get("origin")
