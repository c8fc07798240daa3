"""Explicit payment configuration handed to the payment services.

Services never look at the process environment; the API layer builds a
``PaymentConfig`` from :mod:`agency.core.config` through the
``get_payment_config`` dependency, and tests construct one directly.
"""

from __future__ import annotations

from dataclasses import dataclass

from .config import Settings
from ..utils.errors import CredentialNotConfiguredError

TEST_MODE = "test"
PRODUCTION_MODE = "production"

_MODE_LABELS = {TEST_MODE: "Prueba", PRODUCTION_MODE: "Producción"}


def normalize_mode(mode: str | None) -> str:
    """Only the exact value ``test`` selects the sandbox; anything else is production."""
    if mode == TEST_MODE:
        return TEST_MODE
    return PRODUCTION_MODE


def mode_label(mode: str | None) -> str:
    return _MODE_LABELS[normalize_mode(mode)]


@dataclass(frozen=True)
class PaymentConfig:
    access_token: str = ""
    test_access_token: str = ""
    api_base_url: str = "https://api.mercadopago.com"
    timeout_seconds: float = 10.0
    currency: str = "MXN"
    frontend_url: str = ""
    confirm_max_attempts: int = 3

    @classmethod
    def from_settings(cls, settings: Settings) -> "PaymentConfig":
        return cls(
            access_token=settings.MP_ACCESS_TOKEN,
            test_access_token=settings.MP_TEST_ACCESS_TOKEN,
            api_base_url=settings.MP_API_BASE_URL.rstrip("/"),
            timeout_seconds=settings.MP_TIMEOUT_SECONDS,
            currency=settings.CHECKOUT_CURRENCY,
            frontend_url=settings.FRONTEND_URL.rstrip("/"),
            confirm_max_attempts=max(1, settings.CONFIRM_MAX_ATTEMPTS),
        )

    def token_for(self, mode: str | None) -> str:
        """Return the processor credential for ``mode`` or raise if unset."""
        normalized = normalize_mode(mode)
        token = self.test_access_token if normalized == TEST_MODE else self.access_token
        if not token:
            raise CredentialNotConfiguredError(
                f"Token de Mercado Pago ({mode_label(normalized)}) no configurado"
            )
        return token
