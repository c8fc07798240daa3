"""Thin Mercado Pago REST client over ``httpx``."""

from __future__ import annotations

import logging
from typing import Any, Dict

import httpx

from ..utils.errors import ProcessorError

logger = logging.getLogger(__name__)

INVALID_RESPONSE_MESSAGE = "Invalid Mercado Pago response"


def _processor_message(response: httpx.Response) -> str:
    """Extract the human message Mercado Pago puts in error bodies."""
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        for key in ("message", "error"):
            value = body.get(key)
            if isinstance(value, str) and value.strip():
                return value.strip()
    return f"Mercado Pago respondió {response.status_code} {response.reason_phrase}".strip()


class MercadoPagoClient:
    def __init__(
        self,
        access_token: str,
        base_url: str = "https://api.mercadopago.com",
        timeout: float = 10.0,
    ) -> None:
        self.access_token = access_token
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.access_token}",
            "Content-Type": "application/json",
        }

    def create_preference(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Create a checkout preference and return the decoded body.

        Raises ``ProcessorError`` for transport failures, non-2xx answers and
        bodies missing ``id`` or ``init_point``.
        """
        url = f"{self.base_url}/checkout/preferences"
        try:
            with httpx.Client(timeout=self.timeout) as client:
                resp = client.post(url, json=payload, headers=self._headers())
                resp.raise_for_status()
                data = resp.json()
        except httpx.HTTPStatusError as exc:
            message = _processor_message(exc.response)
            logger.error(
                "Mercado Pago preference rejected status=%s message=%s",
                exc.response.status_code,
                message,
            )
            raise ProcessorError(message) from exc
        except httpx.HTTPError as exc:
            logger.error("Mercado Pago request failed: %s", exc)
            raise ProcessorError(str(exc) or "Mercado Pago request failed") from exc
        except ValueError as exc:
            logger.error("Mercado Pago returned non-JSON body: %s", exc)
            raise ProcessorError(INVALID_RESPONSE_MESSAGE) from exc

        if not isinstance(data, dict) or not data.get("id") or not data.get("init_point"):
            logger.error("Mercado Pago preference missing id/init_point: %s", data)
            raise ProcessorError(INVALID_RESPONSE_MESSAGE)
        return data
