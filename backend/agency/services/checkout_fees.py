from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Optional

from ..models import DEFAULT_COMMISSION_PERCENTAGE, DEFAULT_FIXED_FEE
from ..utils.errors import BadRequestError
from .money import ZERO, ceil_cents, to_decimal

# IVA charged by the processor on its commission (not on the fixed fee)
COMMISSION_TAX_MULTIPLIER = Decimal("1.16")
_HUNDRED = Decimal("100")


@dataclass(frozen=True)
class FeeSettings:
    commission_percentage: Decimal = DEFAULT_COMMISSION_PERCENTAGE
    fixed_fee: Decimal = DEFAULT_FIXED_FEE

    @classmethod
    def from_row(cls, row: Any) -> "FeeSettings":
        """Build from an ``AgencySettings`` row; NULL columns fall back to defaults."""
        if row is None:
            return cls()
        pct = getattr(row, "mp_commission_percentage", None)
        fixed = getattr(row, "mp_fixed_fee", None)
        return cls(
            commission_percentage=DEFAULT_COMMISSION_PERCENTAGE if pct is None else to_decimal(pct),
            fixed_fee=DEFAULT_FIXED_FEE if fixed is None else to_decimal(fixed),
        )


def compute_gross_charge(
    amount: Any,
    commission_percentage: Optional[Any] = None,
    fixed_fee: Optional[Any] = None,
) -> Decimal:
    """Return what the payer must be charged so the agency nets ``amount``.

    gross = (amount + fixed) / (1 - commission_fraction * 1.16), rounded up to
    the cent so the net after commission, IVA on commission and the fixed fee
    is never below ``amount``.
    """
    net = to_decimal(amount)
    if net < ZERO:
        raise BadRequestError("El monto no puede ser negativo")
    pct = DEFAULT_COMMISSION_PERCENTAGE if commission_percentage is None else to_decimal(commission_percentage)
    fixed = DEFAULT_FIXED_FEE if fixed_fee is None else to_decimal(fixed_fee)
    if pct < ZERO or fixed < ZERO:
        raise BadRequestError("La comisión configurada no puede ser negativa")
    denominator = Decimal("1") - (pct / _HUNDRED) * COMMISSION_TAX_MULTIPLIER
    if denominator <= ZERO:
        raise BadRequestError("La comisión configurada es demasiado alta")
    return ceil_cents((net + fixed) / denominator)


def net_proceeds(gross: Decimal, commission_percentage: Any, fixed_fee: Any) -> Decimal:
    """What the processor pays out for a ``gross`` charge (unrounded)."""
    fraction = to_decimal(commission_percentage) / _HUNDRED
    return gross - gross * fraction * COMMISSION_TAX_MULTIPLIER - to_decimal(fixed_fee)
