"""Decimal-only cart pricing.

Line amounts are summed unrounded; subtotal, tax and total are each quantized
to two places (ROUND_HALF_UP) from the unrounded running sums.
"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Iterable, Union

CENTS = Decimal("0.01")

Amount = Union[Decimal, str, int]


@dataclass(frozen=True)
class CartLine:
    title: str
    price: Decimal
    quantity: int

    @property
    def amount(self) -> Decimal:
        return self.price * self.quantity


@dataclass(frozen=True)
class Totals:
    subtotal: Decimal
    tax: Decimal
    total: Decimal


def to_decimal(amount: Amount) -> Decimal:
    if isinstance(amount, float):
        raise ValueError(
            f"Float not allowed in money operations. Got: {amount}. "
            "Use Decimal or string instead."
        )
    try:
        return amount if isinstance(amount, Decimal) else Decimal(str(amount))
    except InvalidOperation as exc:
        raise ValueError(f"Cannot convert amount to Decimal: {amount}") from exc


def quantize_money(amount: Decimal) -> Decimal:
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


def compute_totals(lines: Iterable[CartLine], tax_rate: Amount) -> Totals:
    rate = to_decimal(tax_rate)
    raw_subtotal = sum((line.amount for line in lines), Decimal("0"))
    raw_tax = raw_subtotal * rate
    return Totals(
        subtotal=quantize_money(raw_subtotal),
        tax=quantize_money(raw_tax),
        total=quantize_money(raw_subtotal + raw_tax),
    )


def fmt_money(amount: Amount, label: str = "Rs.") -> str:
    """Format an amount for display, e.g. ``fmt_money(Decimal("1234.5"))`` -> ``Rs. 1,234.50``."""
    value = quantize_money(to_decimal(amount))
    return f"{label} {value:,.2f}" if label else f"{value:,.2f}"
