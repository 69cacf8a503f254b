from decimal import Decimal

import pytest

from study_store.services.pricing import CartLine, compute_totals, fmt_money, to_decimal


def test_reference_cart_totals():
    lines = [
        CartLine(title="A", price=Decimal("100"), quantity=2),
        CartLine(title="B", price=Decimal("50"), quantity=1),
    ]
    totals = compute_totals(lines, Decimal("0.18"))
    assert totals.subtotal == Decimal("250.00")
    assert totals.tax == Decimal("45.00")
    assert totals.total == Decimal("295.00")


def test_rounding_applies_to_unrounded_sums():
    lines = [CartLine(title="Sheet", price=Decimal("0.333"), quantity=3)]
    totals = compute_totals(lines, "0.18")
    # raw subtotal 0.999, raw tax 0.17982, raw total 1.17882
    assert totals.subtotal == Decimal("1.00")
    assert totals.tax == Decimal("0.18")
    assert totals.total == Decimal("1.18")


def test_rounding_is_half_up():
    totals = compute_totals([CartLine(title="X", price=Decimal("0.125"), quantity=1)], 0)
    assert totals.subtotal == Decimal("0.13")
    assert totals.total == Decimal("0.13")


def test_float_rejected():
    with pytest.raises(ValueError):
        to_decimal(0.18)


def test_fmt_money():
    assert fmt_money(Decimal("1234.5")) == "Rs. 1,234.50"
    assert fmt_money("45", "") == "45.00"
