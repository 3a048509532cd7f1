"""Decimal money helpers"""

from decimal import Decimal, ROUND_HALF_UP

CENT = Decimal("0.01")


def round_cents(amount: Decimal) -> Decimal:
    """Round to two decimal places, halves away from zero"""
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)
