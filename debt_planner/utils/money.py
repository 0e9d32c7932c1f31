"""Fixed-point money helpers (amounts are integer cents)"""

from decimal import Decimal, ROUND_HALF_UP

CENT = Decimal("1")
HUNDRED = Decimal("100")


def round_cents(amount: Decimal) -> int:
    """Round a fractional cent amount half-up to whole cents"""
    return int(amount.quantize(CENT, rounding=ROUND_HALF_UP))


def dollars_to_cents(dollars: Decimal) -> int:
    return round_cents(dollars * HUNDRED)
