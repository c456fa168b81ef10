from decimal import Decimal, ROUND_HALF_UP


def money(x) -> Decimal:
    """Always return 2-decimal Decimal with HALF_UP rounding."""
    if x is None:
        x = 0
    if not isinstance(x, Decimal):
        x = Decimal(str(x))
    return x.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


# Loans count as fully paid within this tolerance
COMPLETION_TOLERANCE = Decimal("0.01")
