from decimal import Decimal, ROUND_HALF_UP

TWO_PLACES = Decimal("0.01")


def to_money(amount) -> Decimal:
    """Quantize any numeric value to a 2 decimal place Decimal."""
    if amount is None:
        return Decimal("0.00")
    return Decimal(str(amount)).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def format_currency(amount, currency: str = "MAD") -> str:
    """Fixed 2 decimal place display, e.g. `1440.00 MAD`."""
    return f"{to_money(amount):.2f} {currency}".rstrip()
