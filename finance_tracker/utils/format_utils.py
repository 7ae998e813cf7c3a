"""Money and percentage formatting"""

from decimal import ROUND_HALF_UP, Decimal


def to_cents(amount: Decimal) -> int:
    """Convert a decimal currency amount to integer cents (half-up rounding)"""
    return int((Decimal(amount) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def format_currency(amount_cents: int, currency_symbol: str = "$") -> str:
    """12345 -> $123.45, -500 -> -$5.00"""
    sign = "-" if amount_cents < 0 else ""
    whole, cents = divmod(abs(amount_cents), 100)
    return f"{sign}{currency_symbol}{whole:,}.{cents:02d}"


def format_percentage(value: float, decimal_places: int = 2) -> str:
    return f"{value:.{decimal_places}f}%"
