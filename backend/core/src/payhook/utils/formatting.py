"""Currency formatting for notification emails."""

from decimal import Decimal, InvalidOperation

CURRENCY_SYMBOLS: dict[str, str] = {
    "NGN": "₦",
    "GHS": "GH₵",
    "ZAR": "R",
    "KES": "KSh",
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
}

# All supported currencies use two decimal places
MINOR_UNITS_PER_MAJOR = Decimal(100)


def _with_symbol(amount: Decimal, currency: str) -> str:
    code = (currency or "").upper()
    quantized = amount.quantize(Decimal("0.01"))
    formatted = f"{quantized:,.2f}"
    symbol = CURRENCY_SYMBOLS.get(code)
    if symbol:
        return f"{symbol}{formatted}"
    return f"{code} {formatted}".strip()


def format_minor_units(amount: int, currency: str = "NGN") -> str:
    """Format an amount in minor units, e.g. 500000 NGN -> "₦5,000.00"."""
    return _with_symbol(Decimal(amount) / MINOR_UNITS_PER_MAJOR, currency)


def format_major_units(value: str | int | float | None, currency: str = "NGN") -> str:
    """Format a value already in major units, such as a metadata shipping fee.

    Non-numeric input is returned unchanged so a free-text field never
    breaks rendering.
    """
    if value is None:
        return ""
    try:
        amount = Decimal(str(value).replace(",", "").strip())
    except InvalidOperation:
        return str(value)
    if not amount.is_finite():
        return str(value)
    return _with_symbol(amount, currency)
