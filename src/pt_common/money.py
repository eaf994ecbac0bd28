"""Decimal arithmetic utilities for balances, quantities and prices.

All money and asset quantities are ``Decimal`` with 8 fractional digits,
matching the NUMERIC(28, 8) columns. No float on the write path.
Stripe speaks integer cents; conversion happens only at the gateway boundary.
"""

from decimal import ROUND_HALF_EVEN, ROUND_HALF_UP, Decimal, InvalidOperation, localcontext

SCALE = Decimal("0.00000001")
ZERO = Decimal("0")
_CENT = Decimal("0.01")
# Largest value a NUMERIC(28, 8) column holds
MAX_NUMERIC = Decimal("99999999999999999999.99999999")


def to_decimal(value: object) -> Decimal:
    """Coerce int/str/Decimal to Decimal. Floats go through ``str`` first."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        value = repr(value)
    try:
        return Decimal(value)  # type: ignore[arg-type]
    except (InvalidOperation, TypeError) as exc:
        raise ValueError(f"Not a decimal amount: {value!r}") from exc


def quantize(value: Decimal) -> Decimal:
    """Round to 8 decimal places (banker's rounding).

    Raises ValueError when the value has too many integer digits to carry
    8 decimals in the current context.
    """
    try:
        return value.quantize(SCALE, rounding=ROUND_HALF_EVEN)
    except InvalidOperation as exc:
        raise ValueError(f"Amount out of range: {value}") from exc


def trade_value(quantity: Decimal, price: Decimal) -> Decimal:
    """Total value of ``quantity`` units at ``price``, exact before rounding.

    The result may exceed MAX_NUMERIC; the account repository rejects it.
    """
    with localcontext() as ctx:
        ctx.prec = 64
        return quantize(quantity * price)


def usd_to_cents(amount: Decimal) -> int:
    """12.345 -> 1235 (half-up, the way card processors round)."""
    return int((amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def cents_to_usd(cents: int) -> Decimal:
    """1235 -> Decimal('12.35')."""
    return (Decimal(cents) / 100).quantize(_CENT)


def usd_to_display(amount: Decimal) -> str:
    """Format for humans: 1500 -> '$1,500.00', -12 -> '-$12.00'."""
    rounded = amount.quantize(_CENT, rounding=ROUND_HALF_UP)
    if rounded < 0:
        return f"-${-rounded:,.2f}"
    return f"${rounded:,.2f}"
