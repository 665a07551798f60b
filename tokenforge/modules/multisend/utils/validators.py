import re
from collections.abc import Iterable
from decimal import Decimal, Inexact, InvalidOperation, localcontext

from tokenforge.common.exceptions import (
    InvalidAddressError,
    InvalidAmountError,
    MissingValueError,
)

ADDRESS_PATTERN = re.compile(r"^0x[0-9a-fA-F]{40}$")

# uint256 cabe en 78 dígitos; con estos límites toda la aritmética de montos es exacta
MAX_INTEGER_DIGITS = 78
MAX_FRACTION_DIGITS = 100
AMOUNT_PRECISION = 200


def check_address(address: str | None, field: str = "address") -> str:
    """Trim and validate a 20-byte hex account; the original casing is kept."""
    cleaned = (address or "").strip()
    if not cleaned:
        raise MissingValueError(field)
    if not ADDRESS_PATTERN.match(cleaned):
        raise InvalidAddressError(cleaned)
    return cleaned


def parse_amount(amount: str | int | float | Decimal | None, field: str = "amount") -> Decimal:
    cleaned = str(amount).strip() if amount is not None else ""
    if not cleaned:
        raise MissingValueError(field)

    try:
        value = Decimal(cleaned)
    except InvalidOperation:
        raise InvalidAmountError(cleaned, "not a number") from None

    if not value.is_finite():
        raise InvalidAmountError(cleaned, "must be finite")
    if value <= 0:
        raise InvalidAmountError(cleaned, "must be greater than 0")
    if value.adjusted() >= MAX_INTEGER_DIGITS:
        raise InvalidAmountError(cleaned, f"more than {MAX_INTEGER_DIGITS} integer digits")
    if -value.as_tuple().exponent > MAX_FRACTION_DIGITS:
        raise InvalidAmountError(cleaned, f"more than {MAX_FRACTION_DIGITS} decimal places")
    return value


def check_amount(amount: str | int | float | Decimal | None, field: str = "amount") -> str:
    """Validate an amount and return it as a trimmed decimal string."""
    parse_amount(amount, field)
    return str(amount).strip()


def sum_amounts(amounts: Iterable[str]) -> Decimal:
    """Exact sum of validated amounts; never rounds."""
    values = [parse_amount(a) for a in amounts]
    with localcontext() as ctx:
        ctx.prec = AMOUNT_PRECISION
        ctx.traps[Inexact] = True
        return sum(values, Decimal(0))


def to_base_units(amount: str, decimals: int) -> int:
    """Convert a decimal string to integer base units (wei for 18 decimals)."""
    value = parse_amount(amount)
    with localcontext() as ctx:
        ctx.prec = AMOUNT_PRECISION
        ctx.traps[Inexact] = True
        scaled = value.scaleb(decimals)
    if scaled != scaled.to_integral_value():
        raise InvalidAmountError(amount, f"more than {decimals} decimal places")
    return int(scaled)
