"""
Location: python/novi_sdk/split.py

Summary:
    Exact split allocation and money conversions. All arithmetic runs on
    integer cents or Decimal values, never binary floats, so shares always
    sum back to the requested total.

Usage:
    Used by types.py to validate split intents, by request.py to plan
    split links, and by builder.py to convert amounts to asset base units.
    Everything here is pure and safe to call concurrently.

Example:
    from novi_sdk.split import allocate

    allocate("10.00", 3)   # [334, 333, 333]
    allocate("9.99", 4)    # [250, 250, 250, 249]
"""

from decimal import Decimal, InvalidOperation, ROUND_DOWN, ROUND_HALF_UP
from typing import Union

Number = Union[Decimal, int, float, str]

CENTS_PER_UNIT = 100


def to_decimal(value: Number) -> Decimal:
    """
    Convert a user-supplied number to Decimal.

    Floats go through their shortest repr (``str(0.1) == "0.1"``) so the
    binary representation error never reaches the cents math.

    Raises:
        ValueError: If the value is not a finite number
    """
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value))
        except InvalidOperation:
            raise ValueError(f"Not a number: {value!r}")
    if not result.is_finite():
        raise ValueError(f"Not a finite number: {value!r}")
    return result


def to_cents(total: Number) -> int:
    """
    Convert a decimal amount to integer cents, rounding half up.

    Args:
        total: Amount in whole currency units (e.g. "10.005")

    Returns:
        Amount in cents (e.g. 1001)
    """
    cents = to_decimal(total) * CENTS_PER_UNIT
    return int(cents.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def cents_to_amount(cents: int) -> Decimal:
    """Convert integer cents to a two-place Decimal amount."""
    return (Decimal(cents) / CENTS_PER_UNIT).quantize(Decimal("0.01"))


def allocate(total: Number, split_count: int) -> list[int]:
    """
    Split a total into per-participant shares in integer cents.

    The first ``totalCents % split_count`` shares carry one extra cent, so
    the result always sums to exactly ``to_cents(total)`` and no two shares
    differ by more than one cent.

    Args:
        total: Total amount in whole currency units, >= 0
        split_count: Number of participants, >= 1 (the requester counts
            as one participant)

    Returns:
        Ordered list of share amounts in cents

    Raises:
        ValueError: If total is negative or split_count < 1
    """
    if isinstance(split_count, bool) or not isinstance(split_count, int):
        raise ValueError(f"split_count must be an integer, got {split_count!r}")
    if split_count < 1:
        raise ValueError(f"split_count must be >= 1, got {split_count}")

    total_cents = to_cents(total)
    if total_cents < 0:
        raise ValueError(f"total must be >= 0, got {total}")

    base, remainder = divmod(total_cents, split_count)
    return [base + 1] * remainder + [base] * (split_count - remainder)


def uniform_share(total: Number, split_count: int) -> int:
    """
    The base share in cents used when one link is shared by everyone.

    Collection with a single shared link falls short of the total by
    ``shortfall(total, split_count)`` cents.
    """
    return to_cents(total) // split_count


def shortfall(total: Number, split_count: int) -> int:
    """Cents lost when every participant pays the uniform base share."""
    return to_cents(total) % split_count


def to_base_units(amount: Number, decimals: int) -> int:
    """
    Convert a decimal amount to asset base units, rounding toward zero.

    Args:
        amount: Amount in whole units (e.g. Decimal("3.34"))
        decimals: Fractional digits of the asset (6 for USDC)

    Returns:
        Integer amount in base units (e.g. 3_340_000)
    """
    scaled = to_decimal(amount) * (Decimal(10) ** decimals)
    return int(scaled.to_integral_value(rounding=ROUND_DOWN))


def from_base_units(units: int, decimals: int) -> Decimal:
    """Convert base units back to a Decimal amount in whole units."""
    return Decimal(units).scaleb(-decimals)
