from __future__ import annotations
from decimal import Decimal, ROUND_HALF_UP

Q2 = Decimal("0.01")


def _group_digits(digits: str, grouping: str) -> str:
    if grouping == "western" or len(digits) <= 3:
        return f"{int(digits):,}"
    # indian: last three digits, then pairs (12,34,567)
    head, tail = digits[:-3], digits[-3:]
    pairs = []
    while len(head) > 2:
        pairs.insert(0, head[-2:])
        head = head[:-2]
    if head:
        pairs.insert(0, head)
    return ",".join(pairs + [tail])


def format_amount(value: Decimal, grouping: str = "indian") -> str:
    """
    Display form of a money amount: two decimals, ROUND_HALF_UP, grouped.

    >>> format_amount(Decimal("1234567.5"))
    '12,34,567.50'
    >>> format_amount(Decimal("1234567.5"), grouping="western")
    '1,234,567.50'
    """
    if grouping not in ("indian", "western"):
        raise ValueError(f"Unknown grouping: {grouping}")
    q = Decimal(value).quantize(Q2, rounding=ROUND_HALF_UP)
    sign = "-" if q < 0 else ""
    whole, frac = f"{abs(q):f}".split(".")
    return f"{sign}{_group_digits(whole, grouping)}.{frac}"
