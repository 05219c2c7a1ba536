"""
Row parsing shared by the Supabase REST and Postgres adapters.

Both sources return plain mappings; this module turns them into the
read-only records of adapters.adapter_types. Handles:
- Amounts as Decimal (never float), including "1,234.50" strings
- Dates as date objects or ISO strings
- Nested voucher_lines (PostgREST embedding) and flat JOIN rows (SQL)
"""
from __future__ import annotations
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable
from loguru import logger
from adapters.adapter_types import Society, Voucher, VoucherLine


def to_decimal(x: Any, default: str = "0") -> Decimal:
    """
    Convert a wire value to Decimal.

    Floats go through str() so 0.1 stays 0.1 and does not become its
    binary expansion. None and empty strings give the default.
    """
    if x is None or x == "":
        return Decimal(default)
    if isinstance(x, Decimal):
        return x
    if isinstance(x, bool):
        raise InvalidOperation(f"Not an amount: {x!r}")
    if isinstance(x, (int, float)):
        return Decimal(str(x))
    s = str(x).replace(",", "").strip()
    try:
        return Decimal(s)
    except InvalidOperation as e:
        raise InvalidOperation(f"Not an amount: {x!r}") from e


def parse_iso_date(s: Any) -> date | None:
    """Parse YYYY-MM-DD (or a timestamp starting with it). Returns None for empty/unparseable."""
    if s is None:
        return None
    if isinstance(s, datetime):
        return s.date()
    if isinstance(s, date):
        return s
    s = str(s).strip()
    if not s:
        return None
    try:
        return date.fromisoformat(s[:10])
    except ValueError:
        logger.warning(f"Could not parse date: {s}")
        return None


def _text(x: Any) -> str | None:
    if x is None:
        return None
    s = str(x).strip()
    return s or None


def society_from_row(row: dict, society_id: str) -> Society:
    return Society(
        society_id=str(row.get("id") or society_id),
        opening_cash=to_decimal(row.get("opening_cash")),
        financial_year_start=parse_iso_date(row.get("financial_year_start")),
    )


def line_from_row(row: dict) -> VoucherLine:
    return VoucherLine(
        line_type=_text(row.get("line_type")),
        side=_text(row.get("side")),
        particulars=(row.get("particulars") or "").strip(),
        cash_amount=to_decimal(row.get("cash_amount")),
        transfer_amount=to_decimal(row.get("transfer_amount")),
    )


def parse_nested_vouchers(rows: Iterable[dict]) -> list[Voucher]:
    """Vouchers with embedded "voucher_lines" arrays, in the order received."""
    out: list[Voucher] = []
    for row in rows:
        out.append(Voucher(
            voucher_id=str(row["id"]),
            voucher_number=_text(row.get("voucher_number")),
            voucher_date=parse_iso_date(row.get("voucher_date")),
            status=(row.get("status") or "").strip().lower(),
            lines=[line_from_row(l) for l in (row.get("voucher_lines") or [])],
        ))
    return out


def group_joined_rows(rows: Iterable[dict]) -> list[Voucher]:
    """
    Fold voucher LEFT JOIN voucher_lines rows into vouchers.

    Rows must arrive grouped by voucher (ORDER BY voucher first). A voucher
    without lines shows up once with NULL line columns and gets lines=[].
    """
    out: list[Voucher] = []
    current: Voucher | None = None
    for row in rows:
        vid = str(row["voucher_id"])
        if current is None or current.voucher_id != vid:
            current = Voucher(
                voucher_id=vid,
                voucher_number=_text(row.get("voucher_number")),
                voucher_date=parse_iso_date(row.get("voucher_date")),
                status=(row.get("status") or "").strip().lower(),
            )
            out.append(current)
        if row.get("line_id") is not None:
            current.lines.append(line_from_row(row))
    return out
