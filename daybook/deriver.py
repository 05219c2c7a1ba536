"""
Day-book derivation.

Turns the posted vouchers of one date into the receipts / payments columns
and reconciles the cash:

    closing_cash = opening_cash + receipts cash - payments cash

Transfer amounts count towards the column totals but never move cash.
All arithmetic is Decimal.
"""
from __future__ import annotations
from concurrent.futures import Executor, wait
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Iterable, Optional, Union
from loguru import logger
from adapters.adapter_types import LedgerSource, Society, Voucher, VoucherLine, VoucherStatus
from .errors import NotSelected, LoadFailure, OPENING_CASH, VOUCHERS
from .models import DayBook, DayBookEntry, DayBookSummary, LineClass, ZERO

STATIC = "static"
RUNNING = "running"

# Two line models exist upstream: line_type (receipt|payment) on the day-book
# screens and side (debit|credit) on the ledger screens. Receipt is debit and
# payment is credit only by convention, so the mapping is spelled out here.
LINE_CLASS_BY_FIELD = {
    "line_type": {"receipt": LineClass.RECEIPT, "payment": LineClass.PAYMENT},
    "side": {"debit": LineClass.RECEIPT, "credit": LineClass.PAYMENT},
}


def classify_line(line: VoucherLine) -> LineClass:
    """
    Map a voucher line to RECEIPT or PAYMENT.

    line_type is consulted before side; the first recognised value wins.
    Anything unrecognised is booked as a payment (and logged) so that every
    line still lands in exactly one column.
    """
    seen = []
    for field_name, mapping in LINE_CLASS_BY_FIELD.items():
        raw = getattr(line, field_name)
        if raw is None:
            continue
        value = raw.strip().lower()
        if value in mapping:
            return mapping[value]
        seen.append(f"{field_name}={raw!r}")
    detail = ", ".join(seen) if seen else "no line_type or side"
    logger.warning(f"Unclassified line {line.particulars!r} ({detail}); booking as payment")
    return LineClass.PAYMENT


def parse_day(on_date: Union[date, str, None]) -> date:
    """Accept a date, a YYYY-MM-DD string, or None for today."""
    if on_date is None or on_date == "":
        return date.today()
    if isinstance(on_date, datetime):
        return on_date.date()
    if isinstance(on_date, date):
        return on_date
    return date.fromisoformat(str(on_date).strip())


def _entry(voucher: Voucher, line: VoucherLine) -> DayBookEntry:
    return DayBookEntry(
        voucher_id=voucher.voucher_id,
        voucher_number=voucher.voucher_number,
        line_class=classify_line(line),
        particulars=line.particulars,
        cash_amount=line.cash_amount,
        transfer_amount=line.transfer_amount,
        total=line.cash_amount + line.transfer_amount,
    )


def _eligible(voucher: Voucher, on_date: date | None = None) -> bool:
    if voucher.status != VoucherStatus.POSTED:
        logger.warning(f"Skipping voucher {voucher.voucher_id}: status is {voucher.status.value}")
        return False
    if on_date is not None and voucher.voucher_date != on_date:
        logger.warning(f"Skipping voucher {voucher.voucher_id}: dated {voucher.voucher_date}, not {on_date}")
        return False
    return True


def _column_totals(entries: list[DayBookEntry]) -> tuple[Decimal, Decimal, Decimal]:
    cash = sum((e.cash_amount for e in entries), ZERO)
    transfer = sum((e.transfer_amount for e in entries), ZERO)
    return cash, transfer, cash + transfer


def derive_day_book(
    society_id: str,
    on_date: date,
    opening_cash: Decimal,
    vouchers: Iterable[Voucher],
) -> DayBook:
    """
    Pure part of the day book: partition, aggregate, reconcile.

    Lines keep fetch order within each column. Non-posted vouchers and
    vouchers dated on another day contribute nothing.
    """
    receipts: list[DayBookEntry] = []
    payments: list[DayBookEntry] = []
    for voucher in vouchers:
        if not _eligible(voucher, on_date):
            continue
        for line in voucher.lines:
            entry = _entry(voucher, line)
            if entry.line_class is LineClass.RECEIPT:
                receipts.append(entry)
            else:
                payments.append(entry)

    r_cash, r_transfer, r_total = _column_totals(receipts)
    p_cash, p_transfer, p_total = _column_totals(payments)

    summary = DayBookSummary(
        society_id=society_id,
        date=on_date,
        opening_cash=opening_cash,
        total_receipts_cash=r_cash,
        total_receipts_transfer=r_transfer,
        total_receipts=r_total,
        total_payments_cash=p_cash,
        total_payments_transfer=p_transfer,
        total_payments=p_total,
        closing_cash=opening_cash + r_cash - p_cash,
        is_balanced=r_total == p_total,
    )
    return DayBook(summary=summary, receipts=receipts, payments=payments)


def net_cash_movement(vouchers: Iterable[Voucher]) -> Decimal:
    """Receipt cash minus payment cash over posted vouchers (any dates)."""
    net = ZERO
    for voucher in vouchers:
        if not _eligible(voucher):
            continue
        for line in voucher.lines:
            if classify_line(line) is LineClass.RECEIPT:
                net += line.cash_amount
            else:
                net -= line.cash_amount
    return net


def financial_year_start(society: Society, on_date: date) -> date:
    """Society's configured FY start, else April 1 of the FY containing on_date."""
    if society.financial_year_start is not None:
        return society.financial_year_start
    fy_start_year = on_date.year if on_date.month >= 4 else on_date.year - 1
    return date(fy_start_year, 4, 1)


def _read_society(source: LedgerSource, society_id: str) -> Society:
    try:
        return source.fetch_society(society_id)
    except Exception as e:
        logger.error(f"Opening cash lookup failed for society {society_id}: {e}")
        raise LoadFailure(f"Could not load opening cash: {e}", stage=OPENING_CASH) from e


def _read_vouchers(
    source: LedgerSource,
    society_id: str,
    since: date,
    to: date,
    stage: str = VOUCHERS,
) -> list[Voucher]:
    try:
        return list(source.fetch_posted_vouchers(society_id, since, to))
    except Exception as e:
        logger.error(f"Voucher fetch failed for society {society_id} ({since}..{to}): {e}")
        raise LoadFailure(f"Could not load vouchers: {e}", stage=stage) from e


def _running_opening(source: LedgerSource, society_id: str, society: Society, on_date: date) -> Decimal:
    fy_start = financial_year_start(society, on_date)
    if on_date <= fy_start:
        return society.opening_cash
    prior = _read_vouchers(
        source, society_id, fy_start, on_date - timedelta(days=1), stage=OPENING_CASH
    )
    movement = net_cash_movement(prior)
    logger.debug(f"Carried forward {movement} cash from {fy_start} to {on_date}")
    return society.opening_cash + movement


def compute_day_book(
    source: LedgerSource,
    society_id: Optional[str],
    on_date: Union[date, str, None] = None,
    *,
    opening_mode: str = STATIC,
    executor: Optional[Executor] = None,
) -> DayBook:
    """
    Read opening cash and the day's posted vouchers, then derive the day book.

    Args:
        source: Where societies and vouchers are read from
        society_id: Selected society; missing or blank raises NotSelected
        on_date: Day to show (date or YYYY-MM-DD), today if None
        opening_mode: "static" uses the society's opening_cash as-is;
            "running" adds the net cash of the financial year up to the day before
        executor: When given, both reads run on it concurrently and are joined
            before anything is derived

    Raises:
        NotSelected: no society context
        LoadFailure: a read failed (stage tells which)
    """
    if society_id is None or not str(society_id).strip():
        raise NotSelected("No society selected")
    if opening_mode not in (STATIC, RUNNING):
        raise ValueError(f"Unknown opening mode: {opening_mode}. Valid: {STATIC}, {RUNNING}")
    society_id = str(society_id).strip()
    day = parse_day(on_date)

    if executor is None:
        society = _read_society(source, society_id)
        vouchers = _read_vouchers(source, society_id, day, day)
    else:
        society_future = executor.submit(_read_society, source, society_id)
        vouchers_future = executor.submit(_read_vouchers, source, society_id, day, day)
        wait([society_future, vouchers_future])
        society = society_future.result()
        vouchers = vouchers_future.result()

    opening = society.opening_cash
    if opening_mode == RUNNING:
        opening = _running_opening(source, society_id, society, day)

    day_book = derive_day_book(society_id, day, opening, vouchers)
    s = day_book.summary
    logger.info(
        f"Day book {society_id} {day}: {len(day_book.receipts)} receipts, "
        f"{len(day_book.payments)} payments, closing cash {s.closing_cash}"
    )
    return day_book
