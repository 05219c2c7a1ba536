from __future__ import annotations
import datetime as dt
from decimal import Decimal
from enum import Enum
from pydantic import BaseModel, Field

ZERO = Decimal("0")


class LineClass(str, Enum):
    """Which column of the day book a voucher line lands in."""
    RECEIPT = "receipt"
    PAYMENT = "payment"


class DayBookEntry(BaseModel):
    voucher_id: str
    voucher_number: str | None = None
    line_class: LineClass
    particulars: str
    cash_amount: Decimal
    transfer_amount: Decimal
    total: Decimal


class DayBookSummary(BaseModel):
    society_id: str
    date: dt.date
    opening_cash: Decimal = ZERO
    total_receipts_cash: Decimal = ZERO
    total_receipts_transfer: Decimal = ZERO
    total_receipts: Decimal = ZERO
    total_payments_cash: Decimal = ZERO
    total_payments_transfer: Decimal = ZERO
    total_payments: Decimal = ZERO
    closing_cash: Decimal = ZERO
    is_balanced: bool = True


class DayBook(BaseModel):
    summary: DayBookSummary
    receipts: list[DayBookEntry] = Field(default_factory=list)
    payments: list[DayBookEntry] = Field(default_factory=list)

    @classmethod
    def empty(cls, society_id: str, on_date: dt.date) -> "DayBook":
        """Zero-valued day book: no lines, every total 0."""
        return cls(summary=DayBookSummary(society_id=society_id, date=on_date))

    @property
    def line_count(self) -> int:
        return len(self.receipts) + len(self.payments)
