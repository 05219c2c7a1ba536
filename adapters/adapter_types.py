from typing import Protocol, Iterable
from enum import Enum
from decimal import Decimal
from pydantic import BaseModel, Field
from datetime import date

class VoucherStatus(str, Enum):
    DRAFT = "draft"
    VERIFIED = "verified"
    APPROVED = "approved"
    POSTED = "posted"
    CANCELLED = "cancelled"

class SocietyNotFound(LookupError):
    """No society row exists for the requested id."""

class Society(BaseModel):
    society_id: str
    opening_cash: Decimal = Field(default=Decimal("0"), ge=0)
    financial_year_start: date | None = None

class VoucherLine(BaseModel):
    line_type: str | None = None     # receipt | payment (day-book screens)
    side: str | None = None          # debit | credit (ledger screens)
    particulars: str = ""
    cash_amount: Decimal = Field(default=Decimal("0"), ge=0)
    transfer_amount: Decimal = Field(default=Decimal("0"), ge=0)

class Voucher(BaseModel):
    voucher_id: str
    voucher_number: str | None = None
    voucher_date: date
    status: VoucherStatus
    lines: list[VoucherLine] = Field(default_factory=list)

class LedgerSource(Protocol):
    def fetch_society(self, society_id: str) -> Society: ...
    def fetch_posted_vouchers(self, society_id: str, since: date, to: date) -> Iterable[Voucher]: ...
