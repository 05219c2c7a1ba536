"""
Shared fixtures for day-book tests.

FakeSource stands in for the hosted database: it returns every voucher in
the requested date range whatever its status, so the deriver's own
filtering gets exercised.
"""
from datetime import date
from decimal import Decimal
import pytest
from adapters.adapter_types import Society, Voucher, VoucherLine

DAY = date(2024, 1, 15)


class FakeSource:
    def __init__(self, opening_cash="10000", vouchers=(), financial_year_start=None):
        self.opening_cash = Decimal(opening_cash)
        self.vouchers = list(vouchers)
        self.financial_year_start = financial_year_start
        self.society_error = None
        self.voucher_error = None
        self.calls = []

    def fetch_society(self, society_id):
        self.calls.append(("society", society_id))
        if self.society_error is not None:
            raise self.society_error
        return Society(
            society_id=society_id,
            opening_cash=self.opening_cash,
            financial_year_start=self.financial_year_start,
        )

    def fetch_posted_vouchers(self, society_id, since, to):
        self.calls.append(("vouchers", society_id, since, to))
        if self.voucher_error is not None:
            raise self.voucher_error
        return [v for v in self.vouchers if since <= v.voucher_date <= to]


def _line(kind, particulars, cash="0", transfer="0", field="line_type"):
    return VoucherLine(
        **{field: kind},
        particulars=particulars,
        cash_amount=Decimal(cash),
        transfer_amount=Decimal(transfer),
    )


def _voucher(voucher_id, *lines, status="posted", on=DAY, number=None):
    return Voucher(
        voucher_id=voucher_id,
        voucher_number=number,
        voucher_date=on,
        status=status,
        lines=list(lines),
    )


@pytest.fixture
def make_line():
    return _line


@pytest.fixture
def make_voucher():
    return _voucher


@pytest.fixture
def fake_source():
    return FakeSource


@pytest.fixture
def scenario_source():
    """opening 10000; one posted voucher: Deposit 5000 cash in, Rent 2000 cash out."""
    return FakeSource(vouchers=[
        _voucher(
            "v-1",
            _line("receipt", "Deposit", cash="5000"),
            _line("payment", "Rent", cash="2000"),
            number="RV-001",
        ),
    ])
