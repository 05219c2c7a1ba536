"""
CoopLedger Day Book - receipts/payments ledger and cash reconciliation.

Derives the day book of a cooperative society for one date from its
posted vouchers, read from the hosted Postgres database (Supabase REST or
a direct connection). Nothing is written back.

Key Features:
- Receipts / payments columns with cash, transfer and total subtotals
- Closing cash = opening cash + cash receipts - cash payments (Decimal)
- Concurrent reads with stale-response protection
- Text, HTML and JSON reports

Usage:
    # Today's day book for the selected society
    python -m daybook

    # A specific date
    python -m daybook --date 2024-01-15
"""

__version__ = "0.1.0"

from .config import DayBookConfig
from .deriver import compute_day_book, derive_day_book, classify_line
from .errors import NotSelected, LoadFailure
from .models import DayBook, DayBookEntry, DayBookSummary, LineClass
from .session import DayBookContext, DayBookSession, LoadOutcome

__all__ = [
    "DayBookConfig",
    "compute_day_book",
    "derive_day_book",
    "classify_line",
    "NotSelected",
    "LoadFailure",
    "DayBook",
    "DayBookEntry",
    "DayBookSummary",
    "LineClass",
    "DayBookContext",
    "DayBookSession",
    "LoadOutcome",
    "__version__",
]
