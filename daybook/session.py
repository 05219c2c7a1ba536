"""
Day-book session: the stateful edge around compute_day_book.

A session holds the last day book shown for one society, reloads it when
the context ({society_id, date}) changes, and turns failures into
notifications instead of exceptions.

Rules:
- Both reads run concurrently and are joined before derivation
- Every load gets a generation number; a load that finishes after a newer
  one has started is discarded (outcome SUPERSEDED), success or failure
- Opening-cash failure clears state to an empty day book for the requested date
- Voucher failure keeps the last good day book (it carries its own date)
- No society selected calls on_not_selected and leaves state alone
"""
from __future__ import annotations
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, replace
from datetime import date
from enum import Enum
from typing import Callable, Optional, Union
from loguru import logger
from adapters.adapter_types import LedgerSource
from .deriver import compute_day_book, parse_day, STATIC
from .errors import NotSelected, LoadFailure, OPENING_CASH
from .models import DayBook

LOAD_FAILED_MESSAGE = "Failed to load day book data"


class LoadOutcome(str, Enum):
    OK = "ok"
    NOT_SELECTED = "not_selected"
    LOAD_FAILURE = "load_failure"
    SUPERSEDED = "superseded"


@dataclass(frozen=True)
class DayBookContext:
    """What to show. Passed by value; the session never reads ambient storage."""
    society_id: Optional[str]
    date: date

    @classmethod
    def for_day(cls, society_id: Optional[str], on_date: Union[date, str, None] = None) -> "DayBookContext":
        return cls(society_id=society_id, date=parse_day(on_date))

    def with_date(self, on_date: Union[date, str, None]) -> "DayBookContext":
        return replace(self, date=parse_day(on_date))


def _log_notification(message: str) -> None:
    logger.error(message)


def _log_not_selected() -> None:
    logger.warning("No society selected; choose one before opening the day book")


class DayBookSession:
    """
    Usage:
        with DayBookSession(source, notify=toast) as session:
            session.load(DayBookContext.for_day("soc-1", "2024-01-15"))
            session.day_book.summary.closing_cash
    """

    def __init__(
        self,
        source: LedgerSource,
        *,
        notify: Callable[[str], None] = _log_notification,
        on_not_selected: Callable[[], None] = _log_not_selected,
        opening_mode: str = STATIC,
        max_workers: int = 4,
    ):
        self.source = source
        self.notify = notify
        self.on_not_selected = on_not_selected
        self.opening_mode = opening_mode
        self.day_book: Optional[DayBook] = None
        self.context: Optional[DayBookContext] = None
        self.last_error: Optional[LoadFailure] = None
        self._generation = 0
        self._lock = threading.Lock()
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="daybook")

    def _is_current(self, generation: int) -> bool:
        return generation == self._generation

    def load(self, context: DayBookContext) -> LoadOutcome:
        """Recompute the day book for `context`, replacing prior results entirely."""
        with self._lock:
            self._generation += 1
            generation = self._generation
            self.context = context

        try:
            day_book = compute_day_book(
                self.source,
                context.society_id,
                context.date,
                opening_mode=self.opening_mode,
                executor=self._executor,
            )
        except NotSelected:
            with self._lock:
                if not self._is_current(generation):
                    return LoadOutcome.SUPERSEDED
            self.on_not_selected()
            return LoadOutcome.NOT_SELECTED
        except LoadFailure as e:
            with self._lock:
                if not self._is_current(generation):
                    logger.debug(f"Dropping failure of superseded load for {context.date}: {e}")
                    return LoadOutcome.SUPERSEDED
                self.last_error = e
                if e.stage == OPENING_CASH:
                    self.day_book = DayBook.empty(str(context.society_id).strip(), context.date)
            self.notify(LOAD_FAILED_MESSAGE)
            return LoadOutcome.LOAD_FAILURE

        with self._lock:
            if not self._is_current(generation):
                logger.debug(f"Dropping superseded day book for {context.date}")
                return LoadOutcome.SUPERSEDED
            self.day_book = day_book
            self.last_error = None
        return LoadOutcome.OK

    def change_date(self, on_date: Union[date, str, None]) -> LoadOutcome:
        """Reload for another date under the current society."""
        if self.context is None:
            raise RuntimeError("change_date() called before load()")
        return self.load(self.context.with_date(on_date))

    def close(self):
        self._executor.shutdown(wait=True)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
