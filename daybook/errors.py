from __future__ import annotations

OPENING_CASH = "opening_cash"
VOUCHERS = "vouchers"


class DayBookError(Exception):
    pass


class NotSelected(DayBookError):
    """No society context; the caller should route to society selection."""


class LoadFailure(DayBookError):
    """One of the external reads failed. `stage` says which one."""

    def __init__(self, message: str, *, stage: str):
        super().__init__(message)
        self.stage = stage
