"""UI State Manager for MilkBook.

This module holds the filter state of the Account Statements page: the
selected customer, the date range and the quick-period shortcut.
"""
import logging
from datetime import date
from typing import Callable, Optional

from dateutil.relativedelta import relativedelta, MO, TU, WE, TH, FR, SA, SU

from src.config import (
    CUSTOM_PERIOD, DATE_FORMAT_STORAGE, DEFAULT_PERIOD, DEFAULT_WEEK_START
)
from src.data_structures import StatementFilter

logger = logging.getLogger(__name__)

_WEEKDAYS = (MO, TU, WE, TH, FR, SA, SU)


def period_bounds(period: str, today: date, week_start: int = DEFAULT_WEEK_START):
    """Return (start, end) dates for a quick period, or None for unknown labels.

    Args:
        period: "today", "week" or "month".
        today: Reference date.
        week_start: First day of the week, 0 = Monday ... 6 = Sunday.
    """
    if period == "today":
        return today, today
    if period == "week":
        start = today + relativedelta(weekday=_WEEKDAYS[week_start](-1))
        return start, start + relativedelta(days=6)
    if period == "month":
        start = today.replace(day=1)
        return start, start + relativedelta(months=1, days=-1)
    return None


class StatementFilterState:
    """Manages filter state for the Account Statements page.

    Attributes:
        customer_id: Selected customer, or None for all customers.
        date_from: Inclusive start date (YYYY-MM-DD).
        date_to: Inclusive end date (YYYY-MM-DD).
        period: Active quick period label, or "custom" after a manual edit.
        on_changed: Callback invoked with the new StatementFilter.
    """

    def __init__(self, on_changed: Callable[[StatementFilter], None] = None,
                 week_start: int = DEFAULT_WEEK_START,
                 today_provider: Callable[[], date] = date.today):
        """Initialize StatementFilterState on the default quick period.

        Args:
            on_changed: Optional callback invoked after every change.
            week_start: First day of the week, 0 = Monday ... 6 = Sunday.
            today_provider: Returns the current date.
        """
        self.on_changed = on_changed
        self.week_start = int(week_start) % 7
        self._today = today_provider
        self.customer_id: Optional[int] = None
        self.period = CUSTOM_PERIOD
        self.date_from = ""
        self.date_to = ""
        self._apply_period(DEFAULT_PERIOD, self._today())

    @classmethod
    def from_settings(cls, db_manager, on_changed=None, **kwargs) -> 'StatementFilterState':
        raw = db_manager.get_setting("week_start", DEFAULT_WEEK_START)
        try:
            week_start = int(raw)
        except (TypeError, ValueError):
            logger.warning("Ignoring invalid week_start setting %r", raw)
            week_start = DEFAULT_WEEK_START
        return cls(on_changed=on_changed, week_start=week_start, **kwargs)

    def _apply_period(self, period: str, today: date) -> None:
        bounds = period_bounds(period, today, self.week_start)
        if bounds:
            start, end = bounds
            self.date_from = start.strftime(DATE_FORMAT_STORAGE)
            self.date_to = end.strftime(DATE_FORMAT_STORAGE)
        self.period = period

    def _notify(self) -> None:
        if self.on_changed:
            self.on_changed(self.to_filter())

    def select_period(self, period: str, today: date = None) -> None:
        """Set both bounds from a quick period, replacing any custom range.

        Unknown labels keep the current bounds.
        """
        self._apply_period(period, today or self._today())
        self._notify()

    def set_date_from(self, value: str) -> None:
        self.date_from = value
        self.period = CUSTOM_PERIOD
        self._notify()

    def set_date_to(self, value: str) -> None:
        self.date_to = value
        self.period = CUSTOM_PERIOD
        self._notify()

    def set_customer(self, customer_id: Optional[int]) -> None:
        """Select a customer; None or "" means all customers."""
        self.customer_id = customer_id if customer_id not in ("", None) else None
        self._notify()

    def to_filter(self) -> StatementFilter:
        return StatementFilter(date_from=self.date_from, date_to=self.date_to, customer_id=self.customer_id)
