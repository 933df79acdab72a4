"""Totals for a list of statement transactions."""
from typing import Iterable

from src.data_structures import StatementSummary, Transaction


class SummaryCalculator:
    """Reduces transactions into billed, paid and pending totals."""

    @staticmethod
    def summarize(transactions: Iterable[Transaction]) -> StatementSummary:
        """Sum billed and paid amounts.

        Totals are rounded to cents so repeated float additions do not
        leak past two decimals. Pending may be negative after an
        overpayment.
        """
        total_billed = 0.0
        total_paid = 0.0
        for tx in transactions:
            total_billed += tx.billed
            total_paid += tx.paid
        return StatementSummary(total_billed=round(total_billed, 2), total_paid=round(total_paid, 2))
