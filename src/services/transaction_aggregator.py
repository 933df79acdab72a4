"""Transaction aggregation for account statements.

Merges the orders and payments that match a statement filter into a single
list of Transaction rows, sorted by date.
"""
from datetime import datetime
from typing import List

from src.config import DATE_FORMAT_STORAGE
from src.data_structures import Order, Payment, StatementFilter, Transaction


class TransactionAggregator:
    """Builds statement transactions from a data store.

    The store only needs ``get_filtered_orders`` and ``get_filtered_payments``;
    which dates count as inside the window is decided there.
    """

    ORDER = "order"
    PAYMENT = "payment"

    def __init__(self, store):
        self.store = store

    @staticmethod
    def describe_order(order: Order) -> str:
        items = ", ".join(f"{format_quantity(item.quantity)}x {item.product_name}" for item in order.items)
        return f"Order: {items}"

    @classmethod
    def from_order(cls, order: Order) -> Transaction:
        return Transaction(
            date=order.order_date,
            type=cls.ORDER,
            description=cls.describe_order(order),
            billed=order.total_amount,
            paid=0.0,
            customer_name=order.customer_name,
        )

    @classmethod
    def from_payment(cls, payment: Payment) -> Transaction:
        return Transaction(
            date=payment.payment_date,
            type=cls.PAYMENT,
            description="Payment received",
            billed=0.0,
            paid=payment.amount,
            customer_name=payment.customer_name,
        )

    def aggregate(self, statement_filter: StatementFilter) -> List[Transaction]:
        """Return a new date-ascending list of transactions for the filter.

        Raises:
            ValueError: If a stored date is not YYYY-MM-DD.
        """
        params = dict(
            customer_id=statement_filter.customer_id,
            date_from=statement_filter.date_from,
            date_to=statement_filter.date_to,
        )
        orders = self.store.get_filtered_orders(**params)
        payments = self.store.get_filtered_payments(**params)

        combined = [self.from_order(order) for order in orders]
        combined.extend(self.from_payment(payment) for payment in payments)

        # sorted() is stable, so same-day orders stay ahead of payments
        return sorted(combined, key=lambda tx: datetime.strptime(tx.date, DATE_FORMAT_STORAGE))


def format_quantity(value):
    """Render 2.0 as "2" but keep fractional quantities such as 1.5."""
    value = float(value)
    return str(int(value)) if value.is_integer() else f"{value:g}"
