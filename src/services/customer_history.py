"""Customer order history shown in the customer details dialog."""
from datetime import datetime
from typing import Callable, List, Optional

from src.config import DATE_FORMAT_STORAGE
from src.data_structures import (
    Customer, CustomerHistory, Order, OrderHistoryEntry, StatementConfig
)
from src.services.transaction_aggregator import format_quantity


class CustomerHistoryService:
    """Prepares one customer's order history for display.

    Balance figures come from the customer record itself; the order list
    only drives the history section.
    """

    def __init__(self, db_manager, on_record_payment: Callable[[Customer], None] = None,
                 config: StatementConfig = None):
        """Initialize CustomerHistoryService.

        Args:
            db_manager: DatabaseManager used to load orders when none are given.
            on_record_payment: Callback that starts the payment flow for a customer.
            config: Formatting options. Defaults to StatementConfig().
        """
        self.db = db_manager
        self.on_record_payment = on_record_payment
        self.config = config or StatementConfig()

    def customer_orders(self, customer: Customer, orders: Optional[List[Order]] = None) -> List[Order]:
        """Orders belonging to the customer, most recent first."""
        if orders is None:
            orders = self.db.get_orders()
        mine = [order for order in orders if order.customer_id == customer.id]
        return sorted(mine, key=lambda o: datetime.strptime(o.order_date, DATE_FORMAT_STORAGE), reverse=True)

    def _entry(self, order: Order) -> OrderHistoryEntry:
        cfg = self.config
        item_lines = [
            (f"{format_quantity(item.quantity)}x {item.product_name}",
             f"(@ {cfg.money(item.price)})",
             cfg.money(item.line_total))
            for item in order.items
        ]
        return OrderHistoryEntry(
            order_id=order.id,
            heading=f"Order on {cfg.format_date(order.order_date, cfg.display_date_format)}",
            status=order.status,
            item_lines=item_lines,
            total_line=f"Order Total: {cfg.money(order.total_amount)}",
        )

    def build(self, customer: Customer, orders: Optional[List[Order]] = None) -> CustomerHistory:
        history_orders = self.customer_orders(customer, orders)
        return CustomerHistory(
            customer=customer,
            orders=history_orders,
            entries=[self._entry(order) for order in history_orders],
            total_billed=self.config.money(customer.total_amount),
            total_paid=self.config.money(customer.paid_amount),
            pending=self.config.money(customer.pending_balance),
        )

    def reload(self, customer: Customer) -> Optional[CustomerHistory]:
        """Rebuild the history from fresh store data, or None if the customer is gone."""
        fresh = self.db.get_customer(customer.id)
        return self.build(fresh) if fresh else None

    def record_payment(self, customer: Customer):
        """Hand the customer to the payment recording flow."""
        if self.on_record_payment is None:
            raise RuntimeError("No payment recorder configured")
        return self.on_record_payment(customer)
