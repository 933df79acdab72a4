"""Order entry service for MilkBook.

This service validates and records customer orders:
- New orders with line items
- Delivery status changes
- Deletion
"""
import logging
from datetime import datetime

from src.config import DATE_FORMAT_STORAGE, DEFAULT_ORDER_STATUS, ORDER_STATUSES
from src.data_structures import OrderItem
from src.exceptions import CustomerNotFoundError, OrderNotFoundError, ValidationError

logger = logging.getLogger(__name__)


class OrderService:
    """Handles order operations."""

    def __init__(self, db_manager):
        """Initialize OrderService.

        Args:
            db_manager: DatabaseManager instance for data persistence.
        """
        self.db = db_manager

    @staticmethod
    def _validate_items(items):
        if not items:
            raise ValidationError("An order needs at least one item.", "items")

        cleaned = []
        for item in items:
            if isinstance(item, dict):
                item = OrderItem(item.get('product_name', ''), item.get('price', 0), item.get('quantity', 0))
            name = str(item.product_name).strip()
            if not name:
                raise ValidationError("Product name is required.", "product_name")
            try:
                price = float(item.price)
                quantity = float(item.quantity)
            except (TypeError, ValueError):
                raise ValidationError(f"Invalid price or quantity for '{name}'.", "items")
            if price < 0:
                raise ValidationError(f"Price for '{name}' cannot be negative.", "price")
            if quantity <= 0:
                raise ValidationError(f"Quantity for '{name}' must be greater than zero.", "quantity")
            cleaned.append(OrderItem(name, price, quantity))
        return cleaned

    def create_order(self, customer_id, items, order_date=None, status=DEFAULT_ORDER_STATUS):
        """Record an order for a customer.

        Args:
            customer_id: ID of the ordering customer.
            items: OrderItem objects or dicts with product_name, price, quantity.
            order_date: Date in YYYY-MM-DD format. Defaults to today.
            status: One of ORDER_STATUSES.

        Returns:
            The new order id.

        Raises:
            CustomerNotFoundError: If the customer does not exist.
            ValidationError: If the date, status or items are invalid.
        """
        if not self.db.get_customer(customer_id):
            raise CustomerNotFoundError(customer_id=customer_id)

        if not order_date:
            order_date = datetime.now().strftime(DATE_FORMAT_STORAGE)
        try:
            datetime.strptime(order_date, DATE_FORMAT_STORAGE)
        except ValueError:
            raise ValidationError("Invalid date format. Expected YYYY-MM-DD.", "order_date")

        if status not in ORDER_STATUSES:
            raise ValidationError(f"Unknown order status '{status}'.", "status")

        try:
            cleaned = self._validate_items(items)
        except ValidationError as e:
            logger.warning("Rejected order for customer %s: %s", customer_id, e.message)
            raise

        order_id = self.db.add_order(customer_id, order_date, cleaned, status)
        logger.info("Recorded order %s for customer %s", order_id, customer_id)
        return order_id

    def mark_delivered(self, order_id):
        """Flag a pending order as delivered.

        Raises:
            OrderNotFoundError: If the order does not exist.
        """
        if not self.db.update_order_status(order_id, "delivered"):
            raise OrderNotFoundError(order_id)
        logger.info("Order %s marked delivered", order_id)

    def delete_order(self, order_id):
        if not self.db.get_order(order_id):
            raise OrderNotFoundError(order_id)
        self.db.delete_order(order_id)
        logger.info("Deleted order %s", order_id)
