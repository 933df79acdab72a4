"""Custom exceptions for MilkBook application."""


class MilkBookError(Exception):
    """Base exception for all MilkBook errors."""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self):
        if self.details:
            return f"{self.message} - {self.details}"
        return self.message


class DatabaseError(MilkBookError):
    """Raised when a database operation fails."""
    pass


class TransactionError(DatabaseError):
    """Raised when a database transaction fails to complete."""
    pass


class ValidationError(MilkBookError):
    """Raised when user input for an order, payment or customer is rejected."""

    def __init__(self, message: str, field: str = None):
        details = {'field': field} if field else {}
        super().__init__(message, details)
        self.field = field


class CustomerNotFoundError(MilkBookError):
    """Raised when a customer cannot be found."""

    def __init__(self, customer_id: int = None, name: str = None):
        details = {}
        if customer_id:
            details['customer_id'] = customer_id
        if name:
            details['name'] = name

        message = "Customer not found"
        if name:
            message = f"Customer '{name}' not found"
        elif customer_id:
            message = f"Customer with ID {customer_id} not found"

        super().__init__(message, details)


class OrderNotFoundError(MilkBookError):
    """Raised when an order cannot be found."""

    def __init__(self, order_id: int):
        super().__init__(f"Order with ID {order_id} not found", {'order_id': order_id})
