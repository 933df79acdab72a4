"""Payment recording service for MilkBook."""
import logging
from datetime import datetime

from src.config import DATE_FORMAT_STORAGE
from src.result import Result, ErrorType

logger = logging.getLogger(__name__)


class PaymentService:
    """Records payments received from customers.

    Returns Result objects so dialogs can show the error text as-is.
    """

    def __init__(self, db_manager):
        self.db = db_manager

    def record_payment(self, customer_id, amount, payment_date=None, notes=""):
        """Record a payment.

        Args:
            customer_id: ID of the paying customer.
            amount: Amount received, must be greater than zero.
            payment_date: Date in YYYY-MM-DD format. Defaults to today.
            notes: Optional free text.

        Returns:
            Result with the new payment id.
        """
        customer = self.db.get_customer(customer_id)
        if not customer:
            return Result.fail(f"Customer with ID {customer_id} not found", ErrorType.NOT_FOUND)

        try:
            amount = round(float(amount), 2)
        except (TypeError, ValueError):
            return Result.fail("Amount must be a number.", ErrorType.VALIDATION)
        if amount <= 0:
            logger.warning("Rejected payment of %s for %s", amount, customer.name)
            return Result.fail("Amount must be greater than zero.", ErrorType.VALIDATION)

        if not payment_date:
            payment_date = datetime.now().strftime(DATE_FORMAT_STORAGE)
        try:
            datetime.strptime(payment_date, DATE_FORMAT_STORAGE)
        except ValueError:
            return Result.fail("Invalid date format. Expected YYYY-MM-DD.", ErrorType.VALIDATION)

        payment_id = self.db.add_payment(customer.id, payment_date, amount, notes or "")
        logger.info("Recorded payment %s of %.2f from %s", payment_id, amount, customer.name)
        return Result.ok(payment_id)
