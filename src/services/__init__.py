"""Services package for MilkBook business logic.

This package contains focused service classes for order entry, payment
recording, statement aggregation and customer history.
"""

from .transaction_aggregator import TransactionAggregator
from .summary_calculator import SummaryCalculator
from .customer_history import CustomerHistoryService
from .order_service import OrderService
from .payment_service import PaymentService

__all__ = ['TransactionAggregator', 'SummaryCalculator', 'CustomerHistoryService',
           'OrderService', 'PaymentService']
