from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from src import config


@dataclass
class Customer:
    """A customer with balance figures derived from their orders and payments."""
    id: int
    name: str
    phone: str = ""
    address: str = ""
    total_amount: float = 0.0
    paid_amount: float = 0.0
    pending_balance: float = 0.0
    created_at: Optional[str] = None


@dataclass
class OrderItem:
    product_name: str
    price: float
    quantity: float

    @property
    def line_total(self) -> float:
        return round(self.price * self.quantity, 2)


@dataclass
class Order:
    id: int
    customer_id: int
    customer_name: str
    order_date: str
    status: str
    items: List[OrderItem]
    total_amount: float


@dataclass
class Payment:
    id: int
    customer_id: int
    customer_name: str
    payment_date: str
    amount: float
    notes: str = ""


@dataclass(frozen=True)
class StatementFilter:
    """Active statement window. customer_id None means all customers."""
    date_from: str
    date_to: str
    customer_id: Optional[int] = None

    @property
    def has_customer(self) -> bool:
        return self.customer_id is not None


@dataclass
class Transaction:
    """One order (billing event) or one payment (receipt event) on a statement."""
    date: str
    type: str
    description: str
    billed: float
    paid: float
    customer_name: str


@dataclass
class StatementSummary:
    total_billed: float = 0.0
    total_paid: float = 0.0

    @property
    def pending(self) -> float:
        return round(self.total_billed - self.total_paid, 2)


@dataclass(frozen=True)
class StatementColumn:
    key: str
    header: str
    align: str = "left"


class StatementColumns:
    """Column layout shared by the table view, the PDF and the CSV export."""

    DATE = StatementColumn("date", "Date")
    CUSTOMER = StatementColumn("customer", "Customer")
    DESCRIPTION = StatementColumn("description", "Description")
    BILLED = StatementColumn("billed", "Billed", "right")
    PAID = StatementColumn("paid", "Paid", "right")

    @classmethod
    def for_filter(cls, statement_filter: StatementFilter) -> List[StatementColumn]:
        """Customer column is shown only when no single customer is selected."""
        columns = [cls.DATE]
        if not statement_filter.has_customer:
            columns.append(cls.CUSTOMER)
        columns.extend([cls.DESCRIPTION, cls.BILLED, cls.PAID])
        return columns


@dataclass
class StatementPresentation:
    statement_filter: StatementFilter
    customer_name: str
    period_display: str
    columns: List[StatementColumn]
    transactions: List[Transaction]
    summary: StatementSummary

    @property
    def headers(self) -> List[str]:
        return [col.header for col in self.columns]

    @property
    def includes_customer(self) -> bool:
        return StatementColumns.CUSTOMER in self.columns


@dataclass
class StatementTable:
    headers: List[str]
    alignments: List[str]
    rows: List[List[str]]
    empty_message: str = "No transactions found"
    empty_hint: str = "Try adjusting your filters to see results"

    @property
    def is_empty(self) -> bool:
        return not self.rows


@dataclass
class StatementDocument:
    organization: str
    title: str
    header_lines: List[str]
    head: List[str]
    body: List[List[str]]
    alignments: List[str]
    footer_lines: List[str]
    filename: str


@dataclass
class OrderHistoryEntry:
    order_id: int
    heading: str
    status: str
    item_lines: List[tuple]
    total_line: str

    @property
    def can_mark_delivered(self) -> bool:
        return self.status == "pending"


@dataclass
class CustomerHistory:
    customer: Customer
    orders: List[Order]
    entries: List[OrderHistoryEntry]
    total_billed: str
    total_paid: str
    pending: str
    empty_message: str = "No orders placed by this customer yet."

    @property
    def is_empty(self) -> bool:
        return not self.orders


@dataclass
class StatementConfig:
    organization_name: str = config.ORGANIZATION_NAME
    title: str = config.STATEMENT_TITLE
    currency_symbol: str = config.CURRENCY_SYMBOL
    placeholder: str = config.AMOUNT_PLACEHOLDER
    display_date_format: str = config.DATE_FORMAT_DISPLAY
    document_date_format: str = config.DATE_FORMAT_DOCUMENT
    header_color: str = config.PDF_HEADER_COLOR
    font_candidates: List[tuple] = field(default_factory=lambda: list(config.PDF_FONT_CANDIDATES))

    @classmethod
    def from_settings(cls, db_manager) -> 'StatementConfig':
        """Build a config honouring overrides saved in the settings table."""
        return cls(
            organization_name=db_manager.get_setting("organization_name", config.ORGANIZATION_NAME),
            currency_symbol=db_manager.get_setting("currency_symbol", config.CURRENCY_SYMBOL),
        )

    def money(self, amount: float, symbol: str = None) -> str:
        if symbol is None:
            symbol = self.currency_symbol
        return f"{symbol}{amount:.2f}"

    def money_or_placeholder(self, amount: float, symbol: str = None) -> str:
        return self.money(amount, symbol) if amount > 0 else self.placeholder

    @staticmethod
    def format_date(date_str: str, fmt: str) -> str:
        return datetime.strptime(date_str, config.DATE_FORMAT_STORAGE).strftime(fmt)
