from PyQt6.QtWidgets import (QDialog, QFormLayout, QLineEdit, QPushButton,
                             QVBoxLayout, QHBoxLayout, QLabel, QDateEdit, QDialogButtonBox,
                             QTableWidget, QTableWidgetItem, QComboBox, QHeaderView,
                             QDoubleSpinBox, QPlainTextEdit, QMessageBox)
from PyQt6.QtCore import QDate
import re

from .config import DEFAULT_ORDER_STATUS, ORDER_STATUSES
from .data_structures import OrderItem

_ERROR_STYLE = "color: #dc3545; font-size: 11px;"
_ERROR_BORDER = "border: 1px solid #dc3545;"


def _error_label():
    label = QLabel()
    label.setStyleSheet(_ERROR_STYLE)
    label.setWordWrap(True)
    label.hide()
    return label


class CustomerDialog(QDialog):
    """Dialog for adding/editing customer details with input validation."""

    def __init__(self, parent=None, name="", phone="", address=""):
        super().__init__(parent)
        self.setWindowTitle("Customer Details")
        self.setMinimumWidth(380)
        self.layout = QFormLayout(self)

        self.name_input = QLineEdit(name)
        self.name_input.setPlaceholderText("Enter full name")
        self.name_error = _error_label()
        name_layout = QVBoxLayout()
        name_layout.setSpacing(2)
        name_layout.addWidget(self.name_input)
        name_layout.addWidget(self.name_error)
        self.layout.addRow("Name:", name_layout)

        self.phone_input = QLineEdit(phone)
        self.phone_input.setPlaceholderText("e.g., +91 98765 43210")
        self.phone_error = _error_label()
        phone_layout = QVBoxLayout()
        phone_layout.setSpacing(2)
        phone_layout.addWidget(self.phone_input)
        phone_layout.addWidget(self.phone_error)
        self.layout.addRow("Phone:", phone_layout)

        self.address_input = QPlainTextEdit(address)
        self.address_input.setPlaceholderText("Delivery address")
        self.address_input.setFixedHeight(70)
        self.layout.addRow("Address:", self.address_input)

        self.name_input.textChanged.connect(self.validate_name)
        self.phone_input.textChanged.connect(self.validate_phone)

        self.save_btn = QPushButton("Save")
        self.save_btn.clicked.connect(self.validate_and_accept)
        self.layout.addRow(self.save_btn)

    def validate_name(self):
        """Validate name field: required, max 100 characters."""
        name = self.name_input.text().strip()
        if not name or len(name) > 100:
            self.name_error.setText("Name is required" if not name else "Name too long (max 100 characters)")
            self.name_error.show()
            self.name_input.setStyleSheet(_ERROR_BORDER)
            return False
        self.name_error.hide()
        self.name_input.setStyleSheet("")
        return True

    def validate_phone(self):
        """Validate phone field: optional, but if provided must be valid format."""
        phone = self.phone_input.text().strip()
        if phone and not re.match(r'^[\d\s\-\+\(\)]{7,20}$', phone):
            self.phone_error.setText("Invalid phone format (use digits, spaces, +, -, parentheses)")
            self.phone_error.show()
            self.phone_input.setStyleSheet(_ERROR_BORDER)
            return False
        self.phone_error.hide()
        self.phone_input.setStyleSheet("")
        return True

    def validate_and_accept(self):
        name_valid = self.validate_name()
        phone_valid = self.validate_phone()
        if name_valid and phone_valid:
            self.accept()

    def get_data(self):
        return (self.name_input.text().strip(),
                self.phone_input.text().strip(),
                self.address_input.toPlainText().strip())


class PaymentDialog(QDialog):
    """Dialog for recording a payment received from a customer."""

    def __init__(self, parent, customer):
        super().__init__(parent)
        self.setWindowTitle(f"Record Payment - {customer.name}")
        self.setMinimumWidth(340)
        layout = QFormLayout(self)

        pending = QLabel(f"Pending balance: {customer.pending_balance:.2f}")
        pending.setStyleSheet("font-weight: bold; color: #b91c1c;")
        layout.addRow(pending)

        self.amount_input = QDoubleSpinBox()
        self.amount_input.setDecimals(2)
        self.amount_input.setRange(0, 10_000_000)
        if customer.pending_balance > 0:
            self.amount_input.setValue(customer.pending_balance)
        layout.addRow("Amount:", self.amount_input)

        self.date_input = QDateEdit(QDate.currentDate())
        self.date_input.setCalendarPopup(True)
        self.date_input.setDisplayFormat("yyyy-MM-dd")
        layout.addRow("Date:", self.date_input)

        self.notes_input = QLineEdit()
        self.notes_input.setPlaceholderText("Optional (e.g. cash, UPI)")
        layout.addRow("Notes:", self.notes_input)

        buttons = QDialogButtonBox(QDialogButtonBox.StandardButton.Ok | QDialogButtonBox.StandardButton.Cancel)
        buttons.accepted.connect(self.accept)
        buttons.rejected.connect(self.reject)
        layout.addRow(buttons)

    def get_data(self):
        return (self.amount_input.value(),
                self.date_input.date().toString("yyyy-MM-dd"),
                self.notes_input.text().strip())


class OrderDialog(QDialog):
    """Dialog for entering an order with one or more line items."""

    def __init__(self, parent, customers, selected_id=None):
        super().__init__(parent)
        self.setWindowTitle("New Order")
        self.setMinimumSize(520, 420)
        layout = QVBoxLayout(self)
        form = QFormLayout()

        self.customer_combo = QComboBox()
        for customer in customers:
            self.customer_combo.addItem(customer.name, customer.id)
        if selected_id is not None:
            idx = self.customer_combo.findData(selected_id)
            if idx >= 0:
                self.customer_combo.setCurrentIndex(idx)
        form.addRow("Customer:", self.customer_combo)

        self.date_input = QDateEdit(QDate.currentDate())
        self.date_input.setCalendarPopup(True)
        self.date_input.setDisplayFormat("yyyy-MM-dd")
        form.addRow("Order Date:", self.date_input)

        self.status_combo = QComboBox()
        self.status_combo.addItems(list(ORDER_STATUSES))
        self.status_combo.setCurrentText(DEFAULT_ORDER_STATUS)
        form.addRow("Status:", self.status_combo)
        layout.addLayout(form)

        self.items_table = QTableWidget(0, 3)
        self.items_table.setHorizontalHeaderLabels(["Product", "Price", "Quantity"])
        self.items_table.horizontalHeader().setSectionResizeMode(0, QHeaderView.ResizeMode.Stretch)
        layout.addWidget(self.items_table)

        row_buttons = QHBoxLayout()
        add_btn = QPushButton("Add Item")
        add_btn.clicked.connect(self.add_item_row)
        remove_btn = QPushButton("Remove Item")
        remove_btn.clicked.connect(self.remove_item_row)
        row_buttons.addWidget(add_btn)
        row_buttons.addWidget(remove_btn)
        row_buttons.addStretch()
        layout.addLayout(row_buttons)

        self.total_label = QLabel("Total: 0.00")
        self.total_label.setStyleSheet("font-weight: bold;")
        layout.addWidget(self.total_label)
        self.items_table.itemChanged.connect(self.update_total)

        buttons = QDialogButtonBox(QDialogButtonBox.StandardButton.Ok | QDialogButtonBox.StandardButton.Cancel)
        buttons.accepted.connect(self.validate_and_accept)
        buttons.rejected.connect(self.reject)
        layout.addWidget(buttons)

        self.add_item_row()

    def add_item_row(self, product="Milk", price="", quantity="1"):
        row = self.items_table.rowCount()
        self.items_table.insertRow(row)
        for col, value in enumerate((product, price, quantity)):
            self.items_table.setItem(row, col, QTableWidgetItem(str(value)))

    def remove_item_row(self):
        row = self.items_table.currentRow()
        if row >= 0:
            self.items_table.removeRow(row)
            self.update_total()

    def _cell_text(self, row, col):
        item = self.items_table.item(row, col)
        return item.text().strip() if item else ""

    def get_items(self):
        """Read line items; raises ValueError on a non-numeric price or quantity."""
        items = []
        for row in range(self.items_table.rowCount()):
            name = self._cell_text(row, 0)
            if not name:
                continue
            items.append(OrderItem(name, float(self._cell_text(row, 1) or 0), float(self._cell_text(row, 2) or 0)))
        return items

    def update_total(self, *_):
        try:
            total = sum(item.line_total for item in self.get_items())
        except ValueError:
            self.total_label.setText("Total: -")
            return
        self.total_label.setText(f"Total: {total:.2f}")

    def validate_and_accept(self):
        try:
            items = self.get_items()
        except ValueError:
            QMessageBox.warning(self, "Invalid Item", "Price and quantity must be numbers.")
            return
        if not items:
            QMessageBox.warning(self, "No Items", "Add at least one product to the order.")
            return
        self.accept()

    def get_data(self):
        return (self.customer_combo.currentData(),
                self.date_input.date().toString("yyyy-MM-dd"),
                self.status_combo.currentText(),
                self.get_items())
