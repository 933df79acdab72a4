"""Customers view and customer details dialog for MilkBook."""
import logging

from PyQt6.QtWidgets import (QWidget, QVBoxLayout, QHBoxLayout, QGridLayout, QLabel,
                             QPushButton, QTableWidget, QTableWidgetItem, QLineEdit,
                             QHeaderView, QDialog, QScrollArea, QFrame, QMessageBox)
from PyQt6.QtCore import Qt

from src.dialogs import CustomerDialog, OrderDialog, PaymentDialog
from src.exceptions import MilkBookError
from src.services import CustomerHistoryService, OrderService, PaymentService

logger = logging.getLogger(__name__)

_STATUS_STYLES = {
    "delivered": "background: #dcfce7; color: #166534;",
    "pending": "background: #fef9c3; color: #854d0e;",
}


class CustomerDetailsDialog(QDialog):
    """Full financial and order history for one customer."""

    def __init__(self, parent, customer, history_service, on_mark_delivered=None, on_delete_order=None):
        """Initialize CustomerDetailsDialog.

        Args:
            parent: Parent widget.
            customer: Customer to show.
            history_service: CustomerHistoryService building the history.
            on_mark_delivered: Callback(order_id) -> bool for the order cards.
            on_delete_order: Callback(order_id) -> bool for the order cards.
        """
        super().__init__(parent)
        self.customer = customer
        self.history_service = history_service
        self.on_mark_delivered = on_mark_delivered
        self.on_delete_order = on_delete_order
        self.setWindowTitle(f"{customer.name}'s Account")
        self.setMinimumSize(640, 620)

        history = history_service.build(customer)
        layout = QVBoxLayout(self)

        title = QLabel(f"{customer.name}'s Account")
        title.setStyleSheet("font-size: 20px; font-weight: bold; color: #111827;")
        layout.addWidget(title)
        subtitle = QLabel("Full financial and order history")
        subtitle.setStyleSheet("color: #4B5563;")
        layout.addWidget(subtitle)

        info = QFrame()
        info.setStyleSheet("QFrame { background: #F9FAFB; border-radius: 8px; }")
        info_layout = QGridLayout(info)
        info_layout.addWidget(QLabel(f"<b>Name:</b> {customer.name}"), 0, 0)
        info_layout.addWidget(QLabel(f"<b>Phone:</b> {customer.phone}"), 0, 1)
        address = QLabel(f"<b>Address:</b> {customer.address}")
        address.setWordWrap(True)
        info_layout.addWidget(address, 1, 0, 1, 2)
        layout.addWidget(info)

        figures = QHBoxLayout()
        self.figure_labels = {}
        for key, caption, color in (("total_billed", "Total Billed", "#1e3a8a"),
                                    ("total_paid", "Total Paid", "#14532d"),
                                    ("pending", "Pending", "#7f1d1d")):
            box = QLabel()
            box.setAlignment(Qt.AlignmentFlag.AlignCenter)
            box.setStyleSheet("background: #F3F4F6; border-radius: 8px; padding: 8px;")
            self.figure_labels[key] = (box, caption, color)
            figures.addWidget(box)
        layout.addLayout(figures)

        layout.addWidget(QLabel("<b>Order History</b>"))
        self.scroll = QScrollArea()
        self.scroll.setWidgetResizable(True)
        layout.addWidget(self.scroll, 1)

        pay_btn = QPushButton("Record a Payment")
        pay_btn.setMinimumHeight(38)
        pay_btn.setStyleSheet("background-color: #16a34a; color: white; font-weight: bold;")
        pay_btn.clicked.connect(self.record_payment)
        layout.addWidget(pay_btn)

        self.show_history(history)

    def show_history(self, history):
        for key, (box, caption, color) in self.figure_labels.items():
            box.setText(f"<div style='text-align:center'>{caption}<br>"
                        f"<span style='font-size:16px;font-weight:bold;color:{color}'>"
                        f"{getattr(history, key)}</span></div>")

        content = QWidget()
        orders_layout = QVBoxLayout(content)
        if history.is_empty:
            empty = QLabel(history.empty_message)
            empty.setAlignment(Qt.AlignmentFlag.AlignCenter)
            empty.setStyleSheet("color: #6B7280; padding: 30px;")
            orders_layout.addWidget(empty)
        for entry in history.entries:
            orders_layout.addWidget(self._order_card(entry))
        orders_layout.addStretch()
        # setWidget deletes the previous content widget
        self.scroll.setWidget(content)

    def _order_card(self, entry):
        card = QFrame()
        card.setStyleSheet("QFrame { border: 1px solid #E5E7EB; border-radius: 8px; }")
        card_layout = QVBoxLayout(card)

        top = QHBoxLayout()
        top.addWidget(QLabel(f"<b>{entry.heading}</b>"))
        top.addStretch()
        status = QLabel(entry.status)
        status.setStyleSheet(_STATUS_STYLES.get(entry.status, _STATUS_STYLES["pending"]) +
                             " border-radius: 6px; padding: 1px 6px;")
        top.addWidget(status)
        card_layout.addLayout(top)

        for label, unit_price, line_total in entry.item_lines:
            line = QHBoxLayout()
            line.addWidget(QLabel(f"{label} <span style='color:#6B7280'>{unit_price}</span>"))
            line.addStretch()
            line.addWidget(QLabel(line_total))
            card_layout.addLayout(line)

        bottom = QHBoxLayout()
        if entry.can_mark_delivered and self.on_mark_delivered:
            deliver_btn = QPushButton("Mark Delivered")
            deliver_btn.clicked.connect(lambda _, oid=entry.order_id: self._order_action(self.on_mark_delivered, oid))
            bottom.addWidget(deliver_btn)
        if self.on_delete_order:
            delete_btn = QPushButton("Delete")
            delete_btn.setStyleSheet("color: #b91c1c;")
            delete_btn.clicked.connect(lambda _, oid=entry.order_id: self._order_action(self.on_delete_order, oid))
            bottom.addWidget(delete_btn)
        bottom.addStretch()
        total = QLabel(f"<b>{entry.total_line}</b>")
        total.setAlignment(Qt.AlignmentFlag.AlignRight)
        bottom.addWidget(total)
        card_layout.addLayout(bottom)
        return card

    def _order_action(self, action, order_id):
        if not action(order_id):
            return
        history = self.history_service.reload(self.customer)
        if history is None:
            self.reject()
            return
        self.customer = history.customer
        self.show_history(history)

    def record_payment(self):
        if self.history_service.record_payment(self.customer):
            self.accept()


class CustomersView(QWidget):
    """Customer list with balances and order/payment entry."""

    COLUMNS = ["Name", "Phone", "Address", "Total Billed", "Total Paid", "Pending"]

    def __init__(self, main_window, db_manager):
        super().__init__()
        self.main_window = main_window
        self.db = db_manager
        self.orders = OrderService(db_manager)
        self.payments = PaymentService(db_manager)
        self.history = CustomerHistoryService(db_manager, on_record_payment=self.open_payment_dialog)
        self.customers = []
        self.init_ui()
        self.refresh_list()

    def init_ui(self):
        layout = QVBoxLayout(self)
        top = QHBoxLayout()
        title = QLabel("Customers")
        title.setStyleSheet("font-size: 22px; font-weight: bold; color: #111827;")
        top.addWidget(title)
        top.addStretch()
        self.search_input = QLineEdit(placeholderText="Search name or phone...")
        self.search_input.textChanged.connect(self.apply_filter)
        top.addWidget(self.search_input)

        for label, handler in (("Add Customer", self.add_customer),
                               ("Edit Customer", self.edit_selected_customer),
                               ("Delete Customer", self.delete_selected_customer),
                               ("New Order", self.add_order),
                               ("Record Payment", self.record_payment_for_selected),
                               ("View Account", self.open_selected_details)):
            btn = QPushButton(label)
            btn.clicked.connect(handler)
            top.addWidget(btn)
        layout.addLayout(top)

        self.table = QTableWidget(0, len(self.COLUMNS))
        self.table.setHorizontalHeaderLabels(self.COLUMNS)
        self.table.setEditTriggers(QTableWidget.EditTrigger.NoEditTriggers)
        self.table.setSelectionBehavior(QTableWidget.SelectionBehavior.SelectRows)
        self.table.setSelectionMode(QTableWidget.SelectionMode.SingleSelection)
        self.table.verticalHeader().setVisible(False)
        self.table.horizontalHeader().setSectionResizeMode(2, QHeaderView.ResizeMode.Stretch)
        self.table.cellDoubleClicked.connect(lambda row, _: self.open_details(self.customers[row]))
        layout.addWidget(self.table)

    def refresh_list(self):
        self.customers = self.db.get_customers()
        self.table.setRowCount(len(self.customers))
        for row, customer in enumerate(self.customers):
            values = [customer.name, customer.phone, customer.address,
                      f"{customer.total_amount:,.2f}", f"{customer.paid_amount:,.2f}",
                      f"{customer.pending_balance:,.2f}"]
            for col, value in enumerate(values):
                item = QTableWidgetItem(value)
                if col >= 3:
                    item.setTextAlignment(Qt.AlignmentFlag.AlignRight | Qt.AlignmentFlag.AlignVCenter)
                self.table.setItem(row, col, item)
        self.apply_filter(self.search_input.text())

    def apply_filter(self, text):
        search_text = text.lower()
        for row, customer in enumerate(self.customers):
            match = search_text in customer.name.lower() or search_text in customer.phone.lower()
            self.table.setRowHidden(row, not match)

    def selected_customer(self):
        row = self.table.currentRow()
        if 0 <= row < len(self.customers):
            return self.customers[row]
        QMessageBox.information(self, "No Selection", "Please select a customer first.")
        return None

    def _data_changed(self):
        self.refresh_list()
        self.main_window.data_changed()

    def add_customer(self):
        dialog = CustomerDialog(self)
        if dialog.exec() == QDialog.DialogCode.Accepted:
            name, phone, address = dialog.get_data()
            self.db.add_customer(name, phone, address)
            self._data_changed()

    def edit_selected_customer(self):
        customer = self.selected_customer()
        if not customer:
            return
        dialog = CustomerDialog(self, customer.name, customer.phone, customer.address)
        if dialog.exec() == QDialog.DialogCode.Accepted:
            name, phone, address = dialog.get_data()
            self.db.update_customer(customer.id, name, phone, address)
            logger.info("Updated customer %s", customer.id)
            self._data_changed()

    def delete_selected_customer(self):
        customer = self.selected_customer()
        if not customer:
            return
        reply = QMessageBox.question(
            self, "Delete Customer",
            f"Delete {customer.name} together with all their orders and payments?",
            QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No,
            QMessageBox.StandardButton.No)
        if reply != QMessageBox.StandardButton.Yes:
            return
        try:
            self.db.delete_customer(customer.id)
        except MilkBookError as e:
            QMessageBox.critical(self, "Delete Failed", e.message)
            return
        logger.info("Deleted customer %s", customer.id)
        self._data_changed()

    def add_order(self):
        if not self.customers:
            QMessageBox.information(self, "No Customers", "Add a customer before entering orders.")
            return
        current = self.table.currentRow()
        selected_id = self.customers[current].id if 0 <= current < len(self.customers) else None
        dialog = OrderDialog(self, self.customers, selected_id)
        if dialog.exec() != QDialog.DialogCode.Accepted:
            return
        customer_id, order_date, status, items = dialog.get_data()
        try:
            self.orders.create_order(customer_id, items, order_date, status)
        except MilkBookError as e:
            QMessageBox.warning(self, "Order Not Saved", e.message)
            return
        self._data_changed()

    def mark_order_delivered(self, order_id):
        """Order card action. Returns True if the order changed."""
        try:
            self.orders.mark_delivered(order_id)
        except MilkBookError as e:
            QMessageBox.warning(self, "Order Not Updated", e.message)
            return False
        self._data_changed()
        return True

    def delete_order(self, order_id):
        """Order card action. Returns True if the order was removed."""
        reply = QMessageBox.question(self, "Delete Order", "Delete this order?",
                                     QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No,
                                     QMessageBox.StandardButton.No)
        if reply != QMessageBox.StandardButton.Yes:
            return False
        try:
            self.orders.delete_order(order_id)
        except MilkBookError as e:
            QMessageBox.warning(self, "Order Not Deleted", e.message)
            return False
        self._data_changed()
        return True

    def open_payment_dialog(self, customer):
        """Payment recorder handed to the customer details dialog.

        Returns:
            True if a payment was saved.
        """
        dialog = PaymentDialog(self, customer)
        if dialog.exec() != QDialog.DialogCode.Accepted:
            return False
        amount, payment_date, notes = dialog.get_data()
        result = self.payments.record_payment(customer.id, amount, payment_date, notes)
        if not result:
            QMessageBox.warning(self, "Payment Not Saved", result.error)
            return False
        self._data_changed()
        return True

    def record_payment_for_selected(self):
        customer = self.selected_customer()
        if customer:
            self.open_payment_dialog(customer)

    def open_selected_details(self):
        customer = self.selected_customer()
        if customer:
            self.open_details(customer)

    def open_details(self, customer):
        CustomerDetailsDialog(self, customer, self.history,
                              on_mark_delivered=self.mark_order_delivered,
                              on_delete_order=self.delete_order).exec()
