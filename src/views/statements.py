"""Account Statements view for MilkBook."""
import logging

from PyQt6.QtWidgets import (QWidget, QVBoxLayout, QHBoxLayout, QLabel, QPushButton,
                             QTableWidget, QTableWidgetItem, QComboBox, QDateEdit,
                             QGroupBox, QFrame, QHeaderView, QStackedWidget,
                             QFileDialog, QMessageBox)
from PyQt6.QtCore import Qt, QDate

from src.config import ALL_CUSTOMERS_LABEL, QUICK_PERIODS
from src.statement_generator import StatementGenerator
from src.ui_state_manager import StatementFilterState

logger = logging.getLogger(__name__)


class SummaryCard(QFrame):
    """Small card showing one statement total."""

    def __init__(self, title, color):
        super().__init__()
        self.setStyleSheet("SummaryCard { background: white; border: 1px solid #E5E7EB; border-radius: 10px; }")
        layout = QVBoxLayout(self)
        caption = QLabel(title)
        caption.setStyleSheet("font-size: 12px; color: #4B5563;")
        self.value_label = QLabel("0.00")
        self.value_label.setStyleSheet(f"font-size: 20px; font-weight: bold; color: {color};")
        layout.addWidget(caption)
        layout.addWidget(self.value_label)

    def set_value(self, text):
        self.value_label.setText(text)


class StatementsView(QWidget):
    """Filters, totals, transaction table and export buttons for statements."""

    def __init__(self, main_window, db_manager):
        super().__init__()
        self.main_window = main_window
        self.db = db_manager
        self.generator = StatementGenerator(db_manager)
        self.state = StatementFilterState.from_settings(db_manager, on_changed=lambda _: self.refresh())
        self.presentation = None
        self.init_ui()
        self.reload_customers()

    def init_ui(self):
        layout = QVBoxLayout(self)

        header = QHBoxLayout()
        titles = QVBoxLayout()
        title = QLabel("Account Statements")
        title.setStyleSheet("font-size: 22px; font-weight: bold; color: #111827;")
        subtitle = QLabel("View and download customer account history")
        subtitle.setStyleSheet("color: #4B5563;")
        titles.addWidget(title)
        titles.addWidget(subtitle)
        header.addLayout(titles)
        header.addStretch()

        for label, color, handler in (("CSV", "#16a34a", self.export_csv),
                                      ("Excel", "#15803d", self.export_excel),
                                      ("PDF", "#dc2626", self.export_pdf)):
            btn = QPushButton(label)
            btn.setStyleSheet(f"background-color: {color}; color: white; font-weight: bold; padding: 6px 14px;")
            btn.clicked.connect(handler)
            header.addWidget(btn)
        layout.addLayout(header)

        # Filters
        filters = QGroupBox("Filters")
        filter_layout = QHBoxLayout(filters)

        self.period_buttons = {}
        period_box = QVBoxLayout()
        period_box.addWidget(QLabel("Quick Period"))
        period_row = QHBoxLayout()
        for period in QUICK_PERIODS:
            btn = QPushButton(period.capitalize())
            btn.setCheckable(True)
            btn.clicked.connect(lambda _, p=period: self.state.select_period(p))
            self.period_buttons[period] = btn
            period_row.addWidget(btn)
        period_box.addLayout(period_row)
        filter_layout.addLayout(period_box)

        self.from_input = self._date_edit(self.on_date_from_changed)
        self.to_input = self._date_edit(self.on_date_to_changed)
        for caption, widget in (("From Date", self.from_input), ("To Date", self.to_input)):
            box = QVBoxLayout()
            box.addWidget(QLabel(caption))
            box.addWidget(widget)
            filter_layout.addLayout(box)

        customer_box = QVBoxLayout()
        customer_box.addWidget(QLabel("Customer"))
        self.customer_combo = QComboBox()
        self.customer_combo.currentIndexChanged.connect(self.on_customer_changed)
        customer_box.addWidget(self.customer_combo)
        filter_layout.addLayout(customer_box)
        layout.addWidget(filters)

        # Summary cards
        cards = QHBoxLayout()
        self.billed_card = SummaryCard("Total Amount", "#1d4ed8")
        self.paid_card = SummaryCard("Received Amount", "#15803d")
        self.pending_card = SummaryCard("Pending Amount", "#b91c1c")
        for card in (self.billed_card, self.paid_card, self.pending_card):
            cards.addWidget(card)
        layout.addLayout(cards)

        # Transactions
        layout.addWidget(QLabel("<b>Transaction Details</b>"))
        self.table_stack = QStackedWidget()
        self.table = QTableWidget()
        self.table.setEditTriggers(QTableWidget.EditTrigger.NoEditTriggers)
        self.table.setAlternatingRowColors(True)
        self.table.verticalHeader().setVisible(False)
        self.empty_label = QLabel()
        self.empty_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.empty_label.setStyleSheet("color: #6B7280; font-size: 14px;")
        self.table_stack.addWidget(self.table)
        self.table_stack.addWidget(self.empty_label)
        layout.addWidget(self.table_stack, 1)

    def _date_edit(self, handler):
        edit = QDateEdit()
        edit.setCalendarPopup(True)
        edit.setDisplayFormat("yyyy-MM-dd")
        edit.dateChanged.connect(handler)
        return edit

    def reload_customers(self):
        """Refill the customer selector, keeping the current selection."""
        self.customer_combo.blockSignals(True)
        self.customer_combo.clear()
        self.customer_combo.addItem(ALL_CUSTOMERS_LABEL, None)
        for customer in self.db.get_customers():
            self.customer_combo.addItem(customer.name, customer.id)
        idx = self.customer_combo.findData(self.state.customer_id)
        if idx < 0:
            idx = 0
            self.state.customer_id = None
        self.customer_combo.setCurrentIndex(idx)
        self.customer_combo.blockSignals(False)
        self.refresh()

    def on_date_from_changed(self, qdate):
        self.state.set_date_from(qdate.toString("yyyy-MM-dd"))

    def on_date_to_changed(self, qdate):
        self.state.set_date_to(qdate.toString("yyyy-MM-dd"))

    def on_customer_changed(self, _index):
        self.state.set_customer(self.customer_combo.currentData())

    def _sync_filter_widgets(self):
        for edit, value in ((self.from_input, self.state.date_from), (self.to_input, self.state.date_to)):
            edit.blockSignals(True)
            edit.setDate(QDate.fromString(value, "yyyy-MM-dd"))
            edit.blockSignals(False)
        for period, btn in self.period_buttons.items():
            btn.setChecked(period == self.state.period)

    def refresh(self):
        """Recompute the statement for the current filters."""
        self._sync_filter_widgets()
        self.presentation = self.generator.prepare(self.state.to_filter())
        cfg = self.generator.config
        summary = self.presentation.summary
        self.billed_card.set_value(cfg.money(summary.total_billed))
        self.paid_card.set_value(cfg.money(summary.total_paid))
        self.pending_card.set_value(cfg.money(summary.pending))

        table = self.generator.render_table(self.presentation)
        if table.is_empty:
            self.empty_label.setText(f"<b>{table.empty_message}</b><br>{table.empty_hint}")
            self.table_stack.setCurrentWidget(self.empty_label)
            return

        self.table.clear()
        self.table.setColumnCount(len(table.headers))
        self.table.setHorizontalHeaderLabels(table.headers)
        self.table.setRowCount(len(table.rows))
        for r, row in enumerate(table.rows):
            for c, value in enumerate(row):
                item = QTableWidgetItem(value)
                if table.alignments[c] == "right":
                    item.setTextAlignment(Qt.AlignmentFlag.AlignRight | Qt.AlignmentFlag.AlignVCenter)
                self.table.setItem(r, c, item)
        header = self.table.horizontalHeader()
        header.setSectionResizeMode(QHeaderView.ResizeMode.ResizeToContents)
        header.setSectionResizeMode(table.headers.index("Description"), QHeaderView.ResizeMode.Stretch)
        self.table_stack.setCurrentWidget(self.table)

    def _export(self, export_func, label):
        if self.presentation is None:
            return
        folder = QFileDialog.getExistingDirectory(self, f"Save {label} Statement To")
        if not folder:
            return
        result = export_func(self.presentation, folder)
        if result:
            QMessageBox.information(self, "Export Complete", f"Statement saved to:\n{result.value}")
        else:
            QMessageBox.warning(self, "Export Failed", result.error)

    def export_pdf(self):
        self._export(self.generator.export_pdf, "PDF")

    def export_csv(self):
        self._export(self.generator.export_csv, "CSV")

    def export_excel(self):
        self._export(self.generator.export_excel, "Excel")
