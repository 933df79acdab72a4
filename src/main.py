"""Main application window for MilkBook."""
import logging
import sys

from PyQt6.QtWidgets import (QApplication, QMainWindow, QTabWidget, QMessageBox,
                             QDialog, QVBoxLayout, QPushButton, QLabel, QFileDialog)
from PyQt6.QtCore import Qt

from .config import LOG_FORMAT, LOG_LEVEL, ORGANIZATION_NAME
from .database import DatabaseManager
from .views.customers import CustomersView
from .views.statements import StatementsView

logger = logging.getLogger(__name__)


class StartupDialog(QDialog):
    """Dialog to select or create a database file."""
    def __init__(self):
        super().__init__()
        self.setWindowTitle("MilkBook - Select Book")
        self.setFixedSize(400, 200)
        self.selected_db = None

        layout = QVBoxLayout(self)
        layout.setSpacing(15)
        layout.setAlignment(Qt.AlignmentFlag.AlignCenter)

        title = QLabel("Welcome to MilkBook")
        title.setStyleSheet("font-size: 18px; font-weight: bold; color: #0284c7;")
        title.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(title)

        subtitle = QLabel("Please select a customer book to continue:")
        subtitle.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(subtitle)

        btn_new = QPushButton("Create New Book")
        btn_new.setMinimumHeight(40)
        btn_new.clicked.connect(self.create_new)
        layout.addWidget(btn_new)

        btn_open = QPushButton("Open Existing Book")
        btn_open.setMinimumHeight(40)
        btn_open.clicked.connect(self.open_existing)
        layout.addWidget(btn_open)

    def create_new(self):
        path, _ = QFileDialog.getSaveFileName(self, "Create New Book", "milk_book.db", "Database Files (*.db)")
        if path:
            if not path.endswith('.db'):
                path += '.db'
            self.selected_db = path
            self.accept()

    def open_existing(self):
        path, _ = QFileDialog.getOpenFileName(self, "Open Existing Book", "", "Database Files (*.db)")
        if path:
            self.selected_db = path
            self.accept()


class MainApp(QMainWindow):
    """Main application window."""

    def __init__(self, db_path):
        super().__init__()
        self.db = DatabaseManager(db_path)
        organization = self.db.get_setting("organization_name", ORGANIZATION_NAME)
        self.setWindowTitle(f"MilkBook - {organization} - [{db_path}]")
        self.resize(1150, 720)

        self.tabs = QTabWidget()
        self.setCentralWidget(self.tabs)

        self.customers_view = CustomersView(self, self.db)
        self.statements_view = StatementsView(self, self.db)
        self.tabs.addTab(self.customers_view, "Customers")
        self.tabs.addTab(self.statements_view, "Statements")
        logger.info("Opened book %s", db_path)

    def data_changed(self):
        """Orders, payments or customers changed; refresh dependent views."""
        self.statements_view.reload_customers()

    def closeEvent(self, event):
        """Confirm before exiting."""
        reply = QMessageBox.question(self, "Exit", "Are you sure you want to exit?",
                                     QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No,
                                     QMessageBox.StandardButton.No)
        if reply == QMessageBox.StandardButton.Yes:
            self.db.close()
            event.accept()
        else:
            event.ignore()


def main():
    """Entry point for the application."""
    logging.basicConfig(level=LOG_LEVEL, format=LOG_FORMAT)
    app = QApplication(sys.argv)

    dialog = StartupDialog()
    if dialog.exec() == QDialog.DialogCode.Accepted and dialog.selected_db:
        window = MainApp(dialog.selected_db)
        window.show()
        sys.exit(app.exec())
    else:
        sys.exit(0)


if __name__ == "__main__":
    main()
