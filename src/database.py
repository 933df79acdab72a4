"""Database management module for MilkBook."""
import logging
import sqlite3
import pandas as pd
from datetime import datetime
from contextlib import contextmanager

from src.exceptions import TransactionError
from src.data_structures import Customer, Order, OrderItem, Payment

logger = logging.getLogger(__name__)


class DatabaseManager:
    """Handles all SQLite database operations.

    Customer balance figures are not stored: they are summed from the
    orders and payments tables whenever a customer is read.
    """

    def __init__(self, db_name="milk_book.db"):
        self.db_name = db_name
        self.conn = sqlite3.connect(db_name)
        self.conn.execute("PRAGMA foreign_keys = ON")
        self._closed = False
        self.create_tables()

    def close(self):
        """Close the database connection."""
        if self.conn and not self._closed:
            self.conn.close()
            self._closed = True

    def __del__(self):
        self.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    @contextmanager
    def transaction(self):
        """Context manager for database transactions with automatic rollback on failure.

        Usage:
            with db.transaction():
                db.add_order(...)
                db.add_payment(...)
        """
        try:
            yield
            self.conn.commit()
        except sqlite3.Error as e:
            self.conn.rollback()
            raise TransactionError(f"Transaction failed: {str(e)}")
        except Exception:
            self.conn.rollback()
            raise

    def create_tables(self):
        cursor = self.conn.cursor()
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS customers (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                name TEXT NOT NULL,
                phone TEXT,
                address TEXT,
                created_at TEXT
            )
        """)
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS orders (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                customer_id INTEGER NOT NULL,
                order_date TEXT NOT NULL,
                status TEXT DEFAULT 'pending',
                total_amount REAL DEFAULT 0,
                FOREIGN KEY(customer_id) REFERENCES customers(id) ON DELETE CASCADE
            )
        """)
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS order_items (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                order_id INTEGER NOT NULL,
                position INTEGER DEFAULT 0,
                product_name TEXT NOT NULL,
                price REAL NOT NULL,
                quantity REAL NOT NULL,
                FOREIGN KEY(order_id) REFERENCES orders(id) ON DELETE CASCADE
            )
        """)
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS payments (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                customer_id INTEGER NOT NULL,
                payment_date TEXT NOT NULL,
                amount REAL NOT NULL,
                notes TEXT,
                FOREIGN KEY(customer_id) REFERENCES customers(id) ON DELETE CASCADE
            )
        """)
        cursor.execute("CREATE INDEX IF NOT EXISTS idx_orders_date ON orders(order_date)")
        cursor.execute("CREATE INDEX IF NOT EXISTS idx_payments_date ON payments(payment_date)")

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS settings (
                key TEXT PRIMARY KEY,
                value TEXT
            )
        """)
        self.conn.commit()

    # Settings
    def get_setting(self, key, default=None):
        cursor = self.conn.cursor()
        cursor.execute("SELECT value FROM settings WHERE key=?", (key,))
        row = cursor.fetchone()
        return row[0] if row else default

    def set_setting(self, key, value):
        cursor = self.conn.cursor()
        cursor.execute("INSERT OR REPLACE INTO settings (key, value) VALUES (?, ?)", (key, str(value)))
        self.conn.commit()

    # Customer operations
    _CUSTOMER_QUERY = """
        SELECT c.id, c.name, c.phone, c.address, c.created_at,
               COALESCE((SELECT SUM(o.total_amount) FROM orders o WHERE o.customer_id = c.id), 0) AS total_amount,
               COALESCE((SELECT SUM(p.amount) FROM payments p WHERE p.customer_id = c.id), 0) AS paid_amount
        FROM customers c
    """

    @staticmethod
    def _row_to_customer(row):
        cust_id, name, phone, address, created_at, total, paid = row
        total = round(float(total), 2)
        paid = round(float(paid), 2)
        return Customer(
            id=cust_id,
            name=name,
            phone=phone or "",
            address=address or "",
            total_amount=total,
            paid_amount=paid,
            pending_balance=round(total - paid, 2),
            created_at=created_at,
        )

    def add_customer(self, name, phone="", address=""):
        cursor = self.conn.cursor()
        cursor.execute("INSERT INTO customers (name, phone, address, created_at) VALUES (?, ?, ?, ?)",
                       (name, phone, address, datetime.now().strftime("%Y-%m-%d %H:%M:%S")))
        self.conn.commit()
        return cursor.lastrowid

    def update_customer(self, id, name, phone, address):
        cursor = self.conn.cursor()
        cursor.execute("UPDATE customers SET name=?, phone=?, address=? WHERE id=?", (name, phone, address, id))
        self.conn.commit()

    def delete_customer(self, id):
        """Delete a customer together with their orders and payments."""
        with self.transaction():
            cursor = self.conn.cursor()
            cursor.execute("DELETE FROM order_items WHERE order_id IN (SELECT id FROM orders WHERE customer_id=?)", (id,))
            cursor.execute("DELETE FROM orders WHERE customer_id=?", (id,))
            cursor.execute("DELETE FROM payments WHERE customer_id=?", (id,))
            cursor.execute("DELETE FROM customers WHERE id=?", (id,))

    def get_customers(self):
        cursor = self.conn.cursor()
        cursor.execute(self._CUSTOMER_QUERY + " ORDER BY c.name COLLATE NOCASE, c.id")
        return [self._row_to_customer(row) for row in cursor.fetchall()]

    def get_customer(self, id):
        if id is None:
            return None
        cursor = self.conn.cursor()
        cursor.execute(self._CUSTOMER_QUERY + " WHERE c.id = ?", (id,))
        row = cursor.fetchone()
        return self._row_to_customer(row) if row else None

    # Order operations
    def add_order(self, customer_id, order_date, items, status="pending"):
        """Insert an order and its line items.

        Args:
            customer_id: Owning customer.
            order_date: Date string (YYYY-MM-DD).
            items: Sequence of OrderItem.
            status: Order status.

        Returns:
            The new order id.
        """
        total = round(sum(item.price * item.quantity for item in items), 2)
        with self.transaction():
            cursor = self.conn.cursor()
            cursor.execute(
                "INSERT INTO orders (customer_id, order_date, status, total_amount) VALUES (?, ?, ?, ?)",
                (customer_id, order_date, status, total))
            order_id = cursor.lastrowid
            cursor.executemany(
                "INSERT INTO order_items (order_id, position, product_name, price, quantity) VALUES (?, ?, ?, ?, ?)",
                [(order_id, pos, item.product_name, item.price, item.quantity) for pos, item in enumerate(items)])
        logger.debug("Order %s added for customer %s (%.2f)", order_id, customer_id, total)
        return order_id

    def update_order_status(self, order_id, status):
        cursor = self.conn.cursor()
        cursor.execute("UPDATE orders SET status=? WHERE id=?", (status, order_id))
        self.conn.commit()
        return cursor.rowcount > 0

    def delete_order(self, order_id):
        with self.transaction():
            cursor = self.conn.cursor()
            cursor.execute("DELETE FROM order_items WHERE order_id=?", (order_id,))
            cursor.execute("DELETE FROM orders WHERE id=?", (order_id,))

    def get_order(self, order_id):
        orders = self._query_orders("o.id = ?", [order_id])
        return orders[0] if orders else None

    def get_orders(self, customer_id=None):
        return self.get_filtered_orders(customer_id=customer_id)

    def get_filtered_orders(self, customer_id=None, date_from=None, date_to=None):
        """Orders whose date lies in [date_from, date_to], optionally for one customer."""
        clauses, params = self._filter_clauses("o.customer_id", "o.order_date", customer_id, date_from, date_to)
        return self._query_orders(" AND ".join(clauses), params)

    def _query_orders(self, where, params):
        query = """
            SELECT o.id, o.customer_id, c.name AS customer_name, o.order_date, o.status, o.total_amount
            FROM orders o JOIN customers c ON c.id = o.customer_id
        """
        if where:
            query += " WHERE " + where
        query += " ORDER BY o.order_date, o.id"

        orders_df = pd.read_sql_query(query, self.conn, params=tuple(params))
        if orders_df.empty:
            return []

        order_ids = [int(oid) for oid in orders_df['id']]
        placeholders = ",".join("?" * len(order_ids))
        items_df = pd.read_sql_query(
            f"SELECT order_id, product_name, price, quantity FROM order_items "
            f"WHERE order_id IN ({placeholders}) ORDER BY order_id, position, id",
            self.conn, params=tuple(order_ids))
        items_by_order = {int(oid): group for oid, group in items_df.groupby('order_id')}

        orders = []
        for _, row in orders_df.iterrows():
            group = items_by_order.get(int(row['id']))
            items = []
            if group is not None:
                items = [OrderItem(str(item['product_name']), float(item['price']), float(item['quantity']))
                         for _, item in group.iterrows()]
            orders.append(Order(
                id=int(row['id']),
                customer_id=int(row['customer_id']),
                customer_name=str(row['customer_name']),
                order_date=str(row['order_date']),
                status=str(row['status']),
                items=items,
                total_amount=float(row['total_amount']),
            ))
        return orders

    # Payment operations
    def add_payment(self, customer_id, payment_date, amount, notes=""):
        cursor = self.conn.cursor()
        cursor.execute("INSERT INTO payments (customer_id, payment_date, amount, notes) VALUES (?, ?, ?, ?)",
                       (customer_id, payment_date, amount, notes))
        self.conn.commit()
        return cursor.lastrowid

    def get_filtered_payments(self, customer_id=None, date_from=None, date_to=None):
        """Payments whose date lies in [date_from, date_to], optionally for one customer."""
        clauses, params = self._filter_clauses("p.customer_id", "p.payment_date", customer_id, date_from, date_to)
        query = """
            SELECT p.id, p.customer_id, c.name, p.payment_date, p.amount, p.notes
            FROM payments p JOIN customers c ON c.id = p.customer_id
        """
        if clauses:
            query += " WHERE " + " AND ".join(clauses)
        query += " ORDER BY p.payment_date, p.id"

        cursor = self.conn.cursor()
        cursor.execute(query, tuple(params))
        return [
            Payment(id=pid, customer_id=cid, customer_name=name, payment_date=date,
                    amount=float(amount), notes=notes or "")
            for pid, cid, name, date, amount, notes in cursor.fetchall()
        ]

    @staticmethod
    def _filter_clauses(customer_col, date_col, customer_id, date_from, date_to):
        """Build WHERE clauses; both date bounds are inclusive."""
        clauses = []
        params = []
        if customer_id is not None:
            clauses.append(f"{customer_col} = ?")
            params.append(customer_id)
        if date_from:
            clauses.append(f"{date_col} >= ?")
            params.append(date_from)
        if date_to:
            clauses.append(f"{date_col} <= ?")
            params.append(date_to)
        return clauses, params
