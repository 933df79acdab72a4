import os
import sys
import unittest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from src.database import DatabaseManager
from src.data_structures import OrderItem


class TestDatabaseManager(unittest.TestCase):
    def setUp(self):
        self.db = DatabaseManager(":memory:")
        self.asha = self.db.add_customer("Asha", "98765 43210", "12 Dairy Lane")
        self.ravi = self.db.add_customer("Ravi", "", "")

        self.db.add_order(self.asha, "2024-01-01", [OrderItem("Milk", 50.0, 2)])
        self.db.add_order(self.asha, "2024-01-15", [OrderItem("Milk", 50.0, 1), OrderItem("Curd", 30.0, 2)])
        self.db.add_order(self.ravi, "2024-01-31", [OrderItem("Ghee", 400.0, 1)])
        self.db.add_order(self.asha, "2024-02-01", [OrderItem("Milk", 50.0, 3)])

        self.db.add_payment(self.asha, "2024-01-10", 60.0)
        self.db.add_payment(self.asha, "2024-02-05", 100.0, "UPI")

    def tearDown(self):
        self.db.close()

    def test_customer_figures_are_derived(self):
        """Totals are summed from orders and payments on read."""
        asha = self.db.get_customer(self.asha)
        self.assertEqual(asha.total_amount, 100.0 + 110.0 + 150.0)
        self.assertEqual(asha.paid_amount, 160.0)
        self.assertEqual(asha.pending_balance, 200.0)

        self.db.add_payment(self.asha, "2024-02-06", 50.0)
        self.assertEqual(self.db.get_customer(self.asha).pending_balance, 150.0)

    def test_customer_without_activity(self):
        cust_id = self.db.add_customer("New", "", "")
        customer = self.db.get_customer(cust_id)
        self.assertEqual((customer.total_amount, customer.paid_amount, customer.pending_balance), (0.0, 0.0, 0.0))

    def test_get_customer_missing(self):
        self.assertIsNone(self.db.get_customer(999))
        self.assertIsNone(self.db.get_customer(None))

    def test_customers_sorted_by_name(self):
        self.db.add_customer("bhavna", "", "")
        names = [c.name for c in self.db.get_customers()]
        self.assertEqual(names, ["Asha", "bhavna", "Ravi"])

    def test_order_total_computed_from_items(self):
        order = self.db.get_orders(self.asha)[1]
        self.assertEqual(order.total_amount, 110.0)
        self.assertEqual([i.product_name for i in order.items], ["Milk", "Curd"])
        self.assertEqual(order.customer_name, "Asha")
        self.assertEqual(order.status, "pending")

    def test_filtered_orders_inclusive_bounds(self):
        orders = self.db.get_filtered_orders(date_from="2024-01-01", date_to="2024-01-31")
        self.assertEqual([o.order_date for o in orders], ["2024-01-01", "2024-01-15", "2024-01-31"])

    def test_filtered_orders_by_customer(self):
        orders = self.db.get_filtered_orders(customer_id=self.ravi, date_from="2024-01-01", date_to="2024-12-31")
        self.assertEqual(len(orders), 1)
        self.assertEqual(orders[0].customer_name, "Ravi")

    def test_filtered_orders_empty_window(self):
        self.assertEqual(self.db.get_filtered_orders(date_from="2023-01-01", date_to="2023-01-31"), [])

    def test_filtered_payments(self):
        payments = self.db.get_filtered_payments(customer_id=self.asha, date_from="2024-01-10", date_to="2024-01-10")
        self.assertEqual(len(payments), 1)
        self.assertEqual(payments[0].amount, 60.0)
        self.assertEqual(payments[0].customer_name, "Asha")

        february = self.db.get_filtered_payments(date_from="2024-02-01", date_to="2024-02-29")
        self.assertEqual(february[0].notes, "UPI")

    def test_update_order_status(self):
        order_id = self.db.get_orders(self.ravi)[0].id
        self.assertTrue(self.db.update_order_status(order_id, "delivered"))
        self.assertEqual(self.db.get_order(order_id).status, "delivered")
        self.assertFalse(self.db.update_order_status(999, "delivered"))

    def test_delete_order_removes_items(self):
        order_id = self.db.get_orders(self.ravi)[0].id
        self.db.delete_order(order_id)
        self.assertIsNone(self.db.get_order(order_id))
        count = self.db.conn.execute("SELECT COUNT(*) FROM order_items WHERE order_id=?", (order_id,)).fetchone()[0]
        self.assertEqual(count, 0)

    def test_delete_customer_cascades(self):
        self.db.delete_customer(self.asha)
        self.assertIsNone(self.db.get_customer(self.asha))
        self.assertEqual(self.db.get_orders(self.asha), [])
        self.assertEqual(self.db.get_filtered_payments(customer_id=self.asha), [])
        self.assertEqual(len(self.db.get_orders()), 1)

    def test_update_customer_keeps_history(self):
        self.db.update_customer(self.asha, "Asha Patel", "98765 00000", "14 Dairy Lane")
        asha = self.db.get_customer(self.asha)
        self.assertEqual((asha.name, asha.phone, asha.address), ("Asha Patel", "98765 00000", "14 Dairy Lane"))
        self.assertEqual(asha.total_amount, 360.0)
        self.assertEqual(self.db.get_orders(self.asha)[0].customer_name, "Asha Patel")

    def test_settings_roundtrip(self):
        self.assertEqual(self.db.get_setting("week_start", "6"), "6")
        self.db.set_setting("week_start", 0)
        self.assertEqual(self.db.get_setting("week_start", "6"), "0")


if __name__ == "__main__":
    unittest.main()
