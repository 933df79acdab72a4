import csv
import io
import os
import sys
import tempfile
import unittest

import reportlab

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from src.database import DatabaseManager
from src.data_structures import OrderItem, StatementConfig, StatementFilter
from src.statement_generator import StatementGenerator

JANUARY = ("2024-01-01", "2024-01-31")


class TestStatementGenerator(unittest.TestCase):
    def setUp(self):
        self.db = DatabaseManager(":memory:")
        self.asha = self.db.add_customer("Asha", "123", "")
        self.ravi = self.db.add_customer("Ravi", "456", "")
        self.db.add_order(self.asha, "2024-01-05", [OrderItem("Milk", 50.0, 2)])
        self.db.add_payment(self.asha, "2024-01-10", 60.0)
        # Outside the window
        self.db.add_order(self.ravi, "2024-02-02", [OrderItem("Ghee", 400.0, 1)])
        self.sg = StatementGenerator(self.db, StatementConfig(font_candidates=[]))

    def tearDown(self):
        self.db.close()

    def prepare(self, customer_id=None, window=JANUARY):
        return self.sg.prepare(StatementFilter(window[0], window[1], customer_id))

    def test_prepare_scenario(self):
        pres = self.prepare()
        self.assertEqual([tx.type for tx in pres.transactions], ["order", "payment"])
        self.assertEqual(f"{pres.summary.total_billed:.2f}", "100.00")
        self.assertEqual(f"{pres.summary.total_paid:.2f}", "60.00")
        self.assertEqual(f"{pres.summary.pending:.2f}", "40.00")
        self.assertEqual(pres.customer_name, "All Customers")
        self.assertEqual(pres.period_display, "Jan 01, 2024 to Jan 31, 2024")

    def test_totals_match_store(self):
        self.db.add_order(self.ravi, "2024-01-31", [OrderItem("Curd", 30.0, 3)])
        self.db.add_payment(self.ravi, "2024-01-01", 12.25)
        pres = self.prepare()
        orders = self.db.get_filtered_orders(date_from=JANUARY[0], date_to=JANUARY[1])
        payments = self.db.get_filtered_payments(date_from=JANUARY[0], date_to=JANUARY[1])
        self.assertAlmostEqual(pres.summary.total_billed, sum(o.total_amount for o in orders))
        self.assertAlmostEqual(pres.summary.total_paid, sum(p.amount for p in payments))

    def test_unknown_customer_label(self):
        self.assertEqual(self.prepare(customer_id=999).customer_name, "All Customers")

    def test_table_with_customer_column(self):
        table = self.sg.render_table(self.prepare())
        self.assertEqual(table.headers, ["Date", "Customer", "Description", "Billed", "Paid"])
        self.assertEqual(table.alignments, ["left", "left", "left", "right", "right"])
        self.assertEqual(table.rows[0], ["Jan 05, 2024", "Asha", "Order: 2x Milk", "₹100.00", "-"])
        self.assertEqual(table.rows[1], ["Jan 10, 2024", "Asha", "Payment received", "-", "₹60.00"])

    def test_table_hides_customer_column_for_single_customer(self):
        table = self.sg.render_table(self.prepare(customer_id=self.asha))
        self.assertEqual(table.headers, ["Date", "Description", "Billed", "Paid"])
        self.assertEqual(len(table.rows[0]), 4)

    def test_empty_window(self):
        pres = self.prepare(window=("2023-06-01", "2023-06-30"))
        table = self.sg.render_table(pres)
        self.assertTrue(table.is_empty)
        self.assertEqual(table.empty_message, "No transactions found")
        self.assertEqual((pres.summary.total_billed, pres.summary.total_paid, pres.summary.pending), (0.0, 0.0, 0.0))

    def test_document_all_customers(self):
        doc = self.sg.render_document(self.prepare())
        self.assertEqual(doc.organization, "Jay Goga Milk Supplier")
        self.assertEqual(doc.title, "Account Statement")
        self.assertEqual(doc.header_lines, ["Period: Jan 01, 2024 to Jan 31, 2024"])
        self.assertIn("Customer", doc.head)
        self.assertEqual(doc.body[0][0], "05/01/2024")
        self.assertEqual(doc.footer_lines, [
            "Total Amount: ₹100.00",
            "Received Amount: ₹60.00",
            "Pending Amount: ₹40.00",
        ])
        self.assertEqual(doc.filename, "account-statement-2024-01-01-to-2024-01-31.pdf")

    def test_document_single_customer(self):
        doc = self.sg.render_document(self.prepare(customer_id=self.asha), currency_symbol="Rs.")
        self.assertEqual(doc.header_lines[1], "Customer: Asha")
        self.assertNotIn("Customer", doc.head)
        self.assertEqual(doc.body[0][2], "Rs.100.00")
        self.assertEqual(doc.body[0][3], "-")

    def test_organization_from_settings(self):
        self.db.set_setting("organization_name", "Gokul Dairy")
        generator = StatementGenerator(self.db)
        doc = generator.render_document(generator.prepare(StatementFilter(*JANUARY)))
        self.assertEqual(doc.organization, "Gokul Dairy")

    def test_csv_layout(self):
        pres = self.prepare()
        text = self.sg.render_delimited_text(pres)
        lines = text.split("\n")
        self.assertEqual(lines[0], '"Date","Customer","Description","Billed","Paid"')
        self.assertEqual(lines[1], '"2024-01-05","Asha","Order: 2x Milk","100.00","0.00"')
        self.assertEqual(lines[3], "")
        self.assertEqual(lines[4], '"","","Total","100.00","60.00"')
        self.assertTrue(text.endswith("\n"))

    def test_csv_roundtrip(self):
        self.db.add_payment(self.asha, "2024-01-20", 25.50)
        self.db.add_payment(self.asha, "2024-01-21", 24.50)
        pres = self.prepare(customer_id=self.asha)
        rows = list(csv.reader(io.StringIO(self.sg.render_delimited_text(pres))))

        self.assertEqual(len(rows), len(pres.transactions) + 3)
        self.assertEqual(rows[0], ["Date", "Description", "Billed", "Paid"])
        self.assertEqual(rows[-2], [])
        self.assertEqual(rows[-1], ["", "Total", "100.00", "110.00"])
        self.assertEqual(float(rows[-1][2]), pres.summary.total_billed)
        self.assertEqual(float(rows[-1][3]), pres.summary.total_paid)

    def test_csv_escapes_quotes(self):
        self.db.add_order(self.asha, "2024-01-06", [OrderItem('Milk "A2"', 70.0, 1)])
        text = self.sg.render_delimited_text(self.prepare())
        self.assertIn('"Order: 1x Milk ""A2"""', text)

    def test_csv_empty(self):
        pres = self.prepare(window=("2023-06-01", "2023-06-30"))
        rows = list(csv.reader(io.StringIO(self.sg.render_delimited_text(pres))))
        self.assertEqual(len(rows), 3)
        self.assertEqual(rows[-1], ["", "", "Total", "0.00", "0.00"])

    def test_build_filename(self):
        name = StatementGenerator.build_filename(StatementFilter(*JANUARY), "csv")
        self.assertEqual(name, "account-statement-2024-01-01-to-2024-01-31.csv")

    def test_export_csv(self):
        pres = self.prepare()
        with tempfile.TemporaryDirectory() as folder:
            result = self.sg.export_csv(pres, folder)
            self.assertTrue(result.success)
            self.assertEqual(os.path.basename(result.value), "account-statement-2024-01-01-to-2024-01-31.csv")
            with open(result.value, encoding="utf-8", newline="") as f:
                self.assertEqual(f.read(), self.sg.render_delimited_text(pres))

    def test_export_csv_missing_folder(self):
        result = self.sg.export_csv(self.prepare(), os.path.join(tempfile.gettempdir(), "no", "such", "dir"))
        self.assertFalse(result)
        self.assertEqual(result.error_type, "EXPORT")

    def test_export_pdf(self):
        with tempfile.TemporaryDirectory() as folder:
            result = self.sg.export_pdf(self.prepare(), folder)
            self.assertTrue(result.success)
            self.assertTrue(result.value.endswith(".pdf"))
            with open(result.value, "rb") as f:
                self.assertEqual(f.read(4), b"%PDF")

    def test_export_pdf_empty_statement(self):
        with tempfile.TemporaryDirectory() as folder:
            result = self.sg.export_pdf(self.prepare(window=("2023-06-01", "2023-06-30")), folder)
            self.assertTrue(result.success)
            self.assertTrue(os.path.getsize(result.value) > 0)

    def test_export_excel(self):
        with tempfile.TemporaryDirectory() as folder:
            result = self.sg.export_excel(self.prepare(customer_id=self.asha), folder)
            self.assertTrue(result.success)
            self.assertTrue(result.value.endswith(".xlsx"))
            with open(result.value, "rb") as f:
                self.assertEqual(f.read(2), b"PK")


class TestPdfFonts(unittest.TestCase):
    def setUp(self):
        self.db = DatabaseManager(":memory:")
        self.fonts_dir = os.path.join(os.path.dirname(reportlab.__file__), "fonts")

    def tearDown(self):
        self.db.close()

    def generator(self, candidates):
        return StatementGenerator(self.db, StatementConfig(font_candidates=candidates))

    def test_unicode_font_with_bold_face(self):
        regular = os.path.join(self.fonts_dir, "Vera.ttf")
        bold = os.path.join(self.fonts_dir, "VeraBd.ttf")
        font, bold_font, symbol = self.generator([(regular, bold)])._resolve_pdf_font()
        self.assertEqual(font, "StatementSans")
        self.assertEqual(bold_font, "StatementSans-Bold")
        self.assertEqual(symbol, "₹")

    def test_missing_bold_face_uses_regular(self):
        regular = os.path.join(self.fonts_dir, "Vera.ttf")
        missing = os.path.join(self.fonts_dir, "NoSuchFont-Bold.ttf")
        for bold in (missing, None):
            font, bold_font, _ = self.generator([(regular, bold)])._resolve_pdf_font()
            self.assertEqual(bold_font, font)

    def test_first_existing_candidate_wins(self):
        regular = os.path.join(self.fonts_dir, "Vera.ttf")
        candidates = [("/no/such/font.ttf", None), (regular, None)]
        self.assertEqual(self.generator(candidates)._resolve_pdf_font()[0], "StatementSans")

    def test_no_unicode_font_falls_back_to_helvetica(self):
        self.assertEqual(self.generator([("/no/such/font.ttf", None)])._resolve_pdf_font(),
                         ("Helvetica", "Helvetica-Bold", "Rs."))


if __name__ == "__main__":
    unittest.main()
