import os
import sys
import unittest
from datetime import date
from unittest.mock import MagicMock

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from src.data_structures import StatementFilter
from src.ui_state_manager import StatementFilterState, period_bounds

TODAY = date(2024, 1, 17)  # Wednesday


class TestPeriodBounds(unittest.TestCase):

    def test_today(self):
        self.assertEqual(period_bounds("today", TODAY), (TODAY, TODAY))

    def test_week_starting_sunday(self):
        self.assertEqual(period_bounds("week", TODAY, 6), (date(2024, 1, 14), date(2024, 1, 20)))

    def test_week_starting_monday(self):
        self.assertEqual(period_bounds("week", TODAY, 0), (date(2024, 1, 15), date(2024, 1, 21)))

    def test_week_on_start_day(self):
        sunday = date(2024, 1, 14)
        self.assertEqual(period_bounds("week", sunday, 6)[0], sunday)

    def test_month(self):
        self.assertEqual(period_bounds("month", TODAY), (date(2024, 1, 1), date(2024, 1, 31)))

    def test_leap_february(self):
        self.assertEqual(period_bounds("month", date(2024, 2, 10)), (date(2024, 2, 1), date(2024, 2, 29)))

    def test_unknown_period(self):
        self.assertIsNone(period_bounds("year", TODAY))


class TestStatementFilterState(unittest.TestCase):
    def setUp(self):
        self.changes = []
        self.state = StatementFilterState(on_changed=self.changes.append, today_provider=lambda: TODAY)

    def test_defaults_to_current_month(self):
        self.assertEqual(self.state.period, "month")
        self.assertEqual((self.state.date_from, self.state.date_to), ("2024-01-01", "2024-01-31"))
        self.assertIsNone(self.state.customer_id)
        self.assertEqual(self.changes, [])

    def test_select_today(self):
        self.state.select_period("today")
        self.assertEqual((self.state.date_from, self.state.date_to), ("2024-01-17", "2024-01-17"))
        self.assertEqual(self.changes[-1], StatementFilter("2024-01-17", "2024-01-17", None))

    def test_manual_edit_switches_to_custom(self):
        self.state.set_date_from("2024-01-05")
        self.assertEqual(self.state.period, "custom")
        self.assertEqual(self.state.date_to, "2024-01-31")

        self.state.set_date_to("2024-01-20")
        self.assertEqual(self.state.to_filter(), StatementFilter("2024-01-05", "2024-01-20"))
        self.assertEqual(len(self.changes), 2)

    def test_quick_period_overrides_custom_range(self):
        self.state.set_date_from("2023-12-01")
        self.state.select_period("week")
        self.assertEqual(self.state.period, "week")
        self.assertEqual((self.state.date_from, self.state.date_to), ("2024-01-14", "2024-01-20"))

    def test_unknown_period_keeps_bounds(self):
        self.state.select_period("decade")
        self.assertEqual((self.state.date_from, self.state.date_to), ("2024-01-01", "2024-01-31"))

    def test_customer_selection(self):
        self.state.set_customer(3)
        self.assertEqual(self.changes[-1].customer_id, 3)
        self.assertTrue(self.changes[-1].has_customer)

        self.state.set_customer("")
        self.assertIsNone(self.state.customer_id)
        self.assertFalse(self.changes[-1].has_customer)

    def test_works_without_callback(self):
        state = StatementFilterState(today_provider=lambda: TODAY)
        state.set_customer(1)
        self.assertEqual(state.to_filter().customer_id, 1)

    def test_week_start_from_settings(self):
        db = MagicMock()
        db.get_setting.return_value = "0"
        state = StatementFilterState.from_settings(db, today_provider=lambda: TODAY)
        state.select_period("week")
        self.assertEqual(state.date_from, "2024-01-15")
        db.get_setting.assert_called_once_with("week_start", 6)

    def test_invalid_week_start_setting_falls_back(self):
        db = MagicMock()
        db.get_setting.return_value = "sunday"
        with self.assertLogs("src.ui_state_manager", level="WARNING"):
            state = StatementFilterState.from_settings(db, today_provider=lambda: TODAY)
        self.assertEqual(state.week_start, 6)
        state.select_period("week")
        self.assertEqual((state.date_from, state.date_to), ("2024-01-14", "2024-01-20"))


if __name__ == "__main__":
    unittest.main()
