import unittest

from merchant_dashboard.core.view_state import SortState, StockFilters


class SortStateTest(unittest.TestCase):
    def test_toggle_cycles_asc_desc_none(self):
        state = SortState()
        state.toggle("available")
        self.assertEqual((state.column, state.direction), ("available", "asc"))
        state.toggle("available")
        self.assertEqual((state.column, state.direction), ("available", "desc"))
        state.toggle("available")
        self.assertEqual((state.column, state.direction), (None, "asc"))

    def test_new_column_restarts_ascending(self):
        state = SortState(column="product", direction="desc")
        state.toggle("status")
        self.assertEqual((state.column, state.direction), ("status", "asc"))

    def test_from_query_rejects_unknown_direction(self):
        state = SortState.from_query("product", "sideways")
        self.assertEqual(state.direction, "asc")
        self.assertIsNone(SortState.from_query("  ", "desc").column)


class StockFiltersTest(unittest.TestCase):
    def test_active_count_and_clear(self):
        filters = StockFilters(status="low-stock", branch="main")
        self.assertEqual(filters.active_count, 2)
        filters.clear()
        self.assertFalse(filters.has_active)


if __name__ == "__main__":
    unittest.main()
