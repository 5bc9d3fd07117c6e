import unittest

from merchant_dashboard.core.stock_rules import (
    IN_STOCK,
    LOW_STOCK,
    OUT_OF_STOCK,
    classify_stock,
    normalize_status_filter,
    resolve_threshold,
    status_rank,
)


class StockRulesTest(unittest.TestCase):
    def test_boundaries(self):
        cases = [
            (0, 10, OUT_OF_STOCK),
            (1, 10, LOW_STOCK),
            (10, 10, LOW_STOCK),
            (11, 10, IN_STOCK),
            (3, 3, LOW_STOCK),
            (4, 3, IN_STOCK),
        ]
        for available, threshold, expected in cases:
            with self.subTest(available=available, threshold=threshold):
                self.assertEqual(classify_stock(available, threshold), expected)

    def test_unset_threshold_defaults_to_ten(self):
        self.assertEqual(resolve_threshold(None), 10)
        self.assertEqual(resolve_threshold(0), 10)
        self.assertEqual(resolve_threshold(25), 25)
        self.assertEqual(classify_stock(10, None), LOW_STOCK)
        self.assertEqual(classify_stock(11, None), IN_STOCK)

    def test_every_pair_has_exactly_one_status(self):
        for available in range(-2, 30):
            for threshold in (None, 1, 5, 10, 20):
                status = classify_stock(available, threshold)
                self.assertIn(status, (OUT_OF_STOCK, LOW_STOCK, IN_STOCK))

    def test_status_rank_orders_out_low_in(self):
        self.assertLess(status_rank(OUT_OF_STOCK), status_rank(LOW_STOCK))
        self.assertLess(status_rank(LOW_STOCK), status_rank(IN_STOCK))

    def test_status_filter_aliases(self):
        self.assertEqual(normalize_status_filter("low-stock"), LOW_STOCK)
        self.assertEqual(normalize_status_filter("Out-Of-Stock"), OUT_OF_STOCK)
        self.assertIsNone(normalize_status_filter("all"))
        self.assertIsNone(normalize_status_filter(None))


if __name__ == "__main__":
    unittest.main()
