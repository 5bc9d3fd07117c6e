import unittest
from unittest.mock import MagicMock

from sqlalchemy import select

from merchant_dashboard.models import InventoryTransaction, Product, Store, StoreBranch
from merchant_dashboard.models.inventory import Inventory
from merchant_dashboard.services.adjustment_service import (
    AdjustmentFailedError,
    AdjustmentRequest,
    AdjustmentValidationError,
    adjust_stock,
    parse_quantity,
    quantity_change_for,
)
from merchant_dashboard.services.inventory_gateway import GatewayError, InventoryGateway
from tests.support import make_session, seed_store


def _request(adjustment_type="add", quantity=3, **overrides):
    values = dict(
        product_id=1,
        branch_id=1,
        adjustment_type=adjustment_type,
        quantity=quantity,
        available_quantity=5,
        on_hand_quantity=5,
        is_available=True,
    )
    values.update(overrides)
    return AdjustmentRequest(**values)


class ParseQuantityTest(unittest.TestCase):
    def test_accepts_positive_integers(self):
        self.assertEqual(parse_quantity("7"), 7)
        self.assertEqual(parse_quantity(" 12 "), 12)
        self.assertEqual(parse_quantity(3), 3)

    def test_rejects_blank_zero_negative_and_text(self):
        for raw in ("", None, "0", "-4", "abc", "2.5", 0, True):
            with self.subTest(raw=raw):
                with self.assertRaises(AdjustmentValidationError) as ctx:
                    parse_quantity(raw)
                self.assertEqual(str(ctx.exception), "Please enter a valid quantity")

    def test_zero_only_when_allowed(self):
        self.assertEqual(parse_quantity("0", allow_zero=True), 0)
        with self.assertRaises(AdjustmentValidationError):
            parse_quantity("-1", allow_zero=True)


class QuantityChangeTest(unittest.TestCase):
    def test_signed_change_per_type(self):
        self.assertEqual(quantity_change_for(_request("add", 4)), 4)
        self.assertEqual(quantity_change_for(_request("remove", 4)), -4)

    def test_set_moves_on_hand_to_target(self):
        self.assertEqual(quantity_change_for(_request("set", 8, on_hand_quantity=5)), 3)
        self.assertEqual(quantity_change_for(_request("set", 2, on_hand_quantity=5)), -3)
        self.assertEqual(quantity_change_for(_request("set", 5, on_hand_quantity=5)), 0)

    def test_set_to_zero_empties_the_branch(self):
        gateway = MagicMock(spec=InventoryGateway)

        outcome = adjust_stock(gateway, _request("set", 0, on_hand_quantity=5))

        self.assertEqual(outcome.quantity_change, -5)
        gateway.call_adjust_inventory.assert_called_once_with(1, 1, -5, "adjustment", None)

    def test_zero_is_still_rejected_for_add_and_remove(self):
        for adjustment_type in ("add", "remove"):
            with self.subTest(adjustment_type=adjustment_type):
                gateway = MagicMock(spec=InventoryGateway)
                with self.assertRaises(AdjustmentValidationError):
                    adjust_stock(gateway, _request(adjustment_type, 0))
                self.assertEqual(gateway.method_calls, [])


class AdjustStockChainTest(unittest.TestCase):
    def test_remove_beyond_available_makes_no_backend_call(self):
        gateway = MagicMock(spec=InventoryGateway)
        request = _request("remove", 3, available_quantity=2)

        with self.assertRaises(AdjustmentValidationError) as ctx:
            adjust_stock(gateway, request)

        self.assertEqual(
            str(ctx.exception),
            "Cannot remove 3 units. Only 2 units available in this branch.",
        )
        self.assertEqual(gateway.method_calls, [])

    def test_unknown_type_is_rejected_before_backend(self):
        gateway = MagicMock(spec=InventoryGateway)
        with self.assertRaises(AdjustmentValidationError):
            adjust_stock(gateway, _request("transfer", 1))
        self.assertEqual(gateway.method_calls, [])

    def test_rpc_success_stops_the_chain(self):
        gateway = MagicMock(spec=InventoryGateway)

        outcome = adjust_stock(gateway, _request("add", 3, notes="restock"))

        self.assertEqual(outcome.strategy, "rpc")
        self.assertEqual(outcome.quantity_change, 3)
        self.assertEqual(outcome.transaction_type, "purchase")
        gateway.call_adjust_inventory.assert_called_once_with(1, 1, 3, "purchase", "restock")
        gateway.apply_manual_adjustment.assert_not_called()
        gateway.commit.assert_called_once_with()

    def test_manual_runs_after_rpc_failure(self):
        gateway = MagicMock(spec=InventoryGateway)
        gateway.call_adjust_inventory.side_effect = GatewayError("adjust_inventory", "missing")
        gateway.apply_manual_adjustment.return_value = MagicMock(quantity_before=5, quantity_after=3)

        outcome = adjust_stock(gateway, _request("remove", 2))

        self.assertEqual(outcome.strategy, "manual")
        self.assertEqual([attempt.ok for attempt in outcome.attempts], [False, True])
        gateway.apply_manual_adjustment.assert_called_once_with(1, 1, -2, "adjustment", None)
        gateway.set_product_availability.assert_not_called()

    def test_all_strategies_failing_surfaces_each_attempt(self):
        gateway = MagicMock(spec=InventoryGateway)
        gateway.call_adjust_inventory.side_effect = GatewayError("rpc", "missing function")
        gateway.apply_manual_adjustment.side_effect = GatewayError("manual", "permission denied")
        gateway.set_product_availability.side_effect = GatewayError("flag", "permission denied")

        with self.assertRaises(AdjustmentFailedError) as ctx:
            adjust_stock(gateway, _request("add", 1))

        self.assertEqual(str(ctx.exception), "An error occurred while adjusting stock")
        self.assertEqual(
            [result.name for result in ctx.exception.results],
            ["rpc", "manual", "availability_flag"],
        )
        self.assertFalse(any(result.ok for result in ctx.exception.results))
        self.assertEqual(
            [result.operation for result in ctx.exception.results],
            ["rpc", "manual", "flag"],
        )
        gateway.commit.assert_not_called()

    def test_final_fallback_flag_follows_adjustment_type(self):
        gateway = MagicMock(spec=InventoryGateway)
        gateway.call_adjust_inventory.side_effect = GatewayError("rpc", "x")
        gateway.apply_manual_adjustment.side_effect = GatewayError("manual", "x")

        outcome = adjust_stock(gateway, _request("set", 9))

        self.assertEqual(outcome.strategy, "availability_flag")
        gateway.set_product_availability.assert_called_once_with(1, False)

    def test_probe_failure_keeps_flag_for_non_add(self):
        gateway = MagicMock(spec=InventoryGateway)
        gateway.probe_inventory.side_effect = GatewayError("probe_inventory", "no such table")

        outcome = adjust_stock(gateway, _request("remove", 1, is_available=False))

        self.assertEqual(outcome.strategy, "availability_flag")
        gateway.set_product_availability.assert_called_once_with(1, False)
        gateway.call_adjust_inventory.assert_not_called()
        gateway.commit.assert_called_once_with()

    def test_probe_failure_with_flag_failure(self):
        gateway = MagicMock(spec=InventoryGateway)
        gateway.probe_inventory.side_effect = GatewayError("probe_inventory", "no such table")
        gateway.set_product_availability.side_effect = GatewayError("flag", "denied")

        with self.assertRaises(AdjustmentFailedError) as ctx:
            adjust_stock(gateway, _request("add", 1))

        self.assertEqual(str(ctx.exception), "Failed to update product availability")
        gateway.commit.assert_not_called()


class AdjustStockSqliteTest(unittest.TestCase):
    """SQLite has no stored procedures, so the rpc tier always fails here."""

    def setUp(self):
        self.db = make_session()
        self.seed = seed_store(self.db, main_quantity=5)

    def tearDown(self):
        self.db.close()

    def _gateway(self):
        return InventoryGateway(self.db, 1, performed_by="owner")

    def test_add_falls_back_to_manual_upsert_and_log(self):
        request = _request(
            "add",
            3,
            product_id=self.seed.product.id,
            branch_id=self.seed.main.id,
        )

        outcome = adjust_stock(self._gateway(), request)

        self.assertEqual(outcome.strategy, "manual")
        self.assertFalse(outcome.attempts[0].ok)
        self.assertIn("adjust_inventory", outcome.attempts[0].error)

        row = self.db.execute(
            select(Inventory).where(Inventory.branch_id == self.seed.main.id)
        ).scalar_one()
        self.assertEqual(row.quantity, 8)
        self.assertEqual(row.available_quantity, 8)

        tx = self.db.execute(select(InventoryTransaction)).scalar_one()
        self.assertEqual(tx.transaction_type, "purchase")
        self.assertEqual((tx.quantity_before, tx.quantity_after), (5, 8))
        self.assertEqual(tx.quantity_change, 3)
        self.assertEqual(tx.performed_by, "owner")
        self.assertEqual(tx.inventory_id, row.id)

    def test_set_on_branch_without_row_creates_it(self):
        request = _request(
            "set",
            4,
            product_id=self.seed.product.id,
            branch_id=self.seed.east.id,
            available_quantity=0,
            on_hand_quantity=0,
        )

        outcome = adjust_stock(self._gateway(), request)

        self.assertEqual((outcome.quantity_before, outcome.quantity_after), (0, 4))
        row = self.db.execute(
            select(Inventory).where(Inventory.branch_id == self.seed.east.id)
        ).scalar_one()
        self.assertEqual(row.quantity, 4)
        tx = self.db.execute(select(InventoryTransaction)).scalar_one()
        self.assertEqual(tx.transaction_type, "adjustment")

    def test_set_to_zero_through_manual_path(self):
        request = _request(
            "set",
            0,
            product_id=self.seed.product.id,
            branch_id=self.seed.main.id,
        )

        outcome = adjust_stock(self._gateway(), request)

        self.assertEqual(outcome.strategy, "manual")
        self.assertEqual(outcome.attempts[0].operation, "adjust_inventory")
        row = self.db.execute(
            select(Inventory).where(Inventory.branch_id == self.seed.main.id)
        ).scalar_one()
        self.assertEqual((row.quantity, row.available_quantity), (0, 0))
        tx = self.db.execute(select(InventoryTransaction)).scalar_one()
        self.assertEqual((tx.quantity_before, tx.quantity_after, tx.quantity_change), (5, 0, -5))

    def test_missing_inventory_table_updates_flag_only(self):
        db = make_session(tables=[Store, StoreBranch, Product])
        try:
            db.add(Store(id=1, name="Bare Store"))
            product = Product(store_id=1, name_en="Tea", price=10.0, is_available=False)
            db.add(product)
            db.commit()

            outcome = adjust_stock(
                InventoryGateway(db, 1),
                _request("add", 2, product_id=product.id, branch_id=None),
            )

            self.assertEqual(outcome.strategy, "availability_flag")
            db.expire_all()
            self.assertTrue(db.get(Product, product.id).is_available)
        finally:
            db.close()


if __name__ == "__main__":
    unittest.main()
