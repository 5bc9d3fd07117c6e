import unittest
from unittest.mock import MagicMock

from sqlalchemy import select

from merchant_dashboard.models import InventoryTransaction
from merchant_dashboard.models.inventory import Inventory
from merchant_dashboard.services.inventory_gateway import GatewayError, InventoryGateway
from merchant_dashboard.services.transfer_service import (
    TransferFailedError,
    TransferRequest,
    TransferValidationError,
    default_transfer_notes,
    transfer_stock,
)
from tests.support import make_session, seed_store


class TransferValidationTest(unittest.TestCase):
    def test_invalid_requests_make_no_backend_call(self):
        cases = [
            (TransferRequest(1, 1, 2, 0, available_quantity=5), "Please enter a valid quantity"),
            (TransferRequest(1, 1, 1, 2, available_quantity=5), "Source and target branch must be different"),
            (
                TransferRequest(1, 1, 2, 9, available_quantity=5),
                "Cannot transfer 9 units. Only 5 units available in the source branch.",
            ),
        ]
        for request, message in cases:
            with self.subTest(message=message):
                gateway = MagicMock(spec=InventoryGateway)
                with self.assertRaises(TransferValidationError) as ctx:
                    transfer_stock(gateway, request)
                self.assertEqual(str(ctx.exception), message)
                self.assertEqual(gateway.method_calls, [])

    def test_default_notes(self):
        self.assertEqual(
            default_transfer_notes("Main Branch", "East"),
            "Transfer from Main Branch to East",
        )


class TransferStockTest(unittest.TestCase):
    def test_rpc_success(self):
        gateway = MagicMock(spec=InventoryGateway)
        outcome = transfer_stock(gateway, TransferRequest(1, 1, 2, 3, available_quantity=5))
        self.assertEqual(outcome.strategy, "rpc")
        gateway.apply_manual_transfer.assert_not_called()
        gateway.commit.assert_called_once_with()

    def test_both_paths_failing(self):
        gateway = MagicMock(spec=InventoryGateway)
        gateway.call_transfer_inventory.side_effect = GatewayError("transfer_inventory", "missing")
        gateway.apply_manual_transfer.side_effect = GatewayError("manual_transfer", "denied")

        with self.assertRaises(TransferFailedError):
            transfer_stock(gateway, TransferRequest(1, 1, 2, 3, available_quantity=5))
        gateway.commit.assert_not_called()

    def test_manual_transfer_moves_stock_between_branches(self):
        db = make_session()
        try:
            seed = seed_store(db, main_quantity=5)
            request = TransferRequest(
                product_id=seed.product.id,
                from_branch_id=seed.main.id,
                to_branch_id=seed.east.id,
                quantity=2,
                available_quantity=5,
                notes="Transfer from Main Branch to East",
            )

            outcome = transfer_stock(InventoryGateway(db, 1), request)

            self.assertEqual(outcome.strategy, "manual")
            quantities = {
                row.branch_id: row.quantity
                for row in db.execute(select(Inventory)).scalars()
            }
            self.assertEqual(quantities, {seed.main.id: 3, seed.east.id: 2})

            changes = sorted(
                (tx.branch_id, tx.quantity_change, tx.transaction_type)
                for tx in db.execute(select(InventoryTransaction)).scalars()
            )
            self.assertEqual(
                changes,
                sorted([(seed.main.id, -2, "transfer"), (seed.east.id, 2, "transfer")]),
            )
        finally:
            db.close()


if __name__ == "__main__":
    unittest.main()
