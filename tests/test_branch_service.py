import unittest
from unittest.mock import MagicMock

from sqlalchemy import select

from merchant_dashboard.models import Store
from merchant_dashboard.models.inventory import Inventory
from merchant_dashboard.services.branch_service import (
    DELETE_FAILED_MESSAGE,
    MAIN_BRANCH_MESSAGE,
    BranchDeletionError,
    BranchValidationError,
    MainBranchDeletionError,
    delete_branch,
    list_branches,
    save_branch,
)
from merchant_dashboard.services.inventory_gateway import GatewayError, InventoryGateway
from tests.support import branch, make_session, seed_store


def _gateway():
    gateway = MagicMock(spec=InventoryGateway)
    gateway.store_id = 1
    return gateway


class DeleteBranchTest(unittest.TestCase):
    def test_main_branch_is_rejected_without_backend_call(self):
        gateway = _gateway()
        with self.assertRaises(MainBranchDeletionError) as ctx:
            delete_branch(gateway, branch(1, "Main", is_main=True))
        self.assertEqual(str(ctx.exception), MAIN_BRANCH_MESSAGE)
        self.assertEqual(gateway.method_calls, [])

    def test_backend_main_branch_rejection_is_mapped(self):
        gateway = _gateway()
        gateway.delete_branch.side_effect = GatewayError(
            "delete_branch", "Cannot delete the Main Branch of a store"
        )
        with self.assertRaises(MainBranchDeletionError) as ctx:
            delete_branch(gateway, branch(2, "East"))
        self.assertEqual(str(ctx.exception), MAIN_BRANCH_MESSAGE)
        gateway.commit.assert_not_called()

    def test_other_backend_errors_are_generic(self):
        gateway = _gateway()
        gateway.delete_branch.side_effect = GatewayError("delete_branch", "permission denied")
        with self.assertRaises(BranchDeletionError) as ctx:
            delete_branch(gateway, branch(2, "East"))
        self.assertNotIsInstance(ctx.exception, MainBranchDeletionError)
        self.assertEqual(str(ctx.exception), DELETE_FAILED_MESSAGE)

    def test_delete_cascades_branch_inventory(self):
        db = make_session()
        try:
            seed = seed_store(db)
            db.add(
                Inventory(
                    product_id=seed.product.id,
                    branch_id=seed.east.id,
                    store_id=1,
                    quantity=4,
                    available_quantity=4,
                )
            )
            db.commit()

            delete_branch(InventoryGateway(db, 1), seed.east)

            self.assertEqual([item.id for item in list_branches(db, 1)], [seed.main.id])
            remaining = db.execute(select(Inventory.branch_id)).scalars().all()
            self.assertEqual(remaining, [seed.main.id])
        finally:
            db.close()


class SaveBranchTest(unittest.TestCase):
    def setUp(self):
        self.db = make_session()
        self.seed = seed_store(self.db)

    def tearDown(self):
        self.db.close()

    def test_name_is_required(self):
        with self.assertRaises(BranchValidationError):
            save_branch(self.db, 1, {"name": "   "})

    def test_promoting_a_branch_demotes_the_previous_main(self):
        save_branch(self.db, 1, {"name": "East", "is_main_branch": True}, self.seed.east)

        branches = list_branches(self.db, 1)
        self.assertEqual([item.id for item in branches if item.is_main_branch], [self.seed.east.id])
        self.assertEqual(branches[0].id, self.seed.east.id)

    def test_main_branch_cannot_be_demoted_directly(self):
        saved = save_branch(self.db, 1, {"name": "Head Office", "is_main_branch": False}, self.seed.main)
        self.assertTrue(saved.is_main_branch)
        self.assertEqual(saved.name, "Head Office")

    def test_new_branch_fields_are_trimmed(self):
        saved = save_branch(self.db, 1, {"name": " West ", "code": "", "city": " Riyadh "})
        self.assertEqual(saved.name, "West")
        self.assertIsNone(saved.code)
        self.assertEqual(saved.city, "Riyadh")
        self.assertFalse(saved.is_main_branch)

    def test_first_branch_of_store_becomes_main(self):
        self.db.add(Store(id=2, name="Second Store"))
        self.db.commit()
        saved = save_branch(self.db, 2, {"name": "Only"})
        self.assertTrue(saved.is_main_branch)


if __name__ == "__main__":
    unittest.main()
