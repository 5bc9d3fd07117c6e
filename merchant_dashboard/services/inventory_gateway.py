"""Query client for the inventory backend.

Every backend operation runs inside its own savepoint so a failed statement
(missing table, undeployed stored procedure, trigger rejection) leaves the
surrounding session usable for the next fallback step.
"""

import logging
import re
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import delete, select, text, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from merchant_dashboard.config import get_settings
from merchant_dashboard.models.branch import StoreBranch
from merchant_dashboard.models.inventory import Inventory
from merchant_dashboard.models.inventory_transaction import InventoryTransaction
from merchant_dashboard.models.product import Product

logger = logging.getLogger(__name__)

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_.]*$")


class GatewayError(Exception):
    def __init__(self, operation: str, message: str):
        self.operation = operation
        self.message = message
        super().__init__("{} failed: {}".format(operation, message))


@dataclass
class StockMovement:
    inventory_id: Optional[int]
    quantity_before: int
    quantity_after: int


def _procedure_name(name: str) -> str:
    if not _IDENTIFIER_RE.match(name or ""):
        raise ValueError("Invalid stored procedure name: {!r}".format(name))
    return name


def _branch_clause(branch_id):
    if branch_id is None:
        return Inventory.branch_id.is_(None)
    return Inventory.branch_id == branch_id


class InventoryGateway:
    def __init__(self, db: Session, store_id: int, *, performed_by: Optional[str] = None):
        self.db = db
        self.store_id = store_id
        self.performed_by = performed_by
        self._settings = get_settings()

    def _run(self, operation: str, fn):
        try:
            with self.db.begin_nested():
                return fn()
        except SQLAlchemyError as exc:
            logger.debug("Backend operation %s failed", operation, exc_info=True)
            raise GatewayError(operation, str(exc)) from exc

    def commit(self) -> None:
        self.db.commit()

    # ------------------------------------------------------------------
    # Probes and stored procedures
    # ------------------------------------------------------------------

    def probe_inventory(self) -> None:
        # noinspection SqlNoDataSourceInspection
        self._run(
            "probe_inventory",
            lambda: self.db.execute(text("SELECT id FROM inventory LIMIT 1")).first(),
        )

    def call_adjust_inventory(
        self,
        product_id: int,
        branch_id: Optional[int],
        quantity_change: int,
        transaction_type: str,
        notes: Optional[str],
    ) -> None:
        name = _procedure_name(self._settings.ADJUST_INVENTORY_RPC)
        statement = text(
            f"SELECT {name}(:p_product_id, :p_branch_id, :p_store_id, "
            ":p_quantity_change, :p_transaction_type, :p_notes)"
        )
        params = {
            "p_product_id": product_id,
            "p_branch_id": branch_id,
            "p_store_id": self.store_id,
            "p_quantity_change": quantity_change,
            "p_transaction_type": transaction_type,
            "p_notes": notes,
        }
        self._run(name, lambda: self.db.execute(statement, params))

    def call_transfer_inventory(
        self,
        product_id: int,
        from_branch_id: Optional[int],
        to_branch_id: Optional[int],
        quantity: int,
        notes: Optional[str],
    ) -> None:
        name = _procedure_name(self._settings.TRANSFER_INVENTORY_RPC)
        statement = text(
            f"SELECT {name}(:p_product_id, :p_from_branch_id, :p_to_branch_id, "
            ":p_store_id, :p_quantity, :p_notes)"
        )
        params = {
            "p_product_id": product_id,
            "p_from_branch_id": from_branch_id,
            "p_to_branch_id": to_branch_id,
            "p_store_id": self.store_id,
            "p_quantity": quantity,
            "p_notes": notes,
        }
        self._run(name, lambda: self.db.execute(statement, params))

    # ------------------------------------------------------------------
    # Table operations
    # ------------------------------------------------------------------

    def find_inventory_row(self, product_id: int, branch_id: Optional[int]) -> Optional[Inventory]:
        return self._run(
            "find_inventory_row",
            lambda: self._select_inventory_row(product_id, branch_id),
        )

    def _select_inventory_row(self, product_id, branch_id):
        return (
            self.db.execute(
                select(Inventory)
                .where(Inventory.product_id == product_id)
                .where(Inventory.store_id == self.store_id)
                .where(_branch_clause(branch_id))
            )
            .scalars()
            .first()
        )

    def _move_stock(self, product_id, branch_id, quantity_change, transaction_type, notes) -> StockMovement:
        row = self._select_inventory_row(product_id, branch_id)
        quantity_before = (row.quantity or 0) if row is not None else 0
        quantity_after = max(0, quantity_before + quantity_change)

        if row is None:
            row = Inventory(
                product_id=product_id,
                branch_id=branch_id,
                store_id=self.store_id,
                quantity=quantity_after,
                reserved_quantity=0,
                available_quantity=quantity_after,
            )
            self.db.add(row)
        else:
            row.quantity = quantity_after
            row.available_quantity = max(0, quantity_after - (row.reserved_quantity or 0))
        self.db.flush()

        self.db.add(
            InventoryTransaction(
                inventory_id=row.id,
                product_id=product_id,
                branch_id=branch_id,
                store_id=self.store_id,
                transaction_type=transaction_type,
                quantity_change=quantity_change,
                quantity_before=quantity_before,
                quantity_after=quantity_after,
                notes=notes,
                performed_by=self.performed_by,
            )
        )
        self.db.flush()
        return StockMovement(row.id, quantity_before, quantity_after)

    def apply_manual_adjustment(
        self,
        product_id: int,
        branch_id: Optional[int],
        quantity_change: int,
        transaction_type: str,
        notes: Optional[str],
    ) -> StockMovement:
        return self._run(
            "manual_adjustment",
            lambda: self._move_stock(product_id, branch_id, quantity_change, transaction_type, notes),
        )

    def apply_manual_transfer(
        self,
        product_id: int,
        from_branch_id: Optional[int],
        to_branch_id: Optional[int],
        quantity: int,
        notes: Optional[str],
    ) -> tuple[StockMovement, StockMovement]:
        def _transfer():
            source = self._move_stock(product_id, from_branch_id, -quantity, "transfer", notes)
            target = self._move_stock(product_id, to_branch_id, quantity, "transfer", notes)
            return source, target

        return self._run("manual_transfer", _transfer)

    def set_product_availability(self, product_id: int, is_available: bool) -> None:
        self._run(
            "set_product_availability",
            lambda: self.db.execute(
                update(Product)
                .where(Product.id == product_id)
                .values(is_available=is_available)
            ),
        )

    def delete_branch(self, branch_id: int) -> None:
        self._run(
            "delete_branch",
            lambda: self.db.execute(
                delete(StoreBranch)
                .where(StoreBranch.id == branch_id)
                .where(StoreBranch.store_id == self.store_id)
            ),
        )


__all__ = ["GatewayError", "InventoryGateway", "StockMovement"]
