import logging
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from merchant_dashboard.core.constants import MAIN_BRANCH_ERROR_MARKER, MISSING_TABLE_MARKERS
from merchant_dashboard.models.branch import StoreBranch
from merchant_dashboard.services.inventory_gateway import GatewayError, InventoryGateway

logger = logging.getLogger(__name__)

MAIN_BRANCH_MESSAGE = "Cannot delete the main branch. Every store must have a main branch."
DELETE_FAILED_MESSAGE = "Failed to delete branch. It may have associated inventory."
MIGRATION_MESSAGE = (
    "Branch management requires running the database migration first. "
    "Please contact your administrator."
)
SAVE_FAILED_MESSAGE = "Failed to save branch"


class BranchValidationError(ValueError):
    pass


class BranchDeletionError(RuntimeError):
    pass


class MainBranchDeletionError(BranchDeletionError):
    def __init__(self, message: str = MAIN_BRANCH_MESSAGE):
        super().__init__(message)


class BranchSaveError(RuntimeError):
    pass


def _is_missing_table_error(message: str) -> bool:
    lowered = (message or "").lower()
    return any(marker in lowered for marker in MISSING_TABLE_MARKERS)


def list_branches(db: Session, store_id: int, *, active_only: bool = True) -> list[StoreBranch]:
    stmt = select(StoreBranch).where(StoreBranch.store_id == store_id)
    if active_only:
        stmt = stmt.where(StoreBranch.is_active.is_(True))
    stmt = stmt.order_by(StoreBranch.is_main_branch.desc(), StoreBranch.id)
    return list(db.execute(stmt).scalars().all())


def get_branch(db: Session, store_id: int, branch_id: int) -> Optional[StoreBranch]:
    return (
        db.execute(
            select(StoreBranch)
            .where(StoreBranch.id == branch_id)
            .where(StoreBranch.store_id == store_id)
        )
        .scalars()
        .first()
    )


def _clean(value):
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def save_branch(db: Session, store_id: int, payload: dict, branch: Optional[StoreBranch] = None) -> StoreBranch:
    """Create or update a branch, keeping exactly one main branch per store."""
    name = _clean(payload.get("name"))
    if not name:
        raise BranchValidationError("Branch name is required")

    wants_main = bool(payload.get("is_main_branch"))
    if branch is not None and branch.is_main_branch:
        # The main branch is only replaced by promoting another branch.
        wants_main = True

    try:
        has_main = (
            db.execute(
                select(StoreBranch.id)
                .where(StoreBranch.store_id == store_id)
                .where(StoreBranch.is_main_branch.is_(True))
                .limit(1)
            ).first()
            is not None
        )
        if branch is None and not has_main:
            wants_main = True

        if wants_main:
            demote = (
                update(StoreBranch)
                .where(StoreBranch.store_id == store_id)
                .where(StoreBranch.is_main_branch.is_(True))
            )
            if branch is not None:
                demote = demote.where(StoreBranch.id != branch.id)
            db.execute(demote.values(is_main_branch=False))

        if branch is None:
            branch = StoreBranch(store_id=store_id)
            db.add(branch)

        branch.name = name
        branch.name_ar = _clean(payload.get("name_ar"))
        branch.code = _clean(payload.get("code"))
        branch.address = _clean(payload.get("address"))
        branch.city = _clean(payload.get("city"))
        branch.is_main_branch = wants_main
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Error saving branch for store %s: %s", store_id, exc)
        if _is_missing_table_error(str(exc)):
            raise BranchSaveError(MIGRATION_MESSAGE) from exc
        raise BranchSaveError(SAVE_FAILED_MESSAGE) from exc

    db.refresh(branch)
    return branch


def delete_branch(gateway: InventoryGateway, branch: StoreBranch) -> None:
    if branch.is_main_branch:
        raise MainBranchDeletionError()

    try:
        gateway.delete_branch(branch.id)
    except GatewayError as exc:
        # Triggers on the backend reject main-branch deletes with this wording.
        if MAIN_BRANCH_ERROR_MARKER in exc.message.lower():
            raise MainBranchDeletionError() from exc
        logger.error(
            "Error deleting branch: %s",
            exc.message,
            extra={"store_id": gateway.store_id, "branch_id": branch.id},
        )
        raise BranchDeletionError(DELETE_FAILED_MESSAGE) from exc

    gateway.commit()
    logger.info("Deleted branch", extra={"store_id": gateway.store_id, "branch_id": branch.id})


__all__ = [
    "BranchDeletionError",
    "BranchSaveError",
    "BranchValidationError",
    "MainBranchDeletionError",
    "delete_branch",
    "get_branch",
    "list_branches",
    "save_branch",
]
