import logging
from dataclasses import dataclass
from typing import Optional

from merchant_dashboard.services.inventory_gateway import GatewayError, InventoryGateway

logger = logging.getLogger(__name__)


class TransferValidationError(ValueError):
    pass


class TransferFailedError(RuntimeError):
    pass


@dataclass
class TransferRequest:
    product_id: int
    from_branch_id: Optional[int]
    to_branch_id: Optional[int]
    quantity: int
    available_quantity: int = 0
    notes: Optional[str] = None


@dataclass
class TransferOutcome:
    strategy: str
    quantity: int
    notes: Optional[str]


def default_transfer_notes(source_name: str, target_name: str) -> str:
    return "Transfer from {} to {}".format(source_name, target_name)


def validate_transfer(request: TransferRequest) -> None:
    if isinstance(request.quantity, bool) or not isinstance(request.quantity, int) or request.quantity <= 0:
        raise TransferValidationError("Please enter a valid quantity")
    if request.to_branch_id is None and request.from_branch_id is None:
        raise TransferValidationError("Please select a target branch first")
    if request.from_branch_id == request.to_branch_id:
        raise TransferValidationError("Source and target branch must be different")
    available = request.available_quantity or 0
    if request.quantity > available:
        raise TransferValidationError(
            "Cannot transfer {} units. Only {} units available in the source branch.".format(
                request.quantity, available
            )
        )


def transfer_stock(gateway: InventoryGateway, request: TransferRequest) -> TransferOutcome:
    validate_transfer(request)

    try:
        gateway.call_transfer_inventory(
            request.product_id,
            request.from_branch_id,
            request.to_branch_id,
            request.quantity,
            request.notes,
        )
        strategy = "rpc"
    except GatewayError as exc:
        logger.warning(
            "Transfer procedure unavailable, moving stock manually: %s",
            exc.message,
            extra={"product_id": request.product_id, "strategy": "manual"},
        )
        try:
            gateway.apply_manual_transfer(
                request.product_id,
                request.from_branch_id,
                request.to_branch_id,
                request.quantity,
                request.notes,
            )
        except GatewayError as manual_exc:
            logger.error(
                "Transfer of product %s from branch %s to %s failed: %s",
                request.product_id,
                request.from_branch_id,
                request.to_branch_id,
                manual_exc.message,
            )
            raise TransferFailedError("Transfer failed. Please try again.") from manual_exc
        strategy = "manual"

    gateway.commit()
    return TransferOutcome(strategy=strategy, quantity=request.quantity, notes=request.notes)


__all__ = [
    "TransferFailedError",
    "TransferOutcome",
    "TransferRequest",
    "TransferValidationError",
    "default_transfer_notes",
    "transfer_stock",
    "validate_transfer",
]
