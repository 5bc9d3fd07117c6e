"""Stock adjustment orchestration.

An adjustment is validated against the quantities the dashboard last rendered
and then persisted by the first backend strategy that succeeds:

1. ``rpc``: the ``adjust_inventory`` stored procedure;
2. ``manual``: read the row, upsert the new quantity and log the transaction;
3. ``availability_flag``: flip ``products.is_available`` only.

When the inventory table itself is unavailable the chain is skipped and the
availability flag is updated in probe mode, which only ever turns a product
on (an ``add``) and otherwise keeps the current flag.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Optional

from merchant_dashboard.services.inventory_gateway import GatewayError, InventoryGateway

logger = logging.getLogger(__name__)

ADD = "add"
REMOVE = "remove"
SET = "set"

_TRANSACTION_TYPES = {ADD: "purchase", REMOVE: "adjustment", SET: "adjustment"}


class AdjustmentValidationError(ValueError):
    pass


class AdjustmentFailedError(RuntimeError):
    def __init__(self, message: str, results=None):
        self.results = list(results or [])
        super().__init__(message)


@dataclass
class AdjustmentRequest:
    product_id: int
    branch_id: Optional[int]
    adjustment_type: str
    quantity: int
    notes: Optional[str] = None
    available_quantity: int = 0
    on_hand_quantity: int = 0
    is_available: bool = True


@dataclass
class StrategyResult:
    name: str
    ok: bool
    error: Optional[str] = None
    # Backend operation that failed; safe to show, unlike ``error``.
    operation: Optional[str] = None
    quantity_before: Optional[int] = None
    quantity_after: Optional[int] = None


@dataclass
class AdjustmentOutcome:
    strategy: str
    quantity_change: int
    transaction_type: str
    attempts: list[StrategyResult] = field(default_factory=list)
    quantity_before: Optional[int] = None
    quantity_after: Optional[int] = None


def parse_quantity(raw, *, allow_zero: bool = False) -> int:
    """Positive whole number; zero too when ``allow_zero`` (a ``set`` may empty a branch)."""
    if isinstance(raw, bool):
        raise AdjustmentValidationError("Please enter a valid quantity")
    if isinstance(raw, int):
        value = raw
    else:
        text_value = str(raw if raw is not None else "").strip()
        try:
            value = int(text_value)
        except ValueError:
            raise AdjustmentValidationError("Please enter a valid quantity") from None
    if value < 0 or (value == 0 and not allow_zero):
        raise AdjustmentValidationError("Please enter a valid quantity")
    return value


def transaction_type_for(adjustment_type: str) -> str:
    try:
        return _TRANSACTION_TYPES[adjustment_type]
    except KeyError:
        raise AdjustmentValidationError(
            "Unknown adjustment type: {}".format(adjustment_type)
        ) from None


def quantity_change_for(request: AdjustmentRequest) -> int:
    if request.adjustment_type == REMOVE:
        return -request.quantity
    if request.adjustment_type == SET:
        return request.quantity - (request.on_hand_quantity or 0)
    return request.quantity


def validate_adjustment(request: AdjustmentRequest) -> None:
    transaction_type_for(request.adjustment_type)
    parse_quantity(request.quantity, allow_zero=request.adjustment_type == SET)
    available = request.available_quantity or 0
    if request.adjustment_type == REMOVE and request.quantity > available:
        raise AdjustmentValidationError(
            "Cannot remove {} units. Only {} units available in this branch.".format(
                request.quantity, available
            )
        )


# ----------------------------------------------------------------------
# Strategies
# ----------------------------------------------------------------------


def _rpc_strategy(gateway: InventoryGateway, request: AdjustmentRequest, change: int) -> StrategyResult:
    gateway.call_adjust_inventory(
        request.product_id,
        request.branch_id,
        change,
        transaction_type_for(request.adjustment_type),
        request.notes or None,
    )
    return StrategyResult(name="rpc", ok=True)


def _manual_strategy(gateway: InventoryGateway, request: AdjustmentRequest, change: int) -> StrategyResult:
    movement = gateway.apply_manual_adjustment(
        request.product_id,
        request.branch_id,
        change,
        transaction_type_for(request.adjustment_type),
        request.notes or None,
    )
    return StrategyResult(
        name="manual",
        ok=True,
        quantity_before=movement.quantity_before,
        quantity_after=movement.quantity_after,
    )


def _availability_flag_strategy(gateway: InventoryGateway, request: AdjustmentRequest, change: int) -> StrategyResult:
    gateway.set_product_availability(request.product_id, request.adjustment_type == ADD)
    return StrategyResult(name="availability_flag", ok=True)


def _probe_flag_value(request: AdjustmentRequest) -> bool:
    if request.adjustment_type == ADD:
        return True
    return bool(request.is_available)


Strategy = Callable[[InventoryGateway, AdjustmentRequest, int], StrategyResult]

ADJUSTMENT_STRATEGIES: tuple[tuple[str, Strategy], ...] = (
    ("rpc", _rpc_strategy),
    ("manual", _manual_strategy),
    ("availability_flag", _availability_flag_strategy),
)


def _log_context(request: AdjustmentRequest, strategy: Optional[str] = None) -> dict:
    return {"product_id": request.product_id, "branch_id": request.branch_id, "strategy": strategy}


def _attempt(name: str, strategy: Strategy, gateway, request, change) -> StrategyResult:
    try:
        return strategy(gateway, request, change)
    except GatewayError as exc:
        logger.warning(
            "Adjustment strategy %s failed: %s",
            name,
            exc.message,
            extra=_log_context(request, name),
        )
        return StrategyResult(name=name, ok=False, error=exc.message, operation=exc.operation)


def adjust_stock(gateway: InventoryGateway, request: AdjustmentRequest) -> AdjustmentOutcome:
    validate_adjustment(request)
    change = quantity_change_for(request)
    transaction_type = transaction_type_for(request.adjustment_type)

    try:
        gateway.probe_inventory()
    except GatewayError as exc:
        logger.warning(
            "Inventory table unavailable, updating availability only: %s",
            exc.message,
            extra=_log_context(request, "availability_flag"),
        )
        try:
            gateway.set_product_availability(request.product_id, _probe_flag_value(request))
        except GatewayError as flag_exc:
            logger.error("Failed to update product availability", extra=_log_context(request))
            raise AdjustmentFailedError(
                "Failed to update product availability",
                [
                    StrategyResult(
                        name="availability_flag",
                        ok=False,
                        error=flag_exc.message,
                        operation=flag_exc.operation,
                    )
                ],
            ) from flag_exc
        gateway.commit()
        return AdjustmentOutcome(
            strategy="availability_flag",
            quantity_change=change,
            transaction_type=transaction_type,
            attempts=[StrategyResult(name="availability_flag", ok=True)],
        )

    attempts = []
    for name, strategy in ADJUSTMENT_STRATEGIES:
        result = _attempt(name, strategy, gateway, request, change)
        attempts.append(result)
        if result.ok:
            gateway.commit()
            logger.info("Adjusted stock by %s", change, extra=_log_context(request, name))
            return AdjustmentOutcome(
                strategy=name,
                quantity_change=change,
                transaction_type=transaction_type,
                attempts=attempts,
                quantity_before=result.quantity_before,
                quantity_after=result.quantity_after,
            )

    logger.error("All adjustment strategies failed", extra=_log_context(request))
    raise AdjustmentFailedError("An error occurred while adjusting stock", attempts)


__all__ = [
    "ADJUSTMENT_STRATEGIES",
    "AdjustmentFailedError",
    "AdjustmentOutcome",
    "AdjustmentRequest",
    "AdjustmentValidationError",
    "StrategyResult",
    "adjust_stock",
    "parse_quantity",
    "quantity_change_for",
    "transaction_type_for",
    "validate_adjustment",
]
