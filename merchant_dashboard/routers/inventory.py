import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import HTMLResponse, RedirectResponse
from sqlalchemy import select
from sqlalchemy.orm import Session

from merchant_dashboard.config import get_settings
from merchant_dashboard.core.constants import TRANSACTION_DATE_RANGES
from merchant_dashboard.core.dashboard_auth import (
    dashboard_auth_enabled,
    redirect_if_unauthenticated,
    require_login_api,
)
from merchant_dashboard.core.view_state import SortState, StockFilters
from merchant_dashboard.dependencies import current_actor, current_locale, get_db
from merchant_dashboard.models.store import Store
from merchant_dashboard.schemas.inventory import (
    AdjustmentCreate,
    AdjustmentResult,
    TransferCreate,
    TransferResult,
)
from merchant_dashboard.services.adjustment_service import (
    AdjustmentFailedError,
    AdjustmentValidationError,
    adjust_stock,
)
from merchant_dashboard.services.dashboard_service import (
    StoreNotFoundError,
    adjustment_request_from_snapshot,
    load_snapshot,
    require_branch,
    stock_view,
)
from merchant_dashboard.services.inventory_gateway import InventoryGateway
from merchant_dashboard.services.inventory_service import (
    available_quantity_for,
    branch_preview,
    default_branch,
    display_branch_name,
)
from merchant_dashboard.services.transaction_service import filter_transactions, sort_transactions
from merchant_dashboard.services.transfer_service import (
    TransferFailedError,
    TransferRequest,
    TransferValidationError,
    default_transfer_notes,
    transfer_stock,
)

router = APIRouter(prefix="/inventory", tags=["Inventory"])
logger = logging.getLogger(__name__)


def _snapshot_or_404(db: Session, store_id: int, locale: str):
    try:
        return load_snapshot(
            db,
            store_id,
            transactions_limit=get_settings().TRANSACTIONS_LIMIT,
            locale=locale,
        )
    except StoreNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


def _stock_payload(db: Session, store_id: int, locale: str) -> dict:
    # Stored procedures write behind the session's back.
    db.expire_all()
    snapshot = _snapshot_or_404(db, store_id, locale)
    return stock_view(snapshot, StockFilters(), SortState(), locale=locale)


@router.get("/", response_class=HTMLResponse)
def inventory_index(request: Request, db: Session = Depends(get_db)):
    redirect = redirect_if_unauthenticated(request)
    if redirect:
        return redirect
    store_id = db.execute(select(Store.id).order_by(Store.id).limit(1)).scalar()
    if store_id is not None:
        return RedirectResponse(url="/inventory/{}".format(store_id), status_code=302)
    templates = request.app.state.templates
    return templates.TemplateResponse(
        request,
        "inventory.html",
        {"inventory_data": None, "auth_enabled": dashboard_auth_enabled()},
    )


@router.get("/{store_id}", response_class=HTMLResponse)
def inventory_page(
    request: Request,
    store_id: int,
    db: Session = Depends(get_db),
    locale: str = Depends(current_locale),
):
    redirect = redirect_if_unauthenticated(request)
    if redirect:
        return redirect
    templates = request.app.state.templates
    snapshot = _snapshot_or_404(db, store_id, locale)
    data = stock_view(snapshot, StockFilters(), SortState(), locale=locale)
    selected = default_branch(snapshot.branches)
    return templates.TemplateResponse(
        request,
        "inventory.html",
        {
            "inventory_data": jsonable_encoder(data),
            "transactions": jsonable_encoder(snapshot.transactions),
            "default_branch_id": selected.id if selected else None,
            "auth_enabled": dashboard_auth_enabled(),
        },
    )


@router.get("/{store_id}/stock")
def stock_table(
    request: Request,
    store_id: int,
    status: str = Query("all", description="all, in-stock, low-stock or out-of-stock"),
    branch: str = Query("all", description="all, main or a branch id"),
    sort: str | None = Query(None, description="product, onHand, reserved, available or status"),
    direction: str = Query("asc", description="asc or desc"),
    db: Session = Depends(get_db),
    locale: str = Depends(current_locale),
):
    require_login_api(request)
    snapshot = _snapshot_or_404(db, store_id, locale)
    return stock_view(
        snapshot,
        StockFilters(status=status, branch=branch),
        SortState.from_query(sort, direction),
        locale=locale,
    )


@router.get("/{store_id}/transactions")
def transaction_log(
    request: Request,
    store_id: int,
    type: str = Query("all", description="Transaction type filter"),
    date_range: str = Query("all", alias="date", description="all, today, week or month"),
    sort: str | None = Query(None, description="date, product, branch, type, change or notes"),
    direction: str = Query("desc", description="asc or desc"),
    db: Session = Depends(get_db),
    locale: str = Depends(current_locale),
):
    require_login_api(request)
    if date_range not in TRANSACTION_DATE_RANGES:
        raise HTTPException(status_code=400, detail="Unknown date range: {}".format(date_range))
    snapshot = _snapshot_or_404(db, store_id, locale)
    transactions = filter_transactions(
        snapshot.transactions,
        transaction_type=type,
        date_range=date_range,
    )
    transactions = sort_transactions(transactions, SortState.from_query(sort, direction))
    return {"count": len(transactions), "results": transactions}


@router.get("/{store_id}/branches/{branch_id}/preview")
def branch_stock_preview(
    request: Request,
    store_id: int,
    branch_id: int,
    db: Session = Depends(get_db),
    locale: str = Depends(current_locale),
):
    require_login_api(request)
    snapshot = _snapshot_or_404(db, store_id, locale)
    branch = snapshot.branch(branch_id)
    if branch is None:
        raise HTTPException(status_code=404, detail="Branch not found")
    return branch_preview(branch, snapshot.products, snapshot.inventory, locale=locale)


@router.post("/{store_id}/adjustments", response_model=AdjustmentResult)
def create_adjustment(
    request: Request,
    store_id: int,
    payload: AdjustmentCreate,
    db: Session = Depends(get_db),
    locale: str = Depends(current_locale),
):
    require_login_api(request)
    snapshot = _snapshot_or_404(db, store_id, locale)

    try:
        adjustment = adjustment_request_from_snapshot(
            snapshot,
            payload.product_id,
            payload.branch_id,
            payload.adjustment_type,
            payload.quantity,
            payload.notes,
        )
        gateway = InventoryGateway(db, store_id, performed_by=current_actor(request))
        outcome = adjust_stock(gateway, adjustment)
    except AdjustmentValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except LookupError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except AdjustmentFailedError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc

    return AdjustmentResult(
        strategy=outcome.strategy,
        quantity_change=outcome.quantity_change,
        transaction_type=outcome.transaction_type,
        quantity_before=outcome.quantity_before,
        quantity_after=outcome.quantity_after,
        attempts=[
            {
                "name": attempt.name,
                "ok": attempt.ok,
                "error": None if attempt.ok else "{} failed".format(attempt.operation or attempt.name),
            }
            for attempt in outcome.attempts
        ],
        inventory=jsonable_encoder(_stock_payload(db, store_id, locale)),
    )


@router.post("/{store_id}/transfers", response_model=TransferResult)
def create_transfer(
    request: Request,
    store_id: int,
    payload: TransferCreate,
    db: Session = Depends(get_db),
    locale: str = Depends(current_locale),
):
    require_login_api(request)
    snapshot = _snapshot_or_404(db, store_id, locale)
    if snapshot.product(payload.product_id) is None:
        raise HTTPException(status_code=404, detail="Product not found")
    try:
        require_branch(snapshot, payload.from_branch_id)
        require_branch(snapshot, payload.to_branch_id)
    except LookupError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc

    notes = (payload.notes or "").strip() or default_transfer_notes(
        display_branch_name(snapshot.branch(payload.from_branch_id), locale),
        display_branch_name(snapshot.branch(payload.to_branch_id), locale),
    )
    transfer = TransferRequest(
        product_id=payload.product_id,
        from_branch_id=payload.from_branch_id,
        to_branch_id=payload.to_branch_id,
        quantity=payload.quantity,
        available_quantity=available_quantity_for(
            payload.product_id, payload.from_branch_id, snapshot.inventory
        ),
        notes=notes,
    )

    try:
        gateway = InventoryGateway(db, store_id, performed_by=current_actor(request))
        outcome = transfer_stock(gateway, transfer)
    except TransferValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except TransferFailedError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc

    return TransferResult(
        strategy=outcome.strategy,
        quantity=outcome.quantity,
        notes=outcome.notes,
        inventory=jsonable_encoder(_stock_payload(db, store_id, locale)),
    )


__all__ = ["router"]
