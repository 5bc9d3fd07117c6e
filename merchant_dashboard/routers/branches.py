from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from merchant_dashboard.core.dashboard_auth import require_login_api
from merchant_dashboard.dependencies import current_actor, get_db
from merchant_dashboard.models.store import Store
from merchant_dashboard.schemas.branch import BranchRead, BranchSave
from merchant_dashboard.services.branch_service import (
    BranchDeletionError,
    BranchSaveError,
    BranchValidationError,
    MainBranchDeletionError,
    delete_branch,
    get_branch,
    list_branches,
    save_branch,
)
from merchant_dashboard.services.inventory_gateway import InventoryGateway

router = APIRouter(prefix="/stores/{store_id}/branches", tags=["Branches"])


def _require_store(db: Session, store_id: int) -> Store:
    store = db.get(Store, store_id)
    if store is None:
        raise HTTPException(status_code=404, detail="Store not found")
    return store


def _branch_or_404(db: Session, store_id: int, branch_id: int):
    branch = get_branch(db, store_id, branch_id)
    if branch is None:
        raise HTTPException(status_code=404, detail="Branch not found")
    return branch


@router.get("", response_model=list[BranchRead])
def branches_for_store(request: Request, store_id: int, db: Session = Depends(get_db)):
    require_login_api(request)
    _require_store(db, store_id)
    return list_branches(db, store_id)


@router.post("", response_model=BranchRead, status_code=201)
def create_branch(
    request: Request,
    store_id: int,
    payload: BranchSave,
    db: Session = Depends(get_db),
):
    require_login_api(request)
    _require_store(db, store_id)
    try:
        return save_branch(db, store_id, payload.model_dump())
    except BranchValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except BranchSaveError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc


@router.put("/{branch_id}", response_model=BranchRead)
def update_branch(
    request: Request,
    store_id: int,
    branch_id: int,
    payload: BranchSave,
    db: Session = Depends(get_db),
):
    require_login_api(request)
    branch = _branch_or_404(db, store_id, branch_id)
    try:
        return save_branch(db, store_id, payload.model_dump(), branch)
    except BranchValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except BranchSaveError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc


@router.delete("/{branch_id}")
def remove_branch(
    request: Request,
    store_id: int,
    branch_id: int,
    db: Session = Depends(get_db),
):
    require_login_api(request)
    branch = _branch_or_404(db, store_id, branch_id)
    gateway = InventoryGateway(db, store_id, performed_by=current_actor(request))
    try:
        delete_branch(gateway, branch)
    except MainBranchDeletionError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    except BranchDeletionError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    return {"success": True, "branch_id": branch_id}


__all__ = ["router"]
