from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import HTMLResponse
from sqlalchemy.orm import Session

from merchant_dashboard.core.dashboard_auth import (
    dashboard_auth_enabled,
    redirect_if_unauthenticated,
    require_login_api,
)
from merchant_dashboard.dependencies import current_locale, get_db
from merchant_dashboard.models.store import Store
from merchant_dashboard.schemas.product import ProductActionResult, ProductRead, ProductUpdate
from merchant_dashboard.services.inventory_service import display_product_name
from merchant_dashboard.services.product_service import (
    ProductNotFoundError,
    ProductStateError,
    delete_product_permanently,
    list_trash,
    restore_product,
    soft_delete_product,
    update_product,
)

router = APIRouter(tags=["Products"])


@router.get("/api/products/trash", response_model=list[ProductRead])
def trashed_products(
    request: Request,
    store_id: int = Query(..., description="Store id"),
    db: Session = Depends(get_db),
):
    require_login_api(request)
    return list_trash(db, store_id)


@router.put("/api/products/{product_id}", response_model=ProductActionResult)
def edit_product(
    request: Request,
    product_id: int,
    payload: ProductUpdate,
    db: Session = Depends(get_db),
):
    require_login_api(request)
    try:
        product = update_product(db, product_id, payload.model_dump(exclude_unset=True))
    except ProductNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except ProductStateError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return ProductActionResult(product=ProductRead.model_validate(product))


@router.delete("/api/products/{product_id}", response_model=ProductActionResult)
def remove_product(
    request: Request,
    product_id: int,
    permanent: bool = Query(False, description="Delete permanently instead of moving to trash"),
    db: Session = Depends(get_db),
):
    require_login_api(request)
    try:
        if permanent:
            delete_product_permanently(db, product_id)
            return ProductActionResult(soft_delete=False)
        product = soft_delete_product(db, product_id)
    except ProductNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return ProductActionResult(product=ProductRead.model_validate(product), soft_delete=True)


@router.post("/api/products/{product_id}/restore", response_model=ProductActionResult)
def restore_trashed_product(
    request: Request,
    product_id: int,
    db: Session = Depends(get_db),
):
    require_login_api(request)
    try:
        product = restore_product(db, product_id)
    except ProductNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except ProductStateError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return ProductActionResult(product=ProductRead.model_validate(product))


@router.get("/trash/{store_id}", response_class=HTMLResponse)
def trash_page(
    request: Request,
    store_id: int,
    db: Session = Depends(get_db),
    locale: str = Depends(current_locale),
):
    redirect = redirect_if_unauthenticated(request)
    if redirect:
        return redirect
    store = db.get(Store, store_id)
    if store is None:
        raise HTTPException(status_code=404, detail="Store not found")

    products = [
        {
            "id": product.id,
            "name": display_product_name(product, locale),
            "sku": product.sku,
            "price": product.price,
            "deleted_at": product.deleted_at,
        }
        for product in list_trash(db, store_id)
    ]
    templates = request.app.state.templates
    return templates.TemplateResponse(
        request,
        "trash.html",
        {
            "store_id": store_id,
            "store_name": store.display_name(locale),
            "currency": store.currency,
            "products": jsonable_encoder(products),
            "auth_enabled": dashboard_auth_enabled(),
        },
    )


__all__ = ["router"]
