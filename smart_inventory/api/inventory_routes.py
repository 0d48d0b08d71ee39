"""
Inventory API Routes: list, CRUD, stock delta, priorities, stats
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from .. import crud, schemas
from ..auth import get_current_user, require
from ..constants import Messages, StockStatus
from ..context import AppContext, get_context
from ..database import get_db
from ..exceptions import PermissionDeniedException
from ..middleware.monitoring import instrument_stock_movement
from ..permissions import (
    CurrentUser,
    can_manage_priorities,
    can_manage_products,
    can_modify_stock,
)
from ..services.stock_classifier import calculate_stock_status

router = APIRouter(prefix="/api/inventory", tags=["inventory"])
logger = logging.getLogger("InventoryAPI")

PRIORITY_FIELDS = ("priority", "alert_threshold")


def _touches_priority(payload: schemas.InventoryItemUpdate) -> bool:
    return any(f in payload.model_fields_set for f in PRIORITY_FIELDS)


def _item_payload(item) -> dict:
    data = schemas.InventoryItem.model_validate(item).dump()
    stock_info = calculate_stock_status(item)
    data["stockStatus"] = {"status": stock_info["status"].value, "message": stock_info["message"]}
    return data


@router.get("")
def list_inventory(
    category: Optional[str] = None,
    status: Optional[StockStatus] = None,
    search: Optional[str] = None,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    items = crud.list_items(db, category=category, status=status, search=search)
    return {"success": True, "data": [_item_payload(i) for i in items], "count": len(items)}


@router.get("/stats")
def inventory_stats(db: Session = Depends(get_db), user: CurrentUser = Depends(get_current_user)):
    return {"success": True, "data": crud.get_stats(db)}


@router.post("/priorities/reset")
def reset_priorities(
    db: Session = Depends(get_db),
    ctx: AppContext = Depends(get_context),
    user: CurrentUser = Depends(require(can_manage_priorities, Messages.ADMIN_REQUIRED)),
):
    """Put every item of a known category back on its category defaults."""
    updated = crud.reset_priorities(db, actor=user.email, feed=ctx.feed)
    return {"success": True, "message": Messages.UPDATED, "data": {"updatedCount": updated}}


@router.get("/{item_id}")
def read_item(item_id: int, db: Session = Depends(get_db), user: CurrentUser = Depends(get_current_user)):
    return {"success": True, "data": _item_payload(crud.get_item_or_404(db, item_id))}


@router.post("", status_code=201)
def create_item(
    payload: schemas.InventoryItemCreate,
    db: Session = Depends(get_db),
    ctx: AppContext = Depends(get_context),
    user: CurrentUser = Depends(require(can_manage_products, Messages.MANAGER_REQUIRED)),
):
    item = crud.create_item(db, payload, actor=user.email, feed=ctx.feed)
    return {"success": True, "message": Messages.CREATED, "data": _item_payload(item)}


@router.put("/{item_id}")
def update_item(
    item_id: int,
    payload: schemas.InventoryItemUpdate,
    db: Session = Depends(get_db),
    ctx: AppContext = Depends(get_context),
    user: CurrentUser = Depends(require(can_manage_products, Messages.MANAGER_REQUIRED)),
):
    # Alert settings stay admin-only even through the general update
    if _touches_priority(payload) and not can_manage_priorities(user):
        raise PermissionDeniedException(Messages.ADMIN_REQUIRED)

    item = crud.update_item(db, item_id, payload, actor=user.email, feed=ctx.feed)
    return {"success": True, "message": Messages.UPDATED, "data": _item_payload(item)}


@router.patch("/{item_id}/stock")
def update_stock(
    item_id: int,
    payload: schemas.StockUpdate,
    db: Session = Depends(get_db),
    ctx: AppContext = Depends(get_context),
    user: CurrentUser = Depends(require(can_modify_stock, Messages.UNAUTHORIZED)),
):
    change = crud.adjust_stock(db, item_id, payload.quantity, payload.action, actor=user.email, feed=ctx.feed)
    instrument_stock_movement(payload.action.value)
    return {"success": True, "message": Messages.UPDATED, "data": change.dump()}


@router.patch("/{item_id}/priority")
def update_priority(
    item_id: int,
    payload: schemas.PriorityUpdate,
    db: Session = Depends(get_db),
    ctx: AppContext = Depends(get_context),
    user: CurrentUser = Depends(require(can_manage_priorities, Messages.ADMIN_REQUIRED)),
):
    item = crud.update_priority(db, item_id, payload, actor=user.email, feed=ctx.feed)
    return {"success": True, "message": Messages.UPDATED, "data": _item_payload(item)}


@router.delete("/{item_id}")
def delete_item(
    item_id: int,
    db: Session = Depends(get_db),
    ctx: AppContext = Depends(get_context),
    user: CurrentUser = Depends(require(can_manage_products, Messages.MANAGER_REQUIRED)),
):
    crud.delete_item(db, item_id, actor=user.email, feed=ctx.feed)
    return {"success": True, "message": Messages.DELETED}
