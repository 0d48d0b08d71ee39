"""
POS integration routes (simulated client).
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from .. import schemas
from ..auth import get_current_user, require
from ..constants import Messages
from ..context import AppContext, get_context
from ..database import get_db
from ..permissions import CurrentUser, can_manage_products
from ..services import pos_service

router = APIRouter(prefix="/api/pos", tags=["pos"])
logger = logging.getLogger("POSAPI")


@router.get("/config")
def read_config(db: Session = Depends(get_db), user: CurrentUser = Depends(get_current_user)):
    return {"success": True, "data": pos_service.public_config(pos_service.get_config(db))}


@router.post("/config")
def save_config(
    payload: schemas.PosConfigRequest,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(require(can_manage_products, Messages.MANAGER_REQUIRED)),
):
    config = pos_service.save_config(db, payload, actor=user.email)
    return {"success": True, "message": "POS configured successfully", "data": pos_service.public_config(config)}


@router.delete("/config")
def disconnect(
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(require(can_manage_products, Messages.MANAGER_REQUIRED)),
):
    config = pos_service.disconnect(db, actor=user.email)
    return {"success": True, "message": "POS disconnected", "data": pos_service.public_config(config)}


@router.post("/sync")
async def sync(
    db: Session = Depends(get_db),
    ctx: AppContext = Depends(get_context),
    user: CurrentUser = Depends(get_current_user),
):
    result = await pos_service.sync(db, ctx.pos, actor=user.email, feed=ctx.feed)
    return {"success": True, "message": "Sync completed", "data": result}


@router.get("/menu-items")
async def menu_items(
    db: Session = Depends(get_db),
    ctx: AppContext = Depends(get_context),
    user: CurrentUser = Depends(get_current_user),
):
    return {"success": True, "data": await pos_service.menu_items(db, ctx.pos)}


@router.get("/mappings")
def read_mappings(db: Session = Depends(get_db), user: CurrentUser = Depends(get_current_user)):
    mappings = [schemas.PosMapping.model_validate(m).dump() for m in pos_service.get_mappings(db)]
    return {"success": True, "data": mappings}


@router.post("/mappings")
def save_mappings(
    payload: schemas.PosMappingsRequest,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(require(can_manage_products, Messages.MANAGER_REQUIRED)),
):
    saved = pos_service.save_mappings(db, payload.mappings, actor=user.email)
    return {"success": True, "message": Messages.UPDATED, "data": {"mappedItems": saved}}
