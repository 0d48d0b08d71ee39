"""
Alert API Routes

Served from the app's AlertBoard snapshot, which the inventory change feed
keeps current. The snapshot is also regenerated when an item was written
after the last refresh without going through the feed, and `?refresh=true`
forces a regeneration first.
"""

import logging
from datetime import datetime

from fastapi import APIRouter, Depends
from fastapi.responses import Response
from sqlalchemy.orm import Session

from .. import crud
from ..auth import get_current_user
from ..context import AppContext, get_context
from ..database import get_db
from ..permissions import CurrentUser
from ..services import alert_service

router = APIRouter(prefix="/api/alerts", tags=["alerts"])
logger = logging.getLogger("AlertsAPI")


def _current_alerts(db: Session, ctx: AppContext, refresh: bool = False):
    board = ctx.alert_board
    changed = crud.last_change(db)
    # Writes that bypass the change feed (seed script, manual SQL) still show up
    stale = board.refreshed_at is None or (changed is not None and changed >= board.refreshed_at)
    if refresh or stale:
        board.refresh()
    return board.alerts


@router.get("")
def list_alerts(
    refresh: bool = False,
    db: Session = Depends(get_db),
    ctx: AppContext = Depends(get_context),
    user: CurrentUser = Depends(get_current_user),
):
    alerts = _current_alerts(db, ctx, refresh)
    data = alert_service.summarize_alerts(alerts)
    data["refreshedAt"] = ctx.alert_board.refreshed_at.isoformat()
    return {"success": True, "data": data}


@router.get("/shopping-list")
def shopping_list(
    db: Session = Depends(get_db),
    ctx: AppContext = Depends(get_context),
    user: CurrentUser = Depends(get_current_user),
):
    return {"success": True, "data": alert_service.build_shopping_list(_current_alerts(db, ctx))}


@router.get("/export")
def export_alerts(
    db: Session = Depends(get_db),
    ctx: AppContext = Depends(get_context),
    user: CurrentUser = Depends(get_current_user),
):
    alerts = _current_alerts(db, ctx)
    filename = alert_service.csv_filename(datetime.utcnow())
    logger.info(f"CSV export of {len(alerts)} alerts by {user.email}")
    return Response(
        content=alert_service.export_alerts_csv(alerts),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/restock/{item_id}")
def restock_suggestion(
    item_id: int,
    db: Session = Depends(get_db),
    ctx: AppContext = Depends(get_context),
    user: CurrentUser = Depends(get_current_user),
):
    item = crud.get_item_or_404(db, item_id)
    return {"success": True, "data": alert_service.restock_suggestion(item, _current_alerts(db, ctx))}
