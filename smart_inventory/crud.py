"""
Inventory store operations.

All writes stamp last_updated / updated_by and publish an InventoryEvent
on the supplied change feed after commit.
"""

import datetime
import logging
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from . import models, schemas
from .constants import DEFAULT_PRIORITIES, Messages, StockAction, StockStatus
from .events import ChangeFeed, InventoryEvent
from .exceptions import NotFoundException, ValidationException
from .services.stock_classifier import (
    calculate_stock_status,
    inventory_sort_key,
    resolve_priority,
)

logger = logging.getLogger("InventoryStore")


def _notify(feed: Optional[ChangeFeed], kind: str, item_id: Optional[int], actor: Optional[str]):
    if feed is not None:
        feed.publish(InventoryEvent(kind=kind, item_id=item_id, actor=actor))


def get_items(db: Session) -> List[models.InventoryItem]:
    return db.query(models.InventoryItem).all()


def last_change(db: Session) -> Optional[datetime.datetime]:
    """Newest last_updated across the inventory, including writes made outside the API."""
    return db.query(func.max(models.InventoryItem.last_updated)).scalar()


def get_item(db: Session, item_id: int) -> Optional[models.InventoryItem]:
    return db.query(models.InventoryItem).filter(models.InventoryItem.id == item_id).first()


def get_item_or_404(db: Session, item_id: int) -> models.InventoryItem:
    item = get_item(db, item_id)
    if item is None:
        raise NotFoundException(Messages.ITEM_NOT_FOUND)
    return item


def list_items(
    db: Session,
    category: Optional[str] = None,
    status: Optional[StockStatus] = None,
    search: Optional[str] = None,
) -> List[models.InventoryItem]:
    """
    List inventory, most urgent first then by name.

    category is matched exactly in SQL; search (case-insensitive substring
    of the name) and status (derived, not stored) are applied in Python.
    """
    q = db.query(models.InventoryItem)
    if category:
        q = q.filter(models.InventoryItem.category == category)
    items = q.all()

    if search:
        needle = search.casefold()
        items = [i for i in items if needle in (i.name or "").casefold()]

    if status:
        items = [i for i in items if calculate_stock_status(i)["status"] == status]

    return sorted(items, key=inventory_sort_key)


def create_item(
    db: Session,
    data: schemas.InventoryItemCreate,
    actor: str,
    feed: Optional[ChangeFeed] = None,
) -> models.InventoryItem:
    config = resolve_priority(data.category, data.priority, data.alert_threshold)
    now = datetime.datetime.utcnow()
    item = models.InventoryItem(
        name=data.name,
        category=data.category,
        stock=data.stock,
        priority=config.priority.value,
        alert_threshold=config.threshold,
        pos_item_id=data.pos_item_id,
        created_at=now,
        last_updated=now,
        updated_by=actor,
    )
    db.add(item)
    db.commit()
    db.refresh(item)
    logger.info(f"Created item {item.id} '{item.name}' ({item.category}) by {actor}")
    _notify(feed, "created", item.id, actor)
    return item


def update_item(
    db: Session,
    item_id: int,
    data: schemas.InventoryItemUpdate,
    actor: str,
    feed: Optional[ChangeFeed] = None,
) -> models.InventoryItem:
    item = get_item_or_404(db, item_id)
    changes = data.model_dump(exclude_unset=True)
    for field, value in changes.items():
        if value is None and field in ("name", "category", "stock"):
            raise ValidationException(f"{field} cannot be null")
        if field == "priority" and value is not None:
            value = value.value
        setattr(item, field, value)

    item.last_updated = datetime.datetime.utcnow()
    item.updated_by = actor
    db.commit()
    db.refresh(item)
    logger.info(f"Updated item {item.id} fields={sorted(changes)} by {actor}")
    _notify(feed, "updated", item.id, actor)
    return item


def adjust_stock(
    db: Session,
    item_id: int,
    quantity: int,
    action: StockAction,
    actor: str,
    feed: Optional[ChangeFeed] = None,
) -> schemas.StockChange:
    """
    Apply a stock delta.

    Raises:
        ValidationException: negative quantity, or a subtraction that would
            leave the stock below zero. Nothing is written in either case.
    """
    if quantity < 0:
        raise ValidationException("Quantity must be zero or greater")

    item = get_item_or_404(db, item_id)
    previous = item.stock or 0

    if StockAction(action) == StockAction.ADD:
        new_stock = previous + quantity
        change = quantity
    else:
        new_stock = previous - quantity
        change = -quantity
        if new_stock < 0:
            raise ValidationException(Messages.NEGATIVE_STOCK)

    item.stock = new_stock
    item.last_updated = datetime.datetime.utcnow()
    item.updated_by = actor
    db.commit()
    logger.info(f"Stock {item.id} '{item.name}': {previous} -> {new_stock} by {actor}")
    _notify(feed, "stock_changed", item.id, actor)

    return schemas.StockChange(id=item.id, previous_stock=previous, new_stock=new_stock, change=change)


def update_priority(
    db: Session,
    item_id: int,
    data: schemas.PriorityUpdate,
    actor: str,
    feed: Optional[ChangeFeed] = None,
) -> models.InventoryItem:
    item = get_item_or_404(db, item_id)
    item.priority = data.priority.value
    item.alert_threshold = data.alert_threshold
    item.last_updated = datetime.datetime.utcnow()
    item.updated_by = actor
    db.commit()
    db.refresh(item)
    _notify(feed, "updated", item.id, actor)
    return item


def reset_priorities(db: Session, actor: str, feed: Optional[ChangeFeed] = None) -> int:
    """Reset every item with a known category to its category defaults."""
    updated = 0
    now = datetime.datetime.utcnow()
    for item in get_items(db):
        default = DEFAULT_PRIORITIES.get(item.category)
        if not default:
            continue
        item.priority = default["priority"].value
        item.alert_threshold = default["threshold"]
        item.last_updated = now
        item.updated_by = actor
        updated += 1
    db.commit()
    logger.info(f"Reset {updated} items to category defaults by {actor}")
    _notify(feed, "priorities_reset", None, actor)
    return updated


def delete_item(db: Session, item_id: int, actor: str, feed: Optional[ChangeFeed] = None):
    item = get_item_or_404(db, item_id)
    db.query(models.PosMapping).filter(models.PosMapping.inventory_item_id == item_id).delete()
    db.delete(item)
    db.commit()
    logger.info(f"Deleted item {item_id} by {actor}")
    _notify(feed, "deleted", item_id, actor)


def get_stats(db: Session) -> dict:
    stats = {"total": 0, "urgent": 0, "lowStock": 0, "goodStock": 0, "byCategory": {}}

    for item in get_items(db):
        status = calculate_stock_status(item)["status"]
        stats["total"] += 1
        if status == StockStatus.URGENT:
            stats["urgent"] += 1
        elif status in (StockStatus.NORMAL, StockStatus.INFO):
            stats["lowStock"] += 1
        else:
            stats["goodStock"] += 1

        bucket = stats["byCategory"].setdefault(item.category, {"total": 0, "lowStock": 0})
        bucket["total"] += 1
        if status in (StockStatus.URGENT, StockStatus.NORMAL, StockStatus.INFO):
            bucket["lowStock"] += 1

    return stats
