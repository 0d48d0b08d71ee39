"""
POS integration service: config singleton, sync and item mappings.
"""

import datetime
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from .. import models, schemas
from ..constants import POS_SYSTEMS, SYNC_FREQUENCIES, Messages
from ..events import ChangeFeed, InventoryEvent
from ..exceptions import ExternalServiceException, ValidationException
from .pos_client import PosClient

logger = logging.getLogger("POSService")

CONFIG_ID = 1


def get_config(db: Session) -> Optional[models.PosConfig]:
    return db.query(models.PosConfig).filter(models.PosConfig.id == CONFIG_ID).first()


def public_config(config: Optional[models.PosConfig]) -> dict:
    """Config as returned by the API; never includes the API key."""
    if config is None:
        return schemas.PosConfig().dump()
    return schemas.PosConfig.model_validate(config).dump()


def save_config(db: Session, data: schemas.PosConfigRequest, actor: str) -> models.PosConfig:
    if data.system not in POS_SYSTEMS:
        raise ValidationException(f"Invalid POS system. Supported: {', '.join(POS_SYSTEMS)}")
    if data.sync_frequency and data.sync_frequency not in SYNC_FREQUENCIES:
        raise ValidationException(f"Invalid sync frequency. Supported: {', '.join(SYNC_FREQUENCIES)}")

    now = datetime.datetime.utcnow()
    config = get_config(db)
    if config is None:
        config = models.PosConfig(id=CONFIG_ID, mapped_items=count_mappings(db), auto_updates=0)
        db.add(config)

    config.system = data.system
    config.api_key = data.api_key
    config.restaurant_id = data.restaurant_id
    config.sync_frequency = data.sync_frequency or "realtime"
    config.connected = True
    config.last_sync = now
    config.updated_by = actor
    config.updated_at = now
    db.commit()
    db.refresh(config)
    logger.info(f"POS configured: {config.system} restaurant={config.restaurant_id} by {actor}")
    return config


def disconnect(db: Session, actor: str) -> Optional[models.PosConfig]:
    config = get_config(db)
    if config is None:
        return None
    config.connected = False
    config.updated_by = actor
    config.updated_at = datetime.datetime.utcnow()
    db.commit()
    logger.info(f"POS disconnected by {actor}")
    return config


def _connected_config(db: Session) -> models.PosConfig:
    config = get_config(db)
    if config is None or not config.connected:
        raise ValidationException(Messages.POS_NOT_CONNECTED)
    return config


async def sync(
    db: Session,
    client: PosClient,
    actor: str,
    feed: Optional[ChangeFeed] = None,
) -> dict:
    config = _connected_config(db)
    try:
        updated = await client.sync(config.system, config.restaurant_id, config.api_key)
    except (OSError, ValueError) as e:
        logger.error(f"POS sync failed [{config.system}]: {e}")
        raise ExternalServiceException(f"POS sync failed: {config.system} unavailable") from e

    config.last_sync = datetime.datetime.utcnow()
    config.auto_updates = (config.auto_updates or 0) + updated
    db.commit()

    if feed is not None:
        feed.publish(InventoryEvent(kind="synced", actor=actor))

    return {
        "lastSync": config.last_sync.isoformat(),
        "updatedItems": config.auto_updates,
    }


async def menu_items(db: Session, client: PosClient) -> List[dict]:
    config = _connected_config(db)
    return await client.menu_items(config.system, config.restaurant_id, config.api_key)


def count_mappings(db: Session) -> int:
    return db.query(models.PosMapping).count()


def get_mappings(db: Session) -> List[models.PosMapping]:
    return db.query(models.PosMapping).order_by(models.PosMapping.id).all()


def save_mappings(db: Session, mappings: List[schemas.PosMapping], actor: str) -> int:
    """Replace the whole mapping list."""
    item_ids = {m.inventory_item_id for m in mappings if m.inventory_item_id is not None}
    if item_ids:
        known = {row.id for row in db.query(models.InventoryItem.id).filter(models.InventoryItem.id.in_(item_ids))}
        missing = sorted(item_ids - known)
        if missing:
            raise ValidationException(f"Unknown inventory item(s): {', '.join(map(str, missing))}")

    now = datetime.datetime.utcnow()
    db.query(models.PosMapping).delete()
    for m in mappings:
        db.add(models.PosMapping(
            pos_item_id=m.pos_item_id,
            pos_item_name=m.pos_item_name,
            inventory_item_id=m.inventory_item_id,
            quantity_per_sale=m.quantity_per_sale,
            updated_by=actor,
            updated_at=now,
        ))

    config = get_config(db)
    if config is not None:
        config.mapped_items = len(mappings)
    db.commit()
    logger.info(f"Saved {len(mappings)} POS mappings by {actor}")
    return len(mappings)
