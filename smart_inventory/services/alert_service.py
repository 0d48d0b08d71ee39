"""
Low Stock Alert Service

Turns the inventory into a ranked list of alerts using the stock classifier.

Features:
- Three-tier alerts: high priority + low stock = urgent,
  medium = normal, low = info
- Days-until-empty and suggested reorder quantity per alert
- Shopping list (urgent + normal tiers) as data and plain text
- CSV export
- AlertBoard: live alert snapshot refreshed from the inventory change feed

Usage:
    from smart_inventory.services.alert_service import generate_alerts

    alerts = generate_alerts(crud.get_items(db))
"""

import csv
import io
import logging
import math
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Iterable, List, Optional

from ..constants import MAX_VISIBLE_ALERTS, StockStatus
from ..events import ChangeFeed, InventoryEvent
from .stock_classifier import (
    calculate_stock_status,
    get_product_priority,
    needs_attention,
    status_rank,
)

logger = logging.getLogger(__name__)

# Placeholder consumption model until sales history is tracked
AVERAGE_DAILY_CONSUMPTION = 2
MINIMUM_ORDER = 10
TARGET_STOCK_MULTIPLIER = 3

CSV_HEADERS = [
    "Product",
    "Category",
    "Current Stock",
    "Threshold",
    "Priority",
    "Status",
    "Message",
    "Days Until Empty",
    "Suggested Quantity",
]


@dataclass
class Alert:
    """A derived, never persisted, record for an item needing attention."""
    item_id: int
    name: str
    category: str
    stock: int
    status: StockStatus
    message: str
    priority: str
    threshold: int
    days_until_empty: int
    suggested_quantity: int

    def to_dict(self) -> dict:
        return {
            "id": self.item_id,
            "product": {
                "id": self.item_id,
                "name": self.name,
                "category": self.category,
                "stock": self.stock,
            },
            "status": self.status.value,
            "message": self.message,
            "priority": self.priority,
            "threshold": self.threshold,
            "daysUntilEmpty": self.days_until_empty,
            "suggestedQuantity": self.suggested_quantity,
        }


def estimate_days_until_empty(stock: Optional[int]) -> int:
    """Days of stock left at AVERAGE_DAILY_CONSUMPTION units/day, at least 1."""
    return max(1, math.ceil((stock or 0) / AVERAGE_DAILY_CONSUMPTION))


def calculate_suggested_quantity(stock: Optional[int], threshold: int) -> int:
    """Bring stock up to 3x the threshold, ordering no less than MINIMUM_ORDER."""
    needed = threshold * TARGET_STOCK_MULTIPLIER - (stock or 0)
    return max(MINIMUM_ORDER, needed)


def build_alert(item) -> Optional[Alert]:
    """Return an Alert for the item, or None when its stock is fine."""
    stock_info = calculate_stock_status(item)
    if not needs_attention(stock_info["status"]):
        return None

    config = get_product_priority(item)
    stock = item.stock or 0
    return Alert(
        item_id=item.id,
        name=item.name,
        category=item.category,
        stock=stock,
        status=stock_info["status"],
        message=stock_info["message"],
        priority=config.priority.value,
        threshold=config.threshold,
        days_until_empty=estimate_days_until_empty(stock),
        suggested_quantity=calculate_suggested_quantity(stock, config.threshold),
    )


def generate_alerts(items: Iterable) -> List[Alert]:
    """Alerts for every item needing attention, urgent → normal → info, then by name."""
    alerts = [a for a in (build_alert(item) for item in items) if a is not None]
    alerts.sort(key=lambda a: (-status_rank(a.status), (a.name or "").casefold()))
    return alerts


def count_alerts(alerts: List[Alert]) -> dict:
    return {
        "urgent": sum(1 for a in alerts if a.status == StockStatus.URGENT),
        "normal": sum(1 for a in alerts if a.status == StockStatus.NORMAL),
        "info": sum(1 for a in alerts if a.status == StockStatus.INFO),
        "total": len(alerts),
    }


def summarize_alerts(alerts: List[Alert], max_visible: int = MAX_VISIBLE_ALERTS) -> dict:
    """
    API payload for an alert list.

    `display` is capped at max_visible; the rest is only reported through
    `hiddenCount`, while `alerts` always holds the full list.
    """
    return {
        "alerts": [a.to_dict() for a in alerts],
        "display": [a.to_dict() for a in alerts[:max_visible]],
        "hiddenCount": max(0, len(alerts) - max_visible),
        "counts": count_alerts(alerts),
        "total": len(alerts),
    }


def build_shopping_list(alerts: List[Alert], now: Optional[datetime] = None) -> dict:
    now = now or datetime.utcnow()

    def entry(a: Alert) -> dict:
        return {
            "id": a.item_id,
            "name": a.name,
            "category": a.category,
            "currentStock": a.stock,
            "suggestedQuantity": a.suggested_quantity,
        }

    urgent = [entry(a) for a in alerts if a.status == StockStatus.URGENT]
    normal = [entry(a) for a in alerts if a.status == StockStatus.NORMAL]

    return {
        "urgent": urgent,
        "normal": normal,
        "text": render_shopping_list(urgent, normal, now),
        "filename": f"shopping_list_{now.date().isoformat()}.txt",
        "generatedAt": now.isoformat(),
    }


def render_shopping_list(urgent: List[dict], normal: List[dict], now: datetime) -> str:
    lines = [f"SHOPPING LIST - {now.date().isoformat()}", "=" * 40, ""]

    for title, entries in (("URGENT (Buy Today):", urgent), ("NORMAL (Buy This Week):", normal)):
        if not entries:
            continue
        lines += [title, "-" * 20]
        for e in entries:
            lines += [
                f"* {e['name']}",
                f"  Current: {e['currentStock']} units",
                f"  Suggested: {e['suggestedQuantity']} units",
                "",
            ]

    if not urgent and not normal:
        lines.append("No items need restocking at this time.")

    lines += ["", "=" * 40, "Generated by Smart Inventory System", ""]
    return "\n".join(lines)


def export_alerts_csv(alerts: List[Alert]) -> str:
    """
    CSV of the alert list.

    Text columns are always quoted and embedded quotes are doubled, so a
    product named Jack Daniel's is written as "Jack Daniel's".
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_NONNUMERIC, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for a in alerts:
        writer.writerow([
            a.name,
            a.category,
            a.stock,
            a.threshold,
            a.priority,
            a.status.value.upper(),
            a.message,
            a.days_until_empty,
            a.suggested_quantity,
        ])
    return buffer.getvalue()


def csv_filename(now: Optional[datetime] = None) -> str:
    now = now or datetime.utcnow()
    return f"inventory_alerts_{now.date().isoformat()}.csv"


def restock_suggestion(item, alerts: List[Alert]) -> dict:
    """Reorder suggestion for one item, whether or not it is alerting."""
    alert = next((a for a in alerts if a.item_id == item.id), None)
    if alert is not None:
        return {
            "product": alert.to_dict()["product"],
            "currentStock": alert.stock,
            "suggestedQuantity": alert.suggested_quantity,
            "priority": alert.priority,
            "status": alert.status.value,
        }

    config = get_product_priority(item)
    stock = item.stock or 0
    return {
        "product": {"id": item.id, "name": item.name, "category": item.category, "stock": stock},
        "currentStock": stock,
        "suggestedQuantity": calculate_suggested_quantity(stock, config.threshold),
        "priority": config.priority.value,
        "status": calculate_stock_status(item)["status"].value,
    }


class AlertBoard:
    """
    Live alert snapshot.

    Subscribes to the inventory change feed and regenerates the alert list
    from a fresh read of the inventory on every event. The snapshot is
    replaced wholesale, so the last refresh wins.
    """

    def __init__(self, load_items: Callable[[], list]):
        self._load_items = load_items
        self._alerts: List[Alert] = []
        self._refreshed_at: Optional[datetime] = None
        self._unsubscribe: Optional[Callable[[], None]] = None

    def attach(self, feed: ChangeFeed):
        self.detach()
        self._unsubscribe = feed.subscribe(self._on_change)

    def detach(self):
        if self._unsubscribe:
            self._unsubscribe()
            self._unsubscribe = None

    def _on_change(self, event: InventoryEvent):
        logger.debug(f"Inventory changed ({event.kind}, item={event.item_id}); refreshing alerts")
        self.refresh()

    def refresh(self) -> List[Alert]:
        self._alerts = generate_alerts(self._load_items())
        self._refreshed_at = datetime.utcnow()
        counts = count_alerts(self._alerts)
        logger.info(
            f"Alerts refreshed: {counts['urgent']} urgent, {counts['normal']} normal, {counts['info']} info"
        )
        return self._alerts

    @property
    def alerts(self) -> List[Alert]:
        return list(self._alerts)

    @property
    def refreshed_at(self) -> Optional[datetime]:
        return self._refreshed_at

    def counts(self) -> dict:
        return count_alerts(self._alerts)

    def display_alerts(self) -> List[Alert]:
        return self._alerts[:MAX_VISIBLE_ALERTS]

    def hidden_count(self) -> int:
        return max(0, len(self._alerts) - MAX_VISIBLE_ALERTS)
