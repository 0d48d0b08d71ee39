"""
Stock Classifier: Pure Logic Module

Maps (stock, threshold, priority) to one of five stock statuses.
Contains ZERO database calls or external dependencies; every function
here is deterministic.

Resolution order for an item's alert configuration:
    item's own priority / alert_threshold
    → category default (constants.DEFAULT_PRIORITIES)
    → {medium, 3}
"""

from typing import NamedTuple, Optional

from ..constants import (
    DEFAULT_PRIORITIES,
    FALLBACK_PRIORITY,
    STATUS_MESSAGES,
    STATUS_ORDER,
    ALERT_STATUSES,
    Priority,
    StockStatus,
)


class PriorityConfig(NamedTuple):
    priority: Priority
    threshold: int


def resolve_priority(
    category: Optional[str],
    priority: Optional[str] = None,
    threshold: Optional[int] = None,
) -> PriorityConfig:
    """
    Resolve the effective priority/threshold for an item.

    Each field falls back independently, so an item with its own priority
    but no threshold still gets the category threshold.
    """
    default = DEFAULT_PRIORITIES.get(category, FALLBACK_PRIORITY)
    return PriorityConfig(
        priority=Priority(priority) if priority else default["priority"],
        threshold=threshold if threshold is not None else default["threshold"],
    )


def get_product_priority(item) -> PriorityConfig:
    """Resolve the priority configuration of an inventory item."""
    return resolve_priority(
        getattr(item, "category", None),
        getattr(item, "priority", None),
        getattr(item, "alert_threshold", None),
    )


def classify(stock: int, threshold: int, priority: Priority) -> StockStatus:
    """
    Classify a stock level.

    Args:
        stock:     Current units on hand
        threshold: Level at or below which the item is low
        priority:  high / medium / low

    Returns:
        URGENT | NORMAL | INFO when stock <= threshold (by priority),
        GOOD when stock <= 2 * threshold, OPTIMAL otherwise.
    """
    if stock <= threshold:
        priority = Priority(priority)
        if priority == Priority.HIGH:
            return StockStatus.URGENT
        if priority == Priority.MEDIUM:
            return StockStatus.NORMAL
        return StockStatus.INFO

    if stock <= threshold * 2:
        return StockStatus.GOOD

    return StockStatus.OPTIMAL


def calculate_stock_status(item) -> dict:
    """Return {"status": StockStatus, "message": str} for an inventory item."""
    config = get_product_priority(item)
    status = classify(getattr(item, "stock", None) or 0, config.threshold, config.priority)
    return {"status": status, "message": STATUS_MESSAGES[status]}


def needs_attention(status: StockStatus) -> bool:
    return status in ALERT_STATUSES


def status_rank(status: StockStatus) -> int:
    return STATUS_ORDER.get(status, 0)


def inventory_sort_key(item):
    """Most urgent first, then alphabetical by name."""
    status = calculate_stock_status(item)["status"]
    return (-status_rank(status), (item.name or "").casefold())
