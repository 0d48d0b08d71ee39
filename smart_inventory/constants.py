"""
Application constants: categories, category defaults, stock statuses,
roles, POS systems and user-facing messages.
"""

from enum import Enum


class Role(str, Enum):
    ADMIN = "admin"
    MANAGER = "manager"
    STAFF = "staff"


class Priority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class StockStatus(str, Enum):
    URGENT = "urgent"
    NORMAL = "normal"
    INFO = "info"
    GOOD = "good"
    OPTIMAL = "optimal"


class StockAction(str, Enum):
    ADD = "add"
    SUBTRACT = "subtract"


# Per-category alert configuration used when an item has no own settings
DEFAULT_PRIORITIES = {
    "Spirits": {"priority": Priority.HIGH, "threshold": 2},
    "Wines": {"priority": Priority.MEDIUM, "threshold": 3},
    "Beers": {"priority": Priority.MEDIUM, "threshold": 6},
    "Soft Drinks": {"priority": Priority.LOW, "threshold": 12},
    "Syrups": {"priority": Priority.MEDIUM, "threshold": 2},
}
FALLBACK_PRIORITY = {"priority": Priority.MEDIUM, "threshold": 3}

# Higher = more urgent
STATUS_ORDER = {
    StockStatus.URGENT: 4,
    StockStatus.NORMAL: 3,
    StockStatus.INFO: 2,
    StockStatus.GOOD: 1,
    StockStatus.OPTIMAL: 0,
}

STATUS_MESSAGES = {
    StockStatus.URGENT: "URGENT: Needs immediate restock!",
    StockStatus.NORMAL: "Normal: Restock soon",
    StockStatus.INFO: "Info: Low stock noted",
    StockStatus.GOOD: "Good: Stock adequate",
    StockStatus.OPTIMAL: "Optimal: Well stocked",
}

ALERT_STATUSES = (StockStatus.URGENT, StockStatus.NORMAL, StockStatus.INFO)

MAX_VISIBLE_ALERTS = 6
MAX_CONVERSATION_HISTORY = 10

POS_SYSTEMS = ["toast", "square", "clover", "lightspeed"]
SYNC_FREQUENCIES = ["realtime", "5min", "15min", "30min", "1hour"]

# Demo accounts (development only). Role lookup for these emails goes
# through auth.StaticRoleDirectory.
DEMO_USERS = {
    "admin@inventory.com": {"password": "admin123.", "role": Role.ADMIN},
    "manager@inventory.com": {"password": "manager123.", "role": Role.MANAGER},
    "staff@inventory.com": {"password": "staff123.", "role": Role.STAFF},
}

USER_ROLES = {
    "admin@inventory.com": Role.ADMIN,
    "manager@inventory.com": Role.MANAGER,
    "staff@inventory.com": Role.STAFF,
    # Legacy domain
    "admin@wishbone.com": Role.ADMIN,
    "manager@wishbone.com": Role.MANAGER,
    "staff@wishbone.com": Role.STAFF,
}


class Messages:
    LOGIN = "Login successful"
    LOGOUT = "Logout successful"
    CREATED = "Resource created successfully"
    UPDATED = "Resource updated successfully"
    DELETED = "Resource deleted successfully"

    UNAUTHORIZED = "Unauthorized access"
    TOKEN_EXPIRED = "Token expired"
    INVALID_CREDENTIALS = "Invalid email or password"
    FORBIDDEN = "Access forbidden"
    ADMIN_REQUIRED = "Admin access required"
    MANAGER_REQUIRED = "Manager or Admin access required"
    NOT_FOUND = "Resource not found"
    ITEM_NOT_FOUND = "Item not found"
    VALIDATION = "Validation error"
    SERVER = "Internal server error"
    RATE_LIMITED = "Too many requests. Please try again later."

    NEGATIVE_STOCK = "Cannot have negative stock"
    POS_NOT_CONNECTED = "POS not connected"
    AI_NOT_CONFIGURED = "AI service not configured"
    AI_GENERIC = "AI service error. Please try again."
