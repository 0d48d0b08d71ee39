from sqlalchemy import Column, Integer, String, DateTime, Boolean, ForeignKey
from sqlalchemy.orm import declarative_base
import datetime

# IMPORTANT: engine and SessionLocal are defined ONLY in database.py
# This file defines models only.
Base = declarative_base()


class InventoryItem(Base):
    """
    A stocked product (bottle, keg, case...).

    priority / alert_threshold may be NULL on legacy rows; the stock
    classifier falls back to the category defaults for those.
    """
    __tablename__ = "inventory"
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, index=True)
    category = Column(String, nullable=False, index=True)
    stock = Column(Integer, nullable=False, default=0)
    priority = Column(String, nullable=True)  # high, medium, low
    alert_threshold = Column(Integer, nullable=True)
    pos_item_id = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.datetime.utcnow)
    last_updated = Column(DateTime, default=datetime.datetime.utcnow)
    updated_by = Column(String, nullable=True)


class User(Base):
    """Registered accounts. Demo accounts live in constants.DEMO_USERS."""
    __tablename__ = "users"
    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    password_hash = Column(String, nullable=False)
    display_name = Column(String, nullable=True)
    role = Column(String, default="staff")
    created_at = Column(DateTime, default=datetime.datetime.utcnow)


class SessionToken(Base):
    """
    Bearer tokens issued at login.

    Tokens expire after SESSION_TOKEN_EXPIRY_HOURS and are revoked on logout.
    """
    __tablename__ = "session_tokens"
    id = Column(Integer, primary_key=True, index=True)
    token = Column(String, unique=True, index=True)
    email = Column(String, index=True)
    role = Column(String)
    created_at = Column(DateTime, default=datetime.datetime.utcnow)
    expires_at = Column(DateTime)
    revoked_at = Column(DateTime, nullable=True)


class PosConfig(Base):
    """Singleton POS connection settings (always id=1)."""
    __tablename__ = "pos_config"
    id = Column(Integer, primary_key=True, default=1)
    connected = Column(Boolean, default=False)
    system = Column(String, nullable=True)
    api_key = Column(String, nullable=True)  # never returned by the API
    restaurant_id = Column(String, nullable=True)
    sync_frequency = Column(String, default="realtime")
    last_sync = Column(DateTime, nullable=True)
    mapped_items = Column(Integer, default=0)
    auto_updates = Column(Integer, default=0)
    updated_by = Column(String, nullable=True)
    updated_at = Column(DateTime, default=datetime.datetime.utcnow)


class PosMapping(Base):
    """Link between a POS menu item and an inventory item."""
    __tablename__ = "pos_mappings"
    id = Column(Integer, primary_key=True, index=True)
    pos_item_id = Column(String, nullable=False)
    pos_item_name = Column(String, nullable=True)
    inventory_item_id = Column(Integer, ForeignKey("inventory.id", ondelete="CASCADE"), nullable=True)
    quantity_per_sale = Column(Integer, default=1)
    updated_by = Column(String, nullable=True)
    updated_at = Column(DateTime, default=datetime.datetime.utcnow)
