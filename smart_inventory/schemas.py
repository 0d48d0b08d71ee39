from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel
from typing import Optional, List, Literal
from datetime import datetime

from .constants import Priority, StockAction, Role

BCRYPT_MAX_PASSWORD_BYTES = 72


class CamelModel(BaseModel):
    """Wire format is camelCase (alertThreshold, posItemId...)."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True

    def dump(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")


# ── Inventory ────────────────────────────────────────────────────────────────

class InventoryItemCreate(CamelModel):
    name: str = Field(min_length=1)
    category: str = Field(min_length=1)
    stock: int = Field(default=0, ge=0)
    priority: Optional[Priority] = None
    alert_threshold: Optional[int] = Field(default=None, ge=0)
    pos_item_id: Optional[str] = None


class InventoryItemUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1)
    category: Optional[str] = Field(default=None, min_length=1)
    stock: Optional[int] = Field(default=None, ge=0)
    priority: Optional[Priority] = None
    alert_threshold: Optional[int] = Field(default=None, ge=0)
    pos_item_id: Optional[str] = None


class StockUpdate(CamelModel):
    quantity: int = Field(ge=0)
    action: StockAction


class PriorityUpdate(CamelModel):
    priority: Priority
    alert_threshold: int = Field(ge=0)


class InventoryItem(CamelModel):
    id: int
    name: str
    category: str
    stock: int
    priority: Optional[str] = None
    alert_threshold: Optional[int] = None
    pos_item_id: Optional[str] = None
    created_at: Optional[datetime] = None
    last_updated: Optional[datetime] = None
    updated_by: Optional[str] = None


class StockChange(CamelModel):
    id: int
    previous_stock: int
    new_stock: int
    change: int


# ── Auth ─────────────────────────────────────────────────────────────────────

class LoginRequest(CamelModel):
    email: str = Field(min_length=3)
    password: str = Field(min_length=1)


class RegisterRequest(CamelModel):
    email: str = Field(min_length=3)
    password: str = Field(min_length=6)
    display_name: Optional[str] = None
    role: Role = Role.STAFF

    @field_validator("password")
    @classmethod
    def _fits_bcrypt(cls, v: str) -> str:
        # bcrypt only accepts up to 72 bytes
        if len(v.encode("utf-8")) > BCRYPT_MAX_PASSWORD_BYTES:
            raise ValueError(f"must be at most {BCRYPT_MAX_PASSWORD_BYTES} bytes")
        return v


class UserProfile(CamelModel):
    id: Optional[int] = None
    email: str
    role: Role
    display_name: str


class TokenResponse(CamelModel):
    token: str
    expires_at: datetime
    user: UserProfile


# ── POS ──────────────────────────────────────────────────────────────────────

class PosConfigRequest(CamelModel):
    system: str = Field(min_length=1)
    api_key: str = Field(min_length=1)
    restaurant_id: str = Field(min_length=1)
    sync_frequency: Optional[str] = None


class PosConfig(CamelModel):
    """Public view of the POS config; never includes the API key."""
    connected: bool = False
    system: Optional[str] = None
    restaurant_id: Optional[str] = None
    sync_frequency: Optional[str] = None
    last_sync: Optional[datetime] = None
    mapped_items: int = 0
    auto_updates: int = 0
    updated_by: Optional[str] = None
    updated_at: Optional[datetime] = None


class PosMapping(CamelModel):
    pos_item_id: str = Field(min_length=1)
    pos_item_name: Optional[str] = None
    inventory_item_id: Optional[int] = None
    quantity_per_sale: int = Field(default=1, ge=1)


class PosMappingsRequest(CamelModel):
    mappings: List[PosMapping]


# ── AI ───────────────────────────────────────────────────────────────────────

class ChatTurn(CamelModel):
    role: Literal["user", "assistant"]
    content: str


class ChatRequest(CamelModel):
    message: str = Field(min_length=1)
    conversation_history: List[ChatTurn] = []
