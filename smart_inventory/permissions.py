"""
Role-based permission predicates and the email → role lookup.

The predicates are plain booleans and never raise; auth.require() turns a
False into the fixed 403 response.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Mapping, Optional

from .constants import USER_ROLES, Role


@dataclass
class CurrentUser:
    email: str
    role: Role
    display_name: str
    user_id: Optional[int] = None
    token: Optional[str] = None

    def to_profile(self) -> dict:
        return {
            "id": self.user_id,
            "email": self.email,
            "role": self.role.value,
            "displayName": self.display_name,
            "permissions": permissions_for(self),
        }


def can_modify_stock(user: Optional[CurrentUser]) -> bool:
    """Any authenticated user may count stock in and out."""
    return user is not None


def can_manage_products(user: Optional[CurrentUser]) -> bool:
    """Create / edit / delete products: manager or admin."""
    return user is not None and user.role in (Role.MANAGER, Role.ADMIN)


def can_manage_priorities(user: Optional[CurrentUser]) -> bool:
    """Priority and threshold settings: admin only."""
    return user is not None and user.role == Role.ADMIN


def permissions_for(user: Optional[CurrentUser]) -> dict:
    return {
        "canModifyStock": can_modify_stock(user),
        "canManageProducts": can_manage_products(user),
        "canManagePriorities": can_manage_priorities(user),
    }


def display_name_for(email: str) -> str:
    name = email.split("@")[0]
    return name[:1].upper() + name[1:]


class RoleDirectory(ABC):
    """Lookup from an identity (email) to a role."""

    @abstractmethod
    def role_for(self, email: str) -> Role:
        ...


class StaticRoleDirectory(RoleDirectory):
    """Fixed email → role table; unknown emails are staff."""

    def __init__(self, table: Mapping[str, Role] = None, default: Role = Role.STAFF):
        self.table = {k.lower(): Role(v) for k, v in (table if table is not None else USER_ROLES).items()}
        self.default = default

    def role_for(self, email: str) -> Role:
        return self.table.get((email or "").strip().lower(), self.default)
