# backend/utils/permissions.py
import enum
from typing import Dict, FrozenSet, Union


class UserRole(str, enum.Enum):
    ADMIN = "admin"
    PURCHASING = "purchasing"
    STOREKEEPER = "storekeeper"


class Action(str, enum.Enum):
    VIEW_DASHBOARD = "view_dashboard"
    VIEW_INVENTORY = "view_inventory"
    RECORD_ENTRY = "record_entry"
    RECORD_EXIT = "record_exit"
    MANAGE_PRODUCTS = "manage_products"
    MANAGE_SUPPLIERS = "manage_suppliers"
    MANAGE_PURCHASES = "manage_purchases"
    MANAGE_TRUSSES = "manage_trusses"
    EXPORT_DATA = "export_data"
    MANAGE_USERS = "manage_users"
    VIEW_LOGS = "view_logs"


# Role -> actions it may perform. Anything not listed is denied.
CAPABILITIES: Dict[UserRole, FrozenSet[Action]] = {
    UserRole.ADMIN: frozenset(Action),
    UserRole.PURCHASING: frozenset({
        Action.VIEW_DASHBOARD,
        Action.VIEW_INVENTORY,
        Action.RECORD_ENTRY,
        Action.MANAGE_SUPPLIERS,
        Action.MANAGE_PURCHASES,
        Action.EXPORT_DATA,
    }),
    UserRole.STOREKEEPER: frozenset({
        Action.VIEW_DASHBOARD,
        Action.VIEW_INVENTORY,
        Action.RECORD_ENTRY,
        Action.RECORD_EXIT,
        Action.MANAGE_PRODUCTS,
        Action.MANAGE_TRUSSES,
        Action.EXPORT_DATA,
    }),
}


def parse_role(value: Union[str, UserRole, None]):
    """Return the UserRole for a stored value, or None for unknown roles."""
    if value is None:
        return None
    try:
        return UserRole((value.value if isinstance(value, UserRole) else value).lower())
    except ValueError:
        return None


def can(role: Union[str, UserRole, None], action: Action) -> bool:
    parsed = parse_role(role)
    if parsed is None:
        return False
    return action in CAPABILITIES.get(parsed, frozenset())
