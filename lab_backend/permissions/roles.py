# permissions/roles.py

from __future__ import annotations

from typing import Optional

from rest_framework.permissions import BasePermission


# =========================================================
# ROLE CONSTANTS (LAB STAFF ROLES)
# =========================================================
# They describe what the staff member does in the stock workflow.
ROLE_ADMIN = "admin"
ROLE_PROCUREMENT = "procurement"  # places orders, receives deliveries
ROLE_LOGISTICS = "logistics"  # requests, approves, hands out and disposes stock
ROLE_OBSERVER = "observer"  # read-only

STAFF_ROLES = {
    ROLE_ADMIN,
    ROLE_PROCUREMENT,
    ROLE_LOGISTICS,
    ROLE_OBSERVER,
}


# =========================================================
# CAPABILITIES (THE REAL PERMISSION LANGUAGE)
# =========================================================
# Views protect capabilities, not raw roles.
CAP_INVENTORY_VIEW = "inventory.view"
CAP_INVENTORY_EDIT = "inventory.edit"  # items, manual lots, import
CAP_INVENTORY_DELETE = "inventory.delete"  # item delete cascades to lots

CAP_PURCHASE_REQUEST = "purchase.request"
CAP_PURCHASE_APPROVE = "purchase.approve"
CAP_PURCHASE_ORDER = "purchase.order"
CAP_PURCHASE_RECEIVE = "purchase.receive"

CAP_STOCK_DISTRIBUTE = "stock.distribute"
CAP_STOCK_DISPOSE = "stock.dispose"
CAP_STOCK_CONSUME = "stock.consume"

CAP_REPORTS_VIEW = "reports.view"

ALL_CAPABILITIES = {
    CAP_INVENTORY_VIEW,
    CAP_INVENTORY_EDIT,
    CAP_INVENTORY_DELETE,
    CAP_PURCHASE_REQUEST,
    CAP_PURCHASE_APPROVE,
    CAP_PURCHASE_ORDER,
    CAP_PURCHASE_RECEIVE,
    CAP_STOCK_DISTRIBUTE,
    CAP_STOCK_DISPOSE,
    CAP_STOCK_CONSUME,
    CAP_REPORTS_VIEW,
}


# =========================================================
# ROLE → CAPABILITY MAP
# =========================================================
ROLE_CAPABILITIES: dict[str, set[str]] = {
    ROLE_ADMIN: {
        *ALL_CAPABILITIES,
    },
    ROLE_PROCUREMENT: {
        CAP_INVENTORY_VIEW,
        CAP_INVENTORY_EDIT,
        CAP_PURCHASE_ORDER,
        CAP_PURCHASE_RECEIVE,
        CAP_REPORTS_VIEW,
    },
    ROLE_LOGISTICS: {
        CAP_INVENTORY_VIEW,
        CAP_INVENTORY_EDIT,
        CAP_PURCHASE_REQUEST,
        CAP_PURCHASE_APPROVE,
        CAP_STOCK_DISTRIBUTE,
        CAP_STOCK_DISPOSE,
        CAP_STOCK_CONSUME,
        CAP_REPORTS_VIEW,
    },
    ROLE_OBSERVER: {
        CAP_INVENTORY_VIEW,
        CAP_REPORTS_VIEW,
    },
}


# =========================================================
# Helpers
# =========================================================
def get_user_role(user) -> Optional[str]:
    return getattr(user, "role", None)


def effective_capabilities_for(user) -> set[str]:
    if getattr(user, "is_superuser", False):
        return set(ALL_CAPABILITIES)
    return set(ROLE_CAPABILITIES.get(get_user_role(user), set()))


def user_has_capability(user, capability: str) -> bool:
    if not user or not getattr(user, "is_authenticated", False):
        return False
    return capability in effective_capabilities_for(user)


# =========================================================
# Capability Permissions
# =========================================================
class HasCapability(BasePermission):
    """
    Require a specific capability.

    Usage:
        permission_classes = [IsAuthenticated, HasCapability]
        view.required_capability = CAP_STOCK_DISTRIBUTE
    """

    def has_permission(self, request, view):
        required = getattr(view, "required_capability", None)
        if not required:
            # deny-by-default
            return False

        return user_has_capability(request.user, required)


class HasAnyCapability(BasePermission):
    """
    Require ANY capability from a set.

    Usage:
        view.required_any_capabilities = {CAP_INVENTORY_VIEW, CAP_REPORTS_VIEW}
    """

    def has_permission(self, request, view):
        required = getattr(view, "required_any_capabilities", None)
        if not required:
            return False

        return any(user_has_capability(request.user, cap) for cap in set(required))


class CapabilityViewMixin:
    """
    Map view actions (ViewSet action or HTTP method) to a required capability.

    Subclasses declare:
        capability_map = {"list": CAP_INVENTORY_VIEW, "create": CAP_INVENTORY_EDIT}
    Anything not in the map is denied.
    """

    capability_map: dict[str, str] = {}
    required_capability = None

    def get_permissions(self):
        key = getattr(self, "action", None) or self.request.method.lower()
        self.required_capability = self.capability_map.get(key)
        return [HasCapability()]
