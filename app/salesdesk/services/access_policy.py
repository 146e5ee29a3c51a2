"""Role/capability table for the sales desk.

Roles form a strict hierarchy and each capability names the lowest role
allowed to use it. Evaluation is a table lookup with no storage access;
the only per-resource rule (terminal assignment) lives in the ledger.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from app.salesdesk.core.context import RequestContext
from app.salesdesk.core.error_catalog import AppError, ErrorCatalog


class Role(str, Enum):
    USER = "USER"
    ADMIN = "ADMIN"
    SUPERADMIN = "SUPERADMIN"


class Capability(str, Enum):
    SALES_ENTRY_SUBMIT = "SALES_ENTRY_SUBMIT"
    SALES_ENTRY_AMEND = "SALES_ENTRY_AMEND"
    SALES_ENTRY_VIEW_OTHERS = "SALES_ENTRY_VIEW_OTHERS"
    REFERENCE_DATA_MANAGE = "REFERENCE_DATA_MANAGE"
    REPORTS_VIEW = "REPORTS_VIEW"


SCOPE_SELF = "self"
SCOPE_ALL = "all"

ROLE_RANK = {
    Role.USER: 1,
    Role.ADMIN: 2,
    Role.SUPERADMIN: 3,
}

CAPABILITY_MIN_ROLE = {
    Capability.SALES_ENTRY_SUBMIT: Role.USER,
    Capability.SALES_ENTRY_VIEW_OTHERS: Role.ADMIN,
    Capability.REPORTS_VIEW: Role.ADMIN,
    Capability.SALES_ENTRY_AMEND: Role.SUPERADMIN,
    Capability.REFERENCE_DATA_MANAGE: Role.SUPERADMIN,
}


@dataclass(frozen=True)
class PolicyDecision:
    key: str
    allowed: bool
    scope: str
    source: str


def normalize_role(role: str | None) -> Role | None:
    try:
        return Role((role or "").strip().upper())
    except ValueError:
        return None


def role_at_least(role: str | None, minimum: Role) -> bool:
    normalized = normalize_role(role)
    if normalized is None:
        return False
    return ROLE_RANK[normalized] >= ROLE_RANK[minimum]


def data_scope(role: str | None) -> str:
    if role_at_least(role, CAPABILITY_MIN_ROLE[Capability.SALES_ENTRY_VIEW_OTHERS]):
        return SCOPE_ALL
    return SCOPE_SELF


def evaluate(context: RequestContext, capability: Capability | str) -> PolicyDecision:
    key = str(capability.value if isinstance(capability, Capability) else capability).strip()
    try:
        minimum = CAPABILITY_MIN_ROLE[Capability(key)]
    except ValueError:
        return PolicyDecision(key=key, allowed=False, scope=SCOPE_SELF, source="unknown_capability")

    if normalize_role(context.role) is None:
        return PolicyDecision(key=key, allowed=False, scope=SCOPE_SELF, source="unknown_role")

    scope = data_scope(context.role)
    if role_at_least(context.role, minimum):
        return PolicyDecision(key=key, allowed=True, scope=scope, source="role_table")
    return PolicyDecision(key=key, allowed=False, scope=scope, source="insufficient_role")


def ensure_allowed(context: RequestContext, capability: Capability | str) -> PolicyDecision:
    decision = evaluate(context, capability)
    if not decision.allowed:
        raise AppError(ErrorCatalog.PERMISSION_DENIED)
    return decision
