# Overview: Base-scoped visibility and mutation rules layered over role permissions.

"""
Access Policy

Role permissions (armory.permissions) decide WHICH operations a caller may
run. This module decides WHICH BASES those operations may touch.

RULES:
- admin: any base, no overrides.
- commander with a home base: every listing is pinned to the home base
  (a caller-supplied baseId is ignored). Assignments may only be created or
  expended at the home base. Transfers must have the home base on one side.
- logistics with a home base: purchase listings are pinned to the home base
  and purchases may only be recorded there. Transfer reads are unrestricted.
- A commander or logistics user without a home base is not scoped.

The caller is always passed in explicitly as a Principal; nothing here reads
request state.
"""

from __future__ import annotations

from dataclasses import dataclass


ROLE_ADMIN = "admin"
ROLE_COMMANDER = "commander"
ROLE_LOGISTICS = "logistics"


class AccessDeniedError(Exception):
    """Raised when the caller's base scope does not cover the target base."""
    pass


@dataclass(frozen=True)
class Principal:
    """Authenticated caller identity, decoded from the bearer token."""
    user_id: int
    email: str
    role: str
    base_id: int | None

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    def is_base_scoped(self, role: str) -> bool:
        return self.role == role and self.base_id is not None


def scoped_base_id(principal: Principal, requested_base_id: int | None, *, resource: str = "") -> int | None:
    """
    Resolve the base filter for a listing.

    Commanders always see their own base. Logistics users see their own
    base for purchases. Everyone else gets what they asked for.
    """
    if principal.is_base_scoped(ROLE_COMMANDER):
        return principal.base_id
    if resource == "purchases" and principal.is_base_scoped(ROLE_LOGISTICS):
        return principal.base_id
    return requested_base_id


def ensure_can_create_purchase(principal: Principal, base_id: int) -> None:
    if principal.is_base_scoped(ROLE_LOGISTICS) and base_id != principal.base_id:
        raise AccessDeniedError("Can only create purchases for your assigned base")


def ensure_can_manage_assignment(principal: Principal, base_id: int) -> None:
    if principal.is_base_scoped(ROLE_COMMANDER) and base_id != principal.base_id:
        raise AccessDeniedError("Can only assign assets for your base")


def ensure_can_manage_transfer(principal: Principal, from_base_id: int, to_base_id: int) -> None:
    if principal.is_base_scoped(ROLE_COMMANDER) and principal.base_id not in (from_base_id, to_base_id):
        raise AccessDeniedError("Can only transfer from/to your assigned base")
