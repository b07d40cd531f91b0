"""Permission checking for record access."""

from __future__ import annotations

import logging
from enum import Enum

from recordkeeper.auth.types import CallerContext
from recordkeeper.errors import AuthorizationDenied

logger = logging.getLogger(__name__)


class Operation(Enum):
    """Operations a record handler exposes."""

    LIST = "list"
    GET = "get"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


USER = "USER"
ADMIN = "ADMIN"

# Role hierarchy - higher number = more permissions
# Higher roles automatically have all permissions of lower roles
ROLE_HIERARCHY = {
    USER: 1,
    ADMIN: 2,
}

# Minimum role per operation. Shared by every record type.
POLICY: dict[Operation, str] = {
    Operation.LIST: USER,
    Operation.GET: USER,
    Operation.CREATE: ADMIN,
    Operation.UPDATE: ADMIN,
    Operation.DELETE: ADMIN,
}


def _role_level(role: str | None) -> int:
    """Return numeric level for a role name, 0 if unknown/None."""
    return ROLE_HIERARCHY.get(role or "", 0)


def _caller_level(roles: frozenset[str] | set[str] | list[str] | None) -> int:
    """Return the highest role level among the caller's roles."""
    if not roles:
        return 0
    return max(_role_level(r) for r in roles)


def allow(operation: Operation, caller_roles: frozenset[str] | set[str] | list[str] | None) -> bool:
    """Check whether a role set may perform an operation.

    Args:
        operation: The operation being attempted
        caller_roles: Roles of the caller (None or empty when unauthenticated)

    Returns:
        True if the highest caller role meets the operation's required role
    """
    required_level = _role_level(POLICY[operation])
    return _caller_level(caller_roles) >= required_level > 0


def authorize(
    operation: Operation,
    caller: CallerContext | None,
    record_type: str | None = None,
) -> None:
    """Raise AuthorizationDenied unless the caller may perform the operation."""
    roles = caller.roles if caller else None
    if allow(operation, roles):
        return

    if not caller or not caller.roles:
        reason = "Authentication required"
    else:
        reason = (
            f"{POLICY[operation].capitalize()} role required to "
            f"{operation.value} {record_type or 'records'}"
        )
    logger.info(
        "Denied %s on %s for %s",
        operation.value,
        record_type or "-",
        caller.user_id if caller else "anonymous",
    )
    raise AuthorizationDenied(operation.value, record_type, reason)


def has_role_or_higher(caller: CallerContext | None, required_role: str) -> bool:
    """Check if the caller has the required role or a higher one."""
    if not caller or not caller.roles:
        return False
    return _caller_level(caller.roles) >= ROLE_HIERARCHY.get(required_role, 999)


def roles_for(admin: bool) -> list[str]:
    """Role set granted to an active user."""
    return [USER, ADMIN] if admin else [USER]
