# core/policy.py
"""Row-level access policy.

A single table keyed by (resource, operation) lists the clauses that may grant
access. Clauses are OR'ed and anything not listed is denied, including callers
with no identity or no role data.
"""
import logging
from enum import Enum
from typing import Any, Callable, Dict, FrozenSet, Iterable, List, Optional, Tuple

from core.errors import Unauthorized
from core.sa.models import AppRole, BorrowingStatus, STAFF_ROLES

logger = logging.getLogger(__name__)


class Resource(str, Enum):
    BOOK = "book"
    BORROWING_RECORD = "borrowing_record"
    RESERVATION = "reservation"
    USER_ROLE = "user_role"
    PROFILE = "profile"


class Operation(str, Enum):
    READ = "read"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    # Staff-only updates, kept apart from owner self-service
    APPROVE = "approve"
    FULFILL = "fulfill"
    # Owner-only extension of a loan
    RENEW = "renew"


Clause = Callable[[str, FrozenSet[str], Any], bool]


def _field(row: Any, name: str) -> Any:
    if row is None:
        return None
    if isinstance(row, dict):
        return row.get(name)
    return getattr(row, name, None)


def anyone(actor_id, roles, row) -> bool:
    return True


def has_role(*wanted: AppRole) -> Clause:
    names = frozenset(r.value for r in wanted)

    def clause(actor_id, roles, row) -> bool:
        return bool(names & roles)

    clause.__name__ = "has_role(%s)" % ",".join(sorted(names))
    return clause


def owns(field: str = "user_id") -> Clause:
    def clause(actor_id, roles, row) -> bool:
        owner = _field(row, field)
        return owner is not None and owner == actor_id

    clause.__name__ = "owns(%s)" % field
    return clause


def creates_pending_request_for_self(actor_id, roles, row) -> bool:
    return (
        _field(row, "user_id") == actor_id
        and _field(row, "status") == BorrowingStatus.PENDING.value
    )


staff = has_role(*STAFF_ROLES)
admin = has_role(AppRole.ADMIN)


POLICIES: Dict[Tuple[Resource, Operation], List[Clause]] = {
    (Resource.BOOK, Operation.READ): [anyone],
    (Resource.BOOK, Operation.CREATE): [staff],
    (Resource.BOOK, Operation.UPDATE): [staff],
    (Resource.BOOK, Operation.DELETE): [admin],

    (Resource.BORROWING_RECORD, Operation.READ): [owns(), staff],
    (Resource.BORROWING_RECORD, Operation.CREATE): [creates_pending_request_for_self],
    (Resource.BORROWING_RECORD, Operation.UPDATE): [owns(), staff],
    (Resource.BORROWING_RECORD, Operation.APPROVE): [staff],
    (Resource.BORROWING_RECORD, Operation.RENEW): [owns()],

    (Resource.RESERVATION, Operation.READ): [owns(), staff],
    (Resource.RESERVATION, Operation.CREATE): [owns()],
    (Resource.RESERVATION, Operation.UPDATE): [owns(), staff],
    (Resource.RESERVATION, Operation.FULFILL): [staff],

    (Resource.USER_ROLE, Operation.READ): [owns(), admin],
    (Resource.USER_ROLE, Operation.CREATE): [admin],
    (Resource.USER_ROLE, Operation.UPDATE): [admin],
    (Resource.USER_ROLE, Operation.DELETE): [admin],

    (Resource.PROFILE, Operation.READ): [owns("id"), staff],
    (Resource.PROFILE, Operation.CREATE): [owns("id")],
    (Resource.PROFILE, Operation.UPDATE): [owns("id")],
}


def can(
    actor_id: Optional[str],
    roles: Optional[Iterable[str]],
    operation: Operation,
    resource: Resource,
    row: Any = None,
) -> bool:
    """Decide whether ``actor_id`` holding ``roles`` may perform ``operation`` on ``row``.

    Args:
        actor_id: Authenticated identity, or None for an anonymous caller
        roles: Role names granted to the actor; None is treated as no roles
        operation: What the caller wants to do
        resource: Kind of row being touched
        row: The row (ORM object or mapping) whose ownership fields are checked;
            for creates this is the row as it would be written

    Returns:
        True only when at least one clause for (resource, operation) grants access
    """
    if not actor_id:
        return False
    role_set = frozenset(roles) if roles is not None else frozenset()
    clauses = POLICIES.get((resource, operation), [])
    return any(clause(actor_id, role_set, row) for clause in clauses)


def authorize(
    actor_id: Optional[str],
    roles: Optional[Iterable[str]],
    operation: Operation,
    resource: Resource,
    row: Any = None,
) -> None:
    """Raise Unauthorized unless ``can`` allows the operation."""
    if not can(actor_id, roles, operation, resource, row):
        logger.warning(
            "Denied %s on %s for actor %s (roles=%s)",
            operation.value, resource.value, actor_id, sorted(roles or []),
        )
        raise Unauthorized(f"Not allowed to {operation.value} {resource.value.replace('_', ' ')}")
