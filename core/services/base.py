# core/services/base.py
from contextlib import contextmanager
from datetime import datetime
from typing import Callable, Iterator, Optional

from sqlalchemy.orm import Session

from core.policy import Operation, Resource, authorize
from core.sa.models import utcnow
from core.sa.repositories import UserRepository


class BaseService:
    """Shared plumbing for services: role lookup, clock and transaction scope."""

    def __init__(self, session: Session, clock: Optional[Callable[[], datetime]] = None):
        self.session = session
        self.clock = clock or utcnow
        self.users = UserRepository(session)

    def roles_for(self, actor_id: Optional[str]) -> set[str]:
        if not actor_id:
            return set()
        return self.users.get_roles(actor_id)

    def authorize(self, actor_id: Optional[str], operation: Operation, resource: Resource, row=None) -> set[str]:
        """Check the policy table for the actor and return the role set that was used."""
        roles = self.roles_for(actor_id)
        authorize(actor_id, roles, operation, resource, row)
        return roles

    @contextmanager
    def transaction(self) -> Iterator[Session]:
        """Commit on success, roll back everything on any error."""
        try:
            yield self.session
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
