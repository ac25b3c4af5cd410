# core/sa/repositories/user.py
from typing import List, Optional, Dict, Any
from sqlalchemy.orm import Session, selectinload
from core.sa.models import Profile, UserRole

PROFILE_FIELDS = frozenset({"full_name", "student_id", "phone"})


class UserRepository:
    """Repository for actor profiles and their role grants."""

    def __init__(self, session: Session):
        """Initialize the repository with a database session.
        
        Args:
            session: SQLAlchemy session for database operations
        """
        self.session = session

    def get_by_id(self, user_id: str) -> Optional[Profile]:
        """Get a profile by the identity provider's user ID.
        
        Args:
            user_id: The ID of the user to retrieve
            
        Returns:
            The Profile object if found, None otherwise
        """
        return self.session.query(Profile).filter(Profile.id == user_id).first()

    def create_profile(self, user_id: str, email: str, full_name: Optional[str] = None) -> Profile:
        """Create a profile row for a newly registered identity.
        
        Args:
            user_id: ID issued by the identity provider
            email: The user's email address
            full_name: Display name, "User" when not supplied
            
        Returns:
            The flushed Profile object
        """
        profile = Profile(id=user_id, email=email, full_name=full_name or "User")
        self.session.add(profile)
        self.session.flush()
        return profile

    def update_profile(self, profile: Profile, changes: Dict[str, Any]) -> Profile:
        """Update editable profile fields.
        
        Raises:
            ValueError: If a field outside the editable set is supplied
        """
        unknown = set(changes) - PROFILE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update field(s): {', '.join(sorted(unknown))}")
        for key, value in changes.items():
            setattr(profile, key, value)
        self.session.flush()
        return profile

    def list_profiles(self, limit: int = 100, offset: int = 0) -> List[Profile]:
        """List profiles with their roles loaded, newest first."""
        return (
            self.session.query(Profile)
            .options(selectinload(Profile.roles))
            .order_by(Profile.created_at.desc())
            .offset(offset)
            .limit(limit)
            .all()
        )

    def get_roles(self, user_id: str) -> set[str]:
        """Return the set of role names granted to a user (empty if none)."""
        rows = self.session.query(UserRole.role).filter(UserRole.user_id == user_id).all()
        return {row.role for row in rows}

    def get_role(self, user_id: str, role: str) -> Optional[UserRole]:
        return (
            self.session.query(UserRole)
            .filter(UserRole.user_id == user_id, UserRole.role == role)
            .first()
        )

    def add_role(self, user_id: str, role: str) -> UserRole:
        """Grant a role. Callers check for an existing grant first."""
        grant = UserRole(user_id=user_id, role=role)
        self.session.add(grant)
        self.session.flush()
        return grant

    def remove_role(self, user_id: str, role: str) -> bool:
        """Revoke a role.
        
        Returns:
            True if a grant was deleted, False if the user did not hold it
        """
        deleted = (
            self.session.query(UserRole)
            .filter(UserRole.user_id == user_id, UserRole.role == role)
            .delete(synchronize_session="fetch")
        )
        return deleted > 0
