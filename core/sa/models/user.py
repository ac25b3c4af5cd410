# core/sa/models/user.py
from enum import Enum
from sqlalchemy import String, ForeignKey, UniqueConstraint, Index
from sqlalchemy.orm import relationship, Mapped, mapped_column
from .base import Base, TimestampMixin, UTCDateTime, new_id, utcnow
from datetime import datetime


class AppRole(str, Enum):
    STUDENT = "student"
    LIBRARIAN = "librarian"
    ADMIN = "admin"


DEFAULT_ROLE = AppRole.STUDENT
STAFF_ROLES = (AppRole.LIBRARIAN, AppRole.ADMIN)


class Profile(Base, TimestampMixin):
    """An actor known to the identity provider, one row per account."""
    __tablename__ = 'profiles'

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    full_name: Mapped[str] = mapped_column(String(255), nullable=False, default="User")
    email: Mapped[str] = mapped_column(String(320), nullable=False)
    student_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(64), nullable=True)

    # Relationships
    roles = relationship('UserRole', back_populates='profile', cascade='all, delete-orphan')
    borrowing_records = relationship(
        'BorrowingRecord', back_populates='profile', foreign_keys='BorrowingRecord.user_id'
    )
    reservations = relationship('Reservation', back_populates='profile')

    @property
    def role_names(self) -> list[str]:
        return sorted(r.role for r in self.roles)


class UserRole(Base):
    __tablename__ = 'user_roles'

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(ForeignKey('profiles.id', ondelete='CASCADE'), nullable=False)
    role: Mapped[str] = mapped_column(String(20), nullable=False)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)

    # Relationships
    profile = relationship('Profile', back_populates='roles')

    __table_args__ = (
        UniqueConstraint('user_id', 'role', name='uix_user_roles_user_role'),
        Index('idx_user_roles_user_id', 'user_id'),
    )
