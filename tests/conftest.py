# tests/conftest.py
import os
import sys
import pytest
from pathlib import Path
from datetime import datetime, timedelta, UTC
from sqlalchemy.sql import text

# Add project root to Python path
project_root = str(Path(__file__).parent.parent)
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from sqlalchemy.orm import Session
from core.sa.models import Base, Book, Profile, UserRole, AppRole
from core.sa.database import Database


class FrozenClock:
    """Deterministic stand-in for utcnow that tests can move forward."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture(scope="session")
def test_db_path(tmp_path_factory):
    """Create a temporary directory for the test database."""
    test_dir = tmp_path_factory.mktemp("test_db")
    return str(test_dir / "test_library.db")

@pytest.fixture(scope="session")
def database(test_db_path):
    """Create a test database instance"""
    db = Database(f"sqlite:///{test_db_path}")
    
    # Drop all tables and recreate schema
    Base.metadata.drop_all(db.engine)
    Base.metadata.create_all(db.engine)
    
    yield db
    
    db.engine.dispose()
    # Clean up the test database file after all tests
    try:
        os.remove(test_db_path)
    except OSError:
        pass  # Ignore errors if file doesn't exist

@pytest.fixture(scope="function")
def db_session(database):
    """Create a new database session for a test"""
    session: Session = database.get_session()
    try:
        yield session
    finally:
        session.close()

@pytest.fixture(autouse=True)
def cleanup_db(db_session):
    """Clean up database tables before each test"""
    # Delete all data from tables in reverse order of dependencies
    db_session.execute(text("DELETE FROM reservations"))
    db_session.execute(text("DELETE FROM borrowing_records"))
    db_session.execute(text("DELETE FROM user_roles"))
    db_session.execute(text("DELETE FROM books"))
    db_session.execute(text("DELETE FROM profiles"))
    db_session.commit()
    yield
    # Clean up after test as well
    db_session.rollback()

@pytest.fixture
def clock():
    return FrozenClock(datetime(2025, 3, 3, 9, 30, tzinfo=UTC))

@pytest.fixture
def make_user(db_session):
    """Factory creating a profile with explicit role grants."""
    def _make_user(user_id: str, *roles: AppRole, email: str = None) -> str:
        profile = Profile(id=user_id, email=email or f"{user_id}@uni.example", full_name=user_id.title())
        db_session.add(profile)
        for role in roles or (AppRole.STUDENT,):
            db_session.add(UserRole(user_id=user_id, role=role.value))
        db_session.commit()
        return user_id
    return _make_user

@pytest.fixture
def student(make_user):
    return make_user("alice")

@pytest.fixture
def other_student(make_user):
    return make_user("bob")

@pytest.fixture
def librarian(make_user):
    return make_user("lena", AppRole.STUDENT, AppRole.LIBRARIAN)

@pytest.fixture
def admin(make_user):
    return make_user("root", AppRole.STUDENT, AppRole.ADMIN)

@pytest.fixture
def make_book(db_session):
    """Factory creating a catalog entry; available_copies defaults to total_copies."""
    counter = {"n": 0}

    def _make_book(total_copies: int = 1, available_copies: int = None, requires_approval: bool = False,
                   max_borrow_days: int = 14, title: str = None) -> Book:
        counter["n"] += 1
        book = Book(
            title=title or f"Test Book {counter['n']}",
            author="Test Author",
            publisher="Test Press",
            total_copies=total_copies,
            available_copies=total_copies if available_copies is None else available_copies,
            requires_approval=requires_approval,
            max_borrow_days=max_borrow_days,
        )
        db_session.add(book)
        db_session.commit()
        return book
    return _make_book

@pytest.fixture
def sample_book(make_book):
    """Single-copy book that can be borrowed without approval."""
    return make_book(total_copies=1, requires_approval=False, max_borrow_days=14, title="Introduction to Algorithms")

@pytest.fixture
def approval_book(make_book):
    """Two-copy book that needs librarian approval."""
    return make_book(total_copies=2, requires_approval=True, max_borrow_days=30, title="The Art of Computer Programming")

@pytest.fixture
def out_of_stock_book(make_book):
    """Single-copy book whose only copy is already on loan."""
    return make_book(total_copies=1, available_copies=0, title="Structure and Interpretation of Computer Programs")
