# tests/test_cli.py
import pytest
from click.testing import CliRunner

from cli.main import cli
from cli.commands.db import SAMPLE_BOOKS
from core.sa.models import Book, UserRole

@pytest.fixture
def runner(test_db_path, database, monkeypatch):
    """CLI runner pointed at the test database."""
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{test_db_path}")
    return CliRunner()

def test_seed_is_idempotent(runner, db_session):
    result = runner.invoke(cli, ["db", "seed"])
    assert result.exit_code == 0, result.output
    assert f"Seeded: {len(SAMPLE_BOOKS)} books" in result.output

    result = runner.invoke(cli, ["db", "seed"])
    assert result.exit_code == 0, result.output
    assert "Seeded: 0 books" in result.output
    assert db_session.query(Book).count() == len(SAMPLE_BOOKS)

def test_register_and_bootstrap_admin(runner, db_session):
    result = runner.invoke(cli, ["users", "register", "dana", "--email", "dana@uni.example", "--name", "Dana"])
    assert result.exit_code == 0, result.output

    result = runner.invoke(cli, ["users", "bootstrap-admin", "dana"])
    assert result.exit_code == 0, result.output
    assert "now an admin" in result.output

    roles = {r.role for r in db_session.query(UserRole).filter_by(user_id="dana")}
    assert roles == {"student", "admin"}

def test_bootstrap_admin_requires_registration(runner):
    result = runner.invoke(cli, ["users", "bootstrap-admin", "ghost"])
    assert result.exit_code != 0
    assert "not registered" in result.output

def test_grant_requires_admin_actor(runner, student, librarian, admin, db_session):
    result = runner.invoke(cli, ["users", "grant", "--actor", librarian, student, "librarian"])
    assert result.exit_code != 0
    assert "Not allowed" in result.output

    result = runner.invoke(cli, ["users", "grant", "--actor", admin, student, "librarian"])
    assert result.exit_code == 0, result.output

    result = runner.invoke(cli, ["users", "revoke", "--actor", admin, student, "librarian"])
    assert result.exit_code == 0, result.output
    assert db_session.query(UserRole).filter_by(user_id=student).count() == 1

def test_list_users(runner, student, admin):
    result = runner.invoke(cli, ["users", "list", "--actor", admin])
    assert result.exit_code == 0, result.output
    assert "alice@uni.example" in result.output

def test_borrowings_report(runner, db_session, student, librarian, sample_book):
    from core.services import CirculationService
    CirculationService(db_session).request_borrow(student, sample_book.id)

    result = runner.invoke(cli, ["borrowings", "list", "--actor", librarian])
    assert result.exit_code == 0, result.output
    assert "Introduction to Algorithms" in result.output
    assert "1 record(s)" in result.output

    result = runner.invoke(cli, ["borrowings", "list", "--actor", librarian, "--overdue"])
    assert "No borrowing records found" in result.output

    result = runner.invoke(cli, ["borrowings", "list", "--actor", student])
    assert result.exit_code != 0
