# tests/test_services/test_accounts.py

import pytest
from core.errors import NotFound, Unauthorized
from core.sa.models import Profile, UserRole
from core.services import AccountService

@pytest.fixture
def service(db_session, clock):
    return AccountService(db_session, clock=clock)

def test_register_grants_student(service, db_session):
    profile = service.register("new-user", "new@uni.example", "New User")
    assert profile.full_name == "New User"
    assert service.list_roles("new-user", "new-user") == ["student"]

def test_register_defaults_name(service):
    profile = service.register("anon", "anon@uni.example")
    assert profile.full_name == "User"

def test_register_twice(service, db_session):
    service.register("dup", "dup@uni.example")
    with pytest.raises(ValueError):
        service.register("dup", "dup@uni.example")
    assert db_session.query(UserRole).filter_by(user_id="dup").count() == 1

def test_profile_access(service, student, other_student, librarian):
    assert service.get_profile(student, student).email == "alice@uni.example"
    assert service.get_profile(librarian, student).id == student
    with pytest.raises(Unauthorized):
        service.get_profile(other_student, student)
    with pytest.raises(NotFound):
        service.get_profile(student, "ghost")

def test_update_own_profile(service, db_session, student, librarian):
    service.update_profile(student, student, {"phone": "555-0100", "student_id": "S-42"})
    db_session.expire_all()
    profile = db_session.get(Profile, student)
    assert profile.phone == "555-0100"
    assert profile.student_id == "S-42"

    with pytest.raises(Unauthorized):
        service.update_profile(librarian, student, {"phone": "000"})
    with pytest.raises(ValueError):
        service.update_profile(student, student, {"email": "spoof@uni.example"})

def test_admin_grants_and_revokes(service, student, admin):
    service.grant_role(admin, student, "librarian")
    assert service.list_roles(admin, student) == ["librarian", "student"]

    with pytest.raises(ValueError):
        service.grant_role(admin, student, "librarian")

    service.revoke_role(admin, student, "librarian")
    assert service.list_roles(student, student) == ["student"]
    with pytest.raises(NotFound):
        service.revoke_role(admin, student, "librarian")

def test_non_admin_cannot_manage_roles(service, student, librarian):
    with pytest.raises(Unauthorized):
        service.grant_role(student, student, "admin")
    with pytest.raises(Unauthorized):
        service.grant_role(librarian, student, "librarian")
    with pytest.raises(Unauthorized):
        service.revoke_role(librarian, librarian, "librarian")
    with pytest.raises(Unauthorized):
        service.list_roles(student, librarian)

def test_grant_validation(service, admin):
    with pytest.raises(ValueError):
        service.grant_role(admin, admin, "superuser")
    with pytest.raises(NotFound):
        service.grant_role(admin, "ghost", "librarian")

def test_list_users_is_admin_only(service, student, librarian, admin):
    users = service.list_users(admin)
    assert {u.id for u in users} == {student, librarian, admin}
    assert next(u for u in users if u.id == librarian).role_names == ["librarian", "student"]
    with pytest.raises(Unauthorized):
        service.list_users(librarian)
