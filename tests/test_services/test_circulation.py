# tests/test_services/test_circulation.py

import pytest
from datetime import timedelta
from core.errors import (
    AlreadyBorrowed, InvalidTransition, NoCopiesAvailable, NotFound,
    RenewalLimitReached, Unauthorized
)
from core.sa.models import Book, BorrowingRecord, BorrowingStatus
from core.services import CirculationService, MAX_RENEWALS

@pytest.fixture
def service(db_session, clock):
    return CirculationService(db_session, clock=clock)

def available(db_session, book_id):
    db_session.expire_all()
    return db_session.get(Book, book_id).available_copies

def test_self_service_borrow_and_return(service, db_session, student, other_student, sample_book, clock):
    """Single copy, no approval: A borrows, B is turned away, A returns."""
    record = service.request_borrow(student, sample_book.id)
    assert record.status == BorrowingStatus.ACTIVE.value
    assert record.request_date == clock.now
    assert record.borrow_date == clock.now
    assert record.due_date == clock.now + timedelta(days=14)
    assert record.approved_by is None
    assert available(db_session, sample_book.id) == 0

    with pytest.raises(NoCopiesAvailable):
        service.request_borrow(other_student, sample_book.id)
    assert db_session.query(BorrowingRecord).filter_by(user_id=other_student).count() == 0

    clock.advance(days=3)
    returned = service.return_book(student, record.id)
    assert returned.status == BorrowingStatus.RETURNED.value
    assert returned.return_date == clock.now
    assert available(db_session, sample_book.id) == 1

def test_approval_flow(service, db_session, student, librarian, approval_book, clock):
    """Approval needed: request stays pending until a librarian approves it."""
    record = service.request_borrow(student, approval_book.id, notes="for thesis")
    assert record.status == BorrowingStatus.PENDING.value
    assert record.borrow_date is None
    assert record.due_date is None
    assert record.notes == "for thesis"
    assert available(db_session, approval_book.id) == 2

    clock.advance(hours=5)
    approved = service.approve(librarian, record.id)
    assert approved.status == BorrowingStatus.ACTIVE.value
    assert approved.approved_by == librarian
    assert approved.approval_date == clock.now
    assert approved.borrow_date == clock.now
    assert approved.due_date == clock.now + timedelta(days=30)
    assert available(db_session, approval_book.id) == 1

def test_request_for_missing_book(service, student):
    with pytest.raises(NotFound):
        service.request_borrow(student, "no-such-book")

def test_request_requires_identity(service, sample_book):
    with pytest.raises(Unauthorized):
        service.request_borrow(None, sample_book.id)

def test_second_open_request_is_rejected(service, db_session, student, approval_book):
    service.request_borrow(student, approval_book.id)
    with pytest.raises(AlreadyBorrowed):
        service.request_borrow(student, approval_book.id)
    assert db_session.query(BorrowingRecord).count() == 1

def test_can_borrow_again_after_return(service, student, make_book):
    book = make_book(total_copies=1)
    first = service.request_borrow(student, book.id)
    service.return_book(student, first.id)
    second = service.request_borrow(student, book.id)
    assert second.status == BorrowingStatus.ACTIVE.value

def test_approve_twice_does_not_double_decrement(service, db_session, student, librarian, approval_book):
    record = service.request_borrow(student, approval_book.id)
    service.approve(librarian, record.id)
    with pytest.raises(InvalidTransition):
        service.approve(librarian, record.id)
    assert available(db_session, approval_book.id) == 1

def test_approve_without_copies_leaves_record_pending(service, db_session, student, librarian, make_book):
    book = make_book(total_copies=1, available_copies=0, requires_approval=True)
    record = service.request_borrow(student, book.id)
    with pytest.raises(NoCopiesAvailable):
        service.approve(librarian, record.id)

    db_session.expire_all()
    record = db_session.get(BorrowingRecord, record.id)
    assert record.status == BorrowingStatus.PENDING.value
    assert record.approved_by is None
    assert record.due_date is None
    assert available(db_session, book.id) == 0

def test_racing_approvals_for_last_copy(database, db_session, student, other_student, librarian, make_book, clock):
    """Two librarians approve two requests for the last copy from separate sessions."""
    book = make_book(total_copies=1, requires_approval=True)
    first = CirculationService(db_session, clock=clock).request_borrow(student, book.id)
    second = CirculationService(db_session, clock=clock).request_borrow(other_student, book.id)

    session_a = database.get_session()
    session_b = database.get_session()
    try:
        # Both sessions see one copy on the shelf before either approval lands
        assert session_a.get(Book, book.id).available_copies == 1
        assert session_b.get(Book, book.id).available_copies == 1

        outcomes = []
        for session, record_id in ((session_a, first.id), (session_b, second.id)):
            try:
                CirculationService(session, clock=clock).approve(librarian, record_id)
                outcomes.append("approved")
            except NoCopiesAvailable:
                outcomes.append("no_copies")
    finally:
        session_a.close()
        session_b.close()

    assert sorted(outcomes) == ["approved", "no_copies"]
    assert available(db_session, book.id) == 0
    statuses = sorted(r.status for r in db_session.query(BorrowingRecord).all())
    assert statuses == ["active", "pending"]

def test_students_cannot_approve_or_reject(service, student, other_student, approval_book):
    record = service.request_borrow(student, approval_book.id)
    with pytest.raises(Unauthorized):
        service.approve(student, record.id)
    with pytest.raises(Unauthorized):
        service.reject(other_student, record.id)

def test_reject(service, db_session, student, admin, approval_book, clock):
    record = service.request_borrow(student, approval_book.id)
    rejected = service.reject(admin, record.id, notes="reference copy only")
    assert rejected.status == BorrowingStatus.REJECTED.value
    assert rejected.approved_by == admin
    assert rejected.approval_date == clock.now
    assert rejected.notes == "reference copy only"
    assert rejected.borrow_date is None
    assert available(db_session, approval_book.id) == 2

def test_terminal_states_accept_no_transitions(service, student, librarian, approval_book, sample_book):
    rejected = service.request_borrow(student, approval_book.id)
    service.reject(librarian, rejected.id)
    with pytest.raises(InvalidTransition):
        service.approve(librarian, rejected.id)
    with pytest.raises(InvalidTransition):
        service.return_book(student, rejected.id)

    loan = service.request_borrow(student, sample_book.id)
    service.return_book(student, loan.id)
    with pytest.raises(InvalidTransition):
        service.return_book(student, loan.id)
    with pytest.raises(InvalidTransition):
        service.renew(student, loan.id)

def test_pending_cannot_skip_to_returned(service, db_session, student, approval_book):
    record = service.request_borrow(student, approval_book.id)
    with pytest.raises(InvalidTransition):
        service.return_book(student, record.id)
    assert available(db_session, approval_book.id) == 2

def test_active_cannot_be_rejected(service, student, librarian, sample_book):
    record = service.request_borrow(student, sample_book.id)
    with pytest.raises(InvalidTransition):
        service.reject(librarian, record.id)

def test_return_permissions(service, db_session, student, other_student, librarian, make_book):
    book = make_book(total_copies=2)
    record = service.request_borrow(student, book.id)
    with pytest.raises(Unauthorized):
        service.return_book(other_student, record.id)
    returned = service.return_book(librarian, record.id)
    assert returned.status == BorrowingStatus.RETURNED.value
    assert available(db_session, book.id) == 2

def test_return_never_exceeds_total(service, db_session, student, make_book):
    """A copy already counted as back on the shelf is not counted twice."""
    book = make_book(total_copies=1)
    record = service.request_borrow(student, book.id)
    db_session.query(Book).filter(Book.id == book.id).update({Book.available_copies: 1})
    db_session.commit()

    service.return_book(student, record.id)
    assert available(db_session, book.id) == 1

def test_renew_extends_from_due_date(service, student, sample_book, clock):
    record = service.request_borrow(student, sample_book.id)
    original_due = record.due_date

    clock.advance(days=10)
    renewed = service.renew(student, record.id)
    assert renewed.renewal_count == 1
    assert renewed.due_date == original_due + timedelta(days=14)

def test_renewal_cap(service, db_session, student, sample_book):
    record = service.request_borrow(student, sample_book.id)
    for _ in range(MAX_RENEWALS):
        service.renew(student, record.id)
    db_session.expire_all()
    due_at_cap = db_session.get(BorrowingRecord, record.id).due_date

    with pytest.raises(RenewalLimitReached):
        service.renew(student, record.id)

    db_session.expire_all()
    record = db_session.get(BorrowingRecord, record.id)
    assert record.renewal_count == 2
    assert record.due_date == due_at_cap

def test_renew_pending_is_invalid(service, student, approval_book):
    record = service.request_borrow(student, approval_book.id)
    with pytest.raises(InvalidTransition):
        service.renew(student, record.id)

def test_renew_by_stranger_is_denied(service, student, other_student, sample_book):
    record = service.request_borrow(student, sample_book.id)
    with pytest.raises(Unauthorized):
        service.renew(other_student, record.id)

def test_staff_cannot_renew_for_the_borrower(service, db_session, student, librarian, admin, sample_book):
    record = service.request_borrow(student, sample_book.id)
    for actor in (librarian, admin):
        with pytest.raises(Unauthorized):
            service.renew(actor, record.id)
    db_session.expire_all()
    assert db_session.get(BorrowingRecord, record.id).renewal_count == 0

def test_unknown_record(service, librarian):
    with pytest.raises(NotFound):
        service.approve(librarian, "missing")
    with pytest.raises(NotFound):
        service.return_book(librarian, "missing")

def test_get_details_joins_book_and_profile(service, student, other_student, librarian, sample_book):
    record = service.request_borrow(student, sample_book.id)
    details = service.get_details(student, record.id)
    assert details.book.title == "Introduction to Algorithms"
    assert details.profile.email == "alice@uni.example"
    assert service.get_details(librarian, record.id).id == record.id
    with pytest.raises(Unauthorized):
        service.get_details(other_student, record.id)

def test_listing(service, student, other_student, librarian, sample_book, approval_book):
    service.request_borrow(student, sample_book.id)
    service.request_borrow(student, approval_book.id)
    service.request_borrow(other_student, approval_book.id)

    assert len(service.list_for_user(student)) == 2
    assert [r.status for r in service.list_for_user(student, status="pending")] == ["pending"]
    assert len(service.list_all(librarian)) == 3
    assert len(service.list_all(librarian, status="pending")) == 2
    with pytest.raises(Unauthorized):
        service.list_all(student)

def test_overdue_is_derived(service, db_session, student, librarian, sample_book, clock):
    record = service.request_borrow(student, sample_book.id)
    assert service.list_overdue(librarian) == []

    clock.advance(days=15)
    overdue = service.list_overdue(librarian)
    assert [r.id for r in overdue] == [record.id]
    assert overdue[0].status == BorrowingStatus.ACTIVE.value
    assert overdue[0].is_overdue(clock.now)

    with pytest.raises(Unauthorized):
        service.list_overdue(student)
