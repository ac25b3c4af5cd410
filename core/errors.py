# core/errors.py
"""Failures raised by the circulation core.

Every error is terminal for the call that raised it: the session is rolled back
before it propagates, so the rows it touched keep their prior state.
"""


class CirculationError(Exception):
    code = "circulation_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class Unauthorized(CirculationError):
    code = "unauthorized"


class NotFound(CirculationError):
    code = "not_found"


class InvalidTransition(CirculationError):
    code = "invalid_transition"


class NoCopiesAvailable(CirculationError):
    code = "no_copies_available"


class RenewalLimitReached(CirculationError):
    code = "renewal_limit_reached"


class DuplicateReservation(CirculationError):
    code = "duplicate_reservation"


class AlreadyBorrowed(CirculationError):
    code = "already_borrowed"


class BookInUse(CirculationError):
    code = "book_in_use"


class BookAvailable(CirculationError):
    code = "book_available"
