class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class NotFoundError(DomainError):
    """Raised when an attendance record or penalty does not exist."""


class AlreadyExistsError(DomainError):
    """Raised when a day already has an attendance record for the employee."""


class InvalidStateError(DomainError):
    """Raised when an operation is not legal for the record's current status."""


class BreakInProgressError(InvalidStateError):
    """Raised when starting a break while another one is still open."""


class NoActiveBreakError(InvalidStateError):
    """Raised when ending a break but none is open."""


class ConcurrentUpdateError(InvalidStateError):
    """Raised when a record changed between being read and being saved."""
