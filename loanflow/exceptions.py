"""Exception hierarchy shared by the engine, services and API layer."""


class LoanflowError(Exception):
    """Base exception for all loanflow errors."""


class ValidationError(LoanflowError):
    """Raised when a required input is missing or out of range.

    Always raised before any computation or side effect takes place.
    """


class NotFoundError(LoanflowError):
    """Raised when a loan does not exist or is not owned by the caller."""


class PersistenceError(LoanflowError):
    """Raised when a computed result could not be written to the store."""
