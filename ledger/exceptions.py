"""Domain-specific exceptions for the expense tracker ledger."""

class ValidationError(ValueError):
    """Raised when a typed amount or date cannot be interpreted."""


class RecordNotFoundError(LookupError):
    """Raised when an expense cannot be located for an explicit lookup."""


class PersistenceError(IOError):
    """Raised when the persistence layer encounters unrecoverable issues."""


class ExportError(IOError):
    """Raised when a report writer cannot produce its output file."""
