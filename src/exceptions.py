"""Custom exceptions for transaction id derivation."""


class TransactionError(RuntimeError):
    """Base class for failures while building or using a transaction context."""


class ExtractionError(TransactionError):
    """Raised when expected markup, attributes or script patterns are missing."""


class NetworkError(TransactionError):
    """Raised when fetching the home page or on-demand script fails."""


class TransactionDecodeError(TransactionError, ValueError):
    """Raised when a transaction id cannot be unmasked."""


class ArgumentMismatchError(TransactionError, ValueError):
    """Raised when interpolating vectors of different lengths."""
