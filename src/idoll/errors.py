class IdollError(Exception):
    """Base exception for snapshot capture/restore errors."""


class HostUnavailableError(IdollError):
    """Raised when a required interpreter primitive or the variable bank is missing."""


class SnapshotValidationError(IdollError):
    """Raised when a snapshot document is malformed or fails admissibility."""


class CyclicValueError(SnapshotValidationError):
    """Raised when a value handed to the cloner refers back to itself."""


class TransportError(IdollError):
    """Raised when reading or writing a persisted snapshot fails."""
