"""Custom exception hierarchy for spectrum allocation."""

from __future__ import annotations

from collections.abc import Iterable


class SpectrumError(Exception):
    """Base exception for all allocation errors."""

    kind = "internal"

    def __init__(self, message: str, details: str | None = None) -> None:
        self.message = message
        self.details = details
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        if self.details:
            return f"{self.message}: {self.details}"
        return self.message


class ValidationError(SpectrumError):
    """Malformed or out-of-domain request input."""

    kind = "validation"

    def __init__(self, field: str, message: str, details: str | None = None) -> None:
        self.field = field
        super().__init__(message, details)


class InsufficientAvailabilityError(SpectrumError):
    """Fewer free channels than requested."""

    kind = "insufficient"

    def __init__(self, available: int, requested: int) -> None:
        self.available = available
        self.requested = requested
        super().__init__(f"Available {available}, requesting {requested}")


class WriteConflictError(SpectrumError):
    """A channel was taken by a concurrent transaction."""

    kind = "conflict"

    def __init__(self, values: Iterable[int] = (), details: str | None = None) -> None:
        self.values = sorted(values)
        if self.values:
            listed = ", ".join(str(v) for v in self.values)
            message = f"Frequencies already allocated: {listed}"
        else:
            message = "Frequencies were allocated by another request"
        super().__init__(message, details)


class NotFoundError(SpectrumError):
    """Band or channel does not exist."""

    kind = "not_found"

    def __init__(self, entity: str, key: object) -> None:
        self.entity = entity
        self.key = key
        super().__init__(f"{entity} not found: {key}")


class StorageError(SpectrumError):
    """Unclassified persistence failure."""

    pass
