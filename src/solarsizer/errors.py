"""Structured errors raised by the sizing core."""


class SizingError(ValueError):
    """Base exception for sizing errors.

    Carries the offending value and the bound it was checked against so
    callers can report both.
    """

    def __init__(self, message: str, value: float | None = None, bound: float | None = None):
        super().__init__(message)
        self.value = value
        self.bound = bound


class DomainError(SizingError):
    """An input lies outside the operational bounds."""

    def __init__(self, field: str, value: float, bound: float, message: str | None = None):
        self.field = field
        self.excess = abs(value - bound)
        if message is None:
            message = f"{field}={value:g} is outside the supported range (bound {bound:g}, off by {self.excess:g})"
        super().__init__(message, value, bound)


class CatalogExhaustedError(SizingError):
    """No catalog entry satisfies the selection criteria."""

    def __init__(self, component: str, message: str, value: float | None = None, bound: float | None = None):
        self.component = component
        super().__init__(message, value, bound)


class SizeCeilingExceeded(SizingError):
    """The required array exceeds the supported system size."""
