class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class NotFoundError(DomainError):
    """Raised when a referenced record, correction or staff does not exist."""


class InvalidStateTransition(DomainError):
    """Raised when a correction is decided twice or from a terminal state."""


class InvalidPunchDataError(DomainError):
    """Raised for corrupt punch data; fails only the affected (staff, date) unit."""


class ConfigurationError(DomainError):
    """Raised when engine settings are malformed."""


class WeekNotReadyError(DomainError):
    """Raised when a weekly pass finds missing sibling days in an open week."""

    def __init__(self, staff_id: int, week_start, missing_days):
        self.staff_id = staff_id
        self.week_start = week_start
        self.missing_days = tuple(missing_days)
        super().__init__(
            f"week of {week_start} for staff {staff_id} is missing {len(self.missing_days)} day(s)"
        )
