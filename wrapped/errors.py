"""Errors raised by the Match Wrapped services."""


class WrappedServiceError(Exception):
    """Raised when a Match Wrapped service operation fails."""


class RowStoreError(WrappedServiceError):
    """The match row store could not be read."""


class ScheduleConfigError(WrappedServiceError):
    """The unlock schedule file is missing or malformed."""
