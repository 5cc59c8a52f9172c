"""Exceptions raised by railmate."""


class RailmateError(Exception):
    """Base class for all railmate errors."""


class TrainNotFoundError(RailmateError, ValueError):
    """Raised when a train number is not in the registry."""

    def __init__(self, number: str):
        super().__init__(f"No train found with number '{number}'")
        self.number = number


class StationNotFoundError(RailmateError, ValueError):
    """Raised when a station id or code is not in the registry."""

    def __init__(self, station: str):
        super().__init__(f"Station {station} not found")
        self.station = station


class BookingValidationError(RailmateError, ValueError):
    """Raised for the first invalid field of a booking form."""

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field


class TrackingError(RailmateError):
    """Raised for tracking commands that are invalid in the current state."""


class AlertError(RailmateError):
    """Raised when an alert cannot be scheduled."""


class AlertValidationError(AlertError, ValueError):
    """Raised when alert settings are incomplete."""


class AccountError(RailmateError):
    """Raised when signup fails."""
