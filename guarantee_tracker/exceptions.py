"""Custom exception hierarchy for guarantee-tracker."""


class TrackerError(Exception):
    """Base exception for all guarantee-tracker errors."""


class ConfigurationError(TrackerError):
    """Raised when configuration is invalid or missing."""


class RemoteError(TrackerError):
    """Raised when a call to the guarantee store fails."""


class RecordNotFoundError(RemoteError):
    """Raised when a referenced guarantee does not exist."""


class CsvFormatError(TrackerError):
    """Raised when CSV input holds no usable data."""


class ChangeFeedError(RemoteError):
    """Raised when a change subscription cannot be opened or polled."""
