"""Custom exceptions used across ChronoPilot."""


class ChronoPilotError(Exception):
    """Base error for the application."""


class ConfigError(ChronoPilotError):
    """Configuration related error."""


class DataSourceError(ChronoPilotError):
    """Raised when rows or table listings cannot be fetched."""


class RenderError(ChronoPilotError):
    """Raised when a dataset cannot be laid out as a document."""


class DeliveryError(ChronoPilotError):
    """Raised when sending the finished reports fails."""


class StorageError(ChronoPilotError):
    """Raised when storing a finished report fails."""
