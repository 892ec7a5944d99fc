"""Custom exception types for the ADO PR status scanner."""


class ScannerError(Exception):
    """Base exception for all recoverable scanner errors."""


class ConfigurationError(ScannerError):
    """Raised when runtime configuration values are missing or invalid."""


class AuthenticationError(ScannerError):
    """Raised when Azure DevOps authentication credentials are unavailable or rejected."""


class ApiError(ScannerError):
    """Raised when an Azure DevOps API request fails or returns an unexpected response."""


class RosterUnavailableError(ApiError):
    """Raised when no team roster could be retrieved at all."""


class DataValidationError(ScannerError):
    """Raised when API payloads or snapshot fields do not meet expected constraints."""
