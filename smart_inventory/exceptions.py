"""
Custom exception classes for Smart Inventory.

Every exception carries the HTTP status it maps to; main.py converts them
into the uniform {"success": false, "error": ...} response.
"""

from .constants import Messages


class SmartInventoryException(Exception):
    """Base exception for all Smart Inventory errors."""
    status_code = 500

    def __init__(self, message: str, error_code: str = None, details=None):
        self.message = message
        self.error_code = error_code
        self.details = details
        super().__init__(self.message)


class ValidationException(SmartInventoryException):
    """Raised when input validation fails."""
    status_code = 400


class AuthenticationException(SmartInventoryException):
    """Raised for missing, expired or invalid credentials."""
    status_code = 401

    def __init__(self, message: str = Messages.UNAUTHORIZED, error_code: str = None):
        super().__init__(message, error_code)


class PermissionDeniedException(SmartInventoryException):
    """Raised when the user's role is insufficient."""
    status_code = 403

    def __init__(self, message: str = Messages.FORBIDDEN, error_code: str = None):
        super().__init__(message, error_code)


class NotFoundException(SmartInventoryException):
    status_code = 404

    def __init__(self, message: str = Messages.NOT_FOUND, error_code: str = None):
        super().__init__(message, error_code)


class AIServiceException(SmartInventoryException):
    """Raised when the chat completion endpoint fails or is not configured."""
    status_code = 500


class ExternalServiceException(SmartInventoryException):
    """Raised when external services (POS) fail."""
    status_code = 500


class ConfigurationException(SmartInventoryException):
    """Raised for configuration/environment errors."""
    status_code = 500
