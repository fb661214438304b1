# File: src/parkhub/application/exceptions.py
"""
Application errors

Typed failures raised by the services. Validation and not-found conditions
are raised immediately and never retried. Upstream failures come from the
partner rental service.
"""

from typing import Optional


class ParkHubError(Exception):
    """Base exception for parking backend errors"""
    pass


class ModelAlreadyExistsError(ParkHubError):
    """Uniqueness violation (area name, spot number in area, reservation tuple, username)"""
    pass


class ModelValidationError(ParkHubError):
    """Referenced entity missing, malformed input or business rule violation"""
    pass


class ModelNotFoundError(ParkHubError):
    """Lookup by id yields nothing for an update/delete"""
    pass


class UpstreamServiceError(ParkHubError):
    """Partner service unreachable or answered with a non-success status"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code
