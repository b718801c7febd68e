"""
Application errors.

Services raise these; the handlers registered in main.py turn them into the
standard response envelope. Nothing below the routing layer builds JSON.
"""

from typing import Any, List, Optional


class AppError(Exception):
    """Base error carrying the HTTP status it maps to."""

    status_code = 500

    def __init__(self, message: str, status_code: Optional[int] = None, data: Any = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.data = data


class ValidationError(AppError):
    status_code = 400

    def __init__(self, message: str = "Validation Error", errors: Optional[List[str]] = None):
        super().__init__(message)
        self.errors = errors or []


class AuthenticationError(AppError):
    status_code = 401


class AuthorizationError(AppError):
    status_code = 403


class NotFoundError(AppError):
    status_code = 404


class ConflictError(AppError):
    status_code = 409
