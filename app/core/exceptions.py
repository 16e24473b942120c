"""
Application error taxonomy

Route handlers and services raise these; the handlers registered in
app.main render them into the standard response envelope.
"""
from typing import List, Optional

from fastapi import status


class AppError(Exception):
    """Base class for errors that map to a client-facing response"""
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, errors: Optional[List[str]] = None):
        super().__init__(message)
        self.message = message
        self.errors = errors or []

    def to_dict(self) -> dict:
        body = {"success": False, "message": self.message}
        if self.errors:
            body["errors"] = self.errors
        return body


class ValidationError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST


class AuthenticationError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED


class AuthorizationError(AppError):
    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND


class NotificationError(AppError):
    """Raised inside a notification channel; never reaches the client"""
    status_code = status.HTTP_502_BAD_GATEWAY

    def __init__(self, channel: str, message: str):
        super().__init__(message)
        self.channel = channel
