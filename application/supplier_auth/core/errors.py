"""
Error taxonomy for the auth core.

Each error carries the HTTP status it maps to and a client-safe message.
Handlers in ``middlewares/handlers.py`` render them as
``{"success": false, "message": ..., "error": ...}``.
"""
from fastapi import status


class AuthServiceError(Exception):
    status_code = status.HTTP_400_BAD_REQUEST
    error_code = "AUTH_ERROR"
    default_message = "Authentication error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidInput(AuthServiceError):
    error_code = "INVALID_INPUT"
    default_message = "Invalid request"


class InvalidCredential(AuthServiceError):
    error_code = "INVALID_OTP"
    default_message = "Invalid OTP"


class Expired(AuthServiceError):
    error_code = "OTP_EXPIRED"
    default_message = "OTP has expired"


class RateLimited(AuthServiceError):
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    error_code = "RATE_LIMIT_EXCEEDED"
    default_message = "Too many requests, please try again later"


class Unauthenticated(AuthServiceError):
    status_code = status.HTTP_401_UNAUTHORIZED
    error_code = "NO_TOKEN"
    default_message = "No token provided"


class InvalidToken(AuthServiceError):
    status_code = status.HTTP_401_UNAUTHORIZED
    error_code = "INVALID_TOKEN"
    default_message = "Invalid token"


class TokenExpired(AuthServiceError):
    status_code = status.HTTP_401_UNAUTHORIZED
    error_code = "TOKEN_EXPIRED"
    default_message = "Token expired"


class Revoked(AuthServiceError):
    status_code = status.HTTP_401_UNAUTHORIZED
    error_code = "TOKEN_REVOKED"
    default_message = "Token revoked"


class UserNotFound(AuthServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    error_code = "USER_NOT_FOUND"
    default_message = "User not found"


class Internal(AuthServiceError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_code = "INTERNAL_ERROR"
    default_message = "Something went wrong"
