"""
Typed service failures.

Services raise these; the API layer turns them into `{"message": ...}`
responses with the matching status code.
"""

from fastapi import status


class ServiceError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(ServiceError):
    """Beach, zone, sunbed, booking or user is absent (or not owned by the given parent)."""

    status_code = status.HTTP_404_NOT_FOUND


class BadRequestError(ServiceError):
    status_code = status.HTTP_400_BAD_REQUEST


class ConflictError(ServiceError):
    """State conflict: admin already assigned, sunbed already taken."""

    status_code = status.HTTP_409_CONFLICT


class InternalError(ServiceError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
