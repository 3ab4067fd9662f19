# app/exceptions.py
"""
Error taxonomy for scan and occupancy operations.
Services raise these; app/main.py maps them to HTTP responses.
"""

from fastapi import status


class OccupancyError(Exception):
    """Base class carrying the HTTP status the boundary layer should use."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    error = "Internal server error"

    def __init__(self, message: str = "", error: str = None):
        self.message = message
        if error:
            self.error = error
        super().__init__(message or self.error)

    def to_dict(self) -> dict:
        return {"error": self.error, "message": self.message}


class UnauthenticatedError(OccupancyError):
    status_code = status.HTTP_401_UNAUTHORIZED
    error = "Unauthorized"


class NotFoundError(OccupancyError):
    status_code = status.HTTP_404_NOT_FOUND
    error = "Not found"


class CapacityExceededError(OccupancyError):
    status_code = status.HTTP_403_FORBIDDEN
    error = "Facility is at maximum capacity"


class InternalError(OccupancyError):
    pass
