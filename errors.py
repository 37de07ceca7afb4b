"""
Typed failures raised by the engine.

Every failure carries the HTTP status it maps to; the app renders it as the
error envelope ``{statusCode, message, success: false, errors}``.
"""

from typing import List, Optional


class ApiError(Exception):
    status_code = 500
    default_message = "Something went wrong"

    def __init__(self, message: Optional[str] = None, errors: Optional[List] = None):
        self.message = message or self.default_message
        self.errors = errors or []
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {
            "statusCode": self.status_code,
            "message": self.message,
            "success": False,
            "errors": self.errors,
        }


class InvalidArgument(ApiError):
    status_code = 400
    default_message = "Invalid argument"


class Unauthorized(ApiError):
    status_code = 401
    default_message = "Unauthorized request"


class Forbidden(ApiError):
    status_code = 403
    default_message = "Not allowed"


class NotFound(ApiError):
    status_code = 404
    default_message = "Not found"


class Conflict(ApiError):
    # conflicts are reported as bad requests
    status_code = 400
    default_message = "Conflict"


class Unexpected(ApiError):
    status_code = 500
