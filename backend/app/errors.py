"""Domain error taxonomy.

Services raise these; ``app.main`` renders them as ``{statusCode, msg}``.
"""
from fastapi import status


class AppError(Exception):
    """Base error carrying an HTTP status code and a user-safe message."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_msg: str = "Internal server error"

    def __init__(self, msg: str | None = None) -> None:
        self.msg = msg or self.default_msg
        super().__init__(self.msg)

    def to_dict(self) -> dict:
        return {"statusCode": self.status_code, "msg": self.msg}


class BadRequest(AppError):
    """Malformed derived value (past reminder, bad offset, wrong check-in day)."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_msg = "Bad request"


class Unauthorized(AppError):
    """Identity or ownership mismatch."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_msg = "Unauthorized"


class Forbidden(AppError):
    """Caller's role does not allow the action."""

    status_code = status.HTTP_403_FORBIDDEN
    default_msg = "Forbidden"


class NotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_msg = "Not found"


class Conflict(AppError):
    status_code = status.HTTP_409_CONFLICT
    default_msg = "Conflict"


class UnprocessableEntity(AppError):
    """Valid-shaped inputs with an invalid relationship (sold out, unknown user/event)."""

    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    default_msg = "Unprocessable entity"


class ServiceUnavailable(AppError):
    """Store or collaborator timed out; the caller may retry."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_msg = "Service temporarily unavailable, please retry"
