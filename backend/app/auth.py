"""Caller identity — decodes tokens issued by the identity service.

Token issuance and password handling live outside this service; here we
only verify the signature and expose ``{id, email, role}`` to the routers.
"""
import enum
import logging
from typing import Optional

import jwt
from fastapi import Cookie, Header
from pydantic import BaseModel

from app.config import settings
from app.errors import Unauthorized

logger = logging.getLogger(__name__)


class Role(str, enum.Enum):
    attendee = "attendee"
    organizer = "organizer"


class Caller(BaseModel):
    id: str
    email: str
    role: Role


def decode_token(token: str) -> Caller:
    """Verify a signed token and return the caller it describes."""
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise Unauthorized("Token expired")
    except jwt.InvalidTokenError:
        raise Unauthorized("Invalid token")

    try:
        return Caller(id=str(payload["id"]), email=payload["email"], role=Role(payload["role"]))
    except (KeyError, ValueError):
        logger.warning("Rejected token with incomplete claims: %s", sorted(payload))
        raise Unauthorized("Invalid token")


def get_current_caller(
    authorization: Optional[str] = Header(None),
    token: Optional[str] = Cookie(None),
) -> Caller:
    """FastAPI dependency — bearer header first, then the ``token`` cookie."""
    if authorization and authorization.startswith("Bearer "):
        return decode_token(authorization.split(" ", 1)[1])
    if token:
        return decode_token(token)
    raise Unauthorized("Missing token")
