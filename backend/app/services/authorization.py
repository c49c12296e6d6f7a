"""Authorization predicates — ``(caller, resource) -> bool``.

Every role or ownership decision in the services goes through one of these
so the rules can be tested on their own. ``require`` turns a denied
predicate into the matching domain error.
"""
from app.auth import Caller, Role
from app.errors import AppError
from app.models.enrollment import Enrollment
from app.models.event import Event


def is_attendee(caller: Caller) -> bool:
    return caller.role == Role.attendee


def is_organizer(caller: Caller) -> bool:
    return caller.role == Role.organizer


def owns_enrollment(caller: Caller, enrollment: Enrollment) -> bool:
    return enrollment.user_id == caller.id


def owns_event(caller: Caller, event: Event) -> bool:
    return is_organizer(caller) and event.organizer_id == caller.id


def is_self(caller: Caller, resource_id: str) -> bool:
    return caller.id == resource_id


def require(allowed: bool, error: AppError) -> None:
    """Raise ``error`` unless the predicate allowed the action."""
    if not allowed:
        raise error
