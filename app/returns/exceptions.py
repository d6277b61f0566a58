"""
Returns-specific exceptions.

Exception Hierarchy:
    ConflictError (core)
    ├── InvalidTransitionError - State machine guard violated
    └── GrantAlreadyClaimedError - A grant is held by another active return
"""

from core.exceptions import ConflictError


class InvalidTransitionError(ConflictError):
    """
    Raised when a return state transition is not allowed.

    Wraps django-fsm's TransitionNotAllowed. ``details`` carries
    current_status and the attempted action.
    """

    default_error_code: str = "INVALID_TRANSITION"


class GrantAlreadyClaimedError(ConflictError):
    """Raised when a requested grant is already part of an active return."""

    default_error_code: str = "GRANT_ALREADY_CLAIMED"
