"""Domain errors raised by the post engine services.

Services raise these and never build HTTP responses themselves. Each error
carries a stable ``code`` that the API layer maps to a status code.
"""
from __future__ import annotations


class PostEngineError(Exception):
    """Base class for all domain failures."""

    code = "error"

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.code)
        self.message = message or self.code


class NotSignedIn(PostEngineError):
    """No identity could be resolved for the caller."""

    code = "not_signed_in"


class ValidationError(PostEngineError):
    """Input is empty, too long, or outside a closed value set."""

    code = "validation_error"


class NotAuthorized(PostEngineError):
    """Ownership or co-creator check failed."""

    code = "not_authorized"


class NotFound(PostEngineError):
    """A referenced post, comment, media item or invite is absent."""

    code = "not_found"


class NotAllowed(PostEngineError):
    """Business-rule refusal."""

    code = "not_allowed"


class AlreadyInvited(NotAllowed):
    code = "already_invited"


class AlreadyCoCreator(NotAllowed):
    code = "already_co_creator"


class StorageFailure(PostEngineError):
    """The database or the object store failed."""

    code = "storage_failure"


__all__ = [
    "PostEngineError",
    "NotSignedIn",
    "ValidationError",
    "NotAuthorized",
    "NotFound",
    "NotAllowed",
    "AlreadyInvited",
    "AlreadyCoCreator",
    "StorageFailure",
]
