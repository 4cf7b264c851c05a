"""
Error taxonomy for TopLists.

Every failure the core can report maps to exactly one of these classes.
The web layer turns them into JSON responses using ``status_code``.
"""


class TopListsError(Exception):
    """Base class for all domain errors."""

    status_code: int = 500

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message or self.__class__.__name__

    def __str__(self) -> str:
        return self.message


class Unauthorized(TopListsError):
    """An operation that needs an authenticated user was called without one."""

    status_code = 401

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message)


class NotFound(TopListsError):
    """Referenced entity does not exist or does not belong to the caller."""

    status_code = 404


class InvalidOperation(TopListsError):
    """The request would break a data rule (self-follow, short list, ...)."""

    status_code = 400


class StorageFailure(TopListsError):
    """
    The data store or identity provider failed.

    Raised with ``raise ... from exc`` so the original error stays attached.
    Never retried and never replaced with a default value.
    """

    status_code = 500
