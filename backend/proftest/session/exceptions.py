"""
Exceptions raised by the test session client.

Every failure of the session pipeline derives from ``SessionError`` so callers
can catch the whole family at the screen boundary.
"""
from typing import Optional


class SessionError(Exception):
    """Base class for session pipeline errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class NotFoundError(SessionError):
    """The requested test does not exist."""


class ValidationFailure(SessionError):
    """An answer set was rejected as malformed or incomplete."""


class TransportFailure(SessionError):
    """
    A call to the API failed in transit or with a server error.

    The session is left untouched so it can be resumed and resubmitted.
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class SubmissionInFlightError(SessionError):
    """An answer was recorded while the session's submission is still running."""


class SessionCompleteError(SessionError):
    """An answer was recorded after every question was already answered."""


class PresentationError(SessionError):
    """A scored result does not line up with the test's dimension metadata."""
