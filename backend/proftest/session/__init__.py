"""
Client-side test session pipeline.

Navigation and answers are persisted in a device-local SessionStore, the
completed answer set is sent to the scoring endpoint, and the scored result
is turned into a DisplayResult.
"""
from .accumulator import AnswerAccumulator
from .client import ApiClient, validate_answers
from .config import SessionSettings
from .controller import SessionController, create_controller
from .exceptions import (
    NotFoundError,
    PresentationError,
    SessionCompleteError,
    SessionError,
    SubmissionInFlightError,
    TransportFailure,
    ValidationFailure,
)
from .navigator import QuestionNavigator, Session, answers_key, index_key
from .presenter import DimensionResult, DisplayResult, ResultPresenter
from .store import InMemorySessionStore, JsonFileSessionStore, SessionStore

__all__ = [
    "AnswerAccumulator",
    "ApiClient",
    "validate_answers",
    "SessionSettings",
    "SessionController",
    "create_controller",
    "NotFoundError",
    "PresentationError",
    "SessionCompleteError",
    "SessionError",
    "SubmissionInFlightError",
    "TransportFailure",
    "ValidationFailure",
    "QuestionNavigator",
    "Session",
    "answers_key",
    "index_key",
    "DimensionResult",
    "DisplayResult",
    "ResultPresenter",
    "InMemorySessionStore",
    "JsonFileSessionStore",
    "SessionStore",
]
