"""
Pydantic schemas for request/response validation.
"""
from .tests import (
    TestBase,
    TestCreate,
    TestUpdate,
    TestResponse,
    projectable_fields,
)
from .answers import (
    AnswerSubmission,
    AnswerSubmissionResponse,
    ScoredEntry,
)

__all__ = [
    "TestBase",
    "TestCreate",
    "TestUpdate",
    "TestResponse",
    "projectable_fields",
    "AnswerSubmission",
    "AnswerSubmissionResponse",
    "ScoredEntry",
]
