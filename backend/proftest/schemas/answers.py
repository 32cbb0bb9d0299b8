"""
Pydantic schemas for answer submission.
"""
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from typing import List, Optional, Union

# A single answer as chosen in the UI; None marks an unanswered position
AnswerValue = Optional[Union[int, float, str]]


class AnswerSubmission(BaseModel):
    """Body of PUT /v1/users/me/answers."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    test_id: int = Field(..., description="ID of the test being submitted")
    answers: List[AnswerValue] = Field(
        ..., description="Answers indexed by question position"
    )

    @field_validator("test_id")
    @classmethod
    def validate_test_id(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("Test ID must be a positive integer")
        return v


class ScoredEntry(BaseModel):
    """One dimension of a raw scored result."""

    level: int = Field(..., ge=0, description="Index into the test's level labels")
    score: float = Field(..., description="Raw dimension score")


class AnswerSubmissionResponse(BaseModel):
    """Scored result of a submission."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    result: List[ScoredEntry] = Field(
        ..., description="One entry per dimension, aligned with thinkingTypes"
    )
    passed_at: Optional[datetime] = Field(
        None, description="When the completion was recorded"
    )
