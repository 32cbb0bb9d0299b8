"""
Pydantic schemas for test catalog endpoints.

Wire names are camelCase (``thinkingTypes``, ``longDesc``, ``passCount``);
Python attributes stay snake_case.
"""
from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel
from typing import Any, Dict, FrozenSet, List, Optional, Self


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class TestBase(_CamelModel):
    """Fields shared by create and response schemas."""

    name: str = Field(..., min_length=1, max_length=255, description="Test name")
    icon: Optional[str] = Field(None, description="Icon URL")
    type: Optional[str] = Field(None, description="Test category")
    short_desc: Optional[str] = Field(None, description="One-line summary")
    long_desc: Optional[str] = Field(None, description="Full description")
    instruction: Optional[str] = Field(None, description="Instructions shown before start")
    questions: List[Any] = Field(
        default_factory=list, description="Ordered, opaque question payloads"
    )
    thinking_types: List[str] = Field(
        default_factory=list, description="Names of the scored dimensions"
    )
    description: List[str] = Field(
        default_factory=list, description="One description per dimension"
    )
    levels: List[str] = Field(
        default_factory=list, description="Level labels indexed by numeric level"
    )


class TestCreate(TestBase):
    """Schema for creating a test."""

    questions: List[Any] = Field(..., min_length=1)
    thinking_types: List[str] = Field(..., min_length=1)
    description: List[str] = Field(...)
    levels: List[str] = Field(..., min_length=1)
    scorer: str = Field(..., min_length=1, max_length=100)

    @model_validator(mode="after")
    def validate_dimensions(self) -> Self:
        """Every dimension needs exactly one description."""
        if len(self.description) != len(self.thinking_types):
            raise ValueError(
                f"description has {len(self.description)} entries for "
                f"{len(self.thinking_types)} thinkingTypes"
            )
        return self


# Columns a test cannot exist without
REQUIRED_ON_UPDATE = (
    "name",
    "questions",
    "thinking_types",
    "description",
    "levels",
    "scorer",
)


class TestUpdate(_CamelModel):
    """Schema for partially updating a test. Omitted fields are unchanged."""

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    icon: Optional[str] = None
    type: Optional[str] = None
    short_desc: Optional[str] = None
    long_desc: Optional[str] = None
    instruction: Optional[str] = None
    questions: Optional[List[Any]] = Field(None, min_length=1)
    thinking_types: Optional[List[str]] = Field(None, min_length=1)
    description: Optional[List[str]] = Field(None, min_length=1)
    levels: Optional[List[str]] = Field(None, min_length=1)
    scorer: Optional[str] = Field(None, min_length=1, max_length=100)

    @model_validator(mode="after")
    def reject_null_required_fields(self) -> Self:
        """Fields required on create may be omitted but never cleared."""
        cleared = [
            name
            for name in REQUIRED_ON_UPDATE
            if name in self.model_fields_set and getattr(self, name) is None
        ]
        if cleared:
            raise ValueError(
                "Cannot be null: "
                + ", ".join(type(self).model_fields[name].alias or name for name in cleared)
            )
        return self


class TestResponse(TestBase):
    """Schema for a test as returned by the API, before projection."""

    id: int = Field(..., description="Test ID")
    pass_count: Optional[int] = Field(
        None, description="Number of completions (only when projected)"
    )

    def to_wire(self) -> Dict[str, Any]:
        """Serialize with camelCase keys."""
        return self.model_dump(by_alias=True)


def projectable_fields() -> FrozenSet[str]:
    """Wire names a ``fields`` projection may reference."""
    return frozenset(
        field.alias or name
        for name, field in TestResponse.model_fields.items()
        if name != "pass_count"
    )
