"""
Turns a raw scored result into display records.

Each raw entry is matched by position with the test's dimension names,
descriptions and level labels. The last configured dimension is the
distinguished "creativity" result; the others are ranked by descending
score, ties keeping their configured order.
"""
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from proftest.schemas.answers import ScoredEntry
from proftest.session.exceptions import PresentationError


class TestMetadata(BaseModel):
    """Test record as fetched from the API; absent fields were not projected."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="ignore"
    )

    id: int
    name: Optional[str] = None
    icon: Optional[str] = None
    type: Optional[str] = None
    short_desc: Optional[str] = None
    long_desc: Optional[str] = None
    instruction: Optional[str] = None
    questions: List[Any] = Field(default_factory=list)
    thinking_types: List[str] = Field(default_factory=list)
    description: List[str] = Field(default_factory=list)
    levels: List[str] = Field(default_factory=list)
    pass_count: Optional[int] = None

    @property
    def dimension_count(self) -> int:
        return len(self.thinking_types)

    @property
    def distinguished_index(self) -> int:
        """Position of the distinguished dimension: the last configured one."""
        return self.dimension_count - 1


@dataclass(frozen=True)
class DimensionResult:
    """One scored dimension, ready for display."""

    type: str
    description: str
    level: str
    score: float


@dataclass(frozen=True)
class DisplayResult:
    """
    Display-ready breakdown of a scored test.

    Attributes:
        creativity: The distinguished dimension
        ranked: Every other dimension, highest score first
    """

    creativity: DimensionResult
    ranked: List[DimensionResult]


class ResultPresenter:
    """Builds a DisplayResult from test metadata and a raw scored result."""

    def present(
        self,
        test: TestMetadata,
        scored: Sequence[Union[ScoredEntry, dict]],
    ) -> DisplayResult:
        """
        Args:
            test: Test metadata with dimension names, descriptions and levels
            scored: Raw result, one entry per dimension

        Returns:
            DisplayResult with the distinguished dimension set apart

        Raises:
            PresentationError: If the result is empty, does not match the
                test's dimensions, or references an unknown level
        """
        entries = [
            entry if isinstance(entry, ScoredEntry) else ScoredEntry.model_validate(entry)
            for entry in scored
        ]

        if not entries:
            raise PresentationError(f"Empty result for test {test.id}")
        if len(entries) != test.dimension_count:
            raise PresentationError(
                f"Result has {len(entries)} entries but test {test.id} "
                f"has {test.dimension_count} dimensions"
            )
        if len(test.description) != test.dimension_count:
            raise PresentationError(
                f"Test {test.id} has {len(test.description)} descriptions "
                f"for {test.dimension_count} dimensions"
            )

        records = [self._build(test, i, entry) for i, entry in enumerate(entries)]

        creativity = records.pop(test.distinguished_index)
        # sorted() is stable, so equal scores keep their configured order
        ranked = sorted(records, key=lambda record: -record.score)
        return DisplayResult(creativity=creativity, ranked=ranked)

    @staticmethod
    def _build(test: TestMetadata, position: int, entry: ScoredEntry) -> DimensionResult:
        if not 0 <= entry.level < len(test.levels):
            raise PresentationError(
                f"Level {entry.level} of dimension {test.thinking_types[position]!r} "
                f"is outside the {len(test.levels)} configured levels"
            )
        return DimensionResult(
            type=test.thinking_types[position],
            description=test.description[position],
            level=test.levels[entry.level],
            score=entry.score,
        )
