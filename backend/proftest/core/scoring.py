"""
Scoring authority for submitted answer sets.

Each Test names a scoring function in its ``scorer`` column. Scoring
functions are opaque to the rest of the pipeline: they take the test and a
complete answer list and return one ``{"level": int, "score": number}`` entry
per dimension, positionally aligned with ``Test.thinking_types``.

This module only checks the shape of what a scorer returns; whether the
scores are psychometrically correct is the scorer's responsibility.
"""
import logging
import math
from typing import Any, Dict, List, Protocol, Sequence

logger = logging.getLogger(__name__)


class ScoringError(Exception):
    """Raised when a scorer fails or returns a malformed result."""


class UnknownScorerError(ScoringError):
    """Raised when a test references a scorer that isn't registered."""

    def __init__(self, name: str):
        super().__init__(f"Scoring function '{name}' is not registered")
        self.name = name


class ScoringFunction(Protocol):
    """
    Protocol for scoring functions.

    Any callable with this signature can be registered with register_scorer.
    """

    def __call__(self, test: Any, answers: Sequence[Any]) -> List[Dict[str, Any]]:
        """
        Score a complete answer list.

        Args:
            test: Test record (questions, thinking_types, levels, ...)
            answers: One answer per question, in question order

        Returns:
            One {"level", "score"} dict per dimension
        """
        ...


_registry: Dict[str, ScoringFunction] = {}


def register_scorer(name: str):
    """
    Decorator registering a scoring function under ``name``.

    Re-registering a name replaces the previous function.

    Example:
        >>> @register_scorer("always_zero")
        ... def always_zero(test, answers):
        ...     return [{"level": 0, "score": 0} for _ in test.thinking_types]
    """

    def decorator(fn: ScoringFunction) -> ScoringFunction:
        if name in _registry:
            logger.warning(f"Replacing registered scorer '{name}'")
        _registry[name] = fn
        return fn

    return decorator


def unregister_scorer(name: str) -> None:
    """Remove a scorer; missing names are ignored."""
    _registry.pop(name, None)


def get_scorer(name: str) -> ScoringFunction:
    """
    Look up a registered scorer.

    Raises:
        UnknownScorerError: If no scorer is registered under ``name``
    """
    try:
        return _registry[name]
    except KeyError:
        raise UnknownScorerError(name) from None


def registered_scorers() -> List[str]:
    """Names of all registered scorers, sorted."""
    return sorted(_registry)


def _validate_result(test: Any, result: Any) -> List[Dict[str, Any]]:
    dimension_count = len(test.thinking_types)
    if not isinstance(result, list) or len(result) != dimension_count:
        raise ScoringError(
            f"Scorer returned {len(result) if isinstance(result, list) else type(result).__name__} "
            f"entries for {dimension_count} dimensions"
        )

    validated = []
    for position, entry in enumerate(result):
        level = entry.get("level") if isinstance(entry, dict) else None
        score = entry.get("score") if isinstance(entry, dict) else None
        if isinstance(level, bool) or not isinstance(level, int):
            raise ScoringError(f"Entry {position} has a non-integer level")
        if not 0 <= level < len(test.levels):
            raise ScoringError(
                f"Entry {position} level {level} is outside the "
                f"{len(test.levels)} configured levels"
            )
        if (
            isinstance(score, bool)
            or not isinstance(score, (int, float))
            or not math.isfinite(score)
        ):
            raise ScoringError(f"Entry {position} has a non-numeric score")
        validated.append({"level": level, "score": score})
    return validated


def score_answers(test: Any, answers: Sequence[Any]) -> List[Dict[str, Any]]:
    """
    Score a complete answer list with the test's registered scorer.

    Args:
        test: Test record; ``test.scorer`` selects the scoring function
        answers: One answer per question

    Returns:
        Validated list of {"level": int, "score": number}, one per dimension

    Raises:
        UnknownScorerError: If the test's scorer isn't registered
        ScoringError: If the scorer raises or returns a malformed result
    """
    scorer = get_scorer(test.scorer)
    try:
        result = scorer(test, answers)
    except ScoringError:
        raise
    except Exception as e:
        raise ScoringError(f"Scorer '{test.scorer}' failed: {e}") from e
    return _validate_result(test, result)


@register_scorer("dimension_sum")
def dimension_sum(test: Any, answers: Sequence[Any]) -> List[Dict[str, Any]]:
    """
    Sum numeric answers per dimension and band the ratio into levels.

    Each question payload names the dimension it loads on (``dimension``,
    an index into ``thinking_types``) and optionally the highest value an
    answer can take (``max``, default 1). A dimension's score is the sum of
    its answers; its level is ``floor(score / ceiling * len(levels))``,
    capped at the top level.

    Example:
        Two levels, one dimension with questions of max 2 answered 2 and 1:
        score 3 of ceiling 4 -> ratio 0.75 -> level 1.
    """
    dimension_count = len(test.thinking_types)
    level_count = len(test.levels)
    totals = [0.0] * dimension_count
    ceilings = [0.0] * dimension_count

    for question, answer in zip(test.questions, answers):
        dimension = question["dimension"]
        totals[dimension] += float(answer)
        ceilings[dimension] += float(question.get("max", 1))

    result = []
    for total, ceiling in zip(totals, ceilings):
        ratio = total / ceiling if ceiling > 0 else 0.0
        level = min(level_count - 1, max(0, math.floor(ratio * level_count)))
        result.append({"level": level, "score": total})
    return result
