"""
Request-scoped field projection.

Read endpoints accept a ``fields`` query parameter holding a JSON object of
field names to booleans, e.g. ``{"name": true, "passCount": true}``. It is
parsed once into a Projection so endpoints never inspect free-form dicts.

``passCount`` is not a stored field: requesting it turns on pass count
aggregation (see proftest.core.aggregation). Every other key must name a
field of the response schema.
"""
import json
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Iterable, Optional

PASS_COUNT_FIELD = "passCount"

# Always returned so clients can address the record
_ALWAYS_INCLUDED = frozenset({"id"})


class ProjectionError(ValueError):
    """Raised when a fields parameter cannot be parsed or names unknown fields."""

    def __init__(self, message: str, unknown: Optional[FrozenSet[str]] = None):
        super().__init__(message)
        self.unknown = unknown or frozenset()


@dataclass(frozen=True)
class Projection:
    """Which optional fields and computations a read should include.

    Attributes:
        include: Field names to return. Empty means "all fields".
        exclude: Field names to drop when ``include`` is empty.
        include_pass_count: Whether to compute and attach ``passCount``.
    """

    include: FrozenSet[str] = field(default_factory=frozenset)
    exclude: FrozenSet[str] = field(default_factory=frozenset)
    include_pass_count: bool = False

    def apply(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Filter a serialized record down to the projected fields.

        ``passCount`` is kept only when it was requested.
        """
        if self.include:
            keep = self.include | _ALWAYS_INCLUDED
            projected = {k: v for k, v in payload.items() if k in keep}
        else:
            projected = {
                k: v
                for k, v in payload.items()
                if k not in self.exclude or k in _ALWAYS_INCLUDED
            }
        if self.include_pass_count:
            projected[PASS_COUNT_FIELD] = payload.get(PASS_COUNT_FIELD)
        else:
            projected.pop(PASS_COUNT_FIELD, None)
        return projected


def parse_projection(
    raw: Optional[str],
    allowed: Iterable[str],
    default_include: Iterable[str] = (),
) -> Projection:
    """
    Parse a ``fields`` query parameter into a Projection.

    Args:
        raw: JSON text from the query string, or None when absent
        allowed: Field names the target schema exposes (wire names)
        default_include: Fields to return when no parameter is supplied

    Returns:
        Parsed Projection

    Raises:
        ProjectionError: If the JSON is malformed, not an object of
            booleans, or names fields outside ``allowed``
    """
    if raw is None or not raw.strip():
        return Projection(include=frozenset(default_include))

    try:
        flags = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ProjectionError(f"fields is not valid JSON: {e}") from e

    if not isinstance(flags, dict):
        raise ProjectionError("fields must be a JSON object")

    for name, value in flags.items():
        # 0/1 accepted alongside booleans
        if not isinstance(value, (bool, int)) or value not in (0, 1):
            raise ProjectionError(f"fields.{name} must be a boolean")

    unknown = frozenset(flags) - frozenset(allowed) - {PASS_COUNT_FIELD}
    if unknown:
        raise ProjectionError("fields names unknown fields", unknown=unknown)

    selected = {k: bool(v) for k, v in flags.items() if k != PASS_COUNT_FIELD}
    return Projection(
        include=frozenset(k for k, v in selected.items() if v),
        exclude=frozenset(k for k, v in selected.items() if not v),
        include_pass_count=bool(flags.get(PASS_COUNT_FIELD, False)),
    )
