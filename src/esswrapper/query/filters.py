"""Filter builder — Conjunctive term filters for search request bodies.

Each field maps to one condition: an exact term or membership in a set of
terms. All conditions are combined under a single ``bool.must`` list::

    {
        "filter": {
            "bool": {
                "must": [
                    {"term": {"name": "test"}},
                    {"terms": {"host": ["a.example", "b.example"]}},
                ]
            }
        }
    }

The result is embedded into a query body by the caller, e.g.
``EssWrapper.search``.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from esswrapper.exceptions import InvalidFilterError


class ExactMatch(BaseModel):
    """Exact term match on a single value."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["term"] = "term"
    value: str

    def to_clause(self, field: str) -> dict[str, Any]:
        return {"term": {field: self.value}}


class InSet(BaseModel):
    """Match when the field holds any of the given values."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["terms"] = "terms"
    values: tuple[str, ...] = Field(default=())

    def to_clause(self, field: str) -> dict[str, Any]:
        return {"terms": {field: list(self.values)}}


Condition = ExactMatch | InSet


def coerce_condition(value: Any) -> Condition:
    """Turn a raw filter value into a tagged condition.

    Strings become ``ExactMatch``, lists and tuples of strings become
    ``InSet``. Conditions are returned as-is.

    Raises:
        InvalidFilterError: For any other shape, including sequences that
            contain non-string items.
    """
    if isinstance(value, ExactMatch | InSet):
        return value
    if isinstance(value, str):
        return ExactMatch(value=value)
    if isinstance(value, Sequence) and not isinstance(value, bytes | bytearray):
        items = list(value)
        bad = [v for v in items if not isinstance(v, str)]
        if bad:
            raise InvalidFilterError(f"invalid type in value list: {bad[0]!r}. must be string")
        return InSet(values=tuple(items))
    raise InvalidFilterError(f"invalid type: {value!r}. must be string or list of strings")


def must_filter(conditions: Mapping[str, Any]) -> dict[str, Any]:
    """Build a ``filter.bool.must`` expression with one clause per field.

    Args:
        conditions: Field name to ``ExactMatch``/``InSet``, or to a raw
            string or list of strings.

    Returns:
        The filter expression as a plain dict.

    Raises:
        InvalidFilterError: If any value has an unsupported shape. Nothing is
            returned in that case.
    """
    must = [coerce_condition(value).to_clause(field) for field, value in conditions.items()]
    return {"filter": {"bool": {"must": must}}}
