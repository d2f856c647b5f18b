"""Library-neutral field annotations carried in dataclass field metadata.

Data classes can describe their JSON shape without importing pydantic::

    @dataclass
    class Account:
        user_name: str = json_field(name="userName")
        secret: str = json_field(ignore=True, default="")

The metadata only takes effect on mappers where
:meth:`JsonMapper.enable_field_metadata` has been called; it is consulted
before the engine's own alias configuration.
"""

from __future__ import annotations

import dataclasses
from dataclasses import MISSING
from functools import lru_cache
from typing import Any

JSON_NAME = "json_name"
JSON_IGNORE = "json_ignore"

__all__ = ["JSON_IGNORE", "JSON_NAME", "FieldNames", "field_names", "json_field"]


def json_field(
    *,
    name: str | None = None,
    ignore: bool = False,
    default: Any = MISSING,
    default_factory: Any = MISSING,
    **kwargs: Any,
) -> Any:
    """Return a :func:`dataclasses.field` tagged with JSON naming metadata."""

    metadata = dict(kwargs.pop("metadata", None) or {})
    if name is not None:
        if not name:
            raise ValueError("json name must be a non-empty string")
        metadata[JSON_NAME] = name
    if ignore:
        metadata[JSON_IGNORE] = True
    return dataclasses.field(
        default=default, default_factory=default_factory, metadata=metadata, **kwargs
    )


@dataclasses.dataclass(frozen=True, slots=True)
class FieldNames:
    """Per-class mapping between attribute names and JSON keys."""

    renamed: dict[str, str]
    ignored: frozenset[str]

    @property
    def empty(self) -> bool:
        return not self.renamed and not self.ignored

    def inverse(self) -> dict[str, str]:
        return {json_key: attr for attr, json_key in self.renamed.items()}


_NO_NAMES = FieldNames(renamed={}, ignored=frozenset())


@lru_cache(maxsize=None)
def field_names(cls: type) -> FieldNames:
    if not dataclasses.is_dataclass(cls):
        return _NO_NAMES
    renamed: dict[str, str] = {}
    ignored: set[str] = set()
    for field_info in dataclasses.fields(cls):
        metadata = field_info.metadata
        if metadata.get(JSON_IGNORE):
            ignored.add(field_info.name)
            continue
        json_name = metadata.get(JSON_NAME)
        if json_name and json_name != field_info.name:
            renamed[field_info.name] = json_name
    if not renamed and not ignored:
        return _NO_NAMES
    return FieldNames(renamed=renamed, ignored=frozenset(ignored))
