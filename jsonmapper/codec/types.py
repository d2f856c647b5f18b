"""Runtime type descriptors for composite decode targets.

A plain class is enough to decode ``{"name": "x"}`` into ``Bean``; decoding
``[{"name": "x"}]`` into a list of beans needs the element type as well.
Descriptors carry that parameterised type expression (``list[Bean]``) so it
can be built once and reused for every decode call.
"""

from __future__ import annotations

import collections
import collections.abc as abc
from dataclasses import dataclass
from typing import Any

__all__ = [
    "TypeDescriptor",
    "construct_collection_type",
    "construct_map_type",
    "construct_type",
    "resolve_type",
]

_SEQUENCE_KINDS: tuple[type, ...] = (
    list,
    tuple,
    set,
    frozenset,
    collections.deque,
    abc.Sequence,
    abc.MutableSequence,
    abc.Set,
    abc.MutableSet,
)

_MAPPING_KINDS: tuple[type, ...] = (
    dict,
    collections.OrderedDict,
    abc.Mapping,
    abc.MutableMapping,
)


@dataclass(frozen=True, slots=True)
class TypeDescriptor:
    """A reusable decode target wrapping a parameterised type expression."""

    python_type: Any

    def __repr__(self) -> str:
        return f"TypeDescriptor({_type_name(self.python_type)})"


def _type_name(tp: Any) -> str:
    if isinstance(tp, type) and not getattr(tp, "__args__", None):
        return tp.__qualname__
    return repr(tp).replace("typing.", "")


def _check_kind(kind: Any, allowed: tuple[type, ...], label: str) -> type:
    if not isinstance(kind, type):
        raise TypeError(f"{label} kind must be a class, got {kind!r}")
    if kind in allowed:
        return kind
    raise TypeError(f"{kind.__qualname__} is not a supported {label} type")


def construct_collection_type(collection_kind: type, element_kind: Any) -> TypeDescriptor:
    """Describe "``collection_kind`` of ``element_kind``", e.g. ``list[Bean]``."""

    kind = _check_kind(collection_kind, _SEQUENCE_KINDS, "collection")
    if kind is tuple:
        return TypeDescriptor(kind[element_kind, ...])
    return TypeDescriptor(kind[element_kind])


def construct_map_type(map_kind: type, key_kind: Any, value_kind: Any) -> TypeDescriptor:
    """Describe "``map_kind`` from ``key_kind`` to ``value_kind``"."""

    kind = _check_kind(map_kind, _MAPPING_KINDS, "map")
    return TypeDescriptor(kind[key_kind, value_kind])


def construct_type(python_type: Any) -> TypeDescriptor:
    """Wrap an arbitrary type expression such as ``dict[str, list[Bean]]``."""

    if isinstance(python_type, TypeDescriptor):
        return python_type
    return TypeDescriptor(python_type)


def resolve_type(target: Any) -> Any:
    """Return the bare type expression behind ``target``."""

    if isinstance(target, TypeDescriptor):
        return target.python_type
    return target
