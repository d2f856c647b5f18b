"""Conversions between engine dumps and JSON-ready trees.

Encoding walks the engine's python-mode dump next to the original object, so
enum members, aware datetimes and field-metadata renames can be handled
using the runtime class of every record. Decoding walks raw JSON data against
the declared target type and rewrites enum names and renamed keys into the
form the engine validates.
"""

from __future__ import annotations

import dataclasses
import enum
import types
import typing
from collections import abc
from datetime import datetime, tzinfo
from functools import lru_cache
from typing import Any, Literal, Union, get_args, get_origin

from pydantic import BaseModel

from .naming import FieldNames, field_names
from .settings import EnumMode, MapperSettings

__all__ = ["decode_tree", "encode_enum", "encode_tree", "engine_keys", "validation_keys"]

_NO_NAMES = FieldNames(renamed={}, ignored=frozenset())


# ---------------------------------------------------------------------------
# Field key tables


def _pydantic_fields(cls: type) -> dict[str, Any] | None:
    if isinstance(cls, type) and issubclass(cls, BaseModel):
        return dict(cls.model_fields)
    fields = getattr(cls, "__pydantic_fields__", None)
    if isinstance(fields, dict) and dataclasses.is_dataclass(cls):
        return dict(fields)
    return None


@lru_cache(maxsize=None)
def engine_keys(cls: type) -> dict[str, str]:
    """Map each key the engine writes for ``cls`` to its attribute name."""

    fields = _pydantic_fields(cls)
    if fields is not None:
        return {
            (info.serialization_alias or info.alias or name): name for name, info in fields.items()
        }
    if dataclasses.is_dataclass(cls):
        return {field_info.name: field_info.name for field_info in dataclasses.fields(cls)}
    return {}


@lru_cache(maxsize=None)
def validation_keys(cls: type) -> dict[str, str]:
    """Map each attribute of ``cls`` to the key the engine validates it under."""

    fields = _pydantic_fields(cls)
    if fields is not None:
        keys: dict[str, str] = {}
        for name, info in fields.items():
            alias = info.validation_alias if isinstance(info.validation_alias, str) else None
            keys[name] = alias or info.alias or name
        return keys
    if dataclasses.is_dataclass(cls):
        return {
            field_info.name: field_info.name
            for field_info in dataclasses.fields(cls)
            if field_info.init
        }
    return {}


def _metadata_names(cls: type, settings: MapperSettings) -> FieldNames:
    if not settings.use_field_metadata:
        return _NO_NAMES
    return field_names(cls)


# ---------------------------------------------------------------------------
# Encoding


def encode_enum(member: enum.Enum, mode: EnumMode) -> str:
    if mode is EnumMode.TO_STRING:
        return str(member)
    return member.name


def _in_zone(value: datetime, zone: tzinfo | None) -> datetime:
    if value.tzinfo is None or value.utcoffset() is None:
        return value
    if zone is None:
        return value.astimezone()
    return value.astimezone(zone)


def _is_plain_object(value: Any) -> bool:
    if isinstance(value, (type, enum.Enum, BaseModel)) or dataclasses.is_dataclass(value):
        return False
    return hasattr(value, "__dict__")


def encode_tree(
    source: Any,
    dumped: Any,
    settings: MapperSettings,
    fallback: abc.Callable[[Any], Any] | None = None,
) -> Any:
    """Return ``dumped`` with enums, datetimes and record keys finalised.

    ``source`` is the object ``dumped`` was produced from, or ``None`` when it
    is not known; it only steers key handling for records. Objects the engine
    passed through untouched (classes it has no schema for) are handed to
    ``fallback``, which returns their finished tree.
    """

    if isinstance(dumped, enum.Enum):
        return encode_enum(dumped, settings.enum_mode)
    if isinstance(dumped, datetime):
        return _in_zone(dumped, settings.timezone)
    if fallback is not None and _is_plain_object(dumped):
        return fallback(dumped)
    if isinstance(dumped, dict):
        if source is not None and not isinstance(source, abc.Mapping) and engine_keys(type(source)):
            return _encode_record(source, dumped, settings, fallback)
        return {
            _encode_key(key, settings): encode_tree(_child(source, key), value, settings, fallback)
            for key, value in dumped.items()
        }
    if isinstance(dumped, (list, tuple)):
        sources: abc.Iterable[Any]
        if isinstance(source, (list, tuple)) and len(source) == len(dumped):
            sources = source
        else:
            sources = [None] * len(dumped)
        return [
            encode_tree(item_source, item, settings, fallback)
            for item_source, item in zip(sources, dumped)
        ]
    if isinstance(dumped, (set, frozenset)):
        return [encode_tree(None, item, settings, fallback) for item in dumped]
    return dumped


def _encode_key(key: Any, settings: MapperSettings) -> Any:
    if isinstance(key, enum.Enum):
        return encode_enum(key, settings.enum_mode)
    return key


def _child(source: Any, key: Any) -> Any:
    if isinstance(source, abc.Mapping):
        try:
            return source.get(key)
        except TypeError:
            return None
    return None


def _encode_record(
    source: Any,
    dumped: dict[Any, Any],
    settings: MapperSettings,
    fallback: abc.Callable[[Any], Any] | None,
) -> dict[Any, Any]:
    cls = type(source)
    attributes = engine_keys(cls)
    names = _metadata_names(cls, settings)
    encoded: dict[Any, Any] = {}
    for key, value in dumped.items():
        attribute = attributes.get(key)
        child = getattr(source, attribute, None) if attribute is not None else None
        if attribute is not None:
            if attribute in names.ignored:
                continue
            key = names.renamed.get(attribute, key)
        encoded[key] = encode_tree(child, value, settings, fallback)
    return encoded


# ---------------------------------------------------------------------------
# Decoding


_UNION_TYPES: tuple[Any, ...] = (Union, types.UnionType)


def _unwrap(tp: Any) -> Any:
    while True:
        if get_origin(tp) is typing.Annotated:
            tp = get_args(tp)[0]
        elif hasattr(tp, "__supertype__"):
            tp = tp.__supertype__
        elif type(tp).__name__ == "TypeAliasType":
            tp = tp.__value__
        else:
            return tp


def decode_tree(data: Any, target: Any, settings: MapperSettings, *, partial: bool = False) -> Any:
    """Rewrite raw JSON ``data`` so the engine can validate it as ``target``.

    Required record fields that accept ``None`` and are absent from ``data``
    are filled with ``None``, since writers that skip ``None`` fields drop
    them. ``partial`` turns that off for the top-level record, for updates.
    """

    if data is None:
        return None
    tp = _unwrap(target)
    origin = get_origin(tp)
    if origin in _UNION_TYPES:
        return _decode_union(data, get_args(tp), settings)
    if origin is Literal or tp is Any:
        return data
    if isinstance(tp, type) and origin is None:
        if issubclass(tp, enum.Enum):
            return _decode_enum(data, tp, settings.enum_mode)
        if isinstance(data, dict) and (issubclass(tp, BaseModel) or dataclasses.is_dataclass(tp)):
            return _decode_record(data, tp, settings, partial)
        return data
    if not isinstance(origin, type):
        return data
    args = get_args(tp)
    if isinstance(data, dict) and issubclass(origin, abc.Mapping):
        key_type, value_type = args if len(args) == 2 else (Any, Any)
        return {
            decode_tree(key, key_type, settings): decode_tree(value, value_type, settings)
            for key, value in data.items()
        }
    if isinstance(data, list):
        if origin is tuple and args and args[-1] is not Ellipsis:
            return [
                decode_tree(item, args[index], settings) if index < len(args) else item
                for index, item in enumerate(data)
            ]
        if issubclass(origin, (abc.Sequence, abc.Set)) or origin is abc.Iterable:
            element = args[0] if args else Any
            return [decode_tree(item, element, settings) for item in data]
    return data


def _decode_union(data: Any, members: tuple[Any, ...], settings: MapperSettings) -> Any:
    candidates = [member for member in members if member is not type(None)]
    if len(candidates) == 1:
        return decode_tree(data, candidates[0], settings)
    for candidate in candidates:
        converted = decode_tree(data, candidate, settings)
        if converted is not data:
            return converted
    return data


def _decode_enum(data: Any, cls: type[enum.Enum], mode: EnumMode) -> Any:
    if not isinstance(data, str):
        return data
    if mode is EnumMode.TO_STRING:
        for member in cls:
            if str(member) == data:
                return member
        return data
    return cls.__members__.get(data, data)


def _record_hints(cls: type) -> dict[str, Any]:
    fields = _pydantic_fields(cls)
    if fields is not None:
        return {name: info.annotation for name, info in fields.items()}
    try:
        return typing.get_type_hints(cls)
    except (NameError, TypeError):
        return {field_info.name: field_info.type for field_info in dataclasses.fields(cls)}


def _required_attributes(cls: type) -> frozenset[str]:
    fields = _pydantic_fields(cls)
    if fields is not None:
        return frozenset(name for name, info in fields.items() if info.is_required())
    return frozenset(
        field_info.name
        for field_info in dataclasses.fields(cls)
        if field_info.init
        and field_info.default is dataclasses.MISSING
        and field_info.default_factory is dataclasses.MISSING
    )


def _accepts_none(tp: Any) -> bool:
    tp = _unwrap(tp)
    if tp is Any or tp is None or tp is type(None):
        return True
    if get_origin(tp) in _UNION_TYPES:
        return any(_accepts_none(arg) for arg in get_args(tp))
    return False


def _decode_record(
    data: dict[str, Any], cls: type, settings: MapperSettings, partial: bool = False
) -> dict[str, Any]:
    hints = _record_hints(cls)
    accepted = validation_keys(cls)
    by_key: dict[str, str] = {}
    for attribute, key in accepted.items():
        by_key[attribute] = attribute
        by_key[key] = attribute
    names = _metadata_names(cls, settings)
    renamed_back = names.inverse()
    decoded: dict[str, Any] = {}
    for key, value in data.items():
        attribute = renamed_back.get(key) or by_key.get(key)
        if attribute is None:
            decoded[key] = value
            continue
        if attribute in names.ignored:
            continue
        decoded[accepted.get(attribute, attribute)] = decode_tree(
            value, hints.get(attribute, Any), settings
        )
    if partial:
        return decoded
    for attribute in _required_attributes(cls):
        key = accepted.get(attribute, attribute)
        if key in decoded or attribute in names.ignored:
            continue
        if attribute in hints and _accepts_none(hints[attribute]):
            decoded[key] = None
    return decoded
