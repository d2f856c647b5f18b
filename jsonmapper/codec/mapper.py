"""Convenience facade converting between python objects and JSON strings.

Mappers differ in their output style and are created through the
constructor or the factory helpers below::

    mapper = non_empty_mapper()
    text = mapper.to_json(order)                  # None fields omitted
    order = mapper.from_json(text, Order)
    orders = mapper.from_json(text, mapper.construct_collection_type(list, Order))

``to_json``/``from_json``/``update`` log a warning and return ``None`` (or
leave the target untouched) when conversion fails. ``encode``/``decode``/
``apply_update`` return a :class:`CodecResult` instead, so callers can tell
"no data" apart from "conversion failed".
"""

from __future__ import annotations

import dataclasses
import logging
from pathlib import Path
from typing import Any, TypeVar, overload

from jsonmapper.telemetry.logger import get_logger
from jsonmapper.utils.text import abbreviate, is_empty

from .engine import JsonEngine
from .errors import CodecError, CodecResult
from .jsonp import JSONPObject
from .settings import Include, MapperSettings
from .types import TypeDescriptor, construct_collection_type, construct_map_type

T = TypeVar("T")

__all__ = [
    "FILTERED_PLACEHOLDER",
    "JsonMapper",
    "non_default_mapper",
    "non_empty_mapper",
]

_LOGGER = get_logger("jsonmapper.codec")

FILTERED_PLACEHOLDER = "filtered because of exceed max length!"

_ECHO_WIDTH = 2048


def _echo(value: Any) -> str:
    text = value if isinstance(value, str) else repr(value)
    return abbreviate(text, _ECHO_WIDTH)


class JsonMapper:
    """Configured JSON codec.

    ``include`` selects which fields are written: everything (the default),
    only non-``None`` fields, or only fields that differ from their declared
    default. ``settings`` is copied, so mappers never share configuration.
    Unknown JSON keys are ignored on decode, objects without fields
    encode as ``{}`` and aware datetimes are written in the host's local
    time zone unless ``settings`` says otherwise.
    """

    def __init__(
        self,
        include: Include | str | None = None,
        *,
        logger: logging.Logger | None = None,
        settings: MapperSettings | None = None,
    ) -> None:
        if settings is None:
            settings = MapperSettings(inclusion=Include.parse(include))
        elif include is not None:
            settings = dataclasses.replace(settings, inclusion=Include.parse(include))
        self._engine = JsonEngine(settings)
        self._logger = logger if logger is not None else _LOGGER

    @classmethod
    def non_empty_mapper(cls, **kwargs: Any) -> JsonMapper:
        """Mapper writing only non-``None`` fields; suited to external APIs."""

        return cls(Include.NON_NULL, **kwargs)

    @classmethod
    def non_default_mapper(cls, **kwargs: Any) -> JsonMapper:
        """Mapper writing only fields changed from their defaults; the most compact output."""

        return cls(Include.NON_DEFAULT, **kwargs)

    @classmethod
    def from_config(
        cls, path: str | Path, section: str = "mapper", *, logger: logging.Logger | None = None
    ) -> JsonMapper:
        """Build a mapper from the ``section`` mapping of a YAML file."""

        return cls(settings=MapperSettings.from_file(path, section), logger=logger)

    @property
    def engine(self) -> JsonEngine:
        """The underlying engine, for adapters and settings not exposed here."""

        return self._engine

    @property
    def settings(self) -> MapperSettings:
        return self._engine.settings

    # ------------------------------------------------------------------
    # explicit results

    def encode(self, value: Any, value_type: Any = None) -> CodecResult[str]:
        try:
            return CodecResult.success(self._engine.write_value_as_string(value, value_type))
        except CodecError as exc:
            return CodecResult.failure(exc)

    def decode(self, text: str | bytes | None, target: Any) -> CodecResult[Any]:
        if is_empty(text):  # type: ignore[arg-type]
            return CodecResult.success(None)
        try:
            return CodecResult.success(self._engine.read_value(text, target))
        except CodecError as exc:
            return CodecResult.failure(exc)

    def apply_update(self, text: str | bytes | None, target: T) -> CodecResult[T]:
        if is_empty(text):  # type: ignore[arg-type]
            return CodecResult.success(target)
        try:
            return CodecResult.success(self._engine.read_for_updating(text, target))
        except CodecError as exc:
            return CodecResult.failure(exc)

    # ------------------------------------------------------------------
    # logging convenience API

    def to_json(self, value: Any, value_type: Any = None) -> str | None:
        """Encode ``value``; ``None`` gives ``"null"`` and an empty list ``"[]"``.

        Returns ``None`` after logging a warning when the value cannot be
        encoded.
        """

        result = self.encode(value, value_type)
        if result.error is not None:
            self._logger.warning(
                "write to json string error: %s", _echo(value), exc_info=result.error
            )
            return None
        return result.value

    def log_json(self, value: Any, limit: int) -> str | None:
        """Encode ``value`` for a log line, replacing text longer than ``limit``."""

        text = self.to_json(value)
        if text is not None and len(text) > limit:
            return FILTERED_PLACEHOLDER
        return text

    @overload
    def from_json(self, text: str | bytes | None, target: type[T]) -> T | None: ...

    @overload
    def from_json(self, text: str | bytes | None, target: TypeDescriptor | Any) -> Any: ...

    def from_json(self, text: str | bytes | None, target: Any) -> Any:
        """Decode ``text`` into ``target``.

        ``target`` is a class for simple values or a :class:`TypeDescriptor`
        (see :meth:`construct_collection_type`) for nested generics such as a
        list of beans. Empty text, ``None`` and the literal ``null`` all give
        ``None``; malformed text is logged and also gives ``None``.
        """

        result = self.decode(text, target)
        if result.error is not None:
            self._logger.warning("parse json string error: %s", _echo(text), exc_info=result.error)
            return None
        return result.value

    def update(self, text: str | bytes | None, target: Any) -> None:
        """Overwrite only the fields of ``target`` present in the JSON object ``text``."""

        result = self.apply_update(text, target)
        if result.error is not None:
            self._logger.warning(
                "update json string: %s to object: %s error.",
                _echo(text),
                _echo(target),
                exc_info=result.error,
            )

    def to_json_p(self, function_name: str, value: Any) -> str | None:
        """Render ``value`` as JSONP: ``function_name(<json>)``.

        An encoding failure is logged and gives ``None``. A ``function_name``
        that is not a dotted JavaScript identifier is a caller bug and raises
        :class:`ValueError` instead.
        """

        payload = JSONPObject(function_name, value)
        try:
            return self._engine.write_jsonp(payload)
        except CodecError as exc:
            self._logger.warning("write to jsonp error: %s", _echo(value), exc_info=exc)
            return None

    # ------------------------------------------------------------------
    # type descriptors

    def construct_collection_type(self, collection_kind: type, element_kind: Any) -> TypeDescriptor:
        return construct_collection_type(collection_kind, element_kind)

    def construct_map_type(self, map_kind: type, key_kind: Any, value_kind: Any) -> TypeDescriptor:
        return construct_map_type(map_kind, key_kind, value_kind)

    # ------------------------------------------------------------------
    # toggles

    def enable_enum_use_to_string(self) -> None:
        """Read and write enums through ``str(member)`` instead of their name.

        Call this right after creating the mapper, before any conversion.
        """

        self._engine.enable_enum_use_to_string()

    def enable_field_metadata(self) -> None:
        """Honour ``json_field`` metadata on dataclasses ahead of engine aliases."""

        self._engine.enable_field_metadata()


def non_empty_mapper(**kwargs: Any) -> JsonMapper:
    return JsonMapper.non_empty_mapper(**kwargs)


def non_default_mapper(**kwargs: Any) -> JsonMapper:
    return JsonMapper.non_default_mapper(**kwargs)
