"""The configured JSON engine wrapped by :class:`~jsonmapper.codec.mapper.JsonMapper`.

Typed binding goes through pydantic ``TypeAdapter`` instances, one per type
expression, built lazily and cached on the engine. JSON text is written and
parsed with the standard :mod:`json` module in compact form. The engine never
logs; every failure surfaces as :class:`EncodingError` or
:class:`DecodingError` with the original exception chained.
"""

from __future__ import annotations

import dataclasses
import json
from collections import abc
from typing import Any, TypeVar, get_origin

from pydantic import BaseModel, PydanticUserError, TypeAdapter, ValidationError
from pydantic_core import to_jsonable_python

from .errors import DecodingError, EncodingError
from .jsonp import JSONPObject
from .settings import EnumMode, MapperSettings
from .tree import decode_tree, encode_tree, engine_keys, validation_keys
from .types import resolve_type

T = TypeVar("T")

__all__ = ["JsonEngine"]

_SEPARATORS = (",", ":")
_MISSING = object()


def _is_record_type(tp: Any) -> bool:
    return isinstance(tp, type) and (issubclass(tp, BaseModel) or dataclasses.is_dataclass(tp))


def _common_type(items: abc.Iterable[Any]) -> type | None:
    kinds = {type(item) for item in items}
    if len(kinds) != 1:
        return None
    return kinds.pop()


def _public_attributes(value: Any) -> dict[str, Any]:
    attributes = getattr(value, "__dict__", None)
    if attributes is None:
        raise TypeError(f"{type(value).__qualname__} has no serialisable fields")
    return {key: item for key, item in attributes.items() if not key.startswith("_")}


class JsonEngine:
    """Serializer/deserializer bound to one :class:`MapperSettings`."""

    def __init__(self, settings: MapperSettings | None = None) -> None:
        self._settings = dataclasses.replace(settings) if settings is not None else MapperSettings()
        self._adapters: dict[Any, TypeAdapter[Any] | None] = {}

    @property
    def settings(self) -> MapperSettings:
        return self._settings

    # ------------------------------------------------------------------
    # configuration toggles

    def enable_enum_use_to_string(self) -> None:
        self._settings.enum_mode = EnumMode.TO_STRING

    def enable_field_metadata(self) -> None:
        self._settings.use_field_metadata = True

    # ------------------------------------------------------------------
    # adapters

    def adapter(self, target: Any) -> TypeAdapter[Any]:
        """Return the cached ``TypeAdapter`` for ``target``.

        Plain classes the engine has no schema for raise :class:`TypeError`;
        unsupported type expressions raise pydantic's schema error.
        """

        adapter = self._lookup(resolve_type(target))
        if adapter is None:
            raise TypeError(f"no JSON schema available for {target!r}")
        return adapter

    def _lookup(self, tp: Any) -> TypeAdapter[Any] | None:
        try:
            cached = self._adapters.get(tp, _MISSING)
        except TypeError:
            return TypeAdapter(tp)
        if cached is _MISSING:
            try:
                cached = TypeAdapter(tp)
            except PydanticUserError:
                if get_origin(tp) is not None or not isinstance(tp, type):
                    raise
                cached = None
            self._adapters[tp] = cached
        return cached  # type: ignore[return-value]

    def _infer_type(self, value: Any) -> Any:
        if isinstance(value, (list, tuple)) and value:
            element = _common_type(value)
            if element is not None and _is_record_type(element) and self._lookup(element) is not None:
                return list[element] if isinstance(value, list) else tuple[element, ...]  # type: ignore[valid-type]
        if isinstance(value, dict) and value:
            element = _common_type(value.values())
            if element is not None and _is_record_type(element) and self._lookup(element) is not None:
                return dict[Any, element]  # type: ignore[valid-type]
        return type(value)

    # ------------------------------------------------------------------
    # encoding

    def to_tree(self, value: Any, value_type: Any = None) -> Any:
        """Convert ``value`` into JSON-compatible python data."""

        if value is None:
            return None
        if isinstance(value, JSONPObject):
            raise TypeError("JSONP payloads are rendered with write_jsonp")
        bound = resolve_type(value_type) if value_type is not None else self._infer_type(value)
        return to_jsonable_python(self._encode(value, bound), fallback=_public_attributes)

    def _encode(self, value: Any, bound: Any) -> Any:
        adapter = self._lookup(bound)
        source = value
        if adapter is None:
            source = self._attributes(value)
            adapter = self._lookup(dict[str, Any])
            assert adapter is not None
        settings = self._settings
        dumped = adapter.dump_python(
            source,
            mode="python",
            by_alias=True,
            exclude_none=settings.exclude_none,
            exclude_defaults=settings.exclude_defaults,
        )
        return encode_tree(source, dumped, settings, self._encode_plain)

    def _encode_plain(self, value: Any) -> Any:
        return self._encode(value, self._infer_type(value))

    def _attributes(self, value: Any) -> dict[str, Any]:
        """Public attributes of an object the engine has no schema for, filtered by inclusion."""

        attributes = _public_attributes(value)
        if self._settings.exclude_none:
            return {key: item for key, item in attributes.items() if item is not None}
        if self._settings.exclude_defaults and dataclasses.is_dataclass(value):
            defaults = {
                field_info.name: field_info.default
                for field_info in dataclasses.fields(value)
                if field_info.default is not dataclasses.MISSING
            }
            return {
                key: item
                for key, item in attributes.items()
                if key not in defaults or item != defaults[key]
            }
        return attributes

    def write_value_as_string(self, value: Any, value_type: Any = None) -> str:
        try:
            tree = self.to_tree(value, value_type)
            return json.dumps(tree, ensure_ascii=False, separators=_SEPARATORS, allow_nan=False)
        except (PydanticUserError, TypeError, ValueError, RecursionError) as exc:
            raise EncodingError(
                f"cannot encode {type(value).__qualname__}: {exc}", payload=value
            ) from exc

    def write_jsonp(self, payload: JSONPObject) -> str:
        return payload.render(self.write_value_as_string(payload.value))

    # ------------------------------------------------------------------
    # decoding

    def _parse(self, text: str | bytes, target: Any) -> Any:
        try:
            return json.loads(text)
        except (json.JSONDecodeError, UnicodeDecodeError, TypeError) as exc:
            raise DecodingError(f"invalid JSON: {exc}", payload=text, target=target) from exc

    def read_value(self, text: str | bytes, target: Any) -> Any:
        """Decode ``text`` into an instance of ``target``.

        ``target`` may be a class, a parameterised type such as
        ``list[Bean]`` or a :class:`~jsonmapper.codec.types.TypeDescriptor`.
        The JSON literal ``null`` decodes to ``None`` for every target.
        """

        data = self._parse(text, target)
        if data is None:
            return None
        tp = resolve_type(target)
        try:
            adapter = self.adapter(tp)
            return adapter.validate_python(decode_tree(data, tp, self._settings))
        except ValidationError as exc:
            raise DecodingError(
                f"JSON does not match {tp!r}: {exc.error_count()} error(s)",
                payload=text,
                target=target,
            ) from exc
        except (PydanticUserError, TypeError, ValueError, RecursionError) as exc:
            raise DecodingError(f"cannot decode into {tp!r}: {exc}", payload=text, target=target) from exc

    def read_for_updating(self, text: str | bytes, target: T) -> T:
        """Overwrite the fields of ``target`` that appear in ``text``, in place."""

        data = self._parse(text, target)
        try:
            if isinstance(target, abc.MutableSequence) and isinstance(data, list):
                target.extend(data)
                return target
            if not isinstance(data, dict):
                raise DecodingError(
                    "update payload must be a JSON object", payload=text, target=target
                )
            if isinstance(target, abc.MutableMapping):
                target.update(data)
                return target
            if _is_record_type(type(target)):
                self._update_record(data, target)
                return target
            for key, value in data.items():
                if not key.startswith("_") and hasattr(target, key):
                    setattr(target, key, value)
            return target
        except ValidationError as exc:
            raise DecodingError(
                f"update does not match {type(target).__qualname__}: {exc.error_count()} error(s)",
                payload=text,
                target=target,
            ) from exc
        except (PydanticUserError, TypeError, ValueError, AttributeError) as exc:
            raise DecodingError(
                f"cannot update {type(target).__qualname__}: {exc}", payload=text, target=target
            ) from exc

    def _update_record(self, data: dict[str, Any], target: Any) -> None:
        cls = type(target)
        accepted = validation_keys(cls)
        attribute_for = {key: attribute for attribute, key in accepted.items()}
        attribute_for.update({attribute: attribute for attribute in accepted})
        attribute_for.update(engine_keys(cls))
        patch = decode_tree(data, cls, self._settings, partial=True)
        updated = [attribute_for[key] for key in patch if key in attribute_for]
        if not updated:
            return
        merged = {key: getattr(target, attribute) for attribute, key in accepted.items()}
        for key, value in patch.items():
            attribute = attribute_for.get(key)
            if attribute in accepted:
                merged[accepted[attribute]] = value
        candidate = self.adapter(cls).validate_python(merged)
        for attribute in updated:
            setattr(target, attribute, getattr(candidate, attribute))
