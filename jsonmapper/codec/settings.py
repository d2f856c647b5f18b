"""Mapper configuration: inclusion policy, enum mode and time zone."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import tzinfo
from pathlib import Path
from typing import Any, Mapping
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from jsonmapper.utils.config import load_section

__all__ = ["EnumMode", "Include", "MapperSettings"]


class Include(enum.Enum):
    """Which fields are written, based on their runtime value."""

    ALWAYS = "always"
    NON_NULL = "non_null"
    NON_DEFAULT = "non_default"

    @classmethod
    def parse(cls, value: Include | str | None) -> Include:
        if value is None:
            return cls.ALWAYS
        if isinstance(value, cls):
            return value
        normalised = str(value).strip().lower().replace("-", "_")
        for member in cls:
            if member.value == normalised or member.name.lower() == normalised:
                return member
        raise ValueError(f"unknown inclusion policy: {value!r}")


class EnumMode(enum.Enum):
    NAME = "name"
    TO_STRING = "to_string"


def _parse_timezone(value: Any) -> tzinfo | None:
    if value is None or value == "local":
        return None
    if isinstance(value, tzinfo):
        return value
    try:
        return ZoneInfo(str(value))
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValueError(f"unknown time zone: {value!r}") from exc


@dataclass(slots=True)
class MapperSettings:
    """Configuration held by one engine instance.

    ``timezone`` of ``None`` means the host's local zone, resolved per value so
    daylight saving rules apply to each datetime.
    """

    inclusion: Include = Include.ALWAYS
    enum_mode: EnumMode = EnumMode.NAME
    use_field_metadata: bool = False
    timezone: tzinfo | None = None

    @property
    def exclude_none(self) -> bool:
        return self.inclusion is Include.NON_NULL

    @property
    def exclude_defaults(self) -> bool:
        return self.inclusion is Include.NON_DEFAULT

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> MapperSettings:
        """Build settings from a config section such as ``mapper:`` in YAML."""

        enum_flag = data.get("enum_use_to_string", False)
        metadata_flag = data.get("field_metadata", False)
        for key, flag in (("enum_use_to_string", enum_flag), ("field_metadata", metadata_flag)):
            if not isinstance(flag, bool):
                raise ValueError(f"'{key}' must be a boolean, got {flag!r}")
        return cls(
            inclusion=Include.parse(data.get("inclusion")),
            enum_mode=EnumMode.TO_STRING if enum_flag else EnumMode.NAME,
            use_field_metadata=metadata_flag,
            timezone=_parse_timezone(data.get("timezone")),
        )

    @classmethod
    def from_file(cls, path: str | Path, section: str = "mapper") -> MapperSettings:
        return cls.from_mapping(load_section(path, section))
