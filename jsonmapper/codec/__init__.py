"""Public entry points for the JSON codec."""

from jsonmapper.codec.errors import CodecError, CodecResult, DecodingError, EncodingError
from jsonmapper.codec.jsonp import JSONPObject
from jsonmapper.codec.mapper import (
    FILTERED_PLACEHOLDER,
    JsonMapper,
    non_default_mapper,
    non_empty_mapper,
)
from jsonmapper.codec.naming import json_field
from jsonmapper.codec.settings import EnumMode, Include, MapperSettings
from jsonmapper.codec.types import (
    TypeDescriptor,
    construct_collection_type,
    construct_map_type,
    construct_type,
)

__all__ = [
    "FILTERED_PLACEHOLDER",
    "CodecError",
    "CodecResult",
    "DecodingError",
    "EncodingError",
    "EnumMode",
    "Include",
    "JSONPObject",
    "JsonMapper",
    "MapperSettings",
    "TypeDescriptor",
    "construct_collection_type",
    "construct_map_type",
    "construct_type",
    "json_field",
    "non_default_mapper",
    "non_empty_mapper",
]
