"""JSON string <-> python object mapping with configurable output styles."""

from jsonmapper.codec import (
    FILTERED_PLACEHOLDER,
    CodecError,
    CodecResult,
    DecodingError,
    EncodingError,
    Include,
    JsonMapper,
    TypeDescriptor,
    json_field,
    non_default_mapper,
    non_empty_mapper,
)

__version__ = "1.0.0"

__all__ = [
    "FILTERED_PLACEHOLDER",
    "CodecError",
    "CodecResult",
    "DecodingError",
    "EncodingError",
    "Include",
    "JsonMapper",
    "TypeDescriptor",
    "json_field",
    "non_default_mapper",
    "non_empty_mapper",
]
