"""Codec error taxonomy and the explicit result type."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, TypeVar

T = TypeVar("T")

__all__ = ["CodecError", "CodecResult", "DecodingError", "EncodingError"]


class CodecError(Exception):
    """Base class for failures raised by the JSON engine.

    ``payload`` holds the value or text that could not be converted so callers
    can report it without keeping their own reference.
    """

    def __init__(self, message: str, *, payload: Any = None) -> None:
        super().__init__(message)
        self.payload = payload


class EncodingError(CodecError):
    """Raised when a value cannot be represented as JSON."""


class DecodingError(CodecError):
    """Raised when text is not JSON or does not fit the requested type."""

    def __init__(self, message: str, *, payload: Any = None, target: Any = None) -> None:
        super().__init__(message, payload=payload)
        self.target = target


@dataclass(frozen=True, slots=True)
class CodecResult(Generic[T]):
    """Outcome of an encode or decode call.

    Exactly one of ``value`` and ``error`` is meaningful: a successful decode
    of empty text carries ``value=None`` and ``error=None``.
    """

    value: T | None = None
    error: CodecError | None = None

    @classmethod
    def success(cls, value: T | None) -> CodecResult[T]:
        return cls(value=value)

    @classmethod
    def failure(cls, error: CodecError) -> CodecResult[T]:
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T | None:
        """Return the value or raise the recorded error."""

        if self.error is not None:
            raise self.error
        return self.value

    def value_or(self, default: T) -> T:
        if self.error is not None or self.value is None:
            return default
        return self.value
