"""JSONP payloads: a JSON value wrapped in a callback invocation."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

__all__ = ["JSONPObject", "is_valid_function_name"]

# Dotted JavaScript identifiers such as ``jQuery1234_5678`` or ``ns.cb``.
_FUNCTION_NAME = re.compile(r"^[A-Za-z_$][\w$]*(?:\.[A-Za-z_$][\w$]*)*$")

_LINE_SEPARATORS = {"\u2028": "\\u2028", "\u2029": "\\u2029"}


def is_valid_function_name(name: str) -> bool:
    return bool(_FUNCTION_NAME.match(name))


@dataclass(frozen=True, slots=True)
class JSONPObject:
    function: str
    value: Any

    def __post_init__(self) -> None:
        if not isinstance(self.function, str) or not is_valid_function_name(self.function):
            raise ValueError(f"invalid JSONP function name: {self.function!r}")

    def render(self, json_text: str) -> str:
        """Wrap already-encoded ``json_text`` as ``function(json_text)``."""

        for raw, escaped in _LINE_SEPARATORS.items():
            json_text = json_text.replace(raw, escaped)
        return f"{self.function}({json_text})"
