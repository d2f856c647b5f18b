"""String predicates used at the codec boundary."""

from __future__ import annotations


def is_empty(text: str | None) -> bool:
    return text is None or len(text) == 0


def abbreviate(text: str, width: int) -> str:
    """Shorten ``text`` to ``width`` characters, marking the cut with ``...``."""

    if width < 4:
        raise ValueError("width must be at least 4")
    if len(text) <= width:
        return text
    return text[: width - 3] + "..."


__all__ = ["abbreviate", "is_empty"]
