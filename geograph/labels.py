"""Next free label for new points and lines."""

from __future__ import annotations

from itertools import count
from typing import Iterable

POINT_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
LINE_ALPHABET = "rstuvwz"


def _next_label(alphabet: str, existing: Iterable[str]) -> str:
    taken = set(existing)
    for index in count():
        cycle, position = divmod(index, len(alphabet))
        label = f"{alphabet[position]}{cycle or ''}"
        if label not in taken:
            return label
    raise AssertionError("unreachable")  # pragma: no cover


def next_point_label(existing: Iterable[str]) -> str:
    """``A`` .. ``Z``, then ``A1`` .. ``Z1`` and so on."""

    return _next_label(POINT_ALPHABET, existing)


def next_line_label(existing: Iterable[str]) -> str:
    return _next_label(LINE_ALPHABET, existing)


__all__ = ["next_line_label", "next_point_label"]
