"""Apply a set of text replacements to source in one pass."""

from __future__ import annotations

from typing import Iterable, List, NamedTuple


class Replacement(NamedTuple):
    """Replace ``source[start:end]`` with *text*; ``start == end`` inserts."""

    start: int
    end: int
    text: str


def _is_word_char(ch: str) -> bool:
    return ch.isalnum() or ch in "_$"


def _fuses(left: str, right: str) -> bool:
    """Return True if *left* followed by *right* would read as one token."""
    return bool(left) and bool(right) and _is_word_char(left) and _is_word_char(right)


def sort_replacements(replacements: Iterable[Replacement]) -> List[Replacement]:
    """Order by start offset; an insertion precedes a replacement at the same offset."""
    return sorted(replacements, key=lambda r: (r.start, r.end))


def apply_replacements(source: str, replacements: Iterable[Replacement]) -> str:
    """Return *source* with every replacement applied.

    Replacements must not overlap once sorted; a ValueError is raised if one
    starts before the previous one ends.  A single space is added on either
    side of a replacement whose text would otherwise run into an adjacent
    word character (``'z'in x`` becomes ``a in x``, not ``ain x``).
    """
    parts: List[str] = []
    cursor = 0
    for rep in sort_replacements(replacements):
        if rep.start < cursor:
            raise ValueError(
                f"overlapping replacement at {rep.start}-{rep.end}"
                f" (previous replacement ends at {cursor})"
            )
        parts.append(source[cursor : rep.start])
        before = source[rep.start - 1] if rep.start > 0 else ""
        if _fuses(before, rep.text[:1]):
            parts.append(" ")
        parts.append(rep.text)
        after = source[rep.end : rep.end + 1]
        if _fuses(rep.text[-1:], after):
            parts.append(" ")
        cursor = rep.end
    parts.append(source[cursor:])
    return "".join(parts)
