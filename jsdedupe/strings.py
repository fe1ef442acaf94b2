"""Collect and group the string literals of a scope."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from typing import Dict, List, Set

from .scopes import USE_STRICT, directive_prologue
from .syntax import NodeKind, SyntaxNode


@dataclass
class StringOccurrence:
    value: str
    start: int
    end: int


@dataclass
class StringGroup:
    """Every occurrence of one exact string value within one scope."""

    value: str
    occurrences: List[StringOccurrence] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.occurrences)

    def starts(self) -> List[int]:
        return sorted(occ.start for occ in self.occurrences)


def _is_property_key(node: SyntaxNode) -> bool:
    parent = node.parent
    return (
        parent is not None
        and parent.kind is NodeKind.PROPERTY_ASSIGNMENT
        and node.field_name == "key"
    )


def _is_eligible(node: SyntaxNode) -> bool:
    return (
        node.kind is NodeKind.STRING
        and node.value is not None
        and node.value != USE_STRICT
        and not _is_property_key(node)
    )


def collect_strings(block: SyntaxNode) -> Dict[str, StringGroup]:
    """Group the eligible string literals below *block* by decoded value.

    Groups appear in the order their first occurrence appears in the source,
    and each group's occurrences are in source order.  Literals inside nested
    functions are included.  Property keys, ``"use strict"`` and the strings
    of any function body's directive prologue are not.
    """
    groups: Dict[str, StringGroup] = {}
    directives: Set[SyntaxNode] = set()
    stack = [block]
    while stack:
        node = stack.pop()
        if node.kind is NodeKind.BLOCK:
            directives.update(string for _, string in directive_prologue(node))
        if node not in directives and _is_eligible(node):
            group = groups.get(node.value)
            if group is None:
                group = groups[node.value] = StringGroup(node.value)
            group.occurrences.append(StringOccurrence(node.value, node.start, node.end))
            continue
        stack.extend(reversed(node.children))
    return groups


# ---------------------------------------------------------------------------
# Declaration text
# ---------------------------------------------------------------------------

_WHITESPACE_RE = re.compile(r"\s+")
# Characters JSON leaves raw that must be escaped for JavaScript source.
_UNSAFE_RE = re.compile("[\u2028\u2029\ud800-\udfff]")


def clean_string(value: str) -> str:
    """Collapse each run of whitespace to a single space."""
    return _WHITESPACE_RE.sub(" ", value)


def quote_string(value: str) -> str:
    """Return *value* as a double-quoted JavaScript string literal."""
    quoted = json.dumps(value, ensure_ascii=False)
    return _UNSAFE_RE.sub(lambda m: f"\\u{ord(m.group()):04x}", quoted)
