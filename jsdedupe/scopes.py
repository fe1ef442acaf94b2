"""Find the function scopes that are deduplicated independently."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import List, Optional, Tuple

from .syntax import NodeKind, ParsedProgram, SyntaxNode

USE_STRICT = "use strict"


@dataclass
class Scope:
    """A function body analysed as one unit with one declaration site."""

    function: SyntaxNode
    block: SyntaxNode

    @property
    def start(self) -> int:
        return self.block.start

    @property
    def end(self) -> int:
        return self.block.end


def find_function_nodes(root: SyntaxNode) -> List[SyntaxNode]:
    """Return the outermost function-like nodes, breadth-first.

    The search does not look inside a function once it has been found, so
    functions nested in other functions are never returned.
    """
    found: List[SyntaxNode] = []
    queue = deque([root])
    while queue:
        node = queue.popleft()
        if node.kind is NodeKind.FUNCTION:
            found.append(node)
            continue
        queue.extend(node.children)
    return found


def _find_blocks(function: SyntaxNode) -> List[SyntaxNode]:
    """Return the first BLOCK reached along each path below *function*."""
    blocks: List[SyntaxNode] = []
    queue = deque(function.children)
    while queue:
        node = queue.popleft()
        if node.kind is NodeKind.BLOCK:
            blocks.append(node)
            continue
        queue.extend(node.children)
    return blocks


def find_scopes(root: SyntaxNode) -> List[Scope]:
    """Return every scope of the program in discovery order.

    A function's own body is its shallowest block, so everything nested in a
    top-level function (inner functions included) belongs to that one scope.
    Code outside every function has no scope.
    """
    scopes: List[Scope] = []
    for function in find_function_nodes(root):
        for block in _find_blocks(function):
            scopes.append(Scope(function, block))
    return scopes


# ---------------------------------------------------------------------------
# Directive prologue and insertion point
# ---------------------------------------------------------------------------


def _directive_string(statement: SyntaxNode) -> Optional[SyntaxNode]:
    """Return the string of a directive statement, or None if it is not one."""
    if statement.kind is not NodeKind.EXPRESSION_STATEMENT:
        return None
    parts = [c for c in statement.children if c.kind is not NodeKind.COMMENT]
    if len(parts) != 1 or parts[0].kind is not NodeKind.STRING:
        return None
    return parts[0]


def directive_prologue(block: SyntaxNode) -> List[Tuple[SyntaxNode, SyntaxNode]]:
    """Return ``(statement, string)`` for each directive leading *block*.

    Only the body of a function has a prologue; any other block returns an
    empty list.  Comments between directives are skipped.
    """
    if block.parent is None or block.parent.kind is not NodeKind.FUNCTION:
        return []
    directives: List[Tuple[SyntaxNode, SyntaxNode]] = []
    for statement in block.children:
        if statement.kind is NodeKind.COMMENT:
            continue
        string = _directive_string(statement)
        if string is None:
            break
        directives.append((statement, string))
    return directives


def insertion_point(block: SyntaxNode, program: ParsedProgram) -> Tuple[int, str]:
    """Return ``(offset, prefix)`` for the scope's variable declaration.

    The declaration goes right after the opening brace, unless the block's
    directive prologue contains ``"use strict"``; then it goes after the
    last directive so the prologue stays first.  *prefix* is ``";"`` when
    that directive has no terminating semicolon of its own.
    """
    directives = directive_prologue(block)
    if not any(string.value == USE_STRICT for _, string in directives):
        return block.start + 1, ""
    last_directive = directives[-1][0]
    if program.text(last_directive).endswith(";"):
        return last_directive.end, ""
    return last_directive.end, ";"
