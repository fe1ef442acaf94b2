"""Parse JavaScript/TypeScript source with tree-sitter into a read-only syntax tree.

The rest of the package never touches tree-sitter directly: it works on
``SyntaxNode`` objects that expose a kind tag, a character span, parent
linkage, children, and the field name under which the parent holds them.
"""

from __future__ import annotations

import bisect
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, List, Optional, Set, Tuple

import tree_sitter_javascript as ts_javascript
import tree_sitter_typescript as ts_typescript
from tree_sitter import Language, Node, Parser, Tree

from .errors import DedupeParseError

LANGUAGES = ("javascript", "typescript", "tsx")


class NodeKind(Enum):
    """Syntactic category of a node, independent of the grammar's type names."""

    STRING = "string"
    PROPERTY_ASSIGNMENT = "property_assignment"
    VARIABLE_DECLARATION = "variable_declaration"
    IDENTIFIER = "identifier"
    BLOCK = "block"
    FUNCTION = "function"
    EXPRESSION_STATEMENT = "expression_statement"
    COMMENT = "comment"
    OTHER = "other"


_FUNCTION_TYPES = frozenset(
    {
        "function_declaration",
        "function_expression",
        "function",  # function expressions in older grammars
        "generator_function_declaration",
        "generator_function",
        "arrow_function",
        "method_definition",
        # TypeScript signatures without a body
        "function_signature",
        "function_type",
        "method_signature",
        "abstract_method_signature",
        "call_signature",
        "construct_signature",
    }
)

_IDENTIFIER_TYPES = frozenset(
    {
        "identifier",
        "property_identifier",
        "shorthand_property_identifier",
        "shorthand_property_identifier_pattern",
        "statement_identifier",
        "type_identifier",
    }
)

_KIND_BY_TYPE: Dict[str, NodeKind] = {
    "string": NodeKind.STRING,
    "pair": NodeKind.PROPERTY_ASSIGNMENT,
    "pair_pattern": NodeKind.PROPERTY_ASSIGNMENT,
    "variable_declarator": NodeKind.VARIABLE_DECLARATION,
    "statement_block": NodeKind.BLOCK,
    "expression_statement": NodeKind.EXPRESSION_STATEMENT,
    "comment": NodeKind.COMMENT,
    "html_comment": NodeKind.COMMENT,
}
_KIND_BY_TYPE.update({t: NodeKind.FUNCTION for t in _FUNCTION_TYPES})
_KIND_BY_TYPE.update({t: NodeKind.IDENTIFIER for t in _IDENTIFIER_TYPES})

# A string held by one of these parents (under the listed fields, or under any
# field when None) names something; it is not a string-valued expression and
# cannot be swapped for a variable reference.
_NAME_POSITIONS: Dict[str, Optional[FrozenSet[str]]] = {
    "method_definition": frozenset({"name"}),
    "method_signature": frozenset({"name"}),
    "abstract_method_signature": frozenset({"name"}),
    "property_signature": frozenset({"name"}),
    "field_definition": frozenset({"property"}),
    "public_field_definition": frozenset({"name"}),
    "import_statement": frozenset({"source"}),
    "export_statement": frozenset({"source"}),
    "import_require_clause": frozenset({"source"}),
    "module": frozenset({"name"}),
    "jsx_attribute": None,
    "literal_type": None,
    "enum_body": None,
    "enum_assignment": None,
}

# Node types whose children carry nothing the deduplicator needs.
_OPAQUE_TYPES = frozenset({"string", "comment", "html_comment", "regex"})


@dataclass(eq=False)
class SyntaxNode:
    """One named node of a parsed program.

    ``start``/``end`` are character offsets into the parsed text.  ``value``
    is the decoded string for STRING nodes and the name for IDENTIFIER nodes.
    """

    kind: NodeKind
    type: str
    start: int
    end: int
    parent: Optional["SyntaxNode"] = field(default=None, repr=False)
    field_name: Optional[str] = None
    value: Optional[str] = None
    children: List["SyntaxNode"] = field(default_factory=list, repr=False)


@dataclass
class ParsedProgram:
    """A parsed program: the text, its tree, and every identifier it uses."""

    source: str
    root: SyntaxNode
    identifiers: Set[str]
    language: str = "javascript"

    def text(self, node: SyntaxNode) -> str:
        return self.source[node.start : node.end]


# ---------------------------------------------------------------------------
# String literal decoding
# ---------------------------------------------------------------------------

_ESCAPE_RE = re.compile(
    r"\\(u\{[0-9a-fA-F]+\}|u[0-9a-fA-F]{4}|x[0-9a-fA-F]{2}"
    r"|[0-3][0-7]{0,2}|[4-7][0-7]?|\r\n|[\s\S])"
)
_SURROGATE_RE = re.compile("[\ud800-\udfff]")
_SIMPLE_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "b": "\b", "f": "\f", "v": "\v"}
_LINE_CONTINUATIONS = frozenset({"\n", "\r", "\r\n", "\u2028", "\u2029"})


def _unescape(match: "re.Match[str]") -> str:
    seq = match.group(1)
    if seq in _LINE_CONTINUATIONS:
        return ""
    head = seq[0]
    if head == "u" and len(seq) > 1:
        code_point = int(seq[2:-1] if seq[1] == "{" else seq[1:], 16)
        if code_point > 0x10FFFF:
            return match.group(0)
        return chr(code_point)
    if head == "x" and len(seq) == 3:
        return chr(int(seq[1:], 16))
    if head in "01234567":
        return chr(int(seq, 8))
    return _SIMPLE_ESCAPES.get(seq, seq)


def decode_string_literal(raw: str) -> str:
    """Return the runtime value of a quoted string literal *raw*.

    Escaped surrogate pairs are joined, so ``'\\ud83d\\ude00'`` and
    ``'\\u{1f600}'`` decode to the same value.
    """
    body = raw[1:-1]
    if "\\" not in body:
        return body
    value = _ESCAPE_RE.sub(_unescape, body)
    if _SURROGATE_RE.search(value):
        value = value.encode("utf-16-le", "surrogatepass").decode(
            "utf-16-le", "surrogatepass"
        )
    return value


# ---------------------------------------------------------------------------
# Offsets
# ---------------------------------------------------------------------------


class _OffsetMap:
    """Translate UTF-8 byte offsets reported by tree-sitter into character offsets."""

    def __init__(self, text: str) -> None:
        self._byte_ends: List[int] = []
        self._extra: List[int] = []
        if text.isascii():
            return
        extra = 0
        for match in re.finditer(r"[^\x00-\x7f]", text):
            code_point = ord(match.group())
            width = 2 if code_point < 0x800 else 3 if code_point < 0x10000 else 4
            byte_start = match.start() + extra
            extra += width - 1
            self._byte_ends.append(byte_start + width)
            self._extra.append(extra)

    def char_offset(self, byte_offset: int) -> int:
        idx = bisect.bisect_right(self._byte_ends, byte_offset) - 1
        if idx < 0:
            return byte_offset
        return byte_offset - self._extra[idx]


# ---------------------------------------------------------------------------
# Parsers
# ---------------------------------------------------------------------------

_PARSERS: Dict[str, Parser] = {}


def _load_language(language: str) -> Language:
    if language == "javascript":
        return Language(ts_javascript.language())
    if language == "typescript":
        return Language(ts_typescript.language_typescript())
    if language == "tsx":
        return Language(ts_typescript.language_tsx())
    raise ValueError(f"unknown language: {language!r} (expected one of {LANGUAGES})")


def _get_parser(language: str) -> Parser:
    parser = _PARSERS.get(language)
    if parser is None:
        parser = Parser(_load_language(language))
        _PARSERS[language] = parser
    return parser


def _parse_tree(code: str, language: str) -> Tree:
    return _get_parser(language).parse(code.encode("utf-8"))


def _first_error(root: Node) -> Optional[Node]:
    """Return the first ERROR or MISSING node in source order, if any."""
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type == "ERROR" or node.is_missing:
            return node
        stack.extend(
            child
            for child in reversed(node.children)
            if child.has_error or child.is_missing
        )
    return None  # pragma: no cover - only called when the root has an error


def _line_and_column(source: str, offset: int) -> Tuple[int, int]:
    line = source.count("\n", 0, offset) + 1
    column = offset - (source.rfind("\n", 0, offset) + 1) + 1
    return line, column


def _is_name_position(parent_type: str, field_name: Optional[str]) -> bool:
    if parent_type not in _NAME_POSITIONS:
        return False
    fields = _NAME_POSITIONS[parent_type]
    return fields is None or field_name in fields


def _make_node(
    ts_node: Node,
    parent: Optional[SyntaxNode],
    field_name: Optional[str],
    source: str,
    offsets: _OffsetMap,
    identifiers: Set[str],
) -> SyntaxNode:
    start = offsets.char_offset(ts_node.start_byte)
    end = offsets.char_offset(ts_node.end_byte)
    node_type = ts_node.type
    kind = _KIND_BY_TYPE.get(node_type, NodeKind.OTHER)
    if (
        kind is NodeKind.STRING
        and parent is not None
        and _is_name_position(parent.type, field_name)
    ):
        kind = NodeKind.OTHER

    value: Optional[str] = None
    if kind is NodeKind.STRING:
        value = decode_string_literal(source[start:end])
    elif kind is NodeKind.IDENTIFIER:
        value = source[start:end]
        identifiers.add(value)

    node = SyntaxNode(kind, node_type, start, end, parent, field_name, value)
    if parent is not None:
        parent.children.append(node)
    return node


def _build_tree(
    ts_root: Node, source: str, offsets: _OffsetMap
) -> Tuple[SyntaxNode, Set[str]]:
    """Copy the named nodes of a tree-sitter tree into SyntaxNodes."""
    identifiers: Set[str] = set()
    root = _make_node(ts_root, None, None, source, offsets, identifiers)
    stack = [(ts_root, root)]
    while stack:
        ts_node, node = stack.pop()
        if ts_node.type in _OPAQUE_TYPES:
            continue
        cursor = ts_node.walk()
        if not cursor.goto_first_child():
            continue
        while True:
            child = cursor.node
            if child is not None and child.is_named:
                stack.append(
                    (
                        child,
                        _make_node(
                            child, node, cursor.field_name, source, offsets, identifiers
                        ),
                    )
                )
            if not cursor.goto_next_sibling():
                break
    return root, identifiers


def parse_program(code: str, language: str = "javascript") -> ParsedProgram:
    """Parse *code* and return its read-only ParsedProgram.

    Raises DedupeParseError if the parser reports any error or missing node.
    """
    tree = _parse_tree(code, language)
    offsets = _OffsetMap(code)
    if tree.root_node.has_error:
        bad = _first_error(tree.root_node)
        offset = offsets.char_offset(bad.start_byte) if bad is not None else 0
        line, column = _line_and_column(code, offset)
        if bad is not None and bad.is_missing:
            message = f"missing {bad.type!r} at line {line}, column {column}"
        else:
            message = f"syntax error at line {line}, column {column}"
        raise DedupeParseError(message, line, column)

    root, identifiers = _build_tree(tree.root_node, code, offsets)
    return ParsedProgram(code, root, identifiers, language)


def has_syntax_errors(code: str, language: str = "javascript") -> bool:
    """Return True if *code* does not parse cleanly."""
    return _parse_tree(code, language).root_node.has_error
