"""Replace repeated string literals with references to scope-local variables.

``dedupe`` is a pure function of its input and options: it parses the
program, walks each function scope, asks the selection policy which string
groups to extract, and splices one ``var`` declaration per scope plus one
identifier per literal occurrence into the original text.
"""

from __future__ import annotations

from typing import List, NamedTuple, Optional, Set

from .config import DedupeConfig
from .namer import Namer, seed_used_names
from .policies.base import SelectionPolicy
from .policies.generic import GenericPolicy
from .policies.gzip_window import GzipWindowPolicy
from .scopes import Scope, find_scopes, insertion_point
from .splice import Replacement, apply_replacements, sort_replacements
from .stats import RunStats
from .strings import clean_string, collect_strings, quote_string
from .syntax import ParsedProgram, parse_program

SCOPE_PREFIX = "!function(){"
# The newline keeps a trailing line comment from swallowing the call.
SCOPE_SUFFIX = "\n}()"


class DedupeResult(NamedTuple):
    """Transformed code, plus the ordered replacements when requested."""

    code: str
    replacements: Optional[List[Replacement]] = None


def make_policy(options: DedupeConfig) -> SelectionPolicy:
    """Return the selection strategy named by ``options.type``."""
    if options.type == GzipWindowPolicy.name:
        return GzipWindowPolicy(window=options.window)
    if options.type == GenericPolicy.name:
        return GenericPolicy(
            min_instances=options.min_instances, min_length=options.min_length
        )
    raise ValueError(
        f"unknown strategy type: {options.type!r}"
        f" (expected {GzipWindowPolicy.name!r} or {GenericPolicy.name!r})"
    )


def wrap_in_scope(code: str) -> str:
    """Wrap *code* in an immediately-invoked function, keeping any hashbang first."""
    hashbang = ""
    if code.startswith("#!"):
        newline = code.find("\n")
        if newline == -1:
            return code
        hashbang, code = code[: newline + 1], code[newline + 1 :]
    return f"{hashbang}{SCOPE_PREFIX}{code}{SCOPE_SUFFIX}"


def plan_scope(
    scope: Scope,
    program: ParsedProgram,
    policy: SelectionPolicy,
    used: Set[str],
    clean: bool = False,
    stats: Optional[RunStats] = None,
) -> List[Replacement]:
    """Return the replacements that deduplicate one scope.

    *used* is the file-wide used-name set; names allocated here are added to
    it so later scopes cannot pick them.
    """
    namer = Namer(used, policy.alphabet)
    groups = collect_strings(scope.block)
    declarations: List[str] = []
    replacements: List[Replacement] = []
    for group in policy.select(scope, groups):
        name = namer.allocate()
        value = clean_string(group.value) if clean else group.value
        declarations.append(f"{name}={quote_string(value)}")
        for occ in group.occurrences:
            replacements.append(Replacement(occ.start, occ.end, name))

    if not declarations:
        return replacements

    if stats is not None:
        stats.scopes_changed += 1
        stats.strings_extracted += len(declarations)
        stats.occurrences_replaced += len(replacements)
    offset, prefix = insertion_point(scope.block, program)
    replacements.append(
        Replacement(offset, offset, f"{prefix}var {','.join(declarations)};")
    )
    return replacements


def dedupe(
    code: str,
    options: Optional[DedupeConfig] = None,
    stats: Optional[RunStats] = None,
) -> DedupeResult:
    """Deduplicate the string literals of *code*.

    Raises DedupeParseError if *code* does not parse; nothing is transformed
    in that case.  Offsets in the returned replacements refer to the parsed
    text, which is the wrapped program when ``add_scope`` is set.
    """
    if options is None:
        options = DedupeConfig()
    policy = make_policy(options)
    if options.add_scope:
        code = wrap_in_scope(code)

    program = parse_program(code, options.language or "javascript")
    used = seed_used_names(program.identifiers)
    replacements: List[Replacement] = []
    for scope in find_scopes(program.root):
        replacements.extend(
            plan_scope(scope, program, policy, used, options.clean_strings, stats)
        )

    ordered = sort_replacements(replacements)
    new_code = apply_replacements(code, ordered)
    return DedupeResult(new_code, ordered if options.include_replacements else None)
