"""Tests for jsdedupe.dedupe: end-to-end behaviour of the core entry point."""

import re

import pytest

from jsdedupe.config import DedupeConfig
from jsdedupe.dedupe import (
    SCOPE_PREFIX,
    DedupeResult,
    dedupe,
    make_policy,
    wrap_in_scope,
)
from jsdedupe.errors import DedupeParseError
from jsdedupe.policies.generic import GenericPolicy
from jsdedupe.policies.gzip_window import GzipWindowPolicy
from jsdedupe.splice import Replacement
from jsdedupe.stats import RunStats
from jsdedupe.syntax import has_syntax_errors

# More than one DEFLATE window of padding between two occurrences.
GZIP_SPACE = " " * 32799

_ALL = DedupeConfig(type="all", min_instances=2, min_length=2)


def _markers(code: str, marker: str = "z") -> int:
    return len(re.findall(marker, code))


# ---------------------------------------------------------------------------
# Generic strategy scenarios
# ---------------------------------------------------------------------------


def test_repeated_call_arguments_share_one_variable():
    code = "function x() { console.log('z','z','z','z','z','z'); }"
    result = dedupe(code, _ALL)
    assert result.code == 'function x() {var a="z"; console.log(a,a,a,a,a,a); }'


def test_declaration_follows_use_strict():
    code = "function x() { \"use strict\"; console.log('z','z','z','z','z','z'); }"
    result = dedupe(code, _ALL)
    assert result.code == (
        'function x() { "use strict";var a="z"; console.log(a,a,a,a,a,a); }'
    )


def test_property_key_is_untouched():
    code = (
        "function x() { var stuff = { 'z' : 123 };"
        " console.log('z','z','z','z','z','z','z','z'); }"
    )
    result = dedupe(code, _ALL)
    assert "{ 'z' : 123 }" in result.code
    assert "console.log(a,a,a,a,a,a,a,a)" in result.code
    assert result.code.count('var a="z";') == 1


def test_property_value_is_replaced_but_key_is_not():
    code = (
        "function x() { var stuff = { 'z' : 'z' };"
        " console.log('z','z','z','z','z','z','z','z'); }"
    )
    result = dedupe(code, _ALL)
    assert result.code == (
        'function x() {var a="z"; var stuff = { \'z\' : a };'
        " console.log(a,a,a,a,a,a,a,a); }"
    )


def test_add_scope_wraps_top_level_code():
    code = "console.log('zz', 'zz', 'zz');\nconsole.log('zz');\n"
    options = DedupeConfig(type="all", min_instances=2, min_length=1, add_scope=True)
    result = dedupe(code, options)
    assert result.code.startswith(SCOPE_PREFIX)
    assert result.code.count("var ") == 1
    assert result.code.count("zz") == 1
    assert not has_syntax_errors(result.code)


def test_top_level_code_untouched_without_add_scope():
    code = "var a = 'zzzzzz'; f('zzzzzz','zzzzzz'); function g(){ h('yyyyyy','yyyyyy'); }"
    result = dedupe(code, _ALL)
    assert result.code == (
        "var a = 'zzzzzz'; f('zzzzzz','zzzzzz');"
        ' function g(){var b="yyyyyy"; h(b,b); }'
    )


def test_sibling_functions_get_distinct_names():
    code = "function a(){ f('xyz','xyz','xyz'); } function b(){ f('xyz','xyz','xyz'); }"
    result = dedupe(code, _ALL)
    assert result.code == (
        'function a(){var c="xyz"; f(c,c,c); } function b(){var d="xyz"; f(d,d,d); }'
    )


def test_least_frequent_group_draws_first_name():
    code = "function x(){ f('pp','qq','pp','qq','pp','qq','pp'); }"
    result = dedupe(code, _ALL)
    assert result.code == 'function x(){var a="qq",b="pp"; f(b,a,b,a,b,a,b); }'


def test_single_occurrence_is_never_extracted():
    code = "function x(){ f('a long enough string'); }"
    assert dedupe(code, _ALL).code == code


def test_clean_strings_collapses_whitespace_in_declaration():
    code = "function x(){ f('a   b\\n c','a   b\\n c'); }"
    options = DedupeConfig(
        type="all", min_instances=2, min_length=2, clean_strings=True
    )
    assert dedupe(code, options).code == 'function x(){var a="a b c"; f(a,a); }'


def test_values_are_grouped_regardless_of_quotes_and_escapes():
    code = "function x(){ f('abc', \"abc\", 'a\\x62c'); }"
    assert dedupe(code, _ALL).code == 'function x(){var a="abc"; f(a, a, a); }'


def test_use_strict_without_semicolon_keeps_directive_first():
    code = "function x() {\n  \"use strict\"\n  f('zz', 'zz', 'zz')\n}\n"
    result = dedupe(code, _ALL)
    assert '"use strict";var a="zz";' in result.code
    assert "f(a, a, a)" in result.code
    assert not has_syntax_errors(result.code)


def test_directive_before_use_strict_is_not_extracted():
    code = "function x(){ 'zz'; 'use strict'; f('zz','zz') }"
    result = dedupe(code, _ALL)
    assert result.code == "function x(){ 'zz'; 'use strict';var a=\"zz\"; f(a,a) }"
    assert not has_syntax_errors(result.code)


def test_nested_function_prologue_is_not_extracted():
    code = "function x(){ f('zz','zz'); function g(){ 'zz'; 'use strict'; } }"
    assert dedupe(code, _ALL).code == (
        "function x(){var a=\"zz\"; f(a,a); function g(){ 'zz'; 'use strict'; } }"
    )


def test_string_statement_in_plain_block_is_extracted():
    code = "function x(){ if (y) { 'zz'; } f('zz') }"
    assert dedupe(code, _ALL).code == (
        "function x(){var a=\"zz\"; if (y) { a; } f(a) }"
    )


def test_non_ascii_source_uses_character_offsets():
    code = "function x() { var s = \"héllo \U0001F600\"; console.log('zz', 'zz', 'zz'); }"
    result = dedupe(code, _ALL)
    assert result.code == (
        "function x() {var a=\"zz\"; var s = \"héllo \U0001F600\";"
        " console.log(a, a, a); }"
    )


def test_typescript_language():
    code = "function f(a: string): void { g('abcdef', 'abcdef'); }"
    options = DedupeConfig(
        type="all", min_instances=2, min_length=2, language="typescript"
    )
    assert dedupe(code, options).code == (
        'function f(a: string): void {var b="abcdef"; g(b, b); }'
    )


def test_include_replacements_returns_sorted_list():
    code = "function x() { console.log('z','z','z','z','z','z'); }"
    options = DedupeConfig(
        type="all", min_instances=2, min_length=2, include_replacements=True
    )
    result = dedupe(code, options)
    assert isinstance(result, DedupeResult)
    reps = result.replacements
    assert reps is not None
    assert len(reps) == 7
    assert reps[0] == Replacement(14, 14, 'var a="z";')
    assert all(r.text == "a" for r in reps[1:])
    for prev, cur in zip(reps, reps[1:]):
        assert prev.end <= cur.start


def test_replacements_omitted_by_default():
    result = dedupe("function x() { f('z'); }", _ALL)
    assert result.replacements is None


def test_stats_are_populated():
    code = "function a(){ f('xyz','xyz','xyz'); } function b(){ f('xyz','xyz'); }"
    stats = RunStats()
    dedupe(code, _ALL, stats=stats)
    assert stats.scopes_changed == 2
    assert stats.strings_extracted == 2
    assert stats.occurrences_replaced == 5


def test_parse_error_raises():
    with pytest.raises(DedupeParseError):
        dedupe("function x( { console.log('z', 'z'); }", _ALL)


def test_unknown_type_raises():
    with pytest.raises(ValueError, match="unknown strategy"):
        dedupe("function x() {}", DedupeConfig(type="fastest"))


def test_empty_program_unchanged():
    assert dedupe("", _ALL).code == ""


# ---------------------------------------------------------------------------
# Gzip strategy (the default)
# ---------------------------------------------------------------------------


def test_gzip_extracts_strings_beyond_window():
    code = f"!function() {{ console.log('zzzzzzzzzz', {GZIP_SPACE} 'zzzzzzzzzz'); }}()"
    result = dedupe(code)
    assert _markers(result.code, "zzzzzzzzzz") == 1


def test_gzip_leaves_strings_within_window():
    code = "!function() { console.log('zzzzzzzzzz', 'zzzzzzzzzz'); }()"
    assert dedupe(code).code == code


def test_gzip_many_small_strings():
    code = f"!function() {{ console.log('z', {GZIP_SPACE} 'z', 'z', 'z', 'z', 'z'); }}()"
    expected = f'!function() {{var _="z"; console.log(_, {GZIP_SPACE} _, _, _, _, _); }}()'
    assert dedupe(code).code == expected


def test_gzip_multiple_scopes():
    code = (
        f"!function() {{ console.log('z',{GZIP_SPACE} 'z', 'z', 'z', 'z', 'z'); }}();\n"
        f"!function() {{ console.log('z',{GZIP_SPACE} 'z', 'z', 'z', 'z', 'z'); }}();\n"
    )
    result = dedupe(code)
    assert _markers(result.code) == 2
    assert 'var _="z";' in result.code
    assert 'var e="z";' in result.code


def test_gzip_nested_scopes_fold_into_outer_function():
    code = (
        "!function() {\n"
        f"  !function() {{ console.log('z', {GZIP_SPACE} 'z', 'z', 'z', 'z', 'z'); }}();\n"
        f"  !function() {{ console.log('z', {GZIP_SPACE} 'z', 'z', 'z', 'z', 'z'); }}();\n"
        "}();\n"
    )
    assert _markers(dedupe(code).code) == 1


def test_gzip_named_function():
    code = f"function x() {{ console.log('z', {GZIP_SPACE} 'z', 'z', 'z', 'z', 'z'); }}"
    expected = f'function x() {{var _="z"; console.log(_, {GZIP_SPACE} _, _, _, _, _); }}'
    assert dedupe(code).code == expected


def test_gzip_arrow_function():
    code = f"() => {{ console.log('z', {GZIP_SPACE} 'z', 'z', 'z', 'z', 'z'); }}"
    expected = f'() => {{var _="z"; console.log(_, {GZIP_SPACE} _, _, _, _, _); }}'
    assert dedupe(code).code == expected


def test_gzip_strict_mode():
    code = (
        f"function x() {{ \"use strict\"; console.log('z', {GZIP_SPACE}"
        " 'z', 'z', 'z', 'z', 'z'); }"
    )
    expected = (
        f'function x() {{ "use strict";var _="z"; console.log(_, {GZIP_SPACE}'
        " _, _, _, _, _); }"
    )
    assert dedupe(code).code == expected


def test_gzip_add_scope():
    code = f"console.log('z', {GZIP_SPACE} 'z', 'z', 'z', 'z', 'z');"
    result = dedupe(code, DedupeConfig(add_scope=True))
    assert "!function" in result.code
    assert _markers(result.code) == 1


def test_gzip_non_function_blocks_untouched():
    code = (
        "\n  if (true) {\n"
        f"    console.log('z', {GZIP_SPACE} 'z', 'z', 'z', 'z', 'z');\n"
        "  }\n"
    )
    assert dedupe(code).code == code


def test_gzip_use_strict_is_not_a_string():
    code = (
        "\n  () => {\n    'use strict';\n"
        f"    console.log('use strict', {GZIP_SPACE} 'use strict', 'use strict',"
        " 'use strict', 'use strict', 'use strict');\n  }\n"
    )
    assert dedupe(code).code == code


def test_gzip_skips_names_already_in_source():
    code = (
        f"function x() {{ _.thing = 'a'; console.log('z', {GZIP_SPACE}"
        " 'z', 'z', 'z', 'z', 'z', 'z', 'z'); }"
    )
    expected = (
        f'function x() {{var e="z"; _.thing = \'a\'; console.log(e, {GZIP_SPACE}'
        " e, e, e, e, e, e, e); }"
    )
    assert dedupe(code).code == expected


def test_gzip_string_next_to_keyword():
    code = (
        "function x() { if ('z'in x) {"
        f" console.log('z', {GZIP_SPACE} 'z', 'z', 'z', 'z', 'z', 'z', 'z'); }} }}"
    )
    expected = (
        'function x() {var _="z"; if (_ in x) {'
        f" console.log(_, {GZIP_SPACE} _, _, _, _, _, _, _); }} }}"
    )
    assert dedupe(code).code == expected


# ---------------------------------------------------------------------------
# make_policy / wrap_in_scope
# ---------------------------------------------------------------------------


def test_make_policy_gzip():
    policy = make_policy(DedupeConfig(type="gzip", window=100))
    assert isinstance(policy, GzipWindowPolicy)
    assert policy.window == 100


def test_make_policy_all():
    policy = make_policy(DedupeConfig(type="all", min_instances=3, min_length=9))
    assert isinstance(policy, GenericPolicy)
    assert policy.min_instances == 3
    assert policy.min_length == 9


def test_wrap_in_scope_keeps_hashbang_first():
    wrapped = wrap_in_scope("#!/usr/bin/env node\nrun();")
    assert wrapped == "#!/usr/bin/env node\n!function(){run();\n}()"


def test_wrap_in_scope_guards_trailing_line_comment():
    wrapped = wrap_in_scope("run(); // done")
    assert not has_syntax_errors(wrapped)
    assert wrapped.endswith("// done\n}()")
