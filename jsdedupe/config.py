"""Load jsdedupe configuration from pyproject.toml and optional .jsdedupe.toml."""

from __future__ import annotations

import dataclasses
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple


@dataclass
class DedupeConfig:
    """Runtime options for jsdedupe."""

    # Wrap the whole input in `!function(){ ... }()` so top-level code gets a
    # scope of its own and becomes eligible too.
    add_scope: bool = False
    # Collapse whitespace runs to a single space in extracted values.  Strings
    # rendered into the DOM lose repeated spaces anyway.
    clean_strings: bool = False

    # Selection strategy: "gzip" (default) or "all".
    type: str = "gzip"
    # "all" strategy: a repeated string qualifies with more than this many
    # occurrences...
    min_instances: int = 5
    # ...or when it is longer than this many characters.
    min_length: int = 5
    # "gzip" strategy: occurrences farther apart than this are out of reach of
    # the compressor's back-references.
    window: int = 32768

    # Return the full ordered replacement list alongside the code.
    include_replacements: bool = False

    # Grammar: "javascript", "typescript" or "tsx".  None lets the file driver
    # pick one from the file suffix (JavaScript for anything unrecognised).
    language: Optional[str] = None

    # File driver: foo.js is written to foo<output_suffix>.js.
    output_suffix: str = ".min"
    # File driver: re-parse each output and skip the file if it no longer parses.
    verify_output: bool = True


# Where settings are read from, lowest precedence first.  Each entry is the
# file name and the table path inside it.
_CONFIG_SOURCES = (
    ("pyproject.toml", ("tool", "jsdedupe")),
    (".jsdedupe.toml", ()),
)


def _read_toml(path: Path) -> dict:
    """Return the parsed table, or {} if *path* is absent or not valid TOML."""
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError, UnicodeDecodeError):
        return {}


def _table(data: dict, keys: Tuple[str, ...]) -> dict:
    for key in keys:
        data = data.get(key, {})
        if not isinstance(data, dict):
            return {}
    return data


def _field_names(cfg: DedupeConfig) -> Tuple[str, ...]:
    return tuple(f.name for f in dataclasses.fields(cfg))


def apply_overrides(cfg: DedupeConfig, overrides: dict) -> None:
    """Set each DedupeConfig field named in *overrides*.

    Used for both config files and command-line flags.  Keys that are not
    DedupeConfig fields are ignored, so a config file written for a newer
    version still loads.
    """
    for name in _field_names(cfg):
        if name in overrides:
            setattr(cfg, name, overrides[name])


def load_config(project_root: Optional[Path] = None) -> DedupeConfig:
    """Build the DedupeConfig for *project_root* (default: the working directory).

    ``[tool.jsdedupe]`` in pyproject.toml is applied first and a standalone
    ``.jsdedupe.toml`` overrides it.  Missing files leave the defaults alone.
    """
    root = Path.cwd() if project_root is None else project_root
    cfg = DedupeConfig()
    for filename, keys in _CONFIG_SOURCES:
        apply_overrides(cfg, _table(_read_toml(root / filename), keys))
    return cfg
