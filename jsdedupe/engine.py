"""Load files, deduplicate them, verify, and write the results."""

from dataclasses import replace
from pathlib import Path
from typing import Dict, Generator, Iterable, Optional

from .config import DedupeConfig, load_config
from .dedupe import dedupe, make_policy
from .errors import DedupeParseError
from .stats import RunStats
from .syntax import has_syntax_errors

_LANGUAGE_BY_SUFFIX: Dict[str, str] = {
    ".js": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".jsx": "javascript",
    ".ts": "typescript",
    ".mts": "typescript",
    ".cts": "typescript",
    ".tsx": "tsx",
}


def language_for_path(path: Path) -> str:
    """Pick a grammar from the file suffix; JavaScript when unrecognised."""
    return _LANGUAGE_BY_SUFFIX.get(path.suffix.lower(), "javascript")


def output_path(path: Path, output_suffix: str) -> Path:
    """Return where the result for *path* is written: foo.js -> foo.min.js."""
    return path.with_name(f"{path.stem}{output_suffix}{path.suffix}")


def run_engine(
    paths: Iterable[str],
    config: Optional[DedupeConfig] = None,
    stats: Optional[RunStats] = None,
) -> Generator[str, None, None]:
    """Deduplicate each file, write its output, and yield summary messages.

    A file that cannot be read or parsed, or whose output no longer parses,
    is reported with a ``SKIP`` message and the remaining files are still
    processed.  An invalid strategy in *config* raises ValueError before any
    file is touched.
    """
    if config is None:
        config = load_config()
    _stats = stats if stats is not None else RunStats()
    make_policy(config)

    for filepath in paths:
        path = Path(filepath)
        if not path.is_file():
            _stats.files_skipped += 1
            yield f"SKIP {filepath}: file not found"
            continue

        try:
            source = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            _stats.files_skipped += 1
            yield f"SKIP {filepath}: cannot read file: {exc}"
            continue

        language = config.language or language_for_path(path)
        file_stats = RunStats()
        try:
            result = dedupe(source, replace(config, language=language), file_stats)
        except DedupeParseError as exc:
            _stats.files_skipped += 1
            yield f"SKIP {filepath}: parse error: {exc}"
            continue

        if config.verify_output and has_syntax_errors(result.code, language):
            _stats.files_skipped += 1
            yield f"SKIP {filepath}: output not valid {language}"
            continue

        out = output_path(path, config.output_suffix)
        out.write_text(result.code, encoding="utf-8")
        file_stats.files_processed = 1
        file_stats.chars_before = len(source)
        file_stats.chars_after = len(result.code)
        _stats.merge(file_stats)
        _stats.files_written.append(str(out))

        if file_stats.strings_extracted:
            yield (
                f"{filepath}: extracted {file_stats.strings_extracted} strings"
                f" ({file_stats.occurrences_replaced} occurrences)"
                f" in {file_stats.scopes_changed} scopes -> {out}"
            )
        else:
            yield f"{filepath}: no strings extracted -> {out}"
