"""Cumulative statistics for a single jsdedupe run."""

from dataclasses import dataclass, field
from typing import List


@dataclass
class RunStats:
    """Holds cumulative counts for a single jsdedupe run."""

    # File tracking
    files_processed: int = 0
    files_skipped: int = 0
    files_written: List[str] = field(default_factory=list)

    # Edit counts
    scopes_changed: int = 0
    strings_extracted: int = 0
    occurrences_replaced: int = 0

    # Size tracking, in characters
    chars_before: int = 0
    chars_after: int = 0

    def merge(self, other: "RunStats") -> None:
        """Add all counters from *other* into self (files_written is not merged)."""
        self.files_processed += other.files_processed
        self.files_skipped += other.files_skipped
        self.scopes_changed += other.scopes_changed
        self.strings_extracted += other.strings_extracted
        self.occurrences_replaced += other.occurrences_replaced
        self.chars_before += other.chars_before
        self.chars_after += other.chars_after

    @property
    def chars_saved(self) -> int:
        return self.chars_before - self.chars_after

    def format_summary(self) -> List[str]:
        """Return a list of lines forming the human-readable run summary."""
        lines = ["--- jsdedupe summary ---"]
        lines.append("files:")
        lines.append(f"  processed:           {self.files_processed}")
        lines.append(f"  skipped:             {self.files_skipped}")
        lines.append("edits:")
        lines.append(f"  scopes changed:      {self.scopes_changed}")
        lines.append(f"  strings extracted:   {self.strings_extracted}")
        lines.append(f"  occurrences:         {self.occurrences_replaced}")
        lines.append("size:")
        lines.append(f"  before:              {self.chars_before}")
        lines.append(f"  after:               {self.chars_after}")
        lines.append(f"  saved:               {self.chars_saved}")
        if self.files_written:
            flist = ", ".join(self.files_written)
            lines.append(f"files written ({len(self.files_written)}): {flist}")
        else:
            lines.append("files written: none")
        return lines
