"""Strategy: extract strings repeated beyond the compressor's back-reference window."""

from typing import Dict, List

from ..namer import FREQUENCY_ALPHABET
from ..scopes import Scope
from ..strings import StringGroup
from .base import SelectionPolicy

# DEFLATE can only refer back this many bytes.
DEFAULT_WINDOW = 32768


class GzipWindowPolicy(SelectionPolicy):
    """Select groups that gzip cannot deduplicate on its own.

    Two occurrences closer than the sliding window are already cheap after
    compression.  Once any consecutive pair of occurrences is farther apart
    than the window, the compressor loses sight of the earlier copy and a
    shared variable pays off.  Every such group is selected; there is no
    further ranking.
    """

    name = "gzip"
    alphabet = FREQUENCY_ALPHABET

    def __init__(self, window: int = DEFAULT_WINDOW) -> None:
        self.window = window

    def _exceeds_window(self, group: StringGroup) -> bool:
        starts = group.starts()
        return any(b - a > self.window for a, b in zip(starts, starts[1:]))

    def select(self, scope: Scope, groups: Dict[str, StringGroup]) -> List[StringGroup]:
        return [g for g in groups.values() if self._exceeds_window(g)]

    def __repr__(self) -> str:
        return f"GzipWindowPolicy(window={self.window})"
