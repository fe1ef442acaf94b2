"""Strategy: extract strings that are long, frequent, or expensive to encode."""

import re
from typing import Dict, List

from ..namer import GENERIC_ALPHABET
from ..scopes import Scope
from ..strings import StringGroup
from .base import SelectionPolicy

DEFAULT_MIN_INSTANCES = 5
DEFAULT_MIN_LENGTH = 5

# Characters that are rare in ordinary text and so cost more after encoding.
INFREQUENT_CHARS = re.compile(r"[\\/jqxzJQXZ]")


class GenericPolicy(SelectionPolicy):
    """Select repeated groups that clear any one of three thresholds.

    A group needs at least two occurrences, and then any of: more than one
    infrequent character in its value, a value longer than ``min_length``,
    or more than ``min_instances`` occurrences.

    Selected groups are returned in ascending occurrence count (stable), so
    the least frequent strings draw the earliest names.  The order only
    changes which group gets which name.
    """

    name = "all"
    alphabet = GENERIC_ALPHABET

    def __init__(
        self,
        min_instances: int = DEFAULT_MIN_INSTANCES,
        min_length: int = DEFAULT_MIN_LENGTH,
    ) -> None:
        self.min_instances = min_instances
        self.min_length = min_length

    def is_eligible(self, group: StringGroup) -> bool:
        if group.count < 2:
            return False
        if len(INFREQUENT_CHARS.findall(group.value)) > 1:
            return True
        if len(group.value) > self.min_length:
            return True
        return group.count > self.min_instances

    def select(self, scope: Scope, groups: Dict[str, StringGroup]) -> List[StringGroup]:
        eligible = [g for g in groups.values() if self.is_eligible(g)]
        return sorted(eligible, key=lambda g: g.count)

    def __repr__(self) -> str:
        return (
            f"GenericPolicy(min_instances={self.min_instances},"
            f" min_length={self.min_length})"
        )
