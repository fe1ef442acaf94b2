"""Abstract base class for string selection strategies."""

from typing import Dict, List

from ..namer import GENERIC_ALPHABET
from ..scopes import Scope
from ..strings import StringGroup


class SelectionPolicy:
    """Base class for all selection strategies.

    Subclasses decide which of a scope's string groups are worth replacing
    with a variable, and in which order they draw names.
    """

    name = "base"
    # Alphabet the Namer draws generated names from under this strategy.
    alphabet = GENERIC_ALPHABET

    def select(self, scope: Scope, groups: Dict[str, StringGroup]) -> List[StringGroup]:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"
