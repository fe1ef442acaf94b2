"""Collision-free short identifier generation."""

from __future__ import annotations

from typing import Iterable, Set

# Compact letter set used by the generic strategy.
GENERIC_ALPHABET = "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ"

# Ordered by English letter frequency so generated names reuse characters that
# are already common in the output and compress well.
FREQUENCY_ALPHABET = "_etaoinshrdlcumwfgypbvkjxqzETAOINSHRDLCUMWFGYPBVKJXQZ$"

RESERVED_WORDS = frozenset(
    """
    abstract arguments async await boolean break byte case catch char class
    const continue debugger default delete do double else enum eval export
    extends false final finally float for function goto if implements import
    in instanceof int interface let long native new null package private
    protected public return short static super switch synchronized this throw
    throws transient true try typeof var void volatile while with yield
    undefined NaN Infinity of get set
    """.split()
)


def number_to_name(number: int, alphabet: str) -> str:
    """Spell *number* in base ``len(alphabet)`` using *alphabet* as the digits."""
    base = len(alphabet)
    name = ""
    while True:
        number, digit = divmod(number, base)
        name = alphabet[digit] + name
        if number == 0:
            return name


def seed_used_names(identifiers: Iterable[str]) -> Set[str]:
    """Return the initial used-name set for one file."""
    used = set(identifiers)
    used.update(RESERVED_WORDS)
    return used


class Namer:
    """Mint names that appear nowhere in *used*, reserving each one as it goes.

    *used* is shared by reference across every scope of a file, so names
    handed out for one scope are never handed out again for another.
    """

    def __init__(self, used: Set[str], alphabet: str = GENERIC_ALPHABET) -> None:
        self.used = used
        self.alphabet = alphabet
        self.attempt = 0

    def allocate(self) -> str:
        while True:
            candidate = number_to_name(self.attempt, self.alphabet)
            self.attempt += 1
            if candidate not in self.used:
                self.used.add(candidate)
                return candidate
