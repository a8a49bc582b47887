"""Severity flags and per-metric threshold cutoffs."""

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum


class Flag(str, Enum):
    """Severity flag ordered OK < CAUTION < LIMIT."""

    OK = "OK"
    CAUTION = "CAUTION"
    LIMIT = "LIMIT"

    @property
    def rank(self) -> int:
        """Return the severity rank of the flag."""
        return _FLAG_RANKS[self]

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Flag):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other: object) -> bool:
        if not isinstance(other, Flag):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, Flag):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, Flag):
            return NotImplemented
        return self.rank >= other.rank


_FLAG_RANKS = {Flag.OK: 0, Flag.CAUTION: 1, Flag.LIMIT: 2}


@dataclass(frozen=True)
class Threshold:
    """Inclusive lower-bound cutoffs for a scale-sensitive metric."""

    caution: float
    limit: float


def worst_of(flags: Iterable[Flag]) -> Flag:
    """Return the most severe flag in a non-empty collection."""
    collected = list(flags)
    if not collected:
        raise ValueError("worst_of requires at least one flag")
    if Flag.LIMIT in collected:
        return Flag.LIMIT
    if Flag.CAUTION in collected:
        return Flag.CAUTION
    return Flag.OK


def flag_against(threshold: Threshold | None, amount: float) -> Flag:
    """Flag an amount against a threshold pair; no threshold means OK."""
    if threshold is None:
        return Flag.OK
    if amount >= threshold.limit:
        return Flag.LIMIT
    if amount >= threshold.caution:
        return Flag.CAUTION
    return Flag.OK
