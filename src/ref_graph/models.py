"""Core data types shared by the extractor, resolver, graph and reporter."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

NO_SUMMARY = "<no summary>"


class RefType(Enum):
    """Kind of reference one commit makes to another.

    Ordered by strength of follow-up: NOTE < FIX < REVERT. The order is
    defined by ``rank`` and does not depend on declaration order.
    """

    NOTE = "note"
    FIX = "fix"
    REVERT = "revert"

    @property
    def rank(self) -> int:
        return _RANKS[self]

    def should_follow(self, include_notes: bool) -> bool:
        """Whether a traversal follows edges of this type."""
        if self is RefType.NOTE:
            return include_notes
        return True

    @staticmethod
    def strongest(*types: "RefType") -> "RefType":
        """Return the highest ranked of the given types."""
        if not types:
            raise ValueError("strongest() needs at least one RefType")
        return max(types, key=lambda ref_type: ref_type.rank)


_RANKS = {
    RefType.NOTE: 0,
    RefType.FIX: 1,
    RefType.REVERT: 2,
}


@dataclass(frozen=True)
class ReferenceMention:
    """An unresolved reference found inside a commit message."""

    hash: str
    title: str
    ref_type: RefType


@dataclass(frozen=True)
class CommitRecord:
    """Metadata of a single commit as read from the repository."""

    oid: str
    summary: Optional[str]  # None when the commit has no subject line
    message: str

    @property
    def title(self) -> str:
        return self.summary if self.summary is not None else NO_SUMMARY

    def describe(self) -> str:
        """Format as ``<oid> ("<title>")``."""
        return f'{self.oid} ("{self.title}")'
