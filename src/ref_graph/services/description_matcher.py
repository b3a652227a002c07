"""
Matching of free-text commit descriptions to walked commits.

The check workflow reads commit lists produced by other tools and by hand,
so each line may be a hash, a ``hash ("title")`` pair, or just a title that
is only approximately right.
"""

import logging
import re
from typing import Dict, Iterable, List, Optional, Sequence

from ..models import CommitRecord
from .git_repository import GitRepository

logger = logging.getLogger(__name__)

DESCRIPTION_RE = re.compile(r'^(?:Fixes: )?([0-9a-f]{4,64}) ?\("(.+)"\)$')
HASH_RE = re.compile(r"^[0-9a-f]{4,64}$")


class DescriptionMatcher:
    """Resolves input lines to commits by hash, hash+title or title."""

    def __init__(
        self,
        repository: GitRepository,
        commits: Sequence[CommitRecord],
        fuzzy: bool = True,
    ):
        """Initialize the matcher.

        Args:
            repository: Repository used for hash lookups
            commits: Walked commits, oldest to newest
            fuzzy: Whether to fall back to substring title matching
        """
        self.repository = repository
        self.commits = list(commits)
        self.fuzzy = fuzzy
        # A title shared by several commits maps to the newest of them
        self.title_positions: Dict[str, int] = {
            commit.summary: idx
            for idx, commit in enumerate(self.commits)
            if commit.summary is not None
        }

    def match(self, line: str) -> Optional[CommitRecord]:
        """Resolve one input line; None if nothing matches."""
        line = line.strip()
        if not line:
            return None

        described = DESCRIPTION_RE.match(line)
        if described is not None:
            return self._match_hash(described.group(1), line)
        if HASH_RE.match(line):
            return self._match_hash(line, line)
        return self._match_title(line)

    def match_lines(self, lines: Iterable[str]) -> List[CommitRecord]:
        """Resolve every line, skipping blank and unmatched ones."""
        matched = []
        for line in lines:
            commit = self.match(line)
            if commit is not None:
                matched.append(commit)
        return matched

    def _match_hash(self, prefix: str, line: str) -> Optional[CommitRecord]:
        commit = self.repository.find_commit_by_prefix(prefix)
        if commit is None:
            logger.warning(f"Unknown commit hash {prefix} in line {line!r}")
        return commit

    def _match_title(self, title: str) -> Optional[CommitRecord]:
        position = self.title_positions.get(title)
        if position is not None:
            return self.commits[position]

        if self.fuzzy:
            for commit in self.commits:
                if commit.summary is None:
                    continue
                if title in commit.summary or commit.summary in title:
                    logger.warning(
                        f"Imprecise match: {title!r} matched to "
                        f"{commit.oid} ({commit.summary!r})"
                    )
                    return commit

        logger.warning(f"Line {title!r} cannot be matched to any commit")
        return None
