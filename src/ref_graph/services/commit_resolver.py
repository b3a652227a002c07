"""Resolution of reference mentions to repository commits."""

import logging
from typing import Iterable, Optional

from ..models import CommitRecord, ReferenceMention
from .git_repository import GitRepository
from .reference_extractor import extract_references

logger = logging.getLogger(__name__)


class CommitResolver:
    """Resolves mentions by hash prefix against the whole repository.

    The hash is authoritative: a commit whose summary differs from the
    mentioned title is still accepted, with a warning.
    """

    def __init__(self, repository: GitRepository):
        self.repository = repository
        self.unresolved = 0
        self.mismatched = 0

    def prefetch(self, commits: Iterable[CommitRecord]) -> None:
        """Resolve the hashes mentioned by commits in one repository round trip."""
        self.repository.resolve_prefixes(
            {mention.hash for commit in commits for mention in extract_references(commit)}
        )

    def resolve(
        self, mention: ReferenceMention, referrer: Optional[CommitRecord] = None
    ) -> Optional[CommitRecord]:
        """Resolve a mention to a commit, or None if the hash is unknown.

        Args:
            mention: The mention to resolve
            referrer: Commit whose message contains the mention, for logging
        """
        commit = self.repository.find_commit_by_prefix(mention.hash)
        source = referrer.oid if referrer is not None else "<input>"

        if commit is None:
            self.unresolved += 1
            logger.warning(
                f"Commit {source} references a commit that cannot be found! "
                f"Hash: {mention.hash}, title: {mention.title!r}"
            )
            return None

        if commit.summary is None or commit.summary != mention.title:
            self.mismatched += 1
            logger.warning(
                f"Found commit with same hash but different title! "
                f"Real hash: {commit.oid}, entry hash: {mention.hash}, "
                f"real title: {commit.summary!r}, entry title: {mention.title!r}"
            )

        return commit
