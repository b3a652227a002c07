"""
Git repository access for the reference graph.

Opens a repository, walks a commit range from the oldest commit to the
newest one, and looks commits up by (possibly abbreviated) hash.
"""

import logging
import subprocess
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from ..errors import CommitRangeError, RepositoryOpenError
from ..models import CommitRecord
from ..utils.git_runner import is_git_repository, run_git_command

logger = logging.getLogger(__name__)

# `git log -z` output is a flat NUL-separated sequence of (oid, subject, raw
# message) triples; a commit message cannot contain NUL. The format string
# uses git's %x escapes since command arguments cannot contain NUL.
_FIELD_SEP = "\x00"
_COMMIT_FORMAT = "%H%x00%s%x00%B"
_FIELDS_PER_COMMIT = 3


def _parse_commit_records(output: str) -> List[CommitRecord]:
    """Parse `git log -z`/`git show -z` output produced with _COMMIT_FORMAT.

    Raises:
        ValueError: If the output does not split into whole records
    """
    if not output:
        return []

    fields = output.split(_FIELD_SEP)
    # The terminator after the last commit leaves one empty trailing field
    if len(fields) % _FIELDS_PER_COMMIT == 1 and not fields[-1].strip():
        fields.pop()
    if len(fields) % _FIELDS_PER_COMMIT != 0:
        raise ValueError(
            f"Unexpected git output: {len(fields)} fields do not form commit records"
        )

    records = []
    for i in range(0, len(fields), _FIELDS_PER_COMMIT):
        oid, summary, message = fields[i : i + _FIELDS_PER_COMMIT]
        records.append(
            CommitRecord(oid=oid.strip(), summary=summary or None, message=message)
        )
    return records


class GitRepository:
    """Read-only view of a git repository."""

    def __init__(self, repo_dir: Path, timeout: Optional[float] = None):
        """Initialize the repository wrapper.

        Use GitRepository.open() to validate the path first.

        Args:
            repo_dir: Root (or any subdirectory) of the git working tree
            timeout: Timeout for individual git commands in seconds
        """
        self.repo_dir = Path(repo_dir)
        self.timeout = timeout
        self._by_oid: Dict[str, CommitRecord] = {}
        # prefix -> full oid, None when missing or ambiguous
        self._prefix_oids: Dict[str, Optional[str]] = {}

    @classmethod
    def open(cls, repo_dir: Path, timeout: Optional[float] = None) -> "GitRepository":
        """Open the repository at repo_dir.

        Raises:
            RepositoryOpenError: If the path is not a usable git repository
        """
        repo_dir = Path(repo_dir)
        if not repo_dir.is_dir():
            raise RepositoryOpenError(
                f"Failed to open repository: {repo_dir} is not a directory"
            )
        if not is_git_repository(repo_dir):
            raise RepositoryOpenError(
                f"Failed to open repository: {repo_dir} is not a git repository",
                user_guidance="Check the --repo path and that git is installed",
            )
        return cls(repo_dir, timeout=timeout)

    def walk(self, first_commit: str, last_commit: Optional[str] = None) -> List[CommitRecord]:
        """Return the commits of a range ordered from oldest to newest.

        With last_commit the range is first_commit..last_commit (first
        excluded, last included); without it, every commit reachable from
        first_commit is walked.

        Raises:
            CommitRangeError: If git cannot resolve or walk the range
        """
        if last_commit is not None:
            revision = f"{first_commit}..{last_commit}"
        else:
            revision = first_commit

        cmd = [
            "git",
            "log",
            "-z",
            "--reverse",
            "--topo-order",
            f"--format={_COMMIT_FORMAT}",
            revision,
            "--",
        ]
        try:
            result = run_git_command(cmd, cwd=self.repo_dir, timeout=self.timeout)
            commits = _parse_commit_records(result.stdout)
        except subprocess.CalledProcessError as e:
            raise CommitRangeError(
                f"Failed to walk range {revision}: {e.stderr.strip()}",
                user_guidance="Check --first-commit and --last-commit",
            ) from e
        except subprocess.TimeoutExpired as e:
            raise CommitRangeError(
                f"Timed out after {e.timeout}s walking range {revision}",
                user_guidance="Raise git_timeout in the configuration",
            ) from e
        except ValueError as e:
            raise CommitRangeError(f"Failed to read range {revision}: {e}") from e

        for commit in commits:
            self._by_oid[commit.oid] = commit
        logger.info(f"Walked {len(commits)} commits in {revision}")
        return commits

    def resolve_prefixes(self, prefixes: Iterable[str]) -> None:
        """Resolve many hash prefixes with a single `git cat-file` process.

        Answers are memoized and used by find_commit_by_prefix(), which then
        only starts git for commits outside the walked range. On failure
        nothing is memoized and lookups fall back to one git call each.
        """
        pending = sorted(
            {p for p in prefixes if p not in self._prefix_oids and p not in self._by_oid}
        )
        if not pending:
            return

        # Peeling to ^{commit} turns non-commit objects into "missing"
        request = "".join(f"{prefix}^{{commit}}\n" for prefix in pending)
        cmd = ["git", "cat-file", "--batch-check=%(objectname)"]
        try:
            result = run_git_command(
                cmd, cwd=self.repo_dir, check=False, timeout=self.timeout, input=request
            )
        except subprocess.TimeoutExpired:
            logger.warning(f"Timed out resolving {len(pending)} commit hashes")
            return

        answers = result.stdout.splitlines()
        if result.returncode != 0 or len(answers) != len(pending):
            logger.warning(
                f"git cat-file resolved {len(answers)} of {len(pending)} hashes "
                f"(exit {result.returncode}); looking them up one by one"
            )
            return

        for prefix, answer in zip(pending, answers):
            # Unresolvable input is echoed back as "<input> missing|ambiguous"
            parts = answer.split()
            if len(parts) == 1:
                self._prefix_oids[prefix] = parts[0]
            else:
                self._prefix_oids[prefix] = None
        logger.debug(f"Resolved {len(pending)} commit hashes in one batch")

    def find_commit_by_prefix(self, prefix: str) -> Optional[CommitRecord]:
        """Find a commit by full or abbreviated hash.

        Returns None when no commit matches or the prefix is ambiguous.
        Results are memoized for the lifetime of the repository object.
        """
        if prefix in self._by_oid:
            return self._by_oid[prefix]
        if prefix in self._prefix_oids:
            oid = self._prefix_oids[prefix]
            if oid is None:
                return None
            if oid in self._by_oid:
                return self._by_oid[oid]
            commit = self._show_commit(oid)
        else:
            commit = self._show_commit(prefix)

        self._prefix_oids[prefix] = commit.oid if commit is not None else None
        if commit is not None:
            self._by_oid[commit.oid] = commit
        return commit

    def _show_commit(self, revision: str) -> Optional[CommitRecord]:
        """Read one commit with `git show`; None if it cannot be read."""
        cmd = [
            "git",
            "show",
            "-z",
            "--no-patch",
            f"--format={_COMMIT_FORMAT}",
            f"{revision}^{{commit}}",
            "--",
        ]
        try:
            result = run_git_command(
                cmd, cwd=self.repo_dir, check=False, timeout=self.timeout
            )
        except subprocess.TimeoutExpired:
            logger.warning(f"Timed out looking up commit {revision}")
            return None

        if result.returncode != 0:
            logger.debug(f"git show {revision} failed: {result.stderr.strip()}")
            return None

        try:
            records = _parse_commit_records(result.stdout)
        except ValueError as e:
            logger.warning(f"Cannot read commit {revision}: {e}")
            return None
        return records[0] if records else None
