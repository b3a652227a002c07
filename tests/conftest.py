"""
Shared pytest fixtures for Ref Graph tests.

Provides in-memory commit records and repositories for unit tests, and
REAL git repositories (built with subprocess) for the git and CLI tests.
"""

import hashlib
import subprocess
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional

import pytest

from ref_graph.models import CommitRecord


def make_commit(seed: str, summary: Optional[str], body: str = "") -> CommitRecord:
    """Build a commit record with a deterministic 40-hex oid derived from seed."""
    oid = hashlib.sha1(seed.encode("utf-8")).hexdigest()
    message = summary or ""
    if body:
        message = f"{message}\n\n{body}"
    return CommitRecord(oid=oid, summary=summary, message=message + "\n")


class FakeRepository:
    """In-memory stand-in for GitRepository prefix lookups."""

    def __init__(self, commits: Iterable[CommitRecord] = ()):
        self.commits: Dict[str, CommitRecord] = {}
        self.lookups: List[str] = []
        self.prefetched: List[str] = []
        for commit in commits:
            self.add(commit)

    def add(self, commit: CommitRecord) -> CommitRecord:
        self.commits[commit.oid] = commit
        return commit

    def resolve_prefixes(self, prefixes: Iterable[str]) -> None:
        self.prefetched.extend(sorted(prefixes))

    def find_commit_by_prefix(self, prefix: str) -> Optional[CommitRecord]:
        self.lookups.append(prefix)
        matches = [c for oid, c in self.commits.items() if oid.startswith(prefix)]
        return matches[0] if len(matches) == 1 else None


class GitRepoBuilder:
    """Creates a real git repository and commits arbitrary messages to it."""

    def __init__(self, path: Path):
        self.path = path
        self.path.mkdir(parents=True, exist_ok=True)
        self.git("init", "-q")
        self.git("config", "user.name", "Test")
        self.git("config", "user.email", "test@test.com")
        self.git("config", "commit.gpgsign", "false")

    def git(self, *args: str, input: Optional[str] = None) -> str:
        result = subprocess.run(
            ["git", *args],
            cwd=self.path,
            input=input,
            capture_output=True,
            text=True,
            check=True,
        )
        return result.stdout

    def commit(self, message: str) -> str:
        """Create an empty commit with the given message; return its full hash."""
        self.git("commit", "-q", "--allow-empty", "-F", "-", input=message)
        return self.git("rev-parse", "HEAD").strip()

    def tag(self, name: str) -> None:
        self.git("tag", name)


@pytest.fixture
def commit_factory() -> Callable[..., CommitRecord]:
    return make_commit


@pytest.fixture
def fake_repository() -> FakeRepository:
    return FakeRepository()


@pytest.fixture
def git_repo(tmp_path) -> GitRepoBuilder:
    """A fresh git repository with a single root commit tagged 'base'."""
    builder = GitRepoBuilder(tmp_path / "repo")
    builder.commit("Initial commit")
    builder.tag("base")
    return builder
