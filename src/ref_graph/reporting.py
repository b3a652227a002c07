"""Display of reference graph query results.

Commit titles are arbitrary text and may contain Rich markup syntax such as
``[bold]`` or tabs, so report lines are written to the console's file as is
instead of being rendered.
"""

from typing import Iterable, Optional, Set

from rich.console import Console

from .models import CommitRecord
from .services.reference_graph import ReferenceGraph, TraversalContext


def create_report_console(**kwargs) -> Console:
    """Console for report output; lines are never wrapped or styled."""
    kwargs.setdefault("soft_wrap", True)
    return Console(markup=False, highlight=False, emoji=False, **kwargs)


class Reporter:
    """Formats dump-mode and check-mode reports."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or create_report_console()

    def _write(self, line: str) -> None:
        # Console.print would expand tabs in commit titles
        self.console.file.write(f"{line}\n")

    def dump(
        self,
        graph: ReferenceGraph,
        include_notes: bool,
        context: Optional[TraversalContext] = None,
    ) -> None:
        """Print the reachable set of every commit, in node index order."""
        context = context or TraversalContext()
        for node, commit in enumerate(graph.commits):
            references = graph.reachable_from(node, include_notes, context)
            if not references:
                self._write(f"Commit {commit.describe()} is not mentioned anywhere")
                continue

            self._write(f"Found references of commit {commit.describe()}")
            for source in references:
                self._write(f"  {graph.commit_at(source).describe()}")

    def check(
        self,
        graph: ReferenceGraph,
        known_commits: Iterable[CommitRecord],
        include_notes: bool,
        context: Optional[TraversalContext] = None,
    ) -> Set[str]:
        """Report references missing from the known commit list.

        Returns:
            Hashes of all probably missing commits
        """
        known_commits = list(known_commits)
        known = {commit.oid for commit in known_commits}
        context = context or TraversalContext()
        missing: Set[str] = set()

        for commit in known_commits:
            fixed = [
                reference
                for reference in graph.get_references(commit.oid, include_notes, context)
                if reference.oid not in known
            ]
            if fixed:
                self._write(
                    f"Commit {commit.describe()} has the following references "
                    f"(maybe indirect):"
                )
                for reference in fixed:
                    self._write(f"    {reference.describe()}")
            missing.update(reference.oid for reference in fixed)

        self._write(f"Summary: found {len(missing)} probably missing commits")
        return missing
