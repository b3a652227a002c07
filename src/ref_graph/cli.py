"""Command line interface for Ref Graph."""

import logging
import sys
from pathlib import Path
from typing import List, Optional, TextIO

import click
from rich.console import Console

from . import __version__
from .config import Config, ConfigManager
from .errors import RefGraphError
from .models import CommitRecord
from .reporting import Reporter
from .services.commit_resolver import CommitResolver
from .services.description_matcher import DescriptionMatcher
from .services.git_repository import GitRepository
from .services.reference_graph import ReferenceGraph, TraversalContext

logger = logging.getLogger(__name__)

error_console = Console(stderr=True)

LOG_LEVELS = [logging.WARNING, logging.INFO, logging.DEBUG]


def configure_logging(verbosity: int) -> None:
    """Send log records to stderr; stdout carries the report only."""
    level = LOG_LEVELS[min(verbosity, len(LOG_LEVELS) - 1)]
    logging.basicConfig(level=level, format="%(levelname)s:%(name)s:%(message)s")
    # basicConfig is a no-op when the root logger already has handlers
    logging.getLogger().setLevel(level)


def load_config(repo: Path, config_path: Optional[Path], no_notices: bool) -> Config:
    """Load the config file (explicit or discovered) and apply CLI overrides."""
    if config_path is not None:
        manager = ConfigManager(config_path)
    else:
        manager = ConfigManager.create_with_backtrack(repo)
    return manager.apply_overrides(no_notices=True if no_notices else None)


def read_known_commits(
    commits_file: TextIO,
    repository: GitRepository,
    inspected: List[CommitRecord],
    fuzzy: bool,
) -> List[CommitRecord]:
    """Match each line of the check-mode input to a commit."""
    matcher = DescriptionMatcher(repository, inspected, fuzzy=fuzzy)
    return matcher.match_lines(commits_file)


def run(
    repo: Path,
    first_commit: str,
    last_commit: Optional[str],
    check_commits: bool,
    commits_file: Optional[TextIO],
    config: Config,
    reporter: Reporter,
) -> None:
    """Build the reference graph and print the requested report.

    Raises:
        RefGraphError: On fatal setup errors
    """
    repository = GitRepository.open(repo, timeout=config.git_timeout)
    inspected = repository.walk(first_commit, last_commit)
    resolver = CommitResolver(repository)
    resolver.prefetch(inspected)
    graph = ReferenceGraph.build(inspected, resolver)
    if resolver.unresolved or resolver.mismatched:
        logger.info(
            f"{resolver.unresolved} references could not be resolved, "
            f"{resolver.mismatched} had a mismatching title"
        )

    include_notes = not config.no_notices
    context = TraversalContext()

    if check_commits:
        if commits_file is None:
            commits_file = click.get_text_stream("stdin")
        known = read_known_commits(
            commits_file, repository, inspected, config.fuzzy_title_match
        )
        logger.info(f"Checking {len(known)} commits")
        reporter.check(graph, known, include_notes, context)
    else:
        reporter.dump(graph, include_notes, context)


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "--repo",
    "-r",
    required=True,
    type=click.Path(path_type=Path),
    help="Git repository path",
)
@click.option(
    "--first-commit",
    required=True,
    help="Commit-ish of the first commit to be inspected (excluded with --last-commit)",
)
@click.option(
    "--last-commit",
    default=None,
    help="Commit-ish of the last commit to be inspected",
)
@click.option(
    "--check-commits",
    "-c",
    is_flag=True,
    help="Print summary results for the listed commits only",
)
@click.option(
    "--commits",
    "commits_file",
    type=click.File("r", encoding="utf-8"),
    default=None,
    help="Read commits from a file instead of stdin (requires --check-commits)",
)
@click.option(
    "--no-notices",
    is_flag=True,
    help='Exclude bare hash ("title") mentions; follow only "Fixes:" tags and reverts',
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Config file path (default: .ref-graph/config.json above the repository)",
)
@click.option(
    "--verbose", "-v", count=True, help="Verbose logging (-vv for debug output)"
)
@click.version_option(version=__version__, prog_name="ref-graph")
def cli(
    repo: Path,
    first_commit: str,
    last_commit: Optional[str],
    check_commits: bool,
    commits_file: Optional[TextIO],
    no_notices: bool,
    config_path: Optional[Path],
    verbose: int,
):
    """Find commits that fix, revert or mention commits of a range.

    \b
    Dump mode (default) lists, for every commit in the range, all commits
    that reference it directly or through a chain of references.

    \b
    Check mode (--check-commits) reads a list of already applied commits,
    one per line as a hash, a hash ("title") pair or a title, and reports
    the references missing from that list.

    \b
    EXAMPLES:
      ref-graph -r linux --first-commit v6.1 --last-commit v6.6
      git log --format=%h v6.1.1..stable | \\
        ref-graph -r linux --first-commit v6.1 --last-commit v6.6 -c
    """
    configure_logging(verbose)

    if commits_file is not None and not check_commits:
        raise click.UsageError("--commits requires --check-commits")

    try:
        config = load_config(repo, config_path, no_notices)
        run(
            repo=repo,
            first_commit=first_commit,
            last_commit=last_commit,
            check_commits=check_commits,
            commits_file=commits_file,
            config=config,
            reporter=Reporter(),
        )
    except RefGraphError as e:
        error_console.print(f"❌ {e}", style="red", markup=False)
        if e.user_guidance:
            error_console.print(f"💡 {e.user_guidance}", style="yellow", markup=False)
        sys.exit(1)


def main() -> None:
    cli()
