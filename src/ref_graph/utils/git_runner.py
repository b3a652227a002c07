"""
Git command runner with dubious ownership handling.

Repositories inspected by ref-graph are frequently shared checkouts owned by
another user (kernel trees on build hosts, CI workspaces), where git refuses
to operate with a "dubious ownership" error. Commands run through this module
mark the repository as a safe.directory for the duration of the call.
"""

import logging
import os
import subprocess
from pathlib import Path
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)


def get_git_environment(project_dir: Path) -> Dict[str, str]:
    """
    Get environment variables for git commands to handle dubious ownership.

    Args:
        project_dir: Path to the repository

    Returns:
        Dictionary of environment variables for git commands
    """
    env = os.environ.copy()

    env["GIT_CONFIG_COUNT"] = "1"
    env["GIT_CONFIG_KEY_0"] = "safe.directory"
    env["GIT_CONFIG_VALUE_0"] = str(project_dir.resolve())

    # Existing GIT_CONFIG_KEY_n entries are shifted up by one to make room
    # for safe.directory at index 0
    config_count = 1
    for key in os.environ:
        if not key.startswith("GIT_CONFIG_KEY_"):
            continue
        idx = key.replace("GIT_CONFIG_KEY_", "")
        if not idx.isdigit():
            continue
        new_idx = int(idx) + 1
        env[f"GIT_CONFIG_KEY_{new_idx}"] = os.environ[key]
        if f"GIT_CONFIG_VALUE_{idx}" in os.environ:
            env[f"GIT_CONFIG_VALUE_{new_idx}"] = os.environ[f"GIT_CONFIG_VALUE_{idx}"]
        config_count = max(config_count, new_idx + 1)

    env["GIT_CONFIG_COUNT"] = str(config_count)

    return env


def run_git_command(
    cmd: List[str],
    cwd: Path,
    check: bool = True,
    timeout: Optional[float] = None,
    **kwargs,
) -> subprocess.CompletedProcess:
    """
    Run a git command with proper environment handling for dubious ownership.

    Output is decoded as UTF-8; undecodable bytes in commit messages are
    replaced rather than aborting the walk.

    Args:
        cmd: Git command as a list (e.g., ["git", "log"])
        cwd: Working directory for the command
        check: Whether to raise CalledProcessError on non-zero exit
        timeout: Optional timeout in seconds
        **kwargs: Additional arguments to pass to subprocess.run

    Returns:
        CompletedProcess instance with the command result

    Raises:
        subprocess.CalledProcessError: If check=True and command fails
        subprocess.TimeoutExpired: If timeout is exceeded
        FileNotFoundError: If the git binary is not installed
    """
    if not cmd or cmd[0] != "git":
        raise ValueError("Command must start with 'git'")

    env = get_git_environment(cwd)
    if "env" in kwargs:
        env.update(kwargs.pop("env"))

    logger.debug(f"Running: {' '.join(cmd)}")
    return subprocess.run(
        cmd,
        cwd=cwd,
        check=check,
        capture_output=True,
        encoding="utf-8",
        errors="replace",
        timeout=timeout,
        env=env,
        **kwargs,
    )


def is_git_repository(project_dir: Path) -> bool:
    """
    Check if a directory is a git repository.

    Args:
        project_dir: Path to check

    Returns:
        True if the directory is a git repository, False otherwise
    """
    try:
        run_git_command(
            ["git", "rev-parse", "--git-dir"],
            cwd=project_dir,
            check=True,
        )
        return True
    except (subprocess.CalledProcessError, FileNotFoundError, NotADirectoryError):
        return False
