"""
Git collaborator.

Reads commits, tags and the current branch by invoking the git executable.
Every function degrades to None or an empty list when git is unavailable or
fails, so callers can fall back to a default version.
"""

import os
import subprocess
from typing import Dict, List, Optional, Tuple

from loguru import logger

from .commits import Commit

GIT_TIMEOUT = 30


def run_git(args: List[str], cwd: str, log=logger) -> Optional[str]:
    """
    Run a git command and return its standard output.

    Args:
        args: Arguments after "git", e.g. ['rev-parse', 'HEAD']
        cwd: Directory to run in
        log: Logger for command and failure details

    Returns:
        str: Standard output, or None if git could not be run or exited non-zero
    """
    command = ['git', *args]
    log.debug(f"Running git: {' '.join(command)} (in {cwd})")

    try:
        result = subprocess.run(
            command,
            capture_output=True,
            text=True,
            encoding='utf-8',
            errors='replace',
            timeout=GIT_TIMEOUT,
            cwd=cwd
        )
    except FileNotFoundError:
        log.warning('git executable not found in PATH')
        return None
    except subprocess.TimeoutExpired:
        log.warning(f"git {' '.join(args)} timed out after {GIT_TIMEOUT}s")
        return None
    except OSError as e:
        log.warning(f"Failed to run git {' '.join(args)}: {e}")
        return None

    if result.returncode != 0:
        log.debug(f"git {' '.join(args)} exited with code {result.returncode}: {result.stderr.strip()}")
        return None

    return result.stdout


def try_find_repository_root(start_path: str, log=logger) -> Optional[str]:
    """
    Walk upward from start_path to the directory containing ".git".

    A ".git" file (worktrees, submodules) counts as well as a directory.

    Returns:
        str: Absolute path of the repository root, or None if not in a repository
    """
    current_path = os.path.abspath(start_path)

    while True:
        if os.path.exists(os.path.join(current_path, '.git')):
            log.trace(f'Found git repository at {current_path}')
            return current_path

        parent_path = os.path.dirname(current_path)
        if parent_path == current_path:
            return None
        current_path = parent_path


def is_readable_repository(repo_root: str, log=logger) -> bool:
    """Return True when git runs and recognizes repo_root, with or without commits."""
    return run_git(['rev-parse', '--git-dir'], repo_root, log) is not None


def parse_log(output: str) -> Optional[Commit]:
    """
    Build a commit graph from `git log --pretty=format:"%H %P"` output.

    Returns:
        Commit: The first commit listed (HEAD), or None if the output is empty
    """
    commits: Dict[str, Commit] = {}
    head = None

    for line in output.splitlines():
        shas = line.split()
        if not shas:
            continue

        commit = commits.setdefault(shas[0], Commit(shas[0]))
        commit.parents.extend(commits.setdefault(sha, Commit(sha)) for sha in shas[1:])

        if head is None:
            head = commit

    return head


def try_get_head(repo_root: str, log=logger) -> Optional[Commit]:
    """Return the HEAD commit with its full reachable history, or None if there are no commits."""
    output = run_git(['log', '--pretty=format:%H %P'], repo_root, log)
    if output is None:
        return None
    return parse_log(output)


def parse_show_ref(output: str) -> List[Tuple[str, str]]:
    """
    Parse `git show-ref --tags --dereference` output into (name, sha) pairs.

    Annotated tags are listed twice, once for the tag object and once peeled
    with a "^{}" suffix; the peeled commit sha wins.
    """
    tags: Dict[str, str] = {}

    for line in output.splitlines():
        tokens = line.split(' ', 1)
        if len(tokens) != 2 or not tokens[1].startswith('refs/tags/'):
            continue

        sha, ref = tokens
        name = ref[len('refs/tags/'):]
        if name.endswith('^{}'):
            tags[name[:-3]] = sha
        else:
            tags.setdefault(name, sha)

    return list(tags.items())


def get_tags(repo_root: str, log=logger) -> List[Tuple[str, str]]:
    """Return every tag as (name, commit sha). An empty list if there are none."""
    # show-ref exits 1 when no tags exist
    output = run_git(['show-ref', '--tags', '--dereference'], repo_root, log)
    if output is None:
        return []
    return parse_show_ref(output)


def try_get_current_branch(repo_root: str, log=logger) -> Optional[str]:
    """Return the checked-out branch name, or None when HEAD is detached or unknown."""
    output = run_git(['rev-parse', '--abbrev-ref', 'HEAD'], repo_root, log)
    if output is None:
        log.debug('Failed to get current branch name.')
        return None

    branch_name = output.strip()
    if not branch_name or branch_name == 'HEAD':
        log.debug('Current branch name is empty or HEAD - likely detached HEAD state.')
        return None

    log.debug(f"Current branch name is '{branch_name}'")
    return branch_name
