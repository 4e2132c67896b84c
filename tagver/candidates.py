"""
Candidate discovery and selection.

Walks the commit graph from HEAD to every nearest tagged (or root) ancestor,
recording how far away each one is, then picks the single best candidate.
"""

from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from loguru import logger

from .commits import Commit
from .version import DEFAULT_PRE_RELEASE_IDENTIFIERS, Version


class Candidate:
    """
    A tagged or root commit reachable from HEAD.

    Height is the only mutable field: it is raised while traversal is still
    running if a longer path to the same commit turns up.
    """

    __slots__ = ('commit', 'height', 'tag', 'version')

    def __init__(self, commit: str, height: int, tag: Optional[str], version: Version):
        self.commit = commit
        self.height = height
        self.tag = tag
        self.version = version

    def format(self, tag_width: int = 0, version_width: int = 0, height_width: int = 0) -> str:
        tag = f"'{self.tag}'," if self.tag is not None else 'null,'
        version = f'{self.version},'
        return (
            f'{{ Commit: {self.commit[:7]}, '
            f'Tag: {tag.ljust(tag_width + 3)} '
            f'Version: {version.ljust(version_width + 1)} '
            f'Height: {str(self.height).rjust(height_width)} }}'
        )

    def __str__(self) -> str:
        return self.format()

    def __repr__(self) -> str:
        return f'Candidate({self.commit[:7]!r}, height={self.height}, tag={self.tag!r}, version={str(self.version)!r})'


def _map_version_tags(tags: Iterable[Tuple[str, str]], tag_prefix: str, log) -> Dict[str, List[Tuple[str, Version]]]:
    """Group tags that parse as versions by the sha they point at, preserving input order."""
    tags_by_sha: Dict[str, List[Tuple[str, Version]]] = {}

    for name, sha in tags:
        version = Version.try_parse(name, tag_prefix)
        if version is None:
            log.debug(f"Ignoring non-version tag '{name}' ({sha[:7]})")
            continue
        tags_by_sha.setdefault(sha, []).append((name, version))

    return tags_by_sha


def find_candidates(head: Commit, tags: Iterable[Tuple[str, str]], tag_prefix: str = '',
                    default_pre_release_identifiers: Sequence[str] = DEFAULT_PRE_RELEASE_IDENTIFIERS,
                    log=logger) -> List[Candidate]:
    """
    Find every version candidate reachable from a commit.

    Each path from head ends at the first commit carrying a version tag or at
    a root commit. Candidate heights are the longest distance from head over
    all paths that reach the candidate's commit.

    Args:
        head: Commit to start from
        tags: (name, sha) pairs; names must start with tag_prefix to count
        tag_prefix: Exact, case-sensitive prefix stripped from tag names
        default_pre_release_identifiers: Identifiers of the version assigned to
            untagged root commits
        log: Logger receiving traversal details

    Returns:
        List[Candidate]: Candidates in discovery order
    """
    tags_by_sha = _map_version_tags(tags, tag_prefix, log)

    max_height_seen: Dict[str, int] = {}
    candidates_by_sha: Dict[str, List[Candidate]] = {}
    candidates: List[Candidate] = []

    # explicit stack: histories can be far deeper than the recursion limit
    stack: List[Tuple[Commit, int, Optional[Commit]]] = [(head, 0, None)]
    checked = 0

    while stack:
        commit, height, child = stack.pop()
        previous_height = max_height_seen.get(commit.sha)

        if previous_height is not None and previous_height >= height:
            log.trace(f'History converges from {child.short_sha if child else "?"} to {commit.short_sha}')
            continue

        if previous_height is None:
            checked += 1
        else:
            log.trace(f'Found longer path to {commit.short_sha} (height {previous_height} -> {height})')
            for candidate in candidates_by_sha.get(commit.sha, []):
                candidate.height = height

        max_height_seen[commit.sha] = height
        emitted = candidates_by_sha.setdefault(commit.sha, [])

        version_tags = tags_by_sha.get(commit.sha)
        if version_tags:
            if not emitted:
                for name, version in version_tags:
                    candidate = Candidate(commit.sha, height, name, version)
                    log.trace(f'Found version tag {candidate}')
                    emitted.append(candidate)
                    candidates.append(candidate)
            continue

        if commit.is_root:
            if not emitted:
                candidate = Candidate(commit.sha, height, None, Version.default(default_pre_release_identifiers))
                log.trace(f'Found root commit {candidate}')
                emitted.append(candidate)
                candidates.append(candidate)
            continue

        if commit.is_merge:
            log.trace(f'History diverges from {commit.short_sha} to:')
            for parent in commit.parents:
                log.trace(f'  {parent.short_sha}')

        # reversed so the first parent is popped first
        for parent in reversed(commit.parents):
            stack.append((parent, height + 1, commit))

    log.debug(f'{checked:,} commits checked.')

    return candidates


def select_candidate(candidates: Sequence[Candidate], log=logger) -> Candidate:
    """
    Pick the candidate with the greatest version, preferring the smallest height on ties.

    Candidates are stably ordered by version ascending then height descending
    and the last one wins, so equal candidates resolve by input order.

    Raises:
        ValueError: If there are no candidates
    """
    if not candidates:
        raise ValueError('Cannot select a version from an empty candidate list')

    ordered = sorted(candidates, key=lambda candidate: (candidate.version, -candidate.height))

    tag_width = max(len(candidate.tag) if candidate.tag is not None else 2 for candidate in ordered)
    version_width = max(len(str(candidate.version)) for candidate in ordered)
    height_width = max(len(str(candidate.height)) for candidate in ordered)

    for candidate in ordered[:-1]:
        log.debug(f'Ignoring {candidate.format(tag_width, version_width, height_width)}.')

    selected = ordered[-1]
    padding = '    ' if len(ordered) > 1 else ' '
    log.info(f'Using{padding}{selected.format(tag_width, version_width, height_width)}.')

    return selected
