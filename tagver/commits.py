"""
Commit graph model.

A minimal, read-only view of the history DAG: each commit knows its sha and
its parents in the order the version-control tool reports them.
"""

from typing import List, Optional


class Commit:
    """A commit identified by sha, with ordered parents (first parent first)."""

    __slots__ = ('sha', 'parents')

    def __init__(self, sha: str, parents: Optional[List['Commit']] = None):
        self.sha = sha
        self.parents: List['Commit'] = list(parents) if parents else []

    @property
    def is_root(self) -> bool:
        return not self.parents

    @property
    def is_merge(self) -> bool:
        return len(self.parents) > 1

    @property
    def short_sha(self) -> str:
        return self.sha[:7]

    def __eq__(self, other) -> bool:
        if not isinstance(other, Commit):
            return NotImplemented
        return self.sha == other.sha

    def __hash__(self) -> int:
        return hash(self.sha)

    def __repr__(self) -> str:
        return f"Commit('{self.short_sha}', parents={[parent.short_sha for parent in self.parents]})"
