"""
tagver

Computes a deterministic Semantic Versioning 2.0 version for a source tree
from its git commit history and tags.
"""

from ._version import __version__
from .candidates import Candidate, find_candidates, select_candidate
from .commits import Commit
from .version import MajorMinor, Version, VersionPart
from .versioner import derive_version, resolve_version

__description__ = "Minimal SemVer versioning from git tags"

__all__ = [
    'Candidate',
    'Commit',
    'MajorMinor',
    'Version',
    'VersionPart',
    'derive_version',
    'find_candidates',
    'resolve_version',
    'select_candidate',
]
