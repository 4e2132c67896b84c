"""
Semantic Versioning 2.0 value types.

Provides the immutable Version used throughout resolution, the MajorMinor
floor constraint and the VersionPart auto-increment selector.
"""

import re
from enum import Enum
from functools import total_ordering
from typing import Iterable, List, Optional, Sequence, Tuple

# https://semver.org/#is-there-a-suggested-regular-expression-regex-to-check-a-semver-string
_NUMBER = r'0|[1-9]\d*'
_PRE_RELEASE_IDENTIFIER = r'(?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*)'
_BUILD_IDENTIFIER = r'[0-9a-zA-Z-]+'

SEMVER_PATTERN = re.compile(
    rf'^(?P<major>{_NUMBER})\.(?P<minor>{_NUMBER})\.(?P<patch>{_NUMBER})'
    rf'(?:-(?P<pre_release>{_PRE_RELEASE_IDENTIFIER}(?:\.{_PRE_RELEASE_IDENTIFIER})*))?'
    rf'(?:\+(?P<build>{_BUILD_IDENTIFIER}(?:\.{_BUILD_IDENTIFIER})*))?$',
    re.ASCII,
)
PRE_RELEASE_IDENTIFIER_PATTERN = re.compile(rf'^{_PRE_RELEASE_IDENTIFIER}$', re.ASCII)
MAJOR_MINOR_PATTERN = re.compile(rf'^(?P<major>{_NUMBER})\.(?P<minor>{_NUMBER})$', re.ASCII)

DEFAULT_PRE_RELEASE_IDENTIFIERS: Tuple[str, ...] = ('alpha', '0')
VERSION_PART_VALID_VALUES = 'major, minor, or patch (default)'


def is_numeric_identifier(identifier: str) -> bool:
    """Return True when a pre-release identifier consists only of ASCII digits."""
    return identifier.isascii() and identifier.isdigit()


def is_valid_pre_release_identifier(identifier: str) -> bool:
    """Return True when text is a valid SemVer 2.0 pre-release identifier."""
    return bool(PRE_RELEASE_IDENTIFIER_PATTERN.fullmatch(identifier))


def _compare_identifiers(left: Sequence[str], right: Sequence[str]) -> int:
    """
    Compare two pre-release identifier lists by SemVer precedence.

    Both lists are assumed non-empty; the "no pre-release wins" rule is
    handled by the caller.

    Returns:
        int: -1, 0 or 1
    """
    for a, b in zip(left, right):
        a_numeric = is_numeric_identifier(a)
        b_numeric = is_numeric_identifier(b)

        if a_numeric and b_numeric:
            a_value, b_value = int(a), int(b)
            if a_value != b_value:
                return -1 if a_value < b_value else 1
        elif a_numeric:
            return -1
        elif b_numeric:
            return 1
        elif a != b:
            return -1 if a < b else 1

    if len(left) == len(right):
        return 0
    return -1 if len(left) < len(right) else 1


class VersionPart(Enum):
    """Part of a version bumped when a commit is not exactly on a tag."""

    PATCH = 'patch'
    MINOR = 'minor'
    MAJOR = 'major'

    @classmethod
    def try_parse(cls, text: Optional[str]) -> Optional['VersionPart']:
        """Parse a part name case-insensitively, returning None if unknown."""
        if not text:
            return None
        for part in (cls.PATCH, cls.MINOR, cls.MAJOR):
            if part.value == text.strip().lower():
                return part
        return None


@total_ordering
class Version:
    """
    An immutable SemVer 2.0 version.

    Equality, hashing and ordering follow SemVer precedence: major, minor,
    patch and pre-release identifiers. Build metadata and height never take
    part in comparisons. Height is an annotation recording how many commits
    separate the version's source tag from the commit being versioned.
    """

    __slots__ = ('_major', '_minor', '_patch', '_pre_release', '_build_metadata', '_height')

    def __init__(self, major: int = 0, minor: int = 0, patch: int = 0,
                 pre_release: Iterable[str] = (), build_metadata: str = '', height: int = 0):
        if major < 0 or minor < 0 or patch < 0:
            raise ValueError(f'Version numbers must be non-negative (got: {major}.{minor}.{patch})')
        if height < 0:
            raise ValueError(f'Height must be non-negative (got: {height})')

        self._major = major
        self._minor = minor
        self._patch = patch
        self._pre_release = tuple(str(identifier) for identifier in pre_release)
        self._build_metadata = build_metadata or ''
        self._height = height

    @classmethod
    def default(cls, pre_release: Iterable[str] = DEFAULT_PRE_RELEASE_IDENTIFIERS,
                major: int = 0, minor: int = 0) -> 'Version':
        """Return the version used when no tag applies, e.g. 0.0.0-alpha.0."""
        return cls(major, minor, 0, pre_release)

    @classmethod
    def try_parse(cls, text: Optional[str], prefix: str = '') -> Optional['Version']:
        """
        Parse a SemVer 2.0 string, optionally preceded by a prefix.

        The prefix is matched exactly and case-sensitively.

        Args:
            text: Text to parse, e.g. "v1.2.3-rc.1+build.5"
            prefix: Prefix to strip before parsing, e.g. "v"

        Returns:
            Version or None if the text is not a valid version
        """
        if text is None or not text.startswith(prefix):
            return None

        match = SEMVER_PATTERN.fullmatch(text[len(prefix):])
        if not match:
            return None

        pre_release = match.group('pre_release')
        return cls(
            int(match.group('major')),
            int(match.group('minor')),
            int(match.group('patch')),
            pre_release.split('.') if pre_release else (),
            match.group('build') or '',
        )

    @classmethod
    def parse(cls, text: str, prefix: str = '') -> 'Version':
        """Parse a SemVer 2.0 string, raising ValueError if it is invalid."""
        version = cls.try_parse(text, prefix)
        if version is None:
            raise ValueError(f'Invalid version format: {text}')
        return version

    @property
    def major(self) -> int:
        return self._major

    @property
    def minor(self) -> int:
        return self._minor

    @property
    def patch(self) -> int:
        return self._patch

    @property
    def pre_release(self) -> Tuple[str, ...]:
        return self._pre_release

    @property
    def build_metadata(self) -> str:
        return self._build_metadata

    @property
    def height(self) -> int:
        return self._height

    @property
    def is_pre_release(self) -> bool:
        return bool(self._pre_release)

    def _replace(self, **changes) -> 'Version':
        fields = {
            'major': self._major,
            'minor': self._minor,
            'patch': self._patch,
            'pre_release': self._pre_release,
            'build_metadata': self._build_metadata,
            'height': self._height,
        }
        fields.update(changes)
        return Version(**fields)

    def bump(self, part: VersionPart) -> 'Version':
        """
        Increment one part and zero every lower part.

        Pre-release identifiers and build metadata are dropped; the caller
        decides which identifiers the bumped version carries.
        """
        if part is VersionPart.MAJOR:
            return self._replace(major=self._major + 1, minor=0, patch=0, pre_release=(), build_metadata='')
        if part is VersionPart.MINOR:
            return self._replace(minor=self._minor + 1, patch=0, pre_release=(), build_metadata='')
        return self._replace(patch=self._patch + 1, pre_release=(), build_metadata='')

    def with_pre_release(self, identifiers: Iterable[str]) -> 'Version':
        return self._replace(pre_release=tuple(identifiers))

    def with_build_metadata(self, build_metadata: str) -> 'Version':
        return self._replace(build_metadata=build_metadata)

    def with_height(self, height: int) -> 'Version':
        return self._replace(height=height)

    def is_before(self, major: int, minor: int) -> bool:
        """Return True when this version's release line is below major.minor."""
        return (self._major, self._minor) < (major, minor)

    def _compare(self, other: 'Version') -> int:
        left = (self._major, self._minor, self._patch)
        right = (other._major, other._minor, other._patch)
        if left != right:
            return -1 if left < right else 1

        # A release outranks any pre-release of the same version
        if not self._pre_release or not other._pre_release:
            return (not self._pre_release) - (not other._pre_release)

        return _compare_identifiers(self._pre_release, other._pre_release)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._compare(other) == 0

    def __lt__(self, other) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._compare(other) < 0

    def __hash__(self) -> int:
        # numeric identifiers compare by value
        pre_release = tuple(
            int(identifier) if is_numeric_identifier(identifier) else identifier
            for identifier in self._pre_release
        )
        return hash((self._major, self._minor, self._patch, pre_release))

    def __str__(self) -> str:
        text = f'{self._major}.{self._minor}.{self._patch}'
        if self._pre_release:
            text += '-' + '.'.join(self._pre_release)
        if self._build_metadata:
            text += '+' + self._build_metadata
        return text

    def __repr__(self) -> str:
        return f"Version('{self}', height={self._height})"


class MajorMinor:
    """A minimum MAJOR.MINOR release line. 0.0 means no floor."""

    VALID_VALUES = 'MAJOR.MINOR, e.g. 1.0 or 2.3'

    __slots__ = ('_major', '_minor')

    def __init__(self, major: int = 0, minor: int = 0):
        if major < 0 or minor < 0:
            raise ValueError(f'MAJOR.MINOR must be non-negative (got: {major}.{minor})')
        self._major = major
        self._minor = minor

    @classmethod
    def try_parse(cls, text: Optional[str]) -> Optional['MajorMinor']:
        """Parse "MAJOR.MINOR", returning None if the text is malformed."""
        if not text:
            return None
        match = MAJOR_MINOR_PATTERN.fullmatch(text.strip())
        if not match:
            return None
        return cls(int(match.group('major')), int(match.group('minor')))

    @property
    def major(self) -> int:
        return self._major

    @property
    def minor(self) -> int:
        return self._minor

    @property
    def is_default(self) -> bool:
        return self._major == 0 and self._minor == 0

    def __eq__(self, other) -> bool:
        if not isinstance(other, MajorMinor):
            return NotImplemented
        return (self._major, self._minor) == (other._major, other._minor)

    def __hash__(self) -> int:
        return hash((self._major, self._minor))

    def __str__(self) -> str:
        return f'{self._major}.{self._minor}'

    def __repr__(self) -> str:
        return f"MajorMinor('{self}')"


MajorMinor.DEFAULT = MajorMinor(0, 0)


def parse_pre_release_identifiers(text: str) -> Optional[List[str]]:
    """
    Parse dot-separated pre-release identifiers.

    An empty string means no identifiers.

    Returns:
        List of identifiers, or None if any identifier is invalid
    """
    if text == '':
        return []
    identifiers = text.split('.')
    if not all(is_valid_pre_release_identifier(identifier) for identifier in identifiers):
        return None
    return identifiers
