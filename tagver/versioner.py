"""
Version resolution.

Turns the best candidate found in the commit history into the final version:
height-based bump, branch name injection, build metadata and the minimum
MAJOR.MINOR floor.
"""

import os
from typing import Iterable, Optional, Sequence

from loguru import logger

from . import git
from .candidates import Candidate, find_candidates, select_candidate
from .version import DEFAULT_PRE_RELEASE_IDENTIFIERS, MajorMinor, Version, VersionPart


def normalize_branch_name(branch_name: str) -> str:
    """Make a branch name usable as a pre-release identifier ("feature/x" -> "feature-x")."""
    return branch_name.replace('/', '-')


def apply_height(version: Version, height: int, auto_increment: VersionPart,
                 default_pre_release_identifiers: Sequence[str], ignore_height: bool = False,
                 log=logger) -> Version:
    """
    Bump a tagged version for commits made after the tag.

    A commit exactly on a tag (height 0), or any commit when ignore_height is
    set, keeps the tagged version. Otherwise the auto_increment part is bumped
    and the pre-release becomes the default identifiers followed by the height.
    """
    if ignore_height or height == 0:
        if height:
            log.debug(f'Ignoring height {height}, using {version} as-is')
        return version.with_height(height)

    bumped = (
        version.bump(auto_increment)
        .with_pre_release([*default_pre_release_identifiers, str(height)])
        .with_height(height)
    )
    log.debug(f'Bumped {auto_increment.value} of {version} to {bumped} for height {height}')
    return bumped


def apply_branch_name(version: Version, branch_name: Optional[str], branch_names_to_ignore: Iterable[str] = (),
                      log=logger) -> Version:
    """
    Put the current branch name at the front of the pre-release identifiers.

    A trailing identifier equal to the height is dropped; a pre-release that is
    nothing but the height is replaced by the branch name alone.
    """
    if not branch_name:
        log.debug('No current branch name available, not including it in the version')
        return version

    if branch_name in set(branch_names_to_ignore):
        log.debug(f"Branch '{branch_name}' is ignored, not including it in the version")
        return version

    identifier = normalize_branch_name(branch_name)
    height = str(version.height)
    pre_release = list(version.pre_release)

    if not pre_release or (version.height and pre_release == [height]):
        pre_release = [identifier]
    else:
        if version.height and pre_release[-1] == height:
            pre_release.pop()
        pre_release.insert(0, identifier)

    with_branch = version.with_pre_release(pre_release)
    log.debug(f"Including branch '{branch_name}' as '{identifier}': {with_branch}")
    return with_branch


def apply_minimum_major_minor(version: Version, candidate: Candidate, minimum_major_minor: MajorMinor,
                              default_pre_release_identifiers: Sequence[str], ignore_height: bool = False,
                              log=logger) -> Version:
    """
    Raise a version below the MAJOR.MINOR floor to floor.0 with the default identifiers.

    The height follows the default identifiers as in the height rule. Versions
    taken straight off a tag are never raised; an untagged root is.
    """
    if minimum_major_minor is None or minimum_major_minor.is_default:
        return version

    if candidate.tag is not None and candidate.height == 0:
        return version

    if not version.is_before(minimum_major_minor.major, minimum_major_minor.minor):
        return version

    pre_release = list(default_pre_release_identifiers)
    if version.height and not ignore_height:
        pre_release.append(str(version.height))

    raised = (
        Version(minimum_major_minor.major, minimum_major_minor.minor, 0, pre_release)
        .with_build_metadata(version.build_metadata)
        .with_height(version.height)
    )
    log.info(f'Bumping version to {raised} to satisfy {minimum_major_minor} range.')
    return raised


def derive_version(candidate: Candidate,
                   minimum_major_minor: MajorMinor = MajorMinor.DEFAULT,
                   auto_increment: VersionPart = VersionPart.PATCH,
                   default_pre_release_identifiers: Sequence[str] = DEFAULT_PRE_RELEASE_IDENTIFIERS,
                   branch_name: Optional[str] = None,
                   build_metadata: str = '',
                   ignore_height: bool = False,
                   include_branch_name: bool = False,
                   branch_names_to_ignore: Iterable[str] = (),
                   log=logger) -> Version:
    """
    Derive the final version from the selected candidate.

    Rules apply in order: height bump, branch name, build metadata, floor.
    Inputs are never modified.
    """
    version = apply_height(candidate.version, candidate.height, auto_increment,
                           default_pre_release_identifiers, ignore_height, log)

    if include_branch_name:
        version = apply_branch_name(version, branch_name, branch_names_to_ignore, log)

    if build_metadata:
        version = version.with_build_metadata(build_metadata)

    return apply_minimum_major_minor(version, candidate, minimum_major_minor,
                                     default_pre_release_identifiers, ignore_height, log)


def default_version(default_pre_release_identifiers: Sequence[str] = DEFAULT_PRE_RELEASE_IDENTIFIERS,
                    build_metadata: str = '') -> Version:
    """Version used when there is no repository or no commit: 0.0.0 with the default identifiers."""
    return Version.default(default_pre_release_identifiers).with_build_metadata(build_metadata)


def resolve_version(work_dir: str = '.',
                    tag_prefix: str = '',
                    minimum_major_minor: MajorMinor = MajorMinor.DEFAULT,
                    build_metadata: str = '',
                    auto_increment: VersionPart = VersionPart.PATCH,
                    default_pre_release_identifiers: Sequence[str] = DEFAULT_PRE_RELEASE_IDENTIFIERS,
                    ignore_height: bool = False,
                    include_branch_name: bool = False,
                    branch_names_to_ignore: Iterable[str] = (),
                    log=logger) -> Version:
    """
    Compute the version of the source tree containing work_dir.

    Never fails for environment problems: a directory outside any git
    repository, or a repository without commits, resolves to the default
    version.

    Args:
        work_dir: Any directory inside the repository
        tag_prefix: Prefix of version tags, e.g. "v"
        minimum_major_minor: Release line the version must not fall below
        build_metadata: SemVer build metadata to attach
        auto_increment: Part bumped for commits after a tag
        default_pre_release_identifiers: Identifiers used for untagged versions
        ignore_height: Use the tagged version even for commits after the tag
        include_branch_name: Put the current branch name in the pre-release
        branch_names_to_ignore: Branches never included in the version
        log: Logger for resolution details

    Returns:
        Version: The resolved version, with height annotation
    """
    default_pre_release_identifiers = list(default_pre_release_identifiers)

    repo_root = git.try_find_repository_root(work_dir, log)
    if repo_root is None:
        log.warning(f"'{os.path.abspath(work_dir)}' is not a valid Git working directory. Using default version.")
        return default_version(default_pre_release_identifiers, build_metadata)

    head = git.try_get_head(repo_root, log)
    if head is None:
        if git.is_readable_repository(repo_root, log):
            log.info('No commits found. Using default version.')
        else:
            log.warning(f"Failed to read Git history in '{repo_root}'. Using default version.")
        return default_version(default_pre_release_identifiers, build_metadata)

    tags = git.get_tags(repo_root, log)
    candidates = find_candidates(head, tags, tag_prefix, default_pre_release_identifiers, log)
    selected = select_candidate(candidates, log)

    branch_name = git.try_get_current_branch(repo_root, log) if include_branch_name else None

    version = derive_version(
        selected,
        minimum_major_minor=minimum_major_minor,
        auto_increment=auto_increment,
        default_pre_release_identifiers=default_pre_release_identifiers,
        branch_name=branch_name,
        build_metadata=build_metadata,
        ignore_height=ignore_height,
        include_branch_name=include_branch_name,
        branch_names_to_ignore=branch_names_to_ignore,
        log=log,
    )
    log.debug(f'Calculated version {version}.')

    return version
