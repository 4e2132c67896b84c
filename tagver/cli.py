"""
Command-line interface for tagver.

Main entry point: sets up logging, loads configuration from arguments and
environment, resolves the version and prints it on standard output.
"""

import argparse
import sys
from typing import Optional

from loguru import logger
from rich.console import Console

from . import __version__
from .config import Config, load_config
from .logging_config import setup_logging
from .version import Version
from .versioner import resolve_version

# Log output shares stderr so stdout only carries the version
console = Console(stderr=True)


def parse_arguments(argv=None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog='tagver',
        description='Compute a SemVer 2.0 version from git tags and commit history'
    )

    parser.add_argument('work_dir', nargs='?', metavar='WORKING_DIRECTORY',
                        help='Directory inside the git repository (default: current directory)')

    # Version calculation
    parser.add_argument('-a', '--auto-increment', help='Part bumped after a tag: major, minor, or patch (default: patch)')
    parser.add_argument('-b', '--build-metadata', help='Build metadata appended to the version (e.g., build.42)')
    parser.add_argument('-d', '--default-pre-release-phase', help='Phase of untagged versions, e.g. "preview" gives preview.0 (default: alpha)')
    parser.add_argument('-p', '--default-pre-release-identifiers', help='Dot-separated identifiers of untagged versions (default: alpha.0)')
    parser.add_argument('--ignore-pre-release-identifiers', action='store_true', default=None,
                        help='Use no default pre-release identifiers')
    parser.add_argument('-m', '--minimum-major-minor', help='Minimum MAJOR.MINOR, e.g. 1.0 (default: 0.0)')
    parser.add_argument('-t', '--tag-prefix', help='Prefix of version tags, e.g. "v" (default: none)')
    parser.add_argument('--ignore-height', action='store_true', default=None,
                        help='Use the latest tagged version as-is for commits after the tag')

    # Branch names
    parser.add_argument('--include-branch-name', action='store_true', default=None,
                        help='Include the current branch name in the pre-release identifiers')
    parser.add_argument('--ignore-branch-names',
                        help='Semicolon or comma separated branch names never included (e.g., "main;develop")')

    parser.add_argument('-o', '--version-override', help='Print this version instead of calculating one')

    # Logging
    parser.add_argument('-v', '--verbosity', help='Verbosity: error, warn, info (default), debug, or trace')

    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')

    return parser.parse_args(argv)


def calculate_version(config: Config) -> Version:
    """Resolve the version for a validated configuration."""
    if config.version_override is not None:
        logger.info(f'Using version override {config.version_override}.')
        return config.version_override

    return resolve_version(
        work_dir=config.work_dir,
        tag_prefix=config.tag_prefix,
        minimum_major_minor=config.minimum_major_minor,
        build_metadata=config.build_metadata,
        auto_increment=config.auto_increment,
        default_pre_release_identifiers=config.default_pre_release_identifiers,
        ignore_height=config.ignore_height,
        include_branch_name=config.include_branch_name,
        branch_names_to_ignore=config.branch_names_to_ignore,
    )


def setup_application(argv=None) -> Optional[Config]:
    """Set up logging, parse arguments and load configuration."""
    # Set up logging with default level first
    setup_logging(console=console)

    args = parse_arguments(argv)

    # CLI args take precedence over env vars
    config = load_config(args)
    if config is None:
        return None

    # load_config reconfigures without the console; restore it at the chosen level
    setup_logging(config.log_level, console=console)

    return config


def main(argv=None) -> None:
    """Main entry point for the application."""
    config = setup_application(argv)
    if config is None:
        sys.exit(1)

    version = calculate_version(config)
    print(version)


if __name__ == '__main__':
    main()
