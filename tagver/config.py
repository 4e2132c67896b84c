"""
Configuration management for tagver.

Handles environment variable loading, validation, and provides a centralized
configuration object for the command-line tool.
"""

import os
import re
from dataclasses import dataclass, field
from typing import List, Optional

from dotenv import load_dotenv
from loguru import logger

from .logging_config import VERBOSITY_VALID_VALUES, parse_verbosity
from .version import (
    DEFAULT_PRE_RELEASE_IDENTIFIERS,
    VERSION_PART_VALID_VALUES,
    MajorMinor,
    Version,
    VersionPart,
    is_valid_pre_release_identifier,
    parse_pre_release_identifiers,
)

# Load environment variables from .env file
load_dotenv()


def get_env(env_key: str) -> Optional[str]:
    """
    Look up an environment variable ignoring case.

    When several variables differ only by case, the first in ordinal order wins.
    """
    if env_key in os.environ:
        return os.environ[env_key]
    wanted = env_key.lower()
    for key in sorted(os.environ):
        if key.lower() == wanted:
            return os.environ[key]
    return None


def get_config_value(cli_args, field_name: str, env_key: str, default, value_type: type = str):
    """
    Get configuration value with proper precedence: CLI args > env vars > defaults.

    Args:
        cli_args: CLI arguments object or None
        field_name: Name of the CLI argument field
        env_key: Environment variable key (matched case-insensitively)
        default: Default value if neither CLI nor env var is set
        value_type: Type to convert the value to (str, bool)

    Returns:
        The configuration value converted to the specified type
    """
    cli_value = getattr(cli_args, field_name, None) if cli_args else None
    if cli_value is not None:
        return cli_value

    env_value = get_env(env_key) or ''

    # Handle boolean conversion specially
    if value_type == bool:
        if env_value.strip().lower() in ('true', '1', 'yes'):
            return True
        elif env_value.strip().lower() in ('false', '0', 'no'):
            return False
        return default

    if not env_value:
        return default

    try:
        return value_type(env_value)
    except (ValueError, TypeError):
        return default


def get_config_value_str(cli_args, field_name: str, env_key: str, default: Optional[str] = '') -> Optional[str]:
    """Get string configuration value."""
    return get_config_value(cli_args, field_name, env_key, default, str)


def get_config_value_bool(cli_args, field_name: str, env_key: str, default: bool = False) -> bool:
    """Get boolean configuration value."""
    return get_config_value(cli_args, field_name, env_key, default, bool)


def split_branch_names(text: Optional[str]) -> List[str]:
    """Split a ";" or "," delimited list of branch names."""
    if not text:
        return []
    return [name.strip() for name in re.split(r'[;,]', text) if name.strip()]


@dataclass
class Config:
    """Configuration object containing all settings for one resolution."""

    work_dir: str
    tag_prefix: str
    minimum_major_minor: MajorMinor
    build_metadata: str
    auto_increment: VersionPart
    default_pre_release_identifiers: List[str]
    ignore_height: bool
    include_branch_name: bool
    branch_names_to_ignore: List[str] = field(default_factory=list)

    # Logging
    log_level: str = 'INFO'

    version_override: Optional[Version] = None


PRE_RELEASE_SETTINGS = (
    ('ignore_pre_release_identifiers', 'TAGVER_IGNORE_PRE_RELEASE_IDENTIFIERS', bool),
    ('default_pre_release_identifiers', 'TAGVER_DEFAULT_PRE_RELEASE_IDENTIFIERS', str),
    ('default_pre_release_phase', 'TAGVER_DEFAULT_PRE_RELEASE_PHASE', str),
)


def _resolve_pre_release_identifiers(cli_args, validation_errors: list) -> List[str]:
    """
    Work out the default pre-release identifiers.

    Every command-line setting outranks every environment setting. Within
    one source the order is: ignore flag, explicit identifiers, phase.
    Nothing set anywhere gives the built-in default.
    """
    cli_values = [getattr(cli_args, field_name, None) if cli_args else None
                  for field_name, _, _ in PRE_RELEASE_SETTINGS]
    env_values = [get_config_value(None, field_name, env_key, None, value_type)
                  for field_name, env_key, value_type in PRE_RELEASE_SETTINGS]

    for ignore, identifiers_text, phase in (cli_values, env_values):
        if ignore:
            return []

        if identifiers_text is not None:
            identifiers = parse_pre_release_identifiers(identifiers_text)
            if identifiers is None:
                validation_errors.append(
                    f"Invalid default pre-release identifiers '{identifiers_text}'. "
                    'Use dot-separated SemVer identifiers, e.g. alpha.0'
                )
                return list(DEFAULT_PRE_RELEASE_IDENTIFIERS)
            return identifiers

        if phase:
            if not is_valid_pre_release_identifier(phase):
                validation_errors.append(f"Invalid default pre-release phase '{phase}'.")
                return list(DEFAULT_PRE_RELEASE_IDENTIFIERS)
            return [phase, '0']

    return list(DEFAULT_PRE_RELEASE_IDENTIFIERS)


def load_config(cli_args=None) -> Optional[Config]:
    """
    Load and validate configuration from CLI arguments and environment variables.
    CLI arguments take precedence over environment variables.

    Args:
        cli_args: Parsed CLI arguments or None

    Returns:
        Config: Validated configuration object, or None if validation failed
    """
    validation_errors = []

    work_dir = getattr(cli_args, 'work_dir', None) if cli_args else None
    work_dir = work_dir or '.'
    if not os.path.isdir(work_dir):
        validation_errors.append(f"Working directory '{work_dir}' does not exist.")

    auto_increment_text = get_config_value_str(cli_args, 'auto_increment', 'TAGVER_AUTO_INCREMENT', '')
    auto_increment = VersionPart.PATCH
    if auto_increment_text:
        auto_increment = VersionPart.try_parse(auto_increment_text)
        if auto_increment is None:
            validation_errors.append(
                f"Invalid auto increment '{auto_increment_text}'. Valid values are {VERSION_PART_VALID_VALUES}"
            )

    minimum_text = get_config_value_str(cli_args, 'minimum_major_minor', 'TAGVER_MINIMUM_MAJOR_MINOR', '')
    minimum_major_minor = MajorMinor.DEFAULT
    if minimum_text:
        minimum_major_minor = MajorMinor.try_parse(minimum_text)
        if minimum_major_minor is None:
            validation_errors.append(
                f"Invalid minimum MAJOR.MINOR '{minimum_text}'. Valid values are {MajorMinor.VALID_VALUES}"
            )

    # Handle verbosity (case insensitive aliases)
    verbosity = get_config_value_str(cli_args, 'verbosity', 'TAGVER_VERBOSITY', 'info')
    log_level = parse_verbosity(verbosity)
    if log_level is None:
        validation_errors.append(f"Invalid verbosity '{verbosity}'. Valid values are {VERBOSITY_VALID_VALUES}.")
    else:
        # Update logging level early so debug statements work
        from .logging_config import setup_logging
        setup_logging(log_level)

    override_text = get_config_value_str(cli_args, 'version_override', 'TAGVER_VERSION_OVERRIDE', '')
    version_override = None
    if override_text:
        version_override = Version.try_parse(override_text)
        if version_override is None:
            validation_errors.append(f"Invalid version override '{override_text}'.")

    default_pre_release_identifiers = _resolve_pre_release_identifiers(cli_args, validation_errors)

    if validation_errors:
        logger.error('Configuration Error:')
        for i, error_msg in enumerate(validation_errors, 1):
            logger.error(f'   {i}. {error_msg}')
        return None

    config = Config(
        work_dir=work_dir,
        tag_prefix=get_config_value_str(cli_args, 'tag_prefix', 'TAGVER_TAG_PREFIX', ''),
        minimum_major_minor=minimum_major_minor,
        build_metadata=get_config_value_str(cli_args, 'build_metadata', 'TAGVER_BUILD_METADATA', ''),
        auto_increment=auto_increment,
        default_pre_release_identifiers=default_pre_release_identifiers,
        ignore_height=get_config_value_bool(cli_args, 'ignore_height', 'TAGVER_IGNORE_HEIGHT', False),
        include_branch_name=get_config_value_bool(cli_args, 'include_branch_name', 'TAGVER_INCLUDE_BRANCH_NAME', False),
        branch_names_to_ignore=split_branch_names(
            get_config_value_str(cli_args, 'ignore_branch_names', 'TAGVER_IGNORE_BRANCH_NAMES', '')
        ),
        log_level=log_level,
        version_override=version_override,
    )

    # Output debug information
    logger.debug(f'WORK_DIR = {config.work_dir}')
    logger.debug(f'TAG_PREFIX = {config.tag_prefix!r}')
    logger.debug(f'MINIMUM_MAJOR_MINOR = {config.minimum_major_minor}')
    logger.debug(f'BUILD_METADATA = {config.build_metadata!r}')
    logger.debug(f'AUTO_INCREMENT = {config.auto_increment.value}')
    logger.debug(f"DEFAULT_PRE_RELEASE_IDENTIFIERS = {'.'.join(config.default_pre_release_identifiers)!r}")
    logger.debug(f'IGNORE_HEIGHT = {config.ignore_height}')
    logger.debug(f'INCLUDE_BRANCH_NAME = {config.include_branch_name}')
    logger.debug(f'IGNORE_BRANCH_NAMES = {config.branch_names_to_ignore}')
    if config.version_override is not None:
        logger.debug(f'VERSION_OVERRIDE = {config.version_override}')

    return config
