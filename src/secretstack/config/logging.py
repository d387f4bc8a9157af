"""
Centralized logging configuration.

Entry points call bootstrap_logging() once; library modules only ever use
`logging.getLogger(__name__)`.
"""

import logging
import logging.config
import os
import sys
from pathlib import Path
from typing import Optional

LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
LOG_FORMAT = '%(levelname)s: %(name)s: %(message)s'


def _find_logging_config() -> Optional[Path]:
    """
    Find the logging configuration file.

    Looks for logging.ini in the current working directory or the config/ subdirectory.

    Returns:
        Path to logging configuration file, or None if not found.
    """
    for candidate in (Path('logging.ini'), Path('config/logging.ini')):
        if candidate.exists():
            return candidate
    return None


def _get_env_log_level() -> Optional[str]:
    """Return LOG_LEVEL from the environment if it names a valid level."""
    env_log_level = os.environ.get('LOG_LEVEL', '').strip().upper()
    if not env_log_level:
        return None
    if env_log_level not in LOG_LEVELS:
        print(f"Warning: Invalid LOG_LEVEL '{env_log_level}', ignoring", file=sys.stderr)
        return None
    return env_log_level


def _apply_level(level_name: str) -> None:
    level = getattr(logging, level_name)
    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for handler in root_logger.handlers:
        if isinstance(handler, logging.StreamHandler):
            handler.setLevel(level)
    logging.getLogger('secretstack').setLevel(level)


def bootstrap_logging(verbose: bool = False, name: Optional[str] = None) -> None:
    """
    Bootstrap logging for the CLI.

    This function:
    1. Loads logging.ini (cwd or config/) with logging.config.fileConfig()
    2. Falls back to basicConfig on stderr when no usable file is found
    3. Applies the LOG_LEVEL environment variable override
    4. Forces DEBUG when verbose is set

    Args:
        verbose: Force DEBUG output (the --verbose flag)
        name: Optional logger name to report the configuration source on
    """
    config_path = _find_logging_config()

    if config_path is None:
        logging.basicConfig(level=logging.INFO, format=LOG_FORMAT, stream=sys.stderr)
    else:
        try:
            logging.config.fileConfig(str(config_path), disable_existing_loggers=False)
        except Exception as e:
            # Fallback to basic configuration if INI file is invalid
            print(f"Warning: Failed to load logging config from {config_path}: {e}", file=sys.stderr)
            print("Using basic logging configuration", file=sys.stderr)
            logging.basicConfig(level=logging.INFO, format=LOG_FORMAT, stream=sys.stderr)

    level_name = 'DEBUG' if verbose else _get_env_log_level()
    if level_name:
        _apply_level(level_name)

    logger = logging.getLogger(name) if name else logging.getLogger(__name__)
    logger.debug(f"Logging configured from {config_path or 'basicConfig'}")
