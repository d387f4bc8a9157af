"""
Configuration: project file loading and logging bootstrap.
"""

from .loading import CliConfig, LoadedProject, find_config_file, load_cli_config, load_project, resolve_project
from .logging import bootstrap_logging

__all__ = [
    'CliConfig',
    'LoadedProject',
    'find_config_file',
    'load_cli_config',
    'load_project',
    'resolve_project',
    'bootstrap_logging',
]
