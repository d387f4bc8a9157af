"""Project configuration loading.

Finds secretstack.yaml, validates it and imports the ProjectConfig it points at:

    project: myapp.secrets:project
    working_dir: .
    kubectl: kubectl
    secrets:
      conflict:
        strategies:
          intraProvider: autoMerge
"""

import importlib
import logging
import sys
from pathlib import Path
from typing import NamedTuple, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..exceptions import ConfigFileError, SecretStackError
from ..models import ConflictOptions, EffectOptions
from ..orchestrator import ProjectConfig

logger = logging.getLogger(__name__)

CONFIG_SEARCH_PATHS = [
    Path("secretstack.yaml"),
    Path("config/secretstack.yaml"),
]


class SecretsSection(BaseModel):
    model_config = ConfigDict(extra='forbid')

    conflict: Optional[ConflictOptions] = None


class CliConfig(BaseModel):
    """Contents of secretstack.yaml."""
    model_config = ConfigDict(extra='forbid')

    project: str
    working_dir: Optional[str] = None
    kubectl: str = "kubectl"
    secrets: SecretsSection = Field(default_factory=SecretsSection)


class LoadedProject(NamedTuple):
    config_path: Path
    cli_config: CliConfig
    project: ProjectConfig

    @property
    def effect_options(self) -> EffectOptions:
        working_dir = self.cli_config.working_dir
        return EffectOptions(working_dir=str(Path(working_dir).resolve()) if working_dir else None)


def find_config_file(config_path: Optional[str] = None) -> Path:
    """Return the config file to use: the explicit path, or the first one found in the search paths."""
    if config_path:
        path = Path(config_path)
        if not path.exists():
            raise ConfigFileError(f"Config file not found: {path}", config_path=str(path))
        return path

    for candidate in CONFIG_SEARCH_PATHS:
        if candidate.exists():
            logger.debug(f"Found project configuration: {candidate}")
            return candidate

    searched = ', '.join(str(path) for path in CONFIG_SEARCH_PATHS)
    raise ConfigFileError(f"No project configuration found (searched: {searched})")


def load_cli_config(path: Path) -> CliConfig:
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
    except (OSError, UnicodeDecodeError, yaml.YAMLError) as e:
        raise ConfigFileError(f"Failed to read {path}: {e}", config_path=str(path)) from e

    if not isinstance(data, dict):
        raise ConfigFileError(f"{path} must contain a mapping", config_path=str(path))

    try:
        return CliConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigFileError(f"Invalid configuration in {path}: {e}", config_path=str(path)) from e


def resolve_project(reference: str, search_dir: Optional[Path] = None) -> ProjectConfig:
    """Import a ProjectConfig from "module:attribute" or "module.attribute".

    The attribute may be a ProjectConfig or a zero-argument callable returning one.
    """
    if ':' in reference:
        module_path, attribute = reference.split(':', 1)
    elif '.' in reference:
        module_path, attribute = reference.rsplit('.', 1)
    else:
        raise ConfigFileError(
            f"Invalid project reference '{reference}': expected 'module:attribute' or 'module.attribute'"
        )

    # The project module normally lives next to the config file
    if search_dir is not None and str(search_dir) not in sys.path:
        sys.path.insert(0, str(search_dir))

    try:
        module = importlib.import_module(module_path)
        target = getattr(module, attribute)
        project = target() if callable(target) and not isinstance(target, ProjectConfig) else target
    except SecretStackError:
        raise
    except Exception as e:
        logger.error(f"Failed to load project from {reference}: {e}")
        raise ConfigFileError(f"Could not load project '{reference}': {e}") from e

    if not isinstance(project, ProjectConfig):
        raise ConfigFileError(
            f"Project '{reference}' must be a ProjectConfig (or a callable returning one), "
            f"got {type(project).__name__}"
        )
    return project


def load_project(config_path: Optional[str] = None) -> LoadedProject:
    """Find and load the project configuration.

    Conflict settings from the YAML file override those set on the ProjectConfig.

    Raises:
        ConfigFileError: If the file is missing, malformed, or the project cannot be imported
    """
    path = find_config_file(config_path)
    cli_config = load_cli_config(path)

    search_dir = Path.cwd()
    if path.parent.name == 'config':
        search_dir = path.parent.parent.resolve()
    elif config_path:
        search_dir = path.parent.resolve()

    project = resolve_project(cli_config.project, search_dir)
    if cli_config.secrets.conflict is not None:
        logger.debug("Conflict options overridden by configuration file")
        project = project.model_copy(update={'conflict': cli_config.secrets.conflict})

    logger.debug(f"Loaded project '{cli_config.project}' from {path}")
    return LoadedProject(path, cli_config, project)
