"""
File connector.

Reads a YAML (or JSON) document mapping secret names to values.
"""

import logging
import os
from pathlib import Path
from typing import Optional

import yaml

from ..exceptions import ConnectorLoadError
from .base import BaseConnector

logger = logging.getLogger(__name__)


class FileConnector(BaseConnector):
    """Connector backed by a YAML/JSON mapping file.

    Relative paths are resolved against the working directory, which the
    orchestrator sets from its effect options.
    """

    def __init__(self, path: str, case_insensitive: bool = False, working_dir: Optional[str] = None):
        super().__init__(case_insensitive=case_insensitive, working_dir=working_dir)
        self.path = path

    @property
    def connector_type(self) -> str:
        return "file"

    def get_file_path(self) -> Path:
        path = Path(self.path)
        if path.is_absolute():
            return path
        return Path(self.get_working_dir() or os.getcwd()) / path

    def _read_source(self) -> dict:
        file_path = self.get_file_path()
        if not file_path.exists():
            raise ConnectorLoadError(
                f"Secrets file not found: {file_path}", connector=self.connector_type
            )
        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f) or {}
        except (OSError, UnicodeDecodeError, yaml.YAMLError) as e:
            raise ConnectorLoadError(
                f"Malformed secrets file {file_path}: {e}", connector=self.connector_type
            ) from e

        if not isinstance(data, dict):
            raise ConnectorLoadError(
                f"Malformed secrets file {file_path}: expected a mapping of secret names to values",
                connector=self.connector_type
            )
        logger.debug(f"Read {len(data)} entries from {file_path}")
        return {self.normalize_name(str(key)): value for key, value in data.items()}

    def _fetch(self, names):
        source = self._read_source()
        missing = [name for name in names if self.normalize_name(name) not in source]
        if missing:
            raise ConnectorLoadError(
                f"Missing secret in {self.get_file_path()}: {', '.join(missing)}",
                secret_name=missing[0], connector=self.connector_type
            )
        return {name: source[self.normalize_name(name)] for name in names}
