"""
Environment variable connector.

Reads secrets from os.environ using a configurable prefix, optionally loading
a .env file from the working directory first.
"""

import json
import logging
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from ..exceptions import ConnectorLoadError
from .base import BaseConnector, SecretValue

logger = logging.getLogger(__name__)


class EnvConnector(BaseConnector):
    """Connector that reads `<prefix><NAME>` environment variables."""

    DEFAULT_PREFIX = "SECRETSTACK_SECRET_"
    DOTENV_FILENAME = ".env"

    def __init__(self, prefix: Optional[str] = None, allow_dotenv: bool = True,
                 case_insensitive: bool = False, working_dir: Optional[str] = None):
        super().__init__(case_insensitive=case_insensitive, working_dir=working_dir)
        self.prefix = self.DEFAULT_PREFIX if prefix is None else prefix
        self.allow_dotenv = allow_dotenv

    @property
    def connector_type(self) -> str:
        return "env"

    def get_env_file_path(self) -> Path:
        return Path(self.get_working_dir() or os.getcwd()) / self.DOTENV_FILENAME

    def _fetch(self, names):
        if self.allow_dotenv:
            env_file = self.get_env_file_path()
            if env_file.exists():
                load_dotenv(env_file, override=False)
                logger.debug(f"Loaded .env file from {env_file}")

        staged = {}
        for name in names:
            expected_key = self.prefix + name
            if self.case_insensitive:
                match_key = next(
                    (key for key in os.environ if key.lower() == expected_key.lower()), None
                )
            else:
                match_key = expected_key

            if not match_key or not os.environ.get(match_key):
                raise ConnectorLoadError(
                    f"Missing environment variable: {expected_key}",
                    secret_name=name, connector=self.connector_type
                )
            staged[name] = self.try_parse_secret_value(os.environ[match_key])
        return staged

    @staticmethod
    def try_parse_secret_value(value: str) -> SecretValue:
        """Parse JSON flat objects into dicts; keep everything else as the raw string."""
        try:
            parsed = json.loads(value)
        except ValueError:
            return value

        if isinstance(parsed, dict) and all(
            isinstance(item, (str, int, float, bool)) or item is None for item in parsed.values()
        ):
            return parsed
        return value
