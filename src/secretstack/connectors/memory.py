"""
In-memory connector, mostly useful for tests and local experiments.
"""

from typing import Dict, Optional

from ..exceptions import ConnectorLoadError
from .base import BaseConnector, SecretValue


class InMemoryConnector(BaseConnector):
    """Connector that serves values from a dict given at construction time."""

    def __init__(self, values: Optional[Dict[str, SecretValue]] = None, case_insensitive: bool = False):
        super().__init__(case_insensitive=case_insensitive)
        self.values = dict(values or {})

    @property
    def connector_type(self) -> str:
        return "memory"

    def _fetch(self, names):
        source = {self.normalize_name(key): value for key, value in self.values.items()}
        missing = [name for name in names if self.normalize_name(name) not in source]
        if missing:
            raise ConnectorLoadError(
                f"Missing secret: {', '.join(missing)}",
                secret_name=missing[0], connector=self.connector_type
            )
        return {name: source[self.normalize_name(name)] for name in names}
