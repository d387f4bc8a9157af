"""
Abstract interface for secret connectors.

A connector retrieves raw secret values from an external source. Callers
collect every name a connector must supply and issue a single load() before
any get().
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, Optional

from ..exceptions import ConnectorLoadError, NotLoadedError
from ..utils import is_valid_secret_name, mask_value

logger = logging.getLogger(__name__)

SecretValue = Any


class BaseConnector(ABC):
    """Abstract base class for connectors.

    Subclasses implement _fetch(); load() takes care of name validation,
    case handling and all-or-nothing commit of the loaded values.
    """

    def __init__(self, case_insensitive: bool = False, working_dir: Optional[str] = None):
        self.case_insensitive = case_insensitive
        self._working_dir = working_dir
        self._loaded: Dict[str, SecretValue] = {}

    @property
    def connector_type(self) -> str:
        """Return the type of connector (e.g., 'env', 'memory')."""
        return self.__class__.__name__

    def get_working_dir(self) -> Optional[str]:
        return self._working_dir

    def set_working_dir(self, path: Optional[str]) -> None:
        self._working_dir = path

    def normalize_name(self, name: str) -> str:
        return name.lower() if self.case_insensitive else name

    def load(self, names: Iterable[str]) -> None:
        """Load every requested name from the source.

        Either all names become available through get() or the call fails with
        ConnectorLoadError and nothing new is committed.

        Raises:
            ConnectorLoadError: If a name is malformed or absent from the source
        """
        names = list(names)
        for name in names:
            if not is_valid_secret_name(name):
                raise ConnectorLoadError(
                    f"Invalid secret name '{name}': only letters, digits and underscore are allowed",
                    secret_name=name, connector=self.connector_type
                )

        staged = self._fetch(names)

        for name in names:
            logger.debug(f"Loaded secret: {name} -> {self.normalize_name(name)}")
            logger.debug(f"Value: {mask_value(staged[name])}")
        self._loaded.update({self.normalize_name(name): staged[name] for name in names})

    def get(self, name: str) -> SecretValue:
        """Get a previously loaded value.

        Raises:
            NotLoadedError: If the name was never successfully loaded
        """
        key = self.normalize_name(name)
        if key not in self._loaded:
            raise NotLoadedError(
                f"Secret '{name}' not loaded. Did you call load()?",
                secret_name=name, connector=self.connector_type
            )
        return self._loaded[key]

    @abstractmethod
    def _fetch(self, names: list) -> Dict[str, SecretValue]:
        """Return a mapping with a value for every name, keyed by the requested name.

        Raises:
            ConnectorLoadError: If any name cannot be found
        """
        pass
