"""
Project-wide registry of named SecretManagers.
"""

from typing import Dict

from .exceptions import DuplicateRegistrationError, UnknownRegistrationError
from .manager import SecretManager


class SecretRegistry:
    """Ordered collection of SecretManagers, keyed by name."""

    def __init__(self):
        self._registry: Dict[str, SecretManager] = {}

    def add(self, name: str, manager: SecretManager) -> 'SecretRegistry':
        if name in self._registry:
            raise DuplicateRegistrationError(f"Duplicate secret manager name: '{name}'", manager=name)
        self._registry[name] = manager
        return self

    def get(self, name: str) -> SecretManager:
        if name not in self._registry:
            raise UnknownRegistrationError(f"Secret manager not found for name: '{name}'", manager=name)
        return self._registry[name]

    def list(self) -> Dict[str, SecretManager]:
        return dict(self._registry)
