"""SecretManager: per-domain registry of connectors, providers and secret entries.

Registration happens once while the project configuration is built. After that
the manager is only read by the injection builder and the orchestrator.
"""

import logging
from typing import Dict, Optional, Tuple, Union

from .connectors.base import BaseConnector
from .exceptions import (
    DuplicateRegistrationError, DuplicateSecretError, UnknownRegistrationError,
    UnresolvedDefaultError
)
from .models import ResolvedSecret, SecretEntry
from .providers.base import BaseProvider

logger = logging.getLogger(__name__)


class SecretManager:
    """Binds named secrets to a connector (where the value comes from) and a
    provider (what artifact the value becomes).

    Example:
        manager = (SecretManager()
                   .add_connector('env', EnvConnector())
                   .add_provider('opaque', OpaqueSecretProvider('app-secret'))
                   .add_secret('DB_PASS')
                   .add_secret('API_KEY'))
    """

    def __init__(self):
        self._connectors: Dict[str, BaseConnector] = {}
        self._providers: Dict[str, BaseProvider] = {}
        self._secrets: Dict[str, ResolvedSecret] = {}
        self._default_connector: Optional[str] = None
        self._default_provider: Optional[str] = None

    def add_connector(self, name: str, instance: BaseConnector) -> 'SecretManager':
        if name in self._connectors:
            raise DuplicateRegistrationError(f"Connector '{name}' is already registered", connector=name)
        self._connectors[name] = instance
        logger.debug(f"Connector '{name}' added ({instance.connector_type})")
        return self

    def add_provider(self, name: str, instance: BaseProvider) -> 'SecretManager':
        if name in self._providers:
            raise DuplicateRegistrationError(f"Provider '{name}' is already registered", provider=name)
        instance.name = name
        self._providers[name] = instance
        logger.debug(f"Provider '{name}' added ({instance.__class__.__name__})")
        return self

    def set_default_connector(self, name: str) -> 'SecretManager':
        if name not in self._connectors:
            raise UnknownRegistrationError(
                f"Cannot set default connector: '{name}' is not registered", connector=name
            )
        self._default_connector = name
        return self

    def set_default_provider(self, name: str) -> 'SecretManager':
        if name not in self._providers:
            raise UnknownRegistrationError(
                f"Cannot set default provider: '{name}' is not registered", provider=name
            )
        self._default_provider = name
        return self

    def get_default_connector(self) -> Optional[str]:
        """Return the explicit default, or the only registered connector."""
        if self._default_connector is not None:
            return self._default_connector
        if len(self._connectors) == 1:
            return next(iter(self._connectors))
        return None

    def get_default_provider(self) -> Optional[str]:
        """Return the explicit default, or the only registered provider."""
        if self._default_provider is not None:
            return self._default_provider
        if len(self._providers) == 1:
            return next(iter(self._providers))
        return None

    def add_secret(self, name: Union[str, SecretEntry, dict], connector: Optional[str] = None,
                   provider: Optional[str] = None) -> 'SecretManager':
        """Register a secret entry.

        Args:
            name: Secret name, or a SecretEntry / dict with name, connector and provider
            connector: Connector name; defaults to the manager's default connector
            provider: Provider name; defaults to the manager's default provider

        Raises:
            DuplicateSecretError: If the name is already registered in this manager
            UnknownRegistrationError: If an explicit connector/provider is not registered
            UnresolvedDefaultError: If a name is omitted and no default is available
        """
        if isinstance(name, dict):
            name = SecretEntry(**name)
        if isinstance(name, SecretEntry):
            entry = name
        else:
            entry = SecretEntry(name=name, connector=connector, provider=provider)

        if entry.name in self._secrets:
            raise DuplicateSecretError(
                f"Secret '{entry.name}' is already registered", secret_name=entry.name
            )

        connector_name = self._resolve_entry_name(entry, 'connector', self._connectors,
                                                  self.get_default_connector())
        provider_name = self._resolve_entry_name(entry, 'provider', self._providers,
                                                 self.get_default_provider())

        self._secrets[entry.name] = ResolvedSecret(
            name=entry.name, connector=connector_name, provider=provider_name
        )
        logger.debug(f"Secret '{entry.name}' added (connector={connector_name}, provider={provider_name})")
        return self

    def _resolve_entry_name(self, entry: SecretEntry, field: str, registrations: dict,
                            default: Optional[str]) -> str:
        explicit = getattr(entry, field)
        if explicit is not None:
            if explicit not in registrations:
                raise UnknownRegistrationError(
                    f"Secret '{entry.name}' references unknown {field} '{explicit}'",
                    secret_name=entry.name, **{field: explicit}
                )
            return explicit
        if default is None:
            raise UnresolvedDefaultError(
                f"Secret '{entry.name}' has no {field} and no default {field} is set",
                secret_name=entry.name
            )
        return default

    def get_secrets(self) -> Dict[str, ResolvedSecret]:
        """Return entries in registration order, keyed by name."""
        return dict(self._secrets)

    def get_connectors(self) -> Dict[str, BaseConnector]:
        return dict(self._connectors)

    def get_providers(self) -> Dict[str, BaseProvider]:
        return dict(self._providers)

    def resolve_connector(self, name: Optional[str] = None) -> BaseConnector:
        """Look up a connector by name (or the default when name is None)."""
        name = name if name is not None else self.get_default_connector()
        if name is None or name not in self._connectors:
            raise UnknownRegistrationError(f"Connector '{name}' is not registered", connector=name)
        return self._connectors[name]

    def resolve_provider(self, name: Optional[str] = None) -> BaseProvider:
        """Look up a provider by name (or the default when name is None)."""
        name = name if name is not None else self.get_default_provider()
        if name is None or name not in self._providers:
            raise UnknownRegistrationError(f"Provider '{name}' is not registered", provider=name)
        return self._providers[name]

    def resolve_provider_for(self, secret_name: str) -> Tuple[BaseProvider, str]:
        """Return (provider instance, provider name) for a registered secret."""
        entry = self._secrets.get(secret_name)
        if entry is None:
            raise UnknownRegistrationError(
                f"Secret '{secret_name}' is not registered in this SecretManager",
                secret_name=secret_name
            )
        return self.resolve_provider(entry.provider), entry.provider
