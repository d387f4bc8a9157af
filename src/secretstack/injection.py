"""Deferred secret injection.

A SecretInjectionBuilder accumulates intent (strategy, target resource, env var
name) and only touches the owning stack when resolve_injection() commits it.
"""

import logging
from typing import TYPE_CHECKING, Callable, List, Optional

from pydantic import ValidationError

from .exceptions import (
    MissingResourceIdError, MissingStrategyError, ProviderValidationError, ResourceNotFoundError
)
from .models import SecretInjection, parse_strategy
from .providers.base import BaseProvider

if TYPE_CHECKING:
    from .manager import SecretManager
    from .stack import Stack

logger = logging.getLogger(__name__)


class SecretInjectionBuilder:
    """Binds one secret entry to one resource field via an injection strategy.

    Example:
        ctx.secrets('DB_PASS').inject('env', container_index=1).into_resource('api')
    """

    def __init__(self, stack: 'Stack', secret_name: str, provider: BaseProvider, provider_id: str,
                 default_resource_id: Optional[str] = None):
        self.stack = stack
        self.secret_name = secret_name
        self.provider = provider
        self.provider_id = provider_id
        self.default_resource_id = default_resource_id
        self._strategy = None
        self._resource_id_override: Optional[str] = None
        self._target_name: Optional[str] = None

    def inject(self, strategy=None, **options) -> 'SecretInjectionBuilder':
        """Choose the injection strategy. The last call wins.

        With no argument the provider's only supported strategy is used.
        """
        if strategy is None:
            supported = list(self.provider.supported_strategies)
            if len(supported) != 1:
                raise MissingStrategyError(
                    f"Secret '{self.secret_name}': provider {self.provider.label} supports "
                    f"{', '.join(supported) or 'no strategies'}, pick one with inject(kind)",
                    secret_name=self.secret_name, provider=self.provider.name
                )
            strategy = supported[0]

        try:
            self._strategy = parse_strategy(strategy, **options)
        except ValidationError as e:
            raise ProviderValidationError(
                f"Invalid injection strategy for secret '{self.secret_name}': {e}",
                secret_name=self.secret_name, provider=self.provider.name
            ) from e
        return self

    def into_resource(self, resource_id: str) -> 'SecretInjectionBuilder':
        self._resource_id_override = resource_id
        return self

    def for_name(self, name: str) -> 'SecretInjectionBuilder':
        """Inject the secret under a different variable name."""
        self._target_name = name
        return self

    def resolve_resource_id(self) -> str:
        if self._resource_id_override:
            return self._resource_id_override
        if self.default_resource_id:
            return self.default_resource_id

        kind = self.provider.target_kind
        candidates = self.stack.find_resource_ids_by_kind(kind)
        if len(candidates) != 1:
            found = f"found {', '.join(candidates)}" if candidates else "found none"
            raise MissingResourceIdError(
                f"Could not resolve resource id for secret '{self.secret_name}' from "
                f"provider target kind '{kind}' ({found})",
                secret_name=self.secret_name, provider=self.provider.name
            )
        return candidates[0]

    def build_injection(self) -> SecretInjection:
        """Validate the accumulated intent without touching the stack.

        Raises:
            MissingStrategyError: If inject() was never called
            MissingResourceIdError: If no target resource can be determined
            ResourceNotFoundError: If the target resource is not part of the stack
            UnsupportedStrategyError: If the provider cannot wire the strategy
        """
        if self._strategy is None:
            raise MissingStrategyError(
                f"No injection strategy defined for secret: {self.secret_name}",
                secret_name=self.secret_name, provider=self.provider.name
            )

        resource_id = self.resolve_resource_id()
        if not self.stack.has_resource(resource_id):
            raise ResourceNotFoundError(
                f"Secret '{self.secret_name}' targets unknown resource '{resource_id}' "
                f"in stack '{self.stack.name}'",
                resource_id=resource_id, secret_name=self.secret_name
            )

        path = self.provider.get_target_path(self._strategy)
        return SecretInjection(
            secret_name=self.secret_name,
            target_name=self._target_name or self.secret_name,
            resource_id=resource_id,
            strategy=self._strategy,
            provider_id=self.provider_id,
            path=path,
            provider=self.provider,
        )

    def resolve_injection(self) -> SecretInjection:
        """Validate the accumulated intent and register it on the stack."""
        injection = self.build_injection()
        self.stack.register_secret_injection(injection)
        logger.debug(f"Injection committed: {self.secret_name} -> {injection.resource_id}:{injection.path}")
        return injection


class SecretsInjectionContext:
    """Handed to the `configure` callback of Stack.use_secrets()."""

    def __init__(self, stack: 'Stack', manager: 'SecretManager', manager_name: str):
        self.stack = stack
        self.manager = manager
        self.manager_name = manager_name
        self.default_resource_id: Optional[str] = None
        self._builders: List[SecretInjectionBuilder] = []

    def set_default_resource_id(self, resource_id: str) -> None:
        self.default_resource_id = resource_id

    def secrets(self, secret_name: str) -> SecretInjectionBuilder:
        provider, provider_name = self.manager.resolve_provider_for(secret_name)
        builder = SecretInjectionBuilder(
            self.stack, secret_name, provider,
            provider_id=f"{self.manager_name}.{provider_name}",
            default_resource_id=self.default_resource_id,
        )
        self._builders.append(builder)
        return builder

    def build_all(self) -> List[SecretInjection]:
        """Validate every builder; nothing is registered on the stack."""
        return [builder.build_injection() for builder in self._builders]


InjectionConfigurer = Callable[[SecretsInjectionContext], None]
