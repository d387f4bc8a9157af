"""
Kubernetes Secret providers.

Every provider here produces `kubectl` effects whose value is a v1/Secret
manifest and wires references to it into Deployment containers.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

from pydantic import BaseModel, ValidationError

from ..exceptions import InvalidSecretValueError, KeyNotAllowedError, ProviderValidationError
from ..models import (
    ConflictStrategy, EffectIdentity, EffectKind, PreparedEffect, SecretInjection
)
from ..utils import encode_value
from .base import BaseProvider
from .merge import merge_kubernetes_effects

logger = logging.getLogger(__name__)

CONTAINER_PATH = 'spec.template.spec.containers[{index}].{field}'
IMAGE_PULL_SECRETS_PATH = 'spec.template.spec.imagePullSecrets'


def parse_secret_value(model: type, value: Any, source: str) -> BaseModel:
    """Validate a raw secret value against a pydantic model.

    Raises:
        InvalidSecretValueError: If the value does not match the model
    """
    try:
        return model.model_validate(value)
    except ValidationError as e:
        raise InvalidSecretValueError(f"[{source}] Validation error: {e}") from e


class KubernetesSecretProvider(BaseProvider):
    """Base class for providers that emit a single v1/Secret.

    Args:
        name: Name of the generated Secret (metadata.name)
        namespace: Namespace of the generated Secret
    """

    target_kind = 'Deployment'
    # Keys accepted by the 'env' strategy; None means any key
    env_keys: Optional[Sequence[str]] = None

    def __init__(self, name: str, namespace: Optional[str] = None):
        super().__init__()
        if not name:
            raise ProviderValidationError(f"[{self.__class__.__name__}] Secret name cannot be empty")
        self.artifact_name = name
        self.namespace = namespace or 'default'

    def get_target_path(self, strategy) -> str:
        strategy = self.ensure_supported(strategy)
        if strategy.target_path:
            return strategy.target_path

        if strategy.kind in ('env', 'envFrom'):
            index = strategy.container_index if strategy.container_index is not None else 0
            return CONTAINER_PATH.format(index=index, field=strategy.kind)
        if strategy.kind == 'imagePullSecret':
            return IMAGE_PULL_SECRETS_PATH
        raise ProviderValidationError(
            f"[{self.__class__.__name__}] No target path for strategy: {strategy.kind}",
            provider=self.name
        )

    def get_injection_payload(self, injections: List[SecretInjection]) -> List[dict]:
        if not injections:
            return []

        kinds = []
        for injection in injections:
            if injection.strategy.kind not in kinds:
                kinds.append(injection.strategy.kind)
        if len(kinds) > 1:
            raise ProviderValidationError(
                f"[{self.__class__.__name__}] Mixed injection strategies are not allowed. "
                f"Expected all injections to use '{kinds[0]}' but found: {', '.join(kinds)}",
                provider=self.name
            )

        kind = self.ensure_supported(injections[0].strategy).kind
        if kind == 'env':
            return [self._env_entry(injection) for injection in injections]
        if kind == 'envFrom':
            return self._env_from_payload(injections)
        return [{'name': self.artifact_name}]

    def get_env_key(self, injection: SecretInjection) -> str:
        """Return the Secret key an env injection points at."""
        key = injection.strategy.key
        if not key:
            expected = f" Must be one of: {', '.join(self.env_keys)}." if self.env_keys else ""
            raise ProviderValidationError(
                f"[{self.__class__.__name__}] 'key' is required for env injection.{expected}",
                secret_name=injection.secret_name, provider=self.name
            )
        if self.env_keys and key not in self.env_keys:
            raise KeyNotAllowedError(
                f"[{self.__class__.__name__}] Key '{key}' is not allowed",
                keys=[key], allowed_keys=self.env_keys,
                secret_name=injection.secret_name, provider=self.name
            )
        return key

    def _env_entry(self, injection: SecretInjection) -> dict:
        return {
            'name': injection.target_name,
            'valueFrom': {
                'secretKeyRef': {
                    'name': self.artifact_name,
                    'key': self.get_env_key(injection),
                },
            },
        }

    def _env_from_payload(self, injections: List[SecretInjection]) -> List[dict]:
        prefixes = []
        for injection in injections:
            if injection.strategy.prefix not in prefixes:
                prefixes.append(injection.strategy.prefix)
        if len(prefixes) > 1:
            listed = ', '.join(prefix or '(none)' for prefix in prefixes)
            raise ProviderValidationError(
                f"[{self.__class__.__name__}] Multiple envFrom prefixes detected: {listed}. "
                f"All envFrom injections for the same secret must use the same prefix.",
                provider=self.name
            )

        entry: Dict[str, Any] = {}
        if prefixes[0]:
            entry['prefix'] = prefixes[0]
        entry['secretRef'] = {'name': self.artifact_name}
        return [entry]

    def build_secret(self, secret_name: str, data: Dict[str, str]) -> PreparedEffect:
        """Wrap already encoded data into a Secret manifest effect."""
        logger.debug(f"[{self.__class__.__name__}] Secret {self.namespace}/{self.artifact_name} "
                     f"prepared for '{secret_name}' (keys: {', '.join(data)})")
        return PreparedEffect(
            provider_name=self.name,
            secret_name=secret_name,
            kind=EffectKind.KUBECTL,
            value={
                'apiVersion': 'v1',
                'kind': 'Secret',
                'metadata': {
                    'name': self.artifact_name,
                    'namespace': self.namespace,
                },
                'type': self.secret_type,
                'data': data,
            },
            target_identity=EffectIdentity(kind='Secret', namespace=self.namespace, name=self.artifact_name),
        )

    def merge_effects(self, effects: List[PreparedEffect],
                      strategy: ConflictStrategy = ConflictStrategy.AUTO_MERGE) -> List[PreparedEffect]:
        return merge_kubernetes_effects(effects, strategy)


class OpaqueSecretProvider(KubernetesSecretProvider):
    """One string value per secret, stored under the secret's own name as key.

    Example:
        provider = OpaqueSecretProvider('app-secret')
        provider.prepare('DB_PASS', 's3cr3t')  # -> Secret app-secret {DB_PASS: czNjcjN0}
    """

    secret_type = 'Opaque'
    supported_strategies = ('env',)
    allow_merge = True

    def get_env_key(self, injection: SecretInjection) -> str:
        return injection.secret_name

    def prepare(self, name: str, value: Any) -> List[PreparedEffect]:
        if isinstance(value, (dict, list, tuple, set)) or value is None:
            raise InvalidSecretValueError(
                f"[OpaqueSecretProvider] Secret '{name}' must be a string value, got {type(value).__name__}",
                secret_name=name, provider=self.name
            )
        return [self.build_secret(name, {name: encode_value(str(value))})]
