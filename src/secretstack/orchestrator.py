"""SecretsOrchestrator: collect, validate, prepare, merge and apply secrets.

Managers are walked in a fixed order (stacks in registration order, managers
within a stack in registration order, then the project-level secret spec) and
entries within a manager in registration order, so the first failure and every
conflict message are reproducible.
"""

import logging
from enum import Enum
from typing import Any, Dict, List, NamedTuple, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

from .connectors.base import BaseConnector
from .exceptions import (
    ApplyExecutionError, ConfigError, MergeConflictError, ResolutionError,
    SecretStackError, UnknownRegistrationError
)
from .manager import SecretManager
from .models import (
    ConflictOptions, ConflictScope, ConflictStrategy, EffectIdentity, EffectOptions, PreparedEffect
)
from .providers.base import BaseProvider
from .registry import SecretRegistry
from .stack import Stack

module_logger = logging.getLogger(__name__)


class ProjectConfig(BaseModel):
    """Everything the orchestrator needs to know about a project."""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    stacks: Dict[str, Stack] = Field(default_factory=dict)
    secret_spec: Optional[Union[SecretManager, SecretRegistry]] = None
    conflict: ConflictOptions = Field(default_factory=ConflictOptions)


class OrchestratorState(str, Enum):
    IDLE = 'idle'
    VALIDATED = 'validated'
    PREPARED = 'prepared'
    MERGED = 'merged'


class ManagerEntry(NamedTuple):
    """A collected manager and where it came from."""
    id: str
    manager: SecretManager
    stack_name: Optional[str] = None


class SecretsOrchestrator:
    """Top-level coordinator of the secret pipeline.

    Example:
        orchestrator = SecretsOrchestrator.create(project)
        orchestrator.validate()
        artifacts = orchestrator.apply(KubectlExecutor())
    """

    def __init__(self, project: ProjectConfig, logger: Optional[logging.Logger] = None,
                 effect_options: Optional[EffectOptions] = None):
        self.project = project
        self.logger = logger or module_logger
        self.effect_options = effect_options or EffectOptions()
        self.conflict = project.conflict
        self.state = OrchestratorState.IDLE
        self._provider_cache: Dict[Tuple[str, str], BaseProvider] = {}
        self._entries: Dict[str, ManagerEntry] = {}

        relaxed = self.conflict.relaxed_scopes()
        if self.conflict.strict and relaxed:
            raise ConfigError(
                "Conflict option 'strict' forbids relaxed strategies, but these scopes are relaxed: "
                + ', '.join(scope.value for scope in relaxed)
            )

    @classmethod
    def create(cls, project: ProjectConfig, logger: Optional[logging.Logger] = None,
               effect_options: Optional[EffectOptions] = None) -> 'SecretsOrchestrator':
        return cls(project, logger=logger, effect_options=effect_options)

    # Collection

    def collect(self) -> List[ManagerEntry]:
        """Return every SecretManager of the project in processing order.

        Raises:
            ConfigError: If the project defines no SecretManager at all
        """
        entries: List[ManagerEntry] = []
        seen = set()

        def add(entry: ManagerEntry):
            if id(entry.manager) in seen:
                self.logger.debug(f"Skipping '{entry.id}': manager already collected")
                return
            seen.add(id(entry.manager))
            entries.append(entry)

        for stack_name, stack in self.project.stacks.items():
            for name, manager in stack.get_secret_managers().items():
                add(ManagerEntry(f"{stack_name}.{name}", manager, stack_name))

        secret_spec = self.project.secret_spec
        if isinstance(secret_spec, SecretManager):
            add(ManagerEntry('default', secret_spec))
        elif isinstance(secret_spec, SecretRegistry):
            for name, manager in secret_spec.list().items():
                add(ManagerEntry(name, manager))

        if not entries:
            raise ConfigError(
                "No secret manager found. Attach one to a stack with use_secrets() "
                "or set 'secret_spec' on the project"
            )
        self._entries = {entry.id: entry for entry in entries}
        self.logger.debug(f"Found {len(entries)} secret managers")
        return entries

    # Resolution

    def resolve_connector(self, entry: ManagerEntry, secret_name: str, connector_name: str) -> BaseConnector:
        try:
            connector = entry.manager.resolve_connector(connector_name)
        except UnknownRegistrationError as e:
            raise ResolutionError(
                f"Unknown connector '{connector_name}' for secret '{secret_name}' in manager '{entry.id}'",
                manager=entry.id, secret_name=secret_name, connector=connector_name
            ) from e
        if connector.get_working_dir() is None and self.effect_options.working_dir is not None:
            connector.set_working_dir(self.effect_options.working_dir)
        return connector

    def resolve_provider_by_name(self, entry: ManagerEntry, provider_name: str,
                                 secret_name: Optional[str] = None) -> BaseProvider:
        """Resolve a provider, caching it per (manager id, provider name)."""
        key = (entry.id, provider_name)
        if key not in self._provider_cache:
            try:
                self._provider_cache[key] = entry.manager.resolve_provider(provider_name)
            except UnknownRegistrationError as e:
                raise ResolutionError(
                    f"Unknown provider '{provider_name}' for secret '{secret_name}' in manager '{entry.id}'",
                    manager=entry.id, secret_name=secret_name, provider=provider_name
                ) from e
        return self._provider_cache[key]

    def _provider_for(self, manager_id: Optional[str], provider_name: Optional[str]) -> BaseProvider:
        entry = self._entries.get(manager_id)
        if entry is None:
            raise ResolutionError(
                f"Effect from provider '{provider_name}' belongs to unknown manager '{manager_id}'",
                manager=manager_id, provider=provider_name
            )
        return self.resolve_provider_by_name(entry, provider_name)

    def load_secrets(self, entry: ManagerEntry) -> Dict[str, Any]:
        """Resolve and load every secret of one manager.

        Names are batched per connector so each connector sees one load() call.
        """
        secrets = entry.manager.get_secrets()
        batches: Dict[str, Tuple[BaseConnector, List[str]]] = {}

        for name, secret in secrets.items():
            connector = self.resolve_connector(entry, name, secret.connector)
            self.resolve_provider_by_name(entry, secret.provider, name)
            batches.setdefault(secret.connector, (connector, []))[1].append(name)

        resolved: Dict[str, Any] = {}
        for connector_name, (connector, names) in batches.items():
            self.logger.debug(f"[{entry.id}] Loading {len(names)} secrets from connector '{connector_name}'")
            connector.load(names)
            for name in names:
                resolved[name] = connector.get(name)

        # Registration order, not connector order
        return {name: resolved[name] for name in secrets}

    # Pipeline stages

    def validate(self) -> None:
        """Resolve every secret and load it from its connector, without preparing artifacts."""
        self.logger.info("Collecting secret managers...")
        entries = self.collect()

        self.logger.info("Validating secret managers...")
        for entry in entries:
            self.load_secrets(entry)
        self.state = OrchestratorState.VALIDATED
        self.logger.debug("Secret managers validated successfully")

    def prepare(self) -> List[PreparedEffect]:
        """Load every secret and have its provider turn it into artifacts."""
        self.logger.debug("Preparing secret effects...")
        effects: List[PreparedEffect] = []

        for entry in self.collect():
            values = self.load_secrets(entry)
            for name, secret in entry.manager.get_secrets().items():
                provider = self.resolve_provider_by_name(entry, secret.provider, name)
                for effect in provider.prepare(name, values[name]):
                    effects.append(effect.model_copy(update={
                        'manager_id': entry.id,
                        'provider_name': effect.provider_name or secret.provider,
                    }))

        self.state = OrchestratorState.PREPARED
        self.logger.debug(f"Prepared {len(effects)} effects")
        return effects

    def merge_effects(self, effects: List[PreparedEffect]) -> List[PreparedEffect]:
        """Group effects by identity and merge each group under its scope's strategy.

        Raises:
            MergeConflictError: If a group cannot be merged under the active policy
        """
        groups: Dict[EffectIdentity, List[PreparedEffect]] = {}
        for effect in effects:
            groups.setdefault(effect.target_identity, []).append(effect)

        merged: List[PreparedEffect] = []
        for identity, group in groups.items():
            if len(group) == 1:
                merged.extend(group)
                continue
            merged.extend(self._merge_group(identity, group))

        self.state = OrchestratorState.MERGED
        self.logger.debug(f"Merged {len(effects)} effects into {len(merged)} artifacts")
        return merged

    def _merge_group(self, identity: EffectIdentity, group: List[PreparedEffect]) -> List[PreparedEffect]:
        managers = _unique(effect.manager_id for effect in group)
        provider_keys = _unique((effect.manager_id, effect.provider_name) for effect in group)
        provider_names = _unique(effect.provider_name for effect in group)

        if len(provider_keys) == 1:
            scope = ConflictScope.INTRA_PROVIDER
        elif len(managers) == 1:
            scope = ConflictScope.CROSS_PROVIDER
        else:
            scope = ConflictScope.CROSS_MANAGER
        strategy = self.conflict.strategy_for(scope)

        self.logger.debug(f"Merging {len(group)} effects for {identity} ({scope.value}: {strategy.value})")
        details = dict(
            artifact_name=identity.name, namespace=identity.namespace, scope=scope.value,
            providers=provider_names, managers=managers
        )
        overlapping = _overlapping_keys(group)
        origin = (f"providers [{', '.join(str(name) for name in provider_names)}] "
                  f"in managers [{', '.join(str(manager) for manager in managers)}]")

        if strategy == ConflictStrategy.ERROR:
            keys_text = f"; overlapping keys: {', '.join(overlapping)}" if overlapping else ""
            raise MergeConflictError(
                f"[conflict:{scope.value}] {identity} is produced by {len(group)} effects from "
                f"{origin} and the '{scope.value}' strategy is 'error'{keys_text}",
                key=overlapping[0] if overlapping else None, **details
            )

        providers = [self._provider_for(manager_id, provider_name)
                     for manager_id, provider_name in provider_keys]

        if strategy == ConflictStrategy.AUTO_MERGE:
            refusing = [provider.name for provider in providers if not provider.allow_merge]
            if refusing:
                raise MergeConflictError(
                    f"[conflict:{scope.value}] {identity} from {origin} cannot be auto-merged: "
                    f"provider(s) {', '.join(refusing)} do not allow merging",
                    **details
                )

        try:
            return providers[0].merge_effects(group, strategy)
        except MergeConflictError as e:
            e.scope = scope.value
            e.providers = provider_names
            e.managers = managers
            e.guidance = e._generate_guidance()
            raise

    def apply(self, executor=None) -> List[PreparedEffect]:
        """Prepare and merge every artifact, then hand them to the executor in merge order.

        Nothing is executed unless preparation and merging both succeeded.

        Raises:
            ApplyExecutionError: If the executor fails on an artifact
        """
        artifacts = self.merge_effects(self.prepare())
        if executor is None:
            return artifacts

        for artifact in artifacts:
            try:
                executor.execute(artifact)
            except SecretStackError:
                raise
            except Exception as e:
                raise ApplyExecutionError(
                    f"Failed to apply {artifact.target_identity}: {e}",
                    artifact_name=artifact.target_identity.name, provider=artifact.provider_name,
                    manager=artifact.manager_id
                ) from e
        self.logger.info(f"Applied {len(artifacts)} artifacts")
        return artifacts


def _unique(items) -> list:
    result = []
    for item in items:
        if item not in result:
            result.append(item)
    return result


def _effect_keys(effect: PreparedEffect) -> List[str]:
    data = effect.value.get('data')
    if data is None:
        data = effect.value.get('rawData')
    return list(data or {})


def _overlapping_keys(group: List[PreparedEffect]) -> List[str]:
    seen = set()
    overlapping = []
    for effect in group:
        for key in _effect_keys(effect):
            if key in seen and key not in overlapping:
                overlapping.append(key)
            seen.add(key)
    return overlapping
