"""Pydantic models for the secret pipeline.

Defines secret entries, injection strategies, prepared effects, committed
injections and the conflict policy.
"""

from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


# Secret entries
class SecretEntry(BaseModel):
    """A secret as registered on a SecretManager (connector/provider may be omitted)."""
    name: str
    connector: Optional[str] = None
    provider: Optional[str] = None


class ResolvedSecret(BaseModel):
    """A secret entry with its connector and provider names resolved."""
    model_config = ConfigDict(frozen=True)

    name: str
    connector: str
    provider: str


# Injection strategies
class EnvStrategy(BaseModel):
    """Inject a single key as an environment variable."""
    kind: Literal['env'] = 'env'
    container_index: Optional[int] = None
    target_path: Optional[str] = None
    key: Optional[str] = None


class EnvFromStrategy(BaseModel):
    """Inject every key of the artifact as environment variables."""
    kind: Literal['envFrom'] = 'envFrom'
    container_index: Optional[int] = None
    target_path: Optional[str] = None
    prefix: Optional[str] = None


class VolumeStrategy(BaseModel):
    """Mount the artifact as files."""
    kind: Literal['volume'] = 'volume'
    mount_path: str
    container_index: Optional[int] = None
    target_path: Optional[str] = None


class AnnotationStrategy(BaseModel):
    kind: Literal['annotation'] = 'annotation'
    target_path: Optional[str] = None


class ImagePullSecretStrategy(BaseModel):
    kind: Literal['imagePullSecret'] = 'imagePullSecret'
    target_path: Optional[str] = None


class PluginStrategy(BaseModel):
    """Free-form strategy for third-party providers."""
    model_config = ConfigDict(extra='allow')

    kind: Literal['plugin'] = 'plugin'
    action: Optional[str] = None
    args: List[Any] = []
    target_path: Optional[str] = None


InjectionStrategy = Annotated[
    Union[EnvStrategy, EnvFromStrategy, VolumeStrategy, AnnotationStrategy,
          ImagePullSecretStrategy, PluginStrategy],
    Field(discriminator='kind'),
]

_strategy_adapter = TypeAdapter(InjectionStrategy)

STRATEGY_KINDS = ('env', 'envFrom', 'volume', 'annotation', 'imagePullSecret', 'plugin')


def parse_strategy(strategy: Union[str, Dict[str, Any], BaseModel], **options) -> BaseModel:
    """Build an injection strategy from a kind string, a dict or an existing model.

    Examples:
        parse_strategy('env', container_index=2)
        parse_strategy({'kind': 'envFrom', 'prefix': 'DB_'})
    """
    if isinstance(strategy, BaseModel):
        if options:
            return strategy.model_copy(update=options)
        return strategy
    if isinstance(strategy, str):
        return _strategy_adapter.validate_python({'kind': strategy, **options})
    return _strategy_adapter.validate_python({**strategy, **options})


# Prepared effects
class EffectKind(str, Enum):
    """Kind of artifact a provider produces."""
    KUBECTL = 'kubectl'   # apply-manifest
    CUSTOM = 'custom'     # custom-payload


class EffectIdentity(BaseModel):
    """Identity of a generated artifact; merge groups are keyed by it."""
    model_config = ConfigDict(frozen=True)

    kind: str
    namespace: str = 'default'
    name: str

    def __str__(self) -> str:
        return f"{self.kind}:{self.namespace}/{self.name}"


class PreparedEffect(BaseModel):
    """One provider's output artifact for one secret value."""
    provider_name: Optional[str] = None
    secret_name: str
    kind: EffectKind
    value: Dict[str, Any]
    target_identity: EffectIdentity
    manager_id: Optional[str] = None  # stamped by the orchestrator


# Injections
class SecretInjection(BaseModel):
    """A committed injection of a secret reference into a stack resource."""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    secret_name: str
    target_name: str
    resource_id: str
    strategy: InjectionStrategy
    provider_id: str
    path: str
    provider: Any = Field(default=None, exclude=True, repr=False)


# Conflict policy
class ConflictStrategy(str, Enum):
    ERROR = 'error'
    AUTO_MERGE = 'autoMerge'
    OVERWRITE = 'overwrite'


class ConflictScope(str, Enum):
    INTRA_PROVIDER = 'intraProvider'
    CROSS_PROVIDER = 'crossProvider'
    CROSS_MANAGER = 'crossManager'


class ConflictStrategies(BaseModel):
    """Per-scope conflict strategies. Absent scopes default to 'error'."""
    model_config = ConfigDict(populate_by_name=True, extra='forbid')

    intra_provider: ConflictStrategy = Field(ConflictStrategy.ERROR, alias='intraProvider')
    cross_provider: ConflictStrategy = Field(ConflictStrategy.ERROR, alias='crossProvider')
    cross_manager: ConflictStrategy = Field(ConflictStrategy.ERROR, alias='crossManager')

    def for_scope(self, scope: ConflictScope) -> ConflictStrategy:
        return {
            ConflictScope.INTRA_PROVIDER: self.intra_provider,
            ConflictScope.CROSS_PROVIDER: self.cross_provider,
            ConflictScope.CROSS_MANAGER: self.cross_manager,
        }[ConflictScope(scope)]


class ConflictOptions(BaseModel):
    """Conflict handling configuration for the orchestrator."""
    model_config = ConfigDict(populate_by_name=True, extra='forbid')

    strategies: ConflictStrategies = Field(default_factory=ConflictStrategies)
    strict: bool = False

    def relaxed_scopes(self) -> List[ConflictScope]:
        """Scopes configured with anything other than 'error'."""
        return [scope for scope in ConflictScope
                if self.strategies.for_scope(scope) != ConflictStrategy.ERROR]

    def strategy_for(self, scope: ConflictScope) -> ConflictStrategy:
        if self.strict:
            return ConflictStrategy.ERROR
        return self.strategies.for_scope(scope)


class EffectOptions(BaseModel):
    """Options handed to connectors while loading."""
    working_dir: Optional[str] = None
