"""
secretstack: load secrets from pluggable sources, shape them into deployment
artifacts, wire references into resources and merge the result.
"""

__version__ = "0.1.0"

from .exceptions import (
    SecretStackError, ConfigError, ConnectorLoadError, ProviderValidationError,
    MergeConflictError, InjectionResolutionError, ResolutionError, ApplyExecutionError
)
from .models import (
    ConflictOptions, ConflictScope, ConflictStrategies, ConflictStrategy, EffectIdentity,
    EffectKind, EffectOptions, PreparedEffect, SecretEntry, SecretInjection, parse_strategy
)
from .connectors import (
    BaseConnector, EnvConnector, FileConnector, GoogleSecretManagerConnector, InMemoryConnector
)
from .providers import (
    BaseProvider, BasicAuthSecretProvider, CustomTypeSecretProvider, DockerConfigSecretProvider,
    InMemoryProvider, OpaqueSecretProvider, SshAuthSecretProvider, TlsSecretProvider
)
from .manager import SecretManager
from .registry import SecretRegistry
from .injection import SecretInjectionBuilder, SecretsInjectionContext
from .stack import Stack
from .orchestrator import OrchestratorState, ProjectConfig, SecretsOrchestrator
from .executor import KubectlExecutor

__all__ = [
    'SecretStackError',
    'ConfigError',
    'ConnectorLoadError',
    'ProviderValidationError',
    'MergeConflictError',
    'InjectionResolutionError',
    'ResolutionError',
    'ApplyExecutionError',
    'ConflictOptions',
    'ConflictScope',
    'ConflictStrategies',
    'ConflictStrategy',
    'EffectIdentity',
    'EffectKind',
    'EffectOptions',
    'PreparedEffect',
    'SecretEntry',
    'SecretInjection',
    'parse_strategy',
    'BaseConnector',
    'EnvConnector',
    'FileConnector',
    'GoogleSecretManagerConnector',
    'InMemoryConnector',
    'BaseProvider',
    'BasicAuthSecretProvider',
    'CustomTypeSecretProvider',
    'DockerConfigSecretProvider',
    'InMemoryProvider',
    'OpaqueSecretProvider',
    'SshAuthSecretProvider',
    'TlsSecretProvider',
    'SecretManager',
    'SecretRegistry',
    'SecretInjectionBuilder',
    'SecretsInjectionContext',
    'Stack',
    'OrchestratorState',
    'ProjectConfig',
    'SecretsOrchestrator',
    'KubectlExecutor',
]
