"""
Providers shape raw secret values into target-platform artifacts.
"""

from .base import BaseProvider
from .memory import InMemoryProvider
from .kubernetes import KubernetesSecretProvider, OpaqueSecretProvider
from .custom_type import CustomTypeSecretProvider
from .basic_auth import BasicAuthSecretProvider
from .tls import TlsSecretProvider
from .ssh_auth import SshAuthSecretProvider
from .docker_config import DockerConfigSecretProvider
from .merge import merge_effect_data, merge_kubernetes_effects

__all__ = [
    'BaseProvider',
    'InMemoryProvider',
    'KubernetesSecretProvider',
    'OpaqueSecretProvider',
    'CustomTypeSecretProvider',
    'BasicAuthSecretProvider',
    'TlsSecretProvider',
    'SshAuthSecretProvider',
    'DockerConfigSecretProvider',
    'merge_effect_data',
    'merge_kubernetes_effects',
]
