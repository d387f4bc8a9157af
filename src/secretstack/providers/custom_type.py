"""
Provider for Kubernetes Secrets of an arbitrary `type`.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

from pydantic import RootModel

from ..exceptions import KeyNotAllowedError, ProviderValidationError
from ..models import PreparedEffect
from ..utils import encode_value
from .kubernetes import KubernetesSecretProvider, parse_secret_value

logger = logging.getLogger(__name__)


class FlatSecretValue(RootModel[Dict[str, str]]):
    """A flat mapping of string keys to string values."""
    pass


class CustomTypeSecretProvider(KubernetesSecretProvider):
    """Secret with a caller-chosen type (e.g. 'vendor.com/custom') and an optional key allow-list.

    Args:
        name: Name of the generated Secret
        namespace: Namespace of the generated Secret
        secret_type: Kubernetes Secret type, must not be empty
        allowed_keys: Keys the value may contain; None or empty allows any key
    """

    supported_strategies = ('env', 'envFrom')
    allow_merge = True

    def __init__(self, name: str, namespace: Optional[str] = None, secret_type: str = None,
                 allowed_keys: Optional[Sequence[str]] = None):
        super().__init__(name, namespace)
        if not secret_type or not secret_type.strip():
            raise ProviderValidationError("[CustomTypeSecretProvider] secret_type cannot be empty")
        self.secret_type = secret_type
        self.allowed_keys = list(allowed_keys) if allowed_keys else None
        self.env_keys = self.allowed_keys

    def prepare(self, name: str, value: Any) -> List[PreparedEffect]:
        data = parse_secret_value(FlatSecretValue, value, 'CustomTypeSecretProvider').root

        if self.allowed_keys:
            invalid = [key for key in data if key not in self.allowed_keys]
            if invalid:
                raise KeyNotAllowedError(
                    f"[CustomTypeSecretProvider] Invalid keys provided: {', '.join(invalid)}",
                    keys=invalid, allowed_keys=self.allowed_keys,
                    secret_name=name, provider=self.name
                )

        logger.debug(f"Preparing {self.secret_type} secret '{self.artifact_name}' with keys: {', '.join(data)}")
        return [self.build_secret(name, {key: encode_value(item) for key, item in data.items()})]
