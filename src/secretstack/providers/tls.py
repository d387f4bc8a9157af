"""
Provider for `kubernetes.io/tls` Secrets.
"""

from typing import Any, List

from pydantic import BaseModel, Field

from ..models import PreparedEffect
from ..utils import encode_value
from .kubernetes import KubernetesSecretProvider, parse_secret_value


class TlsValue(BaseModel):
    cert: str = Field(min_length=1)
    key: str = Field(min_length=1)


class TlsSecretProvider(KubernetesSecretProvider):
    """Expects {cert, key} (PEM strings) and stores them as tls.crt / tls.key."""

    secret_type = 'kubernetes.io/tls'
    supported_strategies = ('env', 'envFrom')
    env_keys = ('tls.crt', 'tls.key')
    allow_merge = True

    def prepare(self, name: str, value: Any) -> List[PreparedEffect]:
        parsed = parse_secret_value(TlsValue, value, 'TlsSecretProvider')
        return [self.build_secret(name, {
            'tls.crt': encode_value(parsed.cert),
            'tls.key': encode_value(parsed.key),
        })]
