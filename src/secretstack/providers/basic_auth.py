"""
Provider for `kubernetes.io/basic-auth` Secrets.
"""

from typing import Any, List

from pydantic import BaseModel

from ..models import PreparedEffect
from ..utils import encode_value
from .kubernetes import KubernetesSecretProvider, parse_secret_value


class BasicAuthValue(BaseModel):
    username: str
    password: str


class BasicAuthSecretProvider(KubernetesSecretProvider):
    """Expects a value of the form {username, password}."""

    secret_type = 'kubernetes.io/basic-auth'
    supported_strategies = ('env', 'envFrom')
    env_keys = ('username', 'password')
    allow_merge = True

    def prepare(self, name: str, value: Any) -> List[PreparedEffect]:
        parsed = parse_secret_value(BasicAuthValue, value, 'BasicAuthSecretProvider')
        return [self.build_secret(name, {
            'username': encode_value(parsed.username),
            'password': encode_value(parsed.password),
        })]
