"""
Provider for `kubernetes.io/dockerconfigjson` Secrets used as imagePullSecrets.
"""

import json
from typing import Any, List

from pydantic import BaseModel

from ..models import PreparedEffect
from ..utils import encode_value
from .kubernetes import KubernetesSecretProvider, parse_secret_value


class DockerRegistryValue(BaseModel):
    username: str
    password: str
    registry: str


class DockerConfigSecretProvider(KubernetesSecretProvider):
    """Builds a registry credential Secret and references it from `imagePullSecrets`.

    Example value:
        {'username': 'bot', 'password': '...', 'registry': 'ghcr.io'}
    """

    secret_type = 'kubernetes.io/dockerconfigjson'
    supported_strategies = ('imagePullSecret',)
    allow_merge = False

    def prepare(self, name: str, value: Any) -> List[PreparedEffect]:
        parsed = parse_secret_value(DockerRegistryValue, value, 'DockerConfigSecretProvider')
        docker_config = {
            'auths': {
                parsed.registry: {
                    'username': parsed.username,
                    'password': parsed.password,
                    'auth': encode_value(f"{parsed.username}:{parsed.password}"),
                },
            },
        }
        return [self.build_secret(name, {'.dockerconfigjson': encode_value(json.dumps(docker_config))})]
