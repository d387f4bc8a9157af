"""
Provider for `kubernetes.io/ssh-auth` Secrets.
"""

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..models import PreparedEffect
from ..utils import encode_value
from .kubernetes import KubernetesSecretProvider, parse_secret_value


class SshAuthValue(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    ssh_privatekey: str = Field(min_length=1, alias='ssh-privatekey')
    known_hosts: Optional[str] = None


class SshAuthSecretProvider(KubernetesSecretProvider):
    """Expects {'ssh-privatekey': ..., 'known_hosts': ...}; known_hosts is optional
    and only stored when non-empty.
    """

    secret_type = 'kubernetes.io/ssh-auth'
    supported_strategies = ('env', 'envFrom')
    env_keys = ('ssh-privatekey', 'known_hosts')
    allow_merge = True

    def prepare(self, name: str, value: Any) -> List[PreparedEffect]:
        parsed = parse_secret_value(SshAuthValue, value, 'SshAuthSecretProvider')
        data = {'ssh-privatekey': encode_value(parsed.ssh_privatekey)}
        if parsed.known_hosts:
            data['known_hosts'] = encode_value(parsed.known_hosts)
        return [self.build_secret(name, data)]
