"""Stack: a deployable unit holding resources, secret managers and injections.

This is the domain the orchestrator walks. Resources are plain manifest dicts
keyed by resource id; build() returns copies with secret references wired in.
"""

import copy
import logging
from typing import Any, Dict, List, Optional

from .exceptions import DuplicateRegistrationError, ResourceNotFoundError
from .injection import InjectionConfigurer, SecretsInjectionContext
from .manager import SecretManager
from .models import SecretInjection
from .utils import set_at_path

logger = logging.getLogger(__name__)


class Stack:
    """A named set of resources plus the secret managers that feed them.

    Example:
        stack = Stack('api')
        stack.add_resource('deployment', {'kind': 'Deployment', ...})
        stack.use_secrets(manager, lambda ctx: ctx.secrets('DB_PASS').inject())
        resources = stack.build()
    """

    def __init__(self, name: str):
        self.name = name
        self._resources: Dict[str, Dict[str, Any]] = {}
        self._secret_managers: Dict[str, SecretManager] = {}
        self._injections: List[SecretInjection] = []

    def add_resource(self, resource_id: str, resource: Dict[str, Any]) -> 'Stack':
        if resource_id in self._resources:
            raise DuplicateRegistrationError(f"Resource '{resource_id}' already exists in stack '{self.name}'")
        self._resources[resource_id] = resource
        return self

    def has_resource(self, resource_id: str) -> bool:
        return resource_id in self._resources

    def get_resources(self) -> Dict[str, Dict[str, Any]]:
        return dict(self._resources)

    def find_resource_ids_by_kind(self, kind: str) -> List[str]:
        return [resource_id for resource_id, resource in self._resources.items()
                if resource.get('kind') == kind]

    def use_secrets(self, manager: SecretManager, configure: Optional[InjectionConfigurer] = None,
                    name: Optional[str] = None) -> 'Stack':
        """Attach a SecretManager and commit the injections declared in `configure`.

        Args:
            manager: The SecretManager providing the secrets
            configure: Callback receiving a SecretsInjectionContext
            name: Manager name within this stack; defaults to its registration index
        """
        name = name if name is not None else str(len(self._secret_managers))
        if name in self._secret_managers:
            raise DuplicateRegistrationError(
                f"Secret manager '{name}' already used in stack '{self.name}'", manager=name
            )

        ctx = SecretsInjectionContext(self, manager, name)
        if configure is not None:
            configure(ctx)
        injections = ctx.build_all()

        # Only a fully valid configuration reaches the stack
        self._secret_managers[name] = manager
        for injection in injections:
            self.register_secret_injection(injection)
        logger.debug(f"Secret manager '{name}' attached to stack '{self.name}' "
                     f"with {len(injections)} injections")
        return self

    def get_secret_managers(self) -> Dict[str, SecretManager]:
        return dict(self._secret_managers)

    def register_secret_injection(self, injection: SecretInjection) -> None:
        self._injections.append(injection)

    def get_injections(self) -> List[SecretInjection]:
        return list(self._injections)

    def build(self) -> Dict[str, Dict[str, Any]]:
        """Return the resources with every injection payload placed at its path.

        Raises:
            ResourceNotFoundError: If an injection targets a resource id not in this stack
        """
        resources = copy.deepcopy(self._resources)

        groups: Dict[tuple, List[SecretInjection]] = {}
        for injection in self._injections:
            key = (injection.resource_id, injection.path, injection.provider_id)
            groups.setdefault(key, []).append(injection)

        for (resource_id, path, provider_id), injections in groups.items():
            if resource_id not in resources:
                raise ResourceNotFoundError(
                    f"Resource '{resource_id}' not found in stack '{self.name}'",
                    resource_id=resource_id, secret_name=injections[0].secret_name
                )
            payload = injections[0].provider.get_injection_payload(injections)
            set_at_path(resources[resource_id], path, payload)
            logger.debug(f"Injected {len(payload)} entries from {provider_id} into {resource_id} at {path}")

        return resources
