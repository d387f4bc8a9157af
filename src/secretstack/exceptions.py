"""
Exception classes with built-in guidance for the secret pipeline.

Every error raised by secretstack derives from SecretStackError. The CLI prints
``str(error)`` followed by ``error.guidance`` and exits with code 3.
"""
import sys
from typing import Iterable, Optional


class SecretStackError(Exception):
    """Base exception for all secret pipeline errors."""
    def __init__(self, message: str, manager: str = None, secret_name: str = None,
                 provider: str = None, connector: str = None):
        super().__init__(message)
        self.manager = manager
        self.secret_name = secret_name
        self.provider = provider
        self.connector = connector
        self.guidance = self._generate_guidance()

    def _get_current_command(self):
        """Get the current command being executed."""
        if len(sys.argv) > 0:
            executable = sys.argv[0].split('/')[-1]
            args = sys.argv[1:]
            if args:
                return f"{executable} {' '.join(args)}"
            return executable
        return "unknown command"

    def _generate_guidance(self):
        """Override in subclasses to provide specific guidance."""
        return f"""
❌ Secret pipeline error: {self}
💡 Check your secret configuration and try again
"""


# Configuration-time errors

class ConfigError(SecretStackError):
    """Raised for invalid secret manager configuration."""
    def _generate_guidance(self):
        return f"""
❌ Configuration error: {self}
💡 Review the SecretManager setup (connectors, providers, defaults and secrets)
"""


class DuplicateSecretError(ConfigError):
    """Raised when a secret name is registered twice in one manager."""
    def _generate_guidance(self):
        return f"""
❌ Secret '{self.secret_name}' is registered more than once
💡 Secret names must be unique (case-sensitive) within a SecretManager.
   Register it in a different SecretManager or pick another name.
"""


class DuplicateRegistrationError(ConfigError):
    """Raised when a connector, provider or manager name is registered twice."""
    pass


class UnknownRegistrationError(ConfigError):
    """Raised when a connector, provider or manager name was never registered."""
    def _generate_guidance(self):
        return f"""
❌ {self}
💡 Registration order matters: call add_connector()/add_provider() before
   referencing the name in set_default_*() or add_secret().
"""


class UnresolvedDefaultError(ConfigError):
    """Raised when a secret omits its connector/provider and no default is set."""
    def _generate_guidance(self):
        return f"""
❌ Secret '{self.secret_name}' has no connector/provider and no default is available
💡 Resolve this in one of the following ways:
   1. Pass connector=/provider= explicitly to add_secret()
   2. Or call set_default_connector()/set_default_provider() before add_secret()
"""


class ConfigFileError(ConfigError):
    """Raised when the project configuration file cannot be loaded."""
    def __init__(self, message: str, config_path: str = None, **kwargs):
        self.config_path = config_path
        super().__init__(message, **kwargs)

    def _generate_guidance(self):
        command = self._get_current_command()
        return f"""
❌ Could not load project configuration: {self}
💡 Resolve this in one of the following ways:
   1. Create secretstack.yaml (or config/secretstack.yaml) with a 'project' entry
   2. Or point to a file explicitly: {command} --config=path/to/secretstack.yaml
"""


# Pipeline-time errors

class ConnectorLoadError(SecretStackError):
    """Raised when a connector cannot load the requested secrets."""
    def _generate_guidance(self):
        return f"""
❌ Secret loading failed: {self}
💡 Make sure every secret exists in its connector's source, then run
   the validate command again
"""


class NotLoadedError(ConnectorLoadError):
    """Raised when get() is called for a name that was never loaded."""
    pass


class ProviderValidationError(SecretStackError):
    """Raised when a provider rejects a value, key or injection strategy."""
    pass


class KeyNotAllowedError(ProviderValidationError):
    """Raised when a key is outside the provider's allow-list."""
    def __init__(self, message: str, keys: Iterable[str] = (), allowed_keys: Iterable[str] = (), **kwargs):
        self.keys = list(keys)
        self.allowed_keys = list(allowed_keys)
        super().__init__(message, **kwargs)

    def _generate_guidance(self):
        return f"""
❌ {self}
💡 Allowed keys: {', '.join(self.allowed_keys) or '(none)'}
"""


class UnsupportedStrategyError(ProviderValidationError):
    """Raised when a provider cannot wire the requested injection strategy."""
    def __init__(self, message: str, kind: str = None, supported: Iterable[str] = (), **kwargs):
        self.kind = kind
        self.supported = list(supported)
        super().__init__(message, **kwargs)

    def _generate_guidance(self):
        return f"""
❌ {self}
💡 Supported strategies for this provider: {', '.join(self.supported) or '(none)'}
"""


class InvalidSecretValueError(ProviderValidationError):
    """Raised when a secret value does not match the provider's expected shape."""
    pass


class MergeConflictError(SecretStackError):
    """Raised when artifacts targeting the same identity cannot be merged."""
    def __init__(self, message: str, key: str = None, artifact_name: str = None,
                 namespace: str = None, scope: str = None,
                 providers: Iterable[str] = (), managers: Iterable[str] = (), **kwargs):
        self.key = key
        self.artifact_name = artifact_name
        self.namespace = namespace
        self.scope = scope
        self.providers = list(providers)
        self.managers = list(managers)
        super().__init__(message, **kwargs)

    def _generate_guidance(self):
        scope = self.scope or '<scope>'
        return f"""
❌ Secret merge conflict: {self}
💡 Resolve this in one of the following ways:
   1. Give the conflicting providers distinct artifact names or namespaces
   2. Or relax the policy in secretstack.yaml:
      secrets:
        conflict:
          strategies:
            {scope}: autoMerge   # or overwrite
"""


class InjectionResolutionError(SecretStackError):
    """Raised when a secret injection cannot be committed or assembled."""
    def __init__(self, message: str, resource_id: Optional[str] = None, **kwargs):
        self.resource_id = resource_id
        super().__init__(message, **kwargs)


class MissingStrategyError(InjectionResolutionError):
    """Raised when resolve_injection() runs before inject()."""
    def _generate_guidance(self):
        return f"""
❌ {self}
💡 Call .inject(...) on the secret before the injection is resolved
"""


class MissingResourceIdError(InjectionResolutionError):
    """Raised when no target resource can be determined for an injection."""
    def _generate_guidance(self):
        return f"""
❌ {self}
💡 Resolve this in one of the following ways:
   1. Use .into_resource(...) to specify a resource ID explicitly
   2. Or call set_default_resource_id(...) on the injection context
"""


class ResourceNotFoundError(InjectionResolutionError):
    """Raised when an injection targets a resource that the stack does not define."""
    pass


class ResolutionError(SecretStackError):
    """Raised when the orchestrator cannot resolve a connector or provider."""
    def _generate_guidance(self):
        return f"""
❌ Could not resolve secret '{self.secret_name}' in manager '{self.manager}': {self}
💡 Check that the connector/provider names used by the secret are registered
   in the same SecretManager
"""


class ApplyExecutionError(SecretStackError):
    """Raised when the apply executor fails to submit an artifact."""
    def __init__(self, message: str, artifact_name: str = None, **kwargs):
        self.artifact_name = artifact_name
        super().__init__(message, **kwargs)
