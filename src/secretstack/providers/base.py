"""
Abstract interface for secret providers.

A provider shapes a raw secret value into target-platform artifacts and knows
how to reference those artifacts from a resource.
"""

from abc import ABC, abstractmethod
from typing import Any, List, Optional, Sequence

from ..exceptions import UnsupportedStrategyError
from ..models import (
    ConflictStrategy, EffectIdentity, PreparedEffect, SecretInjection, parse_strategy
)


class BaseProvider(ABC):
    """Abstract base class for providers."""

    secret_type: Optional[str] = None
    target_kind: str = 'Deployment'
    supported_strategies: Sequence[str] = ()
    allow_merge: bool = False

    def __init__(self):
        # Assigned by SecretManager.add_provider()
        self.name: Optional[str] = None

    @property
    def label(self) -> str:
        return f"{self.__class__.__name__}" + (f"({self.name})" if self.name else "")

    def ensure_supported(self, strategy) -> Any:
        """Normalize a strategy and check its kind against supported_strategies.

        Raises:
            UnsupportedStrategyError: If the provider cannot wire this kind
        """
        strategy = parse_strategy(strategy)
        if strategy.kind not in self.supported_strategies:
            raise UnsupportedStrategyError(
                f"[{self.__class__.__name__}] Unsupported injection strategy: {strategy.kind}",
                kind=strategy.kind, supported=self.supported_strategies, provider=self.name
            )
        return strategy

    @abstractmethod
    def get_target_path(self, strategy) -> str:
        """Return the field path inside the target resource for a strategy."""
        pass

    @abstractmethod
    def get_injection_payload(self, injections: List[SecretInjection]) -> List[dict]:
        """Return the reference entries to place at the target path (never plaintext)."""
        pass

    @abstractmethod
    def prepare(self, name: str, value: Any) -> List[PreparedEffect]:
        """Turn one raw value into one or more artifacts."""
        pass

    @abstractmethod
    def merge_effects(self, effects: List[PreparedEffect],
                      strategy: ConflictStrategy = ConflictStrategy.AUTO_MERGE) -> List[PreparedEffect]:
        """Group effects by identity and union their key/value maps."""
        pass

    def get_effect_identity(self, effect: PreparedEffect) -> EffectIdentity:
        return effect.target_identity
