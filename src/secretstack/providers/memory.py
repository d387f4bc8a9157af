"""
In-memory provider.

Produces `custom` effects that carry the raw values in a named store. Useful in
tests and for targets that consume a payload rather than a manifest.
"""

from typing import Any, List

from ..models import (
    ConflictStrategy, EffectIdentity, EffectKind, PreparedEffect, SecretInjection
)
from .base import BaseProvider
from .merge import merge_effect_data


class InMemoryProvider(BaseProvider):
    """Provider whose artifacts are `{storeName, rawData}` payloads."""

    secret_type = 'InMemory'
    supported_strategies = ('env',)
    allow_merge = True

    def __init__(self, name: str = 'in-memory'):
        super().__init__()
        self.store_name = name

    def get_target_path(self, strategy) -> str:
        strategy = self.ensure_supported(strategy)
        if strategy.target_path:
            return strategy.target_path
        index = strategy.container_index if strategy.container_index is not None else 0
        return f"spec.template.spec.containers[{index}].env"

    def get_injection_payload(self, injections: List[SecretInjection]) -> List[dict]:
        return [
            {
                'name': injection.target_name,
                'valueFrom': {
                    'secretKeyRef': {
                        'name': self.store_name,
                        'key': injection.secret_name,
                    },
                },
            }
            for injection in injections
        ]

    def prepare(self, name: str, value: Any) -> List[PreparedEffect]:
        return [PreparedEffect(
            provider_name=self.name,
            secret_name=name,
            kind=EffectKind.CUSTOM,
            value={'storeName': self.store_name, 'rawData': {name: value}},
            target_identity=EffectIdentity(kind='InMemory', name=self.store_name),
        )]

    def merge_effects(self, effects: List[PreparedEffect],
                      strategy: ConflictStrategy = ConflictStrategy.AUTO_MERGE) -> List[PreparedEffect]:
        return merge_effect_data(effects, 'rawData', strategy, source='merge:in-memory')
