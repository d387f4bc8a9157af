"""
Merge handlers shared by providers.

Effects are grouped by identity and their key/value maps are unioned. A key
present in more than one effect is a conflict unless the strategy is
'overwrite', in which case the later value wins.
"""

import logging
from typing import Dict, List

from ..exceptions import MergeConflictError
from ..models import ConflictStrategy, EffectIdentity, EffectKind, PreparedEffect

logger = logging.getLogger(__name__)


def merge_effect_data(effects: List[PreparedEffect], data_field: str,
                      strategy: ConflictStrategy = ConflictStrategy.AUTO_MERGE,
                      source: str = 'merge') -> List[PreparedEffect]:
    """Merge effects whose `value[data_field]` is a key/value mapping."""
    strategy = ConflictStrategy(strategy)
    grouped: Dict[EffectIdentity, PreparedEffect] = {}

    for effect in effects:
        identity = effect.target_identity
        data = effect.value.get(data_field) or {}

        if identity not in grouped:
            value = dict(effect.value)
            value[data_field] = dict(data)
            grouped[identity] = effect.model_copy(update={'value': value})
            continue

        existing = grouped[identity].value[data_field]
        for key, item in data.items():
            if key in existing:
                if strategy != ConflictStrategy.OVERWRITE:
                    raise MergeConflictError(
                        f"[{source}] Conflict detected: key \"{key}\" already exists in "
                        f"{identity.kind} \"{identity.name}\" in namespace \"{identity.namespace}\"",
                        key=key, artifact_name=identity.name, namespace=identity.namespace,
                        secret_name=effect.secret_name, provider=effect.provider_name
                    )
                logger.warning(
                    f"[{source}:overwrite] Key \"{key}\" in {identity} overwritten by "
                    f"secret '{effect.secret_name}' (provider '{effect.provider_name}')"
                )
            existing[key] = item

    return list(grouped.values())


def merge_kubernetes_effects(effects: List[PreparedEffect],
                             strategy: ConflictStrategy = ConflictStrategy.AUTO_MERGE) -> List[PreparedEffect]:
    """Merge Kubernetes Secret effects by `metadata.namespace`/`metadata.name`, unioning `.data`."""
    secrets = [effect for effect in effects
               if effect.kind == EffectKind.KUBECTL and effect.value.get('kind') == 'Secret']
    return merge_effect_data(secrets, 'data', strategy, source='merge:k8s')
