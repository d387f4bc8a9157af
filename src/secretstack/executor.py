"""
Apply executor that submits Secret manifests with kubectl.
"""

import json
import logging
import os
import subprocess
import tempfile

from .exceptions import ApplyExecutionError
from .models import EffectKind, PreparedEffect
from .utils import censor_secret_payload

logger = logging.getLogger(__name__)


class KubectlExecutor:
    """Runs `kubectl apply -f <file>` for every manifest artifact.

    Args:
        kubectl_path: kubectl executable to invoke
        dry_run: Log the (censored) manifest instead of running kubectl
    """

    def __init__(self, kubectl_path: str = "kubectl", dry_run: bool = False):
        self.kubectl_path = kubectl_path
        self.dry_run = dry_run

    def execute(self, artifact: PreparedEffect) -> None:
        if artifact.kind != EffectKind.KUBECTL:
            logger.warning(f"Skipping {artifact.target_identity}: '{artifact.kind.value}' effects are not applied by kubectl")
            return

        if self.dry_run:
            censored = censor_secret_payload(artifact.value)
            logger.info(f"[dry-run] Would apply {artifact.target_identity}:\n{json.dumps(censored, indent=2)}")
            return

        with tempfile.NamedTemporaryFile(mode='w', suffix='.json', prefix='secretstack-', delete=False) as temp_file:
            json.dump(artifact.value, temp_file)
            temp_file_path = temp_file.name

        try:
            logger.debug(f"Applying {artifact.target_identity} from {temp_file_path}")
            try:
                result = subprocess.run(
                    [self.kubectl_path, "apply", "-f", temp_file_path],
                    capture_output=True, text=True
                )
            except OSError as e:
                raise ApplyExecutionError(
                    f"Could not run '{self.kubectl_path}': {e}",
                    artifact_name=artifact.target_identity.name
                ) from e

            if result.returncode != 0:
                raise ApplyExecutionError(
                    f"kubectl apply failed for {artifact.target_identity}: {result.stderr.strip()}",
                    artifact_name=artifact.target_identity.name, provider=artifact.provider_name,
                    manager=artifact.manager_id
                )
            if result.stdout:
                logger.info(result.stdout.strip())
        finally:
            os.unlink(temp_file_path)
