"""
Google Cloud Secret Manager connector.

Reads secrets from Google Cloud Secret Manager."""

import logging
import os
from typing import Optional

from ..exceptions import ConnectorLoadError
from .base import BaseConnector

logger = logging.getLogger(__name__)


class GoogleSecretManagerConnector(BaseConnector):
    """Connector that reads `projects/<project>/secrets/<name>/versions/<version>`."""

    def __init__(self, project_id: Optional[str] = None, version: str = "latest",
                 case_insensitive: bool = False):
        """Initialize the connector.

        Falls back to the PROJECT_ID environment variable when project_id is not given.
        """
        super().__init__(case_insensitive=case_insensitive)
        self._project_id = project_id
        self.version = version
        self._client = None

    @property
    def connector_type(self) -> str:
        return "google"

    @property
    def project_id(self) -> str:
        """Get project ID from configuration or environment."""
        if self._project_id is None:
            self._project_id = os.getenv('PROJECT_ID')
            if not self._project_id:
                raise ConnectorLoadError(
                    "PROJECT_ID environment variable is required for Google Secret Manager.",
                    connector=self.connector_type
                )
        return self._project_id

    @property
    def client(self):
        """Lazy-load the Secret Manager client."""
        if self._client is None:
            from google.cloud import secretmanager
            self._client = secretmanager.SecretManagerServiceClient(
                client_options={"quota_project_id": self.project_id}
            )
            logger.debug(f"Google Secret Manager client initialized for project: {self.project_id}")
        return self._client

    def _fetch(self, names):
        staged = {}
        for name in names:
            secret_path = f"projects/{self.project_id}/secrets/{name}/versions/{self.version}"
            logger.debug(f"Accessing secret path: {secret_path}")
            try:
                response = self.client.access_secret_version(request={"name": secret_path})
                staged[name] = response.payload.data.decode("UTF-8")
            except Exception as e:
                raise ConnectorLoadError(
                    f"Failed to retrieve secret '{name}' from Google Secret Manager: {e}",
                    secret_name=name, connector=self.connector_type
                ) from e
        return staged
