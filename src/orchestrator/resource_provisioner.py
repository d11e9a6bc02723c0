"""
Resource Provisioner Module
Single Responsibility: Create and delete the throwaway datasources of a batch
"""

from contextlib import contextmanager
from typing import Dict, Iterable, Iterator, List

import requests

from src.client.api_client import RestApiClient
from src.client.exceptions import ProvisionError, TestClientError
from src.utils.logging_config import get_logger

logger = get_logger(__name__)


class ResourceProvisioner:
    """
    Provisions one ephemeral datasource per distinct model of a batch.
    Teardown is best-effort and covers every datasource created.
    """

    def __init__(self, client: RestApiClient):
        self.client = client

    def provision(self, token: str, model_id: str, ordinal: int) -> int:
        """
        Creates a disposable datasource for a model.

        Args:
            token: Access token
            model_id: Model to bind the datasource to
            ordinal: Sequence number of the datasource within the batch

        Returns:
            New datasource id

        Raises:
            ProvisionError: If the service rejects the datasource (e.g. unknown model)
        """
        try:
            return self.client.create_datasource(token, model_id, ordinal)
        except TestClientError as e:
            logger.error(f"Failed to create test datasource for model '{model_id}': {e}")
            raise ProvisionError(
                f"Failed to create test datasource for model '{model_id}': {e}"
            ) from e

    def teardown(self, token: str, datasource_id: int) -> None:
        """Deletes a datasource, logging and suppressing any failure."""
        try:
            self.client.delete_datasource(token, datasource_id)
            logger.info(f"Temporary test datasource deleted: {datasource_id}")
        except (TestClientError, requests.RequestException) as e:
            logger.error(f"Failed to delete test datasource {datasource_id}: {e}", exc_info=True)

    def teardown_all(self, token: str, datasource_ids: Iterable[int]) -> None:
        for ds_id in datasource_ids:
            self.teardown(token, ds_id)

    def lookup_models(self, token: str) -> Dict[int, str]:
        """
        Maps every datasource visible to the user to its model id.

        Raises:
            ProvisionError: If the datasource listing cannot be read
        """
        try:
            datasources = self.client.list_datasources(token)
        except TestClientError as e:
            logger.error(f"Failed to list datasources: {e}")
            raise ProvisionError(f"Failed to list datasources: {e}") from e

        return {ds.datasource_id: ds.model_id for ds in datasources}

    @contextmanager
    def provisioned(self, token: str, model_ids: List[str]) -> Iterator[Dict[str, int]]:
        """
        Yields a model id -> datasource id map for the batch.

        Datasources created before a provisioning failure are still torn down.
        """
        created: Dict[str, int] = {}
        try:
            for ordinal, model_id in enumerate(model_ids):
                created[model_id] = self.provision(token, model_id, ordinal)
            yield created
        finally:
            self.teardown_all(token, list(created.values()))
