"""
Session Coordinator Module
Single Responsibility: Open and release the authenticated session for one batch
"""

from contextlib import contextmanager
from typing import Iterator

import requests

from src.client.api_client import RestApiClient
from src.client.exceptions import AuthError, TestClientError
from src.utils.logging_config import get_logger

logger = get_logger(__name__)


class SessionCoordinator:
    """
    Signs in before a batch and signs out after it.
    Sign-out failures are logged, never raised.
    """

    def __init__(self, client: RestApiClient):
        self.client = client

    def open(self) -> str:
        """
        Authenticates with the configured credentials.

        Returns:
            Access token for this batch

        Raises:
            AuthError: If the service rejects the credentials or cannot be reached
        """
        try:
            token = self.client.signin()
        except TestClientError as e:
            logger.error(f"Sign-in failed: {e}")
            raise AuthError(f"Sign-in failed: {e}") from e

        logger.debug("Session opened")
        return token

    def close(self, token: str) -> None:
        """Invalidates the token; errors must not mask the batch outcome."""
        try:
            self.client.signout(token)
            logger.debug("Session closed")
        except (TestClientError, requests.RequestException) as e:
            logger.error(f"Signout error: {e}", exc_info=True)

    @contextmanager
    def session(self) -> Iterator[str]:
        """Yields an access token and always releases it."""
        token = self.open()
        try:
            yield token
        finally:
            self.close(token)
