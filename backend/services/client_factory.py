"""
Client factory for the Gemini Studio backend.

Creates the Gemini client lazily on first use and caches it for the life of
the process, so a missing key only fails the requests that need it.
"""

from threading import Lock
from typing import Dict

from backend.config.settings import AppSettings
from backend.exceptions import MissingCredentialError
from backend.services.gemini_client import GeminiClient
from backend.utils.logging_config import get_logger


class ClientFactory:
    """Caches one GeminiClient per API key."""

    def __init__(self):
        self.logger = get_logger("client_factory")
        self._clients: Dict[str, GeminiClient] = {}
        self._lock = Lock()

    def get_client(self, settings: AppSettings) -> GeminiClient:
        """
        Get the Gemini client for the configured key.

        Args:
            settings: Current application settings

        Returns:
            GeminiClient: Cached or newly created client

        Raises:
            MissingCredentialError: If no API key is configured
        """
        api_key = settings.gemini_api_key
        if not api_key:
            self.logger.error("GEMINI_API_KEY is not configured")
            raise MissingCredentialError()

        with self._lock:
            client = self._clients.get(api_key)
            if client is None:
                client = GeminiClient(api_key=api_key)
                self._clients[api_key] = client
                self.logger.info("Gemini client initialized")
            return client

    def clear_cache(self) -> None:
        with self._lock:
            self._clients.clear()


_client_factory = ClientFactory()


def get_client_factory() -> ClientFactory:
    return _client_factory
