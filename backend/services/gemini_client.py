"""
Gemini API client wrapper for Google Generative AI integration.

Thin async facade over `google.genai.Client` exposing the single operation
the generation service needs. Errors from the SDK are passed through
untouched so the upstream error classifier sees the original payload.
"""

from typing import List, Optional

from google import genai
from google.genai import types

from backend.exceptions import MissingCredentialError
from backend.utils.logging_config import get_logger


class GeminiClient:
    """
    Wrapper class for the Google Generative AI client.

    One instance is shared by all requests of the process; the underlying SDK
    client is safe to use concurrently.
    """

    def __init__(self, api_key: Optional[str]):
        """
        Initialize the Gemini client.

        Args:
            api_key: Gemini API key

        Raises:
            MissingCredentialError: If no API key is provided
        """
        if not api_key:
            raise MissingCredentialError()

        self.client = genai.Client(api_key=api_key)
        self.logger = get_logger("gemini_client")

    async def generate_content(
        self,
        model: str,
        contents: List[types.Content],
        config: Optional[types.GenerateContentConfig] = None,
    ) -> types.GenerateContentResponse:
        """
        Run a single generate_content call.

        Args:
            model: Gemini model identifier
            contents: Conversation turns to send
            config: Optional generation config; omitted from the call when None

        Returns:
            types.GenerateContentResponse: The raw SDK response

        Raises:
            errors.APIError: If the Gemini API rejects the call
        """
        self.logger.debug(f"generate_content model={model} turns={len(contents)} config={config is not None}")

        if config is None:
            return await self.client.aio.models.generate_content(model=model, contents=contents)

        return await self.client.aio.models.generate_content(model=model, contents=contents, config=config)
