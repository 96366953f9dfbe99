"""
Generation service orchestrating Gemini chat and image calls.

Chat is a single generate_content call. Image generation runs a small
fallback state machine for the default image model:

    PRIMARY           requested model, IMAGE output only
      | quota exhausted (429 / RESOURCE_EXHAUSTED), default model only
    EXPERIMENTAL      experimental model, TEXT + IMAGE output
      | failure mentions "response modalities"
    MODALITY_STRIPPED experimental model, no modality config

Any failure without a matching transition is re-raised unchanged. Calls are
strictly sequential; there are no other retries.
"""

import base64
from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Optional, Sequence, Tuple

from google.genai import types

from backend.config.settings import DEFAULT_IMAGE_MODEL, EXPERIMENTAL_IMAGE_MODEL
from backend.exceptions import EmptyResponseError, NoContentError, NoImageDataError
from backend.models.chat_models import ChatMessage, ChatRequest
from backend.models.image_models import GeneratedImage, ImageRequest
from backend.services.gemini_client import GeminiClient
from backend.services.upstream_errors import UpstreamErrorInfo, describe_upstream_error
from backend.utils.logging_config import get_logger

UPSTREAM_ROLES = {"user": "user", "assistant": "model"}

MODALITY_REJECTION_MARKER = "response modalities"


class ImageGenerationState(str, Enum):
    """States of the image fallback chain."""
    PRIMARY = "primary"
    EXPERIMENTAL = "experimental"
    MODALITY_STRIPPED = "modality_stripped"


@dataclass(frozen=True)
class ImageAttempt:
    """The upstream call made in a given state."""
    state: ImageGenerationState
    model: str
    response_modalities: Optional[Tuple[str, ...]]

    def build_config(self) -> Optional[types.GenerateContentConfig]:
        if self.response_modalities is None:
            return None
        return types.GenerateContentConfig(response_modalities=list(self.response_modalities))


def plan_image_attempt(state: ImageGenerationState, requested_model: str) -> ImageAttempt:
    """Describe the call to make in `state`."""
    if state is ImageGenerationState.PRIMARY:
        return ImageAttempt(state, requested_model, ("IMAGE",))
    if state is ImageGenerationState.EXPERIMENTAL:
        # The experimental model rejects image-only output
        return ImageAttempt(state, EXPERIMENTAL_IMAGE_MODEL, ("TEXT", "IMAGE"))
    return ImageAttempt(state, EXPERIMENTAL_IMAGE_MODEL, None)


def next_image_state(
    state: ImageGenerationState,
    requested_model: str,
    failure: UpstreamErrorInfo,
    failure_message: str,
) -> Optional[ImageGenerationState]:
    """
    Decide where a failed attempt leads.

    Args:
        state: State whose call failed
        requested_model: Model named in the client's request
        failure: Classified upstream error
        failure_message: Raw error message

    Returns:
        The next state, or None if the failure should propagate
    """
    if state is ImageGenerationState.PRIMARY:
        if requested_model == DEFAULT_IMAGE_MODEL and failure.is_quota_exhausted:
            return ImageGenerationState.EXPERIMENTAL
        return None

    if state is ImageGenerationState.EXPERIMENTAL:
        if MODALITY_REJECTION_MARKER in failure_message.lower():
            return ImageGenerationState.MODALITY_STRIPPED
        return None

    return None


def to_data_url(mime_type: str, data: Any) -> str:
    """Build a data URL; bytes are base64-encoded, strings are taken as base64 already."""
    if isinstance(data, (bytes, bytearray)):
        data = base64.b64encode(data).decode("ascii")
    return f"data:{mime_type};base64,{data}"


def extract_inline_image(response: Any) -> Optional[GeneratedImage]:
    """
    Return the first inline image among the response parts, in upstream order.

    Args:
        response: A generate_content response

    Returns:
        GeneratedImage or None if no part carries both a MIME type and data
    """
    for candidate in getattr(response, "candidates", None) or []:
        content = getattr(candidate, "content", None)
        for part in getattr(content, "parts", None) or []:
            inline_data = getattr(part, "inline_data", None)
            mime_type = getattr(inline_data, "mime_type", None)
            data = getattr(inline_data, "data", None)
            if isinstance(mime_type, str) and data is not None:
                return GeneratedImage(mime_type=mime_type, data_url=to_data_url(mime_type, data))
    return None


def build_chat_contents(messages: Sequence[ChatMessage]) -> Tuple[str, List[types.Content]]:
    """
    Split a conversation into the system instruction and upstream turns.

    Args:
        messages: Validated messages in conversation order

    Returns:
        Tuple of the joined system text (may be empty) and the turn list
    """
    system_text = "\n".join(m.content for m in messages if m.role == "system").strip()

    contents = [
        types.Content(
            role=UPSTREAM_ROLES[m.role],
            parts=[types.Part.from_text(text=m.content)]
        )
        for m in messages
        if m.role != "system"
    ]

    return system_text, contents


class GenerationService:
    """
    Service class running chat and image generation against a model client.

    The model client is any object with an async
    `generate_content(model, contents, config=None)`, normally GeminiClient.
    """

    def __init__(self, client: GeminiClient):
        self.client = client
        self.logger = get_logger("generation_service")

    async def generate_chat(self, request: ChatRequest) -> str:
        """
        Generate a chat reply.

        Args:
            request: Validated chat request

        Returns:
            str: The trimmed, non-empty reply text

        Raises:
            NoContentError: If only system messages were given
            EmptyResponseError: If the model returned no text
            Exception: Upstream failures, unchanged
        """
        system_text, contents = build_chat_contents(request.messages)

        if not contents:
            raise NoContentError()

        config = types.GenerateContentConfig(
            temperature=request.temperature,
            system_instruction=system_text or None
        )

        self.logger.debug(
            f"Chat generation: model={request.model} turns={len(contents)} "
            f"system_instruction={bool(system_text)}"
        )

        response = await self.client.generate_content(request.model, contents, config)

        text = (getattr(response, "text", None) or "").strip()
        if not text:
            raise EmptyResponseError()

        return text

    async def generate_image(self, request: ImageRequest) -> GeneratedImage:
        """
        Generate one image, walking the fallback chain on eligible failures.

        Args:
            request: Validated image request

        Returns:
            GeneratedImage: The first inline image of the successful response

        Raises:
            NoImageDataError: If a successful response held no inline image
            Exception: The last upstream failure when no transition applies
        """
        contents = [
            types.Content(role="user", parts=[types.Part.from_text(text=request.prompt)])
        ]

        state = ImageGenerationState.PRIMARY
        while True:
            attempt = plan_image_attempt(state, request.model)
            try:
                response = await self.client.generate_content(
                    attempt.model, contents, attempt.build_config()
                )
            except Exception as exc:
                failure, failure_message = describe_upstream_error(exc)
                next_state = next_image_state(state, request.model, failure, failure_message)
                if next_state is None:
                    raise

                self.logger.warning(
                    f"Image generation fallback {state.value} -> {next_state.value} "
                    f"(model={attempt.model}, code={failure.code}, status={failure.status})"
                )
                state = next_state
                continue

            image = extract_inline_image(response)
            if image is None:
                raise NoImageDataError()

            self.logger.debug(f"Image generated in state {state.value} with model {attempt.model}")
            return image
