"""
Unit tests for GenerationService and the image fallback state machine.

The model client is an AsyncMock; each test inspects the calls it received.
"""

import base64
from unittest.mock import AsyncMock

import pytest
from google.genai import types

from backend.config.settings import DEFAULT_IMAGE_MODEL, EXPERIMENTAL_IMAGE_MODEL
from backend.exceptions import EmptyResponseError, NoContentError, NoImageDataError
from backend.models.chat_models import ChatMessage, ChatRequest
from backend.models.image_models import ImageRequest
from backend.services.generation_service import (
    GenerationService,
    ImageGenerationState,
    build_chat_contents,
    extract_inline_image,
    next_image_state,
    plan_image_attempt,
    to_data_url,
)
from backend.services.upstream_errors import UpstreamErrorInfo
from backend.tests.helpers import (
    image_part,
    modality_error,
    parts_response,
    quota_error,
    server_error,
    text_response,
)

QUOTA = UpstreamErrorInfo(code=429, status="RESOURCE_EXHAUSTED")
OTHER = UpstreamErrorInfo(code=500, status="INTERNAL")


@pytest.fixture
def mock_client():
    return AsyncMock()


@pytest.fixture
def service(mock_client):
    return GenerationService(mock_client)


def _chat(*messages, **kwargs) -> ChatRequest:
    return ChatRequest(
        messages=tuple(ChatMessage(role=role, content=content) for role, content in messages),
        **kwargs
    )


def _called_models(mock_client):
    return [c.args[0] for c in mock_client.generate_content.await_args_list]


def _called_configs(mock_client):
    return [c.args[2] for c in mock_client.generate_content.await_args_list]


class TestBuildChatContents:
    """Conversion of validated messages into Gemini turns."""

    def test_roles_are_translated(self):
        system_text, contents = build_chat_contents(_chat(
            ("user", "hi"), ("assistant", "hello"), ("user", "bye")
        ).messages)

        assert system_text == ""
        assert [c.role for c in contents] == ["user", "model", "user"]
        assert [c.parts[0].text for c in contents] == ["hi", "hello", "bye"]

    def test_system_messages_joined_in_order_and_trimmed(self):
        system_text, contents = build_chat_contents(_chat(
            ("system", "  Be terse."), ("user", "hi"), ("system", "Use French.  ")
        ).messages)

        assert system_text == "Be terse.\nUse French."
        assert len(contents) == 1

    def test_only_system_messages_leave_no_turns(self):
        _, contents = build_chat_contents(_chat(("system", "rules")).messages)
        assert contents == []


class TestGenerateChat:
    """Chat generation path."""

    @pytest.mark.asyncio
    async def test_returns_trimmed_text(self, service, mock_client):
        mock_client.generate_content.return_value = text_response("  hello \n")

        text = await service.generate_chat(_chat(("user", "hi")))

        assert text == "hello"
        mock_client.generate_content.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_passes_model_temperature_and_system_instruction(self, service, mock_client):
        mock_client.generate_content.return_value = text_response("ok")

        await service.generate_chat(_chat(
            ("system", "Be terse."), ("user", "hi"), model="gemini-2.5-pro", temperature=0.2
        ))

        model, contents, config = mock_client.generate_content.await_args.args
        assert model == "gemini-2.5-pro"
        assert len(contents) == 1
        assert config.temperature == 0.2
        assert config.system_instruction == "Be terse."

    @pytest.mark.asyncio
    async def test_no_system_instruction_when_absent(self, service, mock_client):
        mock_client.generate_content.return_value = text_response("ok")

        await service.generate_chat(_chat(("user", "hi")))

        config = mock_client.generate_content.await_args.args[2]
        assert config.system_instruction is None
        assert config.temperature == 0.7

    @pytest.mark.asyncio
    async def test_system_only_raises_no_content_without_calling(self, service, mock_client):
        with pytest.raises(NoContentError):
            await service.generate_chat(_chat(("system", "rules")))
        mock_client.generate_content.assert_not_awaited()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("text", [None, "", "   \n"])
    async def test_empty_reply_raises(self, service, mock_client, text):
        mock_client.generate_content.return_value = text_response(text)

        with pytest.raises(EmptyResponseError):
            await service.generate_chat(_chat(("user", "hi")))

    @pytest.mark.asyncio
    async def test_upstream_failure_propagates_unchanged(self, service, mock_client):
        error = quota_error()
        mock_client.generate_content.side_effect = error

        with pytest.raises(type(error)) as exc_info:
            await service.generate_chat(_chat(("user", "hi")))

        assert exc_info.value is error
        mock_client.generate_content.assert_awaited_once()


class TestImageTransitions:
    """Pure transition rules of the fallback state machine."""

    def test_primary_quota_on_default_model_goes_experimental(self):
        assert next_image_state(
            ImageGenerationState.PRIMARY, DEFAULT_IMAGE_MODEL, QUOTA, "quota"
        ) is ImageGenerationState.EXPERIMENTAL

    def test_primary_status_only_quota_goes_experimental(self):
        info = UpstreamErrorInfo(status="RESOURCE_EXHAUSTED")
        assert next_image_state(
            ImageGenerationState.PRIMARY, DEFAULT_IMAGE_MODEL, info, ""
        ) is ImageGenerationState.EXPERIMENTAL

    def test_primary_quota_on_other_model_propagates(self):
        assert next_image_state(ImageGenerationState.PRIMARY, "other-model", QUOTA, "quota") is None

    def test_primary_non_quota_propagates(self):
        assert next_image_state(
            ImageGenerationState.PRIMARY, DEFAULT_IMAGE_MODEL, OTHER, "response modalities"
        ) is None

    @pytest.mark.parametrize("message", [
        "response modalities not supported",
        "The Response Modalities are invalid",
        "400 INVALID_ARGUMENT. RESPONSE MODALITIES",
    ])
    def test_experimental_modality_rejection_goes_stripped(self, message):
        assert next_image_state(
            ImageGenerationState.EXPERIMENTAL, DEFAULT_IMAGE_MODEL, OTHER, message
        ) is ImageGenerationState.MODALITY_STRIPPED

    def test_experimental_other_failure_propagates(self):
        assert next_image_state(
            ImageGenerationState.EXPERIMENTAL, DEFAULT_IMAGE_MODEL, QUOTA, "quota exceeded"
        ) is None

    def test_stripped_is_terminal(self):
        assert next_image_state(
            ImageGenerationState.MODALITY_STRIPPED, DEFAULT_IMAGE_MODEL, QUOTA, "response modalities"
        ) is None

    def test_attempt_plans(self):
        primary = plan_image_attempt(ImageGenerationState.PRIMARY, "custom")
        experimental = plan_image_attempt(ImageGenerationState.EXPERIMENTAL, "custom")
        stripped = plan_image_attempt(ImageGenerationState.MODALITY_STRIPPED, "custom")

        assert (primary.model, primary.response_modalities) == ("custom", ("IMAGE",))
        assert (experimental.model, experimental.response_modalities) == (EXPERIMENTAL_IMAGE_MODEL, ("TEXT", "IMAGE"))
        assert (stripped.model, stripped.response_modalities) == (EXPERIMENTAL_IMAGE_MODEL, None)
        assert stripped.build_config() is None
        assert primary.build_config().response_modalities == ["IMAGE"]


class TestExtractInlineImage:
    """Selection of the inline image from a response."""

    def test_first_inline_part_wins(self):
        response = parts_response(
            types.Part(text="Here you go"),
            image_part(b"first", "image/png"),
            image_part(b"second", "image/jpeg"),
        )

        image = extract_inline_image(response)

        assert image.mime_type == "image/png"
        assert image.data_url == "data:image/png;base64," + base64.b64encode(b"first").decode()

    def test_scans_all_candidates(self):
        response = types.GenerateContentResponse(candidates=[
            types.Candidate(content=types.Content(role="model", parts=[types.Part(text="no image")])),
            types.Candidate(content=types.Content(role="model", parts=[image_part(b"img", "image/webp")])),
        ])
        assert extract_inline_image(response).mime_type == "image/webp"

    def test_part_without_mime_type_skipped(self):
        response = parts_response(
            types.Part(inline_data=types.Blob(data=b"orphan")),
            image_part(b"real"),
        )
        assert extract_inline_image(response).data_url.endswith(base64.b64encode(b"real").decode())

    @pytest.mark.parametrize("response", [
        types.GenerateContentResponse(),
        types.GenerateContentResponse(candidates=[types.Candidate()]),
        text_response("just text"),
    ])
    def test_no_image(self, response):
        assert extract_inline_image(response) is None

    def test_string_payload_used_as_is(self):
        assert to_data_url("image/png", "aGVsbG8=") == "data:image/png;base64,aGVsbG8="


class TestGenerateImage:
    """Image generation with the fallback chain."""

    @pytest.mark.asyncio
    async def test_primary_success(self, service, mock_client):
        mock_client.generate_content.return_value = parts_response(image_part(b"img"))

        image = await service.generate_image(ImageRequest(prompt="a fox"))

        assert image.mime_type == "image/png"
        assert _called_models(mock_client) == [DEFAULT_IMAGE_MODEL]
        contents = mock_client.generate_content.await_args.args[1]
        assert contents[0].role == "user"
        assert contents[0].parts[0].text == "a fox"
        assert _called_configs(mock_client)[0].response_modalities == ["IMAGE"]

    @pytest.mark.asyncio
    async def test_quota_falls_back_to_experimental(self, service, mock_client):
        mock_client.generate_content.side_effect = [
            quota_error(),
            parts_response(types.Part(text="sure"), image_part(b"exp")),
        ]

        image = await service.generate_image(ImageRequest(prompt="a fox"))

        assert image.data_url.endswith(base64.b64encode(b"exp").decode())
        assert _called_models(mock_client) == [DEFAULT_IMAGE_MODEL, EXPERIMENTAL_IMAGE_MODEL]
        assert _called_configs(mock_client)[1].response_modalities == ["TEXT", "IMAGE"]

    @pytest.mark.asyncio
    async def test_modality_rejection_retries_once_without_config(self, service, mock_client):
        mock_client.generate_content.side_effect = [
            quota_error(),
            modality_error(),
            parts_response(image_part(b"stripped")),
        ]

        image = await service.generate_image(ImageRequest(prompt="a fox"))

        assert image.data_url.endswith(base64.b64encode(b"stripped").decode())
        assert _called_models(mock_client) == [
            DEFAULT_IMAGE_MODEL, EXPERIMENTAL_IMAGE_MODEL, EXPERIMENTAL_IMAGE_MODEL
        ]
        assert _called_configs(mock_client)[2] is None

    @pytest.mark.asyncio
    async def test_stripped_failure_propagates(self, service, mock_client):
        final = modality_error()
        mock_client.generate_content.side_effect = [quota_error(), modality_error(), final]

        with pytest.raises(type(final)) as exc_info:
            await service.generate_image(ImageRequest(prompt="a fox"))

        assert exc_info.value is final
        assert mock_client.generate_content.await_count == 3

    @pytest.mark.asyncio
    async def test_non_quota_primary_failure_skips_fallback(self, service, mock_client):
        error = server_error()
        mock_client.generate_content.side_effect = error

        with pytest.raises(type(error)) as exc_info:
            await service.generate_image(ImageRequest(prompt="a fox"))

        assert exc_info.value is error
        assert mock_client.generate_content.await_count == 1

    @pytest.mark.asyncio
    async def test_quota_on_custom_model_skips_fallback(self, service, mock_client):
        mock_client.generate_content.side_effect = quota_error()

        with pytest.raises(Exception):
            await service.generate_image(ImageRequest(prompt="a fox", model="custom-image-model"))

        assert _called_models(mock_client) == ["custom-image-model"]

    @pytest.mark.asyncio
    async def test_non_modality_experimental_failure_propagates(self, service, mock_client):
        second = quota_error()
        mock_client.generate_content.side_effect = [quota_error(), second]

        with pytest.raises(type(second)) as exc_info:
            await service.generate_image(ImageRequest(prompt="a fox"))

        assert exc_info.value is second
        assert mock_client.generate_content.await_count == 2

    @pytest.mark.asyncio
    async def test_missing_image_data_does_not_trigger_fallback(self, service, mock_client):
        mock_client.generate_content.return_value = text_response("I cannot draw that")

        with pytest.raises(NoImageDataError):
            await service.generate_image(ImageRequest(prompt="a fox"))

        assert mock_client.generate_content.await_count == 1

    @pytest.mark.asyncio
    async def test_missing_image_data_after_fallback(self, service, mock_client):
        mock_client.generate_content.side_effect = [quota_error(), text_response("text only")]

        with pytest.raises(NoImageDataError):
            await service.generate_image(ImageRequest(prompt="a fox"))

        assert mock_client.generate_content.await_count == 2
