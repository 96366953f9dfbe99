"""
Image generation Pydantic models.
"""

from typing import List
from pydantic import BaseModel, ConfigDict, Field

from backend.config.settings import DEFAULT_IMAGE_MODEL


class ImageRequest(BaseModel):
    """Validated image generation request."""
    model_config = ConfigDict(frozen=True)

    prompt: str = Field(
        ...,
        min_length=1,
        description="Text prompt describing the image"
    )
    model: str = Field(
        default=DEFAULT_IMAGE_MODEL,
        description="Gemini image model identifier"
    )


class GeneratedImage(BaseModel):
    """A self-contained inline image."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    mime_type: str = Field(..., alias="mimeType", description="MIME type of the image")
    data_url: str = Field(..., alias="dataUrl", description="data: URL holding the base64 payload")


class ImageResponse(BaseModel):
    """Successful image response body."""
    images: List[GeneratedImage] = Field(
        ...,
        description="Generated images; currently always exactly one"
    )
