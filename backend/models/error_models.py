"""
Error response models.

Every failure of the chat and image endpoints is rendered with this shape,
so the browser client only ever has to read `error`.
"""

from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class ErrorResponse(BaseModel):
    """
    Error response body for all API failures.

    Optional fields are omitted from the JSON when unset.
    """
    model_config = ConfigDict(populate_by_name=True)

    error: str = Field(
        ...,
        description="Human-readable error message"
    )
    reset_at: Optional[int] = Field(
        default=None,
        alias="resetAt",
        description="Epoch milliseconds when the local rate-limit window resets"
    )
    debug: Optional[str] = Field(
        default=None,
        description="Raw upstream detail, only outside production"
    )

    def to_content(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)
