from pydantic import Field

from snippet_manager.schemas.common import CamelModel


class ShareResponse(CamelModel):
    """Sharing state of a snippet."""

    share_token: str | None = Field(default=None, description="Opaque share token", examples=["V1StGXR8_Z"])
    is_public: bool = Field(description="Whether the token resolves publicly", examples=[True])
    share_url: str | None = Field(
        default=None,
        description="Public URL for the token, null when no token exists",
        examples=["https://snippets.example.com/shared/V1StGXR8_Z"],
    )


class ShareUpdate(CamelModel):
    is_public: bool | None = Field(default=None, description="Enable or revoke public sharing")
