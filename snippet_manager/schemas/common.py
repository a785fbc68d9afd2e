from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base schema: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class ErrorResponse(BaseModel):
    detail: str = Field(description="Error detail", examples=["Snippet not found"])


class MessageResponse(BaseModel):
    message: str = Field(description="Confirmation message", examples=["Snippet deleted successfully"])
