"""Request and response schemas for the auth endpoints.

Field names on the wire are camelCase (displayName, avatarUrl, isNewUser);
Python code uses snake_case via the alias generator.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class RequestCodeRequest(BaseModel):
    """Request body for POST /auth/request-code.

    Fields are optional at the schema level so that missing and empty
    values get the same 400 from the service.
    """

    model_config = ConfigDict(extra="forbid")

    email: str | None = Field(default=None, max_length=255)
    username: str | None = Field(default=None, max_length=255)


class VerifyCodeRequest(BaseModel):
    """Request body for POST /auth/verify-code."""

    model_config = ConfigDict(extra="forbid")

    email: str | None = Field(default=None, max_length=255)
    code: str | None = Field(default=None, max_length=32)


class SuccessResponse(BaseModel):
    """Body of endpoints that only report success."""

    success: bool = True


class VerifyCodeResponse(BaseModel):
    """Session token and profile snapshot returned by POST /auth/verify-code."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    token: str
    username: str
    display_name: str | None = None
    avatar_url: str | None = None
    is_new_user: bool
