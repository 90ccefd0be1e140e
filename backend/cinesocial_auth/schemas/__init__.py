"""Pydantic schemas for request/response validation."""

from cinesocial_auth.schemas.auth import (
    RequestCodeRequest,
    SuccessResponse,
    VerifyCodeRequest,
    VerifyCodeResponse,
)

__all__ = [
    "RequestCodeRequest",
    "SuccessResponse",
    "VerifyCodeRequest",
    "VerifyCodeResponse",
]
