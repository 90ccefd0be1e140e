"""Verification code + profile endpoints.

Passwordless sign-in via emailed 6-digit codes.

Endpoints:
- POST /auth/request-code: store a code and email it
- POST /auth/verify-code: redeem a code for a session token
- POST /auth/profile-setup: set display name and/or avatar
"""

from typing import Annotated

from fastapi import APIRouter, BackgroundTasks, File, Form, UploadFile

from cinesocial_auth.api.deps import CurrentUserId, VerificationService
from cinesocial_auth.core.config import settings
from cinesocial_auth.core.email import send_verification_code_email
from cinesocial_auth.core.file_validation import (
    avatar_extension,
    read_file_with_size_limit,
)
from cinesocial_auth.schemas.auth import (
    RequestCodeRequest,
    SuccessResponse,
    VerifyCodeRequest,
    VerifyCodeResponse,
)
from cinesocial_auth.services.verification_session import AvatarUpload

router = APIRouter()


# ===================================================================
# POST /auth/request-code
# ===================================================================


@router.post("/request-code")
async def request_code(
    body: RequestCodeRequest,
    background_tasks: BackgroundTasks,
    service: VerificationService,
) -> SuccessResponse:
    """Issue a verification code for an email/username pair.

    Creates the user on first use, otherwise replaces any pending code.
    The email is sent as a background task after the response; delivery
    failures are logged and do not invalidate the stored code.
    """
    issued = await service.request_code(body.email, body.username)

    background_tasks.add_task(
        send_verification_code_email,
        to_email=issued.email,
        code=issued.code,
    )

    return SuccessResponse()


# ===================================================================
# POST /auth/verify-code
# ===================================================================


@router.post("/verify-code", response_model_exclude_none=True)
async def verify_code(
    body: VerifyCodeRequest,
    service: VerificationService,
) -> VerifyCodeResponse:
    """Redeem a verification code for a session token.

    Security: Returns the same 401 for a wrong code, an expired code and
    an unknown email.
    """
    session = await service.verify_code(body.email, body.code)
    return VerifyCodeResponse(
        token=session.token,
        username=session.username,
        display_name=session.display_name,
        avatar_url=session.avatar_url,
        is_new_user=session.is_new_user,
    )


# ===================================================================
# POST /auth/profile-setup
# ===================================================================


@router.post("/profile-setup")
async def profile_setup(
    user_id: CurrentUserId,
    service: VerificationService,
    display_name: Annotated[str | None, Form(alias="displayName", max_length=255)] = None,
    avatar: Annotated[UploadFile | None, File()] = None,
) -> SuccessResponse:
    """Set the display name and/or avatar of the authenticated user.

    Either field may be omitted; omitting both is a successful no-op.
    """
    upload = None
    if avatar is not None and avatar.filename:
        # Validate the extension before reading (Security: no disk write for non-images)
        extension = avatar_extension(avatar.filename)
        content = await read_file_with_size_limit(
            avatar, max_size=settings.avatar_max_size_mb * 1024 * 1024
        )
        upload = AvatarUpload(content=content, extension=extension)

    await service.setup_profile(user_id, display_name=display_name, avatar=upload)
    return SuccessResponse()
