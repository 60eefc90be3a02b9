from fastapi import APIRouter, Depends, Request

from supplier_auth.dto.auth_otp import (
    GenerateOTPRequest,
    GenerateOTPResponse,
    LogoutResponse,
    PublicUser,
    VerifyOTPRequest,
    VerifyOTPResponse,
    VerifyTokenResponse,
)
from supplier_auth.core.errors import AuthServiceError
from supplier_auth.logging.utils import get_app_logger
from supplier_auth.middlewares.auth import (
    get_components,
    limit_otp_requests,
    limit_otp_verifications,
    request_token,
)
from supplier_auth.middlewares.request_context import request_context

logger = get_app_logger("supplier_auth.routes.auth_otp")

router = APIRouter(tags=["auth"])


@router.post(
    "/generate-otp",
    response_model=GenerateOTPResponse,
    response_model_exclude_none=True,
    dependencies=[Depends(limit_otp_requests)],
)
async def generate_otp(payload: GenerateOTPRequest, request: Request):
    """
    Issue a login code for the phone.
    Steps:
    1. Validate and normalise the phone
    2. Create the account on first contact
    3. Store the hashed code, replacing any pending one
    4. Hand the code to the notifier; delivery failures are not reported
    """
    request_context.module_name = 'auth_otp'
    result = await get_components(request).otp_service.request_code(payload.phone)
    return GenerateOTPResponse(success=True, message="OTP sent successfully", otp=result.code)


@router.post(
    "/verify-otp",
    response_model=VerifyOTPResponse,
    dependencies=[Depends(limit_otp_verifications)],
)
async def verify_otp(payload: VerifyOTPRequest, request: Request):
    """
    Exchange a valid code for a session token.

    A successful login moves the user's revocation watermark, so tokens from
    earlier logins stop working.
    """
    request_context.module_name = 'auth_otp'
    device_info = payload.device_info or request.headers.get("user-agent", "")
    result = await get_components(request).otp_service.verify_code(payload.phone, payload.otp, device_info)
    return VerifyOTPResponse(success=True, message="OTP verified successfully", token=result.token, user=result.user)


@router.get("/verify-token", response_model=VerifyTokenResponse, response_model_exclude_unset=True)
def verify_token(request: Request):
    """Report token validity in the body; always answers 200."""
    request_context.module_name = 'auth_otp'
    try:
        user = get_components(request).session_service.authenticate(request_token(request))
    except AuthServiceError as e:
        return VerifyTokenResponse(success=False, message=e.message)

    request_context.user_id = user.id
    return VerifyTokenResponse(success=True, message="Token is valid", user=PublicUser.from_user(user))


@router.post("/logout", response_model=LogoutResponse)
def logout(request: Request):
    request_context.module_name = 'auth_otp'
    get_components(request).session_service.logout(request_token(request))
    return LogoutResponse()
