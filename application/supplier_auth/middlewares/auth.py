"""
Request-level auth dependencies.

``require_user`` is the hard gate for protected routes and publishes the
caller on ``request.state.user`` and in the logging context. These are plain
functions, FastAPI runs them in its threadpool so store calls stay off the
event loop.
"""
from typing import Optional

from fastapi import Request

from supplier_auth.core.container import AuthComponents
from supplier_auth.middlewares.request_context import request_context, resolve_client_address
from supplier_auth.models.users import User


def extract_bearer_token(header_value: Optional[str]) -> Optional[str]:
    if not header_value:
        return None

    header = header_value.strip()
    if len(header) >= 7 and header[:7].lower() == "bearer ":
        return header[7:].strip() or None
    return None


def get_components(request: Request) -> AuthComponents:
    return request.app.state.components


def request_token(request: Request) -> Optional[str]:
    return extract_bearer_token(request.headers.get("authorization"))


def _attach_user(request: Request, user: Optional[User]):
    request.state.user = user
    if user is not None:
        request_context.user_id = user.id
        request_context.phone = user.phone


def require_user(request: Request) -> User:
    user = get_components(request).session_service.authenticate(request_token(request))
    _attach_user(request, user)
    return user


def client_address(request: Request) -> str:
    components = get_components(request)
    return resolve_client_address(request, components.configs.TRUST_PROXY_HEADERS)


def limit_otp_requests(request: Request):
    get_components(request).otp_request_limiter.hit(client_address(request))


def limit_otp_verifications(request: Request):
    get_components(request).otp_verify_limiter.hit(client_address(request))
