from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from fastapi.responses import JSONResponse
from typing import Any

from supplier_auth.config.sentry import add_breadcrumb, capture_exception
from supplier_auth.config.settings import AuthConfigs
from supplier_auth.core.errors import AuthServiceError
from supplier_auth.logging.utils import get_app_logger
from supplier_auth.middlewares.request_context import request_context

logger = get_app_logger("supplier_auth.handlers")
configs = AuthConfigs()


def _debug_enabled(request: Request) -> bool:
    """DEBUG of the app serving the request, falling back to the environment."""
    components = getattr(request.app.state, "components", None)
    if components is None:
        return configs.DEBUG
    return components.configs.DEBUG


def _error_payload(message: str, error: str, **extra) -> dict:
    payload = {"success": False, "message": message, "error": error}
    payload.update(extra)
    return payload


async def _auth_service_exception_handler(request: Request, exc: AuthServiceError):
    """Render taxonomy errors; their messages are client-safe in every environment."""
    request_context.module_name = 'middleware_handlers'
    if exc.status_code >= 500:
        logger.error(f"auth_error | method={request.method} path={request.url.path} error={exc.error_code}", exc_info=exc)
        capture_exception(exc)
    else:
        logger.warning(
            f"auth_error | method={request.method} path={request.url.path} "
            f"status_code={exc.status_code} error={exc.error_code} message={exc.message}"
        )
    return JSONResponse(status_code=exc.status_code, content=_error_payload(exc.message, exc.error_code))


async def _validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle validation errors with production-safe messages."""
    request_context.module_name = 'middleware_handlers'
    logger.warning(f"validation_error | method={request.method} path={request.url.path} errors={exc.errors()}")

    add_breadcrumb(
        message=f"Validation error on {request.method} {request.url.path}",
        category="validation",
        level="warning",
        data={"errors": exc.errors()}
    )

    if not _debug_enabled(request):
        payload = _error_payload("Invalid request data", "VALIDATION_ERROR")
    else:
        # "field_path: error_message" per error
        error_messages = []
        for err in exc.errors():
            field_path = " -> ".join(str(loc) for loc in err.get("loc", []))
            error_messages.append(f"{field_path}: {err.get('msg', 'Invalid input')}")

        if len(error_messages) == 1:
            payload = _error_payload(error_messages[0], "VALIDATION_ERROR")
        else:
            payload = _error_payload("Validation errors", "VALIDATION_ERROR", errors=error_messages)

    return JSONResponse(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, content=payload)


async def _http_exception_handler(request: Request, exc: Any):
    request_context.module_name = 'middleware_handlers'
    status_code = getattr(exc, 'status_code', status.HTTP_500_INTERNAL_SERVER_ERROR)
    detail = getattr(exc, 'detail', str(exc))

    if status_code >= 500:
        logger.error(f"http_exception | method={request.method} path={request.url.path} status_code={status_code} detail={detail}")
        capture_exception(exc)
    else:
        logger.warning(f"http_exception | method={request.method} path={request.url.path} status_code={status_code} detail={detail}")

    if _debug_enabled(request):
        message = str(detail)
    elif status_code == 404:
        message = "Resource not found"
    elif status_code == 405:
        message = "Method not allowed"
    elif 400 <= status_code < 500:
        message = "Invalid request"
    else:
        message = "Something went wrong"

    return JSONResponse(status_code=status_code, content=_error_payload(message, "HTTP_ERROR"),
                        headers=getattr(exc, 'headers', None))


async def _general_exception_handler(request: Request, exc: Exception):
    """Handle all unhandled exceptions with production-safe messages."""
    request_context.module_name = 'middleware_handlers'
    logger.error(
        f"unhandled_exception | method={request.method} path={request.url.path} "
        f"exception_type={type(exc).__name__} exception_message={exc}",
        exc_info=exc,
    )

    add_breadcrumb(
        message=f"Unhandled exception on {request.method} {request.url.path}",
        category="exception",
        level="error",
        data={"exception_type": type(exc).__name__}
    )
    capture_exception(exc)

    if not _debug_enabled(request):
        payload = _error_payload("Something went wrong", "INTERNAL_ERROR")
    else:
        payload = _error_payload("Something went wrong", "INTERNAL_ERROR",
                                 detail=str(exc), exception_type=type(exc).__name__)

    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=payload)


def register_exception_handlers(app: FastAPI) -> None:
    """Attach all custom exception handlers to the given FastAPI instance."""
    app.add_exception_handler(AuthServiceError, _auth_service_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(Exception, _general_exception_handler)
