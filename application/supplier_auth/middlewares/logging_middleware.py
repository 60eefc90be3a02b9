"""
Audit and request logging middleware for the supplier auth service.
"""
import json
import socket
import time
from datetime import datetime, timezone

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from supplier_auth.logging.utils import get_app_logger, init_audit_logger
from supplier_auth.logging.config import LoggingConfig
from supplier_auth.middlewares.request_context import (
    clear_request_context,
    create_request_id,
    request_context,
    resolve_client_address,
    start_request_context,
)

# settings
from supplier_auth.config.settings import AuthConfigs
configs = AuthConfigs()

SENSITIVE_BODY_FIELDS = {'otp', 'token'}


class AuditMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, trust_proxy_headers: bool = False, exclude_paths: list[str] | None = None):
        super().__init__(app)
        self.logger = get_app_logger('supplier_auth.audit_middleware')
        self.audit_logger = init_audit_logger()
        self.trust_proxy_headers = trust_proxy_headers
        self.exclude_audit_paths = exclude_paths or ['/health', '/docs', '/redoc', '/openapi.json']
        self.hostname = socket.gethostname()
        self.app_name = configs.APP_NAME
        self.version = configs.APP_VERSION

    def _should_audit(self, path: str) -> bool:
        return LoggingConfig.AUDIT_LOGGING_ENABLED and not any(
            path.startswith(p) for p in self.exclude_audit_paths
        )

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        start_request_context()
        request_id = create_request_id()
        start_time = time.time()
        timestamp = datetime.now(timezone.utc).isoformat()

        request_context.request_method = request.method
        request_context.request_path = request.url.path
        request_context.client_ip = resolve_client_address(request, self.trust_proxy_headers)

        should_audit = self._should_audit(request.url.path)
        body_bytes = await request.body() if should_audit else b''

        try:
            response = await call_next(request)
        except Exception as exc:
            duration = (time.time() - start_time) * 1000
            self.logger.error(
                f"request_exception | method={request.method} path={request.url.path} "
                f"exception_type={exc.__class__.__name__} duration_ms={duration:.0f}",
                exc_info=True,
            )
            if should_audit:
                audit_data = self._build_audit_data(request, Response(status_code=500), body_bytes,
                                                    duration, request_id, timestamp)
                audit_data['exception'] = exc.__class__.__name__
                self.audit_logger.info("Audit log (exception)", extra=audit_data)
            clear_request_context()
            raise

        duration = (time.time() - start_time) * 1000
        response.headers['X-Request-ID'] = request_id
        if should_audit:
            audit_data = self._build_audit_data(request, response, body_bytes, duration, request_id, timestamp)
            self.audit_logger.info("Audit log", extra=audit_data)
        clear_request_context()
        return response

    def _mask_headers(self, headers) -> dict:
        """Always replaces any Authorization header value with '****'."""
        return {
            k: ('****' if k.lower() == 'authorization' else v)
            for k, v in headers.items()
        }

    def _parse_body(self, request: Request, body_bytes: bytes):
        if not body_bytes:
            return {}
        content_type = request.headers.get('content-type', '')
        try:
            if 'application/json' in content_type:
                body = json.loads(body_bytes.decode('utf-8'))
                if isinstance(body, dict):
                    return {k: ('****' if k.lower() in SENSITIVE_BODY_FIELDS else v) for k, v in body.items()}
                return body
            return body_bytes.decode('utf-8')[:1000]
        except (UnicodeDecodeError, json.JSONDecodeError):
            return {}

    def _response_body(self, response: Response):
        status = getattr(response, 'status_code', 0)
        if not LoggingConfig.CAPTURE_RESPONSE_BODY or 200 <= status < 300:
            return ''
        # streamed responses cannot be consumed here
        body = getattr(response, 'body', None)
        if body is None or hasattr(response, 'body_iterator'):
            return ''
        try:
            if 'application/json' in response.headers.get('content-type', ''):
                return json.loads(body.decode('utf-8'))
            return body.decode('utf-8')[:1000]
        except (UnicodeDecodeError, json.JSONDecodeError):
            return ''

    def _build_audit_data(
        self,
        request: Request,
        response: Response,
        body_bytes: bytes,
        duration: float,
        request_id: str,
        timestamp: str,
    ) -> dict:
        request_json = {
            "GET": dict(request.query_params),
            "BODY": self._parse_body(request, body_bytes),
            "HEADERS": self._mask_headers(dict(request.headers)),
        }

        return {
            'duration': round(duration, 2),
            'header_referer': request.headers.get('referer', ''),
            'hostname': self.hostname,
            'app_name': self.app_name,
            'module_name': request_context.module_name,
            'request': request_json,
            'request_id': request_id,
            'request_method': request.method,
            'request_path': request.url.path,
            'response': self._response_body(response),
            'status_code': getattr(response, 'status_code', 0),
            'timestamp': timestamp,
            'version': self.version,
        }
