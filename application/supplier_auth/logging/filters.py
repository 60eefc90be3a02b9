"""
Logging filters that stamp request context onto records
"""
import logging
from supplier_auth.middlewares.request_context import request_context


class RequestContextFilter(logging.Filter):
    def filter(self, record):
        record.request_id = getattr(request_context, 'request_id', '') or ''
        record.request_method = getattr(request_context, 'request_method', '') or ''
        record.request_path = getattr(request_context, 'request_path', '') or ''
        record.user_id = getattr(request_context, 'user_id', '') or ''
        record.client_ip = getattr(request_context, 'client_ip', '') or ''
        return True
