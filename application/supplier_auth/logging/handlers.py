"""
Logging handlers for supplier auth: local JSON files or stderr.
"""
import logging
import os
import sys

from supplier_auth.logging.config import LoggingConfig
from supplier_auth.logging.formatters import AppLogsJSONFormatter, AuditLogsJSONFormatter
from supplier_auth.logging.filters import RequestContextFilter

_handlers = {}


def get_local_file_handler(name: str = 'app'):
    os.makedirs(LoggingConfig.LOG_DIR, exist_ok=True)
    handler = logging.FileHandler(os.path.join(LoggingConfig.LOG_DIR, f'{name}.log'))
    formatter = AuditLogsJSONFormatter() if name.startswith('audit') else AppLogsJSONFormatter()
    handler.setFormatter(formatter)
    handler.addFilter(RequestContextFilter())
    return handler


def get_console_handler(audit: bool = False):
    key = 'console_audit' if audit else 'console_app'
    if key not in _handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(AuditLogsJSONFormatter() if audit else AppLogsJSONFormatter())
        handler.addFilter(RequestContextFilter())
        _handlers[key] = handler
    return _handlers[key]


def get_app_handler(name: str = 'app'):
    if LoggingConfig.LOG_TO_FILE:
        return get_local_file_handler(name)
    return get_console_handler()


def get_audit_handler():
    if LoggingConfig.LOG_TO_FILE:
        if 'audit' not in _handlers:
            _handlers['audit'] = get_local_file_handler('audit_logs')
        return _handlers['audit']
    return get_console_handler(audit=True)
