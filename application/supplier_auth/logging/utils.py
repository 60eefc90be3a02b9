"""
Logging utilities for supplier auth
"""
import logging

from supplier_auth.logging.config import LoggingConfig
from supplier_auth.logging.handlers import get_app_handler, get_audit_handler
from supplier_auth.logging.slack_handler import slack_handler

AUDIT_LOGGER_NAME = 'supplier_auth.audit'


def get_app_logger(name: str = 'supplier_auth'):
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = get_app_handler(name.replace('.', '_'))
        logger.addHandler(handler)
        logger.addHandler(slack_handler)
        logger.setLevel(logging.INFO)
        logger.propagate = False
    return logger


def init_audit_logger():
    logger = logging.getLogger(AUDIT_LOGGER_NAME)
    if not logger.handlers:
        handler = get_audit_handler()
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)
        logger.propagate = False
    return logger


def initialize_logging():
    is_valid, message = LoggingConfig.is_valid_config()
    if not is_valid:
        raise RuntimeError(f"Invalid logging configuration: {message}")
    get_app_logger('supplier_auth').info(
        f"logging_initialized | to_file={LoggingConfig.LOG_TO_FILE} audit={LoggingConfig.AUDIT_LOGGING_ENABLED}"
    )
