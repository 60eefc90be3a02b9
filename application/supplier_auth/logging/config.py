"""
Logging configuration for supplier auth
"""
from supplier_auth.config.settings import AuthConfigs
configs = AuthConfigs()


class LoggingConfig:
    """Local logging configuration: JSON lines to files or stderr"""

    LOG_TO_FILE = configs.LOG_TO_FILE
    LOG_DIR = configs.LOG_DIR
    AUDIT_LOGGING_ENABLED = configs.AUDIT_LOGGING_ENABLED
    CAPTURE_RESPONSE_BODY = configs.CAPTURE_RESPONSE_BODY
    SLACK_WEBHOOK_URL = configs.SLACK_WEBHOOK_URL
    APPLICATION_ENVIRONMENT = configs.APPLICATION_ENVIRONMENT

    @classmethod
    def is_valid_config(cls):
        if cls.LOG_TO_FILE and not cls.LOG_DIR:
            return False, "LOG_TO_FILE is enabled but LOG_DIR is empty"
        return True, "Configuration is valid"
