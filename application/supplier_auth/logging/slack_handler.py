import logging
import requests
from datetime import datetime, timezone

from supplier_auth.logging.config import LoggingConfig


class SlackErrorHandler(logging.Handler):
    """Sends ERROR and CRITICAL logs to Slack"""
    def __init__(self):
        super().__init__(level=logging.ERROR)
        self.webhook = LoggingConfig.SLACK_WEBHOOK_URL
        self.enabled = bool(self.webhook) and LoggingConfig.APPLICATION_ENVIRONMENT.lower() == 'local'

    def emit(self, record):
        if not self.enabled:
            return
        try:
            env = LoggingConfig.APPLICATION_ENVIRONMENT.upper()
            ts = datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat()

            lines = [
                f":mag: {env} supplier-auth error",
                "",
                f"- :clock1: Timestamp: {ts}",
                f"- :triangular_flag_on_post: Level: **{record.levelname}**",
                f"- :warning: Logger: {record.name}",
                f"- :file_folder: Module: {record.module}",
                f"- :pushpin: Function: {record.funcName}",
                f"- :straight_ruler: Line Number: {record.lineno}",
                "",
                "```" + str(record.getMessage()) + "```",
            ]
            requests.post(self.webhook, json={"text": "\n".join(lines)}, timeout=2)
        except Exception:
            self.handleError(record)


slack_handler = SlackErrorHandler()
