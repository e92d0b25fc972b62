# attendance_api/utils/logger.py
"""
Logging setup shared by every module.
Console output always; a rotating file under LOG_DIR unless that directory
cannot be created (read-only installs keep console logging).
AuthSession tokens never reach a handler in clear text.
"""

import logging
import os
import re
from logging.handlers import RotatingFileHandler

from attendance_api.config import settings

_PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
LOG_DIR = settings.LOG_DIR or os.path.join(_PROJECT_ROOT, "logs")
LOG_FILE = "attendance.log"
LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

# Chatty client libraries log every request line at INFO
QUIET_LOGGERS = ("httpx", "httpcore", "urllib3", "multipart")

_TOKEN = re.compile(r"(AuthSession=)[^;\s'\"]+")


class RedactTokens(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        if "AuthSession=" in message:
            record.msg = _TOKEN.sub(r"\1***", message)
            record.args = None
        return True


def _file_handler(level: str, formatter: logging.Formatter):
    try:
        os.makedirs(LOG_DIR, exist_ok=True)
        handler = RotatingFileHandler(
            os.path.join(LOG_DIR, LOG_FILE),
            maxBytes=5 * 1024 * 1024,
            backupCount=10,
            encoding="utf-8",
        )
    except OSError as e:
        logging.getLogger(__name__).warning(f"File logging disabled ({LOG_DIR}): {e}")
        return None
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def configure_logging(level: str = None):
    """Attach handlers to the root logger once per process."""
    root = logging.getLogger()
    if getattr(root, "_attendance_configured", False):
        return
    root._attendance_configured = True

    level = (level or settings.LOG_LEVEL).upper()
    formatter = logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
    redact = RedactTokens()

    console = logging.StreamHandler()
    console.setLevel(level)
    console.setFormatter(formatter)
    console.addFilter(redact)
    root.addHandler(console)
    root.setLevel(level)

    if settings.LOG_TO_FILE:
        handler = _file_handler(level, formatter)
        if handler is not None:
            handler.addFilter(redact)
            root.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(logging.WARNING, root.level))


def get_logger(name: str) -> logging.Logger:
    configure_logging()
    return logging.getLogger(name)
