# flask_app/utils/logging_config.py
"""
Application logging setup driven by the monitoring config (LOG_LEVEL,
LOG_FORMAT, LOG_DIR, ENABLE_FILE_LOGGING, ENABLE_CONSOLE_LOGGING).
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler

from flask import has_request_context, request


class JsonFormatter(logging.Formatter):
    """One JSON object per record, for log aggregation in production."""

    def format(self, record):
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }
        if has_request_context():
            log_data["method"] = request.method
            log_data["path"] = request.path
            log_data["remote_addr"] = request.remote_addr
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_data, default=str)


TEXT_FORMAT = "%(asctime)s %(levelname)-8s [%(name)s] %(message)s"


def _build_formatter(log_format):
    if (log_format or "").lower() == "json":
        return JsonFormatter()
    return logging.Formatter(TEXT_FORMAT)


def setup_logging(app):
    """
    Configure app.logger from app.config. Safe to call more than once; handlers
    added by a previous call are replaced.
    """
    level_name = str(app.config.get("LOG_LEVEL", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)
    formatter = _build_formatter(app.config.get("LOG_FORMAT", "text"))

    for handler in list(app.logger.handlers):
        if getattr(handler, "_configured_by_setup_logging", False):
            app.logger.removeHandler(handler)
            handler.close()

    handlers = []
    if app.config.get("ENABLE_CONSOLE_LOGGING", True):
        handlers.append(logging.StreamHandler(sys.stdout))

    if app.config.get("ENABLE_FILE_LOGGING", False):
        log_dir = app.config.get("LOG_DIR", "logs")
        os.makedirs(log_dir, exist_ok=True)
        handlers.append(
            RotatingFileHandler(
                os.path.join(log_dir, "app.log"),
                maxBytes=int(app.config.get("LOG_FILE_MAX_BYTES", 10485760)),
                backupCount=int(app.config.get("LOG_FILE_BACKUP_COUNT", 10)),
                encoding="utf-8",
            )
        )

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        handler._configured_by_setup_logging = True
        app.logger.addHandler(handler)

    app.logger.setLevel(level)

    # SQLAlchemy echo output is controlled by SQLALCHEMY_ECHO, not LOG_LEVEL
    logging.getLogger("werkzeug").setLevel(max(level, logging.INFO))
    return app.logger
