# === NAVMAP v1 ===
# {
#   "module": "ConfigSeed.logging_config",
#   "purpose": "Console and JSON-lines logging setup with secret masking",
#   "sections": [
#     {
#       "id": "mask-sensitive-data",
#       "name": "mask_sensitive_data",
#       "anchor": "function-mask-sensitive-data",
#       "kind": "function"
#     },
#     {
#       "id": "jsonformatter",
#       "name": "JSONFormatter",
#       "anchor": "class-jsonformatter",
#       "kind": "class"
#     },
#     {
#       "id": "setup-logging",
#       "name": "setup_logging",
#       "anchor": "function-setup-logging",
#       "kind": "function"
#     }
#   ]
# }
# === /NAVMAP ===

"""
Logging Utilities

This module centralizes logging setup for the config-seed service. Console
output goes to stdout as one human-readable line per event; when enabled,
JSON-lines records are also written to a size-rotated file. Sensitive fields
such as ACL tokens are masked before they reach any handler output.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Dict, Optional

from .settings import LoggingSettings

__all__ = ["LOGGER_NAME", "JSONFormatter", "mask_sensitive_data", "setup_logging"]

LOGGER_NAME = "ConfigSeed"
LOG_FILE_NAME = "config-seed.jsonl"


def mask_sensitive_data(payload: Dict[str, object]) -> Dict[str, object]:
    """Remove secrets from structured payloads prior to logging.

    Examples:
        >>> mask_sensitive_data({"consul_token": "secret", "status": "ok"})
        {'consul_token': '***masked***', 'status': 'ok'}
    """
    sensitive_keys = {"authorization", "token", "consul_token", "x-consul-token", "password"}
    masked: Dict[str, object] = {}
    for key, value in payload.items():
        if key.lower() in sensitive_keys:
            masked[key] = "***masked***"
        else:
            masked[key] = value
    return masked


class JSONFormatter(logging.Formatter):
    """Formatter emitting JSON structured logs.

    Examples:
        >>> formatter = JSONFormatter()
        >>> isinstance(formatter.format(logging.makeLogRecord({'msg': 'test'})), str)
        True
    """

    def format(self, record: logging.LogRecord) -> str:
        now = datetime.now(timezone.utc)
        log_obj = {
            "timestamp": now.isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if hasattr(record, "extra_fields") and isinstance(record.extra_fields, dict):
            log_obj.update(record.extra_fields)
        if record.exc_info:
            log_obj["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(mask_sensitive_data(log_obj))


def setup_logging(
    config: Optional[LoggingSettings] = None, log_dir: Optional[Path] = None
) -> logging.Logger:
    """Configure console and optional JSON file handlers for the seeder.

    Handlers installed by a previous call are removed first, so the function
    can be called again with different settings.

    Args:
        config: Logging settings; defaults are used when omitted.
        log_dir: Optional directory override for the JSON log file.

    Returns:
        The configured ``ConfigSeed`` logger.
    """
    config = config or LoggingSettings()
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(config.level_int())

    for handler in list(logger.handlers):
        if getattr(handler, "_configseed_managed", False):
            logger.removeHandler(handler)
            handler.close()

    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setFormatter(
        logging.Formatter("%(asctime)s %(levelname)s: %(message)s", "%Y/%m/%d %H:%M:%S")
    )
    stream_handler._configseed_managed = True  # type: ignore[attr-defined]
    logger.addHandler(stream_handler)

    target_dir = log_dir or config.log_dir
    if config.emit_json_logs and target_dir is not None:
        target_dir = Path(target_dir).expanduser()
        target_dir.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            target_dir / LOG_FILE_NAME,
            maxBytes=int(config.max_log_size_mb * 1024 * 1024),
            backupCount=5,
            encoding="utf-8",
        )
        file_handler.setFormatter(JSONFormatter())
        file_handler._configseed_managed = True  # type: ignore[attr-defined]
        logger.addHandler(file_handler)

    logger.propagate = True
    return logger
