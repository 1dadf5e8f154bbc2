"""Log sanitization and secure logging setup.

Session keys, ``Authorization`` header values and passwords must never
reach a log in clear. This module provides the redaction helpers used
by the HTTP layer and a logging formatter that applies them to every
record.
"""

import copy
import logging
import re
import sys
from typing import Any, Dict, List, Optional

from ..config.settings import Settings

# Patterns for sensitive data detection
SENSITIVE_PATTERNS = {
    "splunk_auth": re.compile(r"Splunk\s+[A-Za-z0-9^_\-]+"),
    "bearer_token": re.compile(r"Bearer\s+[A-Za-z0-9_\-.]+", re.IGNORECASE),
    "basic_auth": re.compile(r"Basic\s+[A-Za-z0-9+/=]+", re.IGNORECASE),
    "session_key": re.compile(r"<sessionKey>[^<]*</sessionKey>"),
    "password": re.compile(r"password=[^&\s]+", re.IGNORECASE),
}

# Headers that should never be logged
SENSITIVE_HEADERS = {
    "authorization",
    "cookie",
    "set-cookie",
    "x-splunk-form-key",
}


def sanitize_string(value: str) -> str:
    """Redact sensitive substrings of ``value``.

    Each match of a sensitive pattern is replaced by a
    ``<name:REDACTED>`` marker; the rest of the string is kept.

    :param value: String to sanitize
    :type value: str
    :return: Sanitized string
    :rtype: str
    """
    if not value:
        return value
    for pattern_name, pattern in SENSITIVE_PATTERNS.items():
        value = pattern.sub(f"<{pattern_name}:REDACTED>", value)
    return value


def sanitize_headers(headers: Dict[str, Any]) -> Dict[str, Any]:
    """Sanitize HTTP headers for logging.

    :param headers: Dictionary of HTTP headers
    :type headers: Dict[str, Any]
    :return: Sanitized copy of the headers
    :rtype: Dict[str, Any]
    """
    if not headers:
        return headers
    sanitized = copy.deepcopy(headers)
    for key, value in headers.items():
        if key.lower() in SENSITIVE_HEADERS:
            if isinstance(value, str) and len(value) > 0:
                sanitized[key] = f"<REDACTED:length={len(value)}>"
            else:
                sanitized[key] = "<REDACTED>"
        elif isinstance(value, str):
            sanitized[key] = sanitize_string(value)
    return sanitized


def safe_log_dict(
    data: Dict[str, Any], sanitize_keys: Optional[List[str]] = None
) -> Dict[str, Any]:
    """Create a copy of ``data`` with sensitive values redacted.

    Keys containing ``password``, ``token``, ``secret``, ``session``
    or any of ``sanitize_keys`` are redacted at every nesting level.

    :param data: Dictionary to sanitize
    :type data: Dict[str, Any]
    :param sanitize_keys: Additional key fragments to redact
    :type sanitize_keys: Optional[List[str]]
    :return: Sanitized dictionary safe for logging
    :rtype: Dict[str, Any]
    """
    if not data:
        return data
    sensitive = {"password", "token", "secret", "session"}
    if sanitize_keys:
        sensitive.update(k.lower() for k in sanitize_keys)

    def _sanitize(obj: Any) -> Any:
        if isinstance(obj, dict):
            return {
                key: "<REDACTED>"
                if any(s in str(key).lower() for s in sensitive)
                else _sanitize(value)
                for key, value in obj.items()
            }
        if isinstance(obj, list):
            return [_sanitize(item) for item in obj]
        if isinstance(obj, str):
            return sanitize_string(obj)
        return obj

    return _sanitize(data)


class SanitizingFormatter(logging.Formatter):
    """Formatter that automatically sanitizes sensitive data."""

    def format(self, record: logging.LogRecord) -> str:
        if record.args:
            try:
                record.msg = sanitize_string(record.msg % record.args)
                record.args = None
            except (TypeError, ValueError):
                record.msg = sanitize_string(str(record.msg))
                record.args = tuple(
                    sanitize_string(arg) if isinstance(arg, str) else arg
                    for arg in record.args
                )
        else:
            record.msg = sanitize_string(str(record.msg))
        return super().format(record)


# Global flag to track if logging has been set up
_LOGGING_CONFIGURED = False


def setup_secure_logging(level: Optional[str] = None) -> None:
    """Set up logging with automatic sanitization.

    Installs a stdout handler with :class:`SanitizingFormatter` on the
    root logger. Repeated calls are ignored.

    :param level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL);
                  defaults to ``SPLUNK_LOG_LEVEL``
    :type level: Optional[str]
    """
    global _LOGGING_CONFIGURED

    if _LOGGING_CONFIGURED:
        logging.getLogger(__name__).debug(
            "Logging already configured, skipping duplicate setup"
        )
        return

    if level is None:
        level = Settings().log_level

    formatter = SanitizingFormatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    logging.basicConfig(
        level=getattr(logging, level.upper()),
        handlers=[handler],
        force=True,
    )

    # httpx logs every request URL at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)

    _LOGGING_CONFIGURED = True
