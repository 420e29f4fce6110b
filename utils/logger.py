"""
Logging helpers shared by services and routers.
"""

import logging
from typing import Any, Dict


SENSITIVE_FIELDS = {
    'password', 'token', 'secret', 'authorization', 'access_token',
    'refresh_token', 'hashed_password'
}


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a module.

    Usage:
        from utils.logger import get_logger
        logger = get_logger(__name__)
    """
    return logging.getLogger(name)


def sanitize_log_data(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Return a copy of ``data`` that is safe to put in a log record.

    Keys naming a password are fully redacted. Keys naming a token keep their
    first 8 characters so a value can still be correlated across log lines.
    Nested dicts are sanitized recursively.
    """
    sanitized = data.copy()

    for key, value in sanitized.items():
        lowered = key.lower()
        if any(sensitive in lowered for sensitive in SENSITIVE_FIELDS):
            if isinstance(value, str) and 'token' in lowered and len(value) > 8:
                sanitized[key] = f"{value[:8]}..."
            else:
                sanitized[key] = "***REDACTED***"

        elif isinstance(value, dict):
            sanitized[key] = sanitize_log_data(value)

    return sanitized
