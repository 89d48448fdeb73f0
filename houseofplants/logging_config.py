"""
Structured audit logging.

Account and session events are written as one JSON object per line on
the 'security.audit' logger. Passwords, password hashes and session IDs
are never logged.
"""

import json
import logging
import re
import time
from typing import Any, Dict

_LOG_INJECTION_PATTERN = re.compile(r'[\x00-\x08\x0a-\x1f\x7f]')

_CONTEXT_FIELDS = ('ip', 'username', 'email', 'user_agent', 'request_id', 'reason', 'path')


def sanitize_log_value(value: str, max_length: int = 256) -> str:
    """Strip control characters and truncate a value before it is logged."""
    cleaned = _LOG_INJECTION_PATTERN.sub('', str(value))
    return cleaned[:max_length]


class SecurityAuditFormatter(logging.Formatter):
    """JSON formatter for audit events."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry: Dict[str, Any] = {
            'timestamp': time.strftime('%Y-%m-%dT%H:%M:%S%z', time.gmtime(record.created)),
            'level': record.levelname,
            'event': getattr(record, 'event', 'unknown'),
            'message': sanitize_log_value(record.getMessage(), max_length=1024),
        }

        for field in _CONTEXT_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                log_entry[field] = sanitize_log_value(str(value))

        return json.dumps(log_entry)


def setup_security_logging(app) -> logging.Logger:
    """Attach the JSON stderr handler to the 'security.audit' logger once."""
    logger = logging.getLogger('security.audit')
    logger.setLevel(logging.DEBUG if app.debug else logging.INFO)

    # create_app() runs once per test
    if logger.handlers:
        return logger

    handler = logging.StreamHandler()
    handler.setFormatter(SecurityAuditFormatter())
    logger.addHandler(handler)

    return logger


def audit_log(event: str, message: str, level: int = logging.INFO, **context) -> None:
    """
    Log an audit event.

    Args:
        event: Event type (e.g. 'signup_success', 'login_failed')
        message: Human-readable description
        level: Logging level, INFO unless the event is a failure
        **context: Extra fields (ip, username, email, user_agent, request_id, reason)
    """
    logger = logging.getLogger('security.audit')
    extra = {'event': event}
    extra.update(context)
    logger.log(level, message, extra=extra)
