"""Request context for audit log entries."""

import uuid

from flask import g, request

from houseofplants.logging_config import audit_log, sanitize_log_value


def assign_request_id() -> None:
    """Short per-request ID for correlating log lines."""
    g.request_id = str(uuid.uuid4())[:8]


def get_request_context() -> dict:
    """ip, user agent and request id of the current request."""
    return {
        'ip': request.remote_addr or 'unknown',
        'user_agent': sanitize_log_value(
            request.headers.get('User-Agent', 'unknown'),
            max_length=200,
        ),
        'request_id': g.get('request_id', 'unknown'),
    }


def log_csrf_failure() -> None:
    audit_log(
        event='csrf_failure',
        message='CSRF token validation failed',
        path=request.path,
        **get_request_context(),
    )
