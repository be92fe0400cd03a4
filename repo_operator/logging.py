"""
Repo operator logging utilities.

Provides configurable logging for HTTP requests/responses sent to the
repository service and for reconciliation progress. Credentials (passwords,
API tokens, basic-auth headers, docker auth blobs) are never logged in clear.
"""

import logging
import re
from typing import Any

# Operator-specific loggers
_operator_logger = logging.getLogger("repo_operator")
_http_logger = logging.getLogger("repo_operator.http")
_reconcile_logger = logging.getLogger("repo_operator.reconcile")

# Patterns for sensitive data that should be masked
_SENSITIVE_PATTERNS = [
    # Basic auth header values
    (re.compile(r"(Authorization['\"]?\s*[:=]\s*['\"]?Basic\s+)[A-Za-z0-9+/=]+", re.IGNORECASE), r"\1[REDACTED]"),
    # Artifactory API token header
    (re.compile(r"(X-JFrog-Art-Api['\"]?\s*[:=]\s*['\"]?)[^'\"\s,}]+", re.IGNORECASE), r"\1[REDACTED]"),
    # Docker config auth entries
    (re.compile(r'"auth"\s*:\s*"[A-Za-z0-9+/=]+"'), '"auth": "[REDACTED]"'),
    # Secret/token patterns
    (re.compile(r"(secret|token|password|api_key)['\"]?\s*[:=]\s*['\"][^'\"]+['\"]", re.IGNORECASE), r"\1: [REDACTED]"),
]

_DEFAULT_SENSITIVE_KEYS = {
    "password",
    "token",
    "api_key",
    "authorization",
    "x-jfrog-art-api",
    "auth",
    ".dockerconfigjson",
}


def configure_logging(
    level: int = logging.INFO,
    http_level: int | None = None,
    reconcile_level: int | None = None,
    handler: logging.Handler | None = None,
    format_string: str | None = None,
) -> None:
    """
    Configure repo operator logging.

    Args:
        level: Default log level for all operator loggers (default: INFO)
        http_level: Log level for HTTP request/response logging (default: same as level)
        reconcile_level: Log level for reconciliation logging (default: same as level)
        handler: Custom handler to use (default: StreamHandler to stderr)
        format_string: Custom format string (default: includes timestamp, level, logger name)

    Example:
        ```python
        import logging
        from repo_operator.logging import configure_logging

        # Trace every call made to the repository service
        configure_logging(level=logging.INFO, http_level=logging.DEBUG)
        ```
    """
    if format_string is None:
        format_string = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    formatter = logging.Formatter(format_string)

    if handler is None:
        handler = logging.StreamHandler()

    handler.setFormatter(formatter)

    _operator_logger.setLevel(level)
    _operator_logger.addHandler(handler)

    _http_logger.setLevel(http_level if http_level is not None else level)

    _reconcile_logger.setLevel(reconcile_level if reconcile_level is not None else level)


def get_logger(name: str | None = None) -> logging.Logger:
    """
    Get a repo operator logger.

    Args:
        name: Logger name suffix (e.g., "http", "reconcile"). If None, returns the root operator logger.

    Returns:
        Logger instance
    """
    if name is None:
        return _operator_logger
    return logging.getLogger(f"repo_operator.{name}")


def mask_sensitive_data(text: str) -> str:
    """
    Mask sensitive data in a string.

    Args:
        text: Text that may contain credentials

    Returns:
        Text with credentials replaced by redacted placeholders
    """
    result = text
    for pattern, replacement in _SENSITIVE_PATTERNS:
        result = pattern.sub(replacement, result)
    return result


def safe_log_dict(data: dict[str, Any], sensitive_keys: set[str] | None = None) -> dict[str, Any]:
    """
    Create a copy of a dictionary with sensitive values masked.

    Args:
        data: Dictionary that may contain sensitive values
        sensitive_keys: Set of keys to mask (default: password, token, auth headers, docker auth)

    Returns:
        Dictionary with sensitive values replaced with "[REDACTED]"
    """
    if sensitive_keys is None:
        sensitive_keys = _DEFAULT_SENSITIVE_KEYS

    result: dict[str, Any] = {}
    for key, value in data.items():
        key_lower = key.lower()
        if key_lower in sensitive_keys or any(
            sk in key_lower for sk in sensitive_keys if len(sk) > 4
        ):
            result[key] = "[REDACTED]"
        elif isinstance(value, dict):
            result[key] = safe_log_dict(value, sensitive_keys)
        elif isinstance(value, list):
            result[key] = [
                safe_log_dict(item, sensitive_keys) if isinstance(item, dict) else item
                for item in value
            ]
        else:
            result[key] = value

    return result


def log_http_request(
    method: str,
    url: str,
    headers: dict[str, str] | None = None,
    body: dict[str, Any] | None = None,
) -> None:
    """
    Log an HTTP request at DEBUG level with sensitive data masked.

    Args:
        method: HTTP method (GET, PUT, DELETE)
        url: Request URL
        headers: Request headers (optional)
        body: Request body (optional)
    """
    if not _http_logger.isEnabledFor(logging.DEBUG):
        return

    log_parts = [f"{method} {url}"]

    if headers:
        safe_headers = safe_log_dict(headers)
        log_parts.append(f"headers={safe_headers}")

    if body:
        safe_body = safe_log_dict(body)
        log_parts.append(f"body={safe_body}")

    _http_logger.debug(" | ".join(log_parts))


def log_http_response(
    status_code: int,
    url: str,
    body: Any = None,
    elapsed_ms: float | None = None,
) -> None:
    """
    Log an HTTP response at DEBUG level with sensitive data masked.

    Args:
        status_code: HTTP status code
        url: Request URL
        body: Parsed response body (optional)
        elapsed_ms: Request duration in milliseconds (optional)
    """
    if not _http_logger.isEnabledFor(logging.DEBUG):
        return

    log_parts = [f"Response {status_code} from {url}"]

    if elapsed_ms is not None:
        log_parts.append(f"elapsed={elapsed_ms:.2f}ms")

    if isinstance(body, dict) and body:
        log_parts.append(f"body={safe_log_dict(body)}")
    elif body:
        log_parts.append(f"body={mask_sensitive_data(str(body))}")

    _http_logger.debug(" | ".join(log_parts))


def log_reconcile_event(
    namespace: str,
    name: str,
    message: str,
    level: int = logging.INFO,
) -> None:
    """
    Log a reconciliation step for one Repository object.

    Args:
        namespace: Namespace of the Repository
        name: Name of the Repository
        message: What happened
        level: Log level (default: INFO)
    """
    if not _reconcile_logger.isEnabledFor(level):
        return

    _reconcile_logger.log(level, f"{message} | namespace={namespace}, name={name}")


__all__ = [
    "configure_logging",
    "get_logger",
    "mask_sensitive_data",
    "safe_log_dict",
    "log_http_request",
    "log_http_response",
    "log_reconcile_event",
]
