"""
structlog configuration for the pet profile service.

Every log line is a JSON object. Before rendering, two processors run:
one stamps the request's correlation ID, the other scrubs Admin API
tokens, app secrets and session tokens, including values nested inside
logged lists and dicts (metafield inputs, userErrors).
"""

import contextvars
import logging
import os
import re
import sys
import uuid
from pathlib import Path

import structlog

# Set per HTTP request by the admin app middleware
correlation_id_var: contextvars.ContextVar[str] = contextvars.ContextVar(
    "correlation_id", default=""
)

REDACTED = "[REDACTED]"

_SECRET_VALUE_PATTERNS = (
    re.compile(r"shpat_[A-Za-z0-9]+"),  # Admin API access token
    re.compile(r"shpss_[A-Za-z0-9]+"),  # app shared secret
    re.compile(r"eyJ[A-Za-z0-9_\-]+\.[A-Za-z0-9_\-]+\.[A-Za-z0-9_\-]+"),  # session token
)

_SECRET_KEYS = frozenset({
    "access_token", "api_secret", "token", "session_token", "secret",
    "password", "authorization", "credentials",
})

_VALID_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _scrub(value):
    if isinstance(value, str):
        for pattern in _SECRET_VALUE_PATTERNS:
            value = pattern.sub(REDACTED, value)
        return value
    if isinstance(value, dict):
        return {
            k: REDACTED if str(k).lower() in _SECRET_KEYS else _scrub(v)
            for k, v in value.items()
        }
    if isinstance(value, (list, tuple)):
        return type(value)(_scrub(v) for v in value)
    return value


def _redact_processor(logger, method_name, event_dict):
    """Replace secret-named keys and secret-looking values with ``[REDACTED]``."""
    for key, value in list(event_dict.items()):
        if key.lower() in _SECRET_KEYS:
            event_dict[key] = REDACTED
        else:
            event_dict[key] = _scrub(value)
    return event_dict


def _correlation_id_processor(logger, method_name, event_dict):
    cid = correlation_id_var.get("")
    if cid:
        event_dict["correlation_id"] = cid
    return event_dict


def new_correlation_id() -> str:
    """Start a new correlation ID for the current request and return it.

    A profile page load runs one full collection (possibly dozens of
    GraphQL pages); the ID ties those page logs to the request that
    triggered them and is echoed back as ``X-Correlation-ID``.
    """
    cid = uuid.uuid4().hex[:8]
    correlation_id_var.set(cid)
    return cid


def setup_logging(level: str = "INFO", log_file: str = None) -> None:
    """
    Configure structlog and the stdlib root logger.

    Args:
        level: DEBUG, INFO, WARNING, ERROR or CRITICAL (case-insensitive).
        log_file: Optional file that also receives every record; created
            with owner-only permissions because it may hold customer IDs.

    Raises:
        ValueError: If level is not a known logging level.
    """
    level_name = level.upper()
    if level_name not in _VALID_LEVELS:
        raise ValueError(f"Invalid logging level: {level}")

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level_name)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            _correlation_id_processor,
            _redact_processor,
            structlog.processors.JSONRenderer(),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    if not log_file:
        return

    Path(log_file).parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(log_file)
    handler.setLevel(level_name)
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
    os.chmod(log_file, 0o600)
    logging.getLogger().addHandler(handler)


def get_logger(name: str) -> structlog.typing.FilteringBoundLogger:
    """Return a structlog logger bound to ``name`` (use ``__name__``)."""
    return structlog.get_logger(name)
