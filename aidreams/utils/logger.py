"""structlog setup shared by the API and the generation services."""

import logging
import sys

import structlog
from fastapi import Request
from structlog.stdlib import ProcessorFormatter

REDACTED = "***"
# Event keys that may carry provider credentials or bearer tokens
SENSITIVE_KEYS = frozenset({"api_key", "secret", "authorization", "token"})
NOISY_LOGGERS = ("aiohttp", "asyncio", "sqlalchemy.engine")


def get_client_ip(request: Request) -> str | None:
    """First hop of X-Forwarded-For, else the socket peer."""
    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()
    if request.client:
        return request.client.host
    return None


def merge_request_context(
    logger: structlog.BoundLogger, method_name: str, event_dict: dict
) -> dict:
    for key in ("request_id", "ip_address"):
        value = structlog.contextvars.get_contextvars().get(key)
        if value and key not in event_dict:
            event_dict[key] = value
    return event_dict


def redact_secrets(
    logger: structlog.BoundLogger, method_name: str, event_dict: dict
) -> dict:
    for key in SENSITIVE_KEYS.intersection(event_dict):
        event_dict[key] = REDACTED
    return event_dict


def setup_logging(is_production: bool = False, level: str = "INFO"):
    """Route structlog through stdlib logging: console in dev, JSON in prod."""
    log_level = logging.getLevelName(level.upper())

    shared_processors: list = [
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        merge_request_context,
        redact_secrets,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    structlog.configure(
        processors=[
            *shared_processors,
            ProcessorFormatter.wrap_for_formatter,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    renderer = (
        structlog.processors.JSONRenderer()
        if is_production
        else structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())
    )
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(ProcessorFormatter(processor=renderer))

    root_logger = logging.getLogger()
    root_logger.handlers = [handler]
    root_logger.setLevel(log_level)

    # uvicorn access lines are replaced by the request logging middleware
    for name in ("uvicorn", "uvicorn.access"):
        logging.getLogger(name).handlers = []
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return structlog.get_logger("aidreams")


def get_logger(name: str | None = None) -> structlog.BoundLogger:
    return structlog.get_logger(name)
