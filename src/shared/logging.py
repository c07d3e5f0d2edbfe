"""Structured logging for the storefront and identity domains.

structlog renders through the standard library so that Protean, uvicorn
and our own modules share handlers: stdout plus two rotating files
(everything, and errors only) under ``STOREFRONT_LOG_DIR``. Production and
staging emit JSON lines; other environments get the Rich console renderer.

Per-request values are bound with :func:`bind_request` and
:func:`bind_caller` and appear on every line logged while the request is
handled. Payment account numbers, emails and credentials are masked before
rendering.
"""

import logging
import logging.handlers
import os
import sys
from pathlib import Path
from typing import Any

import structlog

LEVELS_BY_ENV = {
    "production": "INFO",
    "staging": "INFO",
    "development": "DEBUG",
    "test": "WARNING",
}

STRUCTURED_ENVS = ("production", "staging")

# Chatty libraries only report problems
QUIET_LOGGERS = ("urllib3", "asyncio", "protean", "multipart")

MAX_LOG_BYTES = 10 * 1024 * 1024
LOG_BACKUPS = 5

_ACCOUNT_KEYS = {"paymentAccountNumber", "payment_account_number", "account_number"}
_EMAIL_KEYS = {"email", "reply_to", "to"}
_SECRET_KEYS = {"authorization", "cookie", "password", "token"}

_configured = False


def current_env() -> str:
    return (os.getenv("ENVIRONMENT") or os.getenv("PROTEAN_ENV") or "development").lower()


def get_log_level() -> str:
    """``LOG_LEVEL`` when set, else the level of the current environment."""
    return os.getenv("LOG_LEVEL", LEVELS_BY_ENV.get(current_env(), "INFO")).upper()


def _mask_account(value: Any) -> str:
    text = str(value)
    return f"***{text[-4:]}" if len(text) > 4 else "***"


def _mask_email(value: Any) -> str:
    text = str(value)
    local, sep, domain = text.partition("@")
    if not sep:
        return "***"
    return f"{local[:1]}***@{domain}"


def _masked(key: str, value: Any) -> Any:
    if isinstance(value, dict):
        return {inner: _masked(inner, inner_value) for inner, inner_value in value.items()}
    if value is None:
        return value
    if key in _ACCOUNT_KEYS:
        return _mask_account(value)
    if key in _EMAIL_KEYS:
        return _mask_email(value)
    if key.lower() in _SECRET_KEYS:
        return "***"
    return value


def mask_sensitive(_logger, _method_name: str, event_dict: dict) -> dict:
    """structlog processor hiding account numbers, emails and credentials."""
    return {key: value if key == "event" else _masked(key, value) for key, value in event_dict.items()}


def _rotating_handler(path: Path, level) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        filename=path,
        maxBytes=MAX_LOG_BYTES,
        backupCount=LOG_BACKUPS,
        encoding="utf-8",
    )
    handler.setLevel(level)
    return handler


def setup_stdlib_logging(level: str) -> None:
    log_dir = Path(os.getenv("STOREFRONT_LOG_DIR", "logs"))
    log_dir.mkdir(parents=True, exist_ok=True)

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(level)

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers = [
        console,
        _rotating_handler(log_dir / "storefront.log", level),
        _rotating_handler(log_dir / "storefront_error.log", logging.ERROR),
    ]

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def _renderer(env: str):
    if env in STRUCTURED_ENVS:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(
        colors=env != "test",
        exception_formatter=structlog.dev.RichTracebackFormatter(show_locals=False, max_frames=2),
    )


def setup_structlog(env: str) -> None:
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.CallsiteParameterAdder(
                parameters=[
                    structlog.processors.CallsiteParameter.FILENAME,
                    structlog.processors.CallsiteParameter.LINENO,
                    structlog.processors.CallsiteParameter.FUNC_NAME,
                ]
            ),
            mask_sensitive,
            _renderer(env),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def configure_logging() -> None:
    """Configure logging once per process; both domains call this on import."""
    global _configured
    if _configured:
        return
    setup_stdlib_logging(get_log_level())
    setup_structlog(current_env())
    _configured = True


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def bind_request(request_id: str, route: str, method: str) -> None:
    """Start the log context of a new request, dropping anything left by the previous one."""
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(request_id=request_id, route=route, method=method)


def bind_caller(user_id: str) -> None:
    structlog.contextvars.bind_contextvars(user_id=user_id)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()
