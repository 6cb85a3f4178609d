"""Structured logging configuration with wallet context.

This module provides:
- JSON formatting for log aggregation
- A wallet address context variable attached to every record
- Masking helpers so signatures and digests stay short in log lines
"""
from __future__ import annotations

import json
import logging
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Iterator, Optional, Union

wallet_address_var: ContextVar[Optional[str]] = ContextVar("wallet_address", default=None)

_MASK_PATTERN = "***"

_STANDARD_ATTRS = frozenset(
    (
        "name", "msg", "args", "levelname", "levelno", "pathname", "filename",
        "module", "exc_info", "exc_text", "stack_info", "lineno", "funcName",
        "created", "msecs", "relativeCreated", "thread", "threadName",
        "processName", "process", "message", "taskName", "wallet_address",
    )
)


def mask_hex(value: Union[str, bytes, None], show_chars: int = 6) -> str:
    """Shorten a hex value (signature, digest) for logging.

    Args:
        value: Hex string or raw bytes
        show_chars: Number of hex characters kept at each end

    Returns:
        Masked string such as ``0x1a2b3c...d4e5f6``
    """
    if value is None:
        return _MASK_PATTERN
    if isinstance(value, (bytes, bytearray)):
        value = "0x" + bytes(value).hex()
    body = value[2:] if value.startswith("0x") else value
    if len(body) <= show_chars * 2:
        return _MASK_PATTERN
    return f"0x{body[:show_chars]}...{body[-show_chars:]}"


class WalletContextFilter(logging.Filter):
    """Logging filter that adds the active wallet address to log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.wallet_address = wallet_address_var.get()
        return True


class StructuredFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        wallet_address = getattr(record, "wallet_address", None)
        if wallet_address:
            log_data["wallet_address"] = wallet_address

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        # Extra fields passed via logger.info(..., extra={...})
        for key, value in record.__dict__.items():
            if key not in _STANDARD_ATTRS and not key.startswith("_"):
                log_data[key] = value

        return json.dumps(log_data, default=str)


def setup_logging(
    level: str = "INFO",
    json_format: bool = False,
    logger_name: str = "threshold_wallet",
) -> logging.Logger:
    """Configure the package logger.

    Args:
        level: Log level name
        json_format: Emit JSON lines instead of plain text
        logger_name: Logger to configure (the package root by default)

    Returns:
        The configured logger
    """
    root = logging.getLogger(logger_name)
    root.setLevel(level.upper())

    for handler in list(root.handlers):
        root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    if json_format:
        handler.setFormatter(StructuredFormatter())
    else:
        handler.setFormatter(
            logging.Formatter(
                "%(asctime)s %(levelname)s %(name)s [%(wallet_address)s] %(message)s"
            )
        )
    handler.addFilter(WalletContextFilter())
    root.addHandler(handler)
    return root


@contextmanager
def wallet_context(address: str) -> Iterator[None]:
    """Attach a wallet address to every log record emitted inside the block."""
    token = wallet_address_var.set(address)
    try:
        yield
    finally:
        wallet_address_var.reset(token)
