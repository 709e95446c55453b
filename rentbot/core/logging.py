"""
Structured logging configuration with correlation IDs and message context.
"""
import logging
import re
import sys
import time
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Dict, Optional

import structlog

# Context variables for message-scoped data
correlation_id_var: ContextVar[Optional[str]] = ContextVar('correlation_id', default=None)
landlord_id_var: ContextVar[Optional[str]] = ContextVar('landlord_id', default=None)
message_id_var: ContextVar[Optional[str]] = ContextVar('message_id', default=None)

_PHONE_MASK = re.compile(r"(\d{3})\d+(\d{3})")


def add_correlation_id(
    logger, method_name: str, event_dict: Dict[str, Any]
) -> Dict[str, Any]:
    """Add correlation ID to log events."""
    correlation_id = correlation_id_var.get()
    if not correlation_id:
        correlation_id = str(uuid.uuid4())[:8]
        correlation_id_var.set(correlation_id)

    event_dict.setdefault("correlation_id", correlation_id)
    return event_dict


def add_message_context(
    logger, method_name: str, event_dict: Dict[str, Any]
) -> Dict[str, Any]:
    """Add landlord and channel message identifiers to log events."""
    landlord_id = landlord_id_var.get()
    if landlord_id:
        event_dict.setdefault("landlord_id", landlord_id)

    message_id = message_id_var.get()
    if message_id:
        event_dict.setdefault("message_id", message_id)

    return event_dict


def add_service_context(
    logger, method_name: str, event_dict: Dict[str, Any]
) -> Dict[str, Any]:
    """Add service context to log events."""
    from rentbot import __version__

    event_dict["service"] = "rentbot"
    event_dict["version"] = __version__
    return event_dict


def add_timestamp(
    logger, method_name: str, event_dict: Dict[str, Any]
) -> Dict[str, Any]:
    """Add ISO format timestamp to log events."""
    event_dict["timestamp"] = time.time()
    event_dict["iso_timestamp"] = time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime())
    return event_dict


def setup_logging(log_level: str = "INFO") -> None:
    """
    Configure structured logging.

    Args:
        log_level: Minimum level passed through to the stdlib root logger
    """
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper(), logging.INFO),
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            add_timestamp,
            add_service_context,
            add_message_context,
            add_correlation_id,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer(),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)


def get_business_logger() -> structlog.stdlib.BoundLogger:
    """Get a business event logger instance."""
    return structlog.get_logger("business")


def set_landlord_id(landlord_id: str) -> None:
    """Set landlord ID in the current context."""
    landlord_id_var.set(landlord_id)


@contextmanager
def correlation_context(correlation_id: Optional[str] = None,
                        landlord_id: Optional[str] = None,
                        message_id: Optional[str] = None):
    """
    Context manager for scoping log context to one inbound message.

    Args:
        correlation_id: Correlation ID, generated when omitted
        landlord_id: Resolved landlord ID
        message_id: Channel message ID
    """
    tokens = [
        (correlation_id_var, correlation_id_var.set(correlation_id or str(uuid.uuid4())[:8])),
        (landlord_id_var, landlord_id_var.set(landlord_id)),
        (message_id_var, message_id_var.set(message_id)),
    ]

    try:
        yield
    finally:
        for var, token in reversed(tokens):
            var.reset(token)


def log_business_event(event_type: str, **kwargs):
    """
    Log a structured business event.

    Args:
        event_type: Type of business event
        **kwargs: Additional event data
    """
    logger = get_business_logger()
    logger.info("Business event", event_type=event_type, **kwargs)


def mask_phone(address: Optional[str]) -> str:
    """Mask the middle digits of a phone number or channel address for logs."""
    if not address:
        return ""
    return _PHONE_MASK.sub(r"\1***\2", address, count=1)
