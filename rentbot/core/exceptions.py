"""
Custom exception classes for the rent bot.
"""
from typing import Optional, Any, Dict

from fastapi import HTTPException, status


class RentBotError(Exception):
    """Base exception for all bot errors."""

    def __init__(self, detail: str, **context):
        self.detail = detail
        self.context = context
        super().__init__(detail)


class ConfigurationError(RentBotError):
    """Exception for missing or invalid startup configuration."""

    pass


# Database Exceptions
class DatabaseError(RentBotError):
    """Exception for backend query failures."""

    def __init__(self, detail: str, operation: Optional[str] = None, **context):
        self.operation = operation
        if operation:
            context["operation"] = operation
        super().__init__(detail, **context)


class DatabaseConnectionError(DatabaseError):
    """Exception for backend connectivity failures."""

    def __init__(self, detail: str, **context):
        super().__init__(detail=detail, operation="connection", **context)


# Extraction Service Exceptions
class ExtractionError(RentBotError):
    """Base exception for intent extraction failures."""

    pass


class ExtractionTimeoutError(ExtractionError):
    """Exception for extraction service timeouts."""

    pass


class MalformedExtractionError(ExtractionError):
    """Exception for extraction payloads that do not match the intent shape."""

    def __init__(self, detail: str, raw_response: Optional[str] = None, **context):
        self.raw_response = raw_response
        super().__init__(detail, **context)


# Receipt Exceptions
class ReceiptGenerationError(RentBotError):
    """Exception raised when a receipt cannot be rendered or delivered."""

    def __init__(self, detail: str, payment_id: Optional[str] = None, **context):
        self.payment_id = payment_id
        super().__init__(f"PDF generation failed: {detail}", payment_id=payment_id, **context)


# Channel Exceptions
class ChannelError(Exception):
    """Exception for messaging channel call errors."""

    def __init__(
        self,
        service_name: str,
        message: str,
        status_code: Optional[int] = None,
        **context
    ):
        self.service_name = service_name
        self.status_code = status_code
        self.context = context
        super().__init__(f"[{service_name}] {message}")


class SessionClosedError(ChannelError):
    """Exception raised when a channel session drops and may be re-established."""

    def __init__(self, service_name: str, reason: str, **context):
        self.reason = reason
        super().__init__(service_name=service_name, message=f"Session closed: {reason}", **context)


class SessionLoggedOutError(ChannelError):
    """Exception raised when the channel credential was explicitly invalidated."""

    def __init__(self, service_name: str, status_code: Optional[int] = None, **context):
        super().__init__(
            service_name=service_name,
            message="Session logged out, credential reset required",
            status_code=status_code,
            **context
        )


# API Exceptions
class WebhookVerificationError(HTTPException):
    """Exception for failed webhook subscription verification."""

    def __init__(self, detail: str = "Webhook verification failed", context: Optional[Dict[str, Any]] = None):
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)
        self.context = context or {}
