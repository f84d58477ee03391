# demo_mailer/core/exceptions.py
from __future__ import annotations

from typing import Any, Dict, Optional


class BaseAPIException(Exception):
    """Base exception for all API errors."""

    # Whether the rendered error body carries the ``code`` key.
    expose_code = False

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"ok": False, "message": self.message}
        if self.expose_code:
            payload["code"] = self.code
        return payload


class ValidationError(BaseAPIException):
    """Caller-supplied data is missing required fields."""
    def __init__(self, message: str = "Validation error", **kwargs):
        super().__init__(message, status_code=400, **kwargs)


class ConfigurationError(BaseAPIException):
    """Server-side SMTP settings are missing or incomplete."""
    def __init__(self, message: str = "SMTP configuration is missing on the server.", **kwargs):
        super().__init__(message, status_code=500, **kwargs)


class TransportError(BaseAPIException):
    """SMTP handshake or send failure."""

    expose_code = True

    def __init__(self, message: str = "Email send failed", **kwargs):
        super().__init__(message, status_code=500, **kwargs)
