# demo_mailer/schemas/__init__.py
"""
Pydantic schemas for request/response validation and serialization.
"""

from demo_mailer.schemas.demo_request import (
    DemoRequest,
    DemoRequestIn,
    ErrorResponse,
    MessageRef,
    SendEmailResponse,
)

__all__ = [
    "DemoRequest",
    "DemoRequestIn",
    "ErrorResponse",
    "MessageRef",
    "SendEmailResponse",
]
