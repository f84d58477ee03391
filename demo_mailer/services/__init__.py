# demo_mailer/services/__init__.py
"""
Business logic services: demo-request handling, templates and mail transport.
"""

from demo_mailer.services.demo_request import DemoRequestAck, DemoRequestService
from demo_mailer.services.mail_transport import (
    MailTransport,
    SentMessage,
    SmtpConfig,
    SmtpConnectionParams,
    SmtpMailTransport,
)
from demo_mailer.services.templates import (
    Branding,
    Envelope,
    render_support_message,
    render_user_message,
)

__all__ = [
    # Handler
    "DemoRequestAck",
    "DemoRequestService",
    # Transport
    "MailTransport",
    "SentMessage",
    "SmtpConfig",
    "SmtpConnectionParams",
    "SmtpMailTransport",
    # Templates
    "Branding",
    "Envelope",
    "render_support_message",
    "render_user_message",
]
