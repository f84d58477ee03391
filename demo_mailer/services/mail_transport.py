# demo_mailer/services/mail_transport.py
from __future__ import annotations

import asyncio
import ssl
from dataclasses import dataclass
from email.message import EmailMessage
from email.utils import formatdate, make_msgid, parseaddr
from typing import Any, Callable, Dict, Optional, Protocol

import aiosmtplib

from demo_mailer.core.config import Settings
from demo_mailer.core.exceptions import TransportError
from demo_mailer.core.logging import get_structlog_logger
from demo_mailer.services.templates import Envelope

logger = get_structlog_logger(__name__)

IMPLICIT_TLS_PORT = 465
STARTTLS_PORT = 587


@dataclass(frozen=True)
class SmtpConnectionParams:
    host: str
    port: int
    username: str
    password: str
    secure: bool
    require_tls: bool
    timeout: float
    min_tls_version: ssl.TLSVersion = ssl.TLSVersion.TLSv1_2

    @property
    def server_name(self) -> str:
        return self.host

    def log_context(self) -> Dict[str, Any]:
        """Connection facts that are safe to log."""
        return {
            "host": self.host,
            "port": self.port,
            "secure": self.secure,
            "require_tls": self.require_tls,
        }


@dataclass(frozen=True)
class SmtpConfig:
    host: str
    port: int
    username: str
    password: str
    support_inbox: str
    timeout: float = 20.0

    @classmethod
    def from_settings(cls, settings: Settings) -> Optional["SmtpConfig"]:
        """Build the relay config, or None unless every SMTP variable is set."""
        values = (
            settings.smtp_host,
            settings.smtp_user,
            settings.smtp_pass,
            settings.support_inbox,
        )
        if settings.smtp_port is None or any(v is None or not v.strip() for v in values):
            return None
        return cls(
            host=settings.smtp_host.strip(),
            port=settings.smtp_port,
            username=settings.smtp_user.strip(),
            password=settings.smtp_pass,
            support_inbox=settings.support_inbox.strip(),
            timeout=settings.smtp_timeout_seconds,
        )

    @property
    def secure(self) -> bool:
        return self.port == IMPLICIT_TLS_PORT

    @property
    def require_tls(self) -> bool:
        return self.port == STARTTLS_PORT

    def connection_params(self) -> SmtpConnectionParams:
        return SmtpConnectionParams(
            host=self.host,
            port=self.port,
            username=self.username,
            password=self.password,
            secure=self.secure,
            require_tls=self.require_tls,
            timeout=self.timeout,
        )


@dataclass(frozen=True)
class SentMessage:
    id: Optional[str]
    response: Optional[str] = None


class MailTransport(Protocol):
    async def verify(self) -> None:
        ...

    async def send_message(self, envelope: Envelope) -> SentMessage:
        ...


TransportFactory = Callable[[SmtpConnectionParams], MailTransport]


def translate_smtp_error(exc: BaseException) -> TransportError:
    """Map an aiosmtplib/socket failure to a TransportError with a stable code."""
    if isinstance(exc, (aiosmtplib.SMTPTimeoutError, asyncio.TimeoutError, TimeoutError)):
        code = "ETIMEDOUT"
    elif isinstance(exc, aiosmtplib.SMTPAuthenticationError):
        code = "EAUTH"
    elif isinstance(
        exc,
        (
            aiosmtplib.SMTPSenderRefused,
            aiosmtplib.SMTPRecipientRefused,
            aiosmtplib.SMTPRecipientsRefused,
        ),
    ):
        code = "EENVELOPE"
    elif isinstance(exc, (aiosmtplib.SMTPConnectError, aiosmtplib.SMTPServerDisconnected)):
        code = "ECONNECTION"
    elif isinstance(exc, aiosmtplib.SMTPException):
        code = "EPROTOCOL"
    elif isinstance(exc, OSError):
        code = "ECONNECTION"
    else:
        code = None

    details: Dict[str, Any] = {}
    response_code = getattr(exc, "code", None)
    if isinstance(response_code, int):
        details["response_code"] = response_code

    message = getattr(exc, "message", None) or str(exc) or "Email send failed"
    return TransportError(message, code=code, details=details)


def build_email_message(envelope: Envelope) -> EmailMessage:
    msg = EmailMessage()
    msg["From"] = envelope.sender
    msg["To"] = envelope.recipient
    msg["Reply-To"] = envelope.reply_to
    msg["Subject"] = envelope.subject
    msg["Date"] = formatdate(localtime=True)

    sender_address = parseaddr(envelope.sender)[1]
    domain = sender_address.rpartition("@")[2] or None
    msg["Message-ID"] = make_msgid(domain=domain)

    msg.set_content(envelope.text)
    return msg


class SmtpMailTransport:
    """
    One SMTP connection per operation; nothing is pooled or reused.

    A request with verification enabled therefore opens three connections
    (verify, support send, user send), like an unpooled nodemailer transport.
    """

    def __init__(self, params: SmtpConnectionParams) -> None:
        self.params = params
        self._tls_context = ssl.create_default_context()
        self._tls_context.minimum_version = params.min_tls_version

    def _client_options(self) -> Dict[str, Any]:
        return {
            "hostname": self.params.server_name,
            "port": self.params.port,
            "username": self.params.username,
            "password": self.params.password,
            "use_tls": self.params.secure,
            # None lets aiosmtplib upgrade only when the server offers STARTTLS
            "start_tls": True if self.params.require_tls else None,
            "timeout": self.params.timeout,
            "tls_context": self._tls_context,
        }

    async def verify(self) -> None:
        try:
            async with aiosmtplib.SMTP(**self._client_options()) as smtp:
                await smtp.noop()
        except (aiosmtplib.SMTPException, OSError, ValueError) as exc:
            logger.error("smtp.verify_failed", error=str(exc), **self.params.log_context())
            raise translate_smtp_error(exc) from exc

        logger.info("smtp.verified", **self.params.log_context())

    async def send_message(self, envelope: Envelope) -> SentMessage:
        try:
            # Header values with CR/LF are rejected here as ValueError
            msg = build_email_message(envelope)
            _, response = await aiosmtplib.send(msg, **self._client_options())
        except (aiosmtplib.SMTPException, OSError, ValueError) as exc:
            logger.error(
                "smtp.send_failed",
                subject=envelope.subject,
                error=str(exc),
                **self.params.log_context(),
            )
            raise translate_smtp_error(exc) from exc

        message_id = msg["Message-ID"]
        logger.info("smtp.message_sent", message_id=message_id, response=response)
        return SentMessage(id=message_id, response=response)
