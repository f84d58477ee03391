# tests/conftest.py
import os

# Settings are read at import time, so pin the environment before demo_mailer loads.
os.environ["ENVIRONMENT"] = "testing"
os.environ.setdefault("LOG_LEVEL", "WARNING")

from typing import List, Optional

import pytest

from demo_mailer.core.exceptions import TransportError
from demo_mailer.services.mail_transport import SentMessage, SmtpConfig, SmtpConnectionParams
from demo_mailer.services.templates import Envelope


class RecordingTransport:
    """Mail transport stub that records envelopes instead of talking SMTP."""

    def __init__(
        self,
        params: SmtpConnectionParams,
        *,
        fail_on_send: Optional[int] = None,
        verify_error: Optional[TransportError] = None,
    ) -> None:
        self.params = params
        self.fail_on_send = fail_on_send
        self.verify_error = verify_error
        self.verify_calls = 0
        self.send_attempts = 0
        self.sent: List[Envelope] = []

    async def verify(self) -> None:
        self.verify_calls += 1
        if self.verify_error is not None:
            raise self.verify_error

    async def send_message(self, envelope: Envelope) -> SentMessage:
        self.send_attempts += 1
        if self.fail_on_send == self.send_attempts:
            raise TransportError(
                "Invalid login: 535 5.7.8 Authentication failed",
                code="EAUTH",
                details={"response_code": 535},
            )
        self.sent.append(envelope)
        return SentMessage(id=f"<msg-{self.send_attempts}@vonoy.co>", response="250 OK")


class RecordingTransportFactory:
    def __init__(self, **transport_kwargs) -> None:
        self.transport_kwargs = transport_kwargs
        self.transports: List[RecordingTransport] = []

    def __call__(self, params: SmtpConnectionParams) -> RecordingTransport:
        transport = RecordingTransport(params, **self.transport_kwargs)
        self.transports.append(transport)
        return transport

    @property
    def sent(self) -> List[Envelope]:
        return [envelope for t in self.transports for envelope in t.sent]

    @property
    def send_attempts(self) -> int:
        return sum(t.send_attempts for t in self.transports)


@pytest.fixture
def make_transport_factory():
    return RecordingTransportFactory


@pytest.fixture
def transport_factory():
    return RecordingTransportFactory()


@pytest.fixture
def smtp_config():
    return SmtpConfig(
        host="smtp.example.com",
        port=587,
        username="no-reply@vonoy.co",
        password="s3cret",
        support_inbox="support@vonoy.co",
    )


@pytest.fixture
def demo_payload():
    return {
        "email": "a@b.com",
        "firstName": "Ana",
        "lastName": "Lee",
        "companyName": "Acme",
        "country": "US",
        "fleetSize": 12,
        "industry": "Logistics",
    }
