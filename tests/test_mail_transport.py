import ssl
from dataclasses import replace
from unittest.mock import AsyncMock, patch

import aiosmtplib
import pytest

from demo_mailer.core.config import Settings
from demo_mailer.core.exceptions import TransportError
from demo_mailer.services.mail_transport import (
    SmtpConfig,
    SmtpMailTransport,
    build_email_message,
    translate_smtp_error,
)
from demo_mailer.services.templates import Envelope

ENVELOPE = Envelope(
    sender="Vonoy Support <no-reply@vonoy.co>",
    recipient="support@vonoy.co",
    reply_to="Ana Lee <a@b.com>",
    subject="New Demo Request — Ana Lee (Acme)",
    text="Dear support,\n",
)


def _settings(**overrides) -> Settings:
    values = dict(
        SMTP_HOST="smtp.example.com",
        SMTP_PORT=465,
        SMTP_USER="no-reply@vonoy.co",
        SMTP_PASS="s3cret",
        SUPPORT_INBOX="support@vonoy.co",
    )
    values.update(overrides)
    return Settings(_env_file=None, **values)


def _config(port: int) -> SmtpConfig:
    return SmtpConfig(
        host="smtp.example.com",
        port=port,
        username="no-reply@vonoy.co",
        password="s3cret",
        support_inbox="support@vonoy.co",
    )


def test_smtp_config_from_complete_settings():
    config = SmtpConfig.from_settings(_settings(SMTP_TIMEOUT_SECONDS=5))
    assert config is not None
    assert config.host == "smtp.example.com"
    assert config.port == 465
    assert config.support_inbox == "support@vonoy.co"
    assert config.timeout == 5


@pytest.mark.parametrize(
    "missing",
    ["SMTP_HOST", "SMTP_PORT", "SMTP_USER", "SMTP_PASS", "SUPPORT_INBOX"],
)
def test_smtp_config_partial_settings_is_missing(missing):
    assert SmtpConfig.from_settings(_settings(**{missing: None})) is None


def test_smtp_config_blank_values_are_missing():
    assert SmtpConfig.from_settings(_settings(SUPPORT_INBOX="  ")) is None
    assert SmtpConfig.from_settings(_settings(SMTP_PORT="")) is None


@pytest.mark.parametrize(
    "port, secure, require_tls",
    [(465, True, False), (587, False, True), (25, False, False), (2525, False, False)],
)
def test_tls_mode_derivation(port, secure, require_tls):
    params = _config(port).connection_params()
    assert params.secure is secure
    assert params.require_tls is require_tls
    assert params.server_name == "smtp.example.com"
    assert params.timeout == 20.0
    assert params.min_tls_version == ssl.TLSVersion.TLSv1_2


def test_log_context_excludes_credentials():
    context = _config(587).connection_params().log_context()
    assert context == {"host": "smtp.example.com", "port": 587, "secure": False, "require_tls": True}


@pytest.mark.parametrize(
    "port, use_tls, start_tls",
    [(465, True, None), (587, False, True), (25, False, None)],
)
def test_client_options(port, use_tls, start_tls):
    transport = SmtpMailTransport(_config(port).connection_params())
    options = transport._client_options()

    assert options["hostname"] == "smtp.example.com"
    assert options["port"] == port
    assert options["username"] == "no-reply@vonoy.co"
    assert options["password"] == "s3cret"
    assert options["use_tls"] is use_tls
    assert options["start_tls"] is start_tls
    assert options["timeout"] == 20.0
    assert options["tls_context"].minimum_version == ssl.TLSVersion.TLSv1_2


def test_build_email_message_headers():
    msg = build_email_message(ENVELOPE)
    assert msg["From"] == "Vonoy Support <no-reply@vonoy.co>"
    assert msg["To"] == "support@vonoy.co"
    assert msg["Reply-To"] == "Ana Lee <a@b.com>"
    assert msg["Subject"] == "New Demo Request — Ana Lee (Acme)"
    assert msg["Message-ID"].endswith("@vonoy.co>")
    assert msg["Date"]
    assert msg.get_content().startswith("Dear support,")


@pytest.mark.parametrize(
    "exc, code",
    [
        (aiosmtplib.SMTPAuthenticationError(535, "5.7.8 Authentication failed"), "EAUTH"),
        (aiosmtplib.SMTPTimeoutError("Timed out connecting"), "ETIMEDOUT"),
        (aiosmtplib.SMTPConnectTimeoutError("Timed out connecting"), "ETIMEDOUT"),
        (aiosmtplib.SMTPSenderRefused(553, "Sender rejected", "no-reply@vonoy.co"), "EENVELOPE"),
        (aiosmtplib.SMTPRecipientRefused(550, "No such user", "a@b.com"), "EENVELOPE"),
        (aiosmtplib.SMTPConnectError("Error connecting to smtp.example.com"), "ECONNECTION"),
        (aiosmtplib.SMTPServerDisconnected("Connection lost"), "ECONNECTION"),
        (ConnectionRefusedError(111, "Connection refused"), "ECONNECTION"),
        (aiosmtplib.SMTPDataError(554, "Message rejected"), "EPROTOCOL"),
        (ValueError("bad address"), None),
    ],
)
def test_translate_smtp_error(exc, code):
    err = translate_smtp_error(exc)
    assert isinstance(err, TransportError)
    assert err.code == code
    assert err.status_code == 500
    assert err.message


def test_translate_smtp_error_keeps_response_code():
    err = translate_smtp_error(aiosmtplib.SMTPAuthenticationError(535, "5.7.8 Authentication failed"))
    assert "Authentication failed" in err.message
    assert err.details == {"response_code": 535}

    err = translate_smtp_error(ConnectionRefusedError(111, "Connection refused"))
    assert err.details == {}


@pytest.mark.asyncio
async def test_send_message_returns_message_id():
    transport = SmtpMailTransport(_config(465).connection_params())
    send = AsyncMock(return_value=({}, "2.0.0 Ok: queued"))

    with patch("demo_mailer.services.mail_transport.aiosmtplib.send", send):
        sent = await transport.send_message(ENVELOPE)

    send.assert_awaited_once()
    msg = send.await_args.args[0]
    assert sent.id == msg["Message-ID"]
    assert sent.response == "2.0.0 Ok: queued"
    assert send.await_args.kwargs["use_tls"] is True
    assert send.await_args.kwargs["hostname"] == "smtp.example.com"


@pytest.mark.asyncio
async def test_send_message_translates_failure():
    transport = SmtpMailTransport(_config(587).connection_params())
    send = AsyncMock(side_effect=aiosmtplib.SMTPAuthenticationError(535, "5.7.8 Authentication failed"))

    with patch("demo_mailer.services.mail_transport.aiosmtplib.send", send):
        with pytest.raises(TransportError) as exc_info:
            await transport.send_message(ENVELOPE)

    assert exc_info.value.code == "EAUTH"
    assert isinstance(exc_info.value.__cause__, aiosmtplib.SMTPAuthenticationError)


class _FakeSMTP:
    instances = []
    connect_error = None

    def __init__(self, **kwargs):
        self.kwargs = kwargs
        self.noop = AsyncMock()
        _FakeSMTP.instances.append(self)

    async def __aenter__(self):
        if _FakeSMTP.connect_error is not None:
            raise _FakeSMTP.connect_error
        return self

    async def __aexit__(self, *exc_info):
        return False


@pytest.fixture
def fake_smtp():
    _FakeSMTP.instances = []
    _FakeSMTP.connect_error = None
    with patch("demo_mailer.services.mail_transport.aiosmtplib.SMTP", _FakeSMTP):
        yield _FakeSMTP


@pytest.mark.asyncio
async def test_verify_runs_noop(fake_smtp):
    transport = SmtpMailTransport(_config(587).connection_params())
    await transport.verify()

    assert len(fake_smtp.instances) == 1
    smtp = fake_smtp.instances[0]
    smtp.noop.assert_awaited_once()
    assert smtp.kwargs["start_tls"] is True


@pytest.mark.asyncio
async def test_verify_failure_raises_transport_error(fake_smtp):
    fake_smtp.connect_error = aiosmtplib.SMTPConnectError("Error connecting to smtp.example.com on port 587")
    transport = SmtpMailTransport(_config(587).connection_params())

    with pytest.raises(TransportError) as exc_info:
        await transport.verify()

    assert exc_info.value.code == "ECONNECTION"


@pytest.mark.parametrize("raw, expected", [("587", 587), (" 465 ", 465), ("abc", None), ("", None)])
def test_smtp_port_parsing(raw, expected):
    assert _settings(SMTP_PORT=raw).smtp_port == expected


def test_non_numeric_port_is_missing_config():
    assert SmtpConfig.from_settings(_settings(SMTP_PORT="abc")) is None


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "field, value",
    [("subject", "New Demo Request — Ana\nBcc: victim@x.com"), ("reply_to", "Ana\r\n Lee <a@b.com>")],
)
async def test_send_message_rejects_header_line_breaks(field, value):
    transport = SmtpMailTransport(_config(587).connection_params())
    envelope = replace(ENVELOPE, **{field: value})
    send = AsyncMock(return_value=({}, "2.0.0 Ok: queued"))

    with patch("demo_mailer.services.mail_transport.aiosmtplib.send", send):
        with pytest.raises(TransportError) as exc_info:
            await transport.send_message(envelope)

    assert exc_info.value.code is None
    assert "linefeed or carriage return" in exc_info.value.message
    assert isinstance(exc_info.value.__cause__, ValueError)
    send.assert_not_awaited()
