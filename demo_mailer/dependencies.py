# demo_mailer/dependencies.py
from __future__ import annotations

from functools import lru_cache
from typing import Optional

from demo_mailer.core.config import settings
from demo_mailer.services.demo_request import DemoRequestService
from demo_mailer.services.mail_transport import SmtpConfig, SmtpMailTransport
from demo_mailer.services.templates import Branding


@lru_cache(maxsize=1)
def get_smtp_config() -> Optional[SmtpConfig]:
    """SMTP relay settings, resolved once per process."""
    return SmtpConfig.from_settings(settings)


@lru_cache(maxsize=1)
def get_demo_request_service() -> DemoRequestService:
    return DemoRequestService(
        smtp_config=get_smtp_config(),
        transport_factory=SmtpMailTransport,
        verify_connection=settings.smtp_verify_connection,
        branding=Branding(brand_name=settings.brand_name),
    )
