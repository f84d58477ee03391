# demo_mailer/services/demo_request.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Union

from demo_mailer.core.exceptions import ConfigurationError, TransportError, ValidationError
from demo_mailer.core.logging import get_structlog_logger
from demo_mailer.schemas.demo_request import DemoRequestIn
from demo_mailer.services.mail_transport import SmtpConfig, TransportFactory
from demo_mailer.services.templates import (
    Branding,
    build_support_envelope,
    build_user_envelope,
)

logger = get_structlog_logger(__name__)

DemoRequestInput = Union[DemoRequestIn, Mapping[str, Any], None]


@dataclass(frozen=True)
class DemoRequestAck:
    support_id: Optional[str]
    user_id: Optional[str]


class DemoRequestService:
    """
    Validate a demo request and relay it by email.

    The pipeline is linear and stops at the first error:
    validate -> config -> transport -> (verify) -> send support -> send user.
    The user confirmation is only sent once the support notification went out.
    """

    def __init__(
        self,
        smtp_config: Optional[SmtpConfig],
        transport_factory: TransportFactory,
        *,
        verify_connection: bool = False,
        branding: Branding = Branding(),
    ) -> None:
        self.smtp_config = smtp_config
        self.transport_factory = transport_factory
        self.verify_connection = verify_connection
        self.branding = branding

    @staticmethod
    def parse_input(payload: DemoRequestInput) -> DemoRequestIn:
        if isinstance(payload, DemoRequestIn):
            return payload
        return DemoRequestIn.model_validate(dict(payload or {}))

    async def submit_demo_request(self, payload: DemoRequestInput) -> DemoRequestAck:
        form = self.parse_input(payload)

        # 1) Required fields
        missing = form.missing_fields()
        if missing:
            logger.warning("demo_request.missing_fields", missing_fields=missing)
            raise ValidationError(
                f"Missing fields: {', '.join(missing)}",
                code="missing_fields",
                details={"missing_fields": missing},
            )

        # 2) SMTP configuration
        config = self.smtp_config
        if config is None:
            logger.error("demo_request.smtp_config_missing")
            raise ConfigurationError(code="smtp_config_missing")

        # 3) Transport
        params = config.connection_params()
        logger.info("smtp.transport_created", **params.log_context())
        transport = self.transport_factory(params)

        if self.verify_connection:
            await transport.verify()

        data = form.to_domain()
        log = logger.bind(company=data.company_name, **params.log_context())

        try:
            log.info("demo_request.sending_support_email")
            support = await transport.send_message(
                build_support_envelope(
                    data,
                    sender_address=config.username,
                    support_inbox=config.support_inbox,
                    branding=self.branding,
                )
            )
            log.info("demo_request.support_email_sent", message_id=support.id)

            log.info("demo_request.sending_user_email")
            user = await transport.send_message(
                build_user_envelope(
                    data,
                    sender_address=config.username,
                    support_inbox=config.support_inbox,
                    branding=self.branding,
                )
            )
            log.info("demo_request.user_email_sent", message_id=user.id)
        except TransportError as e:
            log.error("demo_request.send_failed", code=e.code, error=e.message)
            raise

        return DemoRequestAck(support_id=support.id, user_id=user.id)
