# demo_mailer/routes/demo.py
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Body, Depends, status

from demo_mailer.core.logging import get_structlog_logger
from demo_mailer.dependencies import get_demo_request_service
from demo_mailer.schemas.demo_request import (
    DemoRequestIn,
    ErrorResponse,
    MessageRef,
    SendEmailResponse,
)
from demo_mailer.services.demo_request import DemoRequestService

router = APIRouter()


@router.post(
    "/send-email",
    response_model=SendEmailResponse,
    status_code=status.HTTP_200_OK,
    summary="Submit a demo request",
    responses={
        400: {"model": ErrorResponse, "description": "Required fields are missing"},
        500: {"model": ErrorResponse, "description": "SMTP misconfigured or delivery failed"},
    },
)
async def send_email(
    demo_request: Optional[DemoRequestIn] = Body(default=None),
    service: DemoRequestService = Depends(get_demo_request_service),
) -> SendEmailResponse:
    logger = get_structlog_logger().bind(route="/send-email", action="submit_demo_request")
    logger.info("demo_request.received")

    # Domain errors propagate to the BaseAPIException handler
    ack = await service.submit_demo_request(demo_request)

    return SendEmailResponse(
        support=MessageRef(id=ack.support_id),
        user=MessageRef(id=ack.user_id),
    )
