# demo_mailer/routes/health.py
from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse, PlainTextResponse

from demo_mailer.core.config import settings
from demo_mailer.dependencies import get_smtp_config
from demo_mailer.services.mail_transport import SmtpConfig

router = APIRouter(tags=["health"])


def _now() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


@router.get("/", response_class=PlainTextResponse)
async def root():
    """Plain-text liveness message."""
    return f"{settings.brand_name} SMTP email service is running ✅"


@router.get("/health/live", status_code=status.HTTP_200_OK)
async def liveness_probe():
    """Simple liveness probe for Kubernetes/containers."""
    return {
        "status": "alive",
        "timestamp": _now(),
    }


@router.get("/health/ready")
async def readiness_probe(smtp_config: Optional[SmtpConfig] = Depends(get_smtp_config)):
    """Ready once the SMTP relay is fully configured. Does not contact the relay."""
    checks = {"smtp_config": "configured" if smtp_config is not None else "missing"}
    if smtp_config is not None:
        checks["smtp_security"] = (
            "implicit_tls" if smtp_config.secure
            else "starttls" if smtp_config.require_tls
            else "opportunistic"
        )

    is_ready = smtp_config is not None
    return JSONResponse(
        status_code=status.HTTP_200_OK if is_ready else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "status": "ready" if is_ready else "not_ready",
            "timestamp": _now(),
            "checks": checks,
        },
    )
