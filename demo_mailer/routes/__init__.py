# demo_mailer/routes/__init__.py
"""
API route handlers organized by domain.
"""

from demo_mailer.routes.demo import router as demo_router
from demo_mailer.routes.health import router as health_router

__all__ = [
    "demo_router",
    "health_router",
]
