from demo_mailer.middleware.logging import LoggingMiddleware
from demo_mailer.middleware.request_id import RequestIdMiddleware

__all__ = ["LoggingMiddleware", "RequestIdMiddleware"]
