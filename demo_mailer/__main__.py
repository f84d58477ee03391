# demo_mailer/__main__.py
import uvicorn

from demo_mailer.core.config import settings


def main() -> None:
    uvicorn.run(
        "demo_mailer.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.is_development and settings.debug,
        log_config=None,
    )


if __name__ == "__main__":
    main()
