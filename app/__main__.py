"""Serve the API: python -m app"""

import uvicorn

from src.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "app.main:app",
        host=settings.app.app_host,
        port=settings.app.app_port,
        log_level=settings.app.log_level.lower(),
    )


if __name__ == "__main__":
    main()
