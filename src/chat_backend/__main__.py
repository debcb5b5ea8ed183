"""Entrypoint: python -m chat_backend"""
from __future__ import annotations

import uvicorn

from chat_backend.config import settings
from chat_backend.logging_setup import configure_logging


def main() -> None:
    configure_logging(settings.LOG_LEVEL)
    uvicorn.run(
        "chat_backend.app:create_app",
        factory=True,
        host=settings.HOST,
        port=settings.PORT,
        log_config=None,
    )


if __name__ == "__main__":
    main()
