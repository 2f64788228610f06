"""Module executed when running ``python -m encora_plex``."""

from __future__ import annotations

import logging
import sys

import uvicorn

from app.config import settings

logger = logging.getLogger(__name__)


def main() -> None:
    """Validate credentials, then start the uvicorn server."""

    logging.basicConfig(level=settings.log_level)

    try:
        settings.require_credentials()
    except RuntimeError as exc:
        logger.error("Configuration error: %s", exc)
        sys.exit(1)

    uvicorn.run(
        "app.main:app",
        host=settings.server_host,
        port=settings.server_port,
        reload=settings.environment == "development",
    )


if __name__ == "__main__":  # pragma: no cover - runtime entrypoint
    main()
