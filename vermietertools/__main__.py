# vermietertools/__main__.py
"""Run the API with uvicorn: python -m vermietertools"""

import logging
import os

import uvicorn

from vermietertools.core.logging_config import setup_logging

logger = logging.getLogger(__name__)


def main() -> None:
    setup_logging()

    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "8000"))

    logger.info(f"🚀 Starting server on {host}:{port}...")
    logger.info("  - POST /api/auth/login - Anmelden")
    logger.info("  - POST /api/auth/register - Registrieren")
    logger.info("  - POST /api/auth/logout - Abmelden")
    logger.info("  - GET /api/auth/me - Angemeldeter Benutzer")
    logger.info("  - GET /health/ready - Readiness")

    uvicorn.run(
        "vermietertools.main:create_app",
        factory=True,
        host=host,
        port=port,
        log_level=os.getenv("LOG_LEVEL", "info").lower(),
    )


if __name__ == "__main__":
    main()
