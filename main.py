"""Test platform entrypoint.

- Loads `.env` before settings are read
- Configures JSON logging
- Serves the FastAPI app with uvicorn on the configured port
"""
from __future__ import annotations

import uvicorn
from dotenv import load_dotenv

load_dotenv(".env")

from packages.common.config import get_settings  # noqa: E402
from packages.common.logging import configure_logging  # noqa: E402
from services.app import create_app  # noqa: E402

settings = get_settings()
logger = configure_logging(settings.LOG_LEVEL, settings.SERVICE_NAME, settings.ENV)

# ===== App (ASGI) =====
app = create_app(settings)


def main() -> None:
    """Run the API server until interrupted."""
    if not settings.TELEGRAM_BOT_TOKEN:
        logger.warning("TELEGRAM_BOT_TOKEN not provided; verification codes are returned in responses")
    logger.info(f"Starting {settings.SERVICE_NAME} on port {settings.PORT} (data: {settings.DATA_DIR})")
    uvicorn.run(app, host="0.0.0.0", port=settings.PORT, log_config=None)


if __name__ == "__main__":
    main()
