"""
MoodMusic Main Application

Entry point that serves the FastAPI backend with uvicorn, configured from
the environment (and an optional .env file).
"""

import uvicorn
import structlog

from .models.config_models import SystemConfig

logger = structlog.get_logger(__name__)


def main():
    """Main entry point for the application."""
    config = SystemConfig.from_env()

    logger.info(
        "Starting MoodMusic backend",
        host=config.backend_host,
        port=config.backend_port,
        music_service=config.music_service
    )

    try:
        uvicorn.run(
            "moodmusic.api.backend:app",
            host=config.backend_host,
            port=config.backend_port,
            log_level=config.log_level.lower()
        )
    except KeyboardInterrupt:
        logger.info("Application stopped by user")


if __name__ == "__main__":
    main()
