#!/usr/bin/env python3
"""Startup script for the Mealwise Backend Service"""

import sys
import logging
import uvicorn

from core.config import settings

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def start_server():
    """Start the FastAPI server with settings-driven host, port and reload"""

    logger.info(f"Starting {settings.APP_NAME} Backend Service")
    logger.info(f"Host: {settings.HOST}")
    logger.info(f"Port: {settings.PORT}")
    logger.info(f"Environment: {settings.ENVIRONMENT}")

    try:
        if settings.is_development:
            # Reload needs an import string rather than an app object
            uvicorn.run(
                "main:app",
                host=settings.HOST,
                port=settings.PORT,
                reload=True,
                log_level=settings.LOG_LEVEL.lower(),
            )
            return

        # Import the app here to catch any import errors
        from main import app
        logger.info("Successfully imported FastAPI app")

        config = uvicorn.Config(
            app=app,
            host=settings.HOST,
            port=settings.PORT,
            log_level=settings.LOG_LEVEL.lower(),
            access_log=True,
            use_colors=False,
            server_header=False,  # Don't expose server info
            limit_concurrency=1000,
            timeout_keep_alive=5,
            loop="auto"
        )

        server = uvicorn.Server(config)
        logger.info(f"Server configured, starting on {settings.HOST}:{settings.PORT}")
        server.run()

    except ImportError as e:
        logger.error(f"Failed to import app: {e}")
        logger.error("Make sure main.py exists and has 'app' variable")
        sys.exit(1)
    except Exception as e:
        logger.exception(f"Failed to start server: {e}")
        sys.exit(1)


if __name__ == "__main__":
    start_server()
