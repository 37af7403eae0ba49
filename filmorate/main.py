"""
Запуск HTTP сервера Filmorate.
"""

import argparse
import logging

import uvicorn
from dotenv import load_dotenv

# Переменные окружения нужны до импорта настроек
load_dotenv()

logger = logging.getLogger(__name__)


def run(host: str, port: int, reload: bool = False):
    """Запуск приложения под uvicorn."""
    from filmorate.monitoring.logging_config import setup_logging

    setup_logging("filmorate")

    logger.info(f"Starting Filmorate on {host}:{port}")

    uvicorn.run(
        "filmorate.api.main:app",
        host=host,
        port=port,
        reload=reload,
        log_level="info",
        access_log=False
    )


def main():
    from filmorate.config.settings import settings

    parser = argparse.ArgumentParser(description="Filmorate service")
    parser.add_argument("--host", default=settings.APP_HOST, help="Host to bind")
    parser.add_argument("--port", type=int, default=settings.APP_PORT, help="Port to bind")
    parser.add_argument("--reload", action="store_true", help="Enable auto-reload")
    args = parser.parse_args()

    run(args.host, args.port, args.reload)


if __name__ == "__main__":
    main()
