"""
FastAPI приложение Filmorate.
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime

from fastapi import FastAPI, Depends, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from starlette.exceptions import HTTPException as StarletteHTTPException

from filmorate import __version__
from filmorate.config.database import get_db, init_db
from filmorate.config.settings import settings
from filmorate.monitoring.metrics import setup_metrics
from filmorate.services.catalog_service.routes import router as catalog_router
from filmorate.services.film_service.routes import router as film_router
from filmorate.services.user_service.routes import router as user_router
from filmorate.shared.exceptions import ServiceException
from filmorate.shared.schemas import ErrorResponse, HealthCheck
from .middleware import LoggingMiddleware

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Создание таблиц и справочников при запуске."""
    logger.info(f"Starting Filmorate ({settings.ENVIRONMENT}), storage: {settings.STORAGE_BACKEND}")
    if settings.STORAGE_BACKEND == "db":
        init_db()
    yield
    logger.info("Filmorate stopped")


def create_app() -> FastAPI:
    app = FastAPI(
        title="Filmorate",
        description="Фильмы, пользователи, лайки и дружба",
        version=__version__,
        lifespan=lifespan
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(LoggingMiddleware)

    setup_metrics(app)

    app.include_router(film_router)
    app.include_router(user_router)
    app.include_router(catalog_router)

    # ====== Exception handlers ======

    @app.exception_handler(ServiceException)
    async def service_exception_handler(request: Request, exc: ServiceException):
        """Обработчик исключений сервиса."""
        if exc.status_code >= 500:
            logger.error(f"Service exception: {exc.message}", extra={"code": exc.code})
        else:
            logger.warning(f"Service exception: {exc.message}", extra={"code": exc.code})

        return JSONResponse(
            status_code=exc.status_code,
            content=jsonable_encoder(ErrorResponse(
                detail=exc.message,
                code=exc.code,
                errors=exc.details.get("errors")
            ))
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Ошибки валидации тела и параметров запроса."""
        errors = jsonable_encoder(exc.errors(), custom_encoder={Exception: str})
        logger.warning(f"Validation error: {errors}")

        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=jsonable_encoder(ErrorResponse(
                detail="Validation error",
                code="VALIDATION_ERROR",
                errors=errors
            ))
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        logger.warning(f"HTTP exception: {exc.detail}")

        return JSONResponse(
            status_code=exc.status_code,
            content=jsonable_encoder(ErrorResponse(detail=str(exc.detail)))
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Обработчик непредвиденных исключений."""
        logger.exception(f"Unexpected error: {str(exc)}")

        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=jsonable_encoder(ErrorResponse(
                detail="Internal server error",
                code="INTERNAL_ERROR"
            ))
        )

    # ====== Health check ======

    @app.get("/", include_in_schema=False)
    def root():
        return {
            "message": "Filmorate",
            "version": __version__,
            "timestamp": datetime.utcnow().isoformat()
        }

    @app.get("/health", response_model=HealthCheck)
    def health_check(db: Session = Depends(get_db)):
        """
        Health check endpoint.
        Проверяет подключение к базе данных, если она используется.
        """
        dependencies_status = {"storage": settings.STORAGE_BACKEND}

        if settings.STORAGE_BACKEND == "db":
            try:
                db.execute(text("SELECT 1"))
                dependencies_status["database"] = "healthy"
            except SQLAlchemyError as e:
                logger.error(f"Database health check failed: {e}")
                dependencies_status["database"] = "unhealthy"

        return HealthCheck(
            status="degraded" if dependencies_status.get("database") == "unhealthy" else "healthy",
            service="filmorate",
            version=__version__,
            dependencies=dependencies_status
        )

    return app


app = create_app()
