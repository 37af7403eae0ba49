"""
Метрики Prometheus для мониторинга сервиса.
"""

from prometheus_client import Counter, Histogram, Gauge, generate_latest
from prometheus_client.exposition import CONTENT_TYPE_LATEST
from prometheus_client.registry import REGISTRY
from fastapi import FastAPI, Request, Response
from contextlib import contextmanager
from typing import Callable, Iterator
import time
import logging

logger = logging.getLogger(__name__)

# ====== HTTP метрики ======

# Общее количество HTTP запросов
HTTP_REQUESTS_TOTAL = Counter(
    'http_requests_total',
    'Total number of HTTP requests',
    ['method', 'endpoint', 'status']
)

# Время выполнения HTTP запросов
HTTP_REQUEST_DURATION = Histogram(
    'http_request_duration_seconds',
    'HTTP request duration in seconds',
    ['method', 'endpoint'],
    buckets=(0.01, 0.05, 0.1, 0.5, 1.0, 5.0, 10.0)
)

# Активные HTTP запросы
HTTP_REQUESTS_IN_PROGRESS = Gauge(
    'http_requests_in_progress',
    'Current number of HTTP requests in progress',
    ['method']
)

# ====== Бизнес метрики ======

# Лайки фильмов
FILM_LIKES_TOTAL = Counter(
    'film_likes_total',
    'Total number of like operations',
    ['action']
)

# Изменения дружбы
FRIENDSHIP_CHANGES_TOTAL = Counter(
    'friendship_changes_total',
    'Total number of friendship edge operations',
    ['action']
)

# ====== БД метрики ======

# Запросы к базе данных
DATABASE_QUERIES_TOTAL = Counter(
    'database_queries_total',
    'Total number of database queries',
    ['query_type', 'table']
)

# Время выполнения запросов
DATABASE_QUERY_DURATION = Histogram(
    'database_query_duration_seconds',
    'Database query duration in seconds',
    ['query_type', 'table'],
    buckets=(0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0)
)

# Ошибки базы данных
DATABASE_ERRORS_TOTAL = Counter(
    'database_errors_total',
    'Total number of database errors',
    ['query_type', 'table']
)


def _endpoint_label(request: Request) -> str:
    """Шаблон маршрута вместо сырого пути, чтобы id не раздували метки."""
    route = request.scope.get("route")
    return getattr(route, "path", request.url.path)


def setup_metrics(app: FastAPI):
    """
    Настройка метрик для FastAPI приложения.

    Args:
        app: FastAPI приложение
    """

    @app.middleware("http")
    async def metrics_middleware(request: Request, call_next: Callable):
        """
        Middleware для сбора метрик HTTP запросов.
        """
        HTTP_REQUESTS_IN_PROGRESS.labels(method=request.method).inc()
        start_time = time.time()

        try:
            response = await call_next(request)
            duration = time.time() - start_time
            endpoint = _endpoint_label(request)

            HTTP_REQUESTS_TOTAL.labels(
                method=request.method,
                endpoint=endpoint,
                status=response.status_code
            ).inc()

            HTTP_REQUEST_DURATION.labels(
                method=request.method,
                endpoint=endpoint
            ).observe(duration)

            logger.debug(
                f"Request metrics: {request.method} {endpoint} "
                f"status={response.status_code} duration={duration:.3f}s"
            )

            return response

        except Exception as e:
            duration = time.time() - start_time
            endpoint = _endpoint_label(request)

            HTTP_REQUESTS_TOTAL.labels(
                method=request.method,
                endpoint=endpoint,
                status=500
            ).inc()

            HTTP_REQUEST_DURATION.labels(
                method=request.method,
                endpoint=endpoint
            ).observe(duration)

            logger.error(
                f"Request failed: {request.method} {endpoint} "
                f"duration={duration:.3f}s error={str(e)}"
            )

            raise

        finally:
            HTTP_REQUESTS_IN_PROGRESS.labels(method=request.method).dec()

    @app.get("/metrics", include_in_schema=False)
    def metrics_endpoint():
        """
        Endpoint для получения метрик в формате Prometheus.
        """
        return Response(
            content=generate_latest(REGISTRY),
            media_type=CONTENT_TYPE_LATEST
        )


def record_database_query(
    query_type: str,
    table: str,
    duration: float,
    success: bool = True
):
    """
    Запись запроса к базе данных.

    Args:
        query_type: Тип запроса
        table: Таблица
        duration: Время выполнения
        success: Успешность запроса
    """
    DATABASE_QUERIES_TOTAL.labels(
        query_type=query_type,
        table=table
    ).inc()

    DATABASE_QUERY_DURATION.labels(
        query_type=query_type,
        table=table
    ).observe(duration)

    if not success:
        DATABASE_ERRORS_TOTAL.labels(
            query_type=query_type,
            table=table
        ).inc()


@contextmanager
def track_query(query_type: str, table: str) -> Iterator[None]:
    """
    Замер запроса к хранилищу.

    Args:
        query_type: Тип запроса (select, insert, update, delete)
        table: Таблица
    """
    start_time = time.time()
    success = False
    try:
        yield
        success = True
    finally:
        record_database_query(query_type, table, time.time() - start_time, success)


def record_like(action: str):
    """
    Запись операции с лайком.

    Args:
        action: add или remove
    """
    FILM_LIKES_TOTAL.labels(action=action).inc()


def record_friendship(action: str):
    """
    Запись операции с дружбой.

    Args:
        action: add или remove
    """
    FRIENDSHIP_CHANGES_TOTAL.labels(action=action).inc()
