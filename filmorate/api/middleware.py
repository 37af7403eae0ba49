import time
import uuid
from typing import Callable

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from filmorate.monitoring.logging_config import request_logger


class LoggingMiddleware(BaseHTTPMiddleware):
    """
    Middleware для логирования входящих запросов и исходящих ответов.
    Каждому запросу присваивается X-Request-ID.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("x-request-id") or uuid.uuid4().hex
        start_time = time.time()

        request_logger.log_request(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
            client=request.client.host if request.client else None
        )

        try:
            response = await call_next(request)
        except Exception as e:
            request_logger.log_error(request_id, request.method, request.url.path, e)
            raise

        process_time = time.time() - start_time
        response.headers["X-Request-ID"] = request_id
        response.headers["X-Process-Time"] = f"{process_time:.3f}"

        request_logger.log_response(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration=process_time
        )
        return response
