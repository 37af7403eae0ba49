"""
Конфигурация логирования сервиса.
Используется стандартный Python logging с ротацией файлов.
"""

import logging
import sys
import json
from logging.handlers import RotatingFileHandler, TimedRotatingFileHandler
from datetime import datetime
from typing import Dict, Any
import os

from filmorate.config.settings import settings

# Поля LogRecord, которые не считаются пользовательским контекстом
_RESERVED_ATTRS = set(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime"}


def _extra_fields(record: logging.LogRecord) -> Dict[str, Any]:
    """Поля, переданные через extra=..."""
    return {
        key: value for key, value in vars(record).items()
        if key not in _RESERVED_ATTRS
    }


class JSONFormatter(logging.Formatter):
    """Форматтер для вывода логов в JSON формате."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.utcnow().isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "process_id": record.process,
            "thread_id": record.thread,
        }

        log_data.update(_extra_fields(record))

        if record.exc_info:
            log_data["exception"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
                "traceback": self.formatException(record.exc_info)
            }

        return json.dumps(log_data, ensure_ascii=False, default=str)


class StructuredFormatter(logging.Formatter):
    """Структурированный форматтер для читаемого вывода."""

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created).strftime('%Y-%m-%d %H:%M:%S,%f')[:-3]

        log_line = f"{timestamp} - {record.name} - {record.levelname} - {record.getMessage()}"

        extra_info = []
        if hasattr(record, 'request_id'):
            extra_info.append(f"req_id={record.request_id}")
        if hasattr(record, 'resource_id'):
            extra_info.append(f"resource_id={record.resource_id}")
        if hasattr(record, 'duration'):
            extra_info.append(f"duration={record.duration:.3f}s")

        if extra_info:
            log_line += f" [{' '.join(extra_info)}]"

        if record.exc_info:
            log_line += f"\n{self.formatException(record.exc_info)}"

        return log_line


class AuditFilter(logging.Filter):
    """Пропускает только записи аудита."""

    def filter(self, record):
        return getattr(record, 'audit', False)


def setup_logging(service_name: str = None, log_to_file: bool = True):
    """
    Настройка логирования для сервиса.

    Args:
        service_name: Название сервиса (для именования файлов)
        log_to_file: Писать ли логи в файлы помимо консоли
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(StructuredFormatter())
    console_handler.setLevel(logging.INFO)
    root_logger.addHandler(console_handler)

    if log_to_file:
        log_dir = settings.LOG_DIR
        os.makedirs(log_dir, exist_ok=True)
        prefix = service_name or "application"
        json_formatter = JSONFormatter()

        # Все логи (JSON)
        file_handler = RotatingFileHandler(
            filename=f"{log_dir}/{prefix}.log",
            maxBytes=10 * 1024 * 1024,  # 10MB
            backupCount=10,
            encoding='utf-8'
        )
        file_handler.setFormatter(json_formatter)
        file_handler.setLevel(logging.DEBUG)

        # Ошибки (отдельный файл)
        error_handler = RotatingFileHandler(
            filename=f"{log_dir}/{prefix}.error.log",
            maxBytes=10 * 1024 * 1024,
            backupCount=10,
            encoding='utf-8'
        )
        error_handler.setFormatter(json_formatter)
        error_handler.setLevel(logging.ERROR)

        # Аудит (действия над фильмами и пользователями)
        audit_handler = TimedRotatingFileHandler(
            filename=f"{log_dir}/{prefix}.audit.log",
            when='midnight',
            interval=1,
            backupCount=30,
            encoding='utf-8'
        )
        audit_handler.setFormatter(json_formatter)
        audit_handler.setLevel(logging.INFO)
        audit_handler.addFilter(AuditFilter())

        root_logger.addHandler(file_handler)
        root_logger.addHandler(error_handler)
        root_logger.addHandler(audit_handler)

    # Уровни для сторонних библиотек
    logging.getLogger("uvicorn").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.error").setLevel(logging.INFO)
    logging.getLogger("sqlalchemy").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

    logger = logging.getLogger(__name__)
    logger.info(
        "Logging configured",
        extra={
            "environment": settings.ENVIRONMENT,
            "log_level": settings.LOG_LEVEL,
            "service": service_name or "unknown"
        }
    )


def get_logger(name: str) -> logging.Logger:
    """
    Получение логгера с указанным именем.

    Args:
        name: Имя логгера

    Returns:
        Настроенный логгер
    """
    return logging.getLogger(name)


class RequestLogger:
    """Класс для логирования запросов с контекстом."""

    def __init__(self, logger_name: str = "request"):
        self.logger = get_logger(logger_name)

    def log_request(self, request_id: str, method: str, path: str, client: str = None):
        """Логирование входящего запроса."""
        self.logger.info(
            f"Request started: {method} {path}",
            extra={
                "request_id": request_id,
                "method": method,
                "path": path,
                "client": client,
                "event": "request_started"
            }
        )

    def log_response(
        self,
        request_id: str,
        method: str,
        path: str,
        status_code: int,
        duration: float
    ):
        """Логирование ответа на запрос."""
        self.logger.info(
            f"Request completed: {method} {path} {status_code} ({duration:.3f}s)",
            extra={
                "request_id": request_id,
                "method": method,
                "path": path,
                "status_code": status_code,
                "duration": duration,
                "event": "request_completed"
            }
        )

    def log_error(
        self,
        request_id: str,
        method: str,
        path: str,
        error: Exception,
        status_code: int = 500
    ):
        """Логирование ошибки при обработке запроса."""
        self.logger.error(
            f"Request failed: {method} {path} {status_code} - {str(error)}",
            extra={
                "request_id": request_id,
                "method": method,
                "path": path,
                "status_code": status_code,
                "error_type": type(error).__name__,
                "error_message": str(error),
                "event": "request_failed"
            },
            exc_info=True
        )

    def log_audit(
        self,
        action: str,
        resource_type: str = None,
        resource_id: Any = None,
        details: Dict[str, Any] = None
    ):
        """Логирование аудиторских событий."""
        self.logger.info(
            f"Audit: {action} {resource_type} {resource_id}",
            extra={
                "audit": True,
                "action": action,
                "resource_type": resource_type,
                "resource_id": resource_id,
                "details": details or {},
                "event": "audit_event"
            }
        )


# Глобальный инстанс для логирования запросов
request_logger = RequestLogger()
