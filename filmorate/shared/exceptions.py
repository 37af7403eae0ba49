"""
Исключения сервиса Filmorate.
Все исключения наследуются от ServiceException.
"""

from typing import Optional, Dict, Any, List
from fastapi import status


class ServiceException(Exception):
    """
    Базовое исключение сервиса.

    Attributes:
        message: Сообщение об ошибке
        code: Уникальный код ошибки
        status_code: HTTP статус код
        details: Дополнительные детали ошибки
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code or "INTERNAL_ERROR"
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Преобразование исключения в словарь."""
        return {
            "detail": self.message,
            "code": self.code,
            "status_code": self.status_code,
            **self.details
        }


class ValidationError(ServiceException):
    """Данные клиента нарушают бизнес-правило."""

    def __init__(
        self,
        message: str,
        errors: Optional[List[Dict[str, Any]]] = None,
        code: str = "VALIDATION_ERROR"
    ):
        details = {"errors": errors or []}
        super().__init__(message, code, status.HTTP_400_BAD_REQUEST, details)


class NotFoundError(ServiceException):
    """Сущность, связь или запись справочника не найдена."""

    def __init__(
        self,
        resource: str,
        resource_id: Optional[Any] = None,
        code: str = "NOT_FOUND"
    ):
        message = f"{resource} not found"
        if resource_id is not None:
            message = f"{resource} with id {resource_id} not found"

        details = {"resource": resource, "resource_id": resource_id}
        super().__init__(message, code, status.HTTP_404_NOT_FOUND, details)


class DatabaseError(ServiceException):
    """Ошибка хранилища (соединение, нарушение ограничений и т.п.)."""

    def __init__(
        self,
        message: str = "Database error",
        code: str = "DATABASE_ERROR"
    ):
        super().__init__(message, code, status.HTTP_500_INTERNAL_SERVER_ERROR)
