from pydantic import BaseModel, Field
from typing import List, Optional, Any, Dict
from datetime import datetime


class ErrorResponse(BaseModel):
    """
    Стандартная схема для ошибок.

    Attributes:
        detail: Сообщение об ошибке
        code: Код ошибки (опционально)
        errors: Детали ошибок валидации (опционально)
        timestamp: Время возникновения ошибки
    """
    detail: str
    code: Optional[str] = None
    errors: Optional[List[Dict[str, Any]]] = None
    timestamp: datetime = Field(default_factory=datetime.utcnow)


class HealthCheck(BaseModel):
    """
    Схема для health check endpoint.

    Attributes:
        status: Статус сервиса
        service: Название сервиса
        version: Версия сервиса
        timestamp: Время проверки
        dependencies: Статус зависимостей
    """
    status: str
    service: str
    version: str = "1.0.0"
    timestamp: datetime = Field(default_factory=datetime.utcnow)
    dependencies: Optional[Dict[str, Any]] = None
