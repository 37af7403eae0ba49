"""
Pydantic схемы справочников.
"""

from pydantic import BaseModel, ConfigDict
from typing import Optional


class Genre(BaseModel):
    """
    Жанр. Клиент может передать только id, название подставляется из справочника.
    """
    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: int
    name: Optional[str] = None


class Mpa(BaseModel):
    """
    Рейтинг MPA. Клиент может передать только id.
    """
    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: int
    name: Optional[str] = None
