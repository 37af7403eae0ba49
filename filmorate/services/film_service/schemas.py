"""
Pydantic схемы фильмов.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional, List, Set
from datetime import date

from filmorate.config.settings import settings
from filmorate.services.catalog_service.schemas import Genre, Mpa


class Film(BaseModel):
    """
    Фильм вместе с жанрами и лайками.

    Attributes:
        id: ID (назначается хранилищем при создании)
        name: Название
        description: Описание
        release_date: Дата выхода (в JSON releaseDate)
        duration: Длительность в минутах
        mpa: Рейтинг MPA, обязателен для записи
        genres: Жанры, по возрастанию id
        likes: ID пользователей, поставивших лайк
    """
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: Optional[int] = None
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    release_date: Optional[date] = Field(None, alias="releaseDate")
    duration: int = Field(..., gt=0)
    mpa: Optional[Mpa] = None
    genres: List[Genre] = Field(default_factory=list)
    likes: Set[int] = Field(default_factory=set)

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        """Название не может состоять из пробелов."""
        if not v.strip():
            raise ValueError('Name must not be blank')
        return v

    @field_validator('description')
    @classmethod
    def validate_description(cls, v):
        if v and len(v) > settings.FILM_DESCRIPTION_MAX_LENGTH:
            raise ValueError(
                f'Description must not exceed {settings.FILM_DESCRIPTION_MAX_LENGTH} characters'
            )
        return v

    @field_validator('release_date')
    @classmethod
    def validate_release_date(cls, v):
        """Дата выхода не раньше первого киносеанса."""
        if v and v < settings.FILM_RELEASE_DATE_MIN:
            raise ValueError(
                f'Release date cannot be earlier than {settings.FILM_RELEASE_DATE_MIN.isoformat()}'
            )
        return v
